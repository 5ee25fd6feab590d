"""
Store sub-collection commands applied in memory.
"""
import pytest

from domain.exceptions import InvalidOperationError
from domain.store import (
    AddBranch,
    AddImage,
    Branch,
    DeleteBranch,
    DeleteImage,
    StoreImage,
    StoreProfile,
    UpdateBranch,
    UpdateImage,
    UpdateImageAvailability,
    UpdateStoreInfo,
)


def _store() -> StoreProfile:
    return StoreProfile(
        store_name="Agro Mart",
        branches=[
            Branch(id="b1", branch_name="Main", branch_location="Accra", branch_phone="0241234567"),
            Branch(id="b2", branch_name="North", branch_location="Tamale", branch_phone="0241234568"),
        ],
        store_images=[StoreImage(id="i1", url="http://img/1", item_name="Hoe", item_price="20")],
    )


@pytest.mark.parametrize("given_id", [None, "", "   "])
def test_add_branch_assigns_an_id_when_missing(given_id):
    store = _store()

    changed = AddBranch(Branch(id=given_id, branch_name="Coast")).apply(store)

    assert changed
    added = store.branches[-1]
    assert added.branch_name == "Coast"
    assert added.id and added.id.strip()
    assert added.id not in ("b1", "b2")


def test_add_branch_keeps_a_client_id():
    store = _store()
    AddBranch(Branch(id="client-7", branch_name="Coast")).apply(store)
    assert store.branches[-1].id == "client-7"


def test_add_with_a_taken_id_gets_a_fresh_one():
    store = _store()

    AddBranch(Branch(id="b1", branch_name="Coast")).apply(store)
    AddImage(StoreImage(id="i1", url="http://img/2", item_name="Rake")).apply(store)

    branch_ids = [b.id for b in store.branches]
    assert len(set(branch_ids)) == 3
    assert branch_ids[:2] == ["b1", "b2"]
    image_ids = [i.id for i in store.store_images]
    assert image_ids[0] == "i1" and image_ids[1] != "i1"

    DeleteBranch("b1").apply(store)
    assert [b.branch_name for b in store.branches] == ["North", "Coast"]


def test_assign_missing_ids_replaces_duplicates():
    store = StoreProfile(
        store_name="Agro Mart",
        branches=[Branch(id="x", branch_name="A"), Branch(id="x", branch_name="B"), Branch()],
    )

    store.assign_missing_ids()

    ids = [b.id for b in store.branches]
    assert ids[0] == "x"
    assert len(set(ids)) == 3


def test_update_branch_replaces_and_keeps_target_id():
    store = _store()

    changed = UpdateBranch("b2", Branch(id="other", branch_name="North Hub")).apply(store)

    assert changed
    assert store.branches[1].id == "b2"
    assert store.branches[1].branch_name == "North Hub"
    assert [b.id for b in store.branches] == ["b1", "b2"]


def test_update_branch_with_unknown_id_is_a_no_op():
    store = _store()
    before = list(store.branches)

    assert not UpdateBranch("missing", Branch(branch_name="Ghost")).apply(store)
    assert store.branches == before


def test_delete_branch_and_image():
    store = _store()

    assert DeleteBranch("b1").apply(store)
    assert [b.id for b in store.branches] == ["b2"]
    assert not DeleteBranch("b1").apply(store)

    assert DeleteImage("i1").apply(store)
    assert store.store_images == []


def test_image_commands():
    store = _store()

    AddImage(StoreImage(url="http://img/2", item_name="Rake", item_price="35")).apply(store)
    assert len(store.store_images) == 2

    UpdateImage("i1", StoreImage(url="http://img/1b", item_name="Hoe", item_price="25")).apply(store)
    assert store.store_images[0].id == "i1"
    assert store.store_images[0].item_price == "25"

    assert UpdateImageAvailability("i1", False).apply(store)
    assert store.store_images[0].available is False
    assert not UpdateImageAvailability("nope", False).apply(store)


def test_update_store_info_merges_scalars():
    store = _store()

    UpdateStoreInfo({"store_name": "Agro Mart Ltd", "group_name": "Farmers Union"}).apply(store)

    assert store.store_name == "Agro Mart Ltd"
    assert store.group_name == "Farmers Union"
    assert len(store.branches) == 2


def test_update_store_info_rejects_collections_and_unknown_fields():
    with pytest.raises(InvalidOperationError):
        UpdateStoreInfo({"branches": []})
    with pytest.raises(InvalidOperationError):
        UpdateStoreInfo({"owner": "someone"})
