"""
StoreProfileService against a temporary SQLite database.
"""
import pytest

from domain.exceptions import (
    ConcurrentModificationError,
    DuplicateProfileError,
    NotFoundOrUnauthorizedError,
)
from domain.store import (
    AddBranch,
    Branch,
    DeleteBranch,
    StoreImage,
    StoreProfile,
    UpdateBranch,
    UpdateImageAvailability,
    UpdateStoreInfo,
)
from infrastructure.persistence.connection import AsyncSQLiteConnection
from infrastructure.persistence.store_repo import SQLiteStoreProfileRepository


def _new_store() -> StoreProfile:
    return StoreProfile(
        store_name="Agro Mart",
        branches=[Branch(branch_name="Main", branch_location="Accra", branch_phone="0241234567")],
        store_images=[StoreImage(id="", url="http://img/1", item_name="Hoe", item_price="20")],
        product_sold=["tools"],
    )


@pytest.mark.asyncio
async def test_create_assigns_ids_and_is_unique_per_user(factory, alice):
    service = factory.create_store_profile_service()

    store = await service.create_store(alice, _new_store())

    assert store.id and store.version == 1
    assert store.branches[0].id
    assert store.store_images[0].id
    with pytest.raises(DuplicateProfileError):
        await service.create_store(alice, _new_store())


@pytest.mark.asyncio
async def test_operations_are_persisted(factory, alice):
    service = factory.create_store_profile_service()
    await service.create_store(alice, _new_store())

    updated = await service.apply_operation(
        alice, AddBranch(Branch(branch_name="North", branch_location="Tamale")),
    )
    assert updated.version == 2

    stored = await service.get_my_store(alice)
    assert [b.branch_name for b in stored.branches] == ["Main", "North"]
    north_id = stored.branches[1].id

    await service.apply_operation(alice, UpdateBranch(north_id, Branch(branch_name="North Hub")))
    await service.apply_operation(alice, UpdateStoreInfo({"description": "Tools and seeds"}))
    image_id = stored.store_images[0].id
    await service.apply_operation(alice, UpdateImageAvailability(image_id, False))

    stored = await service.get_my_store(alice)
    assert stored.branches[1].id == north_id
    assert stored.branches[1].branch_name == "North Hub"
    assert stored.description == "Tools and seeds"
    assert stored.store_images[0].available is False
    assert stored.version == 5


@pytest.mark.asyncio
async def test_unknown_branch_id_changes_nothing(factory, alice):
    service = factory.create_store_profile_service()
    created = await service.create_store(alice, _new_store())

    result = await service.apply_operation(alice, DeleteBranch("missing"))

    assert result.version == created.version
    stored = await service.get_my_store(alice)
    assert len(stored.branches) == 1
    assert stored.version == 1


@pytest.mark.asyncio
async def test_operation_without_store_is_not_found(factory, bob):
    service = factory.create_store_profile_service()

    with pytest.raises(NotFoundOrUnauthorizedError):
        await service.apply_operation(bob, DeleteBranch("x"))


@pytest.mark.asyncio
async def test_public_read_and_delete(factory, alice, bob):
    service = factory.create_store_profile_service()
    await service.create_store(alice, _new_store())

    public = await service.get_store_for_user("alice")
    assert public.store_name == "Agro Mart"
    with pytest.raises(NotFoundOrUnauthorizedError):
        await service.get_store_for_user("bob")
    with pytest.raises(NotFoundOrUnauthorizedError):
        await service.delete_store(bob)

    await service.delete_store(alice)
    with pytest.raises(NotFoundOrUnauthorizedError):
        await service.get_my_store(alice)


@pytest.mark.asyncio
async def test_stale_store_write_is_rejected(factory, settings, alice):
    service = factory.create_store_profile_service()
    repo = SQLiteStoreProfileRepository(AsyncSQLiteConnection(settings.db_path))
    await service.create_store(alice, _new_store())

    first = await repo.find_by_user("alice")
    second = await repo.find_by_user("alice")
    AddBranch(Branch(branch_name="A")).apply(first)
    await repo.update(first)

    AddBranch(Branch(branch_name="B")).apply(second)
    with pytest.raises(ConcurrentModificationError):
        await repo.update(second)

    stored = await repo.find_by_user("alice")
    assert [b.branch_name for b in stored.branches] == ["Main", "A"]
