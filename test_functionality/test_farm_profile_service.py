"""
FarmProfileService against a temporary SQLite database.
"""
import pytest

from application.dto import FarmUpdateRequest
from domain.exceptions import (
    ConcurrentModificationError,
    InvalidOperationError,
    NotFoundOrUnauthorizedError,
)
from domain.farm import PRODUCTION_FIELDS, ArrayUpdate, FarmType, ProductionScale, field_for
from infrastructure.persistence.connection import AsyncSQLiteConnection
from infrastructure.persistence.farm_repo import SQLiteFarmProfileRepository


@pytest.mark.asyncio
async def test_create_and_read_back(factory, alice, make_farm):
    service = factory.create_farm_profile_service()

    created = await service.create_farm(alice, make_farm(items=["maize"]))

    assert created.id
    assert created.user_id == "alice"
    assert created.version == 1
    loaded = await service.get_farm(alice, created.id)
    assert loaded.farm_type is FarmType.CROP_FARMING
    assert loaded.production.items == ("maize",)
    assert loaded.farm_location.region == "Ashanti Region"


@pytest.mark.asyncio
async def test_crop_to_poultry_update_is_persisted(factory, alice, make_farm):
    service = factory.create_farm_profile_service()
    farm = await service.create_farm(alice, make_farm(items=["maize"]))

    await service.update_farm(alice, farm.id, FarmUpdateRequest(
        farm_type=FarmType.POULTRY,
        array_updates=[ArrayUpdate("poultryType", "add", value="broiler")],
    ))

    stored = await service.get_farm(alice, farm.id)
    lists = stored.production_lists()
    assert stored.farm_type is FarmType.POULTRY
    assert lists["poultryType"] == ["broiler"]
    assert all(v == [] for k, v in lists.items() if k != "poultryType")
    assert stored.version == 2


@pytest.mark.asyncio
async def test_rejected_update_leaves_stored_profile_unchanged(factory, alice, make_farm):
    service = factory.create_farm_profile_service()
    farm = await service.create_farm(alice, make_farm(items=["maize"]))

    with pytest.raises(InvalidOperationError, match="Can only update cropsGrown"):
        await service.update_farm(alice, farm.id, FarmUpdateRequest(
            basic_info={"farm_name": "Renamed Farm"},
            array_updates=[ArrayUpdate("livestockProduced", "add", value="goat")],
        ))

    stored = await service.get_farm(alice, farm.id)
    assert stored.farm_name == "Green Acres"
    assert stored.production.items == ("maize",)
    assert stored.version == 1


@pytest.mark.asyncio
async def test_basic_info_patch(factory, alice, make_farm):
    service = factory.create_farm_profile_service()
    farm = await service.create_farm(alice, make_farm(items=["maize"]))

    updated = await service.update_farm(alice, farm.id, FarmUpdateRequest(
        basic_info={"farm_size": 40.0, "production_scale": ProductionScale.COMMERCIAL},
    ))

    assert updated.farm_size == 40.0
    assert updated.production_scale is ProductionScale.COMMERCIAL
    assert updated.production.items == ("maize",)


@pytest.mark.asyncio
async def test_other_users_cannot_see_or_touch_a_farm(factory, alice, bob, make_farm):
    service = factory.create_farm_profile_service()
    farm = await service.create_farm(alice, make_farm())

    with pytest.raises(NotFoundOrUnauthorizedError, match="Farm profile not found or unauthorized"):
        await service.get_farm(bob, farm.id)
    with pytest.raises(NotFoundOrUnauthorizedError):
        await service.update_farm(bob, farm.id, FarmUpdateRequest(basic_info={"farm_size": 1.0}))
    with pytest.raises(NotFoundOrUnauthorizedError):
        await service.delete_farm(bob, farm.id)

    assert (await service.get_farm(alice, farm.id)).farm_size == 12.5


@pytest.mark.asyncio
async def test_delete_then_missing(factory, alice, make_farm):
    service = factory.create_farm_profile_service()
    farm = await service.create_farm(alice, make_farm())

    await service.delete_farm(alice, farm.id)

    with pytest.raises(NotFoundOrUnauthorizedError):
        await service.get_farm(alice, farm.id)
    assert await service.list_my_farms(alice) == []


@pytest.mark.asyncio
async def test_listing_filters(factory, alice, bob, make_farm):
    service = factory.create_farm_profile_service()
    await service.create_farm(alice, make_farm())
    await service.create_farm(alice, make_farm(FarmType.POULTRY, ["layers"]))
    await service.create_farm(bob, make_farm(FarmType.POULTRY, production_scale=ProductionScale.MEDIUM))

    assert len(await service.list_my_farms(alice)) == 2
    poultry = await service.list_farms(farm_type=FarmType.POULTRY)
    assert {f.user_id for f in poultry} == {"alice", "bob"}
    medium = await service.list_farms(
        farm_type=FarmType.POULTRY, production_scale=ProductionScale.MEDIUM,
    )
    assert [f.user_id for f in medium] == ["bob"]
    assert len(await service.list_farms(limit=1)) == 1


@pytest.mark.asyncio
async def test_stale_write_is_rejected(factory, settings, alice, make_farm):
    service = factory.create_farm_profile_service()
    repo = SQLiteFarmProfileRepository(AsyncSQLiteConnection(settings.db_path))
    farm = await service.create_farm(alice, make_farm())

    first = await repo.find_one(farm.id, "alice")
    second = await repo.find_one(farm.id, "alice")
    first.farm_name = "First Writer"
    await repo.update(first)

    second.farm_name = "Second Writer"
    with pytest.raises(ConcurrentModificationError):
        await repo.update(second)

    assert (await repo.find_by_id(farm.id)).farm_name == "First Writer"


def _assert_single_active_list(profile, expected):
    active = field_for(profile.farm_type)
    lists = profile.production_lists()
    assert set(lists) == set(PRODUCTION_FIELDS)
    assert lists[active] == expected
    assert all(items == [] for name, items in lists.items() if name != active)


@pytest.mark.asyncio
async def test_one_active_list_holds_across_a_sequence_of_updates(factory, alice, make_farm):
    service = factory.create_farm_profile_service()
    farm = await service.create_farm(alice, make_farm(items=["maize", "cassava"]))

    steps = [
        (FarmUpdateRequest(farm_type=FarmType.POULTRY), FarmType.POULTRY, []),
        (FarmUpdateRequest(array_updates=[
            ArrayUpdate("poultryType", "remove", index=0),
            ArrayUpdate("poultryType", "update", index=0, value="layers"),
        ]), FarmType.POULTRY, []),
        (FarmUpdateRequest(array_updates=[
            ArrayUpdate("poultryType", "add", value="broiler"),
        ]), FarmType.POULTRY, ["broiler"]),
        (FarmUpdateRequest(farm_type=FarmType.CROP_FARMING), FarmType.CROP_FARMING, []),
        (FarmUpdateRequest(farm_type=FarmType.CROP_FARMING, array_updates=[
            ArrayUpdate("cropsGrown", "add", value="yam"),
            ArrayUpdate("cropsGrown", "update", index=0, value="plantain"),
        ]), FarmType.CROP_FARMING, ["plantain"]),
        (FarmUpdateRequest(farm_type=FarmType.MIXED, array_updates=[
            ArrayUpdate("mixedCropsGrown", "add", value="maize"),
            ArrayUpdate("mixedCropsGrown", "remove", index=3),
        ]), FarmType.MIXED, ["maize"]),
    ]

    for version, (request, farm_type, expected) in enumerate(steps, start=2):
        await service.update_farm(alice, farm.id, request)
        stored = await service.get_farm(alice, farm.id)
        assert stored.farm_type is farm_type
        assert stored.version == version
        _assert_single_active_list(stored, expected)
