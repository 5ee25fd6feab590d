"""
Shared fixtures: a throwaway SQLite database per test, an initialized
ServiceFactory on top of it, and a couple of caller contexts.
"""
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

import pytest
import pytest_asyncio

from application.context import RequestContext
from domain.farm import (
    FarmLocation,
    FarmProfile,
    FarmType,
    OwnershipStatus,
    ProductionScale,
    production_for,
)
from factory import ServiceFactory
from infrastructure.config import Settings

JWT_SECRET = "test-secret"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        project_root=tmp_path,
        db_path=str(tmp_path / "marketplace-test.db"),
        jwt_secret=JWT_SECRET,
        client_dir=tmp_path / "client",
    )


@pytest_asyncio.fixture
async def factory(settings) -> ServiceFactory:
    f = ServiceFactory(settings)
    await f.initialize()
    return f


@pytest.fixture
def alice() -> RequestContext:
    return RequestContext(user_id="alice")


@pytest.fixture
def bob() -> RequestContext:
    return RequestContext(user_id="bob")


@pytest.fixture
def make_farm():
    """Builder for a valid FarmProfile; keyword overrides win."""
    def _make(farm_type=FarmType.CROP_FARMING, items=(), **overrides) -> FarmProfile:
        fields = dict(
            farm_name="Green Acres",
            farm_location=FarmLocation(region="Ashanti Region", district="Kumasi Metro"),
            farm_size=12.5,
            production_scale=ProductionScale.SMALL,
            ownership_status=OwnershipStatus.OWNED,
            full_name="Ama Mensah",
            contact_phone="0241234567",
            production=production_for(farm_type, items),
        )
        fields.update(overrides)
        return FarmProfile(**fields)
    return _make
