"""
factory - Composition root for the agricultural marketplace profiles service.

ALL dependency wiring happens here. No other module constructs its own
dependencies. Adapters (REST, CLI) call this factory to get fully
configured services.

Usage:
    from factory import ServiceFactory
    from infrastructure.config import Settings

    config = Settings.from_env()
    factory = ServiceFactory(config)
    await factory.initialize()  # one-time startup

    service = factory.create_farm_profile_service()
    farms = await service.list_my_farms(ctx)
"""

from __future__ import annotations

import logging

from infrastructure.config import Settings
from infrastructure.persistence.connection import AsyncSQLiteConnection
from infrastructure.persistence.migrations import run_migrations
from infrastructure.persistence.farm_repo import SQLiteFarmProfileRepository
from infrastructure.persistence.store_repo import SQLiteStoreProfileRepository
from infrastructure.persistence.wishlist_repo import SQLiteWishlistRepository
from application.services.authentication import AuthenticationService
from application.services.ownership import OwnershipGuard
from application.services.farm_profile import FarmProfileService
from application.services.store_profile import StoreProfileService
from application.services.wishlist import WishlistService

logger = logging.getLogger(__name__)


class ServiceFactory:
    """Composition root that wires all dependencies together.

    Call initialize() once at startup, then create services as needed.
    """

    def __init__(self, config: Settings):
        self._config = config
        self._connection = AsyncSQLiteConnection(config.db_path)
        self._initialized = False

    @property
    def config(self) -> Settings:
        return self._config

    async def initialize(self) -> None:
        """One-time startup: run migrations.

        Must be called before creating services.
        """
        logger.info("Initializing ServiceFactory (db=%s)...", self._config.db_path)
        await run_migrations(self._connection)
        self._initialized = True
        logger.info("ServiceFactory ready")

    # ------------------------------------------------------------------
    # Service creation
    # ------------------------------------------------------------------

    def create_authentication_service(self) -> AuthenticationService:
        return AuthenticationService(
            jwt_secret=self._config.jwt_secret,
            jwt_expiry_hours=self._config.jwt_expiry_hours,
            jwt_algorithm=self._config.jwt_algorithm,
        )

    def create_ownership_guard(self) -> OwnershipGuard:
        return OwnershipGuard(
            auth_service=self.create_authentication_service(),
            farm_repo=SQLiteFarmProfileRepository(self._connection),
            store_repo=SQLiteStoreProfileRepository(self._connection),
        )

    def create_farm_profile_service(self) -> FarmProfileService:
        """Create a FarmProfileService with all dependencies wired."""
        self._ensure_initialized()
        return FarmProfileService(
            farm_repo=SQLiteFarmProfileRepository(self._connection),
            guard=self.create_ownership_guard(),
        )

    def create_store_profile_service(self) -> StoreProfileService:
        """Create a StoreProfileService with all dependencies wired."""
        self._ensure_initialized()
        return StoreProfileService(
            store_repo=SQLiteStoreProfileRepository(self._connection),
            guard=self.create_ownership_guard(),
        )

    def create_wishlist_service(self) -> WishlistService:
        """Create a WishlistService for the persisted wishlist."""
        self._ensure_initialized()
        return WishlistService(
            wishlist_repo=SQLiteWishlistRepository(self._connection),
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError(
                "ServiceFactory not initialized. Call await factory.initialize() first."
            )
