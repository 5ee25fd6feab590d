"""
application.services.ownership - Ownership guard for profile mutations.

Resolves who is calling and whether they own the profile they target.
"Absent" and "owned by someone else" are reported identically so callers
cannot probe for other users' profiles.
"""

from __future__ import annotations

import logging

from domain.exceptions import NotFoundOrUnauthorizedError
from domain.farm import FarmProfile
from domain.ports import FarmProfileRepository, StoreProfileRepository
from domain.store import StoreProfile
from application.context import RequestContext
from application.services.authentication import AuthenticationService

logger = logging.getLogger(__name__)


class OwnershipGuard:
    """Checks caller identity and profile ownership before any mutation."""

    def __init__(
        self,
        auth_service: AuthenticationService,
        farm_repo: FarmProfileRepository,
        store_repo: StoreProfileRepository,
    ):
        self._auth_service = auth_service
        self._farm_repo = farm_repo
        self._store_repo = store_repo

    def identify(self, token: str) -> RequestContext:
        """Resolve a bearer token to a RequestContext (AuthenticationError otherwise)."""
        return RequestContext(user_id=self._auth_service.resolve_user_id(token))

    async def require_farm(self, ctx: RequestContext, farm_id: str) -> FarmProfile:
        profile = await self._farm_repo.find_one(farm_id, ctx.user_id)
        if profile is None:
            logger.info(
                "[%s] farm %s not found for user %s",
                ctx.request_id, farm_id, ctx.user_id,
            )
            raise NotFoundOrUnauthorizedError("Farm profile not found or unauthorized")
        return profile

    async def require_store(self, ctx: RequestContext) -> StoreProfile:
        profile = await self._store_repo.find_by_user(ctx.user_id)
        if profile is None:
            logger.info("[%s] no store profile for user %s", ctx.request_id, ctx.user_id)
            raise NotFoundOrUnauthorizedError("Store profile not found")
        return profile
