"""
application.services.farm_profile - Farm profile use cases.

update_farm() is the production discriminator: it applies the basic-info
patch, resolves the single active production list for the resulting farm
type and applies the array updates, all in memory. Nothing is written
unless the whole request is valid.
"""

from __future__ import annotations

import logging
from typing import Optional

from domain.exceptions import NotFoundOrUnauthorizedError
from domain.farm import FarmProfile, FarmType, ProductionScale, reconcile_production
from domain.ports import FarmProfileRepository
from application.context import RequestContext
from application.dto import FarmUpdateRequest
from application.services.ownership import OwnershipGuard

logger = logging.getLogger(__name__)


class FarmProfileService:
    """Creates, reads, mutates and deletes farm profiles."""

    def __init__(
        self,
        farm_repo: FarmProfileRepository,
        guard: OwnershipGuard,
    ):
        self._farm_repo = farm_repo
        self._guard = guard

    async def create_farm(self, ctx: RequestContext, profile: FarmProfile) -> FarmProfile:
        """Register a new farm owned by the caller."""
        profile.id = None
        profile.user_id = ctx.user_id
        created = await self._farm_repo.insert(profile)
        logger.info(
            "[%s] user %s registered farm %s (%s)",
            ctx.request_id, ctx.user_id, created.id, created.farm_type.value,
        )
        return created

    async def list_farms(
        self,
        user_id: Optional[str] = None,
        farm_type: Optional[FarmType] = None,
        production_scale: Optional[ProductionScale] = None,
        limit: Optional[int] = None,
    ) -> list[FarmProfile]:
        return await self._farm_repo.find(
            user_id=user_id,
            farm_type=farm_type,
            production_scale=production_scale,
            limit=limit,
        )

    async def list_my_farms(self, ctx: RequestContext) -> list[FarmProfile]:
        return await self._farm_repo.find(user_id=ctx.user_id)

    async def get_farm(self, ctx: RequestContext, farm_id: str) -> FarmProfile:
        return await self._guard.require_farm(ctx, farm_id)

    async def update_farm(
        self,
        ctx: RequestContext,
        farm_id: str,
        request: FarmUpdateRequest,
    ) -> FarmProfile:
        """Apply a basic-info patch and production list updates atomically.

        A farm type change empties the previous production list even when
        no array updates are sent. Any update aimed at a list other than
        the one of the resulting farm type rejects the whole request.
        """
        profile = await self._guard.require_farm(ctx, farm_id)
        previous_type = profile.farm_type

        profile.apply_basic_info(request.basic_info)
        profile.production = reconcile_production(
            profile.production, request.farm_type, request.array_updates,
        )

        updated = await self._farm_repo.update(profile)
        if updated.farm_type is not previous_type:
            logger.info(
                "[%s] farm %s type changed %s -> %s",
                ctx.request_id, farm_id, previous_type.value, updated.farm_type.value,
            )
        logger.debug(
            "[%s] farm %s updated: %d basic field(s), %d array update(s), version %d",
            ctx.request_id, farm_id, len(request.basic_info),
            len(request.array_updates), updated.version,
        )
        return updated

    async def delete_farm(self, ctx: RequestContext, farm_id: str) -> None:
        deleted = await self._farm_repo.find_one_and_delete(farm_id, ctx.user_id)
        if deleted is None:
            raise NotFoundOrUnauthorizedError("Farm profile not found or unauthorized")
        logger.info("[%s] user %s deleted farm %s", ctx.request_id, ctx.user_id, farm_id)
