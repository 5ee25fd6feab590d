"""
application.services.store_profile - Store profile use cases.

apply_operation() is the sub-collection editor: exactly one StoreCommand per
call, applied to the caller's store in memory and written back as one
document write.
"""

from __future__ import annotations

import logging

from domain.exceptions import DuplicateProfileError, NotFoundOrUnauthorizedError
from domain.ports import StoreProfileRepository
from domain.store import StoreCommand, StoreProfile
from application.context import RequestContext
from application.services.ownership import OwnershipGuard

logger = logging.getLogger(__name__)


class StoreProfileService:
    """Creates, reads, edits and deletes store profiles."""

    def __init__(
        self,
        store_repo: StoreProfileRepository,
        guard: OwnershipGuard,
    ):
        self._store_repo = store_repo
        self._guard = guard

    async def create_store(self, ctx: RequestContext, profile: StoreProfile) -> StoreProfile:
        if await self._store_repo.find_by_user(ctx.user_id) is not None:
            raise DuplicateProfileError("Store profile already exists")
        profile.id = None
        profile.user_id = ctx.user_id
        profile.assign_missing_ids()
        created = await self._store_repo.insert(profile)
        logger.info("[%s] user %s created store %s", ctx.request_id, ctx.user_id, created.id)
        return created

    async def get_my_store(self, ctx: RequestContext) -> StoreProfile:
        return await self._guard.require_store(ctx)

    async def get_store_for_user(self, user_id: str) -> StoreProfile:
        """Public read of another user's store."""
        profile = await self._store_repo.find_by_user(user_id)
        if profile is None:
            raise NotFoundOrUnauthorizedError("Store profile not found")
        return profile

    async def apply_operation(
        self,
        ctx: RequestContext,
        command: StoreCommand,
    ) -> StoreProfile:
        """Apply one command to the caller's store and persist it.

        A command that matches nothing (unknown branch/image id) leaves the
        profile as it was and skips the write.
        """
        profile = await self._guard.require_store(ctx)
        changed = command.apply(profile)
        if not changed:
            logger.debug(
                "[%s] %s matched nothing in store %s",
                ctx.request_id, command.operation, profile.id,
            )
            return profile

        updated = await self._store_repo.update(profile)
        logger.info(
            "[%s] store %s: %s applied (version %d)",
            ctx.request_id, updated.id, command.operation, updated.version,
        )
        return updated

    async def delete_store(self, ctx: RequestContext) -> None:
        deleted = await self._store_repo.find_one_and_delete(ctx.user_id)
        if deleted is None:
            raise NotFoundOrUnauthorizedError("Store profile not found")
        logger.info("[%s] user %s deleted store %s", ctx.request_id, ctx.user_id, deleted.id)
