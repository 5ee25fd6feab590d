"""
application.services.wishlist - Persisted wishlist and guest merge.

The persisted wishlist follows the same item rules as the guest wishlist
(domain.wishlist.WishlistCollection). merge_guest_items() migrates a guest
wishlist in one bulk, natural-key-idempotent write: retrying a merge, or
merging items the user already saved, never creates duplicates.
"""

from __future__ import annotations

import logging
from typing import Iterable

from domain.exceptions import (
    DuplicateWishlistItemError,
    NotFoundOrUnauthorizedError,
)
from domain.ports import WishlistRepository
from domain.wishlist import (
    NaturalKey,
    Wishlist,
    WishlistItem,
    WishlistSummary,
)
from application.context import RequestContext
from application.dto import MergeFailure, MergeResult, WishlistItemUpdate, WishlistView

logger = logging.getLogger(__name__)


class WishlistService:
    """Manages a user's persisted wishlist."""

    def __init__(self, wishlist_repo: WishlistRepository):
        self._wishlist_repo = wishlist_repo

    async def get_or_create(self, ctx: RequestContext) -> Wishlist:
        wishlist = await self._wishlist_repo.get_by_user(ctx.user_id, populate=True)
        if wishlist is None:
            wishlist = await self._wishlist_repo.create(Wishlist(user_id=ctx.user_id, items=[]))
            logger.info("[%s] created wishlist for user %s", ctx.request_id, ctx.user_id)
        return wishlist

    async def get_wishlist(self, ctx: RequestContext) -> WishlistView:
        wishlist = await self.get_or_create(ctx)
        return WishlistView(wishlist=wishlist, summary=wishlist.summary())

    async def get_summary(self, ctx: RequestContext) -> WishlistSummary:
        return (await self.get_or_create(ctx)).summary()

    async def add_item(self, ctx: RequestContext, item: WishlistItem) -> WishlistView:
        """Save an item. An existing (itemId, itemType) is rejected."""
        wishlist = await self.get_or_create(ctx)
        item.id = None
        item.user_id = ctx.user_id
        if wishlist.contains(item.key):
            raise DuplicateWishlistItemError(f"Item already in wishlist: {item.key}")

        stored = await self._wishlist_repo.add_item(wishlist, item)
        wishlist.add_item(stored)
        logger.info("[%s] user %s saved %s", ctx.request_id, ctx.user_id, stored.key)
        return WishlistView(wishlist=wishlist, summary=wishlist.summary())

    async def get_item(self, ctx: RequestContext, item_id: str) -> WishlistItem:
        item = await self._wishlist_repo.get_item(ctx.user_id, item_id)
        if item is None:
            raise NotFoundOrUnauthorizedError("Wishlist item not found")
        return item

    async def update_item(
        self,
        ctx: RequestContext,
        item_id: str,
        update: WishlistItemUpdate,
    ) -> WishlistItem:
        item = await self.get_item(ctx, item_id)
        item.apply_updates(
            notes=update.notes,
            in_stock=update.in_stock,
            availability=update.availability,
        )
        await self._wishlist_repo.update_item(item)
        return item

    async def remove_item(self, ctx: RequestContext, key: NaturalKey) -> WishlistView:
        """Remove by natural key. Absent keys are a no-op."""
        wishlist = await self.get_or_create(ctx)
        found = wishlist.find(key)
        if found is not None:
            await self._wishlist_repo.remove_item(wishlist, found.id)
            wishlist.remove_item(key)
            logger.info("[%s] user %s removed %s", ctx.request_id, ctx.user_id, key)
        return WishlistView(wishlist=wishlist, summary=wishlist.summary())

    async def remove_item_by_id(self, ctx: RequestContext, item_id: str) -> WishlistView:
        """Remove by storage id. Unknown ids are a no-op."""
        wishlist = await self.get_or_create(ctx)
        if await self._wishlist_repo.remove_item(wishlist, item_id):
            wishlist.remove_by_id(item_id)
            logger.info("[%s] user %s removed item %s", ctx.request_id, ctx.user_id, item_id)
        return WishlistView(wishlist=wishlist, summary=wishlist.summary())

    async def clear(self, ctx: RequestContext) -> WishlistView:
        """Empty the wishlist; the wishlist record itself is kept."""
        wishlist = await self.get_or_create(ctx)
        removed = await self._wishlist_repo.clear(wishlist)
        wishlist.clear()
        logger.info("[%s] user %s cleared %d item(s)", ctx.request_id, ctx.user_id, removed)
        return WishlistView(wishlist=wishlist, summary=wishlist.summary())

    async def merge_guest_items(
        self,
        ctx: RequestContext,
        items: Iterable[WishlistItem],
        rejected: Iterable[MergeFailure] = (),
    ) -> MergeResult:
        """Migrate guest items into the caller's wishlist.

        items are already validated; rejected carries the guest items the
        adapter could not parse, which are logged and reported, not fatal.
        Items not already saved are written in a single bulk insert; keys
        already in the wishlist (or repeated within the batch) are reported
        as present.
        """
        wishlist = await self.get_or_create(ctx)
        result = MergeResult()
        staged: list[WishlistItem] = []
        seen: set[NaturalKey] = set()

        for failure in rejected:
            logger.warning(
                "[%s] skipping guest item %r for user %s: %s",
                ctx.request_id, failure.item_id, ctx.user_id, failure.reason,
            )
            result.failed.append(failure)

        for item in items:
            item.id = None
            item.user_id = ctx.user_id
            if wishlist.contains(item.key) or item.key in seen:
                result.already_present.append(item.key)
                continue
            seen.add(item.key)
            staged.append(item)

        if staged:
            inserted = await self._wishlist_repo.add_items(wishlist, staged)
            inserted_keys = {i.key for i in inserted}
            for item in inserted:
                wishlist.add_item(item)
            result.added.extend(inserted)
            result.already_present.extend(
                i.key for i in staged if i.key not in inserted_keys
            )

        logger.info(
            "[%s] merged guest wishlist for user %s: %d added, %d present, %d failed",
            ctx.request_id, ctx.user_id, len(result.added),
            len(result.already_present), len(result.failed),
        )
        return result
