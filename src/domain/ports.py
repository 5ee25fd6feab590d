"""
domain.ports - Abstract interfaces (Protocols) for all system boundaries.

These define WHAT the system needs without specifying HOW. Infrastructure
modules provide concrete implementations. Application services depend only
on these protocols, never on concrete classes.

The persistence ports follow a document-store vocabulary (find, find_one,
update, find_one_and_delete); nothing here assumes SQL.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from domain.farm import FarmProfile, FarmType, ProductionScale
from domain.store import StoreProfile
from domain.wishlist import Wishlist, WishlistItem


# ---------------------------------------------------------------------------
# Repository Ports
# ---------------------------------------------------------------------------

@runtime_checkable
class FarmProfileRepository(Protocol):
    """Document operations for FarmProfile.

    update() must only succeed when the stored version equals
    profile.version, and must return the profile with its bumped version.
    """

    async def insert(self, profile: FarmProfile) -> FarmProfile: ...
    async def find_by_id(self, profile_id: str) -> Optional[FarmProfile]: ...
    async def find_one(self, profile_id: str, user_id: str) -> Optional[FarmProfile]: ...
    async def find(
        self,
        user_id: Optional[str] = None,
        farm_type: Optional[FarmType] = None,
        production_scale: Optional[ProductionScale] = None,
        limit: Optional[int] = None,
    ) -> list[FarmProfile]: ...
    async def update(self, profile: FarmProfile) -> FarmProfile: ...
    async def find_one_and_delete(
        self, profile_id: str, user_id: str,
    ) -> Optional[FarmProfile]: ...


@runtime_checkable
class StoreProfileRepository(Protocol):
    """Document operations for StoreProfile (one per user)."""

    async def insert(self, profile: StoreProfile) -> StoreProfile: ...
    async def find_by_user(self, user_id: str) -> Optional[StoreProfile]: ...
    async def update(self, profile: StoreProfile) -> StoreProfile: ...
    async def find_one_and_delete(self, user_id: str) -> Optional[StoreProfile]: ...


@runtime_checkable
class WishlistRepository(Protocol):
    """Wishlist records and their items.

    add_item/add_items are idempotent on the natural key: add_item raises
    DuplicateWishlistItemError, add_items silently skips existing keys.
    """

    async def get_by_user(self, user_id: str, populate: bool = True) -> Optional[Wishlist]: ...
    async def create(self, wishlist: Wishlist) -> Wishlist: ...
    async def add_item(self, wishlist: Wishlist, item: WishlistItem) -> WishlistItem: ...
    async def add_items(
        self, wishlist: Wishlist, items: list[WishlistItem],
    ) -> list[WishlistItem]: ...
    async def get_item(self, user_id: str, item_id: str) -> Optional[WishlistItem]: ...
    async def update_item(self, item: WishlistItem) -> None: ...
    async def remove_item(self, wishlist: Wishlist, item_id: str) -> bool: ...
    async def clear(self, wishlist: Wishlist) -> int: ...
