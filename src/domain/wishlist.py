"""
domain.wishlist - Wishlist items and the semantics shared by both stores.

An item is identified by its natural key (itemId, itemType), never by the
storage id. WishlistCollection holds the add/remove/clear/summary rules; the
persisted Wishlist and the device-local guest wishlist both build on it so
the two can never drift apart.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Optional

from domain.exceptions import DuplicateWishlistItemError, InvalidOperationError


class WishlistItemType(str, Enum):
    FARM_PRODUCT = "FarmProduct"
    STORE_PRODUCT = "StoreProduct"


@dataclass(frozen=True)
class NaturalKey:
    item_id: str
    item_type: WishlistItemType

    def __str__(self) -> str:
        return f"{self.item_type.value}:{self.item_id}"


@dataclass
class Availability:
    status: Optional[bool] = None
    available_quantity: Optional[str] = None
    unit: Optional[str] = None

    def merged(self, other: Availability) -> Availability:
        """Overlay the non-empty fields of other onto self."""
        return Availability(
            status=other.status if other.status is not None else self.status,
            available_quantity=other.available_quantity or self.available_quantity,
            unit=other.unit or self.unit,
        )


@dataclass
class WishlistItem:
    """A product saved for later, with display data captured at add time."""
    id: Optional[str] = None
    user_id: Optional[str] = None
    item_id: str = ""
    item_type: WishlistItemType = WishlistItemType.FARM_PRODUCT
    product_name: str = ""
    product_image: Optional[str] = None
    price: Optional[float] = None
    currency: Optional[str] = None
    added_at: str = ""
    in_stock: bool = True
    availability: Optional[Availability] = None
    notes: Optional[str] = None

    def __post_init__(self) -> None:
        try:
            self.item_type = WishlistItemType(self.item_type)
        except ValueError:
            raise InvalidOperationError(
                f"Invalid item type '{self.item_type}'", field="itemType",
            ) from None
        if not str(self.item_id).strip():
            raise InvalidOperationError("itemId is required", field="itemId")
        if not self.product_name:
            raise InvalidOperationError("productName is required", field="productName")
        if not self.added_at:
            self.added_at = datetime.now(timezone.utc).isoformat()

    @property
    def key(self) -> NaturalKey:
        return NaturalKey(self.item_id, self.item_type)

    def apply_updates(
        self,
        notes: Optional[str] = None,
        in_stock: Optional[bool] = None,
        availability: Optional[Availability] = None,
    ) -> None:
        """Update the mutable fields; None leaves a field untouched."""
        if notes is not None:
            self.notes = notes
        if in_stock is not None:
            self.in_stock = in_stock
        if availability is not None:
            self.availability = (self.availability or Availability()).merged(availability)


@dataclass(frozen=True)
class WishlistSummary:
    total_items: int = 0
    farm_products: int = 0
    store_products: int = 0


def summarize(items: Iterable[WishlistItem]) -> WishlistSummary:
    items = list(items)
    return WishlistSummary(
        total_items=len(items),
        farm_products=sum(1 for i in items if i.item_type is WishlistItemType.FARM_PRODUCT),
        store_products=sum(1 for i in items if i.item_type is WishlistItemType.STORE_PRODUCT),
    )


class WishlistCollection:
    """Ordered items, unique by natural key."""

    def __init__(self, items: Optional[Iterable[WishlistItem]] = None):
        self._items: list[WishlistItem] = list(items or [])

    @property
    def items(self) -> list[WishlistItem]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def find(self, key: NaturalKey) -> Optional[WishlistItem]:
        for item in self._items:
            if item.key == key:
                return item
        return None

    def find_by_id(self, item_id: str) -> Optional[WishlistItem]:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def contains(self, key: NaturalKey) -> bool:
        return self.find(key) is not None

    def add_item(self, item: WishlistItem) -> WishlistItem:
        """Append item; an existing natural key is rejected."""
        if self.contains(item.key):
            raise DuplicateWishlistItemError(f"Item already in wishlist: {item.key}")
        self._items.append(item)
        return item

    def remove_item(self, key: NaturalKey) -> bool:
        """Remove by natural key. Absent keys are a no-op (returns False)."""
        before = len(self._items)
        self._items = [i for i in self._items if i.key != key]
        return len(self._items) != before

    def remove_by_id(self, item_id: str) -> bool:
        before = len(self._items)
        self._items = [i for i in self._items if i.id != item_id]
        return len(self._items) != before

    def clear(self) -> None:
        self._items = []

    def summary(self) -> WishlistSummary:
        return summarize(self._items)


class Wishlist(WishlistCollection):
    """A user's persisted wishlist.

    Holds item references (item_ids). Items are only available when the
    repository loaded them (populated); an unpopulated wishlist still knows
    its size but reports zero for both per-type subtotals.
    """

    def __init__(
        self,
        id: Optional[str] = None,
        user_id: str = "",
        item_ids: Optional[Iterable[str]] = None,
        items: Optional[Iterable[WishlistItem]] = None,
        created_at: str = "",
        updated_at: str = "",
    ):
        super().__init__(items)
        self.id = id
        self.user_id = user_id
        self.populated = items is not None
        if item_ids is None:
            item_ids = [i.id for i in self._items]
        self.item_ids: list[str] = list(item_ids)
        self.created_at = created_at
        self.updated_at = updated_at

    def add_item(self, item: WishlistItem) -> WishlistItem:
        super().add_item(item)
        self.item_ids.append(item.id)
        return item

    def remove_item(self, key: NaturalKey) -> bool:
        found = self.find(key)
        if found is None:
            return False
        return self.remove_by_id(found.id)

    def remove_by_id(self, item_id: str) -> bool:
        super().remove_by_id(item_id)
        before = len(self.item_ids)
        self.item_ids = [i for i in self.item_ids if i != item_id]
        return len(self.item_ids) != before

    def clear(self) -> None:
        super().clear()
        self.item_ids = []

    def summary(self) -> WishlistSummary:
        if not self.populated:
            return WishlistSummary(total_items=len(self.item_ids))
        return replace(super().summary(), total_items=len(self.item_ids))
