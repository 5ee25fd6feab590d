"""
adapters.client.guest_store - Device-local guest wishlist.

Anonymous visitors keep their wishlist in a JSON file on this machine
(~/.agri-market/guest_wishlist.json by default). Item rules are the shared
domain ones (WishlistCollection), so a guest wishlist behaves exactly like
a signed-in one; only the storage differs.
"""

from __future__ import annotations

import json
import logging
import secrets
import string
import time
from pathlib import Path
from typing import Any

from domain.exceptions import DomainError
from domain.wishlist import (
    Availability,
    NaturalKey,
    WishlistCollection,
    WishlistItem,
    WishlistSummary,
)

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits


def new_guest_id() -> str:
    """guest_<epoch millis>_<9 random chars>."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"guest_{int(time.time() * 1000)}_{suffix}"


def item_to_wire(item: WishlistItem) -> dict[str, Any]:
    """camelCase JSON shape shared by the guest file and the API."""
    wire: dict[str, Any] = {
        "id": item.id,
        "itemId": item.item_id,
        "itemType": item.item_type.value,
        "productName": item.product_name,
        "productImage": item.product_image,
        "price": item.price,
        "currency": item.currency,
        "addedAt": item.added_at,
        "inStock": item.in_stock,
        "notes": item.notes,
        "availability": None,
    }
    if item.availability is not None:
        wire["availability"] = {
            "status": item.availability.status,
            "availableQuantity": item.availability.available_quantity,
            "unit": item.availability.unit,
        }
    return wire


def item_from_wire(data: dict[str, Any]) -> WishlistItem:
    availability = data.get("availability")
    return WishlistItem(
        id=data.get("id"),
        item_id=str(data.get("itemId", "")),
        item_type=data.get("itemType", ""),
        product_name=data.get("productName", ""),
        product_image=data.get("productImage"),
        price=data.get("price"),
        currency=data.get("currency"),
        added_at=data.get("addedAt") or "",
        in_stock=data.get("inStock", True),
        notes=data.get("notes"),
        availability=Availability(
            status=availability.get("status"),
            available_quantity=availability.get("availableQuantity"),
            unit=availability.get("unit"),
        ) if availability else None,
    )


class GuestWishlistStore:
    """Guest wishlist persisted as {"items": [...]} in a JSON file.

    Every mutation reads the file, applies the change through a
    WishlistCollection and writes it back.
    """

    def __init__(self, path: Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> WishlistCollection:
        if not self._path.exists():
            return WishlistCollection()
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Unreadable guest wishlist at %s, starting empty: %s", self._path, exc)
            return WishlistCollection()

        collection = WishlistCollection()
        for data in raw.get("items", []):
            try:
                collection.add_item(item_from_wire(data))
            except (DomainError, TypeError, ValueError, AttributeError) as exc:
                logger.warning("Dropping guest wishlist entry %r: %s", data.get("itemId"), exc)
        return collection

    def items(self) -> list[WishlistItem]:
        return self.load().items

    def add_item(self, item: WishlistItem) -> WishlistItem:
        """Save an item locally. Raises DuplicateWishlistItemError on a known key."""
        collection = self.load()
        item.id = item.id or new_guest_id()
        item.user_id = None
        collection.add_item(item)
        self._save(collection)
        logger.debug("Guest wishlist: added %s", item.key)
        return item

    def remove_item(self, key: NaturalKey) -> bool:
        collection = self.load()
        removed = collection.remove_item(key)
        if removed:
            self._save(collection)
        return removed

    def clear(self) -> None:
        self._save(WishlistCollection())

    def summary(self) -> WishlistSummary:
        return self.load().summary()

    def is_empty(self) -> bool:
        return len(self.load()) == 0

    def to_payload(self) -> list[dict[str, Any]]:
        return [item_to_wire(i) for i in self.items()]

    def _save(self, collection: WishlistCollection) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            json.dumps({"items": [item_to_wire(i) for i in collection.items]}, indent=2),
            encoding="utf-8",
        )
