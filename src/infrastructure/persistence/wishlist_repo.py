"""
infrastructure.persistence.wishlist_repo - SQLite wishlist repository.

Implements WishlistRepository. Items are rows; the unique index on
(user_id, item_id, item_type) is what makes adds idempotent. Bulk merges
use INSERT ... ON CONFLICT DO NOTHING inside a single transaction.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Optional

import aiosqlite

from domain.exceptions import DuplicateWishlistItemError
from domain.ids import new_id
from domain.wishlist import Availability, Wishlist, WishlistItem
from infrastructure.persistence.connection import AsyncSQLiteConnection

logger = logging.getLogger(__name__)

_INSERT_ITEM = """INSERT INTO wishlist_items
    (id, wishlist_id, user_id, item_id, item_type, product_name, product_image,
     price, currency, added_at, in_stock, availability, notes)
    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _item_params(wishlist_id: str, item: WishlistItem) -> tuple:
    return (
        item.id, wishlist_id, item.user_id, item.item_id, item.item_type.value,
        item.product_name, item.product_image, item.price, item.currency,
        item.added_at, int(item.in_stock),
        json.dumps(asdict(item.availability)) if item.availability else None,
        item.notes,
    )


class SQLiteWishlistRepository:
    """Async SQLite implementation of WishlistRepository."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def get_by_user(self, user_id: str, populate: bool = True) -> Optional[Wishlist]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT * FROM wishlists WHERE user_id = ?", (user_id,),
            )
            if not rows:
                return None
            row = rows[0]
            item_rows = await conn.execute_fetchall(
                "SELECT * FROM wishlist_items WHERE wishlist_id = ? ORDER BY seq",
                (row["id"],),
            )

        if populate:
            return Wishlist(
                id=row["id"],
                user_id=row["user_id"],
                items=[self._row_to_item(r) for r in item_rows],
                created_at=row["created_at"] or "",
                updated_at=row["updated_at"] or "",
            )
        return Wishlist(
            id=row["id"],
            user_id=row["user_id"],
            item_ids=[r["id"] for r in item_rows],
            created_at=row["created_at"] or "",
            updated_at=row["updated_at"] or "",
        )

    async def create(self, wishlist: Wishlist) -> Wishlist:
        now = _now()
        wishlist_id = new_id()
        try:
            async with self._conn.acquire() as conn:
                await conn.execute(
                    """INSERT INTO wishlists (id, user_id, created_at, updated_at)
                       VALUES (?, ?, ?, ?)""",
                    (wishlist_id, wishlist.user_id, now, now),
                )
        except aiosqlite.IntegrityError:
            # Another request created it first.
            existing = await self.get_by_user(wishlist.user_id)
            if existing is None:
                raise
            return existing
        return Wishlist(
            id=wishlist_id, user_id=wishlist.user_id, items=[],
            created_at=now, updated_at=now,
        )

    async def add_item(self, wishlist: Wishlist, item: WishlistItem) -> WishlistItem:
        item.id = new_id()
        item.user_id = wishlist.user_id
        try:
            async with self._conn.acquire() as conn:
                await conn.execute(_INSERT_ITEM, _item_params(wishlist.id, item))
                await self._touch(conn, wishlist.id)
        except aiosqlite.IntegrityError as exc:
            raise DuplicateWishlistItemError(f"Item already in wishlist: {item.key}") from exc
        return item

    async def add_items(
        self, wishlist: Wishlist, items: list[WishlistItem],
    ) -> list[WishlistItem]:
        """Insert all items in one transaction, skipping existing natural keys.

        Returns only the items actually written.
        """
        inserted: list[WishlistItem] = []
        async with self._conn.acquire() as conn:
            for item in items:
                item.id = new_id()
                item.user_id = wishlist.user_id
                cursor = await conn.execute(
                    _INSERT_ITEM + " ON CONFLICT (user_id, item_id, item_type) DO NOTHING",
                    _item_params(wishlist.id, item),
                )
                if cursor.rowcount == 1:
                    inserted.append(item)
            if inserted:
                await self._touch(conn, wishlist.id)
        logger.debug(
            "Bulk insert into wishlist %s: %d of %d written",
            wishlist.id, len(inserted), len(items),
        )
        return inserted

    async def get_item(self, user_id: str, item_id: str) -> Optional[WishlistItem]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT * FROM wishlist_items WHERE id = ? AND user_id = ?",
                (item_id, user_id),
            )
            return self._row_to_item(rows[0]) if rows else None

    async def update_item(self, item: WishlistItem) -> None:
        async with self._conn.acquire() as conn:
            await conn.execute(
                """UPDATE wishlist_items SET in_stock = ?, availability = ?, notes = ?
                   WHERE id = ?""",
                (int(item.in_stock),
                 json.dumps(asdict(item.availability)) if item.availability else None,
                 item.notes, item.id),
            )

    async def remove_item(self, wishlist: Wishlist, item_id: str) -> bool:
        async with self._conn.acquire() as conn:
            cursor = await conn.execute(
                "DELETE FROM wishlist_items WHERE id = ? AND wishlist_id = ?",
                (item_id, wishlist.id),
            )
            removed = cursor.rowcount > 0
            if removed:
                await self._touch(conn, wishlist.id)
        return removed

    async def clear(self, wishlist: Wishlist) -> int:
        async with self._conn.acquire() as conn:
            cursor = await conn.execute(
                "DELETE FROM wishlist_items WHERE wishlist_id = ?", (wishlist.id,),
            )
            await self._touch(conn, wishlist.id)
            return cursor.rowcount

    @staticmethod
    async def _touch(conn: aiosqlite.Connection, wishlist_id: str) -> None:
        await conn.execute(
            "UPDATE wishlists SET updated_at = ? WHERE id = ?", (_now(), wishlist_id),
        )

    @staticmethod
    def _row_to_item(row) -> WishlistItem:
        availability = row["availability"]
        return WishlistItem(
            id=row["id"],
            user_id=row["user_id"],
            item_id=row["item_id"],
            item_type=row["item_type"],
            product_name=row["product_name"],
            product_image=row["product_image"],
            price=row["price"],
            currency=row["currency"],
            added_at=row["added_at"] or "",
            in_stock=bool(row["in_stock"]),
            availability=Availability(**json.loads(availability)) if availability else None,
            notes=row["notes"],
        )
