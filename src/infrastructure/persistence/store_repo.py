"""
infrastructure.persistence.store_repo - SQLite store profile repository.

Implements StoreProfileRepository. One row per user (UNIQUE user_id); the
profile body, including its branches and listing images, is a JSON document.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, replace
from datetime import datetime, timezone
from typing import Any, Optional

import aiosqlite

from domain.exceptions import ConcurrentModificationError, DuplicateProfileError
from domain.farm import ProductionScale
from domain.ids import new_id
from domain.store import Branch, StoreImage, StoreProfile
from infrastructure.persistence.connection import AsyncSQLiteConnection

logger = logging.getLogger(__name__)

_BRANCH_KEYS = {
    "id": "id",
    "branch_name": "branchName",
    "branch_location": "branchLocation",
    "gps_address": "gpsAddress",
    "branch_phone": "branchPhone",
    "branch_email": "branchEmail",
}

_IMAGE_KEYS = {
    "id": "id",
    "url": "url",
    "item_name": "itemName",
    "item_price": "itemPrice",
    "currency": "currency",
    "available": "available",
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _camel(obj, keys: dict[str, str]) -> dict[str, Any]:
    return {keys[name]: value for name, value in asdict(obj).items()}


def _snake(doc: dict[str, Any], keys: dict[str, str]) -> dict[str, Any]:
    return {name: doc[camel] for name, camel in keys.items() if camel in doc}


def to_document(profile: StoreProfile) -> dict[str, Any]:
    return {
        "storeName": profile.store_name,
        "description": profile.description,
        "productionScale": ProductionScale(profile.production_scale).value,
        "storeOwnership": profile.store_ownership,
        "branches": [_camel(b, _BRANCH_KEYS) for b in profile.branches],
        "storeImages": [_camel(i, _IMAGE_KEYS) for i in profile.store_images],
        "productSold": list(profile.product_sold),
        "belongsToGroup": profile.belongs_to_group,
        "groupName": profile.group_name,
    }


def from_document(doc: dict[str, Any], **meta: Any) -> StoreProfile:
    return StoreProfile(
        store_name=doc.get("storeName", ""),
        description=doc.get("description"),
        production_scale=ProductionScale(doc.get("productionScale", "Small")),
        store_ownership=doc.get("storeOwnership"),
        branches=[Branch(**_snake(b, _BRANCH_KEYS)) for b in doc.get("branches") or []],
        store_images=[
            StoreImage(**_snake(i, _IMAGE_KEYS)) for i in doc.get("storeImages") or []
        ],
        product_sold=list(doc.get("productSold") or []),
        belongs_to_group=bool(doc.get("belongsToGroup", False)),
        group_name=doc.get("groupName"),
        **meta,
    )


class SQLiteStoreProfileRepository:
    """Async SQLite implementation of StoreProfileRepository."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def insert(self, profile: StoreProfile) -> StoreProfile:
        now = _now()
        created = replace(profile, id=new_id(), version=1, created_at=now, updated_at=now)
        try:
            async with self._conn.acquire() as conn:
                await conn.execute(
                    """INSERT INTO store_profiles
                       (id, user_id, store_name, document, version, created_at, updated_at)
                       VALUES (?, ?, ?, ?, ?, ?, ?)""",
                    (created.id, created.user_id, created.store_name,
                     json.dumps(to_document(created)), created.version, now, now),
                )
        except aiosqlite.IntegrityError as exc:
            raise DuplicateProfileError(
                "Store profile already exists for this user"
            ) from exc
        return created

    async def find_by_user(self, user_id: str) -> Optional[StoreProfile]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT * FROM store_profiles WHERE user_id = ?", (user_id,),
            )
            return self._row_to_profile(rows[0]) if rows else None

    async def update(self, profile: StoreProfile) -> StoreProfile:
        now = _now()
        updated = replace(profile, version=profile.version + 1, updated_at=now)
        async with self._conn.acquire() as conn:
            cursor = await conn.execute(
                """UPDATE store_profiles
                   SET store_name = ?, document = ?, version = ?, updated_at = ?
                   WHERE id = ? AND version = ?""",
                (updated.store_name, json.dumps(to_document(updated)),
                 updated.version, now, profile.id, profile.version),
            )
            if cursor.rowcount == 0:
                logger.warning(
                    "Stale write on store %s (expected version %d)",
                    profile.id, profile.version,
                )
                raise ConcurrentModificationError(
                    "Store profile was modified concurrently; reload and retry"
                )
        return updated

    async def find_one_and_delete(self, user_id: str) -> Optional[StoreProfile]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT * FROM store_profiles WHERE user_id = ?", (user_id,),
            )
            if not rows:
                return None
            await conn.execute("DELETE FROM store_profiles WHERE user_id = ?", (user_id,))
            return self._row_to_profile(rows[0])

    @staticmethod
    def _row_to_profile(row) -> StoreProfile:
        return from_document(
            json.loads(row["document"]),
            id=row["id"],
            user_id=row["user_id"],
            version=row["version"],
            created_at=row["created_at"] or "",
            updated_at=row["updated_at"] or "",
        )
