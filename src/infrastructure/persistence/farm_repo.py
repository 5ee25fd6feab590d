"""
infrastructure.persistence.farm_repo - SQLite farm profile repository.

Implements FarmProfileRepository. The profile is stored as a JSON document
in its wire shape (seven production lists, one populated); farm_type,
production_scale and user_id are mirrored into columns for filtering.
Every update is guarded by the version column.
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Optional

from domain.exceptions import ConcurrentModificationError
from domain.farm import (
    FarmImage,
    FarmLocation,
    FarmProfile,
    FarmType,
    OwnershipStatus,
    ProductionScale,
    production_from_lists,
)
from domain.ids import new_id
from infrastructure.persistence.connection import AsyncSQLiteConnection

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def to_document(profile: FarmProfile) -> dict[str, Any]:
    return {
        "farmName": profile.farm_name,
        "farmLocation": {
            "region": profile.farm_location.region,
            "district": profile.farm_location.district,
        },
        "nearbyLandmarks": list(profile.nearby_landmarks),
        "gpsAddress": profile.gps_address,
        "farmSize": profile.farm_size,
        "productionScale": ProductionScale(profile.production_scale).value,
        "ownershipStatus": OwnershipStatus(profile.ownership_status).value,
        "fullName": profile.full_name,
        "contactPhone": profile.contact_phone,
        "contactEmail": profile.contact_email,
        "farmType": profile.farm_type.value,
        **profile.production_lists(),
        "belongsToCooperative": profile.belongs_to_cooperative,
        "cooperativeName": profile.cooperative_name,
        "additionalNotes": profile.additional_notes,
        "farmImages": [
            {"url": img.url, "fileName": img.file_name} for img in profile.farm_images
        ],
    }


def from_document(doc: dict[str, Any], **meta: Any) -> FarmProfile:
    farm_type = FarmType(doc["farmType"])
    location = doc.get("farmLocation") or {}
    return FarmProfile(
        farm_name=doc.get("farmName", ""),
        farm_location=FarmLocation(
            region=location.get("region", ""),
            district=location.get("district", ""),
        ),
        nearby_landmarks=list(doc.get("nearbyLandmarks") or []),
        gps_address=doc.get("gpsAddress"),
        farm_size=doc.get("farmSize", 0.0),
        production_scale=ProductionScale(doc["productionScale"]),
        ownership_status=OwnershipStatus(doc["ownershipStatus"]),
        full_name=doc.get("fullName", ""),
        contact_phone=doc.get("contactPhone", ""),
        contact_email=doc.get("contactEmail"),
        production=production_from_lists(farm_type, doc, strict=False),
        belongs_to_cooperative=bool(doc.get("belongsToCooperative", False)),
        cooperative_name=doc.get("cooperativeName"),
        additional_notes=doc.get("additionalNotes"),
        farm_images=[
            FarmImage(url=img.get("url", ""), file_name=img.get("fileName", ""))
            for img in doc.get("farmImages") or []
        ],
        **meta,
    )


class SQLiteFarmProfileRepository:
    """Async SQLite implementation of FarmProfileRepository."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def insert(self, profile: FarmProfile) -> FarmProfile:
        now = _now()
        created = replace(profile, id=new_id(), version=1, created_at=now, updated_at=now)
        async with self._conn.acquire() as conn:
            await conn.execute(
                """INSERT INTO farm_profiles
                   (id, user_id, farm_type, production_scale, document,
                    version, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                (created.id, created.user_id, created.farm_type.value,
                 ProductionScale(created.production_scale).value,
                 json.dumps(to_document(created)), created.version, now, now),
            )
        return created

    async def find_by_id(self, profile_id: str) -> Optional[FarmProfile]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT * FROM farm_profiles WHERE id = ?", (profile_id,),
            )
            return self._row_to_profile(rows[0]) if rows else None

    async def find_one(self, profile_id: str, user_id: str) -> Optional[FarmProfile]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT * FROM farm_profiles WHERE id = ? AND user_id = ?",
                (profile_id, user_id),
            )
            return self._row_to_profile(rows[0]) if rows else None

    async def find(
        self,
        user_id: Optional[str] = None,
        farm_type: Optional[FarmType] = None,
        production_scale: Optional[ProductionScale] = None,
        limit: Optional[int] = None,
    ) -> list[FarmProfile]:
        clauses: list[str] = []
        params: list[Any] = []
        if user_id is not None:
            clauses.append("user_id = ?")
            params.append(user_id)
        if farm_type is not None:
            clauses.append("farm_type = ?")
            params.append(FarmType(farm_type).value)
        if production_scale is not None:
            clauses.append("production_scale = ?")
            params.append(ProductionScale(production_scale).value)

        sql = "SELECT * FROM farm_profiles"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY created_at DESC"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)

        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(sql, tuple(params))
            return [self._row_to_profile(r) for r in rows]

    async def update(self, profile: FarmProfile) -> FarmProfile:
        now = _now()
        updated = replace(profile, version=profile.version + 1, updated_at=now)
        async with self._conn.acquire() as conn:
            cursor = await conn.execute(
                """UPDATE farm_profiles
                   SET farm_type = ?, production_scale = ?, document = ?,
                       version = ?, updated_at = ?
                   WHERE id = ? AND version = ?""",
                (updated.farm_type.value,
                 ProductionScale(updated.production_scale).value,
                 json.dumps(to_document(updated)), updated.version, now,
                 profile.id, profile.version),
            )
            if cursor.rowcount == 0:
                logger.warning(
                    "Stale write on farm %s (expected version %d)",
                    profile.id, profile.version,
                )
                raise ConcurrentModificationError(
                    "Farm profile was modified concurrently; reload and retry"
                )
        return updated

    async def find_one_and_delete(
        self, profile_id: str, user_id: str,
    ) -> Optional[FarmProfile]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT * FROM farm_profiles WHERE id = ? AND user_id = ?",
                (profile_id, user_id),
            )
            if not rows:
                return None
            await conn.execute("DELETE FROM farm_profiles WHERE id = ?", (profile_id,))
            return self._row_to_profile(rows[0])

    @staticmethod
    def _row_to_profile(row) -> FarmProfile:
        return from_document(
            json.loads(row["document"]),
            id=row["id"],
            user_id=row["user_id"],
            version=row["version"],
            created_at=row["created_at"] or "",
            updated_at=row["updated_at"] or "",
        )
