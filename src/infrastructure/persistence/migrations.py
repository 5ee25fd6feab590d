"""
infrastructure.persistence.migrations - Database schema creation.

Profiles are stored as JSON documents next to a few indexed columns used
for lookups. Wishlist items are rows so the natural key can be enforced by
a unique index. Called once at startup by the factory.
"""

from __future__ import annotations

import logging

from infrastructure.persistence.connection import AsyncSQLiteConnection

logger = logging.getLogger(__name__)

_TABLES = [
    """CREATE TABLE IF NOT EXISTS farm_profiles (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        farm_type TEXT NOT NULL,
        production_scale TEXT NOT NULL,
        document TEXT NOT NULL,
        version INTEGER NOT NULL DEFAULT 1,
        created_at TEXT,
        updated_at TEXT
    )""",
    """CREATE INDEX IF NOT EXISTS idx_farm_profiles_user
        ON farm_profiles (user_id)""",
    """CREATE INDEX IF NOT EXISTS idx_farm_profiles_type_scale
        ON farm_profiles (farm_type, production_scale)""",
    """CREATE TABLE IF NOT EXISTS store_profiles (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL UNIQUE,
        store_name TEXT NOT NULL,
        document TEXT NOT NULL,
        version INTEGER NOT NULL DEFAULT 1,
        created_at TEXT,
        updated_at TEXT
    )""",
    """CREATE TABLE IF NOT EXISTS wishlists (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL UNIQUE,
        created_at TEXT,
        updated_at TEXT
    )""",
    """CREATE TABLE IF NOT EXISTS wishlist_items (
        seq INTEGER PRIMARY KEY AUTOINCREMENT,
        id TEXT NOT NULL UNIQUE,
        wishlist_id TEXT NOT NULL,
        user_id TEXT NOT NULL,
        item_id TEXT NOT NULL,
        item_type TEXT NOT NULL,
        product_name TEXT NOT NULL,
        product_image TEXT,
        price REAL,
        currency TEXT,
        added_at TEXT,
        in_stock INTEGER NOT NULL DEFAULT 1,
        availability TEXT,
        notes TEXT,
        FOREIGN KEY (wishlist_id) REFERENCES wishlists(id) ON DELETE CASCADE
    )""",
    """CREATE UNIQUE INDEX IF NOT EXISTS idx_wishlist_items_natural_key
        ON wishlist_items (user_id, item_id, item_type)""",
]


async def run_migrations(connection: AsyncSQLiteConnection) -> None:
    """Create all tables if they don't exist.

    Safe to call multiple times (uses IF NOT EXISTS).
    """
    async with connection.acquire() as conn:
        for ddl in _TABLES:
            await conn.execute(ddl)
    logger.info("All tables created (or already exist).")
