"""
infrastructure.persistence.connection - Async SQLite connection manager.

Wraps aiosqlite with a context manager: one connection and one transaction
per repository operation. Driver failures surface as RepositoryError;
integrity violations are re-raised untouched so repositories can map them
to domain conflicts.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import aiosqlite

from domain.exceptions import RepositoryError

logger = logging.getLogger(__name__)


class AsyncSQLiteConnection:
    """Async SQLite connection provider with auto-commit/rollback."""

    def __init__(self, db_path: str):
        self._db_path = db_path

    @property
    def db_path(self) -> str:
        return self._db_path

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """Yield an async SQLite connection with FK support.

        Commits on success, rolls back on exception.
        """
        async with aiosqlite.connect(self._db_path) as conn:
            await conn.execute("PRAGMA foreign_keys = ON")
            conn.row_factory = aiosqlite.Row
            try:
                yield conn
                await conn.commit()
            except aiosqlite.IntegrityError:
                await conn.rollback()
                raise
            except aiosqlite.Error as exc:
                await conn.rollback()
                logger.exception("Database operation failed, transaction rolled back.")
                raise RepositoryError(str(exc)) from exc
            except Exception:
                await conn.rollback()
                raise
