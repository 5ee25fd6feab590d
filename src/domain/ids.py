"""domain.ids - Opaque server-assigned identifiers."""

from __future__ import annotations

from uuid import uuid4


def new_id() -> str:
    """Return a fresh opaque id for a document or collection element."""
    return uuid4().hex


def is_blank(value: str | None) -> bool:
    """True when a client-proposed id should be replaced by a server id."""
    return value is None or not str(value).strip()
