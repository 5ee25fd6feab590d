"""
adapters.client.session - Local session credential storage.

The bearer token is stored in ~/.agri-market/session.json (or under
AGRI_MARKET_HOME) so the user stays signed in between CLI invocations.
The `merged` flag records that this sign-in already migrated the guest
wishlist; a new login starts with it cleared.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class Session:
    user_id: str
    access_token: str
    merged: bool = False


def load_session(path: Path) -> Session | None:
    """Return the stored session, or None if the user is not signed in."""
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return Session(**data)
    except (OSError, ValueError, TypeError) as exc:
        logger.warning("Ignoring unreadable session file %s: %s", path, exc)
        return None


def save_session(path: Path, session: Session) -> None:
    """Persist session credentials to disk."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(session), indent=2), encoding="utf-8")


def clear_session(path: Path) -> None:
    """Delete stored credentials (logout)."""
    if path.exists():
        path.unlink()
