"""
adapters.client.sync - Guest-to-account wishlist migration.

States:
    ANONYMOUS               no session; the guest store is the wishlist
    AUTHENTICATED_UNMERGED  signed in, guest items not migrated yet
    AUTHENTICATED_MERGED    signed in, migration done for this sign-in

check_session() drives the transition UNMERGED -> MERGED by posting the
guest items to /wishlist/merge. The guest store is cleared only after the
server confirms; on failure it is left intact and the next check retries.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional

from domain.exceptions import RemoteServiceError
from adapters.client.api_client import MarketplaceClient
from adapters.client.guest_store import GuestWishlistStore
from adapters.client.session import Session, clear_session, load_session, save_session

logger = logging.getLogger(__name__)


class SyncState(str, Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATED_UNMERGED = "authenticated_unmerged"
    AUTHENTICATED_MERGED = "authenticated_merged"


class WishlistSync:
    """Runs the guest wishlist merge once per sign-in."""

    def __init__(
        self,
        guest_store: GuestWishlistStore,
        session_path: Path,
        client_factory: Callable[[Session], MarketplaceClient],
    ):
        self._guest_store = guest_store
        self._session_path = session_path
        self._client_factory = client_factory

    @property
    def session(self) -> Optional[Session]:
        return load_session(self._session_path)

    @property
    def state(self) -> SyncState:
        session = self.session
        if session is None:
            return SyncState.ANONYMOUS
        if not session.merged:
            return SyncState.AUTHENTICATED_UNMERGED
        return SyncState.AUTHENTICATED_MERGED

    def sign_in(self, user_id: str, access_token: str) -> Optional[dict[str, Any]]:
        """Store a fresh session and migrate the guest wishlist."""
        save_session(self._session_path, Session(user_id=user_id, access_token=access_token))
        logger.info("Signed in as %s", user_id)
        return self.check_session()

    def sign_out(self) -> None:
        clear_session(self._session_path)
        logger.info("Signed out")

    def check_session(self) -> Optional[dict[str, Any]]:
        """Merge if signed in and not merged yet.

        Returns the server's merge response, or None when there was nothing
        to do or the merge failed (the guest store is then kept).
        """
        session = self.session
        if session is None or session.merged:
            return None

        payload = self._guest_store.to_payload()
        if not payload:
            self._mark_merged(session)
            return None

        client = self._client_factory(session)
        try:
            response = client.merge_guest_items(payload)
        except RemoteServiceError as exc:
            logger.warning(
                "Guest wishlist merge failed for %s (%d item(s) kept locally): %s",
                session.user_id, len(payload), exc,
            )
            return None

        self._guest_store.clear()
        self._mark_merged(session)
        data = response.get("data", {})
        logger.info(
            "Guest wishlist merged for %s: %d added, %d already present, %d failed",
            session.user_id,
            len(data.get("added", [])),
            len(data.get("alreadyPresent", [])),
            len(data.get("failed", [])),
        )
        return response

    def _mark_merged(self, session: Session) -> None:
        session.merged = True
        save_session(self._session_path, session)
