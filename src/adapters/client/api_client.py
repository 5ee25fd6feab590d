"""
adapters.client.api_client - HTTP client for the wishlist endpoints.

Used by the CLI once a user is signed in. Every call returns the "data"
part of the response envelope (plus "summary" where the server sends one);
transport failures and error statuses raise RemoteServiceError.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from domain.exceptions import RemoteServiceError
from domain.wishlist import NaturalKey

logger = logging.getLogger(__name__)


class MarketplaceClient:
    """Synchronous wrapper around the marketplace REST API."""

    def __init__(
        self,
        base_url: str,
        access_token: str,
        timeout: float = 10.0,
        http: Optional[requests.Session] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._http = http or requests.Session()
        self._headers = {"Authorization": f"Bearer {access_token}"}

    # ------------------------------------------------------------------
    # Wishlist
    # ------------------------------------------------------------------

    def get_wishlist(self) -> dict[str, Any]:
        return self._call("GET", "/wishlist")

    def add_item(self, item: dict[str, Any]) -> dict[str, Any]:
        return self._call("POST", "/wishlist", json=item)

    def remove_item(self, key: NaturalKey) -> dict[str, Any]:
        return self._call("DELETE", f"/wishlist/items/{key.item_type.value}/{key.item_id}")

    def clear_wishlist(self) -> dict[str, Any]:
        return self._call("DELETE", "/wishlist")

    def merge_guest_items(self, items: list[dict[str, Any]]) -> dict[str, Any]:
        """POST the guest items; returns {"data": {added, alreadyPresent, failed}, "summary": ...}."""
        return self._call("POST", "/wishlist/merge", json={"items": items})

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _call(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        url = self._base_url + path
        logger.debug("%s %s", method, url)
        try:
            response = self._http.request(
                method, url, headers=self._headers, timeout=self._timeout, **kwargs,
            )
        except requests.exceptions.ConnectionError as e:
            raise RemoteServiceError(f"Marketplace API unreachable at {url}: {e}") from e
        except requests.exceptions.Timeout:
            raise RemoteServiceError(f"Marketplace API timed out after {self._timeout}s")

        if not response.ok:
            try:
                detail = response.json().get("detail", response.text)
            except ValueError:
                detail = response.text[:200]
            raise RemoteServiceError(
                f"Marketplace API returned HTTP {response.status_code}: {detail}",
                status_code=response.status_code,
            )

        body = response.json()
        return {key: body[key] for key in ("data", "summary", "message") if key in body}
