"""
application.services.authentication - Caller identity from bearer tokens.

Sign-up and password login live outside this service; it only turns a
JWT into a user id (and can issue one for tooling and tests).
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import jwt, JWTError

from domain.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


class AuthenticationService:
    """Verifies and issues HS256 JWTs carrying a user_id claim."""

    def __init__(
        self,
        jwt_secret: str,
        jwt_expiry_hours: int = 24,
        jwt_algorithm: str = "HS256",
    ):
        self._jwt_secret = jwt_secret
        self._jwt_expiry_hours = jwt_expiry_hours
        self._jwt_algorithm = jwt_algorithm

    def verify_token(self, token: str) -> dict[str, Any]:
        """Decode and validate a JWT. Returns the payload dict."""
        try:
            payload = jwt.decode(
                token, self._jwt_secret, algorithms=[self._jwt_algorithm],
            )
        except JWTError as exc:
            raise AuthenticationError(f"Token verification failed: {exc}")
        if not payload.get("user_id"):
            raise AuthenticationError("Invalid token payload.")
        return payload

    def resolve_user_id(self, token: str) -> str:
        return str(self.verify_token(token)["user_id"])

    def issue_token(self, user_id: str, role: str = "user") -> str:
        expire = datetime.now(timezone.utc) + timedelta(hours=self._jwt_expiry_hours)
        payload = {
            "user_id": user_id,
            "role": role,
            "exp": expire,
        }
        logger.debug("Issued token for user %s", user_id)
        return jwt.encode(payload, self._jwt_secret, algorithm=self._jwt_algorithm)
