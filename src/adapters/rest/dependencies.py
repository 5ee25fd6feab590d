"""
Shared FastAPI dependencies.

- get_factory(): returns the initialized ServiceFactory (set at startup).
- get_current_user(): JWT bearer token -> RequestContext.
- raise_http(): maps a domain error to the matching HTTPException.
"""

from __future__ import annotations

import logging
from typing import NoReturn

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from factory import ServiceFactory
from domain.exceptions import (
    AuthenticationError,
    ConcurrentModificationError,
    DomainError,
    DuplicateProfileError,
    DuplicateWishlistItemError,
    InvalidOperationError,
    NotFoundOrUnauthorizedError,
)
from application.context import RequestContext

logger = logging.getLogger(__name__)

# Module-level reference set by app lifespan
_factory: ServiceFactory | None = None


def set_factory(factory: ServiceFactory) -> None:
    global _factory
    _factory = factory


def get_factory() -> ServiceFactory:
    if _factory is None:
        raise RuntimeError("ServiceFactory not initialized.")
    return _factory


# --- Error mapping ---

_STATUS_BY_ERROR: list[tuple[type[DomainError], int]] = [
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (NotFoundOrUnauthorizedError, status.HTTP_404_NOT_FOUND),
    (InvalidOperationError, status.HTTP_400_BAD_REQUEST),
    (DuplicateWishlistItemError, status.HTTP_409_CONFLICT),
    (DuplicateProfileError, status.HTTP_409_CONFLICT),
    (ConcurrentModificationError, status.HTTP_409_CONFLICT),
]


def raise_http(exc: DomainError) -> NoReturn:
    """Re-raise a domain error as an HTTPException.

    Anything not listed (RepositoryError included) becomes a 500 with a
    generic message; the detail is logged, never returned.
    """
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            headers = {"WWW-Authenticate": "Bearer"} if code == 401 else None
            raise HTTPException(status_code=code, detail=str(exc), headers=headers) from exc
    logger.error("Unhandled domain error: %s", exc, exc_info=exc)
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error.",
    ) from exc


# --- JWT Bearer ---

_bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
    factory: ServiceFactory = Depends(get_factory),
) -> RequestContext:
    """Validate JWT and return the caller's RequestContext. Raises 401 on failure."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    guard = factory.create_ownership_guard()
    try:
        return guard.identify(credentials.credentials)
    except AuthenticationError as exc:
        logger.debug("Rejected bearer token: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token.",
            headers={"WWW-Authenticate": "Bearer"},
        )
