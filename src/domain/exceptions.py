"""
domain.exceptions - Custom exception hierarchy for the marketplace profiles service.

All domain-level errors inherit from DomainError so callers can catch
broad or specific exceptions as needed. Adapters map them to transport
status codes; the domain never knows about HTTP.
"""


class DomainError(Exception):
    """Base exception for all domain-level errors."""


class AuthenticationError(DomainError):
    """Raised when no caller identity can be resolved (missing or bad token)."""


class NotFoundOrUnauthorizedError(DomainError):
    """Raised when a profile is absent, or present but owned by someone else.

    The two cases are deliberately indistinguishable to the caller.
    """


class InvalidOperationError(DomainError):
    """Raised when a mutation request violates a constraint.

    Unknown operation tags, missing payload fields, array operations aimed at
    the wrong production list and out-of-range scalar values all end up here.
    """

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.field = field


class DuplicateWishlistItemError(DomainError):
    """Raised when an item with the same (itemId, itemType) is already listed."""


class DuplicateProfileError(DomainError):
    """Raised when creating a second store profile for the same user."""


class ConcurrentModificationError(DomainError):
    """Raised when a document changed between read and write (stale version)."""


class RepositoryError(DomainError):
    """Raised when a database operation fails."""


class RemoteServiceError(DomainError):
    """Raised by the device-local client when the marketplace API is unreachable
    or answers with an error status."""

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
