"""
application.dto - Data Transfer Objects for service input/output.

These are the structured requests and results that services exchange with
callers (REST endpoints, the CLI, tests). Field names are snake_case; the
adapters own the camelCase wire names.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from domain.farm import ArrayUpdate, FarmType
from domain.wishlist import Availability, NaturalKey, Wishlist, WishlistItem, WishlistSummary


@dataclass(frozen=True)
class FarmUpdateRequest:
    """Input for the production discriminator.

    basic_info holds snake_case scalar fields; farm_type travels separately
    because it is never assigned directly.
    """
    basic_info: dict[str, Any] = field(default_factory=dict)
    farm_type: Optional[FarmType] = None
    array_updates: list[ArrayUpdate] = field(default_factory=list)


@dataclass(frozen=True)
class WishlistItemUpdate:
    """Mutable fields of a saved item. None leaves a field untouched."""
    notes: Optional[str] = None
    in_stock: Optional[bool] = None
    availability: Optional[Availability] = None


@dataclass(frozen=True)
class WishlistView:
    """A wishlist together with its summary, as returned to callers."""
    wishlist: Wishlist
    summary: WishlistSummary


@dataclass(frozen=True)
class MergeFailure:
    item_id: str
    item_type: str
    reason: str


@dataclass(frozen=True)
class MergeResult:
    """Outcome of migrating a guest wishlist into a user's wishlist."""
    added: list[WishlistItem] = field(default_factory=list)
    already_present: list[NaturalKey] = field(default_factory=list)
    failed: list[MergeFailure] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return len(self.added) + len(self.already_present) + len(self.failed)
