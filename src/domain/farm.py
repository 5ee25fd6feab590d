"""
domain.farm - Farm profile entity and the production detail discriminator.

A farm records what it produces in exactly one list, selected by its farm
type. ProductionDetail is a closed sum type: each variant carries its own
items and knows the wire field it is projected to, so a profile can never
hold two active lists at once.

The seven flat list attributes (cropsGrown, livestockProduced, ...) only
exist in the document/JSON projection produced by production_lists().
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, ClassVar, Iterable, Mapping, Optional

from domain.exceptions import InvalidOperationError


class FarmType(str, Enum):
    CROP_FARMING = "Crop Farming"
    LIVESTOCK_FARMING = "Livestock Farming"
    MIXED = "Mixed"
    AQUACULTURE = "Aquaculture"
    NURSERY = "Nursery"
    POULTRY = "Poultry"
    OTHERS = "Others"


class ProductionScale(str, Enum):
    SMALL = "Small"
    MEDIUM = "Medium"
    COMMERCIAL = "Commercial"


class OwnershipStatus(str, Enum):
    OWNED = "Owned"
    LEASED = "Leased"
    RENTED = "Rented"
    COMMUNAL = "Communal"


class ArrayOperation(str, Enum):
    ADD = "add"
    REMOVE = "remove"
    UPDATE = "update"


# ---------------------------------------------------------------------------
# Production detail (sum type)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ProductionDetail:
    """Base of the production detail variants. Never instantiated directly."""
    farm_type: ClassVar[FarmType]
    field_name: ClassVar[str]

    items: tuple[str, ...] = ()

    def with_items(self, items: Iterable[str]) -> ProductionDetail:
        return replace(self, items=tuple(items))


class CropFarming(ProductionDetail):
    farm_type = FarmType.CROP_FARMING
    field_name = "cropsGrown"


class LivestockFarming(ProductionDetail):
    farm_type = FarmType.LIVESTOCK_FARMING
    field_name = "livestockProduced"


class Mixed(ProductionDetail):
    farm_type = FarmType.MIXED
    field_name = "mixedCropsGrown"


class Aquaculture(ProductionDetail):
    farm_type = FarmType.AQUACULTURE
    field_name = "aquacultureType"


class Nursery(ProductionDetail):
    farm_type = FarmType.NURSERY
    field_name = "nurseryType"


class Poultry(ProductionDetail):
    farm_type = FarmType.POULTRY
    field_name = "poultryType"


class Others(ProductionDetail):
    farm_type = FarmType.OTHERS
    field_name = "othersType"


_VARIANTS: dict[FarmType, type[ProductionDetail]] = {
    cls.farm_type: cls
    for cls in (CropFarming, LivestockFarming, Mixed, Aquaculture, Nursery, Poultry, Others)
}

# Wire names of the seven lists, in document order.
PRODUCTION_FIELDS: tuple[str, ...] = tuple(cls.field_name for cls in _VARIANTS.values())


def production_for(farm_type: FarmType, items: Iterable[str] = ()) -> ProductionDetail:
    """Build the variant matching farm_type."""
    return _VARIANTS[FarmType(farm_type)](items=tuple(items))


def field_for(farm_type: FarmType) -> str:
    """Return the single list field that is valid for farm_type."""
    return _VARIANTS[FarmType(farm_type)].field_name


def production_from_lists(
    farm_type: FarmType,
    lists: Mapping[str, Optional[Iterable[str]]],
    strict: bool = True,
) -> ProductionDetail:
    """Rebuild the variant from the flat seven-list shape.

    With strict, a non-empty list other than the active one is rejected;
    otherwise such stray lists are dropped.
    """
    active = field_for(farm_type)
    if strict:
        stray = [name for name in PRODUCTION_FIELDS if name != active and lists.get(name)]
        if stray:
            raise InvalidOperationError(
                f"Farm type {FarmType(farm_type).value} only accepts {active}, "
                f"got {', '.join(stray)}",
                field=active,
            )
    return production_for(farm_type, lists.get(active) or ())


# ---------------------------------------------------------------------------
# Array updates
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ArrayUpdate:
    """One element-level edit of the active production list."""
    field: str
    operation: ArrayOperation
    index: Optional[int] = None
    value: Optional[str] = None

    def __post_init__(self) -> None:
        try:
            operation = ArrayOperation(self.operation)
        except ValueError:
            raise InvalidOperationError(
                f"Unknown array operation '{self.operation}'",
            ) from None
        object.__setattr__(self, "operation", operation)


def _in_bounds(index: Optional[int], length: int) -> bool:
    return index is not None and 0 <= index < length


def apply_array_update(items: tuple[str, ...], update: ArrayUpdate) -> tuple[str, ...]:
    """Apply one update to a list. Out-of-range remove/update is a no-op.

    An update that lands in range still needs a value.
    """
    op = update.operation
    if op is ArrayOperation.ADD:
        return items + (update.value,)
    if not _in_bounds(update.index, len(items)):
        return items
    as_list = list(items)
    if op is ArrayOperation.REMOVE:
        del as_list[update.index]
    else:
        if update.value is None:
            raise InvalidOperationError(
                f"A value is required for update on {update.field}", field=update.field,
            )
        as_list[update.index] = update.value
    return tuple(as_list)


def reconcile_production(
    current: ProductionDetail,
    new_farm_type: Optional[FarmType],
    updates: Iterable[ArrayUpdate] = (),
) -> ProductionDetail:
    """Resolve the production detail after a farm type patch and array updates.

    A type change starts the new variant empty. Every update must target the
    list of the resulting type; a single mismatch rejects the whole batch
    before anything is applied.
    """
    updates = list(updates)
    target = FarmType(new_farm_type) if new_farm_type is not None else current.farm_type
    if target is not current.farm_type:
        base = production_for(target)
    else:
        base = current

    allowed = base.field_name
    for update in updates:
        if update.field != allowed:
            raise InvalidOperationError(
                f"Can only update {allowed} for farm type {target.value}",
                field=allowed,
            )
        if update.operation is ArrayOperation.ADD and update.value is None:
            raise InvalidOperationError(
                f"A value is required for add on {allowed}", field=allowed,
            )

    # Items are tuples, so a failure below leaves current untouched.
    items = base.items
    for update in updates:
        items = apply_array_update(items, update)
    return base.with_items(items)


# ---------------------------------------------------------------------------
# Farm profile entity
# ---------------------------------------------------------------------------

@dataclass
class FarmLocation:
    region: str = ""
    district: str = ""


@dataclass
class FarmImage:
    url: str = ""
    file_name: str = ""


# Scalar fields a basic-info patch may touch. farm_type is handled through
# the discriminator, never assigned directly.
BASIC_INFO_FIELDS = frozenset({
    "farm_name",
    "farm_location",
    "nearby_landmarks",
    "gps_address",
    "farm_size",
    "production_scale",
    "ownership_status",
    "full_name",
    "contact_phone",
    "contact_email",
    "belongs_to_cooperative",
    "cooperative_name",
    "additional_notes",
    "farm_images",
})


@dataclass
class FarmProfile:
    """A farmer's registered farm."""
    id: Optional[str] = None
    user_id: str = ""
    farm_name: str = ""
    farm_location: FarmLocation = field(default_factory=FarmLocation)
    nearby_landmarks: list[str] = field(default_factory=list)
    gps_address: Optional[str] = None
    farm_size: float = 0.0
    production_scale: ProductionScale = ProductionScale.SMALL
    ownership_status: OwnershipStatus = OwnershipStatus.OWNED
    full_name: str = ""
    contact_phone: str = ""
    contact_email: Optional[str] = None
    production: ProductionDetail = field(default_factory=CropFarming)
    belongs_to_cooperative: bool = False
    cooperative_name: Optional[str] = None
    additional_notes: Optional[str] = None
    farm_images: list[FarmImage] = field(default_factory=list)
    version: int = 0
    created_at: str = ""
    updated_at: str = ""

    @property
    def farm_type(self) -> FarmType:
        return self.production.farm_type

    def production_lists(self) -> dict[str, list[str]]:
        """Project the production detail onto the seven flat list fields."""
        lists = {name: [] for name in PRODUCTION_FIELDS}
        lists[self.production.field_name] = list(self.production.items)
        return lists

    def apply_basic_info(self, patch: dict[str, Any]) -> None:
        """Assign scalar fields from a snake_case patch (farm_type excluded)."""
        unknown = set(patch) - BASIC_INFO_FIELDS
        if unknown:
            raise InvalidOperationError(
                f"Cannot patch field(s): {', '.join(sorted(unknown))}",
            )
        for name, value in patch.items():
            setattr(self, name, value)

    def full_details(self) -> str:
        return f"{self.farm_name} - {self.farm_type.value} ({self.farm_size:g} acres)"
