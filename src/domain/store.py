"""
domain.store - Store profile entity and its sub-collection commands.

Branches and listing images are ordered, id-addressed collections. They are
edited only through StoreCommand subclasses: a closed set of commands, each
carrying exactly the fields it needs, applied to a profile in memory.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, ClassVar, Optional

from domain.exceptions import InvalidOperationError
from domain.farm import ProductionScale
from domain.ids import is_blank, new_id


@dataclass
class Branch:
    id: Optional[str] = None
    branch_name: str = ""
    branch_location: str = ""
    gps_address: Optional[str] = None
    branch_phone: str = ""
    branch_email: Optional[str] = None


@dataclass
class StoreImage:
    id: Optional[str] = None
    url: str = ""
    item_name: str = ""
    item_price: str = ""
    currency: Optional[str] = None
    available: bool = True


STORE_INFO_FIELDS = frozenset({
    "store_name",
    "description",
    "store_ownership",
    "production_scale",
    "product_sold",
    "belongs_to_group",
    "group_name",
})


@dataclass
class StoreProfile:
    """A seller's store. One per user."""
    id: Optional[str] = None
    user_id: str = ""
    store_name: str = ""
    description: Optional[str] = None
    production_scale: ProductionScale = ProductionScale.SMALL
    store_ownership: Optional[str] = None
    branches: list[Branch] = field(default_factory=list)
    store_images: list[StoreImage] = field(default_factory=list)
    product_sold: list[str] = field(default_factory=list)
    belongs_to_group: bool = False
    group_name: Optional[str] = None
    version: int = 0
    created_at: str = ""
    updated_at: str = ""

    def full_details(self) -> str:
        main = self.product_sold[0] if self.product_sold else "No main product"
        return f"{self.store_name} - {main}"

    def assign_missing_ids(self) -> None:
        """Give every branch and image without an id, or with an id already
        taken in its collection, a server id."""
        for collection in (self.branches, self.store_images):
            taken: set[str] = set()
            for element in collection:
                if is_blank(element.id) or element.id in taken:
                    element.id = new_id()
                taken.add(element.id)


def _with_id(element, element_id: Optional[str]):
    return replace(element, id=new_id() if is_blank(element_id) else element_id)


def _append_unique(collection: list, element) -> None:
    """Append element, keeping its id only when no sibling already has it."""
    taken = {e.id for e in collection}
    element_id = None if element.id in taken else element.id
    collection.append(_with_id(element, element_id))


def _replace_by_id(collection: list, element_id: str, element) -> bool:
    for position, existing in enumerate(collection):
        if existing.id == element_id:
            collection[position] = _with_id(element, element_id)
            return True
    return False


def _remove_by_id(collection: list, element_id: str) -> bool:
    before = len(collection)
    collection[:] = [e for e in collection if e.id != element_id]
    return len(collection) != before


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

class StoreCommand:
    """Base class for the store operation envelope variants.

    apply() mutates the profile in place and returns True when something
    changed. Matching nothing is a no-op, not an error.
    """
    operation: ClassVar[str]

    def apply(self, profile: StoreProfile) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class AddBranch(StoreCommand):
    operation = "addBranch"
    branch: Branch

    def apply(self, profile: StoreProfile) -> bool:
        _append_unique(profile.branches, self.branch)
        return True


@dataclass(frozen=True)
class UpdateBranch(StoreCommand):
    operation = "updateBranch"
    branch_id: str
    branch: Branch

    def apply(self, profile: StoreProfile) -> bool:
        return _replace_by_id(profile.branches, self.branch_id, self.branch)


@dataclass(frozen=True)
class DeleteBranch(StoreCommand):
    operation = "deleteBranch"
    branch_id: str

    def apply(self, profile: StoreProfile) -> bool:
        return _remove_by_id(profile.branches, self.branch_id)


@dataclass(frozen=True)
class AddImage(StoreCommand):
    operation = "addImage"
    image: StoreImage

    def apply(self, profile: StoreProfile) -> bool:
        _append_unique(profile.store_images, self.image)
        return True


@dataclass(frozen=True)
class UpdateImage(StoreCommand):
    operation = "updateImage"
    image_id: str
    image: StoreImage

    def apply(self, profile: StoreProfile) -> bool:
        return _replace_by_id(profile.store_images, self.image_id, self.image)


@dataclass(frozen=True)
class DeleteImage(StoreCommand):
    operation = "deleteImage"
    image_id: str

    def apply(self, profile: StoreProfile) -> bool:
        return _remove_by_id(profile.store_images, self.image_id)


@dataclass(frozen=True)
class UpdateImageAvailability(StoreCommand):
    operation = "updateImageAvailability"
    image_id: str
    available: bool

    def apply(self, profile: StoreProfile) -> bool:
        for image in profile.store_images:
            if image.id == self.image_id:
                image.available = self.available
                return True
        return False


@dataclass(frozen=True)
class UpdateStoreInfo(StoreCommand):
    operation = "updateStoreInfo"
    info: dict[str, Any]

    def __post_init__(self) -> None:
        unknown = set(self.info) - STORE_INFO_FIELDS
        if unknown:
            raise InvalidOperationError(
                f"Cannot update store field(s): {', '.join(sorted(unknown))}",
            )

    def apply(self, profile: StoreProfile) -> bool:
        for name, value in self.info.items():
            setattr(profile, name, value)
        return bool(self.info)
