"""Pydantic models for REST API request/response validation.

Wire names are camelCase; the models accept snake_case too. Request bodies
convert themselves into domain objects (to_entity / to_request / to_command)
so routers never touch raw payloads.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel

from domain.exceptions import InvalidOperationError
from domain.farm import (
    ArrayOperation,
    ArrayUpdate,
    FarmImage,
    FarmLocation,
    FarmProfile,
    FarmType,
    OwnershipStatus,
    ProductionScale,
    production_from_lists,
)
from domain.store import (
    AddBranch,
    AddImage,
    Branch,
    DeleteBranch,
    DeleteImage,
    StoreImage,
    StoreProfile,
    UpdateBranch,
    UpdateImage,
    UpdateImageAvailability,
    UpdateStoreInfo,
)
from domain.wishlist import Availability, NaturalKey, WishlistItem, WishlistItemType
from application.dto import FarmUpdateRequest, MergeFailure, MergeResult, WishlistItemUpdate

PHONE_PATTERN = r"^(\+\d{1,3}[- ]?)?\d{10,15}$"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StrictCamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid",
    )


def _stringify(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


def envelope(data: Any, **extra: Any) -> dict[str, Any]:
    """Standard response body: {"success": true, "data": ..., ...}."""
    return {"success": True, "data": data, **extra}


def dump(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(by_alias=True, mode="json")


# --- Farm profiles ---

class FarmLocationBody(CamelModel):
    region: str = Field(..., min_length=5, max_length=200)
    district: str = Field(..., min_length=5, max_length=200)

    def to_entity(self) -> FarmLocation:
        return FarmLocation(region=self.region, district=self.district)


class FarmImageBody(CamelModel):
    url: str = Field(..., min_length=1)
    file_name: str = ""

    def to_entity(self) -> FarmImage:
        return FarmImage(url=self.url, file_name=self.file_name)


class FarmCreateBody(StrictCamelModel):
    farm_name: str = Field(..., min_length=2, max_length=100)
    farm_location: FarmLocationBody
    nearby_landmarks: list[str] = []
    gps_address: Optional[str] = Field(None, max_length=200)
    farm_size: float = Field(..., ge=0, le=10000)
    production_scale: ProductionScale
    ownership_status: OwnershipStatus
    full_name: str = Field(..., min_length=2, max_length=50)
    contact_phone: str = Field(..., pattern=PHONE_PATTERN)
    contact_email: Optional[EmailStr] = None
    farm_type: FarmType
    crops_grown: list[str] = []
    livestock_produced: list[str] = []
    mixed_crops_grown: list[str] = []
    aquaculture_type: list[str] = []
    nursery_type: list[str] = []
    poultry_type: list[str] = []
    others_type: list[str] = []
    belongs_to_cooperative: bool = False
    cooperative_name: Optional[str] = None
    additional_notes: Optional[str] = Field(None, max_length=1000)
    farm_images: list[FarmImageBody] = []

    def to_entity(self) -> FarmProfile:
        """Build the profile; a populated list that does not match farmType is rejected."""
        lists = {
            "cropsGrown": self.crops_grown,
            "livestockProduced": self.livestock_produced,
            "mixedCropsGrown": self.mixed_crops_grown,
            "aquacultureType": self.aquaculture_type,
            "nurseryType": self.nursery_type,
            "poultryType": self.poultry_type,
            "othersType": self.others_type,
        }
        return FarmProfile(
            farm_name=self.farm_name,
            farm_location=self.farm_location.to_entity(),
            nearby_landmarks=list(self.nearby_landmarks),
            gps_address=self.gps_address,
            farm_size=self.farm_size,
            production_scale=self.production_scale,
            ownership_status=self.ownership_status,
            full_name=self.full_name,
            contact_phone=self.contact_phone,
            contact_email=self.contact_email,
            production=production_from_lists(self.farm_type, lists),
            belongs_to_cooperative=self.belongs_to_cooperative,
            cooperative_name=self.cooperative_name,
            additional_notes=self.additional_notes,
            farm_images=[img.to_entity() for img in self.farm_images],
        )


# Fields that may be omitted from a patch but never set to null.
_NON_NULLABLE = frozenset({
    "farm_name", "farm_location", "nearby_landmarks", "farm_size",
    "production_scale", "ownership_status", "full_name", "contact_phone",
    "belongs_to_cooperative", "farm_images",
})


class FarmBasicInfoBody(StrictCamelModel):
    """Scalar patch. Every field is optional; only the ones sent are applied."""
    farm_name: Optional[str] = Field(None, min_length=2, max_length=100)
    farm_location: Optional[FarmLocationBody] = None
    nearby_landmarks: Optional[list[str]] = None
    gps_address: Optional[str] = Field(None, max_length=200)
    farm_size: Optional[float] = Field(None, ge=0, le=10000)
    production_scale: Optional[ProductionScale] = None
    ownership_status: Optional[OwnershipStatus] = None
    full_name: Optional[str] = Field(None, min_length=2, max_length=50)
    contact_phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    contact_email: Optional[EmailStr] = None
    farm_type: Optional[FarmType] = None
    belongs_to_cooperative: Optional[bool] = None
    cooperative_name: Optional[str] = None
    additional_notes: Optional[str] = Field(None, max_length=1000)
    farm_images: Optional[list[FarmImageBody]] = None

    def to_patch(self) -> dict[str, Any]:
        patch: dict[str, Any] = {}
        for name in self.model_fields_set - {"farm_type"}:
            value = getattr(self, name)
            if value is None and name in _NON_NULLABLE:
                raise InvalidOperationError(
                    f"{to_camel(name)} cannot be null", field=to_camel(name),
                )
            if name == "farm_location":
                value = value.to_entity()
            elif name == "farm_images":
                value = [img.to_entity() for img in value]
            patch[name] = value
        return patch


class ArrayUpdateBody(CamelModel):
    field: str = Field(..., min_length=1)
    operation: ArrayOperation
    index: Optional[int] = None
    value: Optional[str] = None

    def to_domain(self) -> ArrayUpdate:
        return ArrayUpdate(
            field=self.field, operation=self.operation,
            index=self.index, value=self.value,
        )


class FarmUpdateBody(StrictCamelModel):
    basic_info: Optional[FarmBasicInfoBody] = None
    array_updates: list[ArrayUpdateBody] = []

    def to_request(self) -> FarmUpdateRequest:
        info = self.basic_info
        return FarmUpdateRequest(
            basic_info=info.to_patch() if info else {},
            farm_type=info.farm_type if info else None,
            array_updates=[u.to_domain() for u in self.array_updates],
        )


class FarmOut(CamelModel):
    id: str
    user_id: str
    farm_name: str
    farm_location: FarmLocationBody
    nearby_landmarks: list[str]
    gps_address: Optional[str]
    farm_size: float
    production_scale: ProductionScale
    ownership_status: OwnershipStatus
    full_name: str
    contact_phone: str
    contact_email: Optional[str]
    farm_type: FarmType
    crops_grown: list[str]
    livestock_produced: list[str]
    mixed_crops_grown: list[str]
    aquaculture_type: list[str]
    nursery_type: list[str]
    poultry_type: list[str]
    others_type: list[str]
    belongs_to_cooperative: bool
    cooperative_name: Optional[str]
    additional_notes: Optional[str]
    farm_images: list[FarmImageBody]
    full_details: str
    version: int
    created_at: str
    updated_at: str

    @classmethod
    def from_entity(cls, p: FarmProfile) -> FarmOut:
        # farm_location and farm_images are built without re-validating
        # lengths, stored documents may predate a constraint change.
        return cls(
            id=p.id,
            user_id=p.user_id,
            farm_name=p.farm_name,
            farm_location=FarmLocationBody.model_construct(
                region=p.farm_location.region, district=p.farm_location.district,
            ),
            nearby_landmarks=p.nearby_landmarks,
            gps_address=p.gps_address,
            farm_size=p.farm_size,
            production_scale=p.production_scale,
            ownership_status=p.ownership_status,
            full_name=p.full_name,
            contact_phone=p.contact_phone,
            contact_email=p.contact_email,
            farm_type=p.farm_type,
            belongs_to_cooperative=p.belongs_to_cooperative,
            cooperative_name=p.cooperative_name,
            additional_notes=p.additional_notes,
            farm_images=[
                FarmImageBody.model_construct(url=i.url, file_name=i.file_name)
                for i in p.farm_images
            ],
            full_details=p.full_details(),
            version=p.version,
            created_at=p.created_at,
            updated_at=p.updated_at,
            **p.production_lists(),
        )


# --- Store profiles ---

class BranchBody(CamelModel):
    id: Optional[str] = None
    branch_name: str = Field(..., min_length=2, max_length=100)
    branch_location: str = Field(..., min_length=2, max_length=200)
    gps_address: Optional[str] = Field(None, max_length=200)
    branch_phone: str = Field(..., pattern=PHONE_PATTERN)
    branch_email: Optional[EmailStr] = None

    def to_entity(self) -> Branch:
        return Branch(
            id=self.id,
            branch_name=self.branch_name,
            branch_location=self.branch_location,
            gps_address=self.gps_address,
            branch_phone=self.branch_phone,
            branch_email=self.branch_email,
        )


class StoreImageBody(CamelModel):
    id: Optional[str] = None
    url: str = Field(..., min_length=1)
    item_name: str = Field(..., min_length=1)
    item_price: str = Field(..., min_length=1)
    currency: Optional[str] = None
    available: bool = True

    @field_validator("item_price", mode="before")
    @classmethod
    def _price_as_text(cls, value: Any) -> Any:
        return _stringify(value)

    def to_entity(self) -> StoreImage:
        return StoreImage(
            id=self.id,
            url=self.url,
            item_name=self.item_name,
            item_price=self.item_price,
            currency=self.currency,
            available=self.available,
        )


class StoreCreateBody(StrictCamelModel):
    store_name: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    production_scale: ProductionScale = ProductionScale.SMALL
    store_ownership: Optional[str] = None
    branches: list[BranchBody] = []
    store_images: list[StoreImageBody] = []
    product_sold: list[str] = []
    belongs_to_group: bool = False
    group_name: Optional[str] = None

    def to_entity(self) -> StoreProfile:
        return StoreProfile(
            store_name=self.store_name,
            description=self.description,
            production_scale=self.production_scale,
            store_ownership=self.store_ownership,
            branches=[b.to_entity() for b in self.branches],
            store_images=[i.to_entity() for i in self.store_images],
            product_sold=list(self.product_sold),
            belongs_to_group=self.belongs_to_group,
            group_name=self.group_name,
        )


class StoreInfoBody(StrictCamelModel):
    store_name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    production_scale: Optional[ProductionScale] = None
    store_ownership: Optional[str] = None
    product_sold: Optional[list[str]] = None
    belongs_to_group: Optional[bool] = None
    group_name: Optional[str] = None

    def to_info(self) -> dict[str, Any]:
        info = {name: getattr(self, name) for name in self.model_fields_set}
        for name in ("store_name", "production_scale", "product_sold", "belongs_to_group"):
            if name in info and info[name] is None:
                raise InvalidOperationError(
                    f"{to_camel(name)} cannot be null", field=to_camel(name),
                )
        return info


class AddBranchOp(CamelModel):
    operation: Literal["addBranch"]
    branches: BranchBody

    def to_command(self) -> AddBranch:
        return AddBranch(branch=self.branches.to_entity())


class UpdateBranchOp(CamelModel):
    operation: Literal["updateBranch"]
    branch_id: str = Field(..., min_length=1)
    branches: BranchBody

    def to_command(self) -> UpdateBranch:
        return UpdateBranch(branch_id=self.branch_id, branch=self.branches.to_entity())


class DeleteBranchOp(CamelModel):
    operation: Literal["deleteBranch"]
    branch_id: str = Field(..., min_length=1)

    def to_command(self) -> DeleteBranch:
        return DeleteBranch(branch_id=self.branch_id)


class AddImageOp(CamelModel):
    operation: Literal["addImage"]
    store_images: StoreImageBody

    def to_command(self) -> AddImage:
        return AddImage(image=self.store_images.to_entity())


class UpdateImageOp(CamelModel):
    operation: Literal["updateImage"]
    image_id: str = Field(..., min_length=1)
    store_images: StoreImageBody

    def to_command(self) -> UpdateImage:
        return UpdateImage(image_id=self.image_id, image=self.store_images.to_entity())


class DeleteImageOp(CamelModel):
    operation: Literal["deleteImage"]
    image_id: str = Field(..., min_length=1)

    def to_command(self) -> DeleteImage:
        return DeleteImage(image_id=self.image_id)


class UpdateImageAvailabilityOp(CamelModel):
    operation: Literal["updateImageAvailability"]
    image_id: str = Field(..., min_length=1)
    available: bool

    def to_command(self) -> UpdateImageAvailability:
        return UpdateImageAvailability(image_id=self.image_id, available=self.available)


class UpdateStoreInfoOp(CamelModel):
    operation: Literal["updateStoreInfo"]
    store_info: StoreInfoBody

    def to_command(self) -> UpdateStoreInfo:
        return UpdateStoreInfo(info=self.store_info.to_info())


StoreOperationBody = Annotated[
    Union[
        AddBranchOp,
        UpdateBranchOp,
        DeleteBranchOp,
        AddImageOp,
        UpdateImageOp,
        DeleteImageOp,
        UpdateImageAvailabilityOp,
        UpdateStoreInfoOp,
    ],
    Field(discriminator="operation"),
]

store_operation_adapter = TypeAdapter(StoreOperationBody)


class StoreOut(CamelModel):
    id: str
    user_id: str
    store_name: str
    description: Optional[str]
    production_scale: ProductionScale
    store_ownership: Optional[str]
    branches: list[dict[str, Any]]
    store_images: list[dict[str, Any]]
    product_sold: list[str]
    belongs_to_group: bool
    group_name: Optional[str]
    full_details: str
    version: int
    created_at: str
    updated_at: str

    @classmethod
    def from_entity(cls, p: StoreProfile) -> StoreOut:
        return cls(
            id=p.id,
            user_id=p.user_id,
            store_name=p.store_name,
            description=p.description,
            production_scale=p.production_scale,
            store_ownership=p.store_ownership,
            branches=[
                {
                    "id": b.id,
                    "branchName": b.branch_name,
                    "branchLocation": b.branch_location,
                    "gpsAddress": b.gps_address,
                    "branchPhone": b.branch_phone,
                    "branchEmail": b.branch_email,
                }
                for b in p.branches
            ],
            store_images=[
                {
                    "id": i.id,
                    "url": i.url,
                    "itemName": i.item_name,
                    "itemPrice": i.item_price,
                    "currency": i.currency,
                    "available": i.available,
                }
                for i in p.store_images
            ],
            product_sold=p.product_sold,
            belongs_to_group=p.belongs_to_group,
            group_name=p.group_name,
            full_details=p.full_details(),
            version=p.version,
            created_at=p.created_at,
            updated_at=p.updated_at,
        )


# --- Wishlist ---

class AvailabilityBody(CamelModel):
    status: Optional[bool] = None
    available_quantity: Optional[str] = None
    unit: Optional[str] = None

    @field_validator("available_quantity", mode="before")
    @classmethod
    def _quantity_as_text(cls, value: Any) -> Any:
        return _stringify(value)

    def to_entity(self) -> Availability:
        return Availability(
            status=self.status,
            available_quantity=self.available_quantity,
            unit=self.unit,
        )


class WishlistItemBody(CamelModel):
    item_id: str = Field(..., min_length=1)
    item_type: WishlistItemType
    product_name: str = Field(..., min_length=1, max_length=200)
    product_image: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = None
    in_stock: bool = True
    availability: Optional[AvailabilityBody] = None
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator("item_id", mode="before")
    @classmethod
    def _item_id_as_text(cls, value: Any) -> Any:
        return _stringify(value)

    def to_entity(self) -> WishlistItem:
        return WishlistItem(
            item_id=self.item_id,
            item_type=self.item_type,
            product_name=self.product_name,
            product_image=self.product_image,
            price=self.price,
            currency=self.currency,
            in_stock=self.in_stock,
            availability=self.availability.to_entity() if self.availability else None,
            notes=self.notes,
        )


class WishlistItemUpdateBody(StrictCamelModel):
    notes: Optional[str] = Field(None, max_length=500)
    in_stock: Optional[bool] = None
    availability: Optional[AvailabilityBody] = None

    def to_update(self) -> WishlistItemUpdate:
        return WishlistItemUpdate(
            notes=self.notes,
            in_stock=self.in_stock,
            availability=self.availability.to_entity() if self.availability else None,
        )


class GuestWishlistItemBody(WishlistItemBody):
    """A guest item as kept on the device; its local guest id is ignored."""
    added_at: Optional[str] = None

    def to_entity(self) -> WishlistItem:
        item = super().to_entity()
        if self.added_at:
            item.added_at = self.added_at
        return item


def _describe(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'item'}: {err['msg']}"
        for err in exc.errors()
    )


def _merge_failure(raw: Any, reason: str) -> MergeFailure:
    fields = raw if isinstance(raw, dict) else {}
    item_id = fields.get("itemId", fields.get("item_id"))
    item_type = fields.get("itemType", fields.get("item_type"))
    return MergeFailure(
        item_id="" if item_id is None else str(item_id),
        item_type="" if item_type is None else str(item_type),
        reason=reason,
    )


class WishlistMergeBody(CamelModel):
    """Guest items are accepted loosely and validated one by one, with the
    same rules as POST /wishlist, so a bad item is reported, not fatal."""
    items: list[Any] = []

    def parse_items(self) -> tuple[list[WishlistItem], list[MergeFailure]]:
        items: list[WishlistItem] = []
        rejected: list[MergeFailure] = []
        for raw in self.items:
            try:
                items.append(GuestWishlistItemBody.model_validate(raw).to_entity())
            except ValidationError as exc:
                rejected.append(_merge_failure(raw, _describe(exc)))
            except InvalidOperationError as exc:
                rejected.append(_merge_failure(raw, str(exc)))
        return items, rejected


class WishlistItemOut(CamelModel):
    id: Optional[str]
    item_id: str
    item_type: WishlistItemType
    product_name: str
    product_image: Optional[str]
    price: Optional[float]
    currency: Optional[str]
    added_at: str
    in_stock: bool
    availability: Optional[AvailabilityBody]
    notes: Optional[str]

    @classmethod
    def from_entity(cls, i: WishlistItem) -> WishlistItemOut:
        availability = None
        if i.availability is not None:
            availability = AvailabilityBody(
                status=i.availability.status,
                available_quantity=i.availability.available_quantity,
                unit=i.availability.unit,
            )
        return cls(
            id=i.id,
            item_id=i.item_id,
            item_type=i.item_type,
            product_name=i.product_name,
            product_image=i.product_image,
            price=i.price,
            currency=i.currency,
            added_at=i.added_at,
            in_stock=i.in_stock,
            availability=availability,
            notes=i.notes,
        )


class SummaryOut(CamelModel):
    total_items: int
    farm_products: int
    store_products: int


class WishlistOut(CamelModel):
    id: Optional[str]
    user_id: str
    items: list[WishlistItemOut]
    created_at: str
    updated_at: str


class NaturalKeyOut(CamelModel):
    item_id: str
    item_type: WishlistItemType

    @classmethod
    def from_key(cls, key: NaturalKey) -> NaturalKeyOut:
        return cls(item_id=key.item_id, item_type=key.item_type)


class MergeFailureOut(CamelModel):
    item_id: str
    item_type: str
    reason: str


class MergeOut(CamelModel):
    added: list[WishlistItemOut]
    already_present: list[NaturalKeyOut]
    failed: list[MergeFailureOut]

    @classmethod
    def from_result(cls, result: MergeResult) -> MergeOut:
        return cls(
            added=[WishlistItemOut.from_entity(i) for i in result.added],
            already_present=[NaturalKeyOut.from_key(k) for k in result.already_present],
            failed=[
                MergeFailureOut(item_id=f.item_id, item_type=f.item_type, reason=f.reason)
                for f in result.failed
            ],
        )
