"""Wishlist endpoints for signed-in users.

Guest wishlists never reach the server until sign-in, when the client posts
them to /wishlist/merge.
"""

from fastapi import APIRouter, Depends

from factory import ServiceFactory
from domain.exceptions import DomainError
from domain.wishlist import NaturalKey, WishlistItemType
from application.context import RequestContext
from application.dto import WishlistView
from adapters.rest.dependencies import get_factory, get_current_user, raise_http
from adapters.rest.schemas import (
    MergeOut,
    SummaryOut,
    WishlistItemBody,
    WishlistItemOut,
    WishlistItemUpdateBody,
    WishlistMergeBody,
    WishlistOut,
    dump,
    envelope,
)

router = APIRouter(prefix="/wishlist", tags=["wishlist"])


def _summary(view_or_summary) -> dict:
    summary = getattr(view_or_summary, "summary", view_or_summary)
    return dump(SummaryOut(
        total_items=summary.total_items,
        farm_products=summary.farm_products,
        store_products=summary.store_products,
    ))


def _view_body(view: WishlistView, **extra) -> dict:
    wishlist = view.wishlist
    data = WishlistOut(
        id=wishlist.id,
        user_id=wishlist.user_id,
        items=[WishlistItemOut.from_entity(i) for i in wishlist.items],
        created_at=wishlist.created_at,
        updated_at=wishlist.updated_at,
    )
    return envelope(dump(data), summary=_summary(view), **extra)


@router.get("")
async def get_wishlist(
    ctx: RequestContext = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    service = factory.create_wishlist_service()
    try:
        view = await service.get_wishlist(ctx)
    except DomainError as exc:
        raise_http(exc)
    return _view_body(view)


@router.get("/summary")
async def get_summary(
    ctx: RequestContext = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    service = factory.create_wishlist_service()
    try:
        summary = await service.get_summary(ctx)
    except DomainError as exc:
        raise_http(exc)
    return envelope(_summary(summary))


@router.post("", status_code=201)
async def add_item(
    body: WishlistItemBody,
    ctx: RequestContext = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    service = factory.create_wishlist_service()
    try:
        view = await service.add_item(ctx, body.to_entity())
    except DomainError as exc:
        raise_http(exc)
    return _view_body(view, message="Item added to wishlist")


@router.delete("")
async def clear_wishlist(
    ctx: RequestContext = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    service = factory.create_wishlist_service()
    try:
        view = await service.clear(ctx)
    except DomainError as exc:
        raise_http(exc)
    return _view_body(view, message="Wishlist cleared")


@router.post("/merge")
async def merge_guest_wishlist(
    body: WishlistMergeBody,
    ctx: RequestContext = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    service = factory.create_wishlist_service()
    try:
        items, rejected = body.parse_items()
        result = await service.merge_guest_items(ctx, items, rejected)
        summary = await service.get_summary(ctx)
    except DomainError as exc:
        raise_http(exc)
    return envelope(dump(MergeOut.from_result(result)), summary=_summary(summary))


@router.get("/items/{item_id}")
async def get_item(
    item_id: str,
    ctx: RequestContext = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    service = factory.create_wishlist_service()
    try:
        item = await service.get_item(ctx, item_id)
    except DomainError as exc:
        raise_http(exc)
    return envelope(dump(WishlistItemOut.from_entity(item)))


@router.put("/items/{item_id}")
async def update_item(
    item_id: str,
    body: WishlistItemUpdateBody,
    ctx: RequestContext = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    service = factory.create_wishlist_service()
    try:
        item = await service.update_item(ctx, item_id, body.to_update())
    except DomainError as exc:
        raise_http(exc)
    return envelope(dump(WishlistItemOut.from_entity(item)))


@router.delete("/items/{item_id}")
async def remove_item_by_id(
    item_id: str,
    ctx: RequestContext = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    service = factory.create_wishlist_service()
    try:
        view = await service.remove_item_by_id(ctx, item_id)
    except DomainError as exc:
        raise_http(exc)
    return _view_body(view, message="Item removed from wishlist")


@router.delete("/items/{item_type}/{item_id}")
async def remove_item(
    item_type: WishlistItemType,
    item_id: str,
    ctx: RequestContext = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    service = factory.create_wishlist_service()
    try:
        view = await service.remove_item(ctx, NaturalKey(item_id, item_type))
    except DomainError as exc:
        raise_http(exc)
    return _view_body(view, message="Item removed from wishlist")
