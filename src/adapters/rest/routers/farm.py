"""Farm profile endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from factory import ServiceFactory
from domain.exceptions import DomainError
from domain.farm import FarmType, ProductionScale
from application.context import RequestContext
from adapters.rest.dependencies import get_factory, get_current_user, raise_http
from adapters.rest.schemas import FarmCreateBody, FarmOut, FarmUpdateBody, dump, envelope

router = APIRouter(prefix="/farms", tags=["farms"])


@router.post("", status_code=201)
async def create_farm(
    body: FarmCreateBody,
    ctx: RequestContext = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    service = factory.create_farm_profile_service()
    try:
        profile = await service.create_farm(ctx, body.to_entity())
    except DomainError as exc:
        raise_http(exc)
    return envelope(dump(FarmOut.from_entity(profile)))


@router.get("")
async def list_farms(
    user_id: Optional[str] = Query(None, alias="userId"),
    farm_type: Optional[FarmType] = Query(None, alias="farmType"),
    production_scale: Optional[ProductionScale] = Query(None, alias="productionScale"),
    limit: Optional[int] = Query(None, ge=1, le=500),
    factory: ServiceFactory = Depends(get_factory),
):
    service = factory.create_farm_profile_service()
    try:
        farms = await service.list_farms(
            user_id=user_id,
            farm_type=farm_type,
            production_scale=production_scale,
            limit=limit,
        )
    except DomainError as exc:
        raise_http(exc)
    return envelope([dump(FarmOut.from_entity(f)) for f in farms], count=len(farms))


@router.get("/me")
async def list_my_farms(
    ctx: RequestContext = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    service = factory.create_farm_profile_service()
    try:
        farms = await service.list_my_farms(ctx)
    except DomainError as exc:
        raise_http(exc)
    return envelope([dump(FarmOut.from_entity(f)) for f in farms], count=len(farms))


@router.get("/{farm_id}")
async def get_farm(
    farm_id: str,
    ctx: RequestContext = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    service = factory.create_farm_profile_service()
    try:
        profile = await service.get_farm(ctx, farm_id)
    except DomainError as exc:
        raise_http(exc)
    return envelope(dump(FarmOut.from_entity(profile)))


@router.put("/{farm_id}")
async def update_farm(
    farm_id: str,
    body: FarmUpdateBody,
    ctx: RequestContext = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    service = factory.create_farm_profile_service()
    try:
        profile = await service.update_farm(ctx, farm_id, body.to_request())
    except DomainError as exc:
        raise_http(exc)
    return envelope(dump(FarmOut.from_entity(profile)))


@router.delete("/{farm_id}")
async def delete_farm(
    farm_id: str,
    ctx: RequestContext = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    service = factory.create_farm_profile_service()
    try:
        await service.delete_farm(ctx, farm_id)
    except DomainError as exc:
        raise_http(exc)
    return envelope(None, message="Farm profile deleted")
