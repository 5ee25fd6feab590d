"""Store profile endpoints.

PUT /stores/me takes the operation envelope: one {"operation": ...} object
whose remaining fields depend on the operation.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from factory import ServiceFactory
from domain.exceptions import DomainError
from application.context import RequestContext
from adapters.rest.dependencies import get_factory, get_current_user, raise_http
from adapters.rest.schemas import (
    StoreCreateBody,
    StoreOut,
    dump,
    envelope,
    store_operation_adapter,
)

router = APIRouter(prefix="/stores", tags=["stores"])


@router.post("/me", status_code=201)
async def create_store(
    body: StoreCreateBody,
    ctx: RequestContext = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    service = factory.create_store_profile_service()
    try:
        profile = await service.create_store(ctx, body.to_entity())
    except DomainError as exc:
        raise_http(exc)
    return envelope(dump(StoreOut.from_entity(profile)))


@router.get("/me")
async def get_my_store(
    ctx: RequestContext = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    service = factory.create_store_profile_service()
    try:
        profile = await service.get_my_store(ctx)
    except DomainError as exc:
        raise_http(exc)
    return envelope(dump(StoreOut.from_entity(profile)))


@router.get("/user/{user_id}")
async def get_store_for_user(
    user_id: str,
    factory: ServiceFactory = Depends(get_factory),
):
    service = factory.create_store_profile_service()
    try:
        profile = await service.get_store_for_user(user_id)
    except DomainError as exc:
        raise_http(exc)
    return envelope(dump(StoreOut.from_entity(profile)))


@router.put("/me")
async def apply_store_operation(
    payload: dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    try:
        operation = store_operation_adapter.validate_python(payload)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors())

    service = factory.create_store_profile_service()
    try:
        profile = await service.apply_operation(ctx, operation.to_command())
    except DomainError as exc:
        raise_http(exc)
    return envelope(dump(StoreOut.from_entity(profile)))


@router.delete("/me")
async def delete_store(
    ctx: RequestContext = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    service = factory.create_store_profile_service()
    try:
        await service.delete_store(ctx)
    except DomainError as exc:
        raise_http(exc)
    return envelope(None, message="Store profile deleted")
