"""Router for the services performed on salon clients."""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from .. import models, schemas
from ..dependencies import get_store, raise_http_error
from ..services import SalonStore

router = APIRouter()

STORE_ERRORS = (PermissionError, ValueError, RuntimeError)


def _get_service_or_404(store: SalonStore, service_id: str) -> models.Service:
    service = store.get_service(service_id)
    if service is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Service not found")
    return service


@router.get("/", response_model=list[schemas.ServiceRead])
def list_services(
    client_id: Optional[str] = Query(None, description="Filter by client"),
    store: SalonStore = Depends(get_store),
) -> list[models.Service]:
    """Return services, most recent first."""
    services = list(store.state.services)
    if client_id:
        services = [service for service in services if service.client_id == client_id]
    return sorted(services, key=lambda service: service.date, reverse=True)


@router.post("/", response_model=schemas.ServiceRead, status_code=status.HTTP_201_CREATED)
async def create_service(
    payload: schemas.ServiceCreate, store: SalonStore = Depends(get_store)
) -> models.Service:
    service = models.Service(**payload.model_dump())
    try:
        return await store.add_service(service)
    except STORE_ERRORS as exc:
        raise_http_error(exc)


@router.put("/{service_id}", response_model=schemas.ServiceRead)
async def update_service(
    service_id: str,
    payload: schemas.ServiceUpdate,
    store: SalonStore = Depends(get_store),
) -> models.Service:
    service = _get_service_or_404(store, service_id)
    changes = payload.model_dump(exclude_unset=True)
    try:
        return await store.update_service(replace(service, **changes))
    except STORE_ERRORS as exc:
        raise_http_error(exc)


@router.delete("/{service_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_service(service_id: str, store: SalonStore = Depends(get_store)) -> None:
    _get_service_or_404(store, service_id)
    try:
        await store.delete_service(service_id)
    except STORE_ERRORS as exc:
        raise_http_error(exc)
