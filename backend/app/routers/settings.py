"""Router exposing the salon settings record."""

from __future__ import annotations

from dataclasses import replace

from fastapi import APIRouter, Depends, HTTPException, status

from .. import models, schemas
from ..dependencies import get_store, raise_http_error
from ..services import SalonStore

router = APIRouter()


@router.get("/", response_model=schemas.SettingsRead)
def read_settings(store: SalonStore = Depends(get_store)) -> models.SalonSettings:
    settings = store.state.settings
    if settings is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=store.error or "Settings are not loaded",
        )
    return settings


@router.put("/", response_model=schemas.SettingsRead)
async def update_settings(
    payload: schemas.SettingsUpdate, store: SalonStore = Depends(get_store)
) -> models.SalonSettings:
    current = store.state.settings
    if current is None:
        settings = models.SalonSettings(**payload.model_dump())
    else:
        settings = replace(current, **payload.model_dump())
    try:
        return await store.update_settings(settings)
    except (PermissionError, ValueError, RuntimeError) as exc:
        raise_http_error(exc)
