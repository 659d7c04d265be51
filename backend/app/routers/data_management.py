"""CSV import and export endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse

from .. import schemas
from ..dependencies import get_store
from ..services import SalonStore, data_management

router = APIRouter()


def _csv_attachment(content: str, filename: str) -> StreamingResponse:
    headers = {
        "Content-Disposition": f"attachment; filename={filename}",
        "Cache-Control": "no-store",
    }
    return StreamingResponse(
        iter([content]), media_type="text/csv; charset=utf-8", headers=headers
    )


def _ensure_content(payload: schemas.ImportRequest) -> str:
    if not payload.content.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="The file is empty.")
    return payload.content


@router.post("/clients/import", response_model=schemas.ImportStatusRead)
async def import_clients(
    payload: schemas.ImportRequest, store: SalonStore = Depends(get_store)
) -> data_management.ImportStatus:
    """Create clients from CSV content; rows that fail are reported, not fatal."""
    return await data_management.import_clients(store, _ensure_content(payload))


@router.post("/services/import", response_model=schemas.ImportStatusRead)
async def import_services(
    payload: schemas.ImportRequest, store: SalonStore = Depends(get_store)
) -> data_management.ImportStatus:
    """Create services from CSV content; rows that fail are reported, not fatal."""
    return await data_management.import_services(store, _ensure_content(payload))


@router.get("/clients/export", response_class=StreamingResponse)
def export_clients(store: SalonStore = Depends(get_store)) -> StreamingResponse:
    return _csv_attachment(data_management.export_clients(store.state.clients), "clients.csv")


@router.get("/services/export", response_class=StreamingResponse)
def export_services(store: SalonStore = Depends(get_store)) -> StreamingResponse:
    return _csv_attachment(
        data_management.export_services(store.state.services), "prestations.csv"
    )
