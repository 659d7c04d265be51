"""Router containing CRUD operations for salon clients."""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from .. import models, schemas
from ..dependencies import get_store, raise_http_error
from ..services import SalonStore

router = APIRouter()

STORE_ERRORS = (PermissionError, ValueError, RuntimeError)


def _get_client_or_404(store: SalonStore, client_id: str) -> models.Client:
    client = store.get_client(client_id)
    if client is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")
    return client


@router.get("/", response_model=list[schemas.ClientRead])
def list_clients(
    search: Optional[str] = Query(None, description="Case-insensitive search by client name"),
    favorites_only: bool = Query(False, description="Only return favourite clients"),
    store: SalonStore = Depends(get_store),
) -> list[models.Client]:
    """Return the clients of the signed-in salon sorted by name."""
    clients = list(store.state.clients)
    normalized_search = search.strip().lower() if search else None
    if normalized_search:
        clients = [client for client in clients if normalized_search in client.name.lower()]
    if favorites_only:
        clients = [client for client in clients if client.is_favorite]
    return sorted(clients, key=lambda client: client.name.lower())


@router.get("/{client_id}", response_model=schemas.ClientDetail)
def get_client(client_id: str, store: SalonStore = Depends(get_store)) -> schemas.ClientDetail:
    """Retrieve a client together with its service history."""
    client = _get_client_or_404(store, client_id)
    return schemas.ClientDetail(
        **schemas.ClientRead.model_validate(client).model_dump(),
        services=[
            schemas.ServiceRead.model_validate(service)
            for service in store.services_for_client(client_id)
        ],
    )


@router.post("/", response_model=schemas.ClientRead, status_code=status.HTTP_201_CREATED)
async def create_client(
    client_in: schemas.ClientCreate,
    store: SalonStore = Depends(get_store),
) -> models.Client:
    """Create a new client record."""
    client = models.Client(**client_in.model_dump())
    try:
        return await store.add_client(client)
    except STORE_ERRORS as exc:
        raise_http_error(exc)


@router.put("/{client_id}", response_model=schemas.ClientRead)
async def update_client(
    client_id: str,
    client_in: schemas.ClientUpdate,
    store: SalonStore = Depends(get_store),
) -> models.Client:
    """Update a client's information; the last visit stays derived."""
    client = _get_client_or_404(store, client_id)
    changes = client_in.model_dump(exclude_unset=True)
    try:
        return await store.update_client(replace(client, **changes))
    except STORE_ERRORS as exc:
        raise_http_error(exc)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(client_id: str, store: SalonStore = Depends(get_store)) -> None:
    """Delete a client; its services are kept."""
    _get_client_or_404(store, client_id)
    try:
        await store.delete_client(client_id)
    except STORE_ERRORS as exc:
        raise_http_error(exc)


@router.post("/{client_id}/favorite", response_model=schemas.ClientRead)
async def toggle_favorite(client_id: str, store: SalonStore = Depends(get_store)) -> models.Client:
    """Flip the favourite flag of a client."""
    _get_client_or_404(store, client_id)
    try:
        return await store.toggle_favorite(client_id)
    except STORE_ERRORS as exc:
        raise_http_error(exc)
