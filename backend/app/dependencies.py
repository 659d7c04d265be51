"""FastAPI dependencies wiring routers to the session store."""

from __future__ import annotations

from typing import Any, NoReturn

from fastapi import Depends, HTTPException, Request, status

from .models import UserProfile
from .security import get_current_user
from .services import (
    AuthenticationRequiredError,
    DocumentNotFoundError,
    DocumentStoreGateway,
    GatewayError,
    PersistenceGateway,
    RecordValidationError,
    SalonStore,
    SessionRegistry,
)


def get_gateway() -> PersistenceGateway:
    """Return the document store gateway used for new sessions."""

    return DocumentStoreGateway()


def get_session_registry(request: Request) -> SessionRegistry:
    registry = getattr(request.app.state, "sessions", None)
    if registry is None:
        registry = SessionRegistry()
        request.app.state.sessions = registry
    return registry


async def get_store(
    user: UserProfile = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway),
    registry: SessionRegistry = Depends(get_session_registry),
) -> SalonStore:
    """Return the loaded store of the signed-in user, opening it if needed."""

    return await registry.open(user, gateway)


def raise_http_error(exc: Exception) -> NoReturn:
    """Translate a store failure into the matching HTTP error."""

    detail: Any = str(exc) or exc.__class__.__name__
    if isinstance(exc, AuthenticationRequiredError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail) from exc
    if isinstance(exc, DocumentNotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail) from exc
    if isinstance(exc, RecordValidationError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail) from exc
    if isinstance(exc, GatewayError):
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail) from exc
    raise exc
