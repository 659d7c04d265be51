"""Endpoints describing and closing the authenticated session."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from .. import models, schemas
from ..dependencies import get_session_registry
from ..security import get_current_user
from ..services import SessionRegistry

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me", response_model=schemas.UserRead)
def read_current_user(user: models.UserProfile = Depends(get_current_user)) -> models.UserProfile:
    """Return the identity bound to the bearer token."""

    return user


@router.post("/logout", response_model=schemas.LogoutResponse)
def logout(
    user: models.UserProfile = Depends(get_current_user),
    registry: SessionRegistry = Depends(get_session_registry),
) -> schemas.LogoutResponse:
    """Tear down the in-memory session store of the signed-in user."""

    return schemas.LogoutResponse(closed=registry.close(user.id))
