"""Pydantic schemas for the authenticated identity."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class UserRead(BaseModel):
    """Identity of the signed-in salon account."""

    id: str
    email: str
    display_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class LogoutResponse(BaseModel):
    """Outcome of closing the session store."""

    closed: bool
