"""Pydantic schemas for salon clients."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.salon import ClientType
from .service import ServiceRead


class ClientBase(BaseModel):
    """Attributes shared by create and read operations."""

    name: str
    type: ClientType
    notes: Optional[str] = None


class ClientCreate(ClientBase):
    """Schema used when creating a client."""

    is_favorite: bool = False


class ClientUpdate(BaseModel):
    """Schema used when updating an existing client; omitted fields are kept."""

    name: Optional[str] = None
    type: Optional[ClientType] = None
    notes: Optional[str] = None
    is_favorite: Optional[bool] = None


class ClientRead(ClientBase):
    """Schema used when returning client data."""

    id: str
    last_visit: str = Field(default="", description="Most recent service date (YYYY-MM-DD)")
    is_favorite: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ClientDetail(ClientRead):
    """Client data together with its service history, most recent first."""

    services: list[ServiceRead] = Field(default_factory=list)
