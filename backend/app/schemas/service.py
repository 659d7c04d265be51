"""Pydantic schemas for services performed on clients."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.salon import ServiceType


class ServiceBase(BaseModel):
    """Shared fields for service creation and reads."""

    client_id: str
    types: list[ServiceType]
    price: float
    date: str = Field(..., description="Date the service was performed (YYYY-MM-DD)")
    duration: Optional[int] = Field(default=None, description="Duration in minutes")
    products: Optional[str] = None
    notes: Optional[str] = None


class ServiceCreate(ServiceBase):
    """Schema used when recording a service."""


class ServiceUpdate(BaseModel):
    """Schema used when updating a service; omitted fields are kept."""

    client_id: Optional[str] = None
    types: Optional[list[ServiceType]] = None
    price: Optional[float] = None
    date: Optional[str] = None
    duration: Optional[int] = None
    products: Optional[str] = None
    notes: Optional[str] = None


class ServiceRead(ServiceBase):
    """Schema used when returning service data."""

    id: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
