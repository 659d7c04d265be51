"""Pydantic schemas for the salon settings record."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class SettingsUpdate(BaseModel):
    """Payload accepted when saving the salon settings."""

    name: str
    address: str = ""
    city: str = ""
    postal_code: str = ""
    phone: str = ""


class SettingsRead(SettingsUpdate):
    """Settings as stored for the signed-in account."""

    id: Optional[str] = None
    updated_at: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
