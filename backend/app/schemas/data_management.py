"""Pydantic schemas for CSV import and export."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ImportRequest(BaseModel):
    """CSV content sent as text, as read from the file picked by the user."""

    filename: Optional[str] = None
    content: str = Field(..., min_length=1)


class ImportStatusRead(BaseModel):
    """Progress counters and row errors collected during an import."""

    total: int = Field(..., ge=0)
    current: int = Field(..., ge=0)
    success: int = Field(..., ge=0)
    errors: list[str] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
