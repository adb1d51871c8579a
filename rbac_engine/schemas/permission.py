"""Permission schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class PermissionCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    guard_name: Optional[str] = Field(default=None, max_length=64)
    label: Optional[str] = Field(default=None, max_length=255)


class PermissionResponse(PermissionCreate):
    id: UUID
    guard_name: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
