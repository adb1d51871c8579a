"""Role schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class RoleBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    guard_name: Optional[str] = Field(default=None, max_length=64)
    label: Optional[str] = Field(default=None, max_length=255)


class RoleCreate(RoleBase):
    permissions: List[str] = Field(default_factory=list, description="Permission names granted by the role.")


class RoleUpdate(BaseModel):
    label: Optional[str] = Field(default=None, max_length=255)
    permissions: Optional[List[str]] = None


class RoleResponse(RoleBase):
    id: UUID
    guard_name: str
    permissions: List[str]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
