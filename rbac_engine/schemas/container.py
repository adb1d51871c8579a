"""Organization/partner API schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from rbac_engine.schemas.common import PrincipalPayload


class ContainerBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    parent_id: Optional[UUID] = None
    type: Optional[str] = Field(default=None, max_length=64)
    description: Optional[str] = None
    is_business: bool = False


class ContainerCreate(ContainerBase):
    pass


class ContainerUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    parent_id: Optional[UUID] = None
    type: Optional[str] = Field(default=None, max_length=64)
    description: Optional[str] = None
    is_business: Optional[bool] = None

    model_config = ConfigDict(extra="forbid")


class ContainerResponse(ContainerBase):
    id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MembershipCreate(PrincipalPayload):
    position: Optional[str] = Field(default=None, max_length=255)


class MembershipResponse(PrincipalPayload):
    id: UUID
    container_id: UUID
    position: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
