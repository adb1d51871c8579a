"""Role and permission assignment schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from rbac_engine.models.types import as_utc
from rbac_engine.schemas.common import ContextPayload, PrincipalPayload


class _GrantBase(PrincipalPayload):
    context: Optional[ContextPayload] = None
    guard_name: Optional[str] = Field(default=None, max_length=64)


class _WindowMixin(BaseModel):
    activated_at: Optional[datetime] = None
    expired_at: Optional[datetime] = None

    @model_validator(mode="after")
    def check_window(self):
        if self.activated_at and self.expired_at and as_utc(self.expired_at) < as_utc(self.activated_at):
            raise ValueError("expired_at must not be earlier than activated_at")
        return self


class RoleAssignmentCreate(_WindowMixin, _GrantBase):
    role: str = Field(..., min_length=1, max_length=120, description="Role name or id.")


class RoleRevokeRequest(_GrantBase):
    role: str = Field(..., min_length=1, max_length=120, description="Role name or id.")


class PermissionAssignmentCreate(_WindowMixin, _GrantBase):
    permission: str = Field(..., min_length=1, max_length=255, description="Permission name or id.")


class PermissionRevokeRequest(_GrantBase):
    permission: str = Field(..., min_length=1, max_length=255, description="Permission name or id.")


class RevokeResponse(BaseModel):
    status: str = "revoked"
    removed: int


class AssignmentResponse(PrincipalPayload):
    id: UUID
    context: Optional[ContextPayload] = None
    activated_at: Optional[datetime] = None
    expired_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RoleAssignmentResponse(AssignmentResponse):
    role_id: UUID
    role: str


class PermissionAssignmentResponse(AssignmentResponse):
    permission_id: UUID
    permission: str
