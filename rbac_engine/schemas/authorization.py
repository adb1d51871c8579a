"""Authorization endpoint schemas."""

from __future__ import annotations

from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from rbac_engine.models.container import ContainerKind
from rbac_engine.schemas.common import ContextPayload, PrincipalPayload


class AuthorizationRequest(PrincipalPayload):
    permission: str = Field(..., min_length=1, max_length=255)
    context: Optional[ContextPayload] = None
    guard_name: Optional[str] = Field(default=None, max_length=64)


class ContainerAuthorizationRequest(PrincipalPayload):
    permission: str = Field(..., min_length=1, max_length=255)
    container_kind: ContainerKind
    container_id: UUID
    check_hierarchy: bool = True
    guard_name: Optional[str] = Field(default=None, max_length=64)


class RoleCheckRequest(PrincipalPayload):
    role: str = Field(..., min_length=1, max_length=120)
    context: Optional[ContextPayload] = None
    guard_name: Optional[str] = Field(default=None, max_length=64)


class BatchAuthorizationRequest(PrincipalPayload):
    permissions: List[str] = Field(..., min_length=1)
    mode: Literal["any", "all"] = "any"
    context: Optional[ContextPayload] = None
    guard_name: Optional[str] = Field(default=None, max_length=64)


class AuthorizationResponse(BaseModel):
    authorized: bool
