"""Pydantic schemas for API payloads."""

from rbac_engine.schemas.assignment import (
    PermissionAssignmentCreate,
    PermissionAssignmentResponse,
    PermissionRevokeRequest,
    RevokeResponse,
    RoleAssignmentCreate,
    RoleAssignmentResponse,
    RoleRevokeRequest,
)
from rbac_engine.schemas.audit import AuditLogResponse
from rbac_engine.schemas.authorization import (
    AuthorizationRequest,
    AuthorizationResponse,
    BatchAuthorizationRequest,
    ContainerAuthorizationRequest,
    RoleCheckRequest,
)
from rbac_engine.schemas.common import ContextPayload, PrincipalPayload
from rbac_engine.schemas.container import (
    ContainerCreate,
    ContainerResponse,
    ContainerUpdate,
    MembershipCreate,
    MembershipResponse,
)
from rbac_engine.schemas.permission import PermissionCreate, PermissionResponse
from rbac_engine.schemas.role import RoleCreate, RoleResponse, RoleUpdate

__all__ = [
    "AuditLogResponse",
    "AuthorizationRequest",
    "AuthorizationResponse",
    "BatchAuthorizationRequest",
    "ContainerAuthorizationRequest",
    "ContainerCreate",
    "ContainerResponse",
    "ContainerUpdate",
    "ContextPayload",
    "MembershipCreate",
    "MembershipResponse",
    "PermissionAssignmentCreate",
    "PermissionAssignmentResponse",
    "PermissionCreate",
    "PermissionResponse",
    "PermissionRevokeRequest",
    "PrincipalPayload",
    "RevokeResponse",
    "RoleAssignmentCreate",
    "RoleAssignmentResponse",
    "RoleCheckRequest",
    "RoleCreate",
    "RoleResponse",
    "RoleRevokeRequest",
    "RoleUpdate",
]
