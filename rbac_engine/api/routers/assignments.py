"""Role and permission grant endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Header, Query, status

from rbac_engine.api.dependencies import get_assignment_service
from rbac_engine.models.permission_assignment import PermissionAssignment
from rbac_engine.models.refs import ContextRef, PrincipalRef
from rbac_engine.models.role_assignment import RoleAssignment
from rbac_engine.schemas.assignment import (
    PermissionAssignmentCreate,
    PermissionAssignmentResponse,
    PermissionRevokeRequest,
    RevokeResponse,
    RoleAssignmentCreate,
    RoleAssignmentResponse,
    RoleRevokeRequest,
)
from rbac_engine.schemas.common import ContextPayload
from rbac_engine.services.assignments import AssignmentService

router = APIRouter()


@router.post(
    "/roles",
    response_model=RoleAssignmentResponse,
    status_code=status.HTTP_201_CREATED,
)
def assign_role(
    payload: RoleAssignmentCreate,
    service: AssignmentService = Depends(get_assignment_service),
    x_actor_id: Optional[str] = Header(default=None, alias="X-Actor-Id"),
) -> RoleAssignmentResponse:
    assignment = service.assign_role(
        payload.principal,
        payload.role,
        payload.context.to_ref() if payload.context else None,
        payload.activated_at,
        payload.expired_at,
        guard=payload.guard_name,
        actor_id=x_actor_id,
    )
    return _to_role_assignment_response(assignment)


@router.get(
    "/roles",
    response_model=List[RoleAssignmentResponse],
)
def list_role_assignments(
    principal_id: Optional[str] = Query(default=None),
    principal_type: str = Query(default="user"),
    context_type: Optional[str] = Query(default=None),
    context_id: Optional[str] = Query(default=None),
    service: AssignmentService = Depends(get_assignment_service),
) -> List[RoleAssignmentResponse]:
    assignments = service.list_role_assignments(
        principal=PrincipalRef(type=principal_type, id=principal_id) if principal_id else None,
        context=_context_filter(context_type, context_id),
    )
    return [_to_role_assignment_response(assignment) for assignment in assignments]


@router.post(
    "/roles/revoke",
    response_model=RevokeResponse,
)
def revoke_role(
    payload: RoleRevokeRequest,
    service: AssignmentService = Depends(get_assignment_service),
    x_actor_id: Optional[str] = Header(default=None, alias="X-Actor-Id"),
) -> RevokeResponse:
    removed = service.revoke_role(
        payload.principal,
        payload.role,
        payload.context.to_ref() if payload.context else None,
        guard=payload.guard_name,
        actor_id=x_actor_id,
    )
    return RevokeResponse(removed=removed)


@router.post(
    "/permissions",
    response_model=PermissionAssignmentResponse,
    status_code=status.HTTP_201_CREATED,
)
def assign_permission(
    payload: PermissionAssignmentCreate,
    service: AssignmentService = Depends(get_assignment_service),
    x_actor_id: Optional[str] = Header(default=None, alias="X-Actor-Id"),
) -> PermissionAssignmentResponse:
    assignment = service.assign_permission(
        payload.principal,
        payload.permission,
        payload.context.to_ref() if payload.context else None,
        payload.activated_at,
        payload.expired_at,
        guard=payload.guard_name,
        actor_id=x_actor_id,
    )
    return _to_permission_assignment_response(assignment)


@router.get(
    "/permissions",
    response_model=List[PermissionAssignmentResponse],
)
def list_permission_assignments(
    principal_id: Optional[str] = Query(default=None),
    principal_type: str = Query(default="user"),
    context_type: Optional[str] = Query(default=None),
    context_id: Optional[str] = Query(default=None),
    service: AssignmentService = Depends(get_assignment_service),
) -> List[PermissionAssignmentResponse]:
    assignments = service.list_permission_assignments(
        principal=PrincipalRef(type=principal_type, id=principal_id) if principal_id else None,
        context=_context_filter(context_type, context_id),
    )
    return [_to_permission_assignment_response(assignment) for assignment in assignments]


@router.post(
    "/permissions/revoke",
    response_model=RevokeResponse,
)
def revoke_permission(
    payload: PermissionRevokeRequest,
    service: AssignmentService = Depends(get_assignment_service),
    x_actor_id: Optional[str] = Header(default=None, alias="X-Actor-Id"),
) -> RevokeResponse:
    removed = service.revoke_permission(
        payload.principal,
        payload.permission,
        payload.context.to_ref() if payload.context else None,
        guard=payload.guard_name,
        actor_id=x_actor_id,
    )
    return RevokeResponse(removed=removed)


def _context_filter(context_type: Optional[str], context_id: Optional[str]) -> Optional[ContextRef]:
    if context_type and context_id:
        return ContextRef(kind=context_type, id=context_id)
    return None


def _to_role_assignment_response(assignment: RoleAssignment) -> RoleAssignmentResponse:
    return RoleAssignmentResponse(
        id=assignment.id,
        principal_id=assignment.principal_id,
        principal_type=assignment.principal_type,
        context=ContextPayload.from_ref(assignment.context),
        role_id=assignment.role_id,
        role=assignment.role.name,
        activated_at=assignment.activated_at,
        expired_at=assignment.expired_at,
        created_at=assignment.created_at,
        updated_at=assignment.updated_at,
    )


def _to_permission_assignment_response(assignment: PermissionAssignment) -> PermissionAssignmentResponse:
    return PermissionAssignmentResponse(
        id=assignment.id,
        principal_id=assignment.principal_id,
        principal_type=assignment.principal_type,
        context=ContextPayload.from_ref(assignment.context),
        permission_id=assignment.permission_id,
        permission=assignment.permission.name,
        activated_at=assignment.activated_at,
        expired_at=assignment.expired_at,
        created_at=assignment.created_at,
        updated_at=assignment.updated_at,
    )
