"""Permission management endpoints."""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header, Query, Response, status

from rbac_engine.api.dependencies import get_role_service
from rbac_engine.schemas.permission import PermissionCreate, PermissionResponse
from rbac_engine.services.roles import RoleService

router = APIRouter()


@router.post(
    "",
    response_model=PermissionResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_permission(
    payload: PermissionCreate,
    service: RoleService = Depends(get_role_service),
    x_actor_id: Optional[str] = Header(default=None, alias="X-Actor-Id"),
) -> PermissionResponse:
    permission = service.create_permission(payload, actor_id=x_actor_id)
    return PermissionResponse.model_validate(permission, from_attributes=True)


@router.get(
    "",
    response_model=List[PermissionResponse],
)
def list_permissions(
    guard_name: Optional[str] = Query(default=None),
    service: RoleService = Depends(get_role_service),
) -> List[PermissionResponse]:
    return [
        PermissionResponse.model_validate(permission, from_attributes=True)
        for permission in service.list_permissions(guard_name)
    ]


@router.delete(
    "/{permission_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_permission(
    permission_id: UUID,
    service: RoleService = Depends(get_role_service),
    x_actor_id: Optional[str] = Header(default=None, alias="X-Actor-Id"),
) -> Response:
    service.delete_permission(permission_id, actor_id=x_actor_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
