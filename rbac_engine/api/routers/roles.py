"""Role management endpoints."""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header, Query, Response, status

from rbac_engine.api.dependencies import get_role_service
from rbac_engine.models.role import Role
from rbac_engine.schemas.role import RoleCreate, RoleResponse, RoleUpdate
from rbac_engine.services.roles import RoleService

router = APIRouter()


@router.post(
    "",
    response_model=RoleResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_role(
    payload: RoleCreate,
    service: RoleService = Depends(get_role_service),
    x_actor_id: Optional[str] = Header(default=None, alias="X-Actor-Id"),
) -> RoleResponse:
    role = service.create_role(payload, actor_id=x_actor_id)
    return _to_role_response(role)


@router.get(
    "",
    response_model=List[RoleResponse],
)
def list_roles(
    guard_name: Optional[str] = Query(default=None),
    service: RoleService = Depends(get_role_service),
) -> List[RoleResponse]:
    return [_to_role_response(role) for role in service.list_roles(guard_name)]


@router.get(
    "/{role_id}",
    response_model=RoleResponse,
)
def get_role(
    role_id: UUID,
    service: RoleService = Depends(get_role_service),
) -> RoleResponse:
    return _to_role_response(service.get_role(role_id))


@router.patch(
    "/{role_id}",
    response_model=RoleResponse,
)
def update_role(
    role_id: UUID,
    payload: RoleUpdate,
    service: RoleService = Depends(get_role_service),
    x_actor_id: Optional[str] = Header(default=None, alias="X-Actor-Id"),
) -> RoleResponse:
    role = service.update_role(role_id, payload, actor_id=x_actor_id)
    return _to_role_response(role)


@router.delete(
    "/{role_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_role(
    role_id: UUID,
    service: RoleService = Depends(get_role_service),
    x_actor_id: Optional[str] = Header(default=None, alias="X-Actor-Id"),
) -> Response:
    service.delete_role(role_id, actor_id=x_actor_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def _to_role_response(role: Role) -> RoleResponse:
    return RoleResponse(
        id=role.id,
        name=role.name,
        guard_name=role.guard_name,
        label=role.label,
        permissions=sorted(permission.name for permission in role.permissions),
        created_at=role.created_at,
        updated_at=role.updated_at,
    )
