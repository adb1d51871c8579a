"""Organization and partner endpoints.

Both hierarchies share one set of routes; the first path segment selects
which one (``organizations`` or ``partners``).
"""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header, Query, Response, status

from rbac_engine.api.dependencies import (
    ContainerCollection,
    get_assignment_service,
    get_container_service,
)
from rbac_engine.models.refs import PrincipalRef
from rbac_engine.schemas.container import (
    ContainerCreate,
    ContainerResponse,
    ContainerUpdate,
    MembershipCreate,
    MembershipResponse,
)
from rbac_engine.services.assignments import AssignmentService
from rbac_engine.services.containers import ContainerService

router = APIRouter()


@router.post(
    "/{collection}",
    response_model=ContainerResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_container(
    payload: ContainerCreate,
    service: ContainerService = Depends(get_container_service),
    x_actor_id: Optional[str] = Header(default=None, alias="X-Actor-Id"),
) -> ContainerResponse:
    container = service.create(payload, actor_id=x_actor_id)
    return ContainerResponse.model_validate(container, from_attributes=True)


@router.get(
    "/{collection}",
    response_model=List[ContainerResponse],
)
def list_containers(
    parent_id: Optional[UUID] = Query(default=None),
    roots_only: bool = Query(default=False),
    service: ContainerService = Depends(get_container_service),
) -> List[ContainerResponse]:
    containers = service.list(parent_id=parent_id, roots_only=roots_only)
    return [ContainerResponse.model_validate(container, from_attributes=True) for container in containers]


@router.get(
    "/{collection}/business",
    response_model=Optional[ContainerResponse],
)
def get_business_container(
    service: ContainerService = Depends(get_container_service),
) -> Optional[ContainerResponse]:
    container = service.get_business()
    if container is None:
        return None
    return ContainerResponse.model_validate(container, from_attributes=True)


@router.get(
    "/{collection}/{container_id}",
    response_model=ContainerResponse,
)
def get_container(
    container_id: UUID,
    service: ContainerService = Depends(get_container_service),
) -> ContainerResponse:
    return ContainerResponse.model_validate(service.get(container_id), from_attributes=True)


@router.patch(
    "/{collection}/{container_id}",
    response_model=ContainerResponse,
)
def update_container(
    container_id: UUID,
    payload: ContainerUpdate,
    service: ContainerService = Depends(get_container_service),
    x_actor_id: Optional[str] = Header(default=None, alias="X-Actor-Id"),
) -> ContainerResponse:
    container = service.update(container_id, payload, actor_id=x_actor_id)
    return ContainerResponse.model_validate(container, from_attributes=True)


@router.delete(
    "/{collection}/{container_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_container(
    container_id: UUID,
    service: ContainerService = Depends(get_container_service),
    x_actor_id: Optional[str] = Header(default=None, alias="X-Actor-Id"),
) -> Response:
    service.delete(container_id, actor_id=x_actor_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{collection}/{container_id}/ancestors",
    response_model=List[ContainerResponse],
)
def list_ancestors(
    container_id: UUID,
    service: ContainerService = Depends(get_container_service),
) -> List[ContainerResponse]:
    ancestors = service.hierarchy.ancestors_of(container_id)
    return [ContainerResponse.model_validate(container, from_attributes=True) for container in ancestors]


@router.get(
    "/{collection}/{container_id}/descendants",
    response_model=List[ContainerResponse],
)
def list_descendants(
    container_id: UUID,
    service: ContainerService = Depends(get_container_service),
) -> List[ContainerResponse]:
    descendants = service.hierarchy.descendants_of(container_id)
    return [ContainerResponse.model_validate(container, from_attributes=True) for container in descendants]


@router.get(
    "/{collection}/{container_id}/members",
    response_model=List[MembershipResponse],
)
def list_members(
    collection: ContainerCollection,
    container_id: UUID,
    service: AssignmentService = Depends(get_assignment_service),
) -> List[MembershipResponse]:
    members = service.list_members(container_id, kind=collection.kind)
    return [MembershipResponse.model_validate(member, from_attributes=True) for member in members]


@router.post(
    "/{collection}/{container_id}/members",
    response_model=MembershipResponse,
    status_code=status.HTTP_201_CREATED,
)
def join_container(
    collection: ContainerCollection,
    container_id: UUID,
    payload: MembershipCreate,
    service: AssignmentService = Depends(get_assignment_service),
    x_actor_id: Optional[str] = Header(default=None, alias="X-Actor-Id"),
) -> MembershipResponse:
    membership = service.join_container(
        payload.principal,
        container_id,
        payload.position,
        kind=collection.kind,
        actor_id=x_actor_id,
    )
    return MembershipResponse.model_validate(membership, from_attributes=True)


@router.delete(
    "/{collection}/{container_id}/members/{principal_type}/{principal_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def leave_container(
    collection: ContainerCollection,
    container_id: UUID,
    principal_type: str,
    principal_id: str,
    service: AssignmentService = Depends(get_assignment_service),
    x_actor_id: Optional[str] = Header(default=None, alias="X-Actor-Id"),
) -> Response:
    service.leave_container(
        PrincipalRef(type=principal_type, id=principal_id),
        container_id,
        kind=collection.kind,
        actor_id=x_actor_id,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
