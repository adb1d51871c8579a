"""Dependency injection helpers for FastAPI routes."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Optional

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from rbac_engine.core.database import get_session
from rbac_engine.models.container import ContainerKind
from rbac_engine.models.refs import PrincipalRef
from rbac_engine.services.assignments import AssignmentService
from rbac_engine.services.audit import AuditService
from rbac_engine.services.authorization import AuthorizationService
from rbac_engine.services.containers import ContainerService
from rbac_engine.services.hierarchy import HierarchyResolver
from rbac_engine.services.roles import RoleService


def get_db_session() -> Session:
    yield from get_session()


def get_role_service(session: Session = Depends(get_db_session)) -> RoleService:
    return RoleService(session)


def get_assignment_service(session: Session = Depends(get_db_session)) -> AssignmentService:
    return AssignmentService(session)


def get_authorization_service(session: Session = Depends(get_db_session)) -> AuthorizationService:
    return AuthorizationService(session)


def get_audit_service(session: Session = Depends(get_db_session)) -> AuditService:
    return AuditService(session)


class ContainerCollection(str, Enum):
    """URL segment naming a container hierarchy."""

    ORGANIZATIONS = "organizations"
    PARTNERS = "partners"

    @property
    def kind(self) -> ContainerKind:
        return ContainerKind(self.value[:-1])


def get_container_service(
    collection: ContainerCollection,
    session: Session = Depends(get_db_session),
) -> ContainerService:
    return ContainerService(session, collection.kind)


def get_current_principal(
    x_principal_id: Optional[str] = Header(default=None, alias="X-Principal-Id"),
    x_principal_type: str = Header(default="user", alias="X-Principal-Type"),
) -> Optional[PrincipalRef]:
    """Principal established by the authentication layer in front of this service."""

    if not x_principal_id:
        return None
    return PrincipalRef(type=x_principal_type, id=x_principal_id)


def require_permission(
    permission: str,
    context_kind: Optional[ContainerKind] = None,
    path_param: Optional[str] = None,
    *,
    check_hierarchy: bool = False,
) -> Callable[..., PrincipalRef]:
    """Route guard: 401 without a principal, 403 when the engine denies.

    With ``context_kind`` and ``path_param`` the check is scoped to the
    container whose id is taken from that path parameter. An unknown
    container propagates as 404 rather than degrading to a global check.
    """

    def dependency(
        request: Request,
        principal: Optional[PrincipalRef] = Depends(get_current_principal),
        session: Session = Depends(get_db_session),
    ) -> PrincipalRef:
        if principal is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")

        service = AuthorizationService(session)
        context_id = request.path_params.get(path_param) if path_param else None
        if context_kind is not None and context_id:
            container = HierarchyResolver.for_kind(session, context_kind).resolve(context_id)
            allowed = service.has_permission_in_container(
                principal,
                permission,
                container,
                check_hierarchy,
            )
        else:
            allowed = service.has_permission(principal, permission)

        if not allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"Missing permission '{permission}'")
        return principal

    return dependency
