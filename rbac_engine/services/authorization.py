"""Authorization decision engine.

The engine only reads. Each check re-queries the store so revocations take
effect on the next call; there is no decision cache.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional, Union
from uuid import UUID

from sqlalchemy import and_, select
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from rbac_engine.core.config import AppSettings, get_settings
from rbac_engine.models.container import ContainerKind, ContainerMixin, canonical_context, get_container_models
from rbac_engine.models.permission import Permission
from rbac_engine.models.permission_assignment import PermissionAssignment
from rbac_engine.models.refs import ContextLike, ContextRef, PrincipalRef, to_context_ref
from rbac_engine.models.role import Role
from rbac_engine.models.role_assignment import RoleAssignment
from rbac_engine.models.role_permission import RolePermission
from rbac_engine.schemas.authorization import (
    AuthorizationRequest,
    BatchAuthorizationRequest,
    ContainerAuthorizationRequest,
    RoleCheckRequest,
)
from rbac_engine.services.hierarchy import HierarchyResolver
from rbac_engine.services.temporal import Clock, active_at, utcnow

ContainerArg = Union[ContainerMixin, UUID, str]


def principal_clause(model, principal: PrincipalRef) -> ColumnElement[bool]:
    return and_(
        model.principal_type == principal.type,
        model.principal_id == principal.id,
    )


def context_clause(model, context: Optional[ContextRef]) -> ColumnElement[bool]:
    """Exact context match; a global query only sees global rows."""

    if context is None:
        return and_(model.context_type.is_(None), model.context_id.is_(None))
    return and_(model.context_type == context.kind, model.context_id == context.id)


class AuthorizationService:
    """Answers "may principal P do X (in context C)?"."""

    def __init__(
        self,
        session: Session,
        settings: Optional[AppSettings] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._session = session
        self._settings = settings or get_settings()
        self._clock = clock or utcnow
        self._logger = logging.getLogger("rbac_engine.services.authorization")

    def has_permission(
        self,
        principal: PrincipalRef,
        permission: str,
        context: ContextLike = None,
        *,
        guard: Optional[str] = None,
    ) -> bool:
        guard = guard or self._settings.default_guard
        if self.is_root(principal, guard=guard):
            return True

        return self._has_exact_permission(
            principal,
            permission,
            canonical_context(to_context_ref(context)),
            guard,
            self._clock(),
        )

    def has_role(
        self,
        principal: PrincipalRef,
        role: str,
        context: ContextLike = None,
        *,
        guard: Optional[str] = None,
    ) -> bool:
        guard = guard or self._settings.default_guard
        now = self._clock()
        stmt = (
            select(RoleAssignment.id)
            .join(Role, RoleAssignment.role_id == Role.id)
            .where(principal_clause(RoleAssignment, principal))
            .where(Role.name == role)
            .where(Role.guard_name == guard)
            .where(active_at(RoleAssignment, now))
            .where(context_clause(RoleAssignment, canonical_context(to_context_ref(context))))
            .limit(1)
        )
        return self._session.scalar(stmt) is not None

    def is_root(self, principal: PrincipalRef, *, guard: Optional[str] = None) -> bool:
        """Global root role check; goes straight to the role query."""

        return self.has_role(principal, self._settings.root_role, None, guard=guard)

    def has_permission_in_container(
        self,
        principal: PrincipalRef,
        permission: str,
        container: ContainerArg,
        check_hierarchy: bool = True,
        *,
        kind: Optional[ContainerKind | str] = None,
        guard: Optional[str] = None,
    ) -> bool:
        """Check ``container`` and then, nearest first, each of its ancestors."""

        guard = guard or self._settings.default_guard
        if self.is_root(principal, guard=guard):
            return True

        resolver = self._resolver(container, kind)
        entity = resolver.resolve(container)
        now = self._clock()

        if self._has_exact_permission(principal, permission, to_context_ref(entity), guard, now):
            return True

        if check_hierarchy:
            for ancestor in resolver.ancestors_of(entity):
                if self._has_exact_permission(principal, permission, to_context_ref(ancestor), guard, now):
                    return True
        return False

    def has_any_permission(
        self,
        principal: PrincipalRef,
        permissions: Iterable[str],
        context: ContextLike = None,
        *,
        guard: Optional[str] = None,
    ) -> bool:
        return any(self.has_permission(principal, name, context, guard=guard) for name in permissions)

    def has_all_permissions(
        self,
        principal: PrincipalRef,
        permissions: Iterable[str],
        context: ContextLike = None,
        *,
        guard: Optional[str] = None,
    ) -> bool:
        return all(self.has_permission(principal, name, context, guard=guard) for name in permissions)

    def is_member_of(
        self,
        principal: PrincipalRef,
        container: ContainerArg,
        *,
        kind: Optional[ContainerKind | str] = None,
    ) -> bool:
        resolver = self._resolver(container, kind)
        entity = resolver.resolve(container)
        _, membership_model = get_container_models(resolver.model.context_type)
        stmt = (
            select(membership_model.id)
            .where(membership_model.container_id == entity.id)
            .where(principal_clause(membership_model, principal))
            .limit(1)
        )
        return self._session.scalar(stmt) is not None

    def authorize(self, payload: AuthorizationRequest) -> bool:
        context = payload.context.to_ref() if payload.context else None
        authorized = self.has_permission(
            payload.principal,
            payload.permission,
            context,
            guard=payload.guard_name,
        )
        self._log_decision(
            authorized,
            payload.principal,
            payload.permission,
            context=f"{context.kind}:{context.id}" if context else None,
            guard_name=payload.guard_name or self._settings.default_guard,
        )
        return authorized

    def authorize_in_container(self, payload: ContainerAuthorizationRequest) -> bool:
        authorized = self.has_permission_in_container(
            payload.principal,
            payload.permission,
            payload.container_id,
            payload.check_hierarchy,
            kind=payload.container_kind,
            guard=payload.guard_name,
        )
        self._log_decision(
            authorized,
            payload.principal,
            payload.permission,
            context=f"{payload.container_kind.value}:{payload.container_id}",
            check_hierarchy=payload.check_hierarchy,
            guard_name=payload.guard_name or self._settings.default_guard,
        )
        return authorized

    def authorize_role(self, payload: RoleCheckRequest) -> bool:
        context = payload.context.to_ref() if payload.context else None
        return self.has_role(payload.principal, payload.role, context, guard=payload.guard_name)

    def authorize_batch(self, payload: BatchAuthorizationRequest) -> bool:
        context = payload.context.to_ref() if payload.context else None
        if payload.mode == "all":
            return self.has_all_permissions(payload.principal, payload.permissions, context, guard=payload.guard_name)
        return self.has_any_permission(payload.principal, payload.permissions, context, guard=payload.guard_name)

    def _has_exact_permission(
        self,
        principal: PrincipalRef,
        permission: str,
        context: Optional[ContextRef],
        guard: str,
        now: datetime,
    ) -> bool:
        """Direct grant or role grant on exactly ``context``; no root check, no widening."""

        if self._has_direct_permission(principal, permission, context, guard, now):
            return True
        return self._has_role_permission(principal, permission, context, guard, now)

    def _has_direct_permission(
        self,
        principal: PrincipalRef,
        permission: str,
        context: Optional[ContextRef],
        guard: str,
        now: datetime,
    ) -> bool:
        stmt = (
            select(PermissionAssignment.id)
            .join(Permission, PermissionAssignment.permission_id == Permission.id)
            .where(principal_clause(PermissionAssignment, principal))
            .where(Permission.name == permission)
            .where(Permission.guard_name == guard)
            .where(active_at(PermissionAssignment, now))
            .where(context_clause(PermissionAssignment, context))
            .limit(1)
        )
        return self._session.scalar(stmt) is not None

    def _has_role_permission(
        self,
        principal: PrincipalRef,
        permission: str,
        context: Optional[ContextRef],
        guard: str,
        now: datetime,
    ) -> bool:
        stmt = (
            select(RoleAssignment.id)
            .join(Role, RoleAssignment.role_id == Role.id)
            .join(RolePermission, RolePermission.role_id == Role.id)
            .join(Permission, RolePermission.permission_id == Permission.id)
            .where(principal_clause(RoleAssignment, principal))
            .where(Permission.name == permission)
            .where(Permission.guard_name == guard)
            .where(active_at(RoleAssignment, now))
            .where(context_clause(RoleAssignment, context))
            .limit(1)
        )
        return self._session.scalar(stmt) is not None

    def _resolver(self, container: ContainerArg, kind: Optional[ContainerKind | str]) -> HierarchyResolver:
        if isinstance(container, ContainerMixin):
            return HierarchyResolver(self._session, type(container))
        if kind is None:
            raise ValueError("kind is required when the container is given by id")
        return HierarchyResolver.for_kind(self._session, kind)

    def _log_decision(
        self,
        authorized: bool,
        principal: PrincipalRef,
        permission: str,
        **extra: object,
    ) -> None:
        self._logger.info(
            "authorization_granted" if authorized else "authorization_denied",
            extra={
                "principal_type": principal.type,
                "principal_id": principal.id,
                "permission": permission,
                **extra,
            },
        )
