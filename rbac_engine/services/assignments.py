"""Grant and revoke operations for role, permission and membership bindings."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Union
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rbac_engine.core.config import AppSettings, get_settings
from rbac_engine.models.container import (
    ContainerKind,
    ContainerMixin,
    MembershipMixin,
    canonical_context,
    get_container_models,
    is_container_kind,
)
from rbac_engine.models.permission_assignment import PermissionAssignment
from rbac_engine.models.refs import ContextLike, ContextRef, PrincipalRef, to_context_ref
from rbac_engine.models.role_assignment import RoleAssignment
from rbac_engine.services.audit import AuditService
from rbac_engine.services.authorization import context_clause, principal_clause
from rbac_engine.services.errors import AlreadyMemberError, InvalidAssignmentError
from rbac_engine.services.hierarchy import HierarchyResolver
from rbac_engine.services.roles import PermissionRef, RoleRef, RoleService
from rbac_engine.services.temporal import normalize_utc

ContainerArg = Union[ContainerMixin, UUID, str]


class AssignmentService:
    """The only writer of role and permission bindings.

    Each grant inserts exactly one row. Overlapping grants for the same
    principal, role and context are allowed; revocation removes all of them.
    """

    def __init__(
        self,
        session: Session,
        audit_service: Optional[AuditService] = None,
        settings: Optional[AppSettings] = None,
        role_service: Optional[RoleService] = None,
    ) -> None:
        self._session = session
        self._audit = audit_service or AuditService(session)
        self._settings = settings or get_settings()
        self._roles = role_service or RoleService(session, audit_service=self._audit, settings=self._settings)
        self._logger = logging.getLogger("rbac_engine.services.assignments")

    def assign_role(
        self,
        principal: PrincipalRef,
        role: RoleRef,
        context: ContextLike = None,
        activated_at: Optional[datetime] = None,
        expired_at: Optional[datetime] = None,
        *,
        guard: Optional[str] = None,
        actor_id: Optional[str] = None,
    ) -> RoleAssignment:
        resolved = self._roles.resolve_role(role, guard)
        context_ref = self._grant_context(context)
        window = self._window(activated_at, expired_at)

        assignment = RoleAssignment(role_id=resolved.id, **self._binding(principal, context_ref), **window)
        self._session.add(assignment)
        self._session.flush()

        self._record(
            "role_assignment.create",
            principal,
            context_ref,
            actor_id,
            role=resolved.name,
            role_id=str(resolved.id),
            assignment_id=str(assignment.id),
        )
        return assignment

    def revoke_role(
        self,
        principal: PrincipalRef,
        role: RoleRef,
        context: ContextLike = None,
        *,
        guard: Optional[str] = None,
        actor_id: Optional[str] = None,
    ) -> int:
        """Delete every matching role assignment, whatever its activity window."""

        resolved = self._roles.resolve_role(role, guard)
        context_ref = canonical_context(to_context_ref(context))
        stmt = (
            select(RoleAssignment)
            .where(RoleAssignment.role_id == resolved.id)
            .where(principal_clause(RoleAssignment, principal))
            .where(context_clause(RoleAssignment, context_ref))
        )
        removed = self._delete_all(stmt)

        self._record(
            "role_assignment.delete",
            principal,
            context_ref,
            actor_id,
            role=resolved.name,
            role_id=str(resolved.id),
            removed=removed,
        )
        return removed

    def assign_permission(
        self,
        principal: PrincipalRef,
        permission: PermissionRef,
        context: ContextLike = None,
        activated_at: Optional[datetime] = None,
        expired_at: Optional[datetime] = None,
        *,
        guard: Optional[str] = None,
        actor_id: Optional[str] = None,
    ) -> PermissionAssignment:
        resolved = self._roles.resolve_permission(permission, guard)
        context_ref = self._grant_context(context)
        window = self._window(activated_at, expired_at)

        assignment = PermissionAssignment(
            permission_id=resolved.id,
            **self._binding(principal, context_ref),
            **window,
        )
        self._session.add(assignment)
        self._session.flush()

        self._record(
            "permission_assignment.create",
            principal,
            context_ref,
            actor_id,
            permission=resolved.name,
            permission_id=str(resolved.id),
            assignment_id=str(assignment.id),
        )
        return assignment

    def revoke_permission(
        self,
        principal: PrincipalRef,
        permission: PermissionRef,
        context: ContextLike = None,
        *,
        guard: Optional[str] = None,
        actor_id: Optional[str] = None,
    ) -> int:
        resolved = self._roles.resolve_permission(permission, guard)
        context_ref = canonical_context(to_context_ref(context))
        stmt = (
            select(PermissionAssignment)
            .where(PermissionAssignment.permission_id == resolved.id)
            .where(principal_clause(PermissionAssignment, principal))
            .where(context_clause(PermissionAssignment, context_ref))
        )
        removed = self._delete_all(stmt)

        self._record(
            "permission_assignment.delete",
            principal,
            context_ref,
            actor_id,
            permission=resolved.name,
            permission_id=str(resolved.id),
            removed=removed,
        )
        return removed

    def list_role_assignments(
        self,
        *,
        principal: Optional[PrincipalRef] = None,
        context: ContextLike = None,
    ) -> List[RoleAssignment]:
        stmt = select(RoleAssignment)
        if principal:
            stmt = stmt.filter(principal_clause(RoleAssignment, principal))
        if context is not None:
            stmt = stmt.filter(context_clause(RoleAssignment, canonical_context(to_context_ref(context))))
        return list(self._session.scalars(stmt.order_by(RoleAssignment.created_at.desc())))

    def list_permission_assignments(
        self,
        *,
        principal: Optional[PrincipalRef] = None,
        context: ContextLike = None,
    ) -> List[PermissionAssignment]:
        stmt = select(PermissionAssignment)
        if principal:
            stmt = stmt.filter(principal_clause(PermissionAssignment, principal))
        if context is not None:
            stmt = stmt.filter(context_clause(PermissionAssignment, canonical_context(to_context_ref(context))))
        return list(self._session.scalars(stmt.order_by(PermissionAssignment.created_at.desc())))

    def join_container(
        self,
        principal: PrincipalRef,
        container: ContainerArg,
        position: Optional[str] = None,
        *,
        kind: Optional[ContainerKind | str] = None,
        actor_id: Optional[str] = None,
    ) -> MembershipMixin:
        entity = self._resolve_container(container, kind)
        _, membership_model = get_container_models(entity.context_type)

        membership = membership_model(
            container_id=entity.id,
            principal_type=principal.type,
            principal_id=principal.id,
            position=position,
            is_active=True,
        )
        message = f"{principal.type} {principal.id} is already a member of {entity.context_type} {entity.id}"
        existing = self._session.scalar(
            select(membership_model.id)
            .where(membership_model.container_id == entity.id)
            .where(principal_clause(membership_model, principal))
        )
        if existing is not None:
            raise AlreadyMemberError(message)

        try:
            with self._session.begin_nested():
                self._session.add(membership)
        except IntegrityError as exc:
            raise AlreadyMemberError(message) from exc

        self._record(
            "membership.create",
            principal,
            ContextRef.of(entity.context_type, entity.id),
            actor_id,
            position=position,
        )
        return membership

    def leave_container(
        self,
        principal: PrincipalRef,
        container: ContainerArg,
        *,
        kind: Optional[ContainerKind | str] = None,
        actor_id: Optional[str] = None,
    ) -> int:
        entity = self._resolve_container(container, kind)
        _, membership_model = get_container_models(entity.context_type)
        stmt = (
            select(membership_model)
            .where(membership_model.container_id == entity.id)
            .where(principal_clause(membership_model, principal))
        )
        removed = self._delete_all(stmt)

        self._record(
            "membership.delete",
            principal,
            ContextRef.of(entity.context_type, entity.id),
            actor_id,
            removed=removed,
        )
        return removed

    def list_members(
        self,
        container: ContainerArg,
        *,
        kind: Optional[ContainerKind | str] = None,
    ) -> List[MembershipMixin]:
        entity = self._resolve_container(container, kind)
        _, membership_model = get_container_models(entity.context_type)
        stmt = (
            select(membership_model)
            .where(membership_model.container_id == entity.id)
            .order_by(membership_model.created_at)
        )
        return list(self._session.scalars(stmt))

    def _resolve_container(self, container: ContainerArg, kind: Optional[ContainerKind | str]) -> ContainerMixin:
        if isinstance(container, ContainerMixin):
            return container
        if kind is None:
            raise ValueError("kind is required when the container is given by id")
        return HierarchyResolver.for_kind(self._session, kind).resolve(container)

    def _grant_context(self, context: ContextLike) -> Optional[ContextRef]:
        """Container contexts must exist; they are stored under their canonical id."""

        context_ref = to_context_ref(context)
        if context_ref is None or not is_container_kind(context_ref.kind):
            return context_ref
        entity = HierarchyResolver.for_kind(self._session, context_ref.kind).resolve(context_ref.id)
        return ContextRef.of(entity.context_type, entity.id)

    def _delete_all(self, stmt) -> int:
        rows = list(self._session.scalars(stmt))
        for row in rows:
            self._session.delete(row)
        self._session.flush()
        return len(rows)

    @staticmethod
    def _binding(principal: PrincipalRef, context: Optional[ContextRef]) -> dict:
        return {
            "principal_type": principal.type,
            "principal_id": principal.id,
            "context_type": context.kind if context else None,
            "context_id": context.id if context else None,
        }

    @staticmethod
    def _window(activated_at: Optional[datetime], expired_at: Optional[datetime]) -> dict:
        activated_at = normalize_utc(activated_at)
        expired_at = normalize_utc(expired_at)
        if activated_at and expired_at and expired_at < activated_at:
            raise InvalidAssignmentError("expired_at must not be earlier than activated_at")
        return {"activated_at": activated_at, "expired_at": expired_at}

    def _record(
        self,
        action: str,
        principal: PrincipalRef,
        context: Optional[ContextRef],
        actor_id: Optional[str],
        **details: object,
    ) -> None:
        details = {
            **details,
            "context_type": context.kind if context else None,
            "context_id": context.id if context else None,
        }
        self._audit.record(
            action=action,
            actor_id=actor_id,
            subject_type=principal.type,
            subject_id=principal.id,
            details=details,
        )
        self._logger.info(
            action.replace(".", "_"),
            extra={"principal_type": principal.type, "principal_id": principal.id, **details},
        )
