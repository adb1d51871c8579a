"""Role and permission administration."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Union
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rbac_engine.core.config import AppSettings, get_settings
from rbac_engine.models.permission import Permission
from rbac_engine.models.role import Role
from rbac_engine.schemas.permission import PermissionCreate
from rbac_engine.schemas.role import RoleCreate, RoleUpdate
from rbac_engine.services.audit import AuditService
from rbac_engine.services.errors import (
    PermissionConflictError,
    PermissionNotFoundError,
    RoleConflictError,
    RoleNotFoundError,
)

RoleRef = Union[Role, UUID, str]
PermissionRef = Union[Permission, UUID, str]


def _as_uuid(value: Union[UUID, str]) -> Optional[UUID]:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(value)
    except ValueError:
        return None


class RoleService:
    """Creates, updates and resolves roles and permissions within a guard."""

    def __init__(
        self,
        session: Session,
        audit_service: Optional[AuditService] = None,
        settings: Optional[AppSettings] = None,
    ) -> None:
        self._session = session
        self._audit = audit_service or AuditService(session)
        self._settings = settings or get_settings()
        self._logger = logging.getLogger("rbac_engine.services.roles")

    def create_role(self, payload: RoleCreate, *, actor_id: Optional[str]) -> Role:
        guard = payload.guard_name or self._settings.default_guard
        role = Role(name=payload.name, guard_name=guard, label=payload.label)
        role.permissions = self._ensure_permissions(payload.permissions, guard)
        try:
            with self._session.begin_nested():
                self._session.add(role)
        except IntegrityError as exc:
            raise RoleConflictError(f"Role '{payload.name}' already exists in guard '{guard}'") from exc

        self._audit.record(
            action="role.create",
            actor_id=actor_id,
            subject_type="role",
            subject_id=str(role.id),
            details={"name": role.name, "guard_name": guard, "permissions": payload.permissions},
        )
        self._logger.info("role_created", extra={"role_id": str(role.id), "actor_id": actor_id})
        return role

    def update_role(self, role_id: UUID, payload: RoleUpdate, *, actor_id: Optional[str]) -> Role:
        role = self.get_role(role_id)
        updates = payload.model_dump(exclude_unset=True)

        if "label" in updates:
            role.label = updates["label"]
        if updates.get("permissions") is not None:
            role.permissions = self._ensure_permissions(updates["permissions"], role.guard_name)

        self._session.add(role)
        self._session.flush()

        self._audit.record(
            action="role.update",
            actor_id=actor_id,
            subject_type="role",
            subject_id=str(role.id),
            details={"changes": updates},
        )
        self._logger.info("role_updated", extra={"role_id": str(role.id), "actor_id": actor_id})
        return role

    def delete_role(self, role_id: UUID, *, actor_id: Optional[str]) -> None:
        """Delete a role together with its permission bindings and assignments."""

        role = self.get_role(role_id)
        details = {"name": role.name, "guard_name": role.guard_name}
        self._session.delete(role)
        self._session.flush()

        self._audit.record(
            action="role.delete",
            actor_id=actor_id,
            subject_type="role",
            subject_id=str(role_id),
            details=details,
        )
        self._logger.info("role_deleted", extra={"role_id": str(role_id), "actor_id": actor_id})

    def get_role(self, role_id: UUID) -> Role:
        role = self._session.get(Role, role_id)
        if not role:
            raise RoleNotFoundError(f"Role {role_id} not found")
        return role

    def list_roles(self, guard: Optional[str] = None) -> List[Role]:
        stmt = select(Role)
        if guard:
            stmt = stmt.filter(Role.guard_name == guard)
        return list(self._session.scalars(stmt.order_by(Role.name)))

    def resolve_role(self, ref: RoleRef, guard: Optional[str] = None) -> Role:
        """Resolve a role instance, id or name; names are looked up inside ``guard``."""

        explicit_guard = guard
        guard = guard or self._settings.default_guard
        if isinstance(ref, Role):
            role = ref
        elif _as_uuid(ref) is not None:
            role = self._session.get(Role, _as_uuid(ref))
        else:
            role = self._session.scalar(select(Role).where(Role.name == ref, Role.guard_name == guard))
        if role is None or (explicit_guard and role.guard_name != explicit_guard):
            raise RoleNotFoundError(f"Role '{ref}' not found in guard '{guard}'")
        return role

    def create_permission(self, payload: PermissionCreate, *, actor_id: Optional[str]) -> Permission:
        guard = payload.guard_name or self._settings.default_guard
        permission = Permission(name=payload.name, guard_name=guard, label=payload.label)
        try:
            with self._session.begin_nested():
                self._session.add(permission)
        except IntegrityError as exc:
            raise PermissionConflictError(f"Permission '{payload.name}' already exists in guard '{guard}'") from exc

        self._audit.record(
            action="permission.create",
            actor_id=actor_id,
            subject_type="permission",
            subject_id=str(permission.id),
            details={"name": permission.name, "guard_name": guard},
        )
        self._logger.info("permission_created", extra={"permission_id": str(permission.id), "actor_id": actor_id})
        return permission

    def delete_permission(self, permission_id: UUID, *, actor_id: Optional[str]) -> None:
        permission = self._session.get(Permission, permission_id)
        if not permission:
            raise PermissionNotFoundError(f"Permission {permission_id} not found")
        details = {"name": permission.name, "guard_name": permission.guard_name}
        self._session.delete(permission)
        self._session.flush()

        self._audit.record(
            action="permission.delete",
            actor_id=actor_id,
            subject_type="permission",
            subject_id=str(permission_id),
            details=details,
        )
        self._logger.info("permission_deleted", extra={"permission_id": str(permission_id), "actor_id": actor_id})

    def list_permissions(self, guard: Optional[str] = None) -> List[Permission]:
        stmt = select(Permission)
        if guard:
            stmt = stmt.filter(Permission.guard_name == guard)
        return list(self._session.scalars(stmt.order_by(Permission.name)))

    def resolve_permission(self, ref: PermissionRef, guard: Optional[str] = None) -> Permission:
        explicit_guard = guard
        guard = guard or self._settings.default_guard
        if isinstance(ref, Permission):
            permission = ref
        elif _as_uuid(ref) is not None:
            permission = self._session.get(Permission, _as_uuid(ref))
        else:
            permission = self._session.scalar(
                select(Permission).where(Permission.name == ref, Permission.guard_name == guard)
            )
        if permission is None or (explicit_guard and permission.guard_name != explicit_guard):
            raise PermissionNotFoundError(f"Permission '{ref}' not found in guard '{guard}'")
        return permission

    def ensure_baseline_permissions(self, names: Iterable[str], guard: Optional[str] = None) -> None:
        """Idempotently create permission records."""

        self._ensure_permissions(names, guard or self._settings.default_guard)

    def ensure_root_role(self, guard: Optional[str] = None) -> Role:
        """Idempotently create the role that bypasses every permission check."""

        guard = guard or self._settings.default_guard
        name = self._settings.root_role
        role = self._session.scalar(select(Role).where(Role.name == name, Role.guard_name == guard))
        if role is None:
            role = Role(name=name, guard_name=guard, label="Unrestricted access")
            self._session.add(role)
            self._session.flush()
            self._logger.info("root_role_created", extra={"role_id": str(role.id), "guard_name": guard})
        return role

    def _ensure_permissions(self, names: Iterable[str], guard: str) -> List[Permission]:
        names = sorted(set(names))
        if not names:
            return []

        existing = {
            permission.name: permission
            for permission in self._session.scalars(
                select(Permission).where(Permission.name.in_(names), Permission.guard_name == guard)
            )
        }
        for name in names:
            if name not in existing:
                permission = Permission(name=name, guard_name=guard)
                self._session.add(permission)
                existing[name] = permission
        self._session.flush()
        return [existing[name] for name in names]
