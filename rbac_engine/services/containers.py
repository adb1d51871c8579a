"""Organization and partner administration."""

from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from rbac_engine.models.container import ContainerKind, ContainerMixin
from rbac_engine.schemas.container import ContainerCreate, ContainerUpdate
from rbac_engine.services.audit import AuditService
from rbac_engine.services.errors import CycleDetectedError
from rbac_engine.services.hierarchy import HierarchyResolver


class ContainerService:
    """CRUD for one container kind; the only place ``parent_id`` is mutated."""

    def __init__(
        self,
        session: Session,
        kind: ContainerKind | str,
        audit_service: Optional[AuditService] = None,
    ) -> None:
        self._session = session
        self._kind = ContainerKind(kind)
        self._hierarchy = HierarchyResolver.for_kind(session, self._kind)
        self._model = self._hierarchy.model
        self._audit = audit_service or AuditService(session)
        self._logger = logging.getLogger("rbac_engine.services.containers")

    @property
    def hierarchy(self) -> HierarchyResolver:
        return self._hierarchy

    def create(self, payload: ContainerCreate, *, actor_id: Optional[str]) -> ContainerMixin:
        if payload.parent_id is not None:
            self.get(payload.parent_id)

        container = self._model(
            name=payload.name,
            parent_id=payload.parent_id,
            type=payload.type,
            description=payload.description,
            is_business=payload.is_business,
        )
        self._session.add(container)
        self._session.flush()

        self._record("create", container, actor_id, {"name": container.name, "parent_id": self._str(container.parent_id)})
        return container

    def get(self, container_id: UUID) -> ContainerMixin:
        return self._hierarchy.resolve(container_id)

    def list(self, *, parent_id: Optional[UUID] = None, roots_only: bool = False) -> List[ContainerMixin]:
        stmt = select(self._model)
        if parent_id:
            stmt = stmt.filter(self._model.parent_id == parent_id)
        elif roots_only:
            stmt = stmt.filter(self._model.parent_id.is_(None))
        return list(self._session.scalars(stmt.order_by(self._model.name)))

    def update(self, container_id: UUID, payload: ContainerUpdate, *, actor_id: Optional[str]) -> ContainerMixin:
        container = self.get(container_id)
        updates = payload.model_dump(exclude_unset=True)

        if "parent_id" in updates:
            new_parent_id = updates["parent_id"]
            if new_parent_id is not None:
                self.get(new_parent_id)
                if self._hierarchy.would_create_cycle(container, new_parent_id):
                    raise CycleDetectedError(
                        f"Moving {self._kind.value} {container.id} under {new_parent_id} would create a cycle",
                        entity_id=container.id,
                    )
            container.parent_id = new_parent_id
        for field in ("name", "type", "description", "is_business"):
            if field in updates and (updates[field] is not None or field in ("type", "description")):
                setattr(container, field, updates[field])

        self._session.add(container)
        self._session.flush()

        self._record("update", container, actor_id, {"changes": {key: self._str(value) for key, value in updates.items()}})
        return container

    def delete(self, container_id: UUID, *, actor_id: Optional[str]) -> None:
        """Delete a container together with its whole subtree and memberships."""

        container = self.get(container_id)
        self._session.delete(container)
        self._session.flush()
        self._record("delete", container, actor_id, {"name": container.name})

    def get_business(self) -> Optional[ContainerMixin]:
        """Return the container flagged as the business root, if any."""

        stmt = select(self._model).where(self._model.is_business.is_(True)).order_by(self._model.created_at).limit(1)
        return self._session.scalar(stmt)

    def _record(self, verb: str, container: ContainerMixin, actor_id: Optional[str], details: dict) -> None:
        action = f"{self._kind.value}.{verb}"
        self._audit.record(
            action=action,
            actor_id=actor_id,
            subject_type=self._kind.value,
            subject_id=str(container.id),
            details=details,
        )
        self._logger.info(
            f"{self._kind.value}_{verb}d",
            extra={"container_id": str(container.id), "actor_id": actor_id},
        )

    @staticmethod
    def _str(value: object) -> object:
        return str(value) if isinstance(value, UUID) else value
