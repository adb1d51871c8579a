"""Ancestor and descendant resolution over container forests."""

from __future__ import annotations

import logging
from typing import Generic, List, NoReturn, Optional, Set, Type, TypeVar, Union
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from rbac_engine.models.container import ContainerKind, ContainerMixin, get_container_models
from rbac_engine.services.errors import ContainerNotFoundError, CycleDetectedError

ContainerT = TypeVar("ContainerT", bound=ContainerMixin)
ContainerRef = Union[ContainerMixin, UUID, str]


class HierarchyResolver(Generic[ContainerT]):
    """Walks parent pointers and child collections of one container model.

    Every walk tracks the ids it has seen and raises ``CycleDetectedError``
    instead of looping when the parent graph contains a cycle. Nothing is
    cached: each call reads the current rows.
    """

    def __init__(self, session: Session, model: Type[ContainerT]) -> None:
        self._session = session
        self._model = model
        self._logger = logging.getLogger("rbac_engine.services.hierarchy")

    @classmethod
    def for_kind(cls, session: Session, kind: ContainerKind | str) -> "HierarchyResolver":
        model, _ = get_container_models(kind)
        return cls(session, model)

    @property
    def model(self) -> Type[ContainerT]:
        return self._model

    def resolve(self, ref: ContainerRef) -> ContainerT:
        if isinstance(ref, self._model):
            return ref
        if isinstance(ref, ContainerMixin):
            raise ContainerNotFoundError(
                f"{type(ref).__name__} {ref.id} is not a {self._model.context_type}"
            )
        try:
            container_id = ref if isinstance(ref, UUID) else UUID(str(ref))
        except ValueError as exc:
            raise ContainerNotFoundError(f"{self._model.context_type.title()} {ref} not found") from exc

        container = self._session.get(self._model, container_id)
        if container is None:
            raise ContainerNotFoundError(f"{self._model.context_type.title()} {container_id} not found")
        return container

    def ancestors_of(self, ref: ContainerRef) -> List[ContainerT]:
        """Return the parent chain of ``ref``, nearest ancestor first."""

        entity = self.resolve(ref)
        ancestors: List[ContainerT] = []
        visited: Set[UUID] = {entity.id}
        parent_id = entity.parent_id
        while parent_id is not None:
            if parent_id in visited:
                self._cycle(entity.id, parent_id)
            visited.add(parent_id)
            parent = self._session.get(self._model, parent_id)
            if parent is None:
                break
            ancestors.append(parent)
            parent_id = parent.parent_id
        return ancestors

    def descendants_of(self, ref: ContainerRef) -> List[ContainerT]:
        """Return every entity below ``ref``, breadth-first, each at most once."""

        entity = self.resolve(ref)
        descendants: List[ContainerT] = []
        visited: Set[UUID] = {entity.id}
        frontier: List[UUID] = [entity.id]
        while frontier:
            stmt = select(self._model).where(self._model.parent_id.in_(frontier))
            children = list(self._session.scalars(stmt))
            frontier = []
            for child in children:
                if child.id in visited:
                    self._cycle(entity.id, child.id)
                visited.add(child.id)
                descendants.append(child)
                frontier.append(child.id)
        return descendants

    def is_descendant_of(self, entity: ContainerRef, other: ContainerRef) -> bool:
        """True when ``other`` appears in the ancestor chain of ``entity``."""

        other_id = self.resolve(other).id
        return any(ancestor.id == other_id for ancestor in self.ancestors_of(entity))

    def is_ancestor_of(self, entity: ContainerRef, other: ContainerRef) -> bool:
        """True when ``other`` appears among the descendants of ``entity``."""

        other_id = self.resolve(other).id
        return any(descendant.id == other_id for descendant in self.descendants_of(entity))

    def would_create_cycle(self, entity: ContainerRef, new_parent_id: Optional[UUID]) -> bool:
        """Whether re-parenting ``entity`` under ``new_parent_id`` would close a loop."""

        if new_parent_id is None:
            return False
        target = self.resolve(entity)
        if new_parent_id == target.id:
            return True
        return any(descendant.id == new_parent_id for descendant in self.descendants_of(target))

    def _cycle(self, start_id: UUID, repeated_id: UUID) -> NoReturn:
        self._logger.error(
            "hierarchy_cycle_detected",
            extra={
                "container_type": self._model.context_type,
                "start_id": str(start_id),
                "repeated_id": str(repeated_id),
            },
        )
        raise CycleDetectedError(
            f"Cycle detected in {self._model.context_type} hierarchy at {repeated_id}",
            entity_id=repeated_id,
        )
