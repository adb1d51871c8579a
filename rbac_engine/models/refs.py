"""Value objects identifying principals and assignment contexts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Protocol, Union, runtime_checkable


@dataclass(frozen=True)
class PrincipalRef:
    """Identity of an actor that can hold roles and permissions."""

    type: str
    id: str

    @classmethod
    def of(cls, principal_id: Any, principal_type: str = "user") -> "PrincipalRef":
        return cls(type=principal_type, id=str(principal_id))


@dataclass(frozen=True)
class ContextRef:
    """Identity of the object an assignment is scoped to.

    Two references are equal when both the kind tag and the id match.
    """

    kind: str
    id: str

    @classmethod
    def of(cls, kind: str, context_id: Any) -> "ContextRef":
        return cls(kind=kind, id=str(context_id))


@runtime_checkable
class Contextual(Protocol):
    """Anything that can act as an assignment context."""

    context_type: str
    id: Any


ContextLike = Union[ContextRef, Contextual, None]


def to_context_ref(value: ContextLike) -> Optional[ContextRef]:
    """Normalize a context argument into a ``ContextRef`` (or ``None`` for global scope)."""

    if value is None or isinstance(value, ContextRef):
        return value
    if isinstance(value, Contextual):
        return ContextRef.of(value.context_type, value.id)
    raise TypeError(f"Unsupported context value: {value!r}")
