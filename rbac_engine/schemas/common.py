"""Shared payload fragments."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from rbac_engine.models.refs import ContextRef, PrincipalRef


def _stringify_id(value: Any) -> Any:
    # Principal and context ids are opaque strings; accept numeric ids too.
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


class ContextPayload(BaseModel):
    kind: str = Field(..., min_length=1, max_length=64)
    id: str = Field(..., min_length=1, max_length=64)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> Any:
        return _stringify_id(value)

    def to_ref(self) -> ContextRef:
        return ContextRef(kind=self.kind, id=self.id)

    @classmethod
    def from_ref(cls, ref: Optional[ContextRef]) -> Optional["ContextPayload"]:
        if ref is None:
            return None
        return cls(kind=ref.kind, id=ref.id)


class PrincipalPayload(BaseModel):
    principal_id: str = Field(..., min_length=1, max_length=64)
    principal_type: str = Field(default="user", min_length=1, max_length=64)

    @field_validator("principal_id", mode="before")
    @classmethod
    def coerce_principal_id(cls, value: Any) -> Any:
        return _stringify_id(value)

    @property
    def principal(self) -> PrincipalRef:
        return PrincipalRef(type=self.principal_type, id=self.principal_id)
