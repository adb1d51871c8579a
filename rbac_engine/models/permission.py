"""Permission model representing atomic capabilities."""

from __future__ import annotations

import uuid
from typing import List

from sqlalchemy import Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rbac_engine.models.base import Base, TimestampMixin
from rbac_engine.models.types import GUID


class Permission(TimestampMixin, Base):
    """Grantable capability identified by name within a guard."""

    __tablename__ = "permissions"
    __table_args__ = (
        UniqueConstraint("name", "guard_name", name="uq_permissions_name_guard"),
        Index("ix_permissions_name", "name"),
    )

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(length=255), nullable=False)
    guard_name: Mapped[str] = mapped_column(String(length=64), nullable=False, default="web")
    label: Mapped[str | None] = mapped_column(String(length=255), nullable=True)

    roles: Mapped[List["Role"]] = relationship(
        "Role",
        secondary="role_permissions",
        back_populates="permissions",
    )
    assignments: Mapped[List["PermissionAssignment"]] = relationship(
        "PermissionAssignment",
        back_populates="permission",
        cascade="all, delete-orphan",
    )
