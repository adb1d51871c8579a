"""Role model for grouping permissions."""

from __future__ import annotations

import uuid
from typing import List

from sqlalchemy import Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rbac_engine.models.base import Base, TimestampMixin
from rbac_engine.models.types import GUID


class Role(TimestampMixin, Base):
    """Named bundle of permissions, unique per guard."""

    __tablename__ = "roles"
    __table_args__ = (
        UniqueConstraint("name", "guard_name", name="uq_roles_name_guard"),
        Index("ix_roles_name", "name"),
    )

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(length=120), nullable=False)
    guard_name: Mapped[str] = mapped_column(String(length=64), nullable=False, default="web")
    label: Mapped[str | None] = mapped_column(String(length=255), nullable=True)

    permissions: Mapped[List["Permission"]] = relationship(
        "Permission",
        secondary="role_permissions",
        back_populates="roles",
    )
    assignments: Mapped[List["RoleAssignment"]] = relationship(
        "RoleAssignment",
        back_populates="role",
        cascade="all, delete-orphan",
    )
