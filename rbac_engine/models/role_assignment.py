"""Role assignment linking principals to roles."""

from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rbac_engine.models.assignment import AssignmentMixin
from rbac_engine.models.base import Base, TimestampMixin
from rbac_engine.models.types import GUID


class RoleAssignment(AssignmentMixin, TimestampMixin, Base):
    """Grants a role to a principal, globally or within one context."""

    __tablename__ = "role_assignments"
    __table_args__ = (
        Index("ix_role_assignments_principal", "principal_type", "principal_id"),
        Index("ix_role_assignments_context", "context_type", "context_id"),
        Index("ix_role_assignments_role", "role_id"),
    )

    role_id: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
    )

    role: Mapped["Role"] = relationship("Role", back_populates="assignments")
