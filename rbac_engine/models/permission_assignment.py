"""Direct permission grants that bypass roles."""

from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rbac_engine.models.assignment import AssignmentMixin
from rbac_engine.models.base import Base, TimestampMixin
from rbac_engine.models.types import GUID


class PermissionAssignment(AssignmentMixin, TimestampMixin, Base):
    """Grants a permission to a principal directly."""

    __tablename__ = "permission_assignments"
    __table_args__ = (
        Index("ix_permission_assignments_principal", "principal_type", "principal_id"),
        Index("ix_permission_assignments_context", "context_type", "context_id"),
        Index("ix_permission_assignments_permission", "permission_id"),
    )

    permission_id: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        ForeignKey("permissions.id", ondelete="CASCADE"),
        nullable=False,
    )

    permission: Mapped["Permission"] = relationship("Permission", back_populates="assignments")
