"""Audit log entries for grant and administration traceability."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from rbac_engine.models.base import Base, TimestampMixin
from rbac_engine.models.types import GUID, JSONType, UTCDateTime


class AuditLog(TimestampMixin, Base):
    """Append-only record of a write made through the service layer."""

    __tablename__ = "audit_logs"
    __table_args__ = (
        Index("ix_audit_logs_actor", "actor_id"),
        Index("ix_audit_logs_subject", "subject_type", "subject_id"),
        Index("ix_audit_logs_action", "action"),
    )

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    action: Mapped[str] = mapped_column(String(length=120), nullable=False)
    actor_id: Mapped[str | None] = mapped_column(String(length=64), nullable=True)
    actor_type: Mapped[str] = mapped_column(String(length=64), nullable=False, default="user")
    subject_type: Mapped[str | None] = mapped_column(String(length=64), nullable=True)
    subject_id: Mapped[str | None] = mapped_column(String(length=64), nullable=True)
    details: Mapped[dict] = mapped_column(JSONType, default=dict, nullable=False)
    occurred_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
