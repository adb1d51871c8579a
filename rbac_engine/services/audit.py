"""Audit logging service."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from rbac_engine.models.audit_log import AuditLog
from rbac_engine.services.temporal import utcnow


class AuditService:
    """Persists audit entries and mirrors them to structured logs."""

    def __init__(self, session: Session) -> None:
        self._session = session
        self._logger = logging.getLogger("rbac_engine.audit")

    def record(
        self,
        *,
        action: str,
        actor_id: Optional[str],
        subject_type: Optional[str] = None,
        subject_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        actor_type: str = "user",
        occurred_at: Optional[datetime] = None,
    ) -> AuditLog:
        entry = AuditLog(
            action=action,
            actor_id=actor_id,
            actor_type=actor_type,
            subject_type=subject_type,
            subject_id=subject_id,
            details=details or {},
            occurred_at=occurred_at or utcnow(),
        )
        self._session.add(entry)
        self._session.flush()

        self._logger.info(
            "audit_recorded",
            extra={
                "audit_id": str(entry.id),
                "action": action,
                "actor_id": actor_id,
                "subject_type": subject_type,
                "subject_id": subject_id,
            },
        )
        return entry

    def list(self, *, action: Optional[str] = None, limit: int = 100) -> List[AuditLog]:
        stmt = select(AuditLog)
        if action:
            stmt = stmt.filter(AuditLog.action == action)
        stmt = stmt.order_by(AuditLog.occurred_at.desc()).limit(limit)
        return list(self._session.scalars(stmt))
