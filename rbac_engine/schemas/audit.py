"""Audit log schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class AuditLogResponse(BaseModel):
    id: UUID
    action: str
    actor_id: Optional[str] = None
    actor_type: str
    subject_type: Optional[str] = None
    subject_id: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)
    occurred_at: datetime

    model_config = ConfigDict(from_attributes=True)
