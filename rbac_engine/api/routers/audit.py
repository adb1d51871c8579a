"""Audit trail endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from rbac_engine.api.dependencies import get_audit_service
from rbac_engine.schemas.audit import AuditLogResponse
from rbac_engine.services.audit import AuditService

router = APIRouter()


@router.get(
    "",
    response_model=List[AuditLogResponse],
)
def list_audit_logs(
    action: Optional[str] = Query(default=None),
    limit: int = Query(default=100, ge=1, le=1000),
    service: AuditService = Depends(get_audit_service),
) -> List[AuditLogResponse]:
    return [AuditLogResponse.model_validate(entry, from_attributes=True) for entry in service.list(action=action, limit=limit)]
