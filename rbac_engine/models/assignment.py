"""Columns shared by role and permission assignments."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from rbac_engine.models.refs import ContextRef, PrincipalRef
from rbac_engine.models.types import GUID, UTCDateTime


class AssignmentMixin:
    """Principal, context and activity window of a grant.

    A null context means the grant is global. ``activated_at`` and
    ``expired_at`` bound the window in which the grant is active; either may
    be left open.
    """

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    principal_type: Mapped[str] = mapped_column(String(length=64), nullable=False, default="user")
    principal_id: Mapped[str] = mapped_column(String(length=64), nullable=False)
    context_type: Mapped[Optional[str]] = mapped_column(String(length=64), nullable=True)
    context_id: Mapped[Optional[str]] = mapped_column(String(length=64), nullable=True)
    activated_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    expired_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    @property
    def principal(self) -> PrincipalRef:
        return PrincipalRef(type=self.principal_type, id=self.principal_id)

    @property
    def context(self) -> Optional[ContextRef]:
        if self.context_type is None:
            return None
        return ContextRef(kind=self.context_type, id=self.context_id or "")
