"""Activation/expiry window checks for assignments."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional, Protocol

from sqlalchemy import and_, or_
from sqlalchemy.sql.elements import ColumnElement

from rbac_engine.models.types import as_utc

Clock = Callable[[], datetime]


class TemporalBounds(Protocol):
    activated_at: Optional[datetime]
    expired_at: Optional[datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive datetimes are taken as UTC; aware ones are converted to UTC."""

    return as_utc(value)


def is_active(assignment: TemporalBounds, at: Optional[datetime] = None) -> bool:
    """Return whether ``assignment`` is active at ``at`` (both bounds inclusive)."""

    reference = as_utc(at) if at is not None else utcnow()
    activated_at = as_utc(assignment.activated_at)
    expired_at = as_utc(assignment.expired_at)

    if activated_at is not None and activated_at > reference:
        return False
    if expired_at is not None and expired_at < reference:
        return False
    return True


def active_at(model, at: datetime) -> ColumnElement[bool]:
    """SQL form of :func:`is_active` for an assignment model."""

    reference = as_utc(at)
    return and_(
        or_(model.activated_at.is_(None), model.activated_at <= reference),
        or_(model.expired_at.is_(None), model.expired_at >= reference),
    )
