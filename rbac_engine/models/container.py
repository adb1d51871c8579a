"""Hierarchical container entities (organizations and partners) and their members.

Organizations and partners are structurally identical forests. Both are
mapped from ``ContainerMixin``; each concrete class only supplies its table
name and the ``context_type`` tag used when it scopes an assignment.
"""

from __future__ import annotations

import uuid
from enum import Enum
from typing import ClassVar, Dict, Optional, Tuple, Type

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, backref, declared_attr, mapped_column, relationship

from rbac_engine.models.base import Base, TimestampMixin
from rbac_engine.models.refs import ContextRef
from rbac_engine.models.types import GUID


class ContainerKind(str, Enum):
    ORGANIZATION = "organization"
    PARTNER = "partner"


class ContainerMixin(TimestampMixin):
    """Columns and parent/child relationships shared by every container."""

    context_type: ClassVar[str]

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(length=255), nullable=False)
    type: Mapped[Optional[str]] = mapped_column(String(length=64), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_business: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    @declared_attr
    def parent_id(cls) -> Mapped[Optional[uuid.UUID]]:
        return mapped_column(
            GUID(),
            ForeignKey(f"{cls.__tablename__}.id", ondelete="CASCADE"),
            nullable=True,
            index=True,
        )

    @declared_attr
    def parent(cls):
        return relationship(
            cls.__name__,
            remote_side=f"{cls.__name__}.id",
            back_populates="children",
        )

    @declared_attr
    def children(cls):
        return relationship(
            cls.__name__,
            back_populates="parent",
            cascade="all, delete-orphan",
        )


class Organization(ContainerMixin, Base):
    __tablename__ = "organizations"

    context_type = ContainerKind.ORGANIZATION.value


class Partner(ContainerMixin, Base):
    __tablename__ = "partners"

    context_type = ContainerKind.PARTNER.value


class MembershipMixin(TimestampMixin):
    """Principal membership in a container, with a free-text position."""

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    principal_type: Mapped[str] = mapped_column(String(length=64), nullable=False, default="user")
    principal_id: Mapped[str] = mapped_column(String(length=64), nullable=False)
    position: Mapped[Optional[str]] = mapped_column(String(length=255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class OrganizationMembership(MembershipMixin, Base):
    __tablename__ = "organization_members"
    __table_args__ = (
        UniqueConstraint(
            "container_id",
            "principal_type",
            "principal_id",
            name="uq_organization_members_container_principal",
        ),
        Index("ix_organization_members_principal", "principal_type", "principal_id"),
    )

    container_id: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
    )
    container: Mapped[Organization] = relationship(
        Organization,
        backref=backref("memberships", cascade="all, delete-orphan"),
    )


class PartnerMembership(MembershipMixin, Base):
    __tablename__ = "partner_members"
    __table_args__ = (
        UniqueConstraint(
            "container_id",
            "principal_type",
            "principal_id",
            name="uq_partner_members_container_principal",
        ),
        Index("ix_partner_members_principal", "principal_type", "principal_id"),
    )

    container_id: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        ForeignKey("partners.id", ondelete="CASCADE"),
        nullable=False,
    )
    container: Mapped[Partner] = relationship(
        Partner,
        backref=backref("memberships", cascade="all, delete-orphan"),
    )


CONTAINER_MODELS: Dict[ContainerKind, Tuple[Type[ContainerMixin], Type[MembershipMixin]]] = {
    ContainerKind.ORGANIZATION: (Organization, OrganizationMembership),
    ContainerKind.PARTNER: (Partner, PartnerMembership),
}


def get_container_models(kind: ContainerKind | str) -> Tuple[Type[ContainerMixin], Type[MembershipMixin]]:
    """Return the container model and its membership model for ``kind``."""

    return CONTAINER_MODELS[ContainerKind(kind)]


def is_container_kind(kind: str) -> bool:
    return kind in CONTAINER_MODELS


def canonical_context(ref: Optional[ContextRef]) -> Optional[ContextRef]:
    """Key a container context by its canonical UUID string; other kinds pass through."""

    if ref is None or not is_container_kind(ref.kind):
        return ref
    try:
        return ContextRef.of(ref.kind, uuid.UUID(ref.id))
    except ValueError:
        return ref
