"""Initial schema for roles, permissions, assignments and containers."""

from __future__ import annotations
from typing import Union, Sequence

from alembic import op
import sqlalchemy as sa
from rbac_engine.models.types import GUID, JSONType, UTCDateTime

# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", UTCDateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", UTCDateTime(), server_default=sa.func.now(), nullable=False),
    ]


def _assignment_columns() -> list[sa.Column]:
    return [
        sa.Column("id", GUID(), nullable=False),
        sa.Column("principal_type", sa.String(length=64), nullable=False),
        sa.Column("principal_id", sa.String(length=64), nullable=False),
        sa.Column("context_type", sa.String(length=64), nullable=True),
        sa.Column("context_id", sa.String(length=64), nullable=True),
        sa.Column("activated_at", UTCDateTime(), nullable=True),
        sa.Column("expired_at", UTCDateTime(), nullable=True),
    ]


def _create_container_tables(table: str, members_table: str) -> None:
    op.create_table(
        table,
        sa.Column("id", GUID(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("type", sa.String(length=64), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_business", sa.Boolean(), nullable=False),
        sa.Column("parent_id", GUID(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["parent_id"], [f"{table}.id"], name=op.f(f"fk_{table}_parent_id_{table}"), ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name=op.f(f"pk_{table}")),
    )
    op.create_index(op.f(f"ix_{table}_parent_id"), table, ["parent_id"], unique=False)
    op.create_table(
        members_table,
        sa.Column("id", GUID(), nullable=False),
        sa.Column("container_id", GUID(), nullable=False),
        sa.Column("principal_type", sa.String(length=64), nullable=False),
        sa.Column("principal_id", sa.String(length=64), nullable=False),
        sa.Column("position", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["container_id"], [f"{table}.id"], name=op.f(f"fk_{members_table}_container_id_{table}"), ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name=op.f(f"pk_{members_table}")),
        sa.UniqueConstraint("container_id", "principal_type", "principal_id", name=f"uq_{members_table}_container_principal"),
    )
    op.create_index(f"ix_{members_table}_principal", members_table, ["principal_type", "principal_id"], unique=False)


def upgrade() -> None:
    """Create the RBAC tables."""
    op.create_table(
        "roles",
        sa.Column("id", GUID(), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("guard_name", sa.String(length=64), nullable=False),
        sa.Column("label", sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_roles")),
        sa.UniqueConstraint("name", "guard_name", name="uq_roles_name_guard"),
    )
    op.create_index("ix_roles_name", "roles", ["name"], unique=False)
    op.create_table(
        "permissions",
        sa.Column("id", GUID(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("guard_name", sa.String(length=64), nullable=False),
        sa.Column("label", sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_permissions")),
        sa.UniqueConstraint("name", "guard_name", name="uq_permissions_name_guard"),
    )
    op.create_index("ix_permissions_name", "permissions", ["name"], unique=False)
    op.create_table(
        "role_permissions",
        sa.Column("role_id", GUID(), nullable=False),
        sa.Column("permission_id", GUID(), nullable=False),
        sa.ForeignKeyConstraint(["permission_id"], ["permissions.id"], name=op.f("fk_role_permissions_permission_id_permissions"), ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["role_id"], ["roles.id"], name=op.f("fk_role_permissions_role_id_roles"), ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("role_id", "permission_id", name=op.f("pk_role_permissions")),
    )
    op.create_table(
        "role_assignments",
        *_assignment_columns(),
        sa.Column("role_id", GUID(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["role_id"], ["roles.id"], name=op.f("fk_role_assignments_role_id_roles"), ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_role_assignments")),
    )
    op.create_index("ix_role_assignments_principal", "role_assignments", ["principal_type", "principal_id"], unique=False)
    op.create_index("ix_role_assignments_context", "role_assignments", ["context_type", "context_id"], unique=False)
    op.create_index("ix_role_assignments_role", "role_assignments", ["role_id"], unique=False)
    op.create_table(
        "permission_assignments",
        *_assignment_columns(),
        sa.Column("permission_id", GUID(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["permission_id"], ["permissions.id"], name=op.f("fk_permission_assignments_permission_id_permissions"), ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_permission_assignments")),
    )
    op.create_index("ix_permission_assignments_principal", "permission_assignments", ["principal_type", "principal_id"], unique=False)
    op.create_index("ix_permission_assignments_context", "permission_assignments", ["context_type", "context_id"], unique=False)
    op.create_index("ix_permission_assignments_permission", "permission_assignments", ["permission_id"], unique=False)
    _create_container_tables("organizations", "organization_members")
    _create_container_tables("partners", "partner_members")
    op.create_table(
        "audit_logs",
        sa.Column("id", GUID(), nullable=False),
        sa.Column("action", sa.String(length=120), nullable=False),
        sa.Column("actor_id", sa.String(length=64), nullable=True),
        sa.Column("actor_type", sa.String(length=64), nullable=False),
        sa.Column("subject_type", sa.String(length=64), nullable=True),
        sa.Column("subject_id", sa.String(length=64), nullable=True),
        sa.Column("details", JSONType(), nullable=False),
        sa.Column("occurred_at", UTCDateTime(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_audit_logs")),
    )
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"], unique=False)
    op.create_index("ix_audit_logs_actor", "audit_logs", ["actor_id"], unique=False)
    op.create_index("ix_audit_logs_subject", "audit_logs", ["subject_type", "subject_id"], unique=False)


def downgrade() -> None:
    """Drop all RBAC tables."""
    op.drop_table("audit_logs")
    for members_table, table in (("partner_members", "partners"), ("organization_members", "organizations")):
        op.drop_table(members_table)
        op.drop_table(table)
    op.drop_table("permission_assignments")
    op.drop_table("role_assignments")
    op.drop_table("role_permissions")
    op.drop_table("permissions")
    op.drop_table("roles")
