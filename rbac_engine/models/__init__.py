"""SQLAlchemy ORM models for the RBAC engine."""

from rbac_engine.models.base import Base  # noqa: F401
from rbac_engine.models.audit_log import AuditLog  # noqa: F401
from rbac_engine.models.container import (  # noqa: F401
    ContainerKind,
    Organization,
    OrganizationMembership,
    Partner,
    PartnerMembership,
)
from rbac_engine.models.permission import Permission  # noqa: F401
from rbac_engine.models.permission_assignment import PermissionAssignment  # noqa: F401
from rbac_engine.models.refs import ContextRef, PrincipalRef  # noqa: F401
from rbac_engine.models.role import Role  # noqa: F401
from rbac_engine.models.role_assignment import RoleAssignment  # noqa: F401
from rbac_engine.models.role_permission import RolePermission  # noqa: F401
