"""Business logic service layer."""

from rbac_engine.services.assignments import AssignmentService  # noqa: F401
from rbac_engine.services.authorization import AuthorizationService  # noqa: F401
from rbac_engine.services.containers import ContainerService  # noqa: F401
from rbac_engine.services.hierarchy import HierarchyResolver  # noqa: F401
from rbac_engine.services.roles import RoleService  # noqa: F401
