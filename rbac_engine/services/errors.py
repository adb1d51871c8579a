"""Error taxonomy shared by the service layer.

A denied check is never an error: the engine returns ``False``. Everything
here signals that a decision could not be made or a write was rejected, and
callers must not read any of it as "permitted".
"""

from __future__ import annotations


class RbacError(Exception):
    """Base class for RBAC service errors."""


class NotFoundError(RbacError):
    """A referenced role, permission or container does not exist."""


class RoleNotFoundError(NotFoundError):
    """Raised when a role cannot be resolved."""


class PermissionNotFoundError(NotFoundError):
    """Raised when a permission cannot be resolved."""


class ContainerNotFoundError(NotFoundError):
    """Raised when an organization or partner cannot be resolved."""


class CycleDetectedError(RbacError):
    """A hierarchy walk revisited an entity, so the parent chain is corrupt."""

    def __init__(self, message: str, *, entity_id: object = None) -> None:
        super().__init__(message)
        self.entity_id = entity_id


class ConflictError(RbacError):
    """A write collided with an existing record."""


class RoleConflictError(ConflictError):
    """Raised when attempting to create a role that already exists."""


class PermissionConflictError(ConflictError):
    """Raised when attempting to create a permission that already exists."""


class AlreadyMemberError(ConflictError):
    """Raised when a principal joins a container it already belongs to."""


class InvalidAssignmentError(RbacError):
    """Raised when an assignment's activity window is malformed."""
