"""Router registrations."""

from fastapi import APIRouter

from rbac_engine.api.routers import (
    assignments,
    audit,
    authorization,
    containers,
    health,
    permissions,
    roles,
)


def get_api_router() -> APIRouter:
    router = APIRouter()
    router.include_router(health.router, tags=["health"])
    router.include_router(roles.router, prefix="/api/v1/roles", tags=["roles"])
    router.include_router(permissions.router, prefix="/api/v1/permissions", tags=["permissions"])
    router.include_router(assignments.router, prefix="/api/v1/assignments", tags=["assignments"])
    router.include_router(containers.router, prefix="/api/v1/containers", tags=["containers"])
    router.include_router(authorization.router, prefix="/api/v1", tags=["authorization"])
    router.include_router(audit.router, prefix="/api/v1/audit-logs", tags=["audit"])
    return router
