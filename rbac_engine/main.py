"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from rbac_engine.api.error_handlers import register_exception_handlers
from rbac_engine.api.routers import get_api_router
from rbac_engine.core.config import AppSettings, get_settings
from rbac_engine.core.database import session_scope
from rbac_engine.core.logging import configure_logging
from rbac_engine.services.roles import RoleService


@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa: D401
    """Seed baseline permissions and the root role on startup."""

    settings = get_settings()
    with session_scope() as session:
        service = RoleService(session, settings=settings)
        service.ensure_baseline_permissions(settings.default_permissions)
        if settings.seed_root_role:
            service.ensure_root_role()

    yield


def create_app(settings: AppSettings | None = None) -> FastAPI:
    """Application factory."""

    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="RBAC Authorization Engine",
        version="1.0.0",
        lifespan=lifespan,
    )

    register_exception_handlers(app)
    app.include_router(get_api_router())
    return app


app = create_app()
