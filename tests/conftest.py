import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("RBAC_ENVIRONMENT", "test")
os.environ.setdefault("RBAC_DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("RBAC_LOG_JSON", "false")

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from rbac_engine.core.config import get_settings  # noqa: E402

get_settings.cache_clear()

from rbac_engine.core.database import engine  # noqa: E402
from rbac_engine.main import create_app  # noqa: E402
from rbac_engine.models import Base  # noqa: E402


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client() -> TestClient:  # noqa: ANN001
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def session():
    from rbac_engine.core.database import SessionLocal

    db_session = SessionLocal()
    try:
        yield db_session
    finally:
        db_session.rollback()
        db_session.close()
