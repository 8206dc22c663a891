# tests/conftest.py

import pytest
from unittest.mock import patch
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from spotlight.main import app
from spotlight.db.session import get_db
from spotlight.models import Base
from spotlight.core.config import settings
from spotlight.core.limiter import limiter


# --- Test Database Setup ---
# One in-memory SQLite database shared by every connection (StaticPool),
# rebuilt for each test.
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield


# --- Mock Dependencies Setup ---
@pytest.fixture(scope="function")
def mock_onboarding_email():
    """Replaces the Resend-backed onboarding email with a successful stub."""
    with patch(
        "spotlight.core.email.send_portal_onboarding_email",
        return_value={"success": True, "id": "email_test"},
    ) as mocked:
        yield mocked


@pytest.fixture(scope="function")
def admin_headers():
    return {"X-Admin-Key": settings.ADMIN_API_KEY}


# --- Test Client Fixture ---
@pytest.fixture(scope="function")
def client(db, mock_onboarding_email):
    """
    Provides a TestClient bound to the per-test SQLite session, with the
    onboarding email stubbed out.
    """

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
