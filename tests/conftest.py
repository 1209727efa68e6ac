"""
Pytest configuration and fixtures.
"""
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from key_manager.core.config import Settings
from key_manager.core.context import build_context
from key_manager.main import create_app

TEST_JWT_SECRET = "test-signing-secret-0123456789-abcdefghijklmnop"
START_TIME = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Clock that only moves when a test advances it."""

    def __init__(self, now: datetime):
        self.current = now

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **delta) -> None:
        self.current = self.current + timedelta(**delta)


def make_settings(database_url: str, **overrides) -> Settings:
    values = dict(
        DATABASE_URL=database_url,
        APP_ENV="test",
        JWT_SECRET=TEST_JWT_SECRET,
        BCRYPT_ROUNDS=4,  # Minimum cost keeps the suite fast
        LOG_DIR="",
        STATIC_DIR=None,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture(scope="function")
def test_settings(tmp_path):
    """Settings pointing at a fresh SQLite file per test."""
    return make_settings(f"sqlite:///{tmp_path / 'test_key_manager.db'}")


@pytest.fixture(scope="function")
def clock():
    return FrozenClock(START_TIME)


@pytest.fixture(scope="function")
def context(test_settings, clock):
    """Application context with all tables created."""
    ctx = build_context(test_settings, clock=clock)
    ctx.create_schema()
    yield ctx
    ctx.dispose()


@pytest.fixture(scope="function")
def client(context):
    """Test client bound to the test context (lifespan runs on enter)."""
    app = create_app(context=context)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(scope="function")
def db_session(context):
    """Provide a database session for tests that need direct DB access."""
    session = context.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def admin_credential(client):
    """Register an admin and return a valid bearer credential."""
    response = client.post("/admin/register", json={"email": "ops@example.com", "password": "correct-horse"})
    assert response.status_code == 201
    response = client.post("/admin/login", json={"email": "ops@example.com", "password": "correct-horse"})
    assert response.status_code == 200
    return response.json()["credential"]
