"""Test fixtures for the device console API tests."""

import asyncio

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config.settings import settings
from app.db.db import build_engine, create_tables
from app.db.seed import ensure_bootstrap_admin
from app.main import app
from app.models.admin_user import UserRole
from app.utils.auth import Caller

BOOTSTRAP_PASSWORD = "bootstrap-pass"


@pytest.fixture
def db_url(tmp_path, monkeypatch):
    """Point the application at a fresh SQLite file for each test."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'device_console_test.db'}"
    monkeypatch.setattr(settings, "DATABASE_URL", url)
    monkeypatch.setattr(settings, "BOOTSTRAP_ADMIN_PASSWORD", BOOTSTRAP_PASSWORD)
    monkeypatch.setattr(settings, "CLIENT_CODE", "")
    monkeypatch.setattr(settings, "SEED_SAMPLE_DEVICES", False)
    return url


@pytest.fixture
def run_db(db_url):
    """Run ``fn(session)`` against the test database and return its result.

    Each call gets its own engine and event loop; state persists in the file.
    """

    def _run(fn):
        async def _go():
            engine = build_engine(db_url)
            await create_tables(engine)
            session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
            try:
                async with session_maker() as session:
                    return await fn(session)
            finally:
                await engine.dispose()

        return asyncio.run(_go())

    return _run


@pytest.fixture
def bootstrap_caller(run_db) -> Caller:
    """Seed the bootstrap super admin and return it as a Caller."""
    user = run_db(ensure_bootstrap_admin)
    return Caller(id=user.id, username=user.username, role=UserRole.SUPER_ADMIN)


@pytest.fixture
def client(db_url):
    """TestClient with the app lifespan (table creation and seeding) running."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def login(client):
    """Return a helper that logs in and builds the Bearer header."""

    def _login(username: str, password: str) -> dict:
        response = client.post("/api/auth/login", json={"username": username, "password": password})
        assert response.status_code == 200, response.text
        token = response.json()["data"]["access_token"]
        return {"Authorization": f"Bearer {token}"}

    return _login


@pytest.fixture
def super_headers(login) -> dict:
    """Auth header for the bootstrap super admin."""
    return login(settings.BOOTSTRAP_ADMIN_USERNAME, BOOTSTRAP_PASSWORD)


@pytest.fixture
def admin_headers(client, login, super_headers) -> dict:
    """Auth header for a plain ``admin`` account created by the super admin."""
    response = client.post(
        "/api/users",
        json={"username": "manager", "password": "1234", "role": "admin"},
        headers=super_headers,
    )
    assert response.status_code == 201, response.text
    return login("manager", "1234")
