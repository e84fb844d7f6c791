# tests/conftest.py
from __future__ import annotations

import asyncio
import itertools
import os
import tempfile
from pathlib import Path

# Point the app at a throwaway database before anything imports the settings.
_DB_DIR = Path(tempfile.mkdtemp(prefix="workforce-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR / 'workforce-test.db'}"
os.environ["DEBUG"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from workforce.database import Base, engine  # noqa: E402
from workforce.main import app  # noqa: E402
from workforce.services.store import bootstrap  # noqa: E402

PASSWORD = "s3cret-pass"

_usernames = itertools.count(1)


async def _reset_schema() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await bootstrap()


# -----------------------------
# Database
# -----------------------------
@pytest.fixture
def fresh_db() -> None:
    """Empty schema with the default skill categories seeded."""
    asyncio.run(_reset_schema())


# -----------------------------
# HTTP clients
# -----------------------------
@pytest.fixture
def anonymous(fresh_db) -> TestClient:
    return TestClient(app)


@pytest.fixture
def register(fresh_db):
    """
    Factory: register a user of ``role`` and return a TestClient carrying
    their session cookie. The created user's JSON is on ``client.user``.
    """

    def _register(role: str = "employee", name: str | None = None) -> TestClient:
        username = f"{role}{next(_usernames)}"
        client = TestClient(app)
        response = client.post(
            "/api/register",
            json={
                "username": username,
                "password": PASSWORD,
                "confirmPassword": PASSWORD,
                "name": name or username.title(),
                "email": f"{username}@example.com",
                "role": role,
            },
        )
        assert response.status_code == 201, response.text
        client.user = response.json()
        return client

    return _register


@pytest.fixture
def admin(register) -> TestClient:
    return register("admin", name="Avery Admin")


@pytest.fixture
def manager(register) -> TestClient:
    return register("project_manager", name="Parker Manager")


@pytest.fixture
def sales(register) -> TestClient:
    return register("sales", name="Sam Sales")


@pytest.fixture
def employee(register) -> TestClient:
    return register("employee", name="Alice Builder")


# -----------------------------
# Domain helpers
# -----------------------------
@pytest.fixture
def make_skill(admin):
    def _make_skill(name: str, category: str = "Frontend") -> dict:
        response = admin.post("/api/skills", json={"name": name, "category": category})
        assert response.status_code == 201, response.text
        return response.json()

    return _make_skill


@pytest.fixture
def make_project(admin):
    def _make_project(code: str, name: str | None = None, **extra) -> dict:
        body = {"name": name or f"Project {code}", "code": code, **extra}
        response = admin.post("/api/projects", json=body)
        assert response.status_code == 201, response.text
        return response.json()

    return _make_project


@pytest.fixture
def password() -> str:
    """Password every ``register``-ed user signs up with."""
    return PASSWORD
