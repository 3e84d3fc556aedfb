"""
Shared fixtures: SQLite-backed settings, stores and an app test client.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from config.settings import Settings
from database.session import create_engine, create_schema, create_session_factory
from database.stores import SqlCredentialStore, SqlTaskStore
from main import create_app


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'tasks.sqlite3'}",
        jwt_secret="test-secret",
        jwt_expiry_seconds=3600,
        bcrypt_rounds=4,
    )


@pytest_asyncio.fixture
async def session_factory(settings: Settings):
    engine = create_engine(settings)
    await create_schema(engine)
    yield create_session_factory(engine)
    await engine.dispose()


@pytest.fixture
def credential_store(session_factory) -> SqlCredentialStore:
    return SqlCredentialStore(session_factory)


@pytest.fixture
def task_store(session_factory) -> SqlTaskStore:
    return SqlTaskStore(session_factory)


@pytest.fixture
def client(settings: Settings):
    app = create_app(settings)
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(client: TestClient):
    """Register (if needed) and log in, returning an Authorization header."""

    def _login(email: str, password: str = "pw1") -> Dict[str, str]:
        client.post("/register", json={"email": email, "password": password})
        response = client.post("/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _login
