# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# Every test gets its own SQLite file, a fixed signing secret and the
# cheapest bcrypt cost so the suite stays fast.
# =============================================================================

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from taskboard.config import Settings
from taskboard.main import create_app

TEST_SECRET = "test_secret"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'taskboard-test.db'}",
        secret_key=TEST_SECRET,
        access_token_expire_minutes=60,
        bcrypt_rounds=4,
        log_level="DEBUG",
    )


@pytest.fixture
def app(settings: Settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register_and_login(client):
    """Register a user, log in, and return (auth headers, public user)."""

    def _register_and_login(name="Alice", email="alice@x.com", password="password123"):
        response = client.post("/users/register", json={"name": name, "email": email, "password": password})
        assert response.status_code == 201, response.text
        response = client.post("/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        body = response.json()
        return {"Authorization": f"Bearer {body['token']}"}, body["user"]

    return _register_and_login


@pytest.fixture
def alice(register_and_login):
    return register_and_login("Alice", "alice@x.com", "password123")


@pytest.fixture
def bob(register_and_login):
    return register_and_login("Bob", "bob@x.com", "hunter2hunter2")
