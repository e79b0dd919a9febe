"""Shared fixtures for the helpdesk test-suite."""

import pytest
from fastapi.testclient import TestClient

from helpdesk.core.app_factory import create_application
from helpdesk.core.config import Settings
from helpdesk.infrastructure.persistence.sqlite import SQLitePersistence

TEST_SECRET = "test-secret"


@pytest.fixture
def settings(monkeypatch, tmp_path):
    monkeypatch.setenv("TOKEN_SECRET", TEST_SECRET)
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "helpdesk.db"))
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.delenv("TOKEN_EXP_HOURS", raising=False)
    return Settings()


@pytest.fixture
def app(settings):
    return create_application(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def persistence(tmp_path):
    gateway = SQLitePersistence(tmp_path / "store.db")
    yield gateway
    gateway.close()


def _register_and_login(client, name, email, password):
    response = client.post(
        "/api/v1/auth/register",
        json={"name": name, "email": email, "password": password},
    )
    assert response.status_code == 201, response.text
    response = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    body = response.json()
    return {"Authorization": f"Bearer {body['token']}"}, body["user"]


@pytest.fixture
def login_as(client):
    """Register a user and return ``(headers, user)`` for authenticated calls."""

    def _login_as(name="A", email="a@x.com", password="password1"):
        return _register_and_login(client, name, email, password)

    return _login_as


@pytest.fixture
def auth(login_as):
    return login_as()
