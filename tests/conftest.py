"""
tests/conftest.py -- Shared test fixtures for the back-office API tests.

This module provides:
  - make_settings(): Settings built from explicit values, ignoring .env
  - client: TestClient over a freshly built app with all secrets configured
  - unconfigured_client: TestClient over an app with no secrets at all
  - authenticator: SessionAuthenticator bound to the configured settings

Design: every client fixture is function-scoped and wraps its own app from
create_app(settings). The TestClient cookie jar keeps the session cookie
between requests, so sharing a client across tests would leak a login from
one test into the next.

The bcrypt hash is computed once per session -- bcrypt is slow on purpose.
"""

from __future__ import annotations

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from auth.tokens import SessionAuthenticator, hash_password
from core.config import Settings

ADMIN_PASSWORD = "correct-horse-battery-staple"
JWT_SECRET = "test-session-secret-0123456789abcdef0123456789"
HMAC_SECRET = "test-hmac-secret-0123456789abcdef0123456789ab"

_PASSWORD_HASH = hash_password(ADMIN_PASSWORD)


def make_settings(**overrides) -> Settings:
    """Build Settings from explicit values so the host environment cannot leak in."""
    values = {
        "environment": "development",
        "debug": False,
        "admin_password_hash": _PASSWORD_HASH,
        "jwt_secret": JWT_SECRET,
        "form_hmac_secret": HMAC_SECRET,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def authenticator(settings: Settings) -> SessionAuthenticator:
    return SessionAuthenticator(settings)


@pytest.fixture
def client(settings: Settings) -> Generator[TestClient, None, None]:
    """TestClient for an app with password hash, session secret and HMAC secret set."""
    with TestClient(create_app(settings), raise_server_exceptions=True) as c:
        yield c


@pytest.fixture
def unconfigured_client() -> Generator[TestClient, None, None]:
    """TestClient for an app with every secret left empty."""
    empty = make_settings(admin_password_hash="", jwt_secret="", form_hmac_secret="")
    with TestClient(create_app(empty), raise_server_exceptions=True) as c:
        yield c


def login(client: TestClient, password: str = ADMIN_PASSWORD):
    return client.post("/api/v1/admin/auth/login", json={"password": password})


def set_cookie_headers(resp) -> list[str]:
    return [v for k, v in resp.headers.multi_items() if k.lower() == "set-cookie"]
