"""
tests/test_tokens.py -- Unit tests for SessionAuthenticator.

Covers:
  - login(): success issues a token that verifies as admin with a 24h window
  - login(): wrong password, empty password, missing/invalid hash, missing secret
  - verify(): no token, expired, tampered, foreign secret, wrong role, garbage
  - verify(): never raises, even with no signing secret configured
  - Expired and tampered tokens look the same to the client but are logged
    with different reasons
"""

from __future__ import annotations

import base64
import json
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt
from structlog.testing import capture_logs

from auth.tokens import (
    INVALID_ROLE,
    INVALID_TOKEN,
    NO_TOKEN,
    SessionAuthenticator,
    is_bcrypt_hash,
    verify_password,
)
from conftest import ADMIN_PASSWORD, JWT_SECRET, make_settings
from core.errors import ConfigurationError, InvalidCredentialsError, ValidationError


def _tamper(token: str) -> str:
    """Push exp one hour further out without re-signing."""
    header, payload, signature = token.split(".")
    claims = json.loads(base64.urlsafe_b64decode(payload + "=" * (-len(payload) % 4)))
    claims["exp"] += 3600
    forged = base64.urlsafe_b64encode(json.dumps(claims).encode()).rstrip(b"=").decode()
    return ".".join([header, forged, signature])


class TestLogin:
    def test_valid_password_issues_verifiable_token(self, authenticator: SessionAuthenticator) -> None:
        token, claims = authenticator.login(ADMIN_PASSWORD)
        status = authenticator.verify(token)
        assert status.authenticated is True
        assert status.role == "admin"
        assert claims.role == "admin"
        assert claims.expires_at - claims.issued_at == timedelta(hours=24)

    def test_wrong_password(self, authenticator: SessionAuthenticator) -> None:
        with pytest.raises(InvalidCredentialsError) as exc_info:
            authenticator.login("not-the-password")
        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Invalid password"

    def test_empty_password_is_validation_error(self, authenticator: SessionAuthenticator) -> None:
        with pytest.raises(ValidationError) as exc_info:
            authenticator.login("")
        assert exc_info.value.status_code == 400
        assert exc_info.value.details == {"field": "password"}

    def test_missing_hash_is_configuration_error(self) -> None:
        auth = SessionAuthenticator(make_settings(admin_password_hash=""))
        with pytest.raises(ConfigurationError) as exc_info:
            auth.login(ADMIN_PASSWORD)
        assert exc_info.value.status_code == 500
        assert exc_info.value.error_code == "configuration_error"

    def test_non_bcrypt_hash_is_configuration_error(self) -> None:
        auth = SessionAuthenticator(make_settings(admin_password_hash=ADMIN_PASSWORD))
        with pytest.raises(ConfigurationError):
            auth.login(ADMIN_PASSWORD)

    def test_missing_secret_is_configuration_error(self) -> None:
        auth = SessionAuthenticator(make_settings(jwt_secret=""))
        with pytest.raises(ConfigurationError):
            auth.login(ADMIN_PASSWORD)

    def test_failed_login_log_has_no_password(self, authenticator: SessionAuthenticator) -> None:
        with capture_logs() as logs:
            with pytest.raises(InvalidCredentialsError):
                authenticator.login("hunter2-guess")
        assert logs
        assert "hunter2-guess" not in repr(logs)


class TestVerify:
    def test_no_token(self, authenticator: SessionAuthenticator) -> None:
        status = authenticator.verify(None)
        assert status.authenticated is False
        assert status.message == NO_TOKEN

    def test_expired_token_rejected(self, authenticator: SessionAuthenticator) -> None:
        token, _ = authenticator.issue(now=datetime.now(timezone.utc) - timedelta(hours=25))
        status = authenticator.verify(token)
        assert status.authenticated is False
        assert status.message == INVALID_TOKEN

    def test_tampered_token_rejected(self, authenticator: SessionAuthenticator) -> None:
        token, _ = authenticator.issue()
        status = authenticator.verify(_tamper(token))
        assert status.authenticated is False
        assert status.message == INVALID_TOKEN

    def test_token_from_other_secret_rejected(self, authenticator: SessionAuthenticator) -> None:
        other = SessionAuthenticator(make_settings(jwt_secret="x" * 40))
        token, _ = other.issue()
        assert authenticator.verify(token).authenticated is False

    def test_wrong_role_rejected_despite_valid_signature(self, authenticator: SessionAuthenticator) -> None:
        exp = datetime.now(timezone.utc) + timedelta(hours=1)
        token = jwt.encode({"role": "editor", "exp": exp}, JWT_SECRET, algorithm="HS256")
        status = authenticator.verify(token)
        assert status.authenticated is False
        assert status.message == INVALID_ROLE

    def test_token_without_expiry_rejected(self, authenticator: SessionAuthenticator) -> None:
        token = jwt.encode({"role": "admin"}, JWT_SECRET, algorithm="HS256")
        assert authenticator.verify(token).authenticated is False

    @pytest.mark.parametrize("garbage", ["not-a-token", "a.b.c", "...", "eyJhbGciOiJub25lIn0.e30."])
    def test_malformed_token_never_raises(self, authenticator: SessionAuthenticator, garbage: str) -> None:
        status = authenticator.verify(garbage)
        assert status.authenticated is False
        assert status.message == INVALID_TOKEN

    def test_missing_secret_never_raises(self, authenticator: SessionAuthenticator) -> None:
        token, _ = authenticator.issue()
        status = SessionAuthenticator(make_settings(jwt_secret="")).verify(token)
        assert status.authenticated is False

    def test_expiry_is_fixed_at_issue(self, authenticator: SessionAuthenticator) -> None:
        token, claims = authenticator.issue()
        first = authenticator.verify(token)
        second = authenticator.verify(token)
        assert first.expires_at == second.expires_at == claims.expires_at

    def test_expired_and_tampered_logged_with_different_reasons(self, authenticator: SessionAuthenticator) -> None:
        expired, _ = authenticator.issue(now=datetime.now(timezone.utc) - timedelta(hours=25))
        fresh, _ = authenticator.issue()
        with capture_logs() as logs:
            authenticator.verify(expired)
            authenticator.verify(_tamper(fresh))
        reasons = [e.get("reason") for e in logs if e["event"] == "session token rejected"]
        assert reasons == ["expired", "invalid_signature"]


class TestPasswordHelpers:
    def test_verify_password_rejects_garbage_hash(self) -> None:
        assert verify_password(ADMIN_PASSWORD, "not-a-hash") is False

    def test_is_bcrypt_hash(self) -> None:
        assert is_bcrypt_hash("$2b$12$" + "a" * 53) is True
        assert is_bcrypt_hash("plaintext") is False
