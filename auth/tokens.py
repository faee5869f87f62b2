"""
auth/tokens.py -- Admin password check, session JWTs, and the session cookie.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with JWT_SECRET and carry
       role, iat and exp. Lifetime is fixed at issue (24h by default); there is
       no sliding expiry and no server-side session store.

  Passwords: bcrypt, used directly. The configured ADMIN_PASSWORD_HASH is
       compared with bcrypt.checkpw -- the plaintext is never compared and
       never logged. bcrypt is slow on purpose; login runs in FastAPI's
       threadpool so it does not stall the event loop.

  Secrets: injected through Settings when SessionAuthenticator is built.
       A missing hash or signing secret raises ConfigurationError at the start
       of login(), which the API renders as 500, never as 401.

  Verification: verify() never raises. Bad signature, expiry, malformed
       token and wrong role all produce SessionStatus(authenticated=False).
       The client sees "Invalid token" whether the token expired or was
       tampered with; the log records which one it was.

Layer rule: no imports from api/. Import from core/ is allowed.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from auth.models import ADMIN_ROLE, SessionClaims, SessionStatus
from core.config import Settings
from core.errors import ConfigurationError, InvalidCredentialsError, ValidationError
from core.logger import get_logger

logger = get_logger("auth")

_ALGORITHM = "HS256"

NO_TOKEN = "No token found"
INVALID_TOKEN = "Invalid token"
INVALID_ROLE = "Invalid role"

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def hash_password(plain: str, rounds: int = 12) -> str:
    """Return a bcrypt hash of the given plaintext password.

    Operators produce ADMIN_PASSWORD_HASH with it through auth/cli.py.
    """
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


def is_bcrypt_hash(value: str) -> bool:
    """True if value has the shape of a bcrypt hash ($2a$/$2b$/$2y$, 60 chars)."""
    return len(value) == 60 and value.startswith("$2")


# ---------------------------------------------------------------------------
# Session authenticator
# ---------------------------------------------------------------------------


class SessionAuthenticator:
    """Exchanges the admin password for a session token and checks tokens.

    Stateless: everything verify() needs is inside the signed token, so one
    instance is shared by all concurrent requests without locking.
    """

    def __init__(self, settings: Settings) -> None:
        self._password_hash = settings.admin_password_hash
        self._secret = settings.jwt_secret
        self.max_age_seconds = settings.session_max_age_seconds

    @property
    def password_configured(self) -> bool:
        return is_bcrypt_hash(self._password_hash)

    @property
    def secret_configured(self) -> bool:
        return bool(self._secret)

    def issue(self, now: Optional[datetime] = None) -> tuple[str, SessionClaims]:
        """Sign a fresh admin session token valid for max_age_seconds from now."""
        if not self._secret:
            logger.error("session signing secret is not configured")
            raise ConfigurationError()
        issued_at = (now or datetime.now(timezone.utc)).replace(microsecond=0)
        claims = SessionClaims(
            role=ADMIN_ROLE,
            issued_at=issued_at,
            expires_at=issued_at + timedelta(seconds=self.max_age_seconds),
        )
        payload = {"role": claims.role, "iat": claims.issued_at, "exp": claims.expires_at}
        return jwt.encode(payload, self._secret, algorithm=_ALGORITHM), claims

    def login(self, password: Optional[str]) -> tuple[str, SessionClaims]:
        """Check password against the configured hash and issue a session token.

        Raises:
            ValidationError:          password missing or empty.
            ConfigurationError:       hash or signing secret not configured.
            InvalidCredentialsError:  password does not match.
        """
        if not password:
            raise ValidationError("Password is required", field="password")
        if not self._password_hash or not is_bcrypt_hash(self._password_hash):
            logger.error("admin password hash is not configured")
            raise ConfigurationError()
        if not self._secret:
            logger.error("session signing secret is not configured")
            raise ConfigurationError()
        if not verify_password(password, self._password_hash):
            logger.warning("admin login rejected")
            raise InvalidCredentialsError()
        token, claims = self.issue()
        logger.info("admin login succeeded", expires_at=claims.expires_at.isoformat())
        return token, claims

    def verify(self, token: Optional[str]) -> SessionStatus:
        """Check signature, expiry and role. Never raises."""
        if not token:
            return SessionStatus(authenticated=False, message=NO_TOKEN)
        if not self._secret:
            logger.error("session signing secret is not configured")
            return SessionStatus(authenticated=False, message=INVALID_TOKEN)
        try:
            payload = jwt.decode(token, self._secret, algorithms=[_ALGORITHM])
        except ExpiredSignatureError:
            logger.warning("session token rejected", reason="expired")
            return SessionStatus(authenticated=False, message=INVALID_TOKEN)
        except JWTError:
            logger.warning("session token rejected", reason="invalid_signature")
            return SessionStatus(authenticated=False, message=INVALID_TOKEN)

        exp = payload.get("exp")
        if not isinstance(exp, (int, float)):
            logger.warning("session token rejected", reason="missing_expiry")
            return SessionStatus(authenticated=False, message=INVALID_TOKEN)
        if payload.get("role") != ADMIN_ROLE:
            logger.warning("session token rejected", reason="invalid_role")
            return SessionStatus(authenticated=False, message=INVALID_ROLE)
        return SessionStatus(
            authenticated=True,
            role=ADMIN_ROLE,
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
        )


# ---------------------------------------------------------------------------
# Cookie helpers
# ---------------------------------------------------------------------------


def set_session_cookie(response, token: str, settings: Settings) -> None:
    """Write the session token as an httpOnly cookie on the response.

    httponly=True: JS cannot read the cookie (XSS mitigation).
    samesite="strict": never sent on cross-site requests.
    secure: HTTPS-only in production.
    max_age: matches the token lifetime so both expire together.
    """
    response.set_cookie(
        settings.session_cookie_name,
        value=token,
        httponly=True,
        samesite="strict",
        secure=settings.is_production,
        max_age=settings.session_max_age_seconds,
        path="/",
    )


def clear_session_cookie(response, settings: Settings) -> None:
    response.delete_cookie(
        settings.session_cookie_name,
        path="/",
        httponly=True,
        samesite="strict",
        secure=settings.is_production,
    )
