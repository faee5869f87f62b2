"""
auth/models.py -- Domain dataclasses for admin sessions.

Pattern: Data class (pure data container, zero logic). Tokens and routes do
the work; these only carry shape.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class SessionClaims:
    """Claims carried inside a signed session token.

    The token is self-describing: there is no server-side session table.
    expires_at is fixed at issue time (issued_at + session max age); using the
    session does not extend it.
    """

    role: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class SessionStatus:
    """Result of verifying a session token. Never raised, always returned."""

    authenticated: bool
    role: str | None = None
    message: str | None = None
    expires_at: datetime | None = None
