"""
auth/dependencies.py -- FastAPI Depends() helpers for the admin session.

The session token is looked for in priority order:
  1. Session cookie (Settings.session_cookie_name) -- set by the login route.
  2. Authorization: Bearer <token> header -- API clients replaying the token.

try_get_session() is the soft variant (returns a SessionStatus, never raises).
require_admin() is the gate: it raises AuthenticationError (401) before the
route body runs when the session does not verify.

Layer rule: auth/dependencies.py may import from fastapi because it is part
of the FastAPI dependency injection system. No imports from api/.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Request

from auth.models import SessionStatus
from auth.tokens import SessionAuthenticator
from core.errors import AuthenticationError


def get_authenticator(request: Request) -> SessionAuthenticator:
    return request.app.state.authenticator


def extract_token(request: Request) -> Optional[str]:
    """Return the session token from the cookie or Bearer header, if any."""
    cookie_name = request.app.state.settings.session_cookie_name
    token: Optional[str] = request.cookies.get(cookie_name)
    if not token:
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            token = auth_header[7:].strip()
    return token or None


def try_get_session(request: Request) -> SessionStatus:
    """Verify the request's session token. Never raises."""
    return get_authenticator(request).verify(extract_token(request))


def require_admin(request: Request) -> SessionStatus:
    """Require a valid admin session. Raises HTTP 401 otherwise.

    Use as a FastAPI dependency:
        @router.get("/admin/thing")
        async def route(session: SessionStatus = Depends(require_admin)): ...
    """
    session = try_get_session(request)
    if not session.authenticated:
        raise AuthenticationError()
    return session
