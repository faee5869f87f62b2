"""
api/routes/v1/admin.py -- Admin-only back-office endpoints.

Routes:
  GET /api/v1/admin/status -- which secrets are configured, and when the
                              caller's session expires (requires admin)

Every route here depends on require_admin, so an unauthenticated request is
rejected with 401 before the route body runs.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.models import AdminStatusResponse
from auth.dependencies import require_admin
from auth.models import SessionStatus
from core.correlation import current_cid, respond

router = APIRouter()


def _check(value: bool) -> str:
    return "configured" if value else "not-configured"


@router.get("/admin/status", response_model=AdminStatusResponse)
async def status(request: Request, session: SessionStatus = Depends(require_admin)) -> JSONResponse:
    """Report configuration state. Values are never returned, only presence."""
    cid = current_cid(request)
    authenticator = request.app.state.authenticator
    body = AdminStatusResponse(
        role=session.role or "",
        session_expires_at=session.expires_at.isoformat() if session.expires_at else None,
        environment=request.app.state.settings.environment,
        checks={
            "password_hash": _check(authenticator.password_configured),
            "session_secret": _check(authenticator.secret_configured),
            "hmac": _check(request.app.state.signer.configured),
        },
        cid=cid,
    )
    return respond(cid, body.model_dump())
