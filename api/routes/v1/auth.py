"""
api/routes/v1/auth.py -- Admin session endpoints.

Routes:
  POST /api/v1/admin/auth/login   -- password login; sets the session cookie
  GET  /api/v1/admin/auth/verify  -- reports whether the caller holds a valid session
  POST /api/v1/admin/auth/logout  -- clears the session cookie

Security:
  Login returns one generic 401 ("Invalid password") for every mismatch and
  sets no cookie on failure. A missing hash or signing secret is a 500
  configuration_error, never a 401.
  Cache-Control: no-store on login responses.
  Verify always answers 200; the caller inspects isAuthenticated.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.models import LoginRequest, LoginResponse, LogoutResponse, SessionUser, VerifyResponse
from auth.dependencies import get_authenticator, try_get_session
from auth.tokens import clear_session_cookie, set_session_cookie
from core.correlation import current_cid, respond

# Auth policy:
# - POST /api/v1/admin/auth/login:   public -- login endpoint must be unauthenticated
# - GET  /api/v1/admin/auth/verify:  public -- answers for anonymous callers too
# - POST /api/v1/admin/auth/logout:  public -- clearing a cookie needs no prior auth
router = APIRouter()


@router.post("/admin/auth/login", response_model=LoginResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Exchange the admin password for a session cookie.

    Sync def on purpose: bcrypt is CPU-bound, so FastAPI runs this in its
    threadpool instead of on the event loop.
    """
    cid = current_cid(request)
    token, _claims = get_authenticator(request).login(body.password)

    resp = respond(cid, LoginResponse(cid=cid).model_dump())
    set_session_cookie(resp, token, request.app.state.settings)
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.get("/admin/auth/verify", response_model=VerifyResponse, response_model_by_alias=True)
async def verify(request: Request) -> JSONResponse:
    """Report the caller's session state. Always 200."""
    cid = current_cid(request)
    session = try_get_session(request)
    body = VerifyResponse(
        is_authenticated=session.authenticated,
        user=SessionUser(role=session.role) if session.authenticated and session.role else None,
        message=session.message,
        cid=cid,
    )
    return respond(cid, body.model_dump(by_alias=True, exclude_none=True))


@router.post("/admin/auth/logout", response_model=LogoutResponse)
async def logout(request: Request) -> JSONResponse:
    """Clear the session cookie.

    The token itself stays valid until it expires; there is no server-side
    session to revoke.
    """
    cid = current_cid(request)
    resp = respond(cid, LogoutResponse(cid=cid).model_dump())
    clear_session_cookie(resp, request.app.state.settings)
    return resp
