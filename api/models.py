"""
API request and response models for the back-office REST endpoints.

These Pydantic v2 models define the HTTP transport contract. They are kept
apart from the dataclasses in auth/models.py, which own the internal session
representation. Route handlers map between the two.

Every response model carries `cid`, the request's correlation id. Field names
follow the JSON the admin front-end already consumes (isAuthenticated).
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/admin/auth/login.

    password is optional at the schema level so a missing field reaches the
    route and gets the same 400 "Password is required" as an empty one.
    """

    password: Optional[str] = Field(default=None, max_length=255)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class LoginResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool = True
    message: str = "Authentication successful"
    cid: str


class SessionUser(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: str


class VerifyResponse(BaseModel):
    """Response for GET /api/v1/admin/auth/verify. Always returned with HTTP 200."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    is_authenticated: bool = Field(serialization_alias="isAuthenticated")
    user: Optional[SessionUser] = None
    message: Optional[str] = None
    cid: str


class LogoutResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool = True
    message: str = "Logged out"
    cid: str


class ErrorResponse(BaseModel):
    """Error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    success: bool = False
    error: str
    message: str
    details: dict = Field(default_factory=dict)
    cid: str


class AdminStatusResponse(BaseModel):
    """Response for GET /api/v1/admin/status.

    checks reports only whether each secret is set -- never its value.
    """

    model_config = ConfigDict(frozen=True)

    role: str
    session_expires_at: Optional[str] = None
    environment: str
    checks: dict[str, str]
    cid: str


class WebhookAck(BaseModel):
    model_config = ConfigDict(frozen=True)

    accepted: bool = True
    cid: str


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    cid: str
