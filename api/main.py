"""
api/main.py -- FastAPI application entry point for the back-office service.

create_app() builds the application. With no argument it uses the
get_settings() singleton; tests pass their own Settings so each TestClient
gets an isolated app with its own secrets. The process-wide app instance
lives in asgi.py, so importing this module never reads the environment.

Middleware stack (outermost to innermost):
  1. correlation_context -- assigns the request's cid, binds it to the log
                            context, echoes it in X-Correlation-ID
  2. security_headers    -- nosniff / frame / referrer / HSTS / response time
  3. log_requests        -- one structured log line per request; turns an
                            unhandled exception into the internal_error
                            envelope so the outer layers still decorate it
  4. CORSMiddleware      -- CORS headers for allowed browser origins

Lifespan builds the per-app services (authenticator, signer, inbound event
handler) from Settings and puts them on app.state.
"""

from __future__ import annotations

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from api.models import ErrorResponse, HealthResponse
from api.routes.v1.admin import router as admin_router
from api.routes.v1.auth import router as auth_router
from api.routes.v1.webhooks import handle_inbound_event
from api.routes.v1.webhooks import router as webhooks_router
from auth.tokens import SessionAuthenticator
from core.config import Settings, get_settings
from core.correlation import begin, current_cid, respond
from core.errors import BackofficeError
from core.headers import CORRELATION_HEADER, SIGNATURE_HEADER
from core.logger import configure_logging, get_logger
from core.signing import RequestSigner

logger = get_logger("api")


def _error_body(cid: str, code: str, message: str, details: Optional[dict] = None) -> dict:
    return ErrorResponse(error=code, message=message, details=details or {}, cid=cid).model_dump()


def _internal_error(request: Request) -> JSONResponse:
    """Log the active exception and return the generic 500 envelope.

    The traceback goes to the error log only, never to the response body.
    Must be called from inside an except block.
    """
    cid = current_cid(request)
    logger.exception("unhandled exception", path=request.url.path, method=request.method, cid=cid)
    return respond(cid, _error_body(cid, "internal_error", "An unexpected error occurred"), status_code=500)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Explicit configuration. When None, the get_settings()
                  singleton is used.
    """
    resolved = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(resolved)
        app.state.settings = resolved
        app.state.authenticator = SessionAuthenticator(resolved)
        app.state.signer = RequestSigner(resolved.form_hmac_secret)
        app.state.inbound_handler = handle_inbound_event
        logger.info(
            "back-office API starting up",
            environment=resolved.environment,
            password_configured=app.state.authenticator.password_configured,
            session_secret_configured=app.state.authenticator.secret_configured,
            hmac_configured=app.state.signer.configured,
        )
        yield
        logger.info("back-office API shutdown complete")

    app = FastAPI(
        title="Back-office API",
        description="Admin session authentication and signed request intake.",
        version=resolved.app_version,
        lifespan=lifespan,
    )

    # ------------------------------------------------------------------
    # Middleware -- each registration wraps the previous ones, so the last
    # one registered is the first to see the request.
    # ------------------------------------------------------------------

    app.add_middleware(
        CORSMiddleware,
        allow_origins=resolved.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "Authorization", CORRELATION_HEADER, SIGNATURE_HEADER],
        expose_headers=[CORRELATION_HEADER],
        max_age=3600,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            response = _internal_error(request)
        ms = (time.perf_counter() - start) * 1000
        logger.info(
            "request handled",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round(ms, 1),
            client=request.client.host if request.client else "unknown",
        )
        return response

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if resolved.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains; preload"
        response.headers["X-Response-Time"] = f"{(time.perf_counter() - start) * 1000:.0f}ms"
        return response

    @app.middleware("http")
    async def correlation_context(request: Request, call_next):
        cid = begin(request.headers)
        request.state.cid = cid
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(cid=cid)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.clear_contextvars()
        response.headers[CORRELATION_HEADER] = cid
        return response

    # ------------------------------------------------------------------
    # Routers
    # ------------------------------------------------------------------

    app.include_router(auth_router, prefix="/api/v1", tags=["Auth"])
    app.include_router(admin_router, prefix="/api/v1", tags=["Admin"])
    app.include_router(webhooks_router, prefix="/api/v1", tags=["Webhooks"])

    # ------------------------------------------------------------------
    # Exception handlers
    #
    # All handlers return the same ErrorResponse envelope, with the cid, so
    # clients parse errors uniformly and can quote the cid in bug reports.
    # ------------------------------------------------------------------

    @app.exception_handler(BackofficeError)
    async def backoffice_error_handler(request: Request, exc: BackofficeError) -> JSONResponse:
        cid = current_cid(request)
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "request failed",
            error_code=exc.error_code,
            status_code=exc.status_code,
            path=request.url.path,
            method=request.method,
        )
        return respond(cid, _error_body(cid, exc.error_code, exc.message, exc.details), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Return 400 naming the first offending field."""
        cid = current_cid(request)
        errors = exc.errors()
        field = None
        message = "Request validation failed"
        if errors:
            loc = [str(part) for part in errors[0].get("loc", ()) if part != "body"]
            field = ".".join(loc) or "body"
            message = errors[0].get("msg", message)
        return respond(
            cid,
            _error_body(cid, "validation_error", message, {"field": field} if field else None),
            status_code=400,
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        cid = current_cid(request)
        return respond(
            cid,
            _error_body(cid, f"http_{exc.status_code}", str(exc.detail)),
            status_code=exc.status_code,
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Last resort for errors raised by the middleware itself.

        Route errors are already converted in log_requests.
        """
        return _internal_error(request)

    # ------------------------------------------------------------------
    # Health endpoint
    # ------------------------------------------------------------------

    @app.get("/api/v1/health", response_model=HealthResponse, tags=["Health"])
    async def health(request: Request) -> JSONResponse:
        """Return liveness and version. Public; reveals nothing about configuration."""
        cid = current_cid(request)
        return respond(cid, HealthResponse(version=request.app.version, cid=cid).model_dump())

    return app
