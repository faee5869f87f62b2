"""
core/errors.py -- Exception taxonomy for the back-office service.

Every failure the service reports to a client is one of these. Each carries
its HTTP status and a machine-readable error code; api/main.py renders them
all through a single handler so the response envelope never varies:

    {"success": false, "error": <code>, "message": <text>, "details": {...}, "cid": <cid>}

Messages are generic on purpose. A ConfigurationError never names the
missing value, and authentication failures never say which check failed.

Layer rule: core/ is the kernel. No imports from api/ or auth/.
"""

from __future__ import annotations

from typing import Any, Optional


class BackofficeError(Exception):
    """Base exception for the back-office service."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "internal_error",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}


class ConfigurationError(BackofficeError):
    """A required secret is missing or unusable."""

    def __init__(self, message: str = "Server configuration error") -> None:
        super().__init__(
            message=message,
            status_code=500,
            error_code="configuration_error",
        )


class AuthenticationError(BackofficeError):
    """Missing, expired, tampered or otherwise unacceptable credentials."""

    def __init__(self, message: str = "Authentication required", error_code: str = "authentication_error") -> None:
        super().__init__(
            message=message,
            status_code=401,
            error_code=error_code,
        )


class InvalidCredentialsError(AuthenticationError):
    """The submitted password does not match the configured hash."""

    def __init__(self) -> None:
        super().__init__(message="Invalid password", error_code="invalid_credentials")


class SignatureError(AuthenticationError):
    """A request signature is missing or does not match the payload."""

    def __init__(self) -> None:
        super().__init__(message="Invalid signature", error_code="invalid_signature")


class ValidationError(BackofficeError):
    """Malformed client input."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(
            message=message,
            status_code=400,
            error_code="validation_error",
            details={"field": field} if field else None,
        )


class DownstreamError(BackofficeError):
    """A guarded operation failed and its result is unavailable."""

    def __init__(self, message: str = "Downstream processing failed") -> None:
        super().__init__(
            message=message,
            status_code=502,
            error_code="downstream_error",
        )
