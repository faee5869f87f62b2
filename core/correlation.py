"""
core/correlation.py -- Per-request correlation ids.

A correlation id ("cid") ties together every log line and every response
produced while handling one request, and, when a caller supplies one, lets
a trace continue across service boundaries.

begin() picks the id at request entry; respond() stamps it into JSON bodies.
The HTTP middleware that calls begin() lives in api/main.py.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Any, Optional

import structlog
from fastapi import Request
from fastapi.responses import JSONResponse

from core.headers import CORRELATION_HEADER


def begin(headers: Mapping[str, str]) -> str:
    """Return the inbound correlation id if present and non-empty, else a new UUID4."""
    wanted = CORRELATION_HEADER.lower()
    for key, value in headers.items():
        if key.lower() == wanted and value and value.strip():
            return value.strip()
    return str(uuid.uuid4())


def current_cid(request: Request) -> str:
    """Return the cid assigned to this request.

    Falls back to the logging context and finally to the request headers, so
    exception handlers running outside the middleware still get a stable id.
    """
    cid = getattr(request.state, "cid", None)
    if cid:
        return cid
    cid = structlog.contextvars.get_contextvars().get("cid")
    if cid:
        return cid
    cid = begin(request.headers)
    request.state.cid = cid
    return cid


def respond(
    cid: str,
    body: Optional[Mapping[str, Any]] = None,
    status_code: int = 200,
    headers: Optional[Mapping[str, str]] = None,
) -> JSONResponse:
    """Build a JSON response whose body carries the correlation id."""
    content = dict(body or {})
    content["cid"] = cid
    return JSONResponse(status_code=status_code, content=content, headers=dict(headers or {}))
