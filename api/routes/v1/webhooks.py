"""
api/routes/v1/webhooks.py -- Signed inbound event intake.

Routes:
  POST /api/v1/webhooks/inbound -- accepts a JSON event signed with X-Signature

The sender signs the raw request body with the shared FORM_HMAC_SECRET (see
core/signing.py). The signature is checked before the body is parsed, so an
unsigned request never reaches JSON decoding or the event handler.

The event is handed to app.state.inbound_handler through run_guarded(): a
handler failure is logged with the request's cid and answered with 502,
never with an unhandled 500.

Responses:
  202 accepted          -- signature valid, handler succeeded
  400 validation_error  -- body is not a JSON object
  401 invalid_signature -- X-Signature missing or wrong
  500 configuration_error -- no signing secret configured
  502 downstream_error  -- the handler raised
"""

from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.models import WebhookAck
from core.correlation import current_cid, respond
from core.errors import ConfigurationError, DownstreamError, SignatureError, ValidationError
from core.guard import run_guarded
from core.headers import SIGNATURE_HEADER
from core.logger import IntegrationLogger, get_logger

logger = get_logger("api.webhooks")
integration = IntegrationLogger("webhook")

router = APIRouter()


async def handle_inbound_event(payload: dict[str, Any], cid: str) -> str:
    """Default inbound handler: record the event's arrival and acknowledge it."""
    event = str(payload.get("event", "unknown"))
    integration.start("inbound event received", cid=cid, event_type=event)
    integration.success("inbound event processed", cid=cid, event_type=event)
    return event


@router.post("/webhooks/inbound", response_model=WebhookAck, status_code=202)
async def inbound(request: Request) -> JSONResponse:
    cid = current_cid(request)
    signer = request.app.state.signer
    if not signer.configured:
        logger.error("webhook signing secret is not configured")
        raise ConfigurationError()

    raw = await request.body()
    if not signer.verify(raw, request.headers.get(SIGNATURE_HEADER)):
        logger.warning("webhook signature rejected", path=request.url.path)
        raise SignatureError()

    try:
        payload = json.loads(raw)
    except ValueError as exc:
        raise ValidationError("Request body must be valid JSON", field="body") from exc
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object", field="body")

    handler = request.app.state.inbound_handler
    outcome = await run_guarded(lambda: handler(payload, cid), cid=cid, context="webhooks.inbound")
    if not outcome.ok:
        raise DownstreamError()
    return respond(cid, WebhookAck(cid=cid).model_dump(), status_code=202)
