"""
core/redaction.py -- PII masking for log fields.

redact() masks a single email- or phone-shaped value. Callers run it over
sensitive fields before logging them; core/logger.py also applies it to any
log field whose key is listed in Settings.log_redact_keys.

    redact("ab@example.com")  -> "ab***@example.com"
    redact("+491234567")      -> "+49***67"
    redact("hello")           -> "hello"

Masking an already-masked value returns it unchanged.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, MutableMapping
from typing import Any

_PHONE_RE = re.compile(r"^\+?\d{7,}$")

MASK = "***"


def redact(value: Any) -> Any:
    """Return value with email local parts or phone digits masked.

    Falsy values and values that look like neither an email nor a phone
    number come back untouched (same object, not a string copy).
    """
    if not value:
        return value
    text = str(value)
    if "@" in text:
        local, _, domain = text.rpartition("@")
        return f"{local[:2]}{MASK}@{domain}"
    if _PHONE_RE.match(text):
        return f"{text[:3]}{MASK}{text[-2:]}"
    return value


def redact_fields(data: MutableMapping[str, Any], keys: Iterable[str]) -> MutableMapping[str, Any]:
    """Redact, in place, every value in data whose key is in keys (case-insensitive)."""
    wanted = {k.lower() for k in keys}
    for key, value in data.items():
        if key.lower() in wanted and isinstance(value, (str, int)):
            data[key] = redact(value)
    return data
