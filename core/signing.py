"""
core/signing.py -- HMAC-SHA256 request signing.

A signature is the lowercase hex HMAC-SHA256 of the raw request body keyed
with a shared secret. Whoever holds the secret can produce it; anyone else
cannot. Used for the X-Signature header on inbound webhook posts and for
signing payloads sent to downstream consumers.

Verification recomputes the digest and compares with hmac.compare_digest so
the comparison time does not depend on how many leading characters match.

A missing secret raises ConfigurationError rather than returning False:
"this server cannot check signatures" and "this signature is wrong" are
different failures and callers must be able to tell them apart.
"""

from __future__ import annotations

import hashlib
import hmac
from typing import Optional, Union

from core.errors import ConfigurationError
from core.headers import CORRELATION_HEADER, SIGNATURE_HEADER

_PREFIX = "sha256="

Body = Union[bytes, str]


def _to_bytes(body: Body) -> bytes:
    return body if isinstance(body, bytes) else body.encode("utf-8")


def sign(body: Body, secret: str) -> str:
    """Return the hex HMAC-SHA256 of body under secret."""
    if not secret:
        raise ConfigurationError()
    return hmac.new(secret.encode("utf-8"), _to_bytes(body), hashlib.sha256).hexdigest()


def verify(body: Body, secret: str, candidate: Optional[str]) -> bool:
    """Return True if candidate is the signature of body under secret.

    Accepts an optional "sha256=" prefix on the candidate (GitHub style).
    """
    expected = sign(body, secret)
    if not candidate:
        return False
    candidate = candidate.strip()
    if candidate.startswith(_PREFIX):
        candidate = candidate[len(_PREFIX):]
    return hmac.compare_digest(expected.encode("ascii"), candidate.lower().encode("utf-8"))


class RequestSigner:
    """Signs and verifies payloads with one shared secret bound at startup."""

    def __init__(self, secret: str) -> None:
        self._secret = secret

    @property
    def configured(self) -> bool:
        return bool(self._secret)

    def sign(self, body: Body) -> str:
        return sign(body, self._secret)

    def verify(self, body: Body, candidate: Optional[str]) -> bool:
        return verify(body, self._secret, candidate)

    def headers(self, body: Body, cid: str) -> dict[str, str]:
        """Headers for an outbound signed request carrying the caller's correlation id."""
        return {SIGNATURE_HEADER: self.sign(body), CORRELATION_HEADER: cid}
