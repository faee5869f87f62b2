"""
core/headers.py -- HTTP header names shared across layers.

Kept free of framework imports so leaf modules such as core/signing.py can
use them without pulling in FastAPI.
"""

CORRELATION_HEADER = "X-Correlation-ID"
SIGNATURE_HEADER = "X-Signature"
