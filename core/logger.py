"""
core/logger.py -- Structured JSON logging via structlog.

Every log call produces exactly one JSON line:

    {"level": "info", "timestamp": "2026-01-01T10:00:00.000000Z",
     "message": "login succeeded", "logger": "backoffice.auth", "cid": "..."}

info and warn lines go to stdout; error and above go to stderr. The request's
correlation id is merged in from structlog contextvars (bound by the
correlation middleware), and any field named in Settings.log_redact_keys is
passed through redact() before rendering.

Standard-library records (uvicorn, fastapi, pydantic-settings) are rendered by
the same formatter, so the whole process speaks one log format.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from typing import Any

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

from core.config import Settings
from core.redaction import redact_fields

_NAMESPACE = "backoffice"


class _StdStreamHandler(logging.StreamHandler):
    """StreamHandler that looks up sys.stdout/sys.stderr at emit time.

    Resolving the stream lazily keeps output flowing to whatever the process
    currently has installed (pytest's capture, a reassigned sys.stdout).
    """

    def __init__(self, stream_name: str) -> None:
        logging.Handler.__init__(self)
        self.stream_name = stream_name

    @property
    def stream(self):  # type: ignore[override]
        return getattr(sys, self.stream_name)


class _BelowLevel(logging.Filter):
    def __init__(self, level: int) -> None:
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self.level


def _normalize_level(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    # "warning" -> "warn", "critical" -> "error"
    level = event_dict.get("level")
    if level == "warning":
        event_dict["level"] = "warn"
    elif level == "critical":
        event_dict["level"] = "error"
    return event_dict


def redact_pii_fields(keys: Iterable[str]) -> Processor:
    """Build a processor that masks the values of PII-named fields."""
    frozen = tuple(keys)

    def processor(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
        redact_fields(event_dict, frozen)
        return event_dict

    return processor


def configure_logging(settings: Settings) -> None:
    """Configure structlog and the stdlib root logger for JSON output."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    shared: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
        redact_pii_fields(settings.log_redact_keys),
    ]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _normalize_level,
            structlog.processors.EventRenamer("message"),
            structlog.processors.JSONRenderer(),
        ],
    )

    stdout_handler = _StdStreamHandler("stdout")
    stdout_handler.addFilter(_BelowLevel(logging.ERROR))
    stdout_handler.setFormatter(formatter)

    stderr_handler = _StdStreamHandler("stderr")
    stderr_handler.setLevel(logging.ERROR)
    stderr_handler.setFormatter(formatter)

    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, _StdStreamHandler):
            root.removeHandler(handler)
    root.addHandler(stdout_handler)
    root.addHandler(stderr_handler)
    root.setLevel(level)

    # uvicorn installs its own handlers; let its records reach ours instead.
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uv = logging.getLogger(name)
        uv.handlers.clear()
        uv.propagate = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger under the service namespace."""
    if not name.startswith(_NAMESPACE):
        name = f"{_NAMESPACE}.{name}"
    return structlog.get_logger(name)


class IntegrationLogger:
    """Lifecycle logging for one external integration.

    Messages are prefixed with the integration name and phase so they stand
    out when grepping a busy log:

        IntegrationLogger("crm").start("sync") -> "[CRM START] sync"
    """

    def __init__(self, name: str) -> None:
        self.name = name.upper()
        self._log = get_logger(f"integrations.{name.lower()}")

    def _prefix(self, phase: str, message: str) -> str:
        return f"[{self.name} {phase}] {message}"

    def start(self, message: str, **context: Any) -> None:
        self._log.info(self._prefix("START", message), **context)

    def success(self, message: str, **context: Any) -> None:
        self._log.info(self._prefix("SUCCESS", message), **context)

    def warn(self, message: str, **context: Any) -> None:
        self._log.warning(self._prefix("WARN", message), **context)

    def error(self, message: str, **context: Any) -> None:
        self._log.error(self._prefix("ERROR", message), **context)
