"""
core/guard.py -- Run a fallible async operation and get an outcome, not an exception.

    outcome = await run_guarded(lambda: crm.push(payload), cid=cid, context="crm.push")
    if not outcome.ok:
        ...

A failing operation is logged once (error level, with cid and context) and
comes back as Failure. It is never re-raised: callers branch on outcome.ok.
Success(None) is a real success, so "the operation returned nothing" is not
confused with "the operation failed".

Only Exception subclasses are caught. Task cancellation still propagates.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from core.logger import get_logger

T = TypeVar("T")

UNKNOWN_ERROR = "Unknown error"

logger = get_logger("guard")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    error: str
    error_type: str = "Exception"

    @property
    def ok(self) -> bool:
        return False


Outcome = Union[Success[T], Failure]


async def run_guarded(
    operation: Union[Callable[[], Awaitable[T]], Awaitable[T]],
    *,
    cid: str,
    context: str,
) -> Outcome[T]:
    """Await operation; return Success(result) or, on any exception, Failure."""
    try:
        awaitable = operation() if callable(operation) else operation
        if inspect.isawaitable(awaitable):
            result: Any = await awaitable
        else:
            result = awaitable
    except Exception as exc:
        message = str(exc) or UNKNOWN_ERROR
        logger.error(
            "guarded operation failed",
            cid=cid,
            context=context,
            error=message,
            error_type=type(exc).__name__,
        )
        return Failure(error=message, error_type=type(exc).__name__)
    return Success(result)
