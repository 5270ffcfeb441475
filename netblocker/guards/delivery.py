# netblocker/guards/delivery.py
from __future__ import annotations
import asyncio
import enum
from typing import Any, Optional

from ..errors import NetworkBlocked


class Delivery(enum.Enum):
    """How a rejection reaches the caller of a guarded entry point."""

    RAISE = "raise"
    RETURN_ERRNO = "return-errno"
    DEFER = "defer"


def _fail_unless_cancelled(fut: "asyncio.Future[Any]", error: BaseException) -> None:
    if not fut.cancelled():
        fut.set_exception(error)


def deferred_failure(loop: asyncio.AbstractEventLoop, error: BaseException) -> "asyncio.Future[Any]":
    """Future that fails on the next loop iteration, never inline."""
    fut = loop.create_future()
    loop.call_soon(_fail_unless_cancelled, fut, error)
    return fut


def deliver(
    delivery: Delivery,
    error: NetworkBlocked,
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> Any:
    if delivery is Delivery.RAISE:
        raise error
    if delivery is Delivery.RETURN_ERRNO:
        return error.errno
    if loop is None:
        raise ValueError("deferred delivery needs an event loop")
    return deferred_failure(loop, error)
