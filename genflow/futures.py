"""Coercion of yielded values into asyncio futures."""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
from collections.abc import Awaitable
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class Cancellable(Protocol):
    """Anything exposing its own ``cancel()``."""

    def cancel(self) -> Any: ...


def coerce_future(value: Any, loop: asyncio.AbstractEventLoop) -> asyncio.Future[Any]:
    """Return an asyncio future standing for ``value``.

    Futures and tasks are returned as they are, so callbacks attach to them
    directly. Other awaitables are scheduled on ``loop``. Plain values become
    an already resolved future.
    """
    if asyncio.isfuture(value):
        return value
    if isinstance(value, concurrent.futures.Future):
        return asyncio.wrap_future(value, loop=loop)
    if isinstance(value, Awaitable):
        return asyncio.ensure_future(value, loop=loop)
    future = loop.create_future()
    future.set_result(value)
    return future


def try_cancel(target: Any) -> None:
    """Cancel ``target`` if it supports it; failures are logged and dropped."""
    if not isinstance(target, Cancellable):
        return
    try:
        target.cancel()
    except Exception as exc:
        logger.debug("Ignoring failure while cancelling %r: %s", target, exc)


def consume(future: asyncio.Future[Any]) -> None:
    """Done-callback that retrieves and discards a future's outcome."""
    if not future.cancelled():
        future.exception()


__all__ = ["Cancellable", "coerce_future", "consume", "try_cancel"]
