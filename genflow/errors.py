"""Error types raised or settled by genflow runs."""

from __future__ import annotations

import asyncio
from typing import Any

FLOW_CANCELLED_MESSAGE = "flow cancelled"


class FlowError(Exception):
    """Base class for errors originating from genflow itself."""


class FlowUsageError(FlowError, TypeError):
    """Raised when ``flow`` is called with anything but a single callable."""


class FlowCancelledError(FlowError, asyncio.CancelledError):
    """Settled on a FlowFuture whose run was cancelled before it finished.

    Also an ``asyncio.CancelledError``, so tasks awaiting the flow, timeouts
    and task groups treat it as a cancellation.

    A run whose cleanup code raises is settled with that error instead, so
    receiving this error means the procedure's cleanup completed.

    Attributes:
        reason: Optional message passed to ``FlowFuture.cancel``.
    """

    def __init__(self, reason: Any = None) -> None:
        self.reason = reason
        super().__init__(FLOW_CANCELLED_MESSAGE)

    def __repr__(self) -> str:
        if self.reason is None:
            return "FlowCancelledError()"
        return f"FlowCancelledError(reason={self.reason!r})"


def is_flow_cancellation_error(error: object) -> bool:
    """Return True if ``error`` is the failure of a cancelled run."""
    return isinstance(error, FlowCancelledError)


__all__ = [
    "FLOW_CANCELLED_MESSAGE",
    "FlowCancelledError",
    "FlowError",
    "FlowUsageError",
    "is_flow_cancellation_error",
]
