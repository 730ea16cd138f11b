"""
Cancellable asynchronous flows built from generator functions.

``flow`` turns a generator function into a function that returns a
``FlowFuture``. Every value the generator yields is awaited on the running
event loop and its outcome is sent back into the generator; exceptions are
thrown into it, so ordinary ``try``/``except`` blocks handle failed
sub-operations. The generator's return value becomes the future's result.

Example:
    >>> @flow
    ... def fetch_then_double(client):
    ...     value = yield client.fetch()
    ...     return value * 2
    >>>
    >>> future = fetch_then_double(client)   # inside a running event loop
    >>> future.cancel()                      # runs finally blocks, fails with FlowCancelledError
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Awaitable, Callable, Generator
from typing import Any, Generic, ParamSpec, TypeVar

from genflow.config import get_step_wrapper
from genflow.errors import FlowCancelledError, FlowUsageError
from genflow.futures import coerce_future, consume, try_cancel
from genflow.procedure import Procedure, Step, as_procedure
from genflow.run_record import RunRecord
from genflow.trace import StepWrapper

P = ParamSpec("P")
R = TypeVar("R")

logger = logging.getLogger(__name__)

UNNAMED_FLOW = "<unnamed flow>"

# What a procedure step may raise without tearing down the event loop.
_STEP_FAILURES = (Exception, asyncio.CancelledError)


class FlowFuture(asyncio.Future, Generic[R]):
    """Future returned by a flow function.

    Settles once, with the procedure's return value or with the first failure
    of the run. ``cancel()`` interrupts a pending run: it cancels the awaited
    sub-operation, runs the procedure's cleanup, and fails the future with
    ``FlowCancelledError`` (or with the error raised by the cleanup). The
    future ends up failed, not in asyncio's cancelled state, but
    ``FlowCancelledError`` is an ``asyncio.CancelledError``, so a task awaiting
    the future ends cancelled.

    Only the run settles the future: ``set_result()`` and ``set_exception()``
    raise ``RuntimeError``, as they do on ``asyncio.Task``.
    """

    def __init__(self, flow_run: _FlowRun, *, loop: asyncio.AbstractEventLoop) -> None:
        super().__init__(loop=loop)
        self._flow_run = flow_run

    @property
    def name(self) -> str:
        return self._flow_run.record.name

    @property
    def run_id(self) -> int:
        return self._flow_run.record.run_id

    def cancel(self, msg: Any | None = None) -> bool:
        if self.done():
            return False
        self._flow_run.cancel(msg)
        return True

    def set_result(self, result: Any) -> None:
        raise RuntimeError("FlowFuture does not support set_result()")

    def set_exception(self, exception: Any) -> None:
        raise RuntimeError("FlowFuture does not support set_exception()")

    def _settle_result(self, result: Any) -> None:
        super().set_result(result)

    def _settle_exception(self, exception: BaseException) -> None:
        super().set_exception(exception)


class _FlowRun:
    """Drives one procedure, one resumption at a time.

    Holds the single outstanding sub-operation, if any. Resumptions are
    triggered from done-callbacks, so the event loop acts as the trampoline.
    """

    def __init__(
        self,
        factory: Callable[..., Any],
        record: RunRecord,
        wrap: StepWrapper,
        loop: asyncio.AbstractEventLoop,
    ) -> None:
        self.factory = factory
        self.record = record
        self.wrap = wrap
        self.loop = loop
        self.future: FlowFuture[Any] = FlowFuture(self, loop=loop)
        self.procedure: Procedure | None = None
        self.pending: asyncio.Future[Any] | None = None

    def start(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> FlowFuture[Any]:
        try:
            source = self.wrap(self.record.init_label(), self.factory)(*args, **kwargs)
            self.procedure = as_procedure(source)
        except _STEP_FAILURES as exc:
            self._fail(exc)
            return self.future
        self._step(self.procedure.resume, None)
        return self.future

    def cancel(self, reason: Any = None) -> None:
        self.wrap(self.record.cancel_label(), self._cancel)(reason)

    def _step(self, operation: Callable[[Any], Step[Any]], arg: Any) -> None:
        resume = self.wrap(self.record.next_step_label(), operation)
        try:
            step = resume(arg)
        except _STEP_FAILURES as exc:
            self._fail(exc)
            return
        self._advance(step)

    def _advance(self, step: Step[Any]) -> None:
        if self.future.done():
            # The step itself cancelled or settled this run.
            return
        if step.done:
            self._succeed(step.value)
            return
        try:
            pending = coerce_future(step.value, self.loop)
        except _STEP_FAILURES as exc:
            self._fail(exc)
            return
        self.pending = pending
        pending.add_done_callback(self._on_settled)

    def _on_settled(self, sub: asyncio.Future[Any]) -> None:
        if sub is not self.pending or self.future.done() or self.procedure is None:
            return
        self.pending = None
        if sub.cancelled():
            self._step(self.procedure.throw, asyncio.CancelledError())
            return
        error = sub.exception()
        if error is not None:
            self._step(self.procedure.throw, error)
        else:
            self._step(self.procedure.resume, sub.result())

    def _cancel(self, reason: Any = None) -> None:
        try:
            pending, self.pending = self.pending, None
            if pending is not None:
                pending.remove_done_callback(self._on_settled)
                pending.add_done_callback(consume)
                try_cancel(pending)
            if self.procedure is not None:
                step = self.procedure.terminate()
                # Whatever the cleanup yielded or returned is discarded.
                leftover = coerce_future(step.value, self.loop)
                leftover.add_done_callback(consume)
                try_cancel(leftover)
        except _STEP_FAILURES as exc:
            self._fail(exc)
            return
        self._fail(FlowCancelledError(reason))

    def _succeed(self, value: Any) -> None:
        if self.future.done():
            return
        self.future._settle_result(value)
        logger.debug("%s: settled with a result", self.record.label("done"))
        self._release()

    def _fail(self, error: BaseException) -> None:
        if self.future.done():
            return
        self.future._settle_exception(error)
        logger.debug("%s: settled with %r", self.record.label("done"), error)
        self._release()

    def _release(self) -> None:
        self.procedure = None
        self.pending = None


def flow(
    factory: Callable[P, Generator[Any, Any, R] | Procedure],
    *extra: Any,
    **options: Any,
) -> Callable[P, FlowFuture[R]]:
    """Wrap a generator function so that each call runs it as a cancellable flow.

    ``factory`` is called with the call's arguments and must return a generator
    or a ``Procedure``. Used in a class body, the result binds like any other
    function, so ``self`` reaches the generator as its first argument.

    Calls must happen while an event loop is running. All failures of the run,
    including the factory raising, fail the returned future rather than the
    call itself.

    Raises:
        FlowUsageError: If called with more than one argument or with a
            non-callable.
        RuntimeError: From the returned function, if it is called while no
            event loop is running.
    """
    if extra or options:
        raise FlowUsageError("flow expects exactly one argument and cannot be used as a decorator factory")
    if not callable(factory):
        raise FlowUsageError(f"flow expects a callable, got {type(factory).__name__}")
    name = getattr(factory, "__name__", None) or UNNAMED_FLOW

    @functools.wraps(factory)
    def start_flow(*args: P.args, **kwargs: P.kwargs) -> FlowFuture[R]:
        loop = asyncio.get_running_loop()
        flow_run = _FlowRun(factory, RunRecord.start(name), get_step_wrapper(), loop)
        return flow_run.start(args, kwargs)

    return start_flow


def flow_result(future: FlowFuture[Any]) -> Awaitable[Any]:
    """Return ``future`` unchanged; lets callers annotate the awaited type."""
    return future


def run(flow_fn: Callable[P, FlowFuture[R]], *args: P.args, **kwargs: P.kwargs) -> R:
    """Run a flow function to completion on a fresh event loop.

    Args:
        flow_fn: A function produced by ``flow``.
        *args: Positional arguments for ``flow_fn``.
        **kwargs: Keyword arguments for ``flow_fn``.

    Returns:
        The procedure's return value.
    """

    async def main() -> R:
        return await flow_fn(*args, **kwargs)

    return asyncio.run(main())


__all__ = ["FlowFuture", "UNNAMED_FLOW", "flow", "flow_result", "run"]
