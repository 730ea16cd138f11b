"""
Resumable procedures driven by a flow run.

A procedure is the stepwise computation behind a flow: the driver resumes it
with a value or an error, and each resumption reports a ``Step`` saying whether
it suspended on a new value or finished with a result. Generators are the
usual source of procedures; ``GeneratorProcedure`` adapts them. Anything that
implements the ``Procedure`` protocol can be returned from a flow factory
instead.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Generator, Generic, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")


@dataclass(frozen=True)
class Step(Generic[T]):
    """Outcome of one resumption.

    ``done=False`` means the procedure suspended and ``value`` is what it is
    waiting on. ``done=True`` means it finished and ``value`` is its result.
    """

    done: bool
    value: Any = None

    @classmethod
    def suspended(cls, value: Any) -> Step[Any]:
        return cls(done=False, value=value)

    @classmethod
    def finished(cls, value: T) -> Step[T]:
        return cls(done=True, value=value)


@runtime_checkable
class Procedure(Protocol):
    """A computation that can be resumed, fed an error, or terminated early.

    Each operation runs the procedure up to its next suspension point and
    returns the resulting ``Step``. Exceptions the procedure does not handle
    are raised from the operation itself.
    """

    def resume(self, value: Any) -> Step[Any]:
        """Continue with ``value`` as the outcome of the pending suspension."""
        ...

    def throw(self, error: BaseException) -> Step[Any]:
        """Continue by raising ``error`` at the pending suspension."""
        ...

    def terminate(self) -> Step[Any]:
        """Abandon the computation, running whatever cleanup it defines."""
        ...


class ProcedureState(Enum):
    """Lifecycle state of a generator-backed procedure."""
    CREATED = auto()     # Not resumed yet
    SUSPENDED = auto()   # Waiting on a yielded value
    COMPLETED = auto()   # Returned normally
    FAILED = auto()      # Raised an exception
    TERMINATED = auto()  # Cleanup path ran


@dataclass
class GeneratorProcedure:
    """Procedure over a Python generator.

    ``resume`` and ``throw`` map to ``generator.send`` and ``generator.throw``.
    ``terminate`` raises ``GeneratorExit`` at the suspension point so that
    ``finally`` blocks and context-manager exits run; unlike
    ``generator.close()``, a value yielded from that cleanup code is reported
    back instead of turning into a ``RuntimeError``.
    """

    generator: Generator[Any, Any, Any]
    state: ProcedureState = ProcedureState.CREATED

    def resume(self, value: Any) -> Step[Any]:
        return self._advance(self.generator.send, value)

    def throw(self, error: BaseException) -> Step[Any]:
        return self._advance(self.generator.throw, error)

    def terminate(self) -> Step[Any]:
        try:
            item = self.generator.throw(GeneratorExit())
        except GeneratorExit:
            self.state = ProcedureState.TERMINATED
            return Step.finished(None)
        except StopIteration as stop:
            self.state = ProcedureState.TERMINATED
            return Step.finished(stop.value)
        except BaseException:
            self.state = ProcedureState.FAILED
            raise
        # Cleanup yielded; the generator stays suspended inside it.
        self.state = ProcedureState.TERMINATED
        return Step.suspended(item)

    def _advance(self, method: Any, arg: Any) -> Step[Any]:
        try:
            item = method(arg)
        except StopIteration as stop:
            self.state = ProcedureState.COMPLETED
            return Step.finished(stop.value)
        except BaseException:
            self.state = ProcedureState.FAILED
            raise
        self.state = ProcedureState.SUSPENDED
        return Step.suspended(item)


def as_procedure(source: Any) -> Procedure:
    """Coerce the result of a flow factory into a ``Procedure``.

    Raises:
        TypeError: If ``source`` is neither a generator nor a Procedure.
    """
    if inspect.isgenerator(source):
        return GeneratorProcedure(source)
    if isinstance(source, Procedure):
        return source
    if inspect.iscoroutine(source):
        source.close()
        raise TypeError(
            "flow factory returned a coroutine; define it as a generator function "
            "(use 'yield' instead of 'await')"
        )
    if inspect.isasyncgen(source):
        raise TypeError("flow factory returned an async generator; async generators are not supported")
    raise TypeError(
        f"flow factory must return a generator or a Procedure, got {type(source).__name__}"
    )


__all__ = [
    "GeneratorProcedure",
    "Procedure",
    "ProcedureState",
    "Step",
    "as_procedure",
]
