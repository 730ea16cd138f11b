"""
Step instrumentation for flow runs.

A step wrapper receives a label and a step callable and returns a callable
with the same behaviour: same arguments, same return value, same exceptions.
Runs wrap their ``init`` call, every resumption, and ``cancel`` with it.

Public API:
    - StepWrapper: the wrapper signature
    - identity_wrapper: no instrumentation
    - TracedWrapper: logs every step through loguru
    - StepRecorder: keeps a list of TraceEntry records, mostly for tests
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Any, Callable, Literal, TypeAlias, TypeVar

from loguru import logger

R = TypeVar("R")

StepWrapper: TypeAlias = Callable[[str, Callable[..., Any]], Callable[..., Any]]
TraceOutcome: TypeAlias = Literal["returned", "raised"]

trace_logger = logger.bind(component="genflow.trace")


def identity_wrapper(label: str, step: Callable[..., R]) -> Callable[..., R]:
    return step


class TracedWrapper:
    """Log the start and outcome of every step at ``level``."""

    def __init__(self, level: str = "DEBUG") -> None:
        self.level = level

    def __call__(self, label: str, step: Callable[..., R]) -> Callable[..., R]:
        level = self.level

        @functools.wraps(step)
        def traced_step(*args: Any, **kwargs: Any) -> R:
            trace_logger.log(level, "{} started", label)
            try:
                result = step(*args, **kwargs)
            except BaseException as exc:
                trace_logger.log(level, "{} raised {!r}", label, exc)
                raise
            trace_logger.log(level, "{} returned", label)
            return result

        return traced_step

    def __repr__(self) -> str:
        return f"TracedWrapper(level={self.level!r})"


@dataclass(frozen=True)
class TraceEntry:
    label: str
    outcome: TraceOutcome


class StepRecorder:
    """Step wrapper that remembers every wrapped call in completion order."""

    def __init__(self) -> None:
        self.entries: list[TraceEntry] = []

    def __call__(self, label: str, step: Callable[..., R]) -> Callable[..., R]:
        @functools.wraps(step)
        def recorded_step(*args: Any, **kwargs: Any) -> R:
            try:
                result = step(*args, **kwargs)
            except BaseException:
                self.entries.append(TraceEntry(label, "raised"))
                raise
            self.entries.append(TraceEntry(label, "returned"))
            return result

        return recorded_step

    @property
    def labels(self) -> list[str]:
        return [entry.label for entry in self.entries]

    def labels_for(self, run_id: int) -> list[str]:
        """Labels recorded for one run, in order."""
        marker = f" - runid: {run_id} - "
        return [label for label in self.labels if marker in label]

    def clear(self) -> None:
        self.entries.clear()


__all__ = [
    "StepRecorder",
    "StepWrapper",
    "TraceEntry",
    "TraceOutcome",
    "TracedWrapper",
    "identity_wrapper",
    "trace_logger",
]
