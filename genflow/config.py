"""
Configuration for genflow.

Settings come from the environment:

- ``GENFLOW_TRACE``: when truthy, runs log every step through loguru.
- ``GENFLOW_TRACE_LEVEL``: loguru level for those messages (default ``DEBUG``).

An explicit step wrapper installed with ``set_step_wrapper`` or the
``step_wrapper`` context manager takes precedence over the environment.
"""

from __future__ import annotations

import os
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass

from genflow.trace import StepWrapper, TracedWrapper, identity_wrapper

TRACE_ENV_VAR = "GENFLOW_TRACE"
TRACE_LEVEL_ENV_VAR = "GENFLOW_TRACE_LEVEL"

_TRUTHY = ("1", "true", "yes", "on")

_step_wrapper_override: StepWrapper | None = None


@dataclass(frozen=True)
class FlowSettings:
    trace: bool = False
    trace_level: str = "DEBUG"


def load_settings(environ: Mapping[str, str] | None = None) -> FlowSettings:
    """Read settings from ``environ`` (defaults to ``os.environ``)."""
    env = os.environ if environ is None else environ
    trace = env.get(TRACE_ENV_VAR, "").strip().lower() in _TRUTHY
    level = env.get(TRACE_LEVEL_ENV_VAR, "").strip().upper() or "DEBUG"
    return FlowSettings(trace=trace, trace_level=level)


def get_step_wrapper(settings: FlowSettings | None = None) -> StepWrapper:
    """Return the wrapper a new run should use."""
    if _step_wrapper_override is not None:
        return _step_wrapper_override
    settings = settings or load_settings()
    if settings.trace:
        return TracedWrapper(settings.trace_level)
    return identity_wrapper


def set_step_wrapper(wrapper: StepWrapper | None) -> StepWrapper | None:
    """Install ``wrapper`` for new runs and return the previous override.

    Passing None goes back to the environment-driven default.
    """
    global _step_wrapper_override
    previous = _step_wrapper_override
    _step_wrapper_override = wrapper
    return previous


@contextmanager
def step_wrapper(wrapper: StepWrapper) -> Iterator[StepWrapper]:
    """Use ``wrapper`` for runs started inside the block."""
    previous = set_step_wrapper(wrapper)
    try:
        yield wrapper
    finally:
        set_step_wrapper(previous)


__all__ = [
    "TRACE_ENV_VAR",
    "TRACE_LEVEL_ENV_VAR",
    "FlowSettings",
    "get_step_wrapper",
    "load_settings",
    "set_step_wrapper",
    "step_wrapper",
]
