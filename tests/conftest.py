"""Shared fixtures for genflow tests."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterator

import pytest

from genflow import StepRecorder, step_wrapper


@pytest.fixture
def recorder() -> Iterator[StepRecorder]:
    """Install a StepRecorder as the step wrapper for runs started in the test."""
    recorder = StepRecorder()
    with step_wrapper(recorder):
        yield recorder


@pytest.fixture
def settle() -> Callable[..., Awaitable[None]]:
    """Return a coroutine function that lets pending loop callbacks run."""

    async def _settle(rounds: int = 5) -> None:
        for _ in range(rounds):
            await asyncio.sleep(0)

    return _settle
