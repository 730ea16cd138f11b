"""Tests for coercing yielded values into asyncio futures."""

from __future__ import annotations

import asyncio
import concurrent.futures

import pytest

from genflow import Cancellable, coerce_future
from genflow.futures import consume, try_cancel


class Awaitable42:
    def __await__(self):
        yield from asyncio.sleep(0).__await__()
        return 42


class TestCoerceFuture:
    @pytest.mark.asyncio
    async def test_future_is_returned_unchanged(self):
        loop = asyncio.get_running_loop()
        future = loop.create_future()
        assert coerce_future(future, loop) is future

    @pytest.mark.asyncio
    async def test_task_is_returned_unchanged(self):
        loop = asyncio.get_running_loop()
        task = asyncio.ensure_future(asyncio.sleep(0, result="slept"))
        assert coerce_future(task, loop) is task
        assert await task == "slept"

    @pytest.mark.asyncio
    async def test_coroutine_becomes_task(self):
        loop = asyncio.get_running_loop()

        async def compute():
            return 5

        coerced = coerce_future(compute(), loop)
        assert isinstance(coerced, asyncio.Task)
        assert await coerced == 5

    @pytest.mark.asyncio
    async def test_custom_awaitable(self):
        loop = asyncio.get_running_loop()
        assert await coerce_future(Awaitable42(), loop) == 42

    @pytest.mark.asyncio
    async def test_concurrent_future(self):
        loop = asyncio.get_running_loop()
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            coerced = coerce_future(pool.submit(lambda: "threaded"), loop)
            assert asyncio.isfuture(coerced)
            assert await coerced == "threaded"

    @pytest.mark.asyncio
    async def test_plain_value_is_resolved(self):
        loop = asyncio.get_running_loop()
        coerced = coerce_future({"a": 1}, loop)
        assert coerced.done()
        assert coerced.result() == {"a": 1}

    @pytest.mark.asyncio
    async def test_none_is_resolved(self):
        loop = asyncio.get_running_loop()
        assert coerce_future(None, loop).result() is None


class TestTryCancel:
    def test_ignores_objects_without_cancel(self):
        try_cancel(object())
        try_cancel(None)

    def test_calls_cancel(self):
        class Handle:
            cancelled = False

            def cancel(self):
                self.cancelled = True

        handle = Handle()
        assert isinstance(handle, Cancellable)
        try_cancel(handle)
        assert handle.cancelled

    def test_swallows_cancel_errors(self):
        class Broken:
            def cancel(self):
                raise RuntimeError("cannot cancel")

        try_cancel(Broken())


class TestConsume:
    @pytest.mark.asyncio
    async def test_accepts_every_outcome(self):
        loop = asyncio.get_running_loop()
        ok = loop.create_future()
        ok.set_result(1)
        failed = loop.create_future()
        failed.set_exception(ValueError("ignored"))
        cancelled = loop.create_future()
        cancelled.cancel()
        for future in (ok, failed, cancelled):
            consume(future)
