"""Tests for step wrappers and run labels."""

from __future__ import annotations

import pytest
from loguru import logger

from genflow import (
    RunRecord,
    StepRecorder,
    TraceEntry,
    TracedWrapper,
    flow,
    identity_wrapper,
    next_run_id,
    step_wrapper,
)


@pytest.fixture
def log_messages():
    messages: list[str] = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)


class TestRunRecord:
    def test_labels(self):
        record = RunRecord(name="job", run_id=7)
        assert record.init_label() == "job - runid: 7 - init"
        assert record.next_step_label() == "job - runid: 7 - yield 0"
        assert record.next_step_label() == "job - runid: 7 - yield 1"
        assert record.cancel_label() == "job - runid: 7 - cancel"
        assert record.steps == 2

    def test_run_ids_increase(self):
        first = next_run_id()
        second = next_run_id()
        assert second > first >= 1

    def test_start_assigns_fresh_id(self):
        first = RunRecord.start("a")
        second = RunRecord.start("a")
        assert second.run_id > first.run_id
        assert first.steps == 0


class TestIdentityWrapper:
    def test_returns_step_itself(self):
        def step(value):
            return value

        assert identity_wrapper("label", step) is step


class TestTracedWrapper:
    def test_forwards_result_and_logs(self, log_messages):
        wrapped = TracedWrapper()("job - runid: 1 - yield 0", lambda value: value + 1)
        assert wrapped(1) == 2
        assert log_messages == [
            "job - runid: 1 - yield 0 started",
            "job - runid: 1 - yield 0 returned",
        ]

    def test_forwards_exception_unchanged(self, log_messages):
        error = KeyError("missing")

        def step():
            raise error

        wrapped = TracedWrapper("INFO")("job - runid: 1 - init", step)
        with pytest.raises(KeyError) as excinfo:
            wrapped()
        assert excinfo.value is error
        assert log_messages[-1] == "job - runid: 1 - init raised KeyError('missing')"

    def test_forwards_keyword_arguments(self):
        wrapped = TracedWrapper()("label", lambda *, key: key)
        assert wrapped(key="value") == "value"


class TestStepRecorder:
    def test_records_outcomes(self):
        recorder = StepRecorder()

        def failing():
            raise ValueError("x")

        recorder("ok", lambda: None)()
        with pytest.raises(ValueError):
            recorder("bad", failing)()
        assert recorder.entries == [TraceEntry("ok", "returned"), TraceEntry("bad", "raised")]
        recorder.clear()
        assert recorder.labels == []

    @pytest.mark.asyncio
    async def test_records_failed_run(self, recorder):
        @flow
        def broken():
            yield 1
            raise RuntimeError("broken")

        future = broken()
        with pytest.raises(RuntimeError):
            await future
        run_id = future.run_id
        entries = [entry for entry in recorder.entries if entry.label in recorder.labels_for(run_id)]
        assert entries == [
            TraceEntry(f"broken - runid: {run_id} - init", "returned"),
            TraceEntry(f"broken - runid: {run_id} - yield 0", "returned"),
            TraceEntry(f"broken - runid: {run_id} - yield 1", "raised"),
        ]

    @pytest.mark.asyncio
    async def test_wrapper_is_fixed_when_run_starts(self):
        recorder = StepRecorder()

        @flow
        def two_steps():
            yield 1
            return "done"

        with step_wrapper(recorder):
            future = two_steps()
        assert await future == "done"
        assert recorder.labels_for(future.run_id)[-1].endswith("yield 1")
