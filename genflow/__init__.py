"""
genflow - cancellable asynchronous flows from Python generators.

A flow is a generator function whose ``yield`` expressions wait on
sub-operations: futures, tasks, coroutines or plain values. Calling the
function decorated with ``flow`` starts a run and returns one future for its
result, with a ``cancel()`` that reaches into the suspended generator and runs
its cleanup.

Example:
    >>> from genflow import flow
    >>>
    >>> @flow
    ... def fetch_then_double(fetch):
    ...     value = yield fetch()
    ...     return value * 2
"""

from genflow.config import (
    FlowSettings,
    get_step_wrapper,
    load_settings,
    set_step_wrapper,
    step_wrapper,
)
from genflow.errors import (
    FLOW_CANCELLED_MESSAGE,
    FlowCancelledError,
    FlowError,
    FlowUsageError,
    is_flow_cancellation_error,
)
from genflow.flow import UNNAMED_FLOW, FlowFuture, flow, flow_result, run
from genflow.futures import Cancellable, coerce_future
from genflow.procedure import (
    GeneratorProcedure,
    Procedure,
    ProcedureState,
    Step,
    as_procedure,
)
from genflow.run_record import RunRecord, next_run_id
from genflow.trace import (
    StepRecorder,
    StepWrapper,
    TraceEntry,
    TracedWrapper,
    identity_wrapper,
)

__version__ = "0.1.0"

__all__ = [
    "FLOW_CANCELLED_MESSAGE",
    "UNNAMED_FLOW",
    "Cancellable",
    "FlowCancelledError",
    "FlowError",
    "FlowFuture",
    "FlowSettings",
    "FlowUsageError",
    "GeneratorProcedure",
    "Procedure",
    "ProcedureState",
    "RunRecord",
    "Step",
    "StepRecorder",
    "StepWrapper",
    "TraceEntry",
    "TracedWrapper",
    "as_procedure",
    "coerce_future",
    "flow",
    "flow_result",
    "get_step_wrapper",
    "identity_wrapper",
    "is_flow_cancellation_error",
    "load_settings",
    "next_run_id",
    "run",
    "set_step_wrapper",
    "step_wrapper",
]
