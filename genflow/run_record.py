"""
Per-run bookkeeping used to label instrumentation steps.

Every call of a flow function gets a ``RunRecord`` with a process-wide run id
and a step counter. Labels look like::

    fetch_user - runid: 3 - init
    fetch_user - runid: 3 - yield 0
    fetch_user - runid: 3 - yield 1
    fetch_user - runid: 3 - cancel

The record carries no control-flow meaning; it only keeps labels unique.
"""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass

__all__ = ["RunRecord", "next_run_id"]

_run_ids = itertools.count(1)
_run_ids_lock = threading.Lock()


def next_run_id() -> int:
    """Return the next run id. Ids start at 1 and are never reused."""
    with _run_ids_lock:
        return next(_run_ids)


@dataclass
class RunRecord:
    """Trace metadata for one run.

    Attributes:
        name: Name of the procedure factory.
        run_id: Id from ``next_run_id``.
        steps: Number of resumption labels handed out so far.
    """

    name: str
    run_id: int
    steps: int = 0

    @classmethod
    def start(cls, name: str) -> RunRecord:
        return cls(name=name, run_id=next_run_id())

    def label(self, suffix: str) -> str:
        return f"{self.name} - runid: {self.run_id} - {suffix}"

    def init_label(self) -> str:
        return self.label("init")

    def next_step_label(self) -> str:
        label = self.label(f"yield {self.steps}")
        self.steps += 1
        return label

    def cancel_label(self) -> str:
        return self.label("cancel")
