"""
Cancelling a Polling Flow
=========================

``cancel()`` reaches into the suspended generator: the pending sleep is
cancelled, the ``finally`` block runs, and the flow's future fails with
FlowCancelledError.

Run this example:
    python examples/02_cancellation.py
"""

import asyncio

from genflow import flow, is_flow_cancellation_error


@flow
def poll_status(job_id: str, interval: float = 0.1):
    polls = 0
    try:
        while True:
            polls += 1
            print(f"  [poll] {job_id}: check #{polls}")
            yield asyncio.sleep(interval)
    finally:
        print(f"  [poll] {job_id}: stopped after {polls} checks")


async def main() -> None:
    future = poll_status("job-42")
    await asyncio.sleep(0.35)
    future.cancel()
    try:
        await future
    except Exception as exc:
        print("Cancelled:", is_flow_cancellation_error(exc), repr(exc))


if __name__ == "__main__":
    asyncio.run(main())
