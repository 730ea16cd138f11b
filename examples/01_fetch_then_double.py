"""
Fetch Then Double
=================

A flow yields whatever it needs to wait on: coroutines, tasks, futures or
plain values. Failures come back into the generator as exceptions.

Run this example:
    GENFLOW_TRACE=1 python examples/01_fetch_then_double.py
"""

import asyncio
import random

from genflow import flow


# =============================================================================
# Simulated External Services
# =============================================================================


async def fetch_value(endpoint: str) -> int:
    print(f"  [API] Calling {endpoint}...")
    await asyncio.sleep(0.1)
    if random.random() < 0.3:
        raise ConnectionError(f"Failed to connect to {endpoint}")
    return 21


# =============================================================================
# Flows
# =============================================================================


@flow
def fetch_then_double(endpoint: str):
    value = yield fetch_value(endpoint)
    return value * 2


@flow
def fetch_with_retry(endpoint: str, attempts: int = 3):
    for attempt in range(1, attempts + 1):
        try:
            return (yield fetch_then_double(endpoint))
        except ConnectionError as exc:
            print(f"  [retry] attempt {attempt} failed: {exc}")
            yield asyncio.sleep(0.05 * attempt)
    raise ConnectionError(f"{endpoint} unreachable after {attempts} attempts")


async def main() -> None:
    print("Result:", await fetch_with_retry("/numbers/21"))


if __name__ == "__main__":
    asyncio.run(main())
