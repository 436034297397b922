"""Fan-out with winner-take-all cancellation.

Spawns one task per awaitable, returns the first result that satisfies a
predicate and cancels everything still running.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine, Iterable
from typing import Any, TypeVar

T = TypeVar("T")


async def first_match(
    coros: Iterable[Coroutine[Any, Any, T]],
    predicate: Callable[[T], bool],
) -> T | None:
    """Run coroutines concurrently and return the first satisfying result.

    Results are consumed in completion order. As soon as one satisfies
    ``predicate`` (or one raises), the remaining tasks are cancelled without
    waiting for them to finish.

    Args:
        coros: Coroutines to run
        predicate: Decides whether a result ends the fan-out

    Returns:
        The first satisfying result, or None if every task completed
        without a match

    Raises:
        Exception: The first exception raised by any task
    """
    tasks = [asyncio.ensure_future(coro) for coro in coros]
    pending: set[asyncio.Task[T]] = set(tasks)
    try:
        while pending:
            done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                result = task.result()
                if predicate(result):
                    return result
        return None
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()
            elif not task.cancelled():
                # Mark sibling failures as retrieved; only the first one propagates.
                task.exception()
