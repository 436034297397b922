"""Admission gate bounding in-flight GitHub API requests.

Every remote call made by the client passes through one shared gate.
Forks are analyzed concurrently and each fork fans out one comparison per
branch, so the gate is the only thing keeping total in-flight requests
at or below the configured parallelism.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AdmissionGate:
    """Counting semaphore with call statistics.

    Usage:
        gate = AdmissionGate(capacity=6)
        repo = await gate.call(lambda: github.rest.repos.async_get(owner, name))

    A permit is held only for the duration of a single call and is
    released whether the call succeeds, fails or is cancelled.
    """

    def __init__(self, capacity: int) -> None:
        """Initialize the gate.

        Args:
            capacity: Maximum number of concurrent calls (must be >= 1)

        Raises:
            ValueError: If capacity is less than 1
        """
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._semaphore = asyncio.Semaphore(capacity)

        # Statistics
        self._in_flight = 0
        self._peak_in_flight = 0
        self._total_calls = 0
        self._total_failed = 0

    async def call(self, coro_factory: Callable[[], Awaitable[T]]) -> T:
        """Wait for a permit, run the call, release the permit.

        Args:
            coro_factory: Factory creating the coroutine to await once admitted

        Returns:
            Result of the coroutine

        Raises:
            Exception: Any exception from the coroutine, after the permit is released
        """
        async with self._semaphore:
            self._in_flight += 1
            self._total_calls += 1
            self._peak_in_flight = max(self._peak_in_flight, self._in_flight)
            try:
                return await coro_factory()
            except Exception:
                self._total_failed += 1
                raise
            finally:
                self._in_flight -= 1

    # -------------------------------------------------------------------------
    # Query Methods
    # -------------------------------------------------------------------------
    @property
    def capacity(self) -> int:
        """Maximum number of concurrent calls."""
        return self._capacity

    @property
    def in_flight(self) -> int:
        """Number of calls currently holding a permit."""
        return self._in_flight

    @property
    def peak_in_flight(self) -> int:
        """Highest number of simultaneous calls observed."""
        return self._peak_in_flight

    @property
    def is_idle(self) -> bool:
        """True if no call currently holds a permit."""
        return self._in_flight == 0

    def get_stats(self) -> dict[str, int | bool]:
        """Get gate statistics.

        Returns:
            Dict with capacity, in_flight, peak_in_flight, total_calls, etc.
        """
        return {
            "capacity": self._capacity,
            "in_flight": self._in_flight,
            "peak_in_flight": self._peak_in_flight,
            "is_idle": self.is_idle,
            "total_calls": self._total_calls,
            "total_failed": self._total_failed,
        }

    def log_stats(self) -> None:
        """Log a one-line summary of gate usage."""
        logger.debug(
            "Admission gate: %d calls (%d failed), peak %d/%d in flight",
            self._total_calls,
            self._total_failed,
            self._peak_in_flight,
            self._capacity,
        )
