"""Progress tracking for batch operations.

This module provides observable progress tracking for fork analysis and
deletion runs. The CLI renders updates; the core only counts.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

logger = logging.getLogger(__name__)


class ProgressState(StrEnum):
    """State of a tracked operation."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass
class ProgressUpdate:
    """A progress update event."""

    total: int
    completed: int
    failed: int
    state: ProgressState
    last_item: str | None = None
    elapsed_seconds: float = 0.0

    @property
    def processed(self) -> int:
        """Items finished, successfully or not."""
        return self.completed + self.failed


ProgressCallback = Callable[[ProgressUpdate], None]


class ProgressTracker:
    """Observable progress tracker for batch operations.

    Usage:
        tracker = ProgressTracker(total=len(forks), name="fork analysis")
        tracker.on_progress(lambda update: bar.update(task, completed=update.processed))

        tracker.start()
        ...
        tracker.increment(item="octocat/hello-world")
        tracker.complete()
    """

    def __init__(self, total: int = 0, name: str = "operation") -> None:
        """Initialize the progress tracker.

        Args:
            total: Total number of items to process
            name: Name of the operation for logging
        """
        self._total = total
        self._name = name
        self._completed = 0
        self._failed = 0
        self._state = ProgressState.PENDING
        self._last_item: str | None = None
        self._start_time: float | None = None
        self._callbacks: list[ProgressCallback] = []

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------
    @property
    def total(self) -> int:
        """Total number of items to process."""
        return self._total

    @total.setter
    def total(self, value: int) -> None:
        """Set total items (known only once the candidate list is built)."""
        self._total = value
        self._notify()

    @property
    def completed(self) -> int:
        """Number of successfully completed items."""
        return self._completed

    @property
    def failed(self) -> int:
        """Number of failed items."""
        return self._failed

    @property
    def state(self) -> ProgressState:
        """Current state of the operation."""
        return self._state

    @property
    def elapsed_seconds(self) -> float:
        """Elapsed time since start in seconds."""
        if self._start_time is None:
            return 0.0
        return time.monotonic() - self._start_time

    # -------------------------------------------------------------------------
    # Callbacks
    # -------------------------------------------------------------------------
    def on_progress(self, callback: ProgressCallback) -> None:
        """Register a progress callback.

        Args:
            callback: Function called with a ProgressUpdate on every change
        """
        self._callbacks.append(callback)

    def _notify(self) -> None:
        update = self.get_update()
        for callback in self._callbacks:
            try:
                callback(update)
            except Exception as e:
                logger.warning("Progress callback error: %s", e)

    # -------------------------------------------------------------------------
    # State Management
    # -------------------------------------------------------------------------
    def start(self) -> None:
        """Mark operation as started."""
        self._state = ProgressState.IN_PROGRESS
        self._start_time = time.monotonic()
        logger.info("Started %s (total=%d)", self._name, self._total)
        self._notify()

    def complete(self) -> None:
        """Mark operation as completed."""
        self._state = ProgressState.COMPLETED
        logger.info(
            "Completed %s: %d succeeded, %d failed in %.1fs",
            self._name,
            self._completed,
            self._failed,
            self.elapsed_seconds,
        )
        self._notify()

    def cancel(self) -> None:
        """Mark operation as cancelled."""
        self._state = ProgressState.CANCELLED
        logger.info("Cancelled %s at %d/%d", self._name, self._completed + self._failed, self._total)
        self._notify()

    # -------------------------------------------------------------------------
    # Progress Updates
    # -------------------------------------------------------------------------
    def increment(self, count: int = 1, *, item: str | None = None) -> None:
        """Increment completed count.

        Args:
            count: Number of items completed (default 1)
            item: Name of the item that just finished
        """
        self._completed += count
        self._last_item = item
        logger.debug(
            "%s progress: %d/%d",
            self._name,
            self._completed + self._failed,
            self._total,
        )
        self._notify()

    def increment_failed(
        self,
        count: int = 1,
        *,
        item: str | None = None,
        error: str | None = None,
    ) -> None:
        """Increment failed count.

        Args:
            count: Number of items that failed (default 1)
            item: Name of the item that just failed
            error: Optional error description
        """
        self._failed += count
        self._last_item = item
        if error:
            logger.warning("%s item failed: %s", self._name, error)
        self._notify()

    def get_update(self) -> ProgressUpdate:
        """Get current progress as an update object."""
        return ProgressUpdate(
            total=self._total,
            completed=self._completed,
            failed=self._failed,
            state=self._state,
            last_item=self._last_item,
            elapsed_seconds=self.elapsed_seconds,
        )
