"""Tests for ProgressTracker as driven by fork analysis and deletion."""

import time

from disfork.github.pacing.progress import (
    ProgressState,
    ProgressTracker,
    ProgressUpdate,
)


def recording_tracker(total: int = 0) -> tuple[ProgressTracker, list[ProgressUpdate]]:
    tracker = ProgressTracker(total=total, name="fork analysis")
    updates: list[ProgressUpdate] = []
    tracker.on_progress(updates.append)
    return tracker, updates


class TestForkAnalysisRun:
    """A tracker walked through a batch the way the coordinator does."""

    def test_total_known_after_listing(self) -> None:
        """The fork count is set once the listing is filtered; observers see it."""
        tracker, updates = recording_tracker()

        tracker.total = 3

        assert updates[-1].total == 3
        assert updates[-1].state == ProgressState.PENDING

    def test_completion_order_reported(self) -> None:
        """Each update names the fork that just finished, failed or not."""
        tracker, updates = recording_tracker(total=3)
        tracker.start()

        tracker.increment(item="alice/fast")
        tracker.increment_failed(item="alice/broken", error="GitHub API error (502)")
        tracker.increment(item="alice/slow")

        finished = [(u.last_item, u.processed) for u in updates[1:]]
        assert finished == [("alice/fast", 1), ("alice/broken", 2), ("alice/slow", 3)]
        assert (tracker.completed, tracker.failed) == (2, 1)

    def test_processed_drives_the_bar(self) -> None:
        """processed counts failures too, so the bar reaches total."""
        update = ProgressUpdate(total=4, completed=3, failed=1, state=ProgressState.IN_PROGRESS)

        assert update.processed == update.total

    def test_complete(self) -> None:
        tracker, updates = recording_tracker(total=1)
        tracker.start()
        tracker.increment(item="alice/a")

        tracker.complete()

        assert tracker.state == ProgressState.COMPLETED
        assert updates[-1].state == ProgressState.COMPLETED
        assert updates[-1].last_item == "alice/a"

    def test_cancel_on_interrupt(self) -> None:
        """Ctrl+C mid-batch leaves the counts where they stopped."""
        tracker, updates = recording_tracker(total=5)
        tracker.start()
        tracker.increment(item="alice/a")

        tracker.cancel()

        assert updates[-1].state == ProgressState.CANCELLED
        assert updates[-1].processed == 1

    def test_elapsed_time(self) -> None:
        tracker = ProgressTracker(total=1)
        assert tracker.elapsed_seconds == 0.0

        tracker.start()
        time.sleep(0.02)

        assert tracker.get_update().elapsed_seconds >= 0.01


class TestCallbacks:
    """Tests for observer registration."""

    def test_failing_callback_does_not_stop_tracking(self) -> None:
        """A broken renderer never breaks the analysis."""
        tracker = ProgressTracker(total=2)
        seen: list[str | None] = []

        def broken(update: ProgressUpdate) -> None:
            raise RuntimeError("terminal closed")

        tracker.on_progress(broken)
        tracker.on_progress(lambda update: seen.append(update.last_item))
        tracker.start()
        tracker.increment(item="alice/a")
        tracker.complete()

        assert tracker.state == ProgressState.COMPLETED
        assert "alice/a" in seen

    def test_deletion_counts(self) -> None:
        """Deletion uses the same tracker; a bulk increment is allowed."""
        tracker = ProgressTracker(total=3, name="fork deletion")
        tracker.start()

        tracker.increment(2)
        tracker.increment_failed(item="alice/c")

        assert tracker.get_update().processed == 3
        assert tracker.get_update().last_item == "alice/c"
