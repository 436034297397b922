"""Batch Coordinator - classify every fork of an account.

Fans the ForkClassifier out over all candidate forks under its own
concurrency bound, independent of the gateway's. Worst-case in-flight
requests stay bounded by the gateway, but each admitted fork may issue
one comparison per branch, so both bounds should be sized together.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence
from typing import TYPE_CHECKING

from disfork.config import get_settings
from disfork.logging import get_logger
from disfork.schemas.github_api import GitHubRepository

from .results import BatchAnalysisResult, ForkFailure, ForkInfo

if TYPE_CHECKING:
    from disfork.github.pacing.progress import ProgressTracker

    from .classifier import ForkClassifier

logger = get_logger(__name__)


class ForkBatchCoordinator:
    """Classifies many forks concurrently and collects the outcomes.

    Usage:
        classifier = ForkClassifier(client)
        coordinator = ForkBatchCoordinator(classifier, max_concurrent_forks=6)
        result = await coordinator.analyze(repos)

        for info in result.useless:
            print(info.full_name)
        for failure in result.failures:
            print(f"{failure.full_name}: {failure.error}")

    One fork failing never stops the batch; its error is recorded in
    ``result.failures``.
    """

    def __init__(
        self,
        classifier: ForkClassifier,
        max_concurrent_forks: int | None = None,
        progress: ProgressTracker | None = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            classifier: Classifier applied to each fork
            max_concurrent_forks: Forks analyzed at the same time.
                                  Defaults to ``analysis.max_concurrent_forks``.
            progress: Optional ProgressTracker, advanced as each fork finishes
        """
        limit = max_concurrent_forks
        if limit is None:
            limit = get_settings().analysis.max_concurrent_forks
        if limit < 1:
            raise ValueError("max_concurrent_forks must be at least 1")
        self._classifier = classifier
        self._max_concurrent_forks = limit
        self._semaphore = asyncio.Semaphore(limit)
        self._progress = progress

    @property
    def max_concurrent_forks(self) -> int:
        """Forks analyzed at the same time."""
        return self._max_concurrent_forks

    async def analyze(self, repos: Sequence[GitHubRepository]) -> BatchAnalysisResult:
        """Classify every fork among ``repos``.

        Non-fork repositories are ignored. Progress is reported in
        completion order.

        Args:
            repos: Repositories as listed for the account

        Returns:
            BatchAnalysisResult with forks sorted by full name
        """
        start_time = time.monotonic()
        result = BatchAnalysisResult()
        candidates = [repo for repo in repos if repo.fork]

        if self._progress:
            self._progress.total = len(candidates)
            self._progress.start()

        tasks = [asyncio.create_task(self._classify_one(repo)) for repo in candidates]
        try:
            for next_done in asyncio.as_completed(tasks):
                repo, outcome = await next_done
                if isinstance(outcome, ForkInfo):
                    result.forks.append(outcome)
                    if self._progress:
                        self._progress.increment(item=outcome.full_name)
                else:
                    result.failures.append(ForkFailure(repo=repo, error=outcome))
                    if self._progress:
                        self._progress.increment_failed(
                            item=repo.display_name, error=str(outcome)
                        )
        except BaseException:
            for task in tasks:
                task.cancel()
            if self._progress:
                self._progress.cancel()
            raise

        result.sort()
        result.duration_seconds = time.monotonic() - start_time
        if self._progress:
            self._progress.complete()

        logger.info(
            "Fork analysis complete: forks={}, useless={}, kept={}, failed={} ({:.1f}s)",
            result.total,
            len(result.useless),
            len(result.kept),
            len(result.failures),
            result.duration_seconds,
        )
        return result

    async def _classify_one(
        self,
        repo: GitHubRepository,
    ) -> tuple[GitHubRepository, ForkInfo | Exception]:
        """Classify one fork once admitted; errors are returned, not raised."""
        async with self._semaphore:
            try:
                return repo, await self._classifier.classify(repo)
            except Exception as e:
                logger.warning("Failed to analyze {}: {}", repo.display_name, e)
                return repo, e
