"""Selection and deletion of classified forks."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from disfork.github.exceptions import GitHubClientError
from disfork.logging import get_logger

from .results import DeletionResult, ForkInfo

if TYPE_CHECKING:
    from disfork.github.client import GitHubClient
    from disfork.github.pacing.progress import ProgressTracker

logger = get_logger(__name__)


def default_selection(forks: Sequence[ForkInfo]) -> list[int]:
    """Indices of the forks selected by default: every useless one."""
    return [i for i, info in enumerate(forks) if info.is_useless]


def resolve_selection(forks: Sequence[ForkInfo], indices: Sequence[int]) -> list[ForkInfo]:
    """Map selected indices to forks, ignoring duplicates.

    Raises:
        IndexError: If an index is out of range
    """
    selected: list[ForkInfo] = []
    seen: set[int] = set()
    for index in indices:
        if index < 0 or index >= len(forks):
            raise IndexError(f"Selection {index} is out of range (0-{len(forks) - 1})")
        if index in seen:
            continue
        seen.add(index)
        selected.append(forks[index])
    return selected


class ForkDeletionService:
    """Deletes selected forks one by one.

    Usage:
        service = ForkDeletionService(client)
        result = await service.delete(selected, dry_run=False)

    A failed deletion is recorded and the remaining deletions continue.
    """

    def __init__(self, client: GitHubClient, progress: ProgressTracker | None = None) -> None:
        self._client = client
        self._progress = progress

    async def delete(self, forks: Sequence[ForkInfo], *, dry_run: bool = False) -> DeletionResult:
        """Delete every fork in ``forks``.

        Args:
            forks: Forks to delete
            dry_run: If True, make no delete call and report them as skipped

        Returns:
            DeletionResult with per-repository outcomes
        """
        result = DeletionResult(dry_run=dry_run)

        if dry_run:
            result.skipped = [info.full_name for info in forks]
            logger.info("Dry run: {} repositories would be deleted", len(forks))
            return result

        if self._progress:
            self._progress.total = len(forks)
            self._progress.start()

        for info in forks:
            owner = info.owner_login
            if owner is None:
                result.failed.append((info.full_name, "missing owner information"))
                if self._progress:
                    self._progress.increment_failed(item=info.full_name)
                continue

            try:
                deleted = await self._client.delete_repository(owner, info.repo.name)
            except GitHubClientError as e:
                logger.error("Failed to delete {}: {}", info.full_name, e)
                result.failed.append((info.full_name, str(e)))
                if self._progress:
                    self._progress.increment_failed(item=info.full_name, error=str(e))
                continue

            if deleted:
                result.deleted.append(info.full_name)
            else:
                result.already_gone.append(info.full_name)
            if self._progress:
                self._progress.increment(item=info.full_name)

        if self._progress:
            self._progress.complete()
        return result
