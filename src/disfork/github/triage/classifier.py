"""Fork Classifier - decide whether one fork carries commits of its own.

A fork is useless when none of its branches has commits that upstream
lacks. Branch comparisons run concurrently and the first branch proving
divergence decides the verdict; the remaining comparisons are cancelled.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from disfork.config import get_settings
from disfork.github.exceptions import GitHubClientError, RepositoryOwnerMissingError
from disfork.github.pacing.fanout import first_match
from disfork.logging import bind_repo
from disfork.schemas.github_api import ComparisonResult, GitHubRepository

from .enums import ClassificationReason
from .results import ForkInfo

if TYPE_CHECKING:
    from disfork.github.client import GitHubClient


class ForkClassifier:
    """Classifies forks as useless or worth keeping.

    Usage:
        async with GitHubClient(token, gate=gate) as client:
            classifier = ForkClassifier(client, max_branches=50)
            info = await classifier.classify(repo)
            if info.is_useless:
                ...

    Rules, in order:
        1. no branches                         -> useless
        2. more than ``max_branches`` branches -> kept, nothing compared
        3. no resolvable parent                -> useless
        4. any branch ahead of, or missing in, upstream -> kept
        5. otherwise                           -> useless
    """

    def __init__(
        self,
        client: GitHubClient,
        max_branches: int | None = None,
        *,
        compare_errors_as_divergence: bool | None = None,
    ) -> None:
        """Initialize the classifier.

        Args:
            client: GitHub API client (its gate bounds all requests)
            max_branches: Branch count above which analysis is skipped.
                          Defaults to ``analysis.max_branches``.
            compare_errors_as_divergence: Treat any failed comparison as
                          divergence instead of failing the fork.
                          Defaults to ``analysis.compare_errors_as_divergence``.
        """
        config = get_settings().analysis
        self._client = client
        self._max_branches = config.max_branches if max_branches is None else max_branches
        self._compare_errors_as_divergence = (
            config.compare_errors_as_divergence
            if compare_errors_as_divergence is None
            else compare_errors_as_divergence
        )

    @property
    def max_branches(self) -> int:
        """Branch count above which analysis is skipped."""
        return self._max_branches

    async def classify(self, repo: GitHubRepository) -> ForkInfo:
        """Classify one fork.

        Args:
            repo: Fork as listed (may be a partial snapshot)

        Returns:
            ForkInfo built from a fresh snapshot of the repository

        Raises:
            RepositoryOwnerMissingError: If the fork or its parent lacks owner metadata
            GitHubClientError: If any request fails (no retries)
        """
        owner = repo.owner_login
        if owner is None:
            raise RepositoryOwnerMissingError(
                f"Fork repository {repo.display_name} is missing owner information"
            )
        log = bind_repo(owner, repo.name)

        fresh = await self._client.get_repository(owner, repo.name)
        branches = await self._client.list_branches(owner, repo.name)

        if not branches:
            log.debug("No branches")
            return ForkInfo.useless(fresh, ClassificationReason.NO_BRANCHES)

        if len(branches) > self._max_branches:
            log.debug(
                "{} branches exceeds max_branches={}, keeping", len(branches), self._max_branches
            )
            return ForkInfo.kept(fresh, ClassificationReason.TOO_MANY_BRANCHES)

        parent = fresh.parent
        if parent is None:
            log.debug("No resolvable parent")
            return ForkInfo.useless(fresh, ClassificationReason.NO_PARENT)

        parent_owner = parent.owner_login
        if parent_owner is None:
            raise RepositoryOwnerMissingError(
                f"Parent repository {parent.display_name} is missing owner information"
            )

        fork_owner = fresh.owner_login or owner
        decisive = await first_match(
            (
                self._compare_branch(parent_owner, parent.name, fork_owner, branch.name)
                for branch in branches
            ),
            lambda comparison: comparison.diverged,
        )

        if decisive is None:
            log.debug("All {} branches in sync with {}", len(branches), parent.display_name)
            return ForkInfo.useless(fresh, ClassificationReason.IN_SYNC_WITH_UPSTREAM)

        if decisive.missing_upstream:
            log.debug("Branch {} does not exist upstream", decisive.branch)
            return ForkInfo.kept(fresh, ClassificationReason.MISSING_UPSTREAM_BRANCH)

        log.debug("Branch {} is {} commit(s) ahead", decisive.branch, decisive.ahead_by)
        return ForkInfo.kept(fresh, ClassificationReason.AHEAD_OF_UPSTREAM)

    async def _compare_branch(
        self,
        parent_owner: str,
        parent_name: str,
        fork_owner: str,
        branch: str,
    ) -> ComparisonResult:
        """Compare ``parent:branch`` with ``fork_owner:branch``."""
        try:
            return await self._client.compare_branches(
                parent_owner,
                parent_name,
                branch,
                f"{fork_owner}:{branch}",
                branch=branch,
            )
        except GitHubClientError as e:
            if not self._compare_errors_as_divergence:
                raise
            bind_repo(fork_owner, parent_name).warning(
                "Comparison of branch {} failed, counting as divergence: {}", branch, e
            )
            return ComparisonResult.missing(branch)
