"""Tests for ForkBatchCoordinator.

Tests cover:
- Non-fork filtering
- Failure isolation between forks
- Progress reported in completion order
- Concurrency bound on admitted forks
- End-to-end classification and default selection
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from disfork.github.exceptions import GitHubClientError, RepositoryOwnerMissingError
from disfork.github.pacing import ProgressState, ProgressTracker
from disfork.github.triage import (
    ClassificationReason,
    ForkBatchCoordinator,
    ForkClassifier,
    ForkInfo,
    default_selection,
    resolve_selection,
)
from disfork.schemas import ComparisonResult
from tests.factories import make_branches, make_repo


def make_classifier(verdicts: dict[str, ForkInfo | Exception], delays: dict[str, float]):
    """Classifier double returning scripted verdicts after scripted delays."""
    classifier = MagicMock(spec=ForkClassifier)

    async def classify(repo):
        await asyncio.sleep(delays.get(repo.name, 0))
        outcome = verdicts[repo.name]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    classifier.classify = AsyncMock(side_effect=classify)
    return classifier


# -----------------------------------------------------------------------------
# Test: Initialization
# -----------------------------------------------------------------------------
class TestCoordinatorInit:
    """Tests for coordinator construction."""

    def test_default_limit(self):
        coordinator = ForkBatchCoordinator(MagicMock(spec=ForkClassifier))
        assert coordinator.max_concurrent_forks == 6

    def test_explicit_limit(self):
        coordinator = ForkBatchCoordinator(MagicMock(spec=ForkClassifier), max_concurrent_forks=2)
        assert coordinator.max_concurrent_forks == 2

    @pytest.mark.parametrize("limit", [0, -1])
    def test_rejects_limit_below_one(self, limit):
        """An explicit 0 is rejected, not replaced by the default."""
        with pytest.raises(ValueError, match="at least 1"):
            ForkBatchCoordinator(MagicMock(spec=ForkClassifier), max_concurrent_forks=limit)


# -----------------------------------------------------------------------------
# Test: Batch Analysis
# -----------------------------------------------------------------------------
class TestAnalyze:
    """Tests for analyzing a batch of repositories."""

    async def test_ignores_non_forks(self):
        repo_a = make_repo("a")
        classifier = make_classifier(
            {"a": ForkInfo.useless(repo_a, ClassificationReason.NO_BRANCHES)}, {}
        )
        coordinator = ForkBatchCoordinator(classifier, max_concurrent_forks=2)

        result = await coordinator.analyze([repo_a, make_repo("original", fork=False)])

        assert result.total == 1
        assert classifier.classify.await_count == 1

    async def test_empty(self):
        coordinator = ForkBatchCoordinator(make_classifier({}, {}), max_concurrent_forks=2)

        result = await coordinator.analyze([])

        assert result.total == 0
        assert result.forks == []

    async def test_failure_does_not_stop_batch(self):
        """One failing fork is recorded; the others are still classified."""
        repos = [make_repo(name) for name in ("a", "b", "c")]
        classifier = make_classifier(
            {
                "a": ForkInfo.useless(repos[0], ClassificationReason.NO_PARENT),
                "b": GitHubClientError("GitHub API error (500)"),
                "c": ForkInfo.kept(repos[2], ClassificationReason.AHEAD_OF_UPSTREAM),
            },
            {},
        )
        coordinator = ForkBatchCoordinator(classifier, max_concurrent_forks=3)

        result = await coordinator.analyze(repos)

        assert [f.full_name for f in result.forks] == ["alice/a", "alice/c"]
        assert len(result.failures) == 1
        assert result.failures[0].full_name == "alice/b"
        assert isinstance(result.failures[0].error, GitHubClientError)

    async def test_owner_missing_is_a_fork_failure(self):
        repo = make_repo("orphan", owner=None)
        classifier = make_classifier({"orphan": RepositoryOwnerMissingError("no owner")}, {})
        coordinator = ForkBatchCoordinator(classifier, max_concurrent_forks=1)

        result = await coordinator.analyze([repo])

        assert result.forks == []
        assert result.failures[0].full_name == "orphan"

    async def test_results_sorted_by_name(self):
        """Forks finish in any order but are returned sorted."""
        repos = [make_repo(name) for name in ("zeta", "alpha", "mid")]
        classifier = make_classifier(
            {r.name: ForkInfo.useless(r, ClassificationReason.NO_BRANCHES) for r in repos},
            {"alpha": 0.03, "mid": 0.01, "zeta": 0.0},
        )
        coordinator = ForkBatchCoordinator(classifier, max_concurrent_forks=3)

        result = await coordinator.analyze(repos)

        assert [f.repo.name for f in result.forks] == ["alpha", "mid", "zeta"]

    async def test_progress_in_completion_order(self):
        """Progress advances as each fork finishes, in finishing order."""
        repos = [make_repo(name) for name in ("slow", "fast", "broken")]
        classifier = make_classifier(
            {
                "slow": ForkInfo.kept(repos[0], ClassificationReason.AHEAD_OF_UPSTREAM),
                "fast": ForkInfo.useless(repos[1], ClassificationReason.NO_BRANCHES),
                "broken": GitHubClientError("boom"),
            },
            {"slow": 0.05, "fast": 0.0, "broken": 0.02},
        )
        tracker = ProgressTracker(name="test")
        finished: list[str] = []

        def record(update):
            if update.state == ProgressState.IN_PROGRESS and update.last_item:
                finished.append(update.last_item)

        tracker.on_progress(record)
        coordinator = ForkBatchCoordinator(classifier, max_concurrent_forks=3, progress=tracker)

        await coordinator.analyze(repos)

        assert finished == ["alice/fast", "alice/broken", "alice/slow"]
        assert tracker.total == 3
        assert tracker.completed == 2
        assert tracker.failed == 1

    async def test_bounds_concurrent_forks(self):
        """No more than max_concurrent_forks forks are analyzed at once."""
        running = 0
        peak = 0
        repos = [make_repo(f"r{i}") for i in range(8)]

        async def classify(repo):
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1
            return ForkInfo.useless(repo, ClassificationReason.NO_BRANCHES)

        classifier = MagicMock(spec=ForkClassifier)
        classifier.classify = AsyncMock(side_effect=classify)
        coordinator = ForkBatchCoordinator(classifier, max_concurrent_forks=3)

        result = await coordinator.analyze(repos)

        assert result.total == 8
        assert peak == 3


# -----------------------------------------------------------------------------
# Test: End-to-End Scenario
# -----------------------------------------------------------------------------
class TestEndToEnd:
    """Three forks classified through the real classifier."""

    @pytest.fixture
    def account_repos(self):
        return [
            make_repo("a"),
            make_repo("b"),
            make_repo("c"),
            make_repo("tool", fork=False),
        ]

    def script_client(self, fake_client, b_ahead: dict[str, int]) -> None:
        fresh = {
            "a": make_repo("a", parent="upstream/a"),
            "b": make_repo("b", parent="upstream/b"),
            "c": make_repo("c"),
        }
        branches = {
            "a": [],
            "b": make_branches("main", "dev"),
            "c": make_branches("main"),
        }

        async def get_repository(owner, name):
            return fresh[name]

        async def list_branches(owner, name):
            return branches[name]

        async def compare_branches(owner, repo, base, head, *, branch=None):
            assert (owner, repo) == ("upstream", "b")
            return ComparisonResult.ahead(base, b_ahead[base])

        fake_client.get_repository.side_effect = get_repository
        fake_client.list_branches.side_effect = list_branches
        fake_client.compare_branches.side_effect = compare_branches

    async def test_b_in_sync(self, fake_client, account_repos):
        """A (no branches), B (all in sync) and C (no parent) are all useless."""
        self.script_client(fake_client, {"main": 0, "dev": 0})
        coordinator = ForkBatchCoordinator(
            ForkClassifier(fake_client), max_concurrent_forks=2
        )

        result = await coordinator.analyze(account_repos)

        verdicts = {f.repo.name: (f.is_useless, f.reason) for f in result.forks}
        assert verdicts == {
            "a": (True, ClassificationReason.NO_BRANCHES),
            "b": (True, ClassificationReason.IN_SYNC_WITH_UPSTREAM),
            "c": (True, ClassificationReason.NO_PARENT),
        }
        selected = resolve_selection(result.forks, default_selection(result.forks))
        assert [f.repo.name for f in selected] == ["a", "b", "c"]

    async def test_b_ahead(self, fake_client, account_repos):
        """With one of B's branches ahead, auto selection is {A, C}."""
        self.script_client(fake_client, {"main": 0, "dev": 4})
        coordinator = ForkBatchCoordinator(
            ForkClassifier(fake_client), max_concurrent_forks=2
        )

        result = await coordinator.analyze(account_repos)

        verdicts = {f.repo.name: f.is_useless for f in result.forks}
        assert verdicts == {"a": True, "b": False, "c": True}
        selected = resolve_selection(result.forks, default_selection(result.forks))
        assert [f.repo.name for f in selected] == ["a", "c"]

    async def test_branch_cutoff_keeps_b(self, fake_client, account_repos):
        """With max_branches=1, B (two branches, both in sync) is kept unchecked.

        A has no branches and C has no parent; auto selection is {A, C}.
        """
        self.script_client(fake_client, {"main": 0, "dev": 0})
        coordinator = ForkBatchCoordinator(
            ForkClassifier(fake_client, max_branches=1), max_concurrent_forks=2
        )

        result = await coordinator.analyze(account_repos)

        verdicts = {f.repo.name: (f.is_useless, f.reason) for f in result.forks}
        assert verdicts == {
            "a": (True, ClassificationReason.NO_BRANCHES),
            "b": (False, ClassificationReason.TOO_MANY_BRANCHES),
            "c": (True, ClassificationReason.NO_PARENT),
        }
        fake_client.compare_branches.assert_not_awaited()
        selected = resolve_selection(result.forks, default_selection(result.forks))
        assert [f.repo.name for f in selected] == ["a", "c"]
