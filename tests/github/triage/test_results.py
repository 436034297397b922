"""Tests for fork triage result objects."""

from disfork.github.exceptions import GitHubClientError
from disfork.github.triage import (
    BatchAnalysisResult,
    ClassificationReason,
    DeletionResult,
    ForkFailure,
    ForkInfo,
)
from tests.factories import make_repo


class TestForkInfo:
    """Tests for ForkInfo."""

    def test_to_dict(self):
        info = ForkInfo.kept(
            make_repo("project", parent="upstream/project"),
            ClassificationReason.AHEAD_OF_UPSTREAM,
        )

        assert info.to_dict() == {
            "full_name": "alice/project",
            "is_useless": False,
            "reason": "ahead_of_upstream",
            "parent": "upstream/project",
        }

    def test_owner_login_missing(self):
        info = ForkInfo.useless(make_repo("project", owner=None), ClassificationReason.NO_PARENT)

        assert info.owner_login is None
        assert info.full_name == "project"


class TestBatchAnalysisResult:
    """Tests for BatchAnalysisResult."""

    def test_partitions(self):
        result = BatchAnalysisResult(
            forks=[
                ForkInfo.useless(make_repo("a"), ClassificationReason.NO_BRANCHES),
                ForkInfo.kept(make_repo("b"), ClassificationReason.MISSING_UPSTREAM_BRANCH),
            ],
            failures=[ForkFailure(make_repo("c"), GitHubClientError("boom"))],
        )

        assert result.total == 3
        assert [f.repo.name for f in result.useless] == ["a"]
        assert [f.repo.name for f in result.kept] == ["b"]

    def test_sort_is_case_insensitive(self):
        result = BatchAnalysisResult(
            forks=[
                ForkInfo.useless(make_repo("Zed"), ClassificationReason.NO_BRANCHES),
                ForkInfo.useless(make_repo("apple"), ClassificationReason.NO_BRANCHES),
            ]
        )

        result.sort()

        assert [f.repo.name for f in result.forks] == ["apple", "Zed"]

    def test_to_dict(self):
        result = BatchAnalysisResult(
            forks=[ForkInfo.useless(make_repo("a"), ClassificationReason.NO_BRANCHES)],
            failures=[ForkFailure(make_repo("c"), GitHubClientError("boom"))],
            duration_seconds=1.234,
        )

        data = result.to_dict()

        assert data["summary"] == {
            "total": 2,
            "useless": 1,
            "kept": 0,
            "failed": 1,
            "duration_seconds": 1.23,
        }
        assert data["failures"] == [
            {"full_name": "alice/c", "error": "boom", "error_type": "GitHubClientError"}
        ]


class TestDeletionResult:
    """Tests for DeletionResult."""

    def test_to_dict(self):
        result = DeletionResult(
            deleted=["alice/a"],
            already_gone=["alice/b"],
            failed=[("alice/c", "forbidden")],
        )

        assert not result.all_succeeded
        assert result.to_dict() == {
            "dry_run": False,
            "deleted": ["alice/a"],
            "already_gone": ["alice/b"],
            "skipped": [],
            "failed": [{"full_name": "alice/c", "error": "forbidden"}],
        }
