"""Tests for GitHub API Pydantic schemas."""

from disfork.schemas import (
    ComparisonResult,
    DeviceCode,
    GitHubComparison,
    GitHubOwner,
    GitHubRepository,
    TokenResponse,
)
from tests.factories import make_github_comparison, make_github_owner, make_github_repo


class TestGitHubOwner:
    """Tests for GitHubOwner schema."""

    def test_user(self):
        owner = GitHubOwner(**make_github_owner("alice", "User"))
        assert owner.login == "alice"
        assert not owner.is_organization

    def test_organization(self):
        assert GitHubOwner(login="acme", type="Organization").is_organization
        assert GitHubOwner(login="corp", type="Enterprise").is_organization


class TestGitHubRepository:
    """Tests for GitHubRepository schema."""

    def test_listed_fork(self):
        """Listed repositories carry no parent."""
        repo = GitHubRepository(**make_github_repo("project"))

        assert repo.fork is True
        assert repo.parent is None
        assert repo.owner_login == "alice"
        assert repo.display_name == "alice/project"

    def test_nested_parent(self):
        parent = make_github_repo("project", owner="upstream", fork=False)
        repo = GitHubRepository(**make_github_repo("project", parent=parent))

        assert repo.parent is not None
        assert repo.parent.display_name == "upstream/project"
        assert repo.parent.fork is False

    def test_missing_owner(self):
        repo = GitHubRepository(**make_github_repo("project", owner=None))

        assert repo.owner_login is None
        assert repo.display_name == "project"


class TestComparison:
    """Tests for comparison schemas."""

    def test_github_comparison_parse(self):
        comparison = GitHubComparison(**make_github_comparison(ahead_by=2, behind_by=7))

        assert comparison.ahead_by == 2
        assert comparison.behind_by == 7
        assert comparison.status == "diverged"

    def test_comparison_result_divergence(self):
        assert not ComparisonResult.ahead("main", 0).diverged
        assert ComparisonResult.ahead("main", 1).diverged
        assert ComparisonResult.missing("main").diverged


class TestOAuthSchemas:
    """Tests for device flow schemas."""

    def test_device_code_default_interval(self):
        code = DeviceCode(
            device_code="d",
            user_code="ABCD-1234",
            verification_uri="https://github.com/login/device",
            expires_in=900,
        )
        assert code.interval == 5

    def test_token_response_error(self):
        response = TokenResponse(error="authorization_pending")
        assert response.access_token is None
        assert response.error == "authorization_pending"
