"""Pydantic schemas for parsing GitHub API responses.

These schemas map directly to the GitHub REST API response structure.
See: https://docs.github.com/en/rest/repos
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class GitHubOwner(BaseModel):
    """Owner (user or organization) object from API responses."""

    login: str = Field(description="GitHub username or organization login")
    type: str = Field(default="User", description="Account type (User, Organization)")

    @property
    def is_organization(self) -> bool:
        """Whether repositories must be listed through the org endpoint."""
        return self.type.lower() in ("organization", "enterprise")


class GitHubRepository(BaseModel):
    """GitHub repository object from API.

    Maps to: GET /repos/{owner}/{repo} (full repository, with ``parent``)
    and the list endpoints (``parent`` is never populated there).
    """

    name: str = Field(description="Repository name")
    full_name: str | None = Field(default=None, description="owner/name")
    fork: bool = Field(default=False, description="Whether this repository is a fork")
    owner: GitHubOwner | None = Field(default=None, description="Repository owner")
    parent: GitHubRepository | None = Field(
        default=None,
        description="Upstream repository (forks only, when resolvable)",
    )

    @property
    def owner_login(self) -> str | None:
        """Owner login, or None when the API omitted owner metadata."""
        return self.owner.login if self.owner is not None else None

    @property
    def display_name(self) -> str:
        """Full name for display, falling back to the bare name."""
        return self.full_name or self.name


class GitHubBranch(BaseModel):
    """GitHub branch object from the branches endpoint."""

    name: str = Field(description="Branch name")


class GitHubComparison(BaseModel):
    """Result of comparing two commits.

    Maps to: GET /repos/{owner}/{repo}/compare/{base}...{head}
    """

    ahead_by: int = Field(ge=0, description="Commits on head that are not on base")
    behind_by: int = Field(default=0, ge=0, description="Commits on base that are not on head")
    status: str | None = Field(
        default=None,
        description="diverged, ahead, behind or identical",
    )


class ComparisonResult(BaseModel):
    """Outcome of comparing a fork branch with the same branch upstream.

    Either an ahead-by count, or the explicit "branch absent upstream"
    outcome. Transient: used only to decide divergence.
    """

    model_config = ConfigDict(frozen=True)

    branch: str = Field(description="Branch name compared on both sides")
    ahead_by: int = Field(default=0, ge=0, description="Fork commits not on upstream")
    missing_upstream: bool = Field(
        default=False,
        description="True when the ref does not resolve upstream",
    )

    @property
    def diverged(self) -> bool:
        """Whether this branch proves the fork carries its own commits."""
        return self.missing_upstream or self.ahead_by > 0

    @classmethod
    def ahead(cls, branch: str, ahead_by: int) -> ComparisonResult:
        """Create a result for a branch that exists upstream."""
        return cls(branch=branch, ahead_by=ahead_by)

    @classmethod
    def missing(cls, branch: str) -> ComparisonResult:
        """Create a result for a branch that does not exist upstream."""
        return cls(branch=branch, missing_upstream=True)


GitHubRepository.model_rebuild()
