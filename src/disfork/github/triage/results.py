"""Result objects for fork triage.

Structured results provide consistent interfaces for selection,
deletion, and CLI output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from disfork.schemas.github_api import GitHubRepository

from .enums import ClassificationReason


@dataclass(frozen=True)
class ForkInfo:
    """Classification of a single fork.

    Built exactly once by the classifier and never mutated.
    """

    repo: GitHubRepository
    """Fresh repository snapshot the verdict was computed from."""

    is_useless: bool
    """True if the fork carries no commits of its own."""

    reason: ClassificationReason
    """Which rule decided the verdict."""

    @property
    def full_name(self) -> str:
        """owner/name of the fork."""
        return self.repo.display_name

    @property
    def owner_login(self) -> str | None:
        """Owner login, or None when the API omitted it."""
        return self.repo.owner_login

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        parent = self.repo.parent
        return {
            "full_name": self.full_name,
            "is_useless": self.is_useless,
            "reason": self.reason.value,
            "parent": parent.display_name if parent is not None else None,
        }

    @classmethod
    def useless(cls, repo: GitHubRepository, reason: ClassificationReason) -> ForkInfo:
        """Create a useless verdict."""
        return cls(repo=repo, is_useless=True, reason=reason)

    @classmethod
    def kept(cls, repo: GitHubRepository, reason: ClassificationReason) -> ForkInfo:
        """Create a worth-keeping verdict."""
        return cls(repo=repo, is_useless=False, reason=reason)


@dataclass(frozen=True)
class ForkFailure:
    """A fork whose classification could not be completed."""

    repo: GitHubRepository
    """Repository as listed."""

    error: Exception
    """Exception that aborted the classification."""

    @property
    def full_name(self) -> str:
        """owner/name of the fork."""
        return self.repo.display_name

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "full_name": self.full_name,
            "error": str(self.error),
            "error_type": type(self.error).__name__,
        }


@dataclass
class BatchAnalysisResult:
    """Result of analyzing every fork of an account."""

    forks: list[ForkInfo] = field(default_factory=list)
    """Classified forks."""

    failures: list[ForkFailure] = field(default_factory=list)
    """Forks whose analysis failed."""

    duration_seconds: float = 0.0
    """Total time taken for the batch."""

    @property
    def total(self) -> int:
        """Number of candidate forks processed."""
        return len(self.forks) + len(self.failures)

    @property
    def useless(self) -> list[ForkInfo]:
        """Forks classified as useless."""
        return [f for f in self.forks if f.is_useless]

    @property
    def kept(self) -> list[ForkInfo]:
        """Forks worth keeping."""
        return [f for f in self.forks if not f.is_useless]

    def sort(self) -> None:
        """Order forks and failures by full name for stable indices."""
        self.forks.sort(key=lambda f: f.full_name.lower())
        self.failures.sort(key=lambda f: f.full_name.lower())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "summary": {
                "total": self.total,
                "useless": len(self.useless),
                "kept": len(self.kept),
                "failed": len(self.failures),
                "duration_seconds": round(self.duration_seconds, 2),
            },
            "forks": [f.to_dict() for f in self.forks],
            "failures": [f.to_dict() for f in self.failures],
        }


@dataclass
class DeletionResult:
    """Result of deleting the selected forks."""

    deleted: list[str] = field(default_factory=list)
    """Repositories deleted by this run."""

    already_gone: list[str] = field(default_factory=list)
    """Repositories that no longer existed."""

    failed: list[tuple[str, str]] = field(default_factory=list)
    """(full_name, error message) for each failed deletion."""

    dry_run: bool = False
    """True if no delete call was made."""

    skipped: list[str] = field(default_factory=list)
    """Repositories selected but not deleted because of dry-run."""

    @property
    def all_succeeded(self) -> bool:
        """Whether every selected repository is gone (or would be)."""
        return len(self.failed) == 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "dry_run": self.dry_run,
            "deleted": self.deleted,
            "already_gone": self.already_gone,
            "skipped": self.skipped,
            "failed": [{"full_name": name, "error": error} for name, error in self.failed],
        }
