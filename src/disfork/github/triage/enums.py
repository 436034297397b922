"""Enums for fork triage."""

from enum import Enum


class ClassificationReason(str, Enum):
    """Why a fork was classified the way it was."""

    NO_BRANCHES = "no_branches"
    """Fork has no branches at all. Useless."""

    NO_PARENT = "no_parent"
    """Upstream is gone or inaccessible. Useless."""

    IN_SYNC_WITH_UPSTREAM = "in_sync_with_upstream"
    """Every branch exists upstream and is 0 commits ahead. Useless."""

    TOO_MANY_BRANCHES = "too_many_branches"
    """Branch count exceeds max_branches; analysis skipped. Kept."""

    AHEAD_OF_UPSTREAM = "ahead_of_upstream"
    """At least one branch has commits upstream lacks. Kept."""

    MISSING_UPSTREAM_BRANCH = "missing_upstream_branch"
    """At least one branch does not exist upstream. Kept."""


class OutputFormat(str, Enum):
    """Output format for CLI commands."""

    TEXT = "text"
    """Human-readable text output."""

    JSON = "json"
    """Machine-readable JSON output."""
