"""Pydantic schemas for DisFork.

This module provides parsing models for GitHub API and OAuth responses.
"""

from .github_api import (
    ComparisonResult,
    GitHubBranch,
    GitHubComparison,
    GitHubOwner,
    GitHubRepository,
)
from .oauth import DeviceCode, TokenResponse

__all__ = [
    # GitHub API
    "ComparisonResult",
    "GitHubBranch",
    "GitHubComparison",
    "GitHubOwner",
    "GitHubRepository",
    # OAuth device flow
    "DeviceCode",
    "TokenResponse",
]
