"""Async GitHub API client wrapper using githubkit.

This module provides a typed async interface to the GitHub REST API for
fork triage: listing repositories and branches, comparing branches with
upstream and deleting repositories. Every request passes through a shared
AdmissionGate, and list endpoints are walked page by page with one permit
per page request.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from functools import partial
from typing import Any

from githubkit import GitHub
from githubkit.exception import RequestFailed

from disfork.config import get_settings
from disfork.logging import get_logger
from disfork.schemas.github_api import (
    ComparisonResult,
    GitHubBranch,
    GitHubComparison,
    GitHubOwner,
    GitHubRepository,
)

from .exceptions import (
    GitHubAuthenticationError,
    GitHubClientError,
    GitHubNotFoundError,
    GitHubRateLimitError,
)
from .pacing.gate import AdmissionGate

logger = get_logger(__name__)

FIRST_PAGE = 1


def _has_next_page(response: Any) -> bool:
    """Check the Link header for a rel="next" entry."""
    headers = getattr(response, "headers", None)
    if not headers:
        return False
    link = headers.get("link") or headers.get("Link")
    if not link:
        return False
    return any('rel="next"' in part for part in link.split(","))


def _dump(data: Any) -> Any:
    """Convert a githubkit model to plain data, dropping unset fields."""
    if hasattr(data, "model_dump"):
        return data.model_dump(exclude_unset=True)
    return data


class GitHubClient:
    """Async GitHub API client for fork triage.

    Usage:
        gate = AdmissionGate(capacity=6)
        async with GitHubClient(token, gate=gate) as client:
            repos = await client.list_repositories("octocat")
            branches = await client.list_branches("octocat", "hello-world")

    The gate may be shared with other clients; the in-flight bound then
    holds across all of them.
    """

    def __init__(
        self,
        token: str | None = None,
        gate: AdmissionGate | None = None,
        per_page: int | None = None,
    ) -> None:
        """Initialize the GitHub client.

        Args:
            token: GitHub token. If not provided, uses GITHUB_TOKEN from settings.
            gate: Admission gate bounding in-flight requests. Defaults to a
                  new gate sized by ``analysis.parallel``.
            per_page: Page size for list endpoints (max 100).

        Raises:
            GitHubAuthenticationError: If no token is available.
        """
        settings = get_settings()
        self._token = token or settings.github_token
        if not self._token:
            raise GitHubAuthenticationError(
                "GitHub token required. Set GITHUB_TOKEN or use the device flow."
            )
        self._client: GitHub[Any] | None = None
        self._gate = gate if gate is not None else AdmissionGate(settings.analysis.parallel)
        self._per_page = per_page or settings.analysis.per_page

    @property
    def _github(self) -> GitHub[Any]:
        """Get or create the githubkit client instance."""
        if self._client is None:
            self._client = GitHub(self._token)
        return self._client

    @property
    def gate(self) -> AdmissionGate:
        """Admission gate shared by every request of this client."""
        return self._gate

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            self._gate.log_stats()
            self._client = None

    async def __aenter__(self) -> GitHubClient:
        """Async context manager entry."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Async context manager exit."""
        await self.close()

    # -------------------------------------------------------------------------
    # Request Gateway
    # -------------------------------------------------------------------------
    async def _call(self, coro_factory: Callable[[], Awaitable[Any]]) -> Any:
        """Issue one request through the gate, normalizing errors."""
        try:
            return await self._gate.call(coro_factory)
        except RequestFailed as e:
            raise self._handle_error(e) from e

    async def list_paged(self, method: Callable[..., Awaitable[Any]], **params: Any) -> list[Any]:
        """Request successive pages until the response has no next page.

        A gate permit is acquired per page request and released before the
        next page is requested, so concurrent walks interleave fairly.

        Args:
            method: githubkit list method (e.g. ``rest.repos.async_list_branches``)
            **params: Endpoint parameters (``per_page``/``page`` are set here)

        Returns:
            All items across all pages

        Raises:
            GitHubClientError: If any page request fails (collected pages are discarded)
        """
        items: list[Any] = []
        page = FIRST_PAGE
        while True:
            resp = await self._call(partial(method, **params, per_page=self._per_page, page=page))
            items.extend(resp.parsed_data)
            if not _has_next_page(resp):
                break
            page += 1

        logger.debug("Fetched {} items in {} page(s)", len(items), page)
        return items

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------
    async def get_authenticated_login(self) -> str:
        """Get the login of the user the token belongs to."""
        resp = await self._call(self._github.rest.users.async_get_authenticated)
        return str(resp.parsed_data.login)

    async def get_account(self, login: str) -> GitHubOwner:
        """Get a user or organization profile.

        Raises:
            GitHubNotFoundError: If the account doesn't exist
        """
        resp = await self._call(
            partial(self._github.rest.users.async_get_by_username, username=login)
        )
        return GitHubOwner.model_validate(_dump(resp.parsed_data))

    # -------------------------------------------------------------------------
    # Repositories
    # -------------------------------------------------------------------------
    async def list_repositories(self, login: str) -> list[GitHubRepository]:
        """List all repositories owned by a user or organization.

        The account type decides between the user and organization endpoints.

        Args:
            login: User or organization login

        Returns:
            List of GitHubRepository objects (``parent`` is never set here)
        """
        account = await self.get_account(login)
        if account.is_organization:
            items = await self.list_paged(self._github.rest.repos.async_list_for_org, org=login)
        else:
            items = await self.list_paged(
                self._github.rest.repos.async_list_for_user, username=login
            )
        repos = [GitHubRepository.model_validate(_dump(item)) for item in items]
        logger.info("Listed {} repositories for {} ({})", len(repos), login, account.type)
        return repos

    async def get_repository(self, owner: str, name: str) -> GitHubRepository:
        """Get full details for a single repository, including ``parent``.

        Raises:
            GitHubNotFoundError: If the repository doesn't exist
        """
        resp = await self._call(partial(self._github.rest.repos.async_get, owner=owner, repo=name))
        return GitHubRepository.model_validate(_dump(resp.parsed_data))

    async def list_branches(self, owner: str, name: str) -> list[GitHubBranch]:
        """List every branch of a repository."""
        items = await self.list_paged(
            self._github.rest.repos.async_list_branches, owner=owner, repo=name
        )
        return [GitHubBranch.model_validate(_dump(item)) for item in items]

    async def compare_branches(
        self,
        owner: str,
        repo: str,
        base: str,
        head: str,
        *,
        branch: str | None = None,
    ) -> ComparisonResult:
        """Compare ``base...head`` in ``owner/repo``.

        Args:
            owner: Owner of the repository holding ``base``
            repo: Name of the repository holding ``base``
            base: Base ref (branch name in ``owner/repo``)
            head: Head ref, ``fork_owner:branch`` for cross-fork comparisons
            branch: Branch name recorded in the result (defaults to ``base``)

        Returns:
            ComparisonResult with the ahead-by count, or the missing-upstream
            outcome when either ref does not resolve (404)
        """
        branch_name = branch or base
        try:
            resp = await self._call(
                partial(
                    self._github.rest.repos.async_compare_commits,
                    owner=owner,
                    repo=repo,
                    basehead=f"{base}...{head}",
                )
            )
        except GitHubNotFoundError:
            logger.debug("Branch {} not found in {}/{}", branch_name, owner, repo)
            return ComparisonResult.missing(branch_name)

        comparison = GitHubComparison.model_validate(_dump(resp.parsed_data))
        return ComparisonResult.ahead(branch_name, comparison.ahead_by)

    async def delete_repository(self, owner: str, name: str) -> bool:
        """Delete a repository.

        Deleting a repository that is already gone is not an error.

        Returns:
            True if the repository was deleted, False if it no longer existed
        """
        try:
            await self._call(partial(self._github.rest.repos.async_delete, owner=owner, repo=name))
        except GitHubNotFoundError:
            logger.info("Repository {}/{} already deleted", owner, name)
            return False
        logger.info("Deleted repository {}/{}", owner, name)
        return True

    # -------------------------------------------------------------------------
    # Error Handling
    # -------------------------------------------------------------------------
    def _handle_error(self, error: RequestFailed) -> GitHubClientError:
        """Convert githubkit exceptions to our custom exceptions."""
        status = error.response.status_code

        if status == 401:
            return GitHubAuthenticationError("Invalid GitHub token")
        elif status == 403:
            headers = error.response.headers
            if "x-ratelimit-remaining" in headers:
                remaining = int(headers.get("x-ratelimit-remaining", "0"))
                if remaining == 0:
                    reset_ts = int(headers.get("x-ratelimit-reset", "0"))
                    reset_at = datetime.fromtimestamp(reset_ts, tz=UTC) if reset_ts else None
                    return GitHubRateLimitError(
                        "GitHub rate limit exceeded",
                        reset_at=reset_at,
                    )
            return GitHubClientError(f"Access forbidden: {error}")
        elif status == 404:
            return GitHubNotFoundError(str(error))
        else:
            return GitHubClientError(f"GitHub API error ({status}): {error}")
