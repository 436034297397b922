"""GitHub client exceptions."""

from datetime import datetime


class GitHubClientError(Exception):
    """Base exception for GitHub client errors."""

    pass


class GitHubAuthenticationError(GitHubClientError):
    """Raised when authentication fails (401) or no token can be obtained."""

    pass


class GitHubRetryableError(GitHubClientError):
    """Base class for transient errors.

    Nothing in the analysis path retries these; they are kept distinct so
    callers can tell a throttled run from a broken one.
    """

    pass


class GitHubRateLimitError(GitHubRetryableError):
    """Raised when rate limit is exceeded (403 with rate limit headers)."""

    def __init__(self, message: str, reset_at: datetime | None = None) -> None:
        super().__init__(message)
        self.reset_at = reset_at


class GitHubNotFoundError(GitHubClientError):
    """Raised when a resource is not found (404)."""

    pass


class RepositoryOwnerMissingError(GitHubClientError):
    """Raised when a repository or its parent has no owner metadata.

    A comparison ref cannot be formed without the owner login.
    """

    pass


# -----------------------------------------------------------------------------
# Device Authorization Flow
# -----------------------------------------------------------------------------
class DeviceFlowError(GitHubAuthenticationError):
    """Raised when the device authorization flow fails."""

    pass


class DeviceFlowExpiredError(DeviceFlowError):
    """Raised when the device code expired (``expired_token``)."""

    pass


class DeviceFlowTimeoutError(DeviceFlowExpiredError):
    """Raised when ``expires_in`` elapsed locally before a token was issued."""

    def __init__(self, expires_in: int) -> None:
        super().__init__(f"Authorization timed out after {expires_in} seconds")
        self.expires_in = expires_in


class DeviceFlowDeniedError(DeviceFlowError):
    """Raised when the user denied the authorization request."""

    pass
