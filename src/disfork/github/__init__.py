"""GitHub API client module.

This module provides:
- GitHubClient: Async GitHub API client behind a shared admission gate
- Device flow: DeviceAuthorizationPoller, DeviceFlowState
- Admission and progress: AdmissionGate, ProgressTracker, first_match
- Fork triage: ForkClassifier, ForkBatchCoordinator, ForkDeletionService
"""

from .client import GitHubClient
from .device_flow import DeviceAuthorizationPoller, DeviceFlowErrorCode, DeviceFlowState
from .exceptions import (
    DeviceFlowDeniedError,
    DeviceFlowError,
    DeviceFlowExpiredError,
    DeviceFlowTimeoutError,
    GitHubAuthenticationError,
    GitHubClientError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    GitHubRetryableError,
    RepositoryOwnerMissingError,
)
from .pacing import AdmissionGate, ProgressTracker, ProgressUpdate, first_match
from .triage import (
    BatchAnalysisResult,
    ClassificationReason,
    DeletionResult,
    ForkBatchCoordinator,
    ForkClassifier,
    ForkDeletionService,
    ForkFailure,
    ForkInfo,
    OutputFormat,
    default_selection,
    resolve_selection,
)

__all__ = [
    # Client
    "GitHubClient",
    # Device flow
    "DeviceAuthorizationPoller",
    "DeviceFlowErrorCode",
    "DeviceFlowState",
    # Exceptions
    "DeviceFlowDeniedError",
    "DeviceFlowError",
    "DeviceFlowExpiredError",
    "DeviceFlowTimeoutError",
    "GitHubAuthenticationError",
    "GitHubClientError",
    "GitHubNotFoundError",
    "GitHubRateLimitError",
    "GitHubRetryableError",
    "RepositoryOwnerMissingError",
    # Admission and progress
    "AdmissionGate",
    "ProgressTracker",
    "ProgressUpdate",
    "first_match",
    # Fork triage
    "BatchAnalysisResult",
    "ClassificationReason",
    "DeletionResult",
    "ForkBatchCoordinator",
    "ForkClassifier",
    "ForkDeletionService",
    "ForkFailure",
    "ForkInfo",
    "OutputFormat",
    "default_selection",
    "resolve_selection",
]
