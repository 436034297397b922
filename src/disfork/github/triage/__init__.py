"""Fork triage: classification, batch analysis and deletion."""

from .classifier import ForkClassifier
from .coordinator import ForkBatchCoordinator
from .deletion import ForkDeletionService, default_selection, resolve_selection
from .enums import ClassificationReason, OutputFormat
from .results import BatchAnalysisResult, DeletionResult, ForkFailure, ForkInfo

__all__ = [
    # Services
    "ForkBatchCoordinator",
    "ForkClassifier",
    "ForkDeletionService",
    # Selection
    "default_selection",
    "resolve_selection",
    # Enums
    "ClassificationReason",
    "OutputFormat",
    # Results
    "BatchAnalysisResult",
    "DeletionResult",
    "ForkFailure",
    "ForkInfo",
]
