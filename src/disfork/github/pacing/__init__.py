"""Request admission and progress for GitHub API work.

Components:
- AdmissionGate: Counting semaphore shared by every remote call
- first_match: Fan-out that keeps the first satisfying result and cancels the rest
- ProgressTracker: Observable progress reporting
"""

from .fanout import first_match
from .gate import AdmissionGate
from .progress import ProgressCallback, ProgressState, ProgressTracker, ProgressUpdate

__all__ = [
    # Admission
    "AdmissionGate",
    # Fan-out
    "first_match",
    # Progress tracking
    "ProgressCallback",
    "ProgressState",
    "ProgressTracker",
    "ProgressUpdate",
]
