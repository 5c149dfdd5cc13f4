"""
atm-git-hook: commit analysis hook for the adaptive threat modeler.

This package finds a git repository, extracts the diff introduced by a
commit and reports it, either on demand or from a git hook.
"""

__version__ = "0.1.0"

from atm_hook.models import ChangeType, CommitDiff, DiffStats, FileChange, Language
from atm_hook.exceptions import (
    AnalysisAPIError,
    CommitNotFoundError,
    GitCommandError,
    GitServiceError,
    HookSubmissionError,
    RepositoryNotFoundError,
)
from atm_hook.config import HookConfig
from atm_hook.client import AnalysisClient, SubmitResult
from atm_hook.services import GitService, get_current_repo_path

__all__ = [
    # Version
    "__version__",
    # Models
    "ChangeType",
    "CommitDiff",
    "DiffStats",
    "FileChange",
    "Language",
    # Errors
    "GitServiceError",
    "RepositoryNotFoundError",
    "CommitNotFoundError",
    "GitCommandError",
    "AnalysisAPIError",
    "HookSubmissionError",
    # Core
    "HookConfig",
    "AnalysisClient",
    "SubmitResult",
    "GitService",
    "get_current_repo_path",
]
