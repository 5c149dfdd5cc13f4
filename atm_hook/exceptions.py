"""
Errors raised by the git service and the analysis client.
"""

from __future__ import annotations

from typing import Any


class GitServiceError(Exception):
    """Base class for every error the CLI treats as fatal."""


class RepositoryNotFoundError(GitServiceError):
    """No git repository could be discovered."""


class CommitNotFoundError(GitServiceError):
    """The requested commit does not exist or the repository has no commits."""


class GitCommandError(GitServiceError):
    """A git invocation exited with a non-zero status."""

    def __init__(self, command: list[str], returncode: int, stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr.strip()
        message = f"'{' '.join(command)}' exited with status {returncode}"
        if self.stderr:
            message = f"{message}: {self.stderr}"
        super().__init__(message)


class AnalysisAPIError(GitServiceError):
    """Error from the analysis backend."""

    def __init__(self, status_code: int, message: str, details: dict[str, Any] | None = None):
        self.status_code = status_code
        self.message = message
        self.details = details or {}
        super().__init__(f"Analysis API Error ({status_code}): {message}")


class HookSubmissionError(GitServiceError):
    """The hook could not submit the commit to the analysis backend."""
