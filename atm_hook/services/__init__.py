"""
Services that talk to git.
"""

from atm_hook.services.git import GitService, get_current_repo_path

__all__ = [
    "GitService",
    "get_current_repo_path",
]
