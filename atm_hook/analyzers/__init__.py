"""
Analyzers for commit diffs.

This module provides parsers for:
- Git unified diffs
- Language detection
"""

from atm_hook.analyzers.diff import (
    detect_language,
    detect_primary_language,
    parse_commit_patch,
    summarize,
)

__all__ = [
    "parse_commit_patch",
    "summarize",
    "detect_language",
    "detect_primary_language",
]
