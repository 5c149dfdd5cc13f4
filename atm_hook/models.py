"""
Data models for atm-git-hook.

These models describe the changes introduced by a single commit.
Designed to be serializable to the analysis API format.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class Language(str, Enum):
    """Languages recognised from file extensions."""

    PYTHON = "python"
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    GO = "go"
    RUST = "rust"
    JAVA = "java"
    C = "c"
    CPP = "cpp"
    CSHARP = "csharp"
    RUBY = "ruby"
    PHP = "php"
    SWIFT = "swift"
    KOTLIN = "kotlin"
    SCALA = "scala"
    SHELL = "shell"
    SQL = "sql"
    HTML = "html"
    CSS = "css"
    YAML = "yaml"
    JSON = "json"
    TERRAFORM = "terraform"
    DOCKERFILE = "dockerfile"
    OTHER = "other"


class ChangeType(str, Enum):
    """How a file was touched by a commit."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"


@dataclass
class DiffStats:
    """Git diff statistics."""

    additions: int = 0
    deletions: int = 0
    files_changed: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "additions": self.additions,
            "deletions": self.deletions,
            "files": self.files_changed,
        }


@dataclass
class FileChange:
    """A single file within a commit diff."""

    path: str
    change_type: ChangeType = ChangeType.MODIFIED
    old_path: Optional[str] = None  # set for renames
    additions: int = 0
    deletions: int = 0
    language: Language = Language.OTHER
    binary: bool = False
    patch: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "old_path": self.old_path,
            "change_type": self.change_type.value,
            "additions": self.additions,
            "deletions": self.deletions,
            "language": self.language.value,
            "binary": self.binary,
            "patch": self.patch,
        }


@dataclass
class CommitDiff:
    """
    The changes introduced by one commit.

    This is the value the git service returns and the hook submits.
    """

    hash: str
    author: str
    author_email: str
    timestamp: str  # ISO-8601, as reported by git
    message: str
    parent_hashes: list[str] = field(default_factory=list)
    files: list[FileChange] = field(default_factory=list)
    stats: DiffStats = field(default_factory=DiffStats)
    primary_language: Language = Language.OTHER
    raw_diff: str = ""

    @property
    def short_hash(self) -> str:
        return self.hash[:7]

    @property
    def is_root(self) -> bool:
        return not self.parent_hashes

    @property
    def languages(self) -> list[Language]:
        """Distinct languages touched, in order of first appearance."""
        seen: list[Language] = []
        for f in self.files:
            if f.language != Language.OTHER and f.language not in seen:
                seen.append(f.language)
        return seen

    def to_dict(self) -> dict[str, Any]:
        """Convert to the analysis API payload."""
        return {
            "hash": self.hash,
            "short_hash": self.short_hash,
            "parents": list(self.parent_hashes),
            "author": self.author,
            "author_email": self.author_email,
            "timestamp": self.timestamp,
            "message": self.message,
            "stats": self.stats.to_dict(),
            "primary_language": self.primary_language.value,
            "languages": [lang.value for lang in self.languages],
            "files": [f.to_dict() for f in self.files],
            "diff": self.raw_diff,
            "source": "atm-git-hook",
        }
