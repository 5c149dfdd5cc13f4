"""
Git diff parsing.

Turns the unified diff printed by ``git show`` into structured data:
- Files changed, with their change type
- Additions/deletions per file
- Language detection
"""

from __future__ import annotations

import re
from typing import Optional

from atm_hook.models import ChangeType, DiffStats, FileChange, Language


# File extension to language mapping
EXTENSION_LANGUAGE_MAP: dict[str, Language] = {
    ".py": Language.PYTHON,
    ".pyi": Language.PYTHON,
    ".js": Language.JAVASCRIPT,
    ".mjs": Language.JAVASCRIPT,
    ".cjs": Language.JAVASCRIPT,
    ".jsx": Language.JAVASCRIPT,
    ".ts": Language.TYPESCRIPT,
    ".tsx": Language.TYPESCRIPT,
    ".go": Language.GO,
    ".rs": Language.RUST,
    ".java": Language.JAVA,
    ".c": Language.C,
    ".h": Language.C,
    ".cpp": Language.CPP,
    ".cc": Language.CPP,
    ".cxx": Language.CPP,
    ".hpp": Language.CPP,
    ".cs": Language.CSHARP,
    ".rb": Language.RUBY,
    ".php": Language.PHP,
    ".swift": Language.SWIFT,
    ".kt": Language.KOTLIN,
    ".kts": Language.KOTLIN,
    ".scala": Language.SCALA,
    ".sh": Language.SHELL,
    ".bash": Language.SHELL,
    ".zsh": Language.SHELL,
    ".sql": Language.SQL,
    ".html": Language.HTML,
    ".htm": Language.HTML,
    ".css": Language.CSS,
    ".scss": Language.CSS,
    ".sass": Language.CSS,
    ".less": Language.CSS,
    ".yml": Language.YAML,
    ".yaml": Language.YAML,
    ".json": Language.JSON,
    ".tf": Language.TERRAFORM,
    ".tfvars": Language.TERRAFORM,
}

# Files recognised by name rather than extension
FILENAME_LANGUAGE_MAP: dict[str, Language] = {
    "dockerfile": Language.DOCKERFILE,
    "containerfile": Language.DOCKERFILE,
}

# Config and data formats count less than code when picking a primary language
LOW_PRIORITY_LANGUAGES = {Language.YAML, Language.JSON, Language.HTML, Language.CSS}

DIFF_HEADER_PATTERN = re.compile(r"^diff --git (\"?a/.+?\"?) (\"?b/.+\"?)$")
QUOTED_ESCAPE_PATTERN = re.compile(rb"\\([0-7]{3}|.)")

C_ESCAPES: dict[bytes, bytes] = {
    b"a": b"\a",
    b"b": b"\b",
    b"t": b"\t",
    b"n": b"\n",
    b"v": b"\v",
    b"f": b"\f",
    b"r": b"\r",
}


def detect_language(file_path: str) -> Language:
    """Detect language from a file path."""
    name = file_path.rsplit("/", 1)[-1].lower()

    if name in FILENAME_LANGUAGE_MAP:
        return FILENAME_LANGUAGE_MAP[name]
    if name.startswith("dockerfile."):
        return Language.DOCKERFILE

    if "." not in name:
        return Language.OTHER

    ext = "." + name.rsplit(".", 1)[-1]
    return EXTENSION_LANGUAGE_MAP.get(ext, Language.OTHER)


def detect_primary_language(files: list[str]) -> Language:
    """
    Detect the primary language from a list of files.

    Code files weigh twice as much as config and markup files.
    """
    language_counts: dict[Language, int] = {}

    for file_path in files:
        lang = detect_language(file_path)
        if lang == Language.OTHER:
            continue
        weight = 1 if lang in LOW_PRIORITY_LANGUAGES else 2
        language_counts[lang] = language_counts.get(lang, 0) + weight

    if not language_counts:
        return Language.OTHER

    return max(language_counts, key=language_counts.get)  # type: ignore


def _unquote(path: str) -> str:
    """Undo git's C-style quoting of paths with unusual characters."""
    if not (len(path) >= 2 and path.startswith('"') and path.endswith('"')):
        return path

    def replace(match: "re.Match[bytes]") -> bytes:
        escape = match.group(1)
        if len(escape) == 3:
            return bytes([int(escape, 8)])
        return C_ESCAPES.get(escape, escape)

    raw = QUOTED_ESCAPE_PATTERN.sub(replace, path[1:-1].encode("utf-8"))
    return raw.decode("utf-8", errors="replace")


def _strip_prefix(path: str) -> str:
    """Remove git's quoting and the a/ or b/ prefix from a header path."""
    path = _unquote(path)
    if path.startswith(("a/", "b/")):
        path = path[2:]
    return path


def _split_blocks(diff: str) -> list[list[str]]:
    blocks: list[list[str]] = []
    for line in diff.splitlines():
        if line.startswith("diff --git "):
            blocks.append([line])
        elif blocks:
            blocks[-1].append(line)
    return blocks


def _parse_block(lines: list[str]) -> FileChange:
    header = DIFF_HEADER_PATTERN.match(lines[0])
    old_path: Optional[str] = None
    new_path = ""
    if header:
        old_path = _strip_prefix(header.group(1))
        new_path = _strip_prefix(header.group(2))

    change_type = ChangeType.MODIFIED
    binary = False
    additions = 0
    deletions = 0
    in_hunk = False

    for line in lines[1:]:
        if in_hunk:
            if line.startswith("@@"):
                continue
            if line.startswith("+"):
                additions += 1
            elif line.startswith("-"):
                deletions += 1
            continue

        if line.startswith("@@"):
            in_hunk = True
        elif line.startswith("new file mode"):
            change_type = ChangeType.ADDED
        elif line.startswith("deleted file mode"):
            change_type = ChangeType.DELETED
        elif line.startswith("rename from "):
            change_type = ChangeType.RENAMED
            old_path = _unquote(line[len("rename from "):])
        elif line.startswith("rename to "):
            new_path = _unquote(line[len("rename to "):])
        elif line.startswith("--- ") and line[4:] != "/dev/null":
            old_path = _strip_prefix(line[4:])
        elif line.startswith("+++ ") and line[4:] != "/dev/null":
            new_path = _strip_prefix(line[4:])
        elif line.startswith("Binary files ") or line == "GIT binary patch":
            binary = True

    # Deleted files have no "+++ b/" line; fall back to the old path
    path = new_path or old_path or ""

    return FileChange(
        path=path,
        change_type=change_type,
        old_path=old_path if change_type == ChangeType.RENAMED else None,
        additions=additions,
        deletions=deletions,
        language=detect_language(path),
        binary=binary,
        patch="\n".join(lines),
    )


def parse_commit_patch(diff: str) -> list[FileChange]:
    """
    Parse the unified diff of a commit into per-file changes.

    Args:
        diff: Unified diff string (from ``git show --format=``)

    Returns:
        One FileChange per ``diff --git`` block, in diff order
    """
    return [_parse_block(block) for block in _split_blocks(diff)]


def summarize(files: list[FileChange]) -> DiffStats:
    """Total the additions and deletions of a list of file changes."""
    return DiffStats(
        additions=sum(f.additions for f in files),
        deletions=sum(f.deletions for f in files),
        files_changed=len(files),
    )

