"""
Git service.

Provides repository discovery, commit diff extraction, console reporting
and the commit hook handler. All git access goes through the ``git``
executable.
"""

from __future__ import annotations

import logging
import subprocess
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from atm_hook.analyzers.diff import detect_primary_language, parse_commit_patch, summarize
from atm_hook.client import AnalysisClient
from atm_hook.config import HookConfig
from atm_hook.exceptions import (
    CommitNotFoundError,
    GitCommandError,
    HookSubmissionError,
    RepositoryNotFoundError,
)
from atm_hook.models import ChangeType, CommitDiff

logger = logging.getLogger(__name__)

# One field per line; the subject is last so it can't shift the others
COMMIT_FORMAT = "%H%n%P%n%an%n%ae%n%aI%n%s"

# Pin the patch format regardless of the user's diff configuration
DIFF_OPTIONS = (
    "--no-color",
    "--no-ext-diff",
    "--no-textconv",
    "--src-prefix=a/",
    "--dst-prefix=b/",
    "-M",
)

CHANGE_STYLES = {
    ChangeType.ADDED: ("A", "green"),
    ChangeType.MODIFIED: ("M", "yellow"),
    ChangeType.DELETED: ("D", "red"),
    ChangeType.RENAMED: ("R", "cyan"),
}


def get_current_repo_path() -> str:
    """
    Find the root of the git repository containing the working directory.

    Raises:
        RepositoryNotFoundError: if the working directory is not in a
            git work tree or git is not installed
    """
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            check=True,
        )
    except FileNotFoundError as e:
        raise RepositoryNotFoundError("git executable not found") from e
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or "").strip()
        raise RepositoryNotFoundError(stderr or "not a git repository") from e

    path = result.stdout.strip()
    if not path:
        raise RepositoryNotFoundError("not inside a git work tree")
    return path


class GitService:
    """
    Git operations bound to one repository.

    Usage:
        service = GitService("/path/to/repo")
        diff = service.get_latest_commit_diff()
        service.print_commit_diff(diff)
    """

    def __init__(
        self,
        repo_path: str,
        config: Optional[HookConfig] = None,
        console: Optional[Console] = None,
    ):
        self.repo_path = repo_path
        self.config = config or HookConfig()
        self.console = console or Console()

    def _run_git(self, *args: str) -> str:
        """Run a git command in the repository and return its stdout."""
        cmd = ["git", "-C", self.repo_path, *args]
        logger.debug("Running %s", " ".join(cmd))
        try:
            # Commits may add text in any encoding; never fail on undecodable bytes
            result = subprocess.run(
                cmd,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                check=True,
            )
        except FileNotFoundError as e:
            raise GitCommandError(cmd, 127, "git executable not found") from e
        except subprocess.CalledProcessError as e:
            stderr = e.stderr or ""
            if "not a git repository" in stderr or "cannot change to" in stderr:
                raise RepositoryNotFoundError(
                    f"{self.repo_path} is not a git repository"
                ) from e
            raise GitCommandError(cmd, e.returncode, stderr) from e
        return result.stdout

    def _resolve_commit(self, ref: str) -> str:
        if not ref.strip():
            raise CommitNotFoundError("empty commit identifier")
        try:
            return self._run_git("rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}").strip()
        except GitCommandError as e:
            if ref == "HEAD":
                raise CommitNotFoundError("repository has no commits") from e
            raise CommitNotFoundError(f"unknown commit: {ref}") from e

    def get_commit_diff(self, commit_hash: str) -> CommitDiff:
        """
        Get the changes introduced by a commit.

        Args:
            commit_hash: Any identifier git resolves to a commit
                (full or abbreviated hash, branch, tag, HEAD~1, ...)

        Returns:
            CommitDiff for that commit

        Raises:
            CommitNotFoundError: if the identifier does not name a commit
            GitCommandError: if git fails for another reason
        """
        sha = self._resolve_commit(commit_hash)

        info = self._run_git("log", "-1", f"--format={COMMIT_FORMAT}", sha)
        fields = info.rstrip("\n").split("\n", 5)
        while len(fields) < 6:
            fields.append("")
        full_hash, parents, author, email, timestamp, subject = fields

        parent_hashes = parents.split()
        if len(parent_hashes) > 1:
            # Merges are reported against their first parent, not as a combined diff
            raw_diff = self._run_git("diff", *DIFF_OPTIONS, parent_hashes[0], sha)
        else:
            raw_diff = self._run_git("show", "--format=", *DIFF_OPTIONS, sha)
        files = parse_commit_patch(raw_diff)

        diff = CommitDiff(
            hash=full_hash,
            author=author,
            author_email=email,
            timestamp=timestamp,
            message=subject,
            parent_hashes=parent_hashes,
            files=files,
            stats=summarize(files),
            primary_language=detect_primary_language([f.path for f in files]),
            raw_diff=raw_diff,
        )
        logger.debug(
            "Commit %s: %d files, +%d -%d",
            diff.short_hash,
            diff.stats.files_changed,
            diff.stats.additions,
            diff.stats.deletions,
        )
        return diff

    def get_latest_commit_diff(self) -> CommitDiff:
        """Get the changes introduced by HEAD."""
        return self.get_commit_diff("HEAD")

    def print_commit_diff(self, diff: CommitDiff) -> None:
        """Print a commit diff report to the console."""
        header = (
            f"[bold]Commit:[/bold] {diff.hash}\n"
            f"[bold]Author:[/bold] {escape(diff.author)} <{escape(diff.author_email)}>\n"
            f"[bold]Date:[/bold] {diff.timestamp}\n"
        )
        if diff.is_root:
            header += "[bold]Parents:[/bold] none (root commit)\n"
        elif len(diff.parent_hashes) > 1:
            header += f"[bold]Parents:[/bold] {', '.join(p[:7] for p in diff.parent_hashes)}\n"
        header += f"\n{escape(diff.message)}"

        self.console.print(Panel(header, title=f"Commit {diff.short_hash}", border_style="blue"))

        if not diff.files:
            self.console.print("[yellow]No file changes in this commit[/yellow]")
            return

        table = Table(title="Files Changed")
        table.add_column("", style="bold", width=1)
        table.add_column("File", style="white")
        table.add_column("Language", style="cyan")
        table.add_column("+", style="green", justify="right")
        table.add_column("-", style="red", justify="right")

        for f in diff.files:
            letter, color = CHANGE_STYLES[f.change_type]
            path = escape(f"{f.old_path} → {f.path}" if f.old_path else f.path)
            if f.binary:
                path += " [dim](binary)[/dim]"
            table.add_row(
                f"[{color}]{letter}[/{color}]",
                path,
                f.language.value,
                str(f.additions),
                str(f.deletions),
            )

        self.console.print(table)
        self.console.print(
            f"[bold]{diff.stats.files_changed}[/bold] files changed, "
            f"[green]{diff.stats.additions} insertions(+)[/green], "
            f"[red]{diff.stats.deletions} deletions(-)[/red]"
        )
        self.console.print(f"[bold]Primary language:[/bold] {diff.primary_language.value}")

        if self.config.show_patch and diff.raw_diff.strip():
            lines = diff.raw_diff.splitlines()
            limit = self.config.max_patch_lines
            shown = "\n".join(lines[:limit])
            self.console.print()
            self.console.print(Syntax(shown, "diff", theme="ansi_dark", word_wrap=True))
            if len(lines) > limit:
                self.console.print(f"[dim]... {len(lines) - limit} more lines not shown[/dim]")

    def on_commit_hook(self) -> None:
        """
        Handle a commit hook: analyze and report the latest commit.

        When an analysis API is configured the commit is also submitted.

        Raises:
            GitServiceError: if the commit can't be read or submission fails
        """
        diff = self.get_latest_commit_diff()
        logger.info(
            "📝 Commit %s by %s: %s", diff.short_hash, diff.author, diff.message
        )
        self.print_commit_diff(diff)

        if not self.config.submit_enabled:
            logger.debug("No analysis API configured, skipping submission")
            return

        logger.info("📤 Submitting commit %s for analysis...", diff.short_hash)
        with AnalysisClient(self.config) as client:
            result = client.submit(diff)

        if not result.success:
            raise HookSubmissionError(result.error or "submission failed")

        logger.info("📬 Submitted commit %s (analysis %s)", diff.short_hash, result.analysis_id)
        if result.findings:
            logger.info("⚠️  %d findings reported for this commit", len(result.findings))
