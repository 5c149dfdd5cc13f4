"""
Git hook installation utilities.
"""

import stat
import subprocess
from pathlib import Path
from typing import Optional

HOOK_MARKER = "# ATM Git Hook - commit analysis"

HOOK_TYPES = ("post-commit", "pre-push")

HOOK_TEMPLATE = '''#!/bin/sh
{marker}
# Installed by: atm-git-hook-admin hook

# Skip if ATM_HOOK_SKIP is set
if [ "$ATM_HOOK_SKIP" = "1" ]; then
    exit 0
fi

atm-git-hook --hook --repo "$(git rev-parse --show-toplevel)"

# Don't fail the commit/push if analysis fails
exit 0
'''


def get_git_hooks_dir(repo_path: Optional[str] = None) -> Optional[Path]:
    """
    Find the hooks directory of a repository.

    Honors core.hooksPath and linked worktrees by asking git for the path.
    """
    cmd = ["git"]
    if repo_path:
        cmd.extend(["-C", repo_path])
    cmd.extend(["rev-parse", "--git-path", "hooks"])

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=True)
    except (FileNotFoundError, subprocess.CalledProcessError):
        return None

    # git prints the path relative to the repository unless it is absolute
    hooks_dir = Path(result.stdout.strip())
    if not hooks_dir.is_absolute():
        hooks_dir = Path(repo_path or Path.cwd()) / hooks_dir
    hooks_dir.mkdir(parents=True, exist_ok=True)
    return hooks_dir


def install_hook(
    hook_type: str = "post-commit",
    repo_path: Optional[str] = None,
    force: bool = False,
) -> bool:
    """
    Install a git hook.

    Args:
        hook_type: Type of hook (post-commit, pre-push)
        repo_path: Repository to install into (default: current directory)
        force: Replace a hook installed by another tool

    Returns:
        True if successful

    Raises:
        FileExistsError: if a hook not written by atm-git-hook is in the way
            and force is not set
    """
    if hook_type not in HOOK_TYPES:
        raise ValueError(f"Unsupported hook type: {hook_type}")

    hooks_dir = get_git_hooks_dir(repo_path)
    if not hooks_dir:
        return False

    hook_path = hooks_dir / hook_type
    if hook_path.exists() and not force and HOOK_MARKER not in hook_path.read_text(errors="replace"):
        raise FileExistsError(f"{hook_path} was not installed by atm-git-hook")

    hook_path.write_text(HOOK_TEMPLATE.format(marker=HOOK_MARKER))
    hook_path.chmod(hook_path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

    return True


def uninstall_hook(hook_type: str = "post-commit", repo_path: Optional[str] = None) -> bool:
    """
    Remove a git hook.

    Args:
        hook_type: Type of hook to remove
        repo_path: Repository to remove it from (default: current directory)

    Returns:
        True if hook was removed
    """
    hooks_dir = get_git_hooks_dir(repo_path)
    if not hooks_dir:
        return False

    hook_path = hooks_dir / hook_type

    if not hook_path.exists():
        return False

    # Leave hooks written by other tools alone
    if HOOK_MARKER not in hook_path.read_text(errors="replace"):
        return False

    hook_path.unlink()
    return True
