"""
Git hooks for atm-git-hook.

Provides utilities for installing and removing the hook script that runs
``atm-git-hook --hook`` after each commit.
"""

from atm_hook.hooks.install import HOOK_TYPES, get_git_hooks_dir, install_hook, uninstall_hook

__all__ = [
    "HOOK_TYPES",
    "install_hook",
    "uninstall_hook",
    "get_git_hooks_dir",
]
