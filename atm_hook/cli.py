"""
CLI for atm-git-hook.

Commands:
    atm-git-hook                 Analyze the latest commit
    atm-git-hook --commit SHA    Analyze a specific commit
    atm-git-hook --hook          Run as a git hook
    atm-git-hook-admin init      Initialize configuration
    atm-git-hook-admin hook      Install or remove the git hook
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import NoReturn

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from atm_hook import __version__
from atm_hook.config import CONFIG_FILE_NAME, HookConfig
from atm_hook.exceptions import GitServiceError
from atm_hook.hooks.install import HOOK_TYPES
from atm_hook.services import GitService, get_current_repo_path

console = Console()
logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(message)s",
        datefmt="%Y/%m/%d %H:%M:%S",
        stream=sys.stderr,
    )
    if not verbose:
        # httpx logs every request at INFO
        logging.getLogger("httpx").setLevel(logging.WARNING)


def _fatal(message: str) -> NoReturn:
    logger.critical(message)
    sys.exit(1)


@click.command()
@click.version_option(version=__version__, prog_name="atm-git-hook")
@click.option(
    "--repo",
    default="",
    help="Path to git repository (default: current directory)",
)
@click.option(
    "--commit",
    "commit_hash",
    default="",
    help="Specific commit hash to analyze (default: latest)",
)
@click.option(
    "--hook",
    "hook_mode",
    is_flag=True,
    help="Run in git hook mode",
)
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to config file",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable debug logging",
)
def main(
    repo: str,
    commit_hash: str,
    hook_mode: bool,
    config: str | None,
    verbose: bool,
) -> None:
    """ATM Git Hook - analyze the changes introduced by a commit."""
    _configure_logging(verbose)

    try:
        cfg = HookConfig.load(Path(config) if config else None)
    except ValueError as e:
        _fatal(f"❌ Configuration error: {e}")

    # Determine repository path
    if repo:
        repo_path = repo
    else:
        try:
            repo_path = get_current_repo_path()
        except GitServiceError as e:
            _fatal(f"❌ Error finding git repository: {e}")

    service = GitService(repo_path, config=cfg)

    if hook_mode:
        if commit_hash:
            logger.debug("--commit %s ignored in hook mode", commit_hash)
        logger.info("🎯 Running git commit analysis hook...")
        try:
            service.on_commit_hook()
        except GitServiceError as e:
            _fatal(f"❌ Hook execution failed: {e}")
    elif commit_hash:
        logger.info(f"🔍 Analyzing commit: {commit_hash}")
        try:
            commit_diff = service.get_commit_diff(commit_hash)
        except GitServiceError as e:
            _fatal(f"❌ Error getting commit diff: {e}")
        service.print_commit_diff(commit_diff)
    else:
        logger.info("🔍 Analyzing latest commit...")
        try:
            commit_diff = service.get_latest_commit_diff()
        except GitServiceError as e:
            _fatal(f"❌ Error getting latest commit diff: {e}")
        service.print_commit_diff(commit_diff)

    logger.info("✅ Analysis complete!")


@click.group()
@click.version_option(version=__version__, prog_name="atm-git-hook-admin")
def admin() -> None:
    """ATM Git Hook - setup and maintenance commands."""
    pass


@admin.command()
@click.option(
    "--force",
    "-f",
    is_flag=True,
    help="Overwrite existing configuration",
)
def init(force: bool) -> None:
    """Initialize atm-git-hook configuration."""
    config_path = Path(CONFIG_FILE_NAME)

    if config_path.exists() and not force:
        console.print(
            f"[yellow]Configuration file already exists:[/yellow] {config_path}\n"
            "Use --force to overwrite."
        )
        sys.exit(1)

    config_path.write_text(HookConfig().to_toml())

    console.print(
        Panel(
            f"[green]✓[/green] Created configuration file: [bold]{config_path}[/bold]\n\n"
            "Next steps:\n"
            "1. Set the analysis API URL: [dim]export ATM_HOOK_API_URL=https://...[/dim]\n"
            "2. Install the hook: [bold]atm-git-hook-admin hook[/bold]\n"
            "3. Commit as usual; each commit is analyzed automatically",
            title="ATM Git Hook Initialized",
            border_style="green",
        )
    )


@admin.command()
@click.option(
    "--type",
    "-t",
    "hook_type",
    type=click.Choice(list(HOOK_TYPES)),
    default=None,
    help="Git hook type (default: hook_type from the config file, else post-commit)",
)
@click.option(
    "--uninstall",
    is_flag=True,
    help="Remove the git hook",
)
@click.option(
    "--force",
    "-f",
    is_flag=True,
    help="Replace a hook installed by another tool",
)
@click.option(
    "--repo",
    default=None,
    help="Path to git repository (default: current directory)",
)
def hook(hook_type: str | None, uninstall: bool, force: bool, repo: str | None) -> None:
    """Install or remove the git hook for automatic analysis."""
    from atm_hook.hooks.install import install_hook, uninstall_hook

    if hook_type is None:
        try:
            hook_type = HookConfig.load().hook_type
        except ValueError as e:
            console.print(f"[red]Configuration error:[/red] {e}")
            sys.exit(1)

    if uninstall:
        if uninstall_hook(hook_type, repo):
            console.print(f"[green]✓[/green] Removed {hook_type} hook")
        else:
            console.print(f"[yellow]Hook not found:[/yellow] {hook_type}")
        return

    try:
        installed = install_hook(hook_type, repo, force=force)
    except FileExistsError as e:
        console.print(f"[yellow]Existing hook left in place:[/yellow] {escape(str(e))}\nUse --force to replace it.")
        sys.exit(1)

    if installed:
        console.print(f"[green]✓[/green] Installed {hook_type} hook")
        console.print(
            f"\nThe hook will run [bold]atm-git-hook --hook[/bold] after each "
            f"{hook_type.replace('-', ' ')}.\n"
            "Set [dim]ATM_HOOK_SKIP=1[/dim] to skip it for a single command."
        )
    else:
        console.print("[red]Failed to install hook: not a git repository[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
