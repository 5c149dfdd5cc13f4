"""
Shared fixtures: throwaway git repositories.
"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest


def git(repo: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", "-C", str(repo), *args],
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


@pytest.fixture
def git_env(monkeypatch, tmp_path):
    """Isolate git from the user's global and system configuration."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(home / ".gitconfig"))
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Ada Lovelace")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "ada@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Ada Lovelace")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "ada@example.com")
    for name in ("ATM_HOOK_API_URL", "ATM_HOOK_API_KEY", "GIT_DIR", "GIT_WORK_TREE"):
        monkeypatch.delenv(name, raising=False)
    return home


@pytest.fixture
def empty_repo(git_env, tmp_path):
    """An initialized repository with no commits."""
    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "-q")
    git(repo, "config", "commit.gpgsign", "false")
    return repo


@pytest.fixture
def repo(empty_repo):
    """A repository with two commits: an initial one and a follow-up."""
    (empty_repo / "app.py").write_text("print('hello')\n")
    (empty_repo / "README").write_text("demo\n")
    git(empty_repo, "add", ".")
    git(empty_repo, "commit", "-q", "-m", "Initial commit")

    (empty_repo / "app.py").write_text("print('hello')\nprint('world')\n")
    (empty_repo / "deploy.tf").write_text('resource "aws_s3_bucket" "b" {}\n')
    git(empty_repo, "rm", "-q", "README")
    git(empty_repo, "add", ".")
    git(empty_repo, "commit", "-q", "-m", "Add deployment")
    return empty_repo
