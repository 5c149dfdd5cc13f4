"""
CLI tests for atm-git-hook.

Tests flag parsing, repository resolution and mode dispatch.
"""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from atm_hook.cli import admin, main
from atm_hook.config import HookConfig
from atm_hook.exceptions import (
    CommitNotFoundError,
    GitCommandError,
    HookSubmissionError,
    RepositoryNotFoundError,
)

COMPLETE = "✅ Analysis complete!"


@pytest.fixture
def runner():
    """Create a Click test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def default_config():
    """Keep config files on the test machine out of the way."""
    with patch.object(HookConfig, "load", return_value=HookConfig()) as load:
        yield load


@pytest.fixture
def service_class():
    with patch("atm_hook.cli.GitService") as cls:
        yield cls


@pytest.fixture
def discover():
    with patch("atm_hook.cli.get_current_repo_path", return_value="/discovered/repo") as fn:
        yield fn


@pytest.fixture
def logs(caplog):
    caplog.set_level(logging.DEBUG, logger="atm_hook")
    return caplog


class TestMainHelp:
    """Tests for help and version output."""

    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "--repo" in result.output
        assert "--commit" in result.output
        assert "--hook" in result.output

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestRepositoryResolution:
    """Tests for --repo versus discovery."""

    def test_discovery_called_once_without_repo(self, runner, service_class, discover):
        result = runner.invoke(main, [])

        assert result.exit_code == 0
        discover.assert_called_once_with()
        assert service_class.call_args.args[0] == "/discovered/repo"

    def test_explicit_repo_used_verbatim(self, runner, service_class, discover):
        result = runner.invoke(main, ["--repo", "/some/path"])

        assert result.exit_code == 0
        discover.assert_not_called()
        assert service_class.call_args.args[0] == "/some/path"

    def test_relative_repo_not_normalized(self, runner, service_class, discover):
        result = runner.invoke(main, ["--repo", "../other/./repo"])

        assert result.exit_code == 0
        assert service_class.call_args.args[0] == "../other/./repo"

    def test_discovery_failure_is_fatal(self, runner, service_class, discover, logs):
        discover.side_effect = RepositoryNotFoundError("not a git repository")

        result = runner.invoke(main, [])

        assert result.exit_code == 1
        assert "❌ Error finding git repository: not a git repository" in logs.text
        service_class.assert_not_called()
        assert COMPLETE not in logs.text


class TestModeDispatch:
    """Tests for hook > commit > latest precedence."""

    def test_hook_mode_only_runs_hook(self, runner, service_class, discover, logs):
        service = service_class.return_value

        result = runner.invoke(main, ["--hook"])

        assert result.exit_code == 0
        service.on_commit_hook.assert_called_once_with()
        service.get_commit_diff.assert_not_called()
        service.get_latest_commit_diff.assert_not_called()
        service.print_commit_diff.assert_not_called()
        assert "Running git commit analysis hook" in logs.text

    def test_hook_mode_wins_over_commit(self, runner, service_class, discover, logs):
        service = service_class.return_value

        result = runner.invoke(main, ["--hook", "--commit", "abc123"])

        assert result.exit_code == 0
        service.on_commit_hook.assert_called_once_with()
        service.get_commit_diff.assert_not_called()
        assert "ignored in hook mode" in logs.text

    def test_specific_commit(self, runner, service_class, discover, logs):
        service = service_class.return_value

        result = runner.invoke(main, ["--commit", "abc123"])

        assert result.exit_code == 0
        service.get_commit_diff.assert_called_once_with("abc123")
        service.print_commit_diff.assert_called_once_with(service.get_commit_diff.return_value)
        service.get_latest_commit_diff.assert_not_called()
        service.on_commit_hook.assert_not_called()
        assert "🔍 Analyzing commit: abc123" in logs.text

    def test_latest_commit(self, runner, service_class, discover, logs):
        service = service_class.return_value

        result = runner.invoke(main, [])

        assert result.exit_code == 0
        service.get_latest_commit_diff.assert_called_once_with()
        service.print_commit_diff.assert_called_once_with(
            service.get_latest_commit_diff.return_value
        )
        service.get_commit_diff.assert_not_called()
        service.on_commit_hook.assert_not_called()
        assert "🔍 Analyzing latest commit..." in logs.text

    def test_empty_commit_means_latest(self, runner, service_class, discover):
        service = service_class.return_value

        result = runner.invoke(main, ["--commit", ""])

        assert result.exit_code == 0
        service.get_latest_commit_diff.assert_called_once_with()
        service.get_commit_diff.assert_not_called()

    def test_completion_logged_once(self, runner, service_class, discover, logs):
        result = runner.invoke(main, ["--commit", "abc123"])

        assert result.exit_code == 0
        assert logs.messages.count(COMPLETE) == 1
        assert logs.messages[-1] == COMPLETE


class TestFatalErrors:
    """Collaborator errors terminate with status 1 and no further work."""

    def test_hook_failure(self, runner, service_class, discover, logs):
        service = service_class.return_value
        service.on_commit_hook.side_effect = HookSubmissionError("backend down")

        result = runner.invoke(main, ["--hook"])

        assert result.exit_code == 1
        assert "❌ Hook execution failed: backend down" in logs.text
        assert COMPLETE not in logs.text

    def test_commit_lookup_failure(self, runner, service_class, discover, logs):
        service = service_class.return_value
        service.get_commit_diff.side_effect = CommitNotFoundError("unknown commit: nope")

        result = runner.invoke(main, ["--commit", "nope"])

        assert result.exit_code == 1
        assert "❌ Error getting commit diff: unknown commit: nope" in logs.text
        service.print_commit_diff.assert_not_called()
        assert COMPLETE not in logs.text

    def test_latest_commit_failure(self, runner, service_class, discover, logs):
        service = service_class.return_value
        service.get_latest_commit_diff.side_effect = GitCommandError(
            ["git", "show"], 128, "fatal: bad object"
        )

        result = runner.invoke(main, [])

        assert result.exit_code == 1
        assert "❌ Error getting latest commit diff:" in logs.text
        assert "fatal: bad object" in logs.text
        service.print_commit_diff.assert_not_called()
        assert COMPLETE not in logs.text

    def test_bad_config_is_fatal(self, runner, service_class, discover, default_config, logs):
        default_config.side_effect = ValueError("Invalid value")

        result = runner.invoke(main, [])

        assert result.exit_code == 1
        assert "❌ Configuration error" in logs.text
        service_class.assert_not_called()


class TestConfigOption:
    """Tests for --config."""

    def test_config_path_passed_to_loader(self, runner, service_class, discover, default_config, tmp_path):
        config_file = tmp_path / "custom.toml"
        config_file.write_text("[output]\nshow_patch = false\n")

        result = runner.invoke(main, ["--config", str(config_file)])

        assert result.exit_code == 0
        default_config.assert_called_once_with(config_file)
        assert service_class.call_args.kwargs["config"] is default_config.return_value

    def test_missing_config_file_rejected(self, runner, service_class, discover):
        result = runner.invoke(main, ["--config", "/does/not/exist.toml"])

        assert result.exit_code != 0
        service_class.assert_not_called()


class TestAdminInit:
    """Tests for the init command."""

    def test_init_creates_config_file(self, runner, tmp_path):
        with runner.isolated_filesystem(temp_dir=tmp_path):
            result = runner.invoke(admin, ["init"])
            assert result.exit_code == 0
            assert "Created configuration file" in result.output
            assert Path(".atm-hook.toml").exists()

    def test_init_does_not_overwrite_without_force(self, runner, tmp_path):
        with runner.isolated_filesystem(temp_dir=tmp_path):
            Path(".atm-hook.toml").write_text("# existing config")

            result = runner.invoke(admin, ["init"])
            assert result.exit_code == 1
            assert "already exists" in result.output
            assert Path(".atm-hook.toml").read_text() == "# existing config"

    def test_init_overwrites_with_force(self, runner, tmp_path):
        with runner.isolated_filesystem(temp_dir=tmp_path):
            Path(".atm-hook.toml").write_text("# existing config")

            result = runner.invoke(admin, ["init", "--force"])
            assert result.exit_code == 0
            assert "[output]" in Path(".atm-hook.toml").read_text()


class TestAdminHook:
    """Tests for the hook command."""

    def test_hook_help(self, runner):
        result = runner.invoke(admin, ["hook", "--help"])
        assert result.exit_code == 0
        assert "post-commit" in result.output
        assert "pre-push" in result.output
        assert "--uninstall" in result.output

    def test_install(self, runner):
        with patch("atm_hook.hooks.install.install_hook", return_value=True) as install:
            result = runner.invoke(admin, ["hook", "--repo", "/repo"])

        assert result.exit_code == 0
        assert "Installed post-commit hook" in result.output
        install.assert_called_once_with("post-commit", "/repo", force=False)

    def test_hook_type_from_config(self, runner, default_config):
        default_config.return_value = HookConfig(hook_type="pre-push")

        with patch("atm_hook.hooks.install.install_hook", return_value=True) as install:
            result = runner.invoke(admin, ["hook", "--repo", "/repo"])

        assert result.exit_code == 0
        assert "Installed pre-push hook" in result.output
        install.assert_called_once_with("pre-push", "/repo", force=False)

    def test_type_option_overrides_config(self, runner, default_config):
        default_config.return_value = HookConfig(hook_type="pre-push")

        with patch("atm_hook.hooks.install.install_hook", return_value=True) as install:
            result = runner.invoke(admin, ["hook", "--type", "post-commit"])

        assert result.exit_code == 0
        install.assert_called_once_with("post-commit", None, force=False)
        default_config.assert_not_called()

    def test_bad_config_fails(self, runner, default_config):
        default_config.side_effect = ValueError("hook_type must be one of post-commit, pre-push")

        result = runner.invoke(admin, ["hook"])

        assert result.exit_code == 1
        assert "Configuration error" in result.output

    def test_foreign_hook_kept_without_force(self, runner):
        with patch(
            "atm_hook.hooks.install.install_hook",
            side_effect=FileExistsError("post-commit was not installed by atm-git-hook"),
        ):
            result = runner.invoke(admin, ["hook"])

        assert result.exit_code == 1
        assert "--force" in result.output

    def test_force_passed_through(self, runner):
        with patch("atm_hook.hooks.install.install_hook", return_value=True) as install:
            result = runner.invoke(admin, ["hook", "--force"])

        assert result.exit_code == 0
        install.assert_called_once_with("post-commit", None, force=True)

    def test_replaces_foreign_hook_in_real_repo(self, runner, empty_repo):
        hook_path = empty_repo / ".git" / "hooks" / "post-commit"
        hook_path.parent.mkdir(parents=True, exist_ok=True)
        hook_path.write_text("#!/bin/sh\necho someone else\n")

        refused = runner.invoke(admin, ["hook", "--repo", str(empty_repo)])
        assert refused.exit_code == 1
        assert "someone else" in hook_path.read_text()

        forced = runner.invoke(admin, ["hook", "--repo", str(empty_repo), "--force"])
        assert forced.exit_code == 0
        assert "atm-git-hook --hook" in hook_path.read_text()

    def test_install_outside_repo_fails(self, runner):
        with patch("atm_hook.hooks.install.install_hook", return_value=False):
            result = runner.invoke(admin, ["hook"])

        assert result.exit_code == 1
        assert "Failed to install hook" in result.output

    def test_uninstall_missing_hook(self, runner):
        with patch("atm_hook.hooks.install.uninstall_hook", return_value=False):
            result = runner.invoke(admin, ["hook", "--uninstall", "--type", "pre-push"])

        assert result.exit_code == 0
        assert "Hook not found" in result.output
