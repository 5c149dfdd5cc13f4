"""
Configuration management for atm-git-hook.

Supports:
- Environment variables
- Config file (.atm-hook.toml)
- CLI arguments (highest priority)
"""

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from atm_hook.hooks.install import HOOK_TYPES

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


CONFIG_FILE_NAME = ".atm-hook.toml"
ENV_PREFIX = "ATM_HOOK_"


def _parse_bool(value: str) -> bool:
    return value.lower() in ("1", "true", "yes")


def _as_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{name} must be an integer, got {value!r}") from e


@dataclass
class HookConfig:
    """Configuration for atm-git-hook."""

    # Analysis backend; submission is skipped when api_url is unset
    api_url: Optional[str] = None
    api_key: Optional[str] = None
    timeout: float = 30.0  # seconds

    project_id: Optional[str] = None

    # Report output
    show_patch: bool = True
    max_patch_lines: int = 200

    # Git settings
    hook_type: str = "post-commit"  # post-commit, pre-push

    @property
    def submit_enabled(self) -> bool:
        return bool(self.api_url)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "HookConfig":
        """
        Load configuration from multiple sources.

        Priority (highest to lowest):
        1. Environment variables
        2. Config file
        3. Defaults
        """
        config_dict: dict[str, Any] = {}

        if config_path is None:
            config_path = cls._find_config_file()

        if config_path and config_path.exists():
            with open(config_path, "rb") as f:
                file_config = tomllib.load(f)
                config_dict.update(cls._flatten_config(file_config))

        config_dict.update(cls._load_from_env())

        return cls(**config_dict)

    @classmethod
    def _find_config_file(cls) -> Optional[Path]:
        """Find config file by walking up from current directory."""
        current = Path.cwd()

        while current != current.parent:
            config_file = current / CONFIG_FILE_NAME
            if config_file.exists():
                return config_file
            current = current.parent

        home_config = Path.home() / CONFIG_FILE_NAME
        if home_config.exists():
            return home_config

        return None

    @classmethod
    def _flatten_config(cls, config: dict[str, Any]) -> dict[str, Any]:
        """Flatten nested config to match dataclass fields."""
        result: dict[str, Any] = {}

        if "api" in config:
            api = config["api"]
            if "url" in api:
                result["api_url"] = api["url"]
            if "key" in api:
                result["api_key"] = api["key"]
            if "timeout" in api:
                result["timeout"] = float(api["timeout"])

        if "project" in config:
            result["project_id"] = config["project"].get("id")

        if "output" in config:
            output = config["output"]
            if "show_patch" in output:
                value = output["show_patch"]
                result["show_patch"] = _parse_bool(value) if isinstance(value, str) else bool(value)
            if "max_patch_lines" in output:
                result["max_patch_lines"] = _as_int(output["max_patch_lines"], "max_patch_lines")

        if "git" in config:
            hook_type = config["git"].get("hook_type", "post-commit")
            if hook_type not in HOOK_TYPES:
                raise ValueError(
                    f"hook_type must be one of {', '.join(HOOK_TYPES)}, got {hook_type!r}"
                )
            result["hook_type"] = hook_type

        return result

    @classmethod
    def _load_from_env(cls) -> dict[str, Any]:
        """Load configuration from environment variables."""
        result: dict[str, Any] = {}

        mappings = {
            "API_URL": "api_url",
            "API_KEY": "api_key",
            "TIMEOUT": ("timeout", float),
            "PROJECT_ID": "project_id",
            "SHOW_PATCH": ("show_patch", _parse_bool),
            "MAX_PATCH_LINES": ("max_patch_lines", lambda x: _as_int(x, "max_patch_lines")),
        }

        for env_suffix, mapping in mappings.items():
            value = os.environ.get(f"{ENV_PREFIX}{env_suffix}")

            if value is not None:
                if isinstance(mapping, tuple):
                    field_name, converter = mapping
                    result[field_name] = converter(value)
                else:
                    result[mapping] = value

        return result

    def to_toml(self) -> str:
        """Generate TOML configuration string."""
        lines = [
            "# atm-git-hook configuration",
            "# Generated by: atm-git-hook-admin init",
            "",
            "[api]",
            f'# url = "{self.api_url or "https://threat-modeler.example.com/api/v1"}"',
            '# key = "your-api-key"  # Or set ATM_HOOK_API_KEY env var',
            f"timeout = {self.timeout}",
            "",
            "[project]",
            f'# id = "{self.project_id or "your-project-id"}"',
            "",
            "[output]",
            f"show_patch = {str(self.show_patch).lower()}",
            f"max_patch_lines = {self.max_patch_lines}",
            "",
            "[git]",
            f'hook_type = "{self.hook_type}"',
        ]
        return "\n".join(lines) + "\n"
