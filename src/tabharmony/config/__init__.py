"""Configuration management for Tab Harmony.

Settings live in ``~/.tabharmony/config.yaml``. Variables named
``TABHARMONY__SECTION__KEY`` override the file and command-line values
override both.
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import (
    AltDomainRule,
    CollapseOptions,
    GroupColor,
    GroupColorRule,
    GroupingOptions,
    SortingOptions,
    TabHarmonyConfig,
)
from .resolver import ENV_PREFIX, merge_overrides, resolve_with_precedence

DEFAULT_CONFIG_PATH = Path("~/.tabharmony/config.yaml")
FILE_BANNER = (
    "# Tab Harmony configuration file\n"
    "# Change single values with `tabharmony config set KEY --value VALUE`.\n"
)


def overrides_from_env(env: Mapping[str, str]) -> dict[str, Any]:
    """Map ``TABHARMONY__`` variables to dotted override keys.

    Values are parsed as YAML, so ``false``, ``5`` and ``[a, b]`` keep their
    types. A value that is not valid YAML is kept as a string.
    """
    overrides: dict[str, Any] = {}
    for name, raw in env.items():
        if not name.startswith(ENV_PREFIX):
            continue
        dotted = ".".join(part.lower() for part in name[len(ENV_PREFIX) :].split("__") if part)
        if not dotted:
            continue
        try:
            overrides[dotted] = yaml.safe_load(raw)
        except yaml.YAMLError:
            overrides[dotted] = raw
    return overrides


def read_config_file(path: Path) -> dict[str, Any]:
    """Return the mapping stored at ``path``; a missing file reads as empty."""
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse configuration file: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Configuration file must contain a mapping at the top level.")
    return data


def write_config_file(path: Path, data: Mapping[str, Any]) -> None:
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    body = yaml.safe_dump(dict(data), sort_keys=False)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"{FILE_BANNER}# Last updated: {stamp}\n{body}", encoding="utf-8")


class ConfigManager:
    """One configuration file plus the environment it is read under."""

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self.config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = os.environ if env is None else env

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = True,
        env_overrides: Mapping[str, str] | None = None,
    ) -> TabHarmonyConfig:
        """Return the effective configuration.

        Args:
            cli_overrides: Dotted or nested values that win over every other source.
            include_env: Whether ``TABHARMONY__`` variables are applied.
            ensure_file: Write a default file first when none exists.
            env_overrides: Variables to read instead of the manager's environment.

        Raises:
            ConfigError: If the file is malformed or a merged value is invalid.
        """
        if ensure_file:
            self.ensure_exists()
        from_env: dict[str, Any] = {}
        if include_env:
            from_env = overrides_from_env(self._env if env_overrides is None else env_overrides)
        return resolve_with_precedence(
            defaults=TabHarmonyConfig(),
            file_overrides=read_config_file(self.config_path),
            env_overrides=from_env or None,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        return read_config_file(self.config_path)

    def save(self, config: TabHarmonyConfig | Mapping[str, Any]) -> None:
        data = config.model_dump(mode="json") if isinstance(config, TabHarmonyConfig) else config
        write_config_file(self.config_path, data)

    def ensure_exists(self) -> Path:
        if not self.config_path.exists():
            self.save(TabHarmonyConfig())
        return self.config_path

    def read_text(self) -> str:
        return self.config_path.read_text(encoding="utf-8") if self.config_path.exists() else ""


__all__ = [
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "TabHarmonyConfig",
    "SortingOptions",
    "GroupingOptions",
    "CollapseOptions",
    "AltDomainRule",
    "GroupColorRule",
    "GroupColor",
    "overrides_from_env",
    "read_config_file",
    "write_config_file",
    "resolve_with_precedence",
    "merge_overrides",
    "ConfigError",
]
