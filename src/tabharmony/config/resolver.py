"""Configuration resolution helpers."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Mapping

from pydantic import ValidationError

from .exceptions import ConfigError
from .models import TabHarmonyConfig

ENV_PREFIX = "TABHARMONY__"


def resolve_with_precedence(
    *,
    defaults: TabHarmonyConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> TabHarmonyConfig:
    """Merge configuration sources: defaults < file < environment < CLI.

    Args:
        defaults: Baseline configuration.
        file_overrides: Values read from the YAML configuration file.
        env_overrides: Values extracted from ``TABHARMONY__`` variables.
        cli_overrides: Values supplied on the command line (dotted keys allowed).

    Returns:
        TabHarmonyConfig: Validated configuration snapshot.

    Raises:
        ConfigError: If any source is malformed or the merged data is invalid.
    """
    merged = defaults.model_dump(mode="python")
    for name, source in (
        ("file", file_overrides),
        ("environment", env_overrides),
        ("cli", cli_overrides),
    ):
        if source is None:
            continue
        merged = _deep_merge(merged, _expand_dotted(source, source_name=name))

    try:
        return TabHarmonyConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def merge_overrides(config: TabHarmonyConfig, overrides: Mapping[str, Any]) -> TabHarmonyConfig:
    """Return a new configuration with ``overrides`` layered onto ``config``."""
    return resolve_with_precedence(defaults=config, cli_overrides=overrides)


def _expand_dotted(source: Mapping[str, Any], *, source_name: str) -> dict[str, Any]:
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{source_name.capitalize()} overrides must be a mapping.")

    expanded: dict[str, Any] = {}
    for key, value in source.items():
        if not isinstance(key, str):
            raise ConfigError(f"{source_name.capitalize()} override keys must be strings.")
        segments = key.split(".")
        node = expanded
        for segment in segments[:-1]:
            child = node.setdefault(segment, {})
            if not isinstance(child, dict):
                raise ConfigError(
                    f"{source_name.capitalize()} override for {key} conflicts with existing value."
                )
            node = child
        leaf = segments[-1]
        if isinstance(value, MappingABC):
            nested = _expand_dotted(value, source_name=source_name)
            existing = node.get(leaf)
            node[leaf] = _deep_merge(existing, nested) if isinstance(existing, dict) else nested
        else:
            node[leaf] = value
    return expanded


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = {key: deepcopy(value) for key, value in base.items()}
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(value, MappingABC) and isinstance(current, MappingABC):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


__all__ = ["ENV_PREFIX", "resolve_with_precedence", "merge_overrides"]
