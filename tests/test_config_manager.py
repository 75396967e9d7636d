"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from tabharmony.config import (
    ConfigError,
    ConfigManager,
    TabHarmonyConfig,
    merge_overrides,
    overrides_from_env,
    read_config_file,
    resolve_with_precedence,
)


def _fresh_manager(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigManager:
    monkeypatch.setenv("HOME", str(tmp_path))
    return ConfigManager()


def test_ensure_exists_creates_default_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    path = manager.ensure_exists()

    assert path == tmp_path / ".tabharmony" / "config.yaml"
    text = path.read_text(encoding="utf-8")
    assert "Tab Harmony configuration file" in text
    assert "Last updated:" in text

    config = manager.load(include_env=False)
    assert isinstance(config, TabHarmonyConfig)
    assert config.grouping.threshold == 4
    assert config.collapse.enabled is False


def test_resolve_with_precedence_respects_order(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.save({"grouping": {"threshold": 6}, "collapse": {"limit": 5}})

    env = {"TABHARMONY__GROUPING__THRESHOLD": "7", "TABHARMONY__SORTING__ENABLED": "false"}
    cli = {"grouping.threshold": 2}

    config = manager.load(cli_overrides=cli, env_overrides=env)

    assert config.collapse.limit == 5
    assert config.sorting.enabled is False
    # CLI overrides take precedence over environment
    assert config.grouping.threshold == 2


def test_missing_keys_fall_back_to_defaults(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.config_path.parent.mkdir(parents=True)
    manager.config_path.write_text("collapse:\n  enabled: true\n", encoding="utf-8")

    config = manager.load(include_env=False, ensure_file=False)

    assert config.collapse.enabled is True
    assert config.collapse.limit == 3
    assert config.grouping.threshold == 4
    assert [rule.prefix for rule in config.grouping.color_rules] == [
        "google",
        "stackoverflow",
        "duckduckgo",
    ]


def test_invalid_yaml_raises_config_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.config_path.write_text("- not-a-mapping", encoding="utf-8")

    with pytest.raises(ConfigError):
        manager.load()


def test_resolve_with_precedence_invalid_value_raises() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=TabHarmonyConfig(),
            file_overrides={"grouping": {"threshold": "not-an-int"}},
        )


def test_unknown_keys_are_rejected() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=TabHarmonyConfig(),
            file_overrides={"grouping": {"treshold": 3}},
        )


def test_threshold_and_collapse_values_are_clamped() -> None:
    config = resolve_with_precedence(
        defaults=TabHarmonyConfig(),
        cli_overrides={
            "grouping.threshold": 0,
            "collapse.limit": 0,
            "collapse.grace_seconds": -1,
        },
    )

    assert config.grouping.threshold == 1
    assert config.collapse.limit == 1
    assert config.collapse.grace_seconds == 0.0

    config = merge_overrides(config, {"grouping": {"threshold": 500}})
    assert config.grouping.threshold == 99


def test_merge_overrides_keeps_unrelated_values() -> None:
    base = merge_overrides(TabHarmonyConfig(), {"collapse.enabled": True})

    updated = merge_overrides(
        base,
        {
            "grouping.alt_domain_rules": [
                {"pattern": r"^mail\.google\.com", "replacement_host": "gmail.com"}
            ]
        },
    )

    assert updated.collapse.enabled is True
    assert updated.grouping.alt_domain_rules[0].replacement_host == "gmail.com"
    assert base.grouping.alt_domain_rules == []


def test_overrides_from_env_parses_yaml_values() -> None:
    overrides = overrides_from_env(
        {
            "TABHARMONY__GROUPING__THRESHOLD": "6",
            "TABHARMONY__COLLAPSE__ENABLED": "true",
            "TABHARMONY__GROUPING__COLOR_RULES": "[{prefix: docs, color: green}]",
            "TABHARMONY__CLI__QUIET_DEFAULT": "{unclosed",
            "HOME": "/tmp",
        }
    )

    assert overrides["grouping.threshold"] == 6
    assert overrides["collapse.enabled"] is True
    assert overrides["grouping.color_rules"] == [{"prefix": "docs", "color": "green"}]
    assert overrides["cli.quiet_default"] == "{unclosed"
    assert "home" not in overrides


def test_env_overrides_layer_over_file(tmp_path: Path) -> None:
    manager = ConfigManager(
        tmp_path / "config.yaml", env={"TABHARMONY__COLLAPSE__LIMIT": "9"}
    )
    manager.save({"collapse": {"limit": 5, "enabled": True}})

    config = manager.load()

    assert config.collapse.limit == 9
    assert config.collapse.enabled is True


def test_empty_config_file_reads_as_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("# nothing here\n", encoding="utf-8")

    assert read_config_file(path) == {}
    assert ConfigManager(path).load(include_env=False).grouping.threshold == 4
