"""Configuration models describing Tab Harmony settings."""

from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

GroupColor = Literal["grey", "blue", "red", "yellow", "green", "pink", "purple", "cyan", "orange"]

MIN_GROUP_THRESHOLD = 1
MAX_GROUP_THRESHOLD = 99


class TabHarmonyBaseModel(BaseModel):
    """Shared configuration for Tab Harmony Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class AltDomainRule(TabHarmonyBaseModel):
    """Rewrite rule mapping matching URLs onto an alternate host.

    Attributes:
        pattern: Regular expression searched against ``host + path``.
        replacement_host: Host used for grouping and sorting when the pattern matches.
    """

    pattern: str
    replacement_host: str


class GroupColorRule(TabHarmonyBaseModel):
    """Color assigned to groups whose name starts with a label prefix.

    Attributes:
        prefix: Label prefix, written with spaces or dots (``google maps``).
        color: Host palette color applied to matching groups.
    """

    prefix: str
    color: GroupColor


def _default_color_rules() -> list[GroupColorRule]:
    return [
        GroupColorRule(prefix="google", color="blue"),
        GroupColorRule(prefix="stackoverflow", color="orange"),
        GroupColorRule(prefix="duckduckgo", color="red"),
    ]


class SortingOptions(TabHarmonyBaseModel):
    """Settings that govern tab ordering.

    Attributes:
        enabled: Whether tabs are moved into sorted order.
    """

    enabled: bool = True


class GroupingOptions(TabHarmonyBaseModel):
    """Settings that govern logical and physical grouping.

    Attributes:
        enabled: Whether physical groups are reconciled.
        threshold: Minimum tab count for a domain group to be realized.
        alt_domain_rules: Ordered rewrite rules applied before key extraction.
        color_rules: Group colors keyed by group-name prefix.
    """

    enabled: bool = True
    threshold: int = 4
    alt_domain_rules: List[AltDomainRule] = Field(default_factory=list)
    color_rules: List[GroupColorRule] = Field(default_factory=_default_color_rules)

    @field_validator("threshold", mode="after")
    @classmethod
    def _clamp_threshold(cls, value: int) -> int:
        return max(MIN_GROUP_THRESHOLD, min(MAX_GROUP_THRESHOLD, value))


class CollapseOptions(TabHarmonyBaseModel):
    """Settings for collapsing idle groups.

    Attributes:
        enabled: Whether idle groups collapse when another group is activated.
        limit: Number of recently activated groups kept expanded.
        grace_seconds: Delay before evaluating collapse after an activation.
    """

    enabled: bool = False
    limit: int = 3
    grace_seconds: float = 0.3

    @field_validator("limit", mode="after")
    @classmethod
    def _clamp_limit(cls, value: int) -> int:
        return max(1, value)

    @field_validator("grace_seconds", mode="after")
    @classmethod
    def _clamp_grace(cls, value: float) -> float:
        return max(0.0, value)


class LoggingSettings(TabHarmonyBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: str = "WARNING"


class CLIOptions(TabHarmonyBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
    """

    quiet_default: bool = False
    summary_default: bool = False


class TabHarmonyConfig(TabHarmonyBaseModel):
    """Top-level configuration struct for Tab Harmony.

    Attributes:
        sorting: Tab ordering settings.
        grouping: Grouping and coloring settings.
        collapse: Auto-collapse settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    sorting: SortingOptions = Field(default_factory=SortingOptions)
    grouping: GroupingOptions = Field(default_factory=GroupingOptions)
    collapse: CollapseOptions = Field(default_factory=CollapseOptions)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "GroupColor",
    "TabHarmonyBaseModel",
    "AltDomainRule",
    "GroupColorRule",
    "SortingOptions",
    "GroupingOptions",
    "CollapseOptions",
    "LoggingSettings",
    "CLIOptions",
    "TabHarmonyConfig",
    "MIN_GROUP_THRESHOLD",
    "MAX_GROUP_THRESHOLD",
]
