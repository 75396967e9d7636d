"""Records exchanged with the tab host."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from tabharmony.config.models import GroupColor

NO_GROUP = -1


class TabRecord(BaseModel):
    """A tab as reported by the host.

    Attributes:
        id: Stable tab identifier.
        window_id: Window that owns the tab.
        index: Zero-based position within the window's tab strip.
        group_id: Physical group identifier, or ``NO_GROUP``.
        url: Current locator of the tab.
        pinned: Whether the tab is pinned (excluded from organizing).
        active: Whether the tab is the window's active tab.
    """

    id: int
    window_id: int = 1
    index: int = 0
    group_id: int = NO_GROUP
    url: str = ""
    pinned: bool = False
    active: bool = False


class GroupRecord(BaseModel):
    """A physical tab group as reported by the host."""

    id: int
    window_id: int = 1
    title: str = ""
    color: GroupColor = "grey"
    collapsed: bool = False


class WindowSnapshot(BaseModel):
    """Tabs and groups of a single window, in tab-strip order."""

    id: int
    tabs: List[TabRecord] = Field(default_factory=list)
    groups: List[GroupRecord] = Field(default_factory=list)


class HostSnapshot(BaseModel):
    """Serializable state of every window known to a host."""

    windows: List[WindowSnapshot] = Field(default_factory=list)


__all__ = ["NO_GROUP", "TabRecord", "GroupRecord", "WindowSnapshot", "HostSnapshot"]
