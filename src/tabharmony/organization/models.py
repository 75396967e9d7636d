"""Organization data models.

Per-run values (keys, items, logical groups) are frozen dataclasses rebuilt
from scratch on every run. Plans and operation events are Pydantic models so
they can be rendered as JSON by the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from tabharmony.config.models import GroupColor
from tabharmony.host.models import NO_GROUP

UNKNOWN_GROUP_NAME = ""


@dataclass(frozen=True, slots=True)
class HierarchicalKey:
    """Reversed domain labels (TLD removed) plus the URL path."""

    labels: tuple[str, ...]
    path: str = ""


@dataclass(frozen=True, slots=True)
class Item:
    """A tab as seen by one organizing run."""

    id: int
    current_index: int
    current_group_id: int = NO_GROUP
    key: Optional[HierarchicalKey] = None

    @property
    def unparsed(self) -> bool:
        return self.key is None

    @property
    def group_path_parts(self) -> tuple[str, ...]:
        return self.key.labels if self.key is not None else ()


@dataclass(frozen=True, slots=True)
class LogicalGroup:
    """A named cluster of items.

    ``materialized`` is true only for groups that met the threshold; other
    groups (leftover sections and the unknown bucket) are kept physically
    ungrouped.
    """

    name: str
    items: tuple[Item, ...]
    materialized: bool = False

    @property
    def is_unknown(self) -> bool:
        return self.name == UNKNOWN_GROUP_NAME

    @property
    def item_ids(self) -> list[int]:
        return [item.id for item in self.items]


@dataclass(frozen=True, slots=True)
class GroupAssignment:
    """Output of the group assignment resolver."""

    unknown: Optional[LogicalGroup]
    groups: tuple[LogicalGroup, ...]

    @property
    def named_group_count(self) -> int:
        return sum(1 for group in self.groups if group.materialized)

    def all_groups(self) -> list[LogicalGroup]:
        head = [self.unknown] if self.unknown is not None else []
        return head + list(self.groups)


class MoveOperation(BaseModel):
    """Represents moving a tab to a new index.

    Attributes:
        tab_id: Tab being moved.
        current_index: Index of the tab when the run started.
        target_index: Desired index in the sorted order.
        displacement: Absolute distance between the two indices.
    """

    tab_id: int
    current_index: int
    target_index: int
    displacement: int


class MovePlan(BaseModel):
    """Moves in application order (largest displacement first)."""

    offset: int = 0
    moves: List[MoveOperation] = Field(default_factory=list)
    skipped: int = 0


class CreateGroupOperation(BaseModel):
    """Group tabs into a new physical group with the given title and color."""

    name: str
    tab_ids: List[int]
    color: Optional[GroupColor] = None


class RetargetOperation(BaseModel):
    """Move tabs into an existing, correctly titled physical group.

    ``member_ids`` and ``color`` describe the whole logical group so the
    executor can create it from scratch if the target has been dissolved.
    """

    group_id: int
    name: str
    tab_ids: List[int]
    member_ids: List[int] = Field(default_factory=list)
    color: Optional[GroupColor] = None


class RecolorOperation(BaseModel):
    """Change the color of an existing physical group."""

    group_id: int
    name: str
    color: GroupColor


class UngroupOperation(BaseModel):
    """Remove tabs from their physical groups."""

    name: str
    tab_ids: List[int]


class GroupPlan(BaseModel):
    """Reconciliation operations computed for one run."""

    creates: List[CreateGroupOperation] = Field(default_factory=list)
    retargets: List[RetargetOperation] = Field(default_factory=list)
    recolors: List[RecolorOperation] = Field(default_factory=list)
    ungroups: List[UngroupOperation] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.creates or self.retargets or self.recolors or self.ungroups)

    @property
    def operation_count(self) -> int:
        return len(self.creates) + len(self.retargets) + len(self.recolors) + len(self.ungroups)


class OperationEvent(BaseModel):
    """Outcome of a single host operation issued by the executor."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    operation: Literal["move", "create", "retarget", "recolor", "ungroup", "collapse"]
    status: Literal["applied", "failed", "downgraded"] = "applied"
    tab_ids: List[int] = Field(default_factory=list)
    group_id: Optional[int] = None
    name: Optional[str] = None
    notes: List[str] = Field(default_factory=list)


__all__ = [
    "UNKNOWN_GROUP_NAME",
    "HierarchicalKey",
    "Item",
    "LogicalGroup",
    "GroupAssignment",
    "MoveOperation",
    "MovePlan",
    "CreateGroupOperation",
    "RetargetOperation",
    "RecolorOperation",
    "UngroupOperation",
    "GroupPlan",
    "OperationEvent",
]
