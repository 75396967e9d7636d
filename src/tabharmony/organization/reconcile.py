"""Diff logical groups against the host's physical groups.

Reconciliation is pure: it reads a snapshot of physical groups taken by the
caller and returns a :class:`GroupPlan`. A group id missing from the snapshot
is stale (the group was dissolved) and is treated as absent.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Optional, Sequence

from tabharmony.config.models import GroupColor, GroupColorRule
from tabharmony.host.models import NO_GROUP, GroupRecord

from .keys import NUMERIC_HOST
from .models import (
    CreateGroupOperation,
    GroupPlan,
    LogicalGroup,
    RecolorOperation,
    RetargetOperation,
    UngroupOperation,
)


class ColorResolver:
    """Resolve group colors by longest matching label prefix."""

    def __init__(self, rules: Iterable[GroupColorRule] = ()) -> None:
        self._colors: dict[tuple[str, ...], GroupColor] = {}
        for rule in rules:
            labels = _prefix_labels(rule.prefix)
            if labels:
                self._colors.setdefault(labels, rule.color)

    def resolve(self, name: str) -> Optional[GroupColor]:
        """Return the color of the longest rule prefix of ``name``, if any."""
        labels = tuple(name.strip().lower().split())
        color: Optional[GroupColor] = None
        for length in range(1, len(labels) + 1):
            color = self._colors.get(labels[:length], color)
        return color


def _prefix_labels(prefix: str) -> tuple[str, ...]:
    """Split a rule prefix into group name labels.

    Prefixes may separate labels with dots or spaces. A numeric host keeps its
    dots because a group name carries it as a single label.
    """
    labels: list[str] = []
    for token in prefix.strip().lower().split():
        if NUMERIC_HOST.match(token):
            labels.append(token)
        else:
            labels.extend(label for label in token.split(".") if label)
    return tuple(labels)


class GroupReconciler:
    """Compute the minimal grouping operations for a window."""

    def __init__(self, color_rules: Iterable[GroupColorRule] = ()) -> None:
        self._colors = ColorResolver(color_rules)

    def build_plan(
        self,
        groups: Sequence[LogicalGroup],
        physical: Mapping[int, GroupRecord],
    ) -> GroupPlan:
        """Return the operations that converge ``physical`` onto ``groups``.

        Args:
            groups: Logical groups computed for the window.
            physical: Snapshot of the physical groups referenced by the items.

        Returns:
            GroupPlan: Empty when the window already matches.
        """
        plan = GroupPlan()
        for group in groups:
            if group.materialized and not group.is_unknown:
                self._enforce_group(plan, group, physical)
            else:
                self._enforce_ungrouped(plan, group)
        return plan

    # ------------------------------------------------------------------ #
    # Helpers                                                            #
    # ------------------------------------------------------------------ #

    def _enforce_ungrouped(self, plan: GroupPlan, group: LogicalGroup) -> None:
        grouped = [item.id for item in group.items if item.current_group_id != NO_GROUP]
        if grouped:
            plan.ungroups.append(UngroupOperation(name=group.name, tab_ids=grouped))

    def _enforce_group(
        self,
        plan: GroupPlan,
        group: LogicalGroup,
        physical: Mapping[int, GroupRecord],
    ) -> None:
        if not group.items:
            return
        color = self._colors.resolve(group.name)
        target = self._find_target(group, physical)
        if target is None:
            plan.creates.append(
                CreateGroupOperation(name=group.name, tab_ids=group.item_ids, color=color)
            )
            return

        strays = [item.id for item in group.items if item.current_group_id != target.id]
        if strays:
            plan.retargets.append(
                RetargetOperation(
                    group_id=target.id,
                    name=group.name,
                    tab_ids=strays,
                    member_ids=group.item_ids,
                    color=color,
                )
            )
        if color is not None and color != target.color:
            plan.recolors.append(RecolorOperation(group_id=target.id, name=group.name, color=color))

    def _find_target(
        self,
        group: LogicalGroup,
        physical: Mapping[int, GroupRecord],
    ) -> Optional[GroupRecord]:
        seen: set[int] = set()
        for item in group.items:
            group_id = item.current_group_id
            if group_id == NO_GROUP or group_id in seen:
                continue
            seen.add(group_id)
            record = physical.get(group_id)
            if record is not None and record.title == group.name:
                return record
        return None


__all__ = ["ColorResolver", "GroupReconciler"]
