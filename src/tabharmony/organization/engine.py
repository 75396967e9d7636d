"""One organizing run for a single window."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

from tabharmony.config.models import TabHarmonyConfig
from tabharmony.host.errors import GroupNotFoundError, HostError
from tabharmony.host.models import NO_GROUP, GroupRecord
from tabharmony.host.protocols import TabHost

from .executor import OperationExecutor
from .keys import KeyExtractor
from .models import GroupPlan, Item, LogicalGroup, MovePlan, OperationEvent
from .planner import PlacementPlanner
from .reconcile import GroupReconciler
from .sorting import order_groups
from .tree import assign_groups, flat_assignment

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class OrganizationResult:
    """Outcome of an organizing run.

    Attributes:
        window_id: Window that was organized.
        groups: Logical groups in final order.
        move_plan: Moves computed for the run.
        group_plan: Grouping operations computed after the moves.
        events: Host operations issued (empty for dry runs).
        pinned_count: Number of pinned tabs excluded from organizing.
        elapsed_ms: Wall-clock duration of the run.
        dry_run: Whether operations were computed without being applied.
    """

    window_id: int
    groups: list[LogicalGroup]
    move_plan: MovePlan
    group_plan: GroupPlan
    events: list[OperationEvent] = field(default_factory=list)
    pinned_count: int = 0
    elapsed_ms: float = 0.0
    dry_run: bool = False

    @property
    def item_count(self) -> int:
        return sum(len(group.items) for group in self.groups)

    @property
    def failures(self) -> list[OperationEvent]:
        return [event for event in self.events if event.status == "failed"]


def build_layout(items: Iterable[Item], config: TabHarmonyConfig) -> list[LogicalGroup]:
    """Assign items to logical groups and put everything in final order."""
    if config.grouping.enabled:
        assignment = assign_groups(items, config.grouping.threshold)
    else:
        assignment = flat_assignment(items)
    return order_groups(assignment)


class WindowOrganizer:
    """Sort and group the tabs of a window against a host.

    The organizer holds no state between runs beyond the configuration
    snapshot it was created with.
    """

    def __init__(self, host: TabHost, config: TabHarmonyConfig) -> None:
        self._host = host
        self._config = config
        self._extractor = KeyExtractor(config.grouping.alt_domain_rules)
        self._planner = PlacementPlanner()
        self._reconciler = GroupReconciler(config.grouping.color_rules)
        self._executor = OperationExecutor(host, host)

    async def organize(self, window_id: int, *, dry_run: bool = False) -> OrganizationResult:
        """Converge the window's tab order and groups onto the computed layout.

        Args:
            window_id: Window to organize.
            dry_run: When true, compute both plans without touching the host.

        Returns:
            OrganizationResult: Plans and operation events for the run.
        """
        started = time.monotonic()
        tabs = await self._host.list_tabs(window_id, pinned=False)
        pinned = await self._host.list_tabs(window_id, pinned=True)

        items = [self._extractor.item_for(tab) for tab in tabs]
        groups = build_layout(items, self._config)

        move_plan = MovePlan(offset=len(pinned))
        if self._config.sorting.enabled:
            move_plan = self._planner.build_plan(groups, offset=len(pinned))

        events: list[OperationEvent] = []
        if not dry_run and move_plan.moves:
            events.extend(await self._executor.apply_moves(move_plan))
            groups = await self._refresh_membership(window_id, groups)

        group_plan = GroupPlan()
        if self._config.grouping.enabled:
            physical = await self._snapshot_groups(_group_ids(groups))
            group_plan = self._reconciler.build_plan(groups, physical)
            if not dry_run and not group_plan.is_empty:
                events.extend(await self._executor.apply_groups(group_plan, window_id))

        elapsed_ms = (time.monotonic() - started) * 1000
        LOGGER.info("Reorganized %d tabs in %d ms", len(items), elapsed_ms)
        return OrganizationResult(
            window_id=window_id,
            groups=groups,
            move_plan=move_plan,
            group_plan=group_plan,
            events=events,
            pinned_count=len(pinned),
            elapsed_ms=elapsed_ms,
            dry_run=dry_run,
        )

    async def _refresh_membership(
        self, window_id: int, groups: Sequence[LogicalGroup]
    ) -> list[LogicalGroup]:
        """Re-read group ids and indices after moving, since a host may regroup moved tabs.

        Tabs closed in the meantime are dropped. A group left below the threshold
        is no longer materialized and a group left empty is removed.
        """
        threshold = max(1, self._config.grouping.threshold)
        current = {tab.id: tab for tab in await self._host.list_tabs(window_id, pinned=False)}
        refreshed: list[LogicalGroup] = []
        for group in groups:
            members = []
            for item in group.items:
                tab = current.get(item.id)
                if tab is None:
                    continue
                members.append(
                    Item(
                        id=item.id,
                        current_index=tab.index,
                        current_group_id=tab.group_id,
                        key=item.key,
                    )
                )
            if not members:
                continue
            materialized = group.materialized and len(members) >= threshold
            refreshed.append(LogicalGroup(group.name, tuple(members), materialized))
        return refreshed

    async def _snapshot_groups(self, group_ids: Sequence[int]) -> Mapping[int, GroupRecord]:
        results = await asyncio.gather(
            *(self._host.get_group(group_id) for group_id in group_ids),
            return_exceptions=True,
        )
        snapshot: dict[int, GroupRecord] = {}
        for group_id, result in zip(group_ids, results):
            if isinstance(result, GroupRecord):
                snapshot[group_id] = result
            elif isinstance(result, GroupNotFoundError):
                LOGGER.debug("Group %d vanished before reconciliation", group_id)
            elif isinstance(result, HostError):
                LOGGER.warning("Could not read group %d: %s", group_id, result)
            else:
                raise result
        return snapshot


def _group_ids(groups: Sequence[LogicalGroup]) -> list[int]:
    seen: dict[int, None] = {}
    for group in groups:
        for item in group.items:
            if item.current_group_id != NO_GROUP:
                seen.setdefault(item.current_group_id, None)
    return list(seen)


__all__ = ["OrganizationResult", "WindowOrganizer", "build_layout"]
