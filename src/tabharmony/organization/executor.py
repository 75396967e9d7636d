"""Executor for move and grouping plans."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Literal, Optional, Sequence

from tabharmony.config.models import GroupColor
from tabharmony.host.errors import GroupNotFoundError, HostError
from tabharmony.host.protocols import GroupMutator, ItemMover

from .models import (
    CreateGroupOperation,
    GroupPlan,
    MovePlan,
    OperationEvent,
    RecolorOperation,
    RetargetOperation,
    UngroupOperation,
)

LOGGER = logging.getLogger(__name__)

OperationName = Literal["move", "create", "retarget", "recolor", "ungroup", "collapse"]


class OperationExecutor:
    """Apply plans through host collaborators, one operation at a time.

    A failed operation is logged and reported as a ``failed`` event; the rest
    of the plan still runs. Nothing is retried: the next organizing run
    converges whatever was left behind.
    """

    def __init__(self, mover: ItemMover, mutator: GroupMutator) -> None:
        self._mover = mover
        self._mutator = mutator

    async def apply_moves(self, plan: MovePlan) -> list[OperationEvent]:
        """Move tabs sequentially in plan order."""
        events: list[OperationEvent] = []
        for move in plan.moves:
            try:
                await self._mover.move_tab(move.tab_id, move.target_index)
            except HostError as exc:
                events.append(self._failure("move", exc, tab_ids=[move.tab_id]))
                continue
            events.append(
                OperationEvent(
                    operation="move",
                    tab_ids=[move.tab_id],
                    notes=[f"{move.current_index} -> {move.target_index}"],
                )
            )
        return events

    async def apply_groups(self, plan: GroupPlan, window_id: int) -> list[OperationEvent]:
        """Apply a grouping plan for ``window_id``.

        Ungroups are independent of each other and are issued together; group
        creation, retargeting, and recoloring run in order.
        """
        events = list(
            await asyncio.gather(*(self._ungroup(operation) for operation in plan.ungroups))
        )
        for create in plan.creates:
            events.append(await self._create(create, window_id))
        for retarget in plan.retargets:
            events.append(await self._retarget(retarget, window_id))
        for recolor in plan.recolors:
            events.append(await self._recolor(recolor))
        return events

    async def collapse(self, group_ids: Iterable[int]) -> list[OperationEvent]:
        """Collapse each of ``group_ids``; stale groups are reported as failures."""
        events: list[OperationEvent] = []
        for group_id in group_ids:
            try:
                await self._mutator.update_group(group_id, collapsed=True)
            except HostError as exc:
                events.append(self._failure("collapse", exc, group_id=group_id))
                continue
            events.append(OperationEvent(operation="collapse", group_id=group_id))
        return events

    # ------------------------------------------------------------------ #
    # Helpers                                                            #
    # ------------------------------------------------------------------ #

    async def _ungroup(self, operation: UngroupOperation) -> OperationEvent:
        try:
            await self._mutator.ungroup(operation.tab_ids)
        except HostError as exc:
            return self._failure("ungroup", exc, tab_ids=operation.tab_ids, name=operation.name)
        LOGGER.debug("Ungrouped %d tab(s) of %r", len(operation.tab_ids), operation.name)
        return OperationEvent(operation="ungroup", tab_ids=operation.tab_ids, name=operation.name)

    async def _create(self, operation: CreateGroupOperation, window_id: int) -> OperationEvent:
        try:
            group_id = await self._new_group(
                window_id, operation.tab_ids, operation.name, operation.color
            )
        except HostError as exc:
            return self._failure("create", exc, tab_ids=operation.tab_ids, name=operation.name)
        LOGGER.debug("Grouping %r - make new group %d", operation.name, group_id)
        return OperationEvent(
            operation="create",
            tab_ids=operation.tab_ids,
            group_id=group_id,
            name=operation.name,
        )

    async def _retarget(self, operation: RetargetOperation, window_id: int) -> OperationEvent:
        try:
            await self._mutator.retarget(operation.tab_ids, operation.group_id)
        except GroupNotFoundError:
            LOGGER.debug(
                "Group %d for %r disappeared; creating a new group instead",
                operation.group_id,
                operation.name,
            )
            members = operation.member_ids or operation.tab_ids
            try:
                group_id = await self._new_group(window_id, members, operation.name, operation.color)
            except HostError as exc:
                return self._failure("create", exc, tab_ids=members, name=operation.name)
            return OperationEvent(
                operation="create",
                status="downgraded",
                tab_ids=members,
                group_id=group_id,
                name=operation.name,
                notes=[f"group {operation.group_id} no longer exists"],
            )
        except HostError as exc:
            return self._failure(
                "retarget",
                exc,
                tab_ids=operation.tab_ids,
                group_id=operation.group_id,
                name=operation.name,
            )
        LOGGER.debug("Grouping %r - add to existing group %d", operation.name, operation.group_id)
        return OperationEvent(
            operation="retarget",
            tab_ids=operation.tab_ids,
            group_id=operation.group_id,
            name=operation.name,
        )

    async def _recolor(self, operation: RecolorOperation) -> OperationEvent:
        try:
            await self._mutator.update_group(operation.group_id, color=operation.color)
        except HostError as exc:
            return self._failure(
                "recolor", exc, group_id=operation.group_id, name=operation.name
            )
        return OperationEvent(
            operation="recolor",
            group_id=operation.group_id,
            name=operation.name,
            notes=[operation.color],
        )

    async def _new_group(
        self,
        window_id: int,
        tab_ids: Sequence[int],
        title: str,
        color: Optional[GroupColor],
    ) -> int:
        group_id = await self._mutator.create_group(window_id, tab_ids)
        await self._mutator.update_group(group_id, title=title, color=color)
        return group_id

    def _failure(
        self,
        operation: OperationName,
        exc: Exception,
        *,
        tab_ids: Sequence[int] = (),
        group_id: Optional[int] = None,
        name: Optional[str] = None,
    ) -> OperationEvent:
        LOGGER.warning("%s failed (%s): %s", operation, name or group_id or list(tab_ids), exc)
        return OperationEvent(
            operation=operation,
            status="failed",
            tab_ids=list(tab_ids),
            group_id=group_id,
            name=name,
            notes=[f"{exc.__class__.__name__}: {exc}"],
        )


__all__ = ["OperationExecutor"]
