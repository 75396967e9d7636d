"""Placement planner: turn the target order into a short list of tab moves."""

from __future__ import annotations

from typing import Sequence

from .models import LogicalGroup, MoveOperation, MovePlan
from .sorting import flatten


class PlacementPlanner:
    """Derive move plans from ordered logical groups."""

    def build_plan(self, groups: Sequence[LogicalGroup], *, offset: int = 0) -> MovePlan:
        """Produce a move plan for the concatenated order of ``groups``.

        Args:
            groups: Logical groups in final order, members already sorted.
            offset: Number of leading tabs excluded from organizing (pinned tabs).

        Returns:
            MovePlan: Moves in application order, largest displacement first.
        """
        ordered = flatten(groups)
        candidates: list[MoveOperation] = []
        for position, item in enumerate(ordered):
            target = offset + position
            displacement = abs(target - item.current_index)
            if displacement == 0:
                continue
            candidates.append(
                MoveOperation(
                    tab_id=item.id,
                    current_index=item.current_index,
                    target_index=target,
                    displacement=displacement,
                )
            )
        candidates.sort(key=lambda move: move.displacement, reverse=True)

        strip = [item.id for item in sorted(ordered, key=lambda item: item.current_index)]
        plan = MovePlan(offset=offset)
        for move in candidates:
            if self._position(strip, move.tab_id, offset) == move.target_index:
                plan.skipped += 1
                continue
            self._simulate(strip, move, offset)
            plan.moves.append(move)

        # A later move can shift an already placed tab; settle those left to right.
        for position, item in enumerate(ordered):
            if strip[position] == item.id:
                continue
            move = MoveOperation(
                tab_id=item.id,
                current_index=item.current_index,
                target_index=offset + position,
                displacement=abs(offset + position - item.current_index),
            )
            self._simulate(strip, move, offset)
            plan.moves.append(move)
        return plan

    # ------------------------------------------------------------------ #
    # Helpers                                                            #
    # ------------------------------------------------------------------ #

    def _position(self, strip: list[int], tab_id: int, offset: int) -> int:
        return offset + strip.index(tab_id)

    def _simulate(self, strip: list[int], move: MoveOperation, offset: int) -> None:
        strip.remove(move.tab_id)
        slot = min(max(move.target_index - offset, 0), len(strip))
        strip.insert(slot, move.tab_id)


__all__ = ["PlacementPlanner"]
