"""Bounded most-recently-used list of group ids."""

from __future__ import annotations

from tabharmony.host.models import NO_GROUP


class RecencyTracker:
    """Track recently activated groups; anything that falls off may collapse."""

    def __init__(self, limit: int) -> None:
        self._limit = max(1, limit)
        self._entries: list[int] = []

    @property
    def limit(self) -> int:
        return self._limit

    def touch(self, group_id: int) -> None:
        """Mark ``group_id`` as most recently used, evicting the oldest entry if full."""
        if group_id == NO_GROUP:
            return
        if self._entries and self._entries[0] == group_id:
            return
        if group_id in self._entries:
            self._entries.remove(group_id)
        self._entries.insert(0, group_id)
        del self._entries[self._limit :]

    def should_collapse(self, group_id: int) -> bool:
        return group_id not in self._entries

    def resize(self, limit: int) -> None:
        self._limit = max(1, limit)
        del self._entries[self._limit :]

    def snapshot(self) -> list[int]:
        return list(self._entries)


__all__ = ["RecencyTracker"]
