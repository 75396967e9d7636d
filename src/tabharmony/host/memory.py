"""In-memory tab host used by the CLI and the test-suite."""

from __future__ import annotations

import asyncio
import itertools
from dataclasses import dataclass, field
from typing import Optional, Sequence

from tabharmony.config.models import GroupColor

from .errors import GroupNotFoundError, TabNotFoundError
from .models import NO_GROUP, GroupRecord, HostSnapshot, TabRecord, WindowSnapshot


@dataclass(slots=True)
class _WindowState:
    id: int
    tabs: list[TabRecord] = field(default_factory=list)
    groups: dict[int, GroupRecord] = field(default_factory=dict)


class InMemoryHost:
    """Browser-like tab host backed by plain Python state.

    Tabs keep contiguous indices per window with pinned tabs first, and a group
    is dissolved as soon as its last tab leaves it, as browsers do.
    """

    def __init__(self, snapshot: HostSnapshot | None = None) -> None:
        self._windows: dict[int, _WindowState] = {}
        self._tab_ids = itertools.count(1)
        self._group_ids = itertools.count(1)
        self.operation_count = 0
        if snapshot is not None:
            self._load(snapshot)

    @classmethod
    def from_snapshot(cls, snapshot: HostSnapshot) -> "InMemoryHost":
        return cls(snapshot)

    # ------------------------------------------------------------------ #
    # Host protocol                                                      #
    # ------------------------------------------------------------------ #

    async def list_tabs(self, window_id: int, *, pinned: bool) -> list[TabRecord]:
        await asyncio.sleep(0)
        window = self._windows.get(window_id)
        if window is None:
            return []
        return [tab.model_copy() for tab in window.tabs if tab.pinned == pinned]

    async def move_tab(self, tab_id: int, index: int) -> None:
        await asyncio.sleep(0)
        window, tab = self._find_tab(tab_id)
        window.tabs.remove(tab)
        pinned_count = sum(1 for other in window.tabs if other.pinned)
        if tab.pinned:
            index = min(max(index, 0), pinned_count)
        else:
            index = min(max(index, pinned_count), len(window.tabs))
        window.tabs.insert(index, tab)
        self._reindex(window)
        self.operation_count += 1

    async def get_group(self, group_id: int) -> GroupRecord:
        await asyncio.sleep(0)
        for window in self._windows.values():
            group = window.groups.get(group_id)
            if group is not None:
                return group.model_copy()
        raise GroupNotFoundError(f"No group with id {group_id}.")

    async def query_groups(
        self, window_id: int, *, collapsed: Optional[bool] = None
    ) -> list[GroupRecord]:
        await asyncio.sleep(0)
        window = self._windows.get(window_id)
        if window is None:
            return []
        return [
            group.model_copy()
            for group in window.groups.values()
            if collapsed is None or group.collapsed == collapsed
        ]

    async def create_group(self, window_id: int, tab_ids: Sequence[int]) -> int:
        await asyncio.sleep(0)
        window = self._window(window_id)
        group = GroupRecord(id=next(self._group_ids), window_id=window_id)
        window.groups[group.id] = group
        self._assign(window, tab_ids, group.id)
        self.operation_count += 1
        return group.id

    async def retarget(self, tab_ids: Sequence[int], group_id: int) -> None:
        await asyncio.sleep(0)
        window = self._window_of_group(group_id)
        self._assign(window, tab_ids, group_id)
        self.operation_count += 1

    async def update_group(
        self,
        group_id: int,
        *,
        title: Optional[str] = None,
        color: Optional[GroupColor] = None,
        collapsed: Optional[bool] = None,
    ) -> None:
        await asyncio.sleep(0)
        window = self._window_of_group(group_id)
        group = window.groups[group_id]
        if title is not None:
            group.title = title
        if color is not None:
            group.color = color
        if collapsed is not None:
            group.collapsed = collapsed
        self.operation_count += 1

    async def ungroup(self, tab_ids: Sequence[int]) -> None:
        await asyncio.sleep(0)
        touched: set[int] = set()
        for tab_id in tab_ids:
            window, tab = self._find_tab(tab_id)
            tab.group_id = NO_GROUP
            touched.add(window.id)
        for window_id in touched:
            self._dissolve_empty(self._windows[window_id])
        self.operation_count += 1

    # ------------------------------------------------------------------ #
    # Simulation helpers                                                 #
    # ------------------------------------------------------------------ #

    def open_tab(
        self,
        window_id: int,
        url: str,
        *,
        index: Optional[int] = None,
        pinned: bool = False,
    ) -> TabRecord:
        """Open a tab (appended unless ``index`` is given) and return it."""
        window = self._windows.setdefault(window_id, _WindowState(id=window_id))
        tab = TabRecord(id=next(self._tab_ids), window_id=window_id, url=url, pinned=pinned)
        position = len(window.tabs) if index is None else index
        window.tabs.insert(position, tab)
        self._reindex(window)
        return tab.model_copy()

    def navigate(self, tab_id: int, url: str) -> None:
        _, tab = self._find_tab(tab_id)
        tab.url = url

    def close_tab(self, tab_id: int) -> None:
        window, tab = self._find_tab(tab_id)
        window.tabs.remove(tab)
        self._dissolve_empty(window)
        self._reindex(window)

    def tab(self, tab_id: int) -> TabRecord:
        return self._find_tab(tab_id)[1].model_copy()

    def snapshot(self) -> HostSnapshot:
        """Return a deep copy of the current host state."""
        return HostSnapshot(
            windows=[
                WindowSnapshot(
                    id=window.id,
                    tabs=[tab.model_copy() for tab in window.tabs],
                    groups=[group.model_copy() for group in window.groups.values()],
                )
                for window in self._windows.values()
            ]
        )

    # ------------------------------------------------------------------ #
    # Internal helpers                                                   #
    # ------------------------------------------------------------------ #

    def _load(self, snapshot: HostSnapshot) -> None:
        max_tab = 0
        max_group = 0
        for window_snapshot in snapshot.windows:
            window = _WindowState(id=window_snapshot.id)
            for group in window_snapshot.groups:
                window.groups[group.id] = group.model_copy(update={"window_id": window.id})
                max_group = max(max_group, group.id)
            ordered = sorted(window_snapshot.tabs, key=lambda tab: (not tab.pinned, tab.index))
            for tab in ordered:
                group_id = tab.group_id if tab.group_id in window.groups else NO_GROUP
                window.tabs.append(
                    tab.model_copy(update={"window_id": window.id, "group_id": group_id})
                )
                max_tab = max(max_tab, tab.id)
            self._dissolve_empty(window)
            self._reindex(window)
            self._windows[window.id] = window
        self._tab_ids = itertools.count(max_tab + 1)
        self._group_ids = itertools.count(max_group + 1)

    def _window(self, window_id: int) -> _WindowState:
        window = self._windows.get(window_id)
        if window is None:
            raise TabNotFoundError(f"No window with id {window_id}.")
        return window

    def _window_of_group(self, group_id: int) -> _WindowState:
        for window in self._windows.values():
            if group_id in window.groups:
                return window
        raise GroupNotFoundError(f"No group with id {group_id}.")

    def _find_tab(self, tab_id: int) -> tuple[_WindowState, TabRecord]:
        for window in self._windows.values():
            for tab in window.tabs:
                if tab.id == tab_id:
                    return window, tab
        raise TabNotFoundError(f"No tab with id {tab_id}.")

    def _assign(self, window: _WindowState, tab_ids: Sequence[int], group_id: int) -> None:
        wanted = set(tab_ids)
        for tab in window.tabs:
            if tab.id in wanted:
                tab.group_id = group_id
                wanted.discard(tab.id)
        if wanted:
            raise TabNotFoundError(f"Tabs not in window {window.id}: {sorted(wanted)}")
        self._dissolve_empty(window)

    def _dissolve_empty(self, window: _WindowState) -> None:
        used = {tab.group_id for tab in window.tabs}
        for group_id in list(window.groups):
            if group_id not in used:
                del window.groups[group_id]

    @staticmethod
    def _reindex(window: _WindowState) -> None:
        for position, tab in enumerate(window.tabs):
            tab.index = position


__all__ = ["InMemoryHost"]
