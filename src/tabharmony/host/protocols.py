"""Interfaces the organizer consumes from a tab host.

Every operation is a coroutine so hosts backed by a browser bridge can suspend
while the browser applies the change.
"""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from tabharmony.config.models import GroupColor

from .models import GroupRecord, TabRecord


class ItemSource(Protocol):
    """Enumerates the tabs of a window."""

    async def list_tabs(self, window_id: int, *, pinned: bool) -> list[TabRecord]:
        """Return the window's pinned or unpinned tabs in tab-strip order."""
        ...


class ItemMover(Protocol):
    """Moves tabs within their window."""

    async def move_tab(self, tab_id: int, index: int) -> None:
        """Move a tab to ``index``, shifting the tabs in between."""
        ...


class GroupStore(Protocol):
    """Reads physical group state."""

    async def get_group(self, group_id: int) -> GroupRecord:
        """Return the group.

        Raises:
            GroupNotFoundError: If the group no longer exists.
        """
        ...

    async def query_groups(
        self, window_id: int, *, collapsed: Optional[bool] = None
    ) -> list[GroupRecord]:
        """Return the window's groups, optionally filtered by collapse state."""
        ...


class GroupMutator(Protocol):
    """Creates, fills, updates, and dissolves physical groups."""

    async def create_group(self, window_id: int, tab_ids: Sequence[int]) -> int:
        """Group ``tab_ids`` into a new group and return its id."""
        ...

    async def retarget(self, tab_ids: Sequence[int], group_id: int) -> None:
        """Move ``tab_ids`` into an existing group.

        Raises:
            GroupNotFoundError: If the group no longer exists.
        """
        ...

    async def update_group(
        self,
        group_id: int,
        *,
        title: Optional[str] = None,
        color: Optional[GroupColor] = None,
        collapsed: Optional[bool] = None,
    ) -> None:
        """Update the given group properties, leaving others unchanged."""
        ...

    async def ungroup(self, tab_ids: Sequence[int]) -> None:
        """Remove ``tab_ids`` from whatever group they belong to."""
        ...


class TabHost(ItemSource, ItemMover, GroupStore, GroupMutator, Protocol):
    """Full host surface used by the organizer service."""


__all__ = ["ItemSource", "ItemMover", "GroupStore", "GroupMutator", "TabHost"]
