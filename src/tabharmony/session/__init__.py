"""Per-window session state for the organizer service.

A window's session is created by the first event seen for that window and torn
down when the window is removed. It holds the only state that outlives a
single organizing run: the recency list, the per-tab URL cache, and handles to
the window's in-flight tasks.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Iterator, Optional

from .recency import RecencyTracker


@dataclass(slots=True)
class WindowSession:
    """Mutable state tracked for one window.

    Attributes:
        window_id: Window this session belongs to.
        recency: Recently activated groups of the window.
        locators: Last URL seen per tab id.
        run_task: In-flight organizing run, if any.
        collapse_task: Pending delayed collapse check, if any.
        runs: Number of organizing runs started for the window.
    """

    window_id: int
    recency: RecencyTracker
    locators: dict[int, str] = field(default_factory=dict)
    run_task: Optional[asyncio.Task] = None
    collapse_task: Optional[asyncio.Task] = None
    runs: int = 0

    def locator_changed(self, tab_id: int, url: str) -> bool:
        """Record ``url`` for ``tab_id`` and report whether it differs from the cache."""
        previous = self.locators.get(tab_id)
        self.locators[tab_id] = url
        return previous != url

    def pending_tasks(self) -> list[asyncio.Task]:
        return [task for task in (self.run_task, self.collapse_task) if task is not None and not task.done()]


class SessionRegistry:
    """Keyed store of :class:`WindowSession` objects."""

    def __init__(self, recency_limit: int) -> None:
        self._recency_limit = recency_limit
        self._sessions: dict[int, WindowSession] = {}

    def __contains__(self, window_id: object) -> bool:
        return window_id in self._sessions

    def __iter__(self) -> Iterator[WindowSession]:
        return iter(list(self._sessions.values()))

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, window_id: int) -> Optional[WindowSession]:
        return self._sessions.get(window_id)

    def ensure(self, window_id: int) -> WindowSession:
        """Return the window's session, creating it on first use."""
        session = self._sessions.get(window_id)
        if session is None:
            session = WindowSession(window_id=window_id, recency=RecencyTracker(self._recency_limit))
            self._sessions[window_id] = session
        return session

    def close(self, window_id: int) -> Optional[WindowSession]:
        """Drop the window's session and cancel its pending tasks."""
        session = self._sessions.pop(window_id, None)
        if session is not None:
            for task in session.pending_tasks():
                task.cancel()
        return session

    def resize(self, recency_limit: int) -> None:
        """Apply a new recency limit to every session."""
        self._recency_limit = recency_limit
        for session in self._sessions.values():
            session.recency.resize(recency_limit)


__all__ = ["RecencyTracker", "SessionRegistry", "WindowSession"]
