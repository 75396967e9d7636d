"""Event-driven service that keeps every window organized."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from tabharmony.config import ConfigError, TabHarmonyConfig, merge_overrides
from tabharmony.host.errors import HostError
from tabharmony.host.models import NO_GROUP
from tabharmony.host.protocols import TabHost
from tabharmony.organization.engine import OrganizationResult, WindowOrganizer
from tabharmony.organization.executor import OperationExecutor
from tabharmony.organization.models import OperationEvent
from tabharmony.session import SessionRegistry, WindowSession

from .events import HostEvent

LOGGER = logging.getLogger(__name__)


class OrganizerService:
    """Dispatch host events to organizing runs and collapse checks.

    Runs for the same window never interleave: a new run cancels the in-flight
    one and waits for it to unwind before reading a fresh snapshot. Windows are
    independent of each other.
    """

    def __init__(
        self,
        host: TabHost,
        config: TabHarmonyConfig,
        *,
        on_result: Optional[Callable[[OrganizationResult], None]] = None,
    ) -> None:
        """Initialize the service.

        Args:
            host: Tab host used for reading and mutating windows.
            config: Configuration snapshot applied to subsequent runs.
            on_result: Optional callback invoked with each completed run.
        """
        self._host = host
        self._config = config
        self._on_result = on_result
        self._sessions = SessionRegistry(config.collapse.limit)

    # ------------------------------------------------------------------ #
    # Public API                                                         #
    # ------------------------------------------------------------------ #

    @property
    def config(self) -> TabHarmonyConfig:
        return self._config

    @property
    def sessions(self) -> SessionRegistry:
        return self._sessions

    async def handle(self, event: HostEvent) -> None:
        """Route a host event to the matching reaction."""
        if event.kind == "config_changed":
            try:
                config = merge_overrides(self._config, event.changes)
            except ConfigError as exc:
                LOGGER.warning("Ignoring invalid configuration change: %s", exc)
                return
            self.apply_config(config)
            return
        if event.window_id is None:
            LOGGER.debug("Ignoring %s event without a window id", event.kind)
            return

        if event.kind == "window_removed":
            self._sessions.close(event.window_id)
            return

        session = self._sessions.ensure(event.window_id)
        if event.kind == "tab_created":
            if event.tab_id is not None and event.url is not None:
                session.locator_changed(event.tab_id, event.url)
            self.schedule_run(event.window_id)
        elif event.kind == "tab_updated":
            if event.tab_id is None or event.url is None:
                return
            if session.locator_changed(event.tab_id, event.url):
                self.schedule_run(event.window_id)
        elif event.kind == "tab_removed":
            if event.tab_id is not None:
                session.locators.pop(event.tab_id, None)
            if not event.window_closing:
                self.schedule_run(event.window_id)
        elif event.kind == "tab_activated":
            if self._config.collapse.enabled and event.tab_id is not None:
                self._schedule_collapse(session, event.tab_id)

    def apply_config(self, config: TabHarmonyConfig) -> None:
        """Swap in a new configuration and re-organize every known window."""
        self._config = config
        self._sessions.resize(config.collapse.limit)
        for session in self._sessions:
            self.schedule_run(session.window_id)

    def schedule_run(self, window_id: int) -> asyncio.Task:
        """Start an organizing run for ``window_id``, superseding any in-flight run."""
        session = self._sessions.ensure(window_id)
        previous = session.run_task
        if previous is not None and not previous.done():
            LOGGER.debug("Superseding in-flight run for window %d", window_id)
            previous.cancel()
        session.runs += 1
        task = asyncio.create_task(
            self._run(window_id, previous), name=f"organize-window-{window_id}"
        )
        session.run_task = task
        return task

    async def collapse_idle_groups(
        self, window_id: int, active_group_id: int
    ) -> list[OperationEvent]:
        """Touch the active group and collapse expanded groups that fell out of recency."""
        session = self._sessions.ensure(window_id)
        session.recency.touch(active_group_id)
        expanded = await self._host.query_groups(window_id, collapsed=False)
        idle = [group.id for group in expanded if session.recency.should_collapse(group.id)]
        if not idle:
            return []
        return await OperationExecutor(self._host, self._host).collapse(idle)

    async def wait_idle(self) -> None:
        """Wait until no run or collapse task is pending in any window."""
        while True:
            pending = [task for session in self._sessions for task in session.pending_tasks()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel all pending work and drop every session."""
        pending: list[asyncio.Task] = []
        for session in self._sessions:
            pending.extend(session.pending_tasks())
            self._sessions.close(session.window_id)
        await asyncio.gather(*pending, return_exceptions=True)

    # ------------------------------------------------------------------ #
    # Internal helpers                                                   #
    # ------------------------------------------------------------------ #

    async def _run(
        self, window_id: int, previous: Optional[asyncio.Task]
    ) -> Optional[OrganizationResult]:
        if previous is not None:
            await asyncio.gather(previous, return_exceptions=True)

        organizer = WindowOrganizer(self._host, self._config)
        try:
            result = await organizer.organize(window_id)
        except HostError as exc:
            LOGGER.warning("Organizing window %d failed: %s", window_id, exc)
            return None

        if result.failures:
            LOGGER.warning(
                "Window %d: %d operation(s) failed; the next event will retry",
                window_id,
                len(result.failures),
            )
        if self._on_result is not None:
            self._on_result(result)
        return result

    def _schedule_collapse(self, session: WindowSession, tab_id: int) -> None:
        if session.collapse_task is not None and not session.collapse_task.done():
            session.collapse_task.cancel()
        session.collapse_task = asyncio.create_task(
            self._collapse_later(session.window_id, tab_id),
            name=f"collapse-window-{session.window_id}",
        )

    async def _collapse_later(self, window_id: int, tab_id: int) -> list[OperationEvent]:
        # Give an in-progress drag a moment to finish before reading group state.
        await asyncio.sleep(self._config.collapse.grace_seconds)
        try:
            tabs = await self._host.list_tabs(window_id, pinned=False)
            active_group = next((tab.group_id for tab in tabs if tab.id == tab_id), NO_GROUP)
            return await self.collapse_idle_groups(window_id, active_group)
        except HostError as exc:
            LOGGER.warning("Collapse check for window %d failed: %s", window_id, exc)
            return []


__all__ = ["OrganizerService"]
