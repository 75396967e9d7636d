"""Host events consumed by the organizer service."""

from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

EventKind = Literal[
    "tab_created",
    "tab_updated",
    "tab_removed",
    "tab_activated",
    "window_removed",
    "config_changed",
]


class HostEvent(BaseModel):
    """A notification from the tab host.

    Attributes:
        kind: Event type.
        window_id: Window the event belongs to (absent for configuration changes).
        tab_id: Tab the event refers to, when applicable.
        url: Tab URL reported with created/updated events.
        status: Loading status reported with updated events.
        window_closing: Set on ``tab_removed`` when the whole window is closing.
        changes: Dotted-key configuration overrides for ``config_changed``.
    """

    kind: EventKind
    window_id: Optional[int] = None
    tab_id: Optional[int] = None
    url: Optional[str] = None
    status: Optional[str] = None
    window_closing: bool = False
    changes: Dict[str, Any] = Field(default_factory=dict)


__all__ = ["EventKind", "HostEvent"]
