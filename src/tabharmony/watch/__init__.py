"""Event-driven organizer service."""

from .events import EventKind, HostEvent
from .service import OrganizerService

__all__ = ["EventKind", "HostEvent", "OrganizerService"]
