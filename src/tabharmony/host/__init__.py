"""Tab host collaborators: records, protocols, errors, and an in-memory host."""

from .errors import GroupNotFoundError, HostError, HostOperationError, TabNotFoundError
from .memory import InMemoryHost
from .models import NO_GROUP, GroupRecord, HostSnapshot, TabRecord, WindowSnapshot
from .protocols import GroupMutator, GroupStore, ItemMover, ItemSource, TabHost

__all__ = [
    "NO_GROUP",
    "TabRecord",
    "GroupRecord",
    "WindowSnapshot",
    "HostSnapshot",
    "ItemSource",
    "ItemMover",
    "GroupStore",
    "GroupMutator",
    "TabHost",
    "InMemoryHost",
    "HostError",
    "HostOperationError",
    "TabNotFoundError",
    "GroupNotFoundError",
]
