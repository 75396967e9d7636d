"""Errors raised by tab host implementations."""


class HostError(Exception):
    """Base exception for host operations."""


class HostOperationError(HostError):
    """Raised when the host rejects a mutation (e.g. while the user drags a tab)."""


class TabNotFoundError(HostError):
    """Raised when a tab no longer exists."""


class GroupNotFoundError(HostError):
    """Raised when a group has been dissolved or never existed."""
