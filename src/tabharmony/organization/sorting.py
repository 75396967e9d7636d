"""Total ordering over items and logical groups.

Strings are compared with the Unicode Collation Algorithm (root order):
punctuation before digits before letters, accents at the secondary level and
lowercase before uppercase at the tertiary level.
"""

from __future__ import annotations

from functools import cmp_to_key, lru_cache
from typing import Iterable, Sequence

from pyuca import Collator

from .models import GroupAssignment, Item, LogicalGroup


@lru_cache(maxsize=1)
def _collator() -> Collator:
    return Collator()


@lru_cache(maxsize=4096)
def collation_key(value: str) -> tuple[tuple[int, ...], str]:
    """Return the collation sort key of ``value``.

    The raw string breaks ties, so distinct strings never compare equal.
    """
    return tuple(_collator().sort_key(value)), value


def collate(left: str, right: str) -> int:
    """Compare two strings with :func:`collation_key`; returns -1, 0, or 1."""
    left_key = collation_key(left)
    right_key = collation_key(right)
    return (left_key > right_key) - (left_key < right_key)


def compare_items(left: Item, right: Item) -> int:
    """Compare two items: labels, then label count, then path, then position.

    Unparsed items sort ahead of parsed ones.
    """
    if left.key is None or right.key is None:
        if left.key is not None:
            return 1
        if right.key is not None:
            return -1
        return _compare_positions(left, right)

    left_labels = left.key.labels
    right_labels = right.key.labels
    for left_label, right_label in zip(left_labels, right_labels):
        result = collate(left_label, right_label)
        if result:
            return result

    if len(left_labels) != len(right_labels):
        return -1 if len(left_labels) < len(right_labels) else 1

    result = collate(left.key.path, right.key.path)
    if result:
        return result
    return _compare_positions(left, right)


def _compare_positions(left: Item, right: Item) -> int:
    left_pos = (left.current_index, left.id)
    right_pos = (right.current_index, right.id)
    return (left_pos > right_pos) - (left_pos < right_pos)


def sort_items(items: Iterable[Item]) -> list[Item]:
    return sorted(items, key=cmp_to_key(compare_items))


def order_groups(assignment: GroupAssignment) -> list[LogicalGroup]:
    """Return every group with sorted members, groups ordered by name.

    The unknown bucket has an empty name and therefore always comes first.
    """
    ordered = sorted(assignment.all_groups(), key=lambda group: collation_key(group.name))
    return [
        LogicalGroup(name=group.name, items=tuple(sort_items(group.items)), materialized=group.materialized)
        for group in ordered
    ]


def flatten(groups: Sequence[LogicalGroup]) -> list[Item]:
    return [item for group in groups for item in group.items]


__all__ = ["collation_key", "collate", "compare_items", "sort_items", "order_groups", "flatten"]
