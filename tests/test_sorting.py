"""Tests for item and group ordering."""

from __future__ import annotations

import itertools
from typing import Optional

from tabharmony.organization.models import (
    GroupAssignment,
    HierarchicalKey,
    Item,
    LogicalGroup,
)
from tabharmony.organization.sorting import (
    collate,
    compare_items,
    flatten,
    order_groups,
    sort_items,
)


def _item(item_id: int, labels: Optional[tuple[str, ...]], path: str = "", index: int = 0) -> Item:
    key = HierarchicalKey(labels=labels, path=path) if labels is not None else None
    return Item(id=item_id, current_index=index, key=key)


def test_collate_compares_letters_before_case_and_accents() -> None:
    assert collate("apple", "Banana") < 0
    assert collate("éclair", "ezine") < 0
    assert collate("Zeta", "alpha") > 0
    assert collate("same", "same") == 0


def test_collate_follows_root_collation_order() -> None:
    # Punctuation sorts before digits, digits before letters.
    assert collate("a_b", "a1b") < 0
    assert collate("a-b", "a1b") < 0
    assert collate("a1b", "aab") < 0
    # Lowercase precedes uppercase when nothing else differs.
    assert collate("same", "Same") < 0
    assert collate("resume", "résumé") < 0
    assert collate("résumé", "resumes") < 0


def test_shorter_label_prefix_sorts_first() -> None:
    parent = _item(1, ("google",), "/z", index=5)
    child = _item(2, ("google", "mail"), "/a", index=0)

    assert compare_items(parent, child) < 0
    assert [item.id for item in sort_items([child, parent])] == [1, 2]


def test_labels_are_compared_before_path() -> None:
    first = _item(1, ("example", "api"), "/zzz")
    second = _item(2, ("example", "www"), "/aaa")

    assert [item.id for item in sort_items([second, first])] == [1, 2]


def test_path_breaks_ties_between_equal_labels() -> None:
    later = _item(1, ("python", "docs"), "/3/library/", index=0)
    earlier = _item(2, ("python", "docs"), "/3/index.html", index=1)

    assert [item.id for item in sort_items([later, earlier])] == [2, 1]


def test_identical_keys_keep_current_order() -> None:
    items = [_item(item_id, ("example",), "/same", index=10 - item_id) for item_id in (1, 2, 3)]

    assert [item.id for item in sort_items(items)] == [3, 2, 1]


def test_unparsed_items_sort_first() -> None:
    parsed = _item(1, ("aardvark",), "/", index=0)
    unparsed = _item(2, None, index=9)

    assert compare_items(unparsed, parsed) < 0
    assert compare_items(parsed, unparsed) > 0


def test_comparison_is_a_total_order() -> None:
    items = [
        _item(1, ("google",), "/"),
        _item(2, ("google", "mail"), "/"),
        _item(3, ("Google", "maps"), "/x", index=1),
        _item(4, None, index=2),
        _item(5, ("stackoverflow",), "/q", index=3),
        _item(6, ("google",), "/", index=4),
    ]

    for left, right in itertools.permutations(items, 2):
        assert compare_items(left, right) == -compare_items(right, left)
        assert compare_items(left, right) != 0
    for a, b, c in itertools.permutations(items, 3):
        if compare_items(a, b) < 0 and compare_items(b, c) < 0:
            assert compare_items(a, c) < 0


def test_order_groups_puts_unknown_first_and_sorts_members() -> None:
    assignment = GroupAssignment(
        unknown=LogicalGroup("", (_item(9, None, index=3),)),
        groups=(
            LogicalGroup(
                "stackoverflow",
                (_item(3, ("stackoverflow",), "/q/2"), _item(4, ("stackoverflow",), "/q/1")),
                materialized=True,
            ),
            LogicalGroup("github", (_item(5, ("github",), "/"),)),
            LogicalGroup("Google", (_item(6, ("google",), "/"),), materialized=True),
        ),
    )

    ordered = order_groups(assignment)

    assert [group.name for group in ordered] == ["", "github", "Google", "stackoverflow"]
    assert [item.id for item in ordered[-1].items] == [4, 3]
    assert ordered[-1].materialized
    assert [item.id for item in flatten(ordered)] == [9, 5, 6, 4, 3]
