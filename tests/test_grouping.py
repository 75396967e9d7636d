"""Tests for the domain tree and group assignment."""

from __future__ import annotations

from typing import Sequence

import pytest

from tabharmony.organization import KeyExtractor
from tabharmony.organization.models import Item
from tabharmony.organization.tree import DomainTree, assign_groups, flat_assignment


def _items(urls: Sequence[str]) -> list[Item]:
    extractor = KeyExtractor()
    return [
        Item(id=index + 1, current_index=index, key=extractor.extract(url))
        for index, url in enumerate(urls)
    ]


def _by_name(items: Sequence[Item], threshold: int) -> dict[str, tuple[bool, set[int]]]:
    assignment = assign_groups(items, threshold)
    return {
        group.name: (group.materialized, set(group.item_ids))
        for group in assignment.all_groups()
    }


def test_four_subdomains_form_one_group() -> None:
    items = _items(
        [
            "https://a.google.com/",
            "https://b.google.com/",
            "https://c.google.com/",
            "https://d.google.com/",
        ]
    )

    assignment = assign_groups(items, threshold=4)

    assert assignment.unknown is None
    assert len(assignment.groups) == 1
    group = assignment.groups[0]
    assert group.name == "google"
    assert group.materialized
    assert sorted(group.item_ids) == [1, 2, 3, 4]


def test_ungrouped_items_aggregate_upwards() -> None:
    items = _items(
        [
            "https://x.y.example.com/1",
            "https://x.y.example.com/2",
            "https://x.y.example.com/3",
            "https://example.com/a",
            "https://example.com/b",
        ]
    )

    groups = _by_name(items, threshold=4)

    assert groups == {"example": (True, {1, 2, 3, 4, 5})}


def test_deepest_qualifying_node_wins() -> None:
    items = _items(
        [
            "https://mail.google.com/1",
            "https://mail.google.com/2",
            "https://www.google.com/search",
        ]
    )

    groups = _by_name(items, threshold=2)

    assert groups == {
        "google mail": (True, {1, 2}),
        "google": (False, {3}),
    }


def test_leftovers_stay_under_their_top_level_label() -> None:
    items = _items(
        [
            "https://news.ycombinator.com/",
            "https://github.com/org/repo",
            "https://gist.github.com/abc",
        ]
    )

    groups = _by_name(items, threshold=4)

    assert groups == {
        "ycombinator": (False, {1}),
        "github": (False, {2, 3}),
    }


def test_unparsed_items_go_to_unknown_bucket() -> None:
    items = _items(["chrome://newtab", "https://example.com/", "about:blank"])

    assignment = assign_groups(items, threshold=1)

    assert assignment.unknown is not None
    assert assignment.unknown.name == ""
    assert assignment.unknown.is_unknown
    assert not assignment.unknown.materialized
    assert sorted(assignment.unknown.item_ids) == [1, 3]
    assert [group.name for group in assignment.groups] == ["example"]


def test_threshold_below_one_behaves_like_one() -> None:
    items = _items(["https://example.com/", "https://example.org/"])

    assert _by_name(items, threshold=0) == _by_name(items, threshold=1)
    assert _by_name(items, threshold=0) == {"example": (True, {1, 2})}


@pytest.mark.parametrize("threshold", [1, 2, 3, 4, 8])
def test_every_item_lands_in_exactly_one_group(threshold: int) -> None:
    items = _items(
        [
            "https://a.google.com/",
            "https://b.google.com/",
            "https://maps.google.com/x",
            "https://maps.google.com/y",
            "https://stackoverflow.com/q/1",
            "http://10.0.0.1/",
            "chrome://settings",
            "https://docs.python.org/3/",
            "https://python.org/",
        ]
    )

    assignment = assign_groups(items, threshold)
    seen = [item_id for group in assignment.all_groups() for item_id in group.item_ids]

    assert sorted(seen) == [item.id for item in items]


def test_raising_threshold_never_adds_named_groups() -> None:
    items = _items(
        [
            "https://a.google.com/",
            "https://a.google.com/2",
            "https://b.google.com/",
            "https://maps.google.com/x",
            "https://maps.google.com/y",
            "https://stackoverflow.com/q/1",
            "https://stackoverflow.com/q/2",
        ]
    )

    counts = [assign_groups(items, threshold).named_group_count for threshold in range(1, 9)]

    assert counts == sorted(counts, reverse=True)
    assert counts[-1] == 0


def test_deep_label_chain_does_not_recurse() -> None:
    labels = ".".join(f"l{depth}" for depth in range(3000))
    items = _items([f"https://{labels}.example.com/"])

    assignment = assign_groups(items, threshold=1)

    assert len(assignment.groups) == 1
    assert assignment.groups[0].name.startswith("example l2999")


def test_tree_find_and_path_name() -> None:
    tree = DomainTree()
    for item in _items(["https://maps.google.com/", "https://google.com/"]):
        tree.insert(item)

    node = tree.find(["google", "maps"])

    assert node is not None
    assert len(node.child_items) == 1
    assert tree.path_name(tree.nodes[node.parent].child_nodes["maps"]) == "google maps"
    assert tree.find(["google", "mail"]) is None


def test_flat_assignment_keeps_single_section() -> None:
    items = _items(["https://b.example.com/", "chrome://newtab", "https://a.example.org/"])

    assignment = flat_assignment(items)

    assert assignment.unknown is not None and assignment.unknown.item_ids == [2]
    assert [(group.name, group.materialized) for group in assignment.groups] == [("*", False)]
    assert assignment.named_group_count == 0
