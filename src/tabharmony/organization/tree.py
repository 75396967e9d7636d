"""Domain trie construction and bottom-up group assignment.

Nodes live in an arena (a flat list) and are addressed by index. A node is
always appended after its parent, so walking the arena from the highest index
down visits every child before its parent: a post-order traversal without
recursion, whatever the depth of the label chain.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

from .models import UNKNOWN_GROUP_NAME, GroupAssignment, Item, LogicalGroup

ROOT = 0


@dataclass(slots=True)
class DomainTreeNode:
    """One reversed-domain label in the trie; the root has an empty label."""

    label: str
    parent: Optional[int]
    depth: int
    child_items: list[Item] = field(default_factory=list)
    child_nodes: dict[str, int] = field(default_factory=dict)


class DomainTree:
    """Prefix trie over the reversed domain labels of parsed items."""

    def __init__(self) -> None:
        self.nodes: list[DomainTreeNode] = [DomainTreeNode(label="", parent=None, depth=0)]

    def insert(self, item: Item) -> int:
        """Place ``item`` at the node for its full label path and return that node."""
        index = ROOT
        for label in item.group_path_parts:
            node = self.nodes[index]
            child = node.child_nodes.get(label)
            if child is None:
                child = len(self.nodes)
                self.nodes.append(DomainTreeNode(label=label, parent=index, depth=node.depth + 1))
                node.child_nodes[label] = child
            index = child
        self.nodes[index].child_items.append(item)
        return index

    def find(self, labels: Iterable[str]) -> Optional[DomainTreeNode]:
        index = ROOT
        for label in labels:
            child = self.nodes[index].child_nodes.get(label)
            if child is None:
                return None
            index = child
        return self.nodes[index]

    def path_name(self, index: int) -> str:
        """Space-joined labels from the root down to ``index``."""
        labels: list[str] = []
        current: Optional[int] = index
        while current is not None and current != ROOT:
            node = self.nodes[current]
            labels.append(node.label)
            current = node.parent
        return " ".join(reversed(labels))

    def post_order(self) -> Iterator[int]:
        """Yield non-root node indices, children before parents."""
        return iter(range(len(self.nodes) - 1, ROOT, -1))


def build_tree(items: Iterable[Item]) -> tuple[DomainTree, list[Item]]:
    """Insert parsed items into a new trie; return it with the unparsed items."""
    tree = DomainTree()
    unparsed: list[Item] = []
    for item in items:
        if item.unparsed or not item.group_path_parts:
            unparsed.append(item)
        else:
            tree.insert(item)
    return tree, unparsed


def assign_groups(items: Iterable[Item], threshold: int) -> GroupAssignment:
    """Assign items to logical groups, preferring the deepest qualifying node.

    At each node the locally ungrouped items are its own items plus whatever
    its children handed up. When they reach ``threshold`` a materialized group
    is created there and nothing is handed up. Items that reach a top-level
    node without qualifying form a non-materialized section named after that
    label; the root never forms a group.
    """
    threshold = max(1, threshold)
    tree, unparsed = build_tree(items)

    pending: dict[int, list[Item]] = {}
    groups: list[LogicalGroup] = []
    for index in tree.post_order():
        node = tree.nodes[index]
        ungrouped = node.child_items + pending.pop(index, [])
        if not ungrouped:
            continue
        if len(ungrouped) >= threshold:
            groups.append(LogicalGroup(tree.path_name(index), tuple(ungrouped), materialized=True))
        elif node.parent == ROOT:
            groups.append(LogicalGroup(tree.path_name(index), tuple(ungrouped), materialized=False))
        else:
            pending.setdefault(node.parent, []).extend(ungrouped)

    unknown = LogicalGroup(UNKNOWN_GROUP_NAME, tuple(unparsed)) if unparsed else None
    return GroupAssignment(unknown=unknown, groups=tuple(groups))


def flat_assignment(items: Iterable[Item]) -> GroupAssignment:
    """Assignment used when grouping is disabled: one section, never materialized."""
    parsed: list[Item] = []
    unparsed: list[Item] = []
    for item in items:
        if item.unparsed or not item.group_path_parts:
            unparsed.append(item)
        else:
            parsed.append(item)
    unknown = LogicalGroup(UNKNOWN_GROUP_NAME, tuple(unparsed)) if unparsed else None
    groups = (LogicalGroup("*", tuple(parsed)),) if parsed else ()
    return GroupAssignment(unknown=unknown, groups=groups)


__all__ = ["ROOT", "DomainTreeNode", "DomainTree", "build_tree", "assign_groups", "flat_assignment"]
