"""Organizing engine: keys, domain tree, ordering, placement, and reconciliation."""

from .engine import OrganizationResult, WindowOrganizer, build_layout
from .executor import OperationExecutor
from .keys import KeyExtractor
from .models import (
    GroupAssignment,
    GroupPlan,
    HierarchicalKey,
    Item,
    LogicalGroup,
    MovePlan,
    OperationEvent,
)
from .planner import PlacementPlanner
from .reconcile import ColorResolver, GroupReconciler
from .sorting import compare_items, order_groups
from .tree import DomainTree, assign_groups

__all__ = [
    "KeyExtractor",
    "HierarchicalKey",
    "Item",
    "LogicalGroup",
    "GroupAssignment",
    "DomainTree",
    "assign_groups",
    "compare_items",
    "order_groups",
    "PlacementPlanner",
    "MovePlan",
    "GroupReconciler",
    "ColorResolver",
    "GroupPlan",
    "OperationExecutor",
    "OperationEvent",
    "WindowOrganizer",
    "OrganizationResult",
    "build_layout",
]
