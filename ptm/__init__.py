"""Planning Tree Manager core package."""

from .domain import Importance, Node, NodeType, Status, Workspace
from .status import aggregate
from .store import FileNodeStore, InMemoryNodeStore, NodeStore, StoreError
from .propagation import (
    StatusEngine,
    update_status_with_propagation,
    propagate_upward,
    enable_auto_status,
    toggle_critical,
)
from .progress import Progress, get_progress, progress_bar, render_tree

__all__ = [
    "Importance",
    "Node",
    "NodeType",
    "Status",
    "Workspace",
    "aggregate",
    "FileNodeStore",
    "InMemoryNodeStore",
    "NodeStore",
    "StoreError",
    "StatusEngine",
    "update_status_with_propagation",
    "propagate_upward",
    "enable_auto_status",
    "toggle_critical",
    "Progress",
    "get_progress",
    "progress_bar",
    "render_tree",
]
