"""Progress reporting utilities for Planning Tree Manager.

:func:`get_progress` summarises the immediate critical children of a node
(grandchildren are not counted) and is what the progress bars are drawn
from. :func:`render_tree` prints a whole workspace as an indented tree.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional

from .domain import Node, Status, Workspace
from .store import NodeStore


@dataclass(frozen=True)
class Progress:
    total: int = 0
    complete: int = 0
    in_progress: int = 0
    percentage: int = 0

    def to_dict(self) -> dict:
        return {
            'total': self.total,
            'complete': self.complete,
            'inProgress': self.in_progress,
            'percentage': self.percentage,
        }


def _percentage(complete: int, total: int) -> int:
    if total <= 0:
        return 0
    # round half up, so 1/2 -> 50 and 1/8 -> 13
    return int(math.floor(complete / total * 100 + 0.5))


def progress_of(children: List[Node]) -> Progress:
    """Return the rollup of ``children``, ignoring non-critical ones."""
    critical = [c for c in children if c.is_critical]
    total = len(critical)
    complete = sum(1 for c in critical if c.status == Status.COMPLETE)
    in_progress = sum(1 for c in critical if c.status == Status.IN_PROGRESS)
    return Progress(total, complete, in_progress, _percentage(complete, total))


def get_progress(store: NodeStore, node_id: str) -> Progress:
    """Return progress counts for the immediate children of ``node_id``."""
    return progress_of(store.get_children(node_id))


def progress_bar(percent: float, width: int = 20) -> str:
    """Return a text progress bar ``width`` characters wide."""
    percent = max(0.0, min(float(percent), 100.0))
    filled = int(round(width * percent / 100))
    return "#" * filled + "-" * (width - filled)


def _node_line(node: Node, children: List[Node]) -> str:
    line = f"{node.name} [{node.status.value}]"
    if node.pinned:
        line += " (pinned)"
    if not node.is_critical:
        line += " (non-critical)"
    if children:
        p = progress_of(children)
        line += f" {progress_bar(p.percentage, width=10)} {p.complete}/{p.total} {p.percentage}%"
    return line


def render_tree(workspace: Workspace, root_id: Optional[str] = None, indent: str = "  ") -> str:
    """Render the subtree at ``root_id`` (or every root) as indented text."""
    lines: List[str] = []
    seen = set()

    def walk(node: Node, level: int) -> None:
        if node.id in seen:
            return
        seen.add(node.id)
        children = sorted(workspace.children_of(node.id), key=lambda n: n.created_at)
        lines.append(indent * level + _node_line(node, children))
        for child in children:
            walk(child, level + 1)

    if root_id is not None:
        root = workspace.get_node(root_id)
        starts = [root] if root is not None else []
    else:
        starts = sorted(workspace.roots(), key=lambda n: n.created_at)
    for start in starts:
        walk(start, 0)
    return "\n".join(lines)


__all__ = ["Progress", "progress_of", "get_progress", "progress_bar", "render_tree"]
