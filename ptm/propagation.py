"""Keep derived statuses consistent as nodes change.

Every public operation starts at a single node, writes it, and then walks up
through its ancestors recomputing each one with :func:`ptm.status.aggregate`.
The walk stops at the first pinned node (``auto_status`` off): a pin is a
hard wall and nothing above it is touched.

There is no locking. Each step is its own read-then-write against the store,
so two mutations racing on overlapping ancestor chains can interleave and
leave an intermediate ancestor stale until a later edit walks past it again.
A :class:`~ptm.store.StoreError` raised midway through a walk propagates to
the caller with the steps already written left in place.
"""

from __future__ import annotations

import logging
from typing import Optional, Set

from .domain import Status, utcnow
from .status import aggregate
from .store import NodeStore

logger = logging.getLogger(__name__)


class StatusEngine:
    """Status edits, auto-status and critical toggles over a :class:`NodeStore`."""

    def __init__(self, store: NodeStore) -> None:
        self.store = store

    def update_status_with_propagation(self, node_id: str, new_status: Status | str) -> None:
        """Pin ``node_id`` at ``new_status`` and recompute its ancestors."""
        new_status = Status(new_status)
        self.store.update(
            node_id,
            {'status': new_status, 'auto_status': False, 'updated_at': utcnow()},
        )
        node = self.store.get(node_id)
        if node is None or node.parent_id is None:
            return
        self.propagate_upward(node.parent_id)

    def propagate_upward(self, node_id: Optional[str]) -> None:
        """Recompute ``node_id`` from its children, then each ancestor in turn."""
        seen: Set[str] = set()
        current = node_id
        while current is not None:
            if current in seen:
                logger.warning("Cycle detected at node %s; stopping propagation", current)
                return
            seen.add(current)

            node = self.store.get(current)
            if node is None:
                return
            if not node.auto_status:
                logger.debug("Node %s is pinned at %s; stopping", node.id, node.status.value)
                return
            children = self.store.get_children(node.id)
            if not children:
                return

            status = aggregate(children)
            logger.debug("Node %s: %s -> %s", node.id, node.status.value, status.value)
            self.store.update(node.id, {'status': status, 'updated_at': utcnow()})
            current = node.parent_id

    def enable_auto_status(self, node_id: str) -> None:
        """Unpin ``node_id`` and immediately recompute it and its ancestors."""
        self.store.update(node_id, {'auto_status': True})
        self.propagate_upward(node_id)

    def toggle_critical(self, node_id: str) -> None:
        """Flip whether ``node_id`` counts toward its parent's aggregate."""
        node = self.store.get(node_id)
        if node is None:
            return
        self.store.update(node_id, {'is_critical': not node.is_critical})
        if node.parent_id is not None:
            self.propagate_upward(node.parent_id)


def update_status_with_propagation(store: NodeStore, node_id: str, new_status: Status | str) -> None:
    StatusEngine(store).update_status_with_propagation(node_id, new_status)


def propagate_upward(store: NodeStore, node_id: Optional[str]) -> None:
    StatusEngine(store).propagate_upward(node_id)


def enable_auto_status(store: NodeStore, node_id: str) -> None:
    StatusEngine(store).enable_auto_status(node_id)


def toggle_critical(store: NodeStore, node_id: str) -> None:
    StatusEngine(store).toggle_critical(node_id)


__all__ = [
    "StatusEngine",
    "update_status_with_propagation",
    "propagate_upward",
    "enable_auto_status",
    "toggle_critical",
]
