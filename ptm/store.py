"""Node Store implementations.

The status engine only needs three calls from a store:

* ``get(node_id)`` returning a :class:`~ptm.domain.Node` or ``None``
* ``get_children(parent_id)`` returning the immediate children, unordered
* ``update(node_id, fields)`` writing a partial set of fields

Reads hand out copies, so changes only reach the store through ``update``.
A store signals a failed read or write by raising :class:`StoreError`.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Set

import yaml

from . import drive
from .domain import Node, Workspace
from .schema import SchemaError


class StoreError(RuntimeError):
    """Raised when the underlying storage cannot be read or written."""


class NodeStore(Protocol):
    def get(self, node_id: str) -> Optional[Node]:
        ...

    def get_children(self, parent_id: str) -> List[Node]:
        ...

    def update(self, node_id: str, fields: Dict[str, Any]) -> bool:
        ...


def _copy(node: Node) -> Node:
    return replace(node, path=list(node.path))


class InMemoryNodeStore:
    """Node map keyed by id with a parent-id index."""

    def __init__(self, workspace: Optional[Workspace] = None) -> None:
        self.workspace = workspace if workspace is not None else Workspace()
        self._children: Dict[Optional[str], Set[str]] = {}
        for node in self.workspace.nodes.values():
            self._children.setdefault(node.parent_id, set()).add(node.id)

    def get(self, node_id: str) -> Optional[Node]:
        node = self.workspace.nodes.get(node_id)
        return _copy(node) if node is not None else None

    def get_children(self, parent_id: Optional[str]) -> List[Node]:
        ids = self._children.get(parent_id, set())
        return [_copy(self.workspace.nodes[i]) for i in ids]

    def update(self, node_id: str, fields: Dict[str, Any]) -> bool:
        """Apply ``fields`` to ``node_id``. Returns ``False`` if it is unknown."""
        node = self.workspace.nodes.get(node_id)
        if node is None:
            return False
        node.apply(fields)
        return True

    def add(self, node: Node) -> Node:
        self.workspace.add_node(node)
        self._children.setdefault(node.parent_id, set()).add(node.id)
        return _copy(node)

    def create(self, name: str, parent_id: Optional[str] = None, **kwargs: Any) -> Node:
        """Create a node through :meth:`Workspace.create_node` and index it."""
        node = self.workspace.create_node(name, parent_id=parent_id, **kwargs)
        self._children.setdefault(node.parent_id, set()).add(node.id)
        return _copy(node)

    def remove(self, node_id: str) -> List[str]:
        """Delete ``node_id`` with its subtree. Ancestors are not recomputed."""
        removed = self.workspace.remove_subtree(node_id)
        for ids in self._children.values():
            ids.difference_update(removed)
        for nid in removed:
            self._children.pop(nid, None)
        return removed


class FileNodeStore(InMemoryNodeStore):
    """In-memory store that writes the whole workspace to YAML on every change."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        workspace = None
        if self.path.exists():
            try:
                workspace = drive.load(self.path)
            except (OSError, yaml.YAMLError, SchemaError, KeyError, ValueError) as e:
                raise StoreError(f"Cannot read workspace {self.path}: {e}") from e
        super().__init__(workspace)

    def flush(self) -> None:
        try:
            drive.save(self.workspace, self.path)
        except OSError as e:
            raise StoreError(f"Cannot write workspace {self.path}: {e}") from e

    def update(self, node_id: str, fields: Dict[str, Any]) -> bool:
        ok = super().update(node_id, fields)
        if ok:
            self.flush()
        return ok

    def add(self, node: Node) -> Node:
        added = super().add(node)
        self.flush()
        return added

    def create(self, name: str, parent_id: Optional[str] = None, **kwargs: Any) -> Node:
        created = super().create(name, parent_id=parent_id, **kwargs)
        self.flush()
        return created

    def remove(self, node_id: str) -> List[str]:
        removed = super().remove(node_id)
        if removed:
            self.flush()
        return removed


__all__ = ["StoreError", "NodeStore", "InMemoryNodeStore", "FileNodeStore"]
