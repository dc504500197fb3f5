from __future__ import annotations

from typing import Any, Dict, List, Optional

from .domain import Importance, NodeType, Status


class SchemaError(ValueError):
    """Raised when a workspace document does not conform to the expected schema."""


_STATUSES = {s.value for s in Status}
_TYPES = {t.value for t in NodeType}
_IMPORTANCE = {i.value for i in Importance}


def validate_node(node: Any) -> None:
    """Validate the fields of a single node record.

    Expected keys:
    - id, name: required strings
    - type: optional node type name
    - parent_id: optional string or null
    - path: optional list of ids, depth: optional int
    - status: optional status name
    - auto_status, is_critical: optional bools
    - importance: optional importance name
    """
    if not isinstance(node, dict):
        raise SchemaError("node must be a dict")

    for key in ("id", "name"):
        if key not in node or not isinstance(node[key], str):
            raise SchemaError(f"node must have an '{key}' string")

    if "type" in node and node["type"] not in _TYPES:
        raise SchemaError(f"unknown node type: {node['type']!r}")

    if node.get("parent_id") is not None and not isinstance(node["parent_id"], str):
        raise SchemaError("'parent_id' must be a string or null")

    if "status" in node and node["status"] not in _STATUSES:
        raise SchemaError(f"unknown status: {node['status']!r}")

    for key in ("auto_status", "is_critical"):
        if key in node and not isinstance(node[key], bool):
            raise SchemaError(f"'{key}' must be a boolean if present")

    if node.get("importance") is not None and node["importance"] not in _IMPORTANCE:
        raise SchemaError(f"unknown importance: {node['importance']!r}")

    if "path" in node:
        if not isinstance(node["path"], list) or not all(isinstance(p, str) for p in node["path"]):
            raise SchemaError("'path' must be a list of ids")

    if "depth" in node and (isinstance(node["depth"], bool) or not isinstance(node["depth"], int)):
        raise SchemaError("'depth' must be an integer")


def _ancestors(node_id: str, parents: Dict[str, Optional[str]]) -> List[str]:
    chain: List[str] = []
    seen = {node_id}
    current = parents[node_id]
    while current is not None:
        if current in seen:
            raise SchemaError(f"cycle detected through node {current!r}")
        seen.add(current)
        chain.append(current)
        current = parents.get(current)
    chain.reverse()
    return chain


def validate_schema(data: Dict[str, Any]) -> None:
    """Validate a workspace document and the tree it describes."""
    if not isinstance(data, dict):
        raise SchemaError("root must be a mapping")
    if "name" in data and not isinstance(data["name"], str):
        raise SchemaError("workspace name must be a string")
    nodes = data.get("nodes", [])
    if not isinstance(nodes, list):
        raise SchemaError("'nodes' must be a list")

    parents: Dict[str, Optional[str]] = {}
    for node in nodes:
        validate_node(node)
        if node["id"] in parents:
            raise SchemaError(f"duplicate node id: {node['id']!r}")
        parents[node["id"]] = node.get("parent_id")

    for node in nodes:
        parent_id = node.get("parent_id")
        if parent_id is not None and parent_id not in parents:
            raise SchemaError(f"node {node['id']!r} has unknown parent {parent_id!r}")

    for node in nodes:
        chain = _ancestors(node["id"], parents)
        if "path" in node and node["path"] != chain:
            raise SchemaError(f"node {node['id']!r} path does not match its ancestors")
        if "depth" in node and node["depth"] != len(chain):
            raise SchemaError(f"node {node['id']!r} depth must equal {len(chain)}")
