from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Any
import json
import uuid
import yaml


class Status(str, Enum):
    """Completion status of a node, from least to most complete."""

    IDEA = 'idea'
    PLANNED = 'planned'
    IN_PROGRESS = 'in_progress'
    MVP = 'mvp'
    TESTING = 'testing'
    COMPLETE = 'complete'
    ARCHIVED = 'archived'


class NodeType(str, Enum):
    PROJECT = 'project'
    DOMAIN = 'domain'
    SYSTEM = 'system'
    FEATURE = 'feature'
    COMPONENT = 'component'


class Importance(str, Enum):
    CRITICAL = 'critical'
    IMPORTANT = 'important'
    OPTIONAL = 'optional'


CHILD_TYPES: Dict[NodeType, NodeType] = {
    NodeType.PROJECT: NodeType.DOMAIN,
    NodeType.DOMAIN: NodeType.SYSTEM,
    NodeType.SYSTEM: NodeType.FEATURE,
    NodeType.FEATURE: NodeType.COMPONENT,
    NodeType.COMPONENT: NodeType.COMPONENT,
}


def default_child_type(parent_type: Optional[NodeType]) -> NodeType:
    """Return the node type suggested for a new child of ``parent_type``."""
    if parent_type is None:
        return NodeType.PROJECT
    return CHILD_TYPES[NodeType(parent_type)]


FIXED_FIELDS = frozenset({'parent_id', 'path', 'depth'})


def utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Node:
    """A unit of work in the planning hierarchy."""

    id: str
    name: str
    type: NodeType = NodeType.PROJECT
    parent_id: Optional[str] = None
    path: List[str] = field(default_factory=list)
    depth: int = 0
    status: Status = Status.IDEA
    auto_status: bool = True
    is_critical: bool = True
    description: Optional[str] = None
    importance: Optional[Importance] = None
    owner_id: Optional[str] = None
    created_at: str = field(default_factory=utcnow)
    updated_at: str = field(default_factory=utcnow)

    @property
    def pinned(self) -> bool:
        return not self.auto_status

    def apply(self, fields: Dict[str, Any]) -> None:
        """Overwrite the given attributes, coercing enum values.

        Position in the tree (``parent_id``, ``path``, ``depth``) is fixed at
        creation and cannot be changed here.
        """
        for key, value in fields.items():
            if not hasattr(self, key) or key == 'id':
                raise KeyError(f"Unknown node field: {key}")
            if key in FIXED_FIELDS:
                raise KeyError(f"Node field cannot be updated: {key}")
            if key == 'status':
                value = Status(value)
            elif key == 'type':
                value = NodeType(value)
            elif key == 'importance' and value is not None:
                value = Importance(value)
            setattr(self, key, value)

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            'id': self.id,
            'name': self.name,
            'type': self.type.value,
            'parent_id': self.parent_id,
            'path': list(self.path),
            'depth': self.depth,
            'status': self.status.value,
            'auto_status': self.auto_status,
            'is_critical': self.is_critical,
        }
        if self.description:
            data['description'] = self.description
        if self.importance is not None:
            data['importance'] = self.importance.value
        if self.owner_id:
            data['owner_id'] = self.owner_id
        data['created_at'] = self.created_at
        data['updated_at'] = self.updated_at
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'Node':
        importance = data.get('importance')
        node = cls(
            id=data['id'],
            name=data.get('name', ''),
            type=NodeType(data.get('type', NodeType.PROJECT.value)),
            parent_id=data.get('parent_id'),
            path=list(data.get('path', [])),
            depth=data.get('depth', 0),
            status=Status(data.get('status', Status.IDEA.value)),
            auto_status=data.get('auto_status', True),
            is_critical=data.get('is_critical', True),
            description=data.get('description'),
            importance=Importance(importance) if importance else None,
            owner_id=data.get('owner_id'),
        )
        if 'created_at' in data:
            node.created_at = data['created_at']
        if 'updated_at' in data:
            node.updated_at = data['updated_at']
        return node


@dataclass
class Workspace:
    """Container for every node of one planning workspace."""

    name: str = ''
    nodes: Dict[str, Node] = field(default_factory=dict)

    def add_node(self, node: Node) -> None:
        self.nodes[node.id] = node

    def get_node(self, node_id: str) -> Optional[Node]:
        return self.nodes.get(node_id)

    def children_of(self, node_id: Optional[str]) -> List[Node]:
        return [n for n in self.nodes.values() if n.parent_id == node_id]

    def roots(self) -> List[Node]:
        return self.children_of(None)

    def create_node(
        self,
        name: str,
        parent_id: Optional[str] = None,
        type: Optional[NodeType] = None,
        description: Optional[str] = None,
        importance: Optional[Importance] = None,
        is_critical: bool = True,
    ) -> Node:
        """Create a node under ``parent_id`` and add it to the workspace.

        New nodes start at ``idea`` with a derived status. ``path`` and
        ``depth`` are taken from the parent, and the type defaults to the
        usual child type of the parent's type.
        """
        parent = None
        if parent_id is not None:
            parent = self.nodes.get(parent_id)
            if parent is None:
                raise KeyError(f"Parent node not found: {parent_id}")
        node = Node(
            id=str(uuid.uuid4()),
            name=name,
            type=NodeType(type) if type else default_child_type(parent.type if parent else None),
            parent_id=parent_id,
            path=[*parent.path, parent.id] if parent else [],
            depth=parent.depth + 1 if parent else 0,
            is_critical=is_critical,
            description=description,
            importance=importance,
        )
        self.add_node(node)
        return node

    def find_by_name(self, path: str) -> Optional[Node]:
        """Resolve a ``/``-separated path of node names, e.g. ``App/Backend``."""
        parts = [p for p in path.split('/') if p]
        node: Node | None = None
        for part in parts:
            for candidate in self.children_of(node.id if node else None):
                if candidate.name == part:
                    node = candidate
                    break
            else:
                return None
        return node

    def remove_subtree(self, node_id: str) -> List[str]:
        """Delete ``node_id`` and all of its descendants. Returns removed ids."""
        removed = [n.id for n in self.nodes.values() if n.id == node_id or node_id in n.path]
        for nid in removed:
            del self.nodes[nid]
        return removed

    def to_dict(self) -> dict:
        return {'name': self.name, 'nodes': [n.to_dict() for n in self.nodes.values()]}

    @classmethod
    def from_dict(cls, data: dict) -> 'Workspace':
        ws = cls(name=data.get('name', ''))
        for n in data.get('nodes', []) or []:
            ws.add_node(Node.from_dict(n))
        return ws

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, text: str) -> 'Workspace':
        return cls.from_dict(json.loads(text))

    def to_yaml(self) -> str:
        return yaml.dump(self.to_dict(), sort_keys=False)

    @classmethod
    def from_yaml(cls, text: str) -> 'Workspace':
        return cls.from_dict(yaml.safe_load(text) or {})
