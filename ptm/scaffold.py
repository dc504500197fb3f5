"""Starter trees built from industry templates."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .config import Config
from .domain import Importance, Node, NodeType

TEMPLATES_FILE = Path(__file__).resolve().parent / "scaffold_templates.json"

PRIORITY_IMPORTANCE: Dict[str, Importance] = {
    "critical": Importance.CRITICAL,
    "high": Importance.IMPORTANT,
    "medium": Importance.OPTIONAL,
}


@dataclass
class DomainTemplate:
    name: str
    priority: str = "high"
    systems: List[str] = field(default_factory=list)


@dataclass
class Template:
    key: str
    industry: str
    keywords: List[str] = field(default_factory=list)
    domains: List[DomainTemplate] = field(default_factory=list)


def load_templates(path: Path | None = None) -> Dict[str, Template]:
    """Return the templates from ``scaffold_templates.json`` keyed by name."""
    file = path or TEMPLATES_FILE
    data = json.loads(file.read_text(encoding="utf-8"))
    templates: Dict[str, Template] = {}
    for item in data:
        domains = [DomainTemplate(**d) for d in item.get("domains", [])]
        templates[item["key"]] = Template(
            key=item["key"],
            industry=item.get("industry", item["key"]),
            keywords=list(item.get("keywords", [])),
            domains=domains,
        )
    return templates


def detect_industry(description: str, templates: Optional[Dict[str, Template]] = None) -> str:
    """Return the key of the first template with at least two keyword hits."""
    templates = templates if templates is not None else load_templates()
    lowered = description.lower()
    for key, template in templates.items():
        hits = sum(1 for kw in template.keywords if kw.lower() in lowered)
        if hits >= 2:
            return key
    return Config.DEFAULT_TEMPLATE


def generate_scaffold(store, project_name: str, template_key: str, description: str | None = None) -> Node:
    """Create a project with one domain per template domain and its systems.

    ``store`` is anything with a ``create`` method, such as
    :class:`~ptm.store.InMemoryNodeStore`. Domains of ``medium`` priority are
    created non-critical so they do not hold the project back.
    """
    templates = load_templates()
    if template_key not in templates:
        raise ValueError(f"Unknown template: {template_key}")
    template = templates[template_key]

    project = store.create(project_name, type=NodeType.PROJECT, description=description)
    for dom in template.domains:
        importance = PRIORITY_IMPORTANCE.get(dom.priority, Importance.IMPORTANT)
        domain = store.create(
            dom.name,
            parent_id=project.id,
            type=NodeType.DOMAIN,
            importance=importance,
            is_critical=importance != Importance.OPTIONAL,
        )
        for system in dom.systems:
            store.create(system, parent_id=domain.id, type=NodeType.SYSTEM)
    return project


__all__ = [
    "DomainTemplate",
    "Template",
    "load_templates",
    "detect_industry",
    "generate_scaffold",
]
