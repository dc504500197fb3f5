"""Reading and writing workspace files."""

from __future__ import annotations

import os
from pathlib import Path

import yaml

from .domain import Workspace
from .schema import validate_schema


def save(workspace: Workspace, path: Path) -> None:
    """Write ``workspace`` to ``path`` as YAML.

    The document goes to a sibling temp file first and is then moved over
    ``path``, so readers never see a half-written workspace.
    """
    tmp = path.with_name(path.name + ".tmp")
    try:
        with tmp.open("w", encoding="utf-8") as f:
            f.write(workspace.to_yaml())
        os.replace(tmp, path)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise


def load(path: Path) -> Workspace:
    """Return the :class:`Workspace` stored at ``path``.

    Raises :class:`~ptm.schema.SchemaError` if the document is not a valid
    workspace.
    """
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f.read()) or {}
    validate_schema(data)
    return Workspace.from_dict(data)


__all__ = ["save", "load"]
