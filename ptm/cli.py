import functools

import typer
import yaml
from pathlib import Path
from typing import Optional

from .config import Config
from .domain import Node, NodeType, Status
from .log import setup_logging
from .progress import get_progress, render_tree
from .propagation import StatusEngine
from .schema import SchemaError, validate_schema
from .store import FileNodeStore, StoreError

app = typer.Typer(help="Planning Tree Manager CLI")


@app.callback()
def main(debug: bool = typer.Option(False, "--debug", help="Log propagation steps to stderr.")):
    Config.reload()
    if debug:
        Config.DEBUG = True
    setup_logging("ptm")


def workspace_file(path: Path = Path('.')) -> Path:
    return path / Config.WORKSPACE_FILE


def load_store(path: Path = Path('.')) -> FileNodeStore:
    file = workspace_file(path)
    if not file.exists():
        raise typer.BadParameter(f"Workspace not initialised: {file} not found")
    return FileNodeStore(file)


def reports_store_errors(func):
    """Turn a :class:`StoreError` into a message on stderr and exit code 1."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except StoreError as e:
            typer.echo(f"Storage error: {e}", err=True)
            raise typer.Exit(code=1)
    return wrapper


def find_node(store: FileNodeStore, path: str) -> Node:
    node = store.workspace.find_by_name(path)
    if node is None:
        raise typer.BadParameter(f"Node path not found: {path}")
    return node


def check_name(store: FileNodeStore, parent_id: Optional[str], name: str, node_id: Optional[str] = None) -> None:
    if not name or '/' in name:
        raise typer.BadParameter(f"Invalid node name: {name!r}")
    if any(n.name == name and n.id != node_id for n in store.workspace.children_of(parent_id)):
        raise typer.BadParameter(f"A sibling named '{name}' already exists")


@app.command()
@reports_store_errors
def init(
    name: str = typer.Option(None, help="Name of the project. Defaults to the current directory name."),
    description: str = typer.Option(None, help="Short project description, used to pick a template."),
    template: str = typer.Option(None, help="Scaffold template (saas, fintech, agtech) or 'none'."),
):
    """Initialize a new planning workspace in the current folder."""
    from .scaffold import detect_industry, generate_scaffold

    path = Path('.')
    file = workspace_file(path)
    if file.exists():
        raise typer.BadParameter(f"Workspace already initialised at {path.resolve()}")

    if name is None:
        name = path.resolve().name
    if template is None:
        template = detect_industry(description) if description else Config.DEFAULT_TEMPLATE

    if not name or '/' in name:
        raise typer.BadParameter(f"Invalid project name: {name!r}")

    store = FileNodeStore(file)
    store.workspace.name = name
    if template == "none":
        store.create(name, type=NodeType.PROJECT, description=description)
    else:
        try:
            generate_scaffold(store, name, template, description=description)
        except ValueError as e:
            file.unlink(missing_ok=True)
            raise typer.BadParameter(str(e))
    store.flush()
    typer.echo(f"Initialised workspace '{name}' ({template}) at {path.resolve()}")


@app.command()
@reports_store_errors
def add(
    path: str,
    type: Optional[NodeType] = typer.Option(None, "--type", help="Node type; defaults from the parent."),
    non_critical: bool = typer.Option(False, "--non-critical", help="Do not count toward the parent."),
):
    """Add a node. The last path segment is the new node's name."""
    store = load_store()
    parts = [p for p in path.split('/') if p]
    if not parts:
        raise typer.BadParameter("Node path is empty")
    parent = find_node(store, '/'.join(parts[:-1])) if len(parts) > 1 else None
    check_name(store, parent.id if parent else None, parts[-1])
    node = store.create(
        parts[-1],
        parent_id=parent.id if parent else None,
        type=type,
        is_critical=not non_critical,
    )
    if parent is not None:
        StatusEngine(store).propagate_upward(parent.id)
    typer.echo(f"Added {node.type.value} '{path}'")


@app.command()
@reports_store_errors
def status(path: str = typer.Argument(None, help="Subtree to show; defaults to the whole workspace.")):
    """Show the current status tree."""
    store = load_store()
    root_id = find_node(store, path).id if path else None
    typer.echo(render_tree(store.workspace, root_id))


@app.command()
@reports_store_errors
def set_status(path: str, new_status: Status):
    """Pin a node at a status and update its ancestors."""
    store = load_store()
    node = find_node(store, path)
    StatusEngine(store).update_status_with_propagation(node.id, new_status)
    typer.echo(f"{path} -> {new_status.value} (pinned)")


@app.command()
@reports_store_errors
def auto(path: str):
    """Let a node derive its status from its children again."""
    store = load_store()
    node = find_node(store, path)
    StatusEngine(store).enable_auto_status(node.id)
    typer.echo(f"{path} -> {store.get(node.id).status.value} (auto)")


@app.command()
@reports_store_errors
def critical(path: str):
    """Toggle whether a node counts toward its parent's status."""
    store = load_store()
    node = find_node(store, path)
    StatusEngine(store).toggle_critical(node.id)
    flag = "critical" if store.get(node.id).is_critical else "non-critical"
    typer.echo(f"{path} is now {flag}")


@app.command()
@reports_store_errors
def progress(path: str):
    """Show completion counts of a node's critical children."""
    store = load_store()
    node = find_node(store, path)
    p = get_progress(store, node.id)
    typer.echo(f"{path}: {p.complete}/{p.total} complete, {p.in_progress} in progress ({p.percentage}%)")


@app.command()
@reports_store_errors
def rename(path: str, new_name: str):
    """Rename a node."""
    store = load_store()
    node = find_node(store, path)
    check_name(store, node.parent_id, new_name, node.id)
    store.update(node.id, {'name': new_name})
    typer.echo(f"Renamed {path} -> {new_name}")


@app.command()
@reports_store_errors
def delete(path: str):
    """Delete a node and its subtree, then update the former parent."""
    store = load_store()
    node = find_node(store, path)
    if typer.confirm(f"Are you sure you want to delete '{path}'?"):
        removed = store.remove(node.id)
        if node.parent_id is not None:
            StatusEngine(store).propagate_upward(node.parent_id)
        typer.echo(f"Deleted '{path}' ({len(removed)} nodes)")


@app.command()
def validate(file: Path):
    """Validate a workspace file."""
    if not file.exists():
        typer.echo(f"File not found: {file}", err=True)
        raise typer.Exit(code=1)
    try:
        validate_schema(yaml.safe_load(file.read_text()) or {})
    except (yaml.YAMLError, SchemaError) as e:
        typer.echo(f"Invalid workspace: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"{file} is valid")


@app.command()
def config():
    """Show the active configuration."""
    typer.echo(Config.display())


if __name__ == "__main__":
    app()
