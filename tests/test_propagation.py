import pytest

from ptm.domain import Node, Status
from ptm.propagation import (
    StatusEngine,
    enable_auto_status,
    toggle_critical,
    update_status_with_propagation,
)
from ptm.store import InMemoryNodeStore, StoreError


def build_chain():
    """A (pinned) <- B (auto) <- C (auto) <- leaf."""
    store = InMemoryNodeStore()
    a = store.create("A")
    store.update(a.id, {"status": Status.PLANNED, "auto_status": False})
    b = store.create("B", parent_id=a.id)
    c = store.create("C", parent_id=b.id)
    leaf = store.create("leaf", parent_id=c.id)
    return store, a, b, c, leaf


def test_edit_pins_node_and_recomputes_parent():
    store, a, b, c, leaf = build_chain()
    update_status_with_propagation(store, leaf.id, Status.IN_PROGRESS)

    edited = store.get(leaf.id)
    assert edited.status == Status.IN_PROGRESS
    assert edited.auto_status is False
    assert store.get(c.id).status == Status.IN_PROGRESS
    assert store.get(c.id).auto_status is True
    assert store.get(b.id).status == Status.IN_PROGRESS


def test_propagation_halts_at_pinned_ancestor():
    store, a, b, c, leaf = build_chain()
    before = store.get(a.id)

    update_status_with_propagation(store, c.id, Status.COMPLETE)

    assert store.get(b.id).status == Status.COMPLETE
    after = store.get(a.id)
    assert after.status == Status.PLANNED
    assert after.updated_at == before.updated_at


def test_pinned_parent_of_edited_node_is_not_recomputed():
    store = InMemoryNodeStore()
    root = store.create("root")
    parent = store.create("parent", parent_id=root.id)
    store.update(parent.id, {"status": Status.MVP, "auto_status": False})
    child = store.create("child", parent_id=parent.id)

    update_status_with_propagation(store, child.id, Status.IDEA)

    assert store.get(parent.id).status == Status.MVP
    assert store.get(root.id).status == Status.IDEA


def test_edit_on_root_only_pins():
    store = InMemoryNodeStore()
    root = store.create("root")
    update_status_with_propagation(store, root.id, "testing")
    node = store.get(root.id)
    assert node.status == Status.TESTING
    assert node.pinned


def test_unknown_node_is_a_silent_no_op():
    store = InMemoryNodeStore()
    engine = StatusEngine(store)
    engine.update_status_with_propagation("missing", Status.COMPLETE)
    engine.propagate_upward("missing")
    engine.enable_auto_status("missing")
    engine.toggle_critical("missing")


def test_unknown_status_is_rejected():
    store = InMemoryNodeStore()
    root = store.create("root")
    with pytest.raises(ValueError):
        update_status_with_propagation(store, root.id, "done")


def test_enable_auto_status_recomputes_node_itself():
    store, a, b, c, leaf = build_chain()
    update_status_with_propagation(store, leaf.id, Status.COMPLETE)
    update_status_with_propagation(store, c.id, Status.IDEA)
    assert store.get(b.id).status == Status.IDEA

    enable_auto_status(store, c.id)

    assert store.get(c.id).auto_status is True
    assert store.get(c.id).status == Status.COMPLETE
    assert store.get(b.id).status == Status.COMPLETE
    assert store.get(a.id).status == Status.PLANNED


def test_enable_auto_status_on_leaf_keeps_status():
    store, a, b, c, leaf = build_chain()
    update_status_with_propagation(store, leaf.id, Status.MVP)
    enable_auto_status(store, leaf.id)
    node = store.get(leaf.id)
    assert node.auto_status is True
    assert node.status == Status.MVP


def test_enable_auto_status_on_pinned_root_continues_nowhere():
    store, a, b, c, leaf = build_chain()
    update_status_with_propagation(store, leaf.id, Status.COMPLETE)
    enable_auto_status(store, a.id)
    assert store.get(a.id).status == Status.COMPLETE


def test_toggle_critical_reaggregates_parent():
    store = InMemoryNodeStore()
    root = store.create("root")
    done = store.create("done", parent_id=root.id)
    todo = store.create("todo", parent_id=root.id)
    update_status_with_propagation(store, done.id, Status.COMPLETE)
    assert store.get(root.id).status == Status.IDEA

    toggle_critical(store, todo.id)

    assert store.get(todo.id).is_critical is False
    assert store.get(todo.id).status == Status.IDEA
    assert store.get(root.id).status == Status.COMPLETE

    toggle_critical(store, todo.id)
    assert store.get(root.id).status == Status.IDEA


def test_toggle_critical_on_root_only_flips_flag():
    store = InMemoryNodeStore()
    root = store.create("root")
    calls = []
    engine = StatusEngine(store)
    engine.propagate_upward = lambda node_id: calls.append(node_id)

    engine.toggle_critical(root.id)

    assert store.get(root.id).is_critical is False
    assert calls == []


def test_cycle_in_parent_links_stops_the_walk():
    store = InMemoryNodeStore()
    store.add(Node(id="x", name="x", parent_id="y"))
    store.add(Node(id="y", name="y", parent_id="x"))
    store.add(Node(id="leaf", name="leaf", parent_id="x", status=Status.COMPLETE))

    StatusEngine(store).propagate_upward("x")

    # x aggregates [y: idea, leaf: complete]; y then aggregates [x] and the
    # walk stops when it comes back around to x
    assert store.get("x").status == Status.IDEA
    assert store.get("y").status == Status.IDEA


class FailingStore(InMemoryNodeStore):
    def __init__(self, fail_on):
        super().__init__()
        self.fail_on = fail_on

    def update(self, node_id, fields):
        if node_id == self.fail_on and "auto_status" not in fields:
            raise StoreError("disk full")
        return super().update(node_id, fields)


def test_store_failure_propagates_and_keeps_earlier_writes():
    store = FailingStore(fail_on=None)
    top = store.create("top")
    mid = store.create("mid", parent_id=top.id)
    leaf = store.create("leaf", parent_id=mid.id)
    store.fail_on = top.id

    with pytest.raises(StoreError):
        update_status_with_propagation(store, leaf.id, Status.COMPLETE)

    assert store.get(leaf.id).status == Status.COMPLETE
    assert store.get(mid.id).status == Status.COMPLETE
    assert store.get(top.id).status == Status.IDEA
