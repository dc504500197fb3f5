"""Status aggregation for Planning Tree Manager.

A non-leaf node derives its status from its immediate *critical* children.
Non-critical children are ignored entirely, and a node without critical
children is an ``idea``.

The rules are evaluated in a fixed order and the first match wins:

1. every child is ``complete``            -> ``complete``
2. every child is at least ``mvp``        -> ``mvp``
3. every child is at least ``testing``    -> ``testing``
4. any child is ``in_progress``           -> ``in_progress``
5. every child is at least ``planned``    -> ``planned``
6. otherwise                              -> ``idea``

Because ``testing`` ranks above ``mvp``, rule 2 already matches whenever
rule 3 would, so an aggregate is never reported as ``testing``. Existing
workspaces depend on this ordering; keep it.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

from .domain import Status


STATUS_PRIORITY: Dict[Status, int] = {
    Status.IDEA: 0,
    Status.PLANNED: 1,
    Status.IN_PROGRESS: 2,
    Status.MVP: 3,
    Status.TESTING: 4,
    Status.COMPLETE: 5,
    Status.ARCHIVED: -1,
}


def priority(status: Status | str) -> int:
    """Return the rank of ``status``; ``archived`` ranks below everything."""
    return STATUS_PRIORITY[Status(status)]


def _field(child: Any, name: str) -> Any:
    if isinstance(child, dict):
        return child[name]
    return getattr(child, name)


def critical_statuses(children: Iterable[Any]) -> List[Status]:
    """Return the statuses of the children that count toward the parent."""
    return [Status(_field(c, 'status')) for c in children if _field(c, 'is_critical')]


def aggregate(children: Iterable[Any]) -> Status:
    """Return the status a parent should have given its ``children``.

    ``children`` may be :class:`~ptm.domain.Node` objects or mappings with
    ``status`` and ``is_critical`` keys.
    """
    statuses = critical_statuses(children)
    if not statuses:
        return Status.IDEA

    def all_at_least(floor: Status) -> bool:
        return all(priority(s) >= priority(floor) for s in statuses)

    if all(s == Status.COMPLETE for s in statuses):
        return Status.COMPLETE
    if all_at_least(Status.MVP):
        return Status.MVP
    if all_at_least(Status.TESTING):
        return Status.TESTING
    if any(s == Status.IN_PROGRESS for s in statuses):
        return Status.IN_PROGRESS
    if all_at_least(Status.PLANNED):
        return Status.PLANNED
    return Status.IDEA


__all__ = ["STATUS_PRIORITY", "priority", "critical_statuses", "aggregate"]
