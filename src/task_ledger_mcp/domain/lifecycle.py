"""
Entity Lifecycle Rules.

Pure functions deciding whether a task is open, what a task snapshot
contributes to the denormalized counters, which counter deltas move the
counters from one snapshot to the next, and which fields each status-affecting
operation changes. Nothing here touches the store.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple

from task_ledger_mcp.domain.entities.task import UNSET, TaskDTO, TaskStatus


def is_open(task: Optional[TaskDTO]) -> bool:
    """A task is open iff it is not done, not archived and not deleted."""
    if task is None:
        return False
    return (
        task.status != TaskStatus.DONE
        and task.archived_at is None
        and task.deleted_at is None
    )


@dataclass(frozen=True)
class Contribution:
    """What a single task snapshot adds to the counters."""

    project_id: Optional[str]
    task_count: int
    open_count: int
    tag_ids: FrozenSet[str]


def counter_contribution(task: Optional[TaskDTO]) -> Contribution:
    """Compute the counter contribution of a task snapshot.

    Deleted (or absent) tasks contribute nothing.
    """
    if task is None or task.deleted_at is not None:
        return Contribution(None, 0, 0, frozenset())
    return Contribution(
        project_id=task.project_id,
        task_count=1 if task.project_id else 0,
        open_count=1 if task.project_id and is_open(task) else 0,
        tag_ids=frozenset(task.tag_ids),
    )


@dataclass
class ProjectDelta:
    task_count: int = 0
    open_count: int = 0

    def is_zero(self) -> bool:
        return self.task_count == 0 and self.open_count == 0


@dataclass
class CounterDeltas:
    """Per-project and per-tag counter deltas."""

    projects: Dict[str, ProjectDelta] = field(default_factory=dict)
    tags: Dict[str, int] = field(default_factory=dict)

    def add_project(self, project_id: Optional[str], task_count: int, open_count: int) -> None:
        if not project_id or (task_count == 0 and open_count == 0):
            return
        delta = self.projects.setdefault(project_id, ProjectDelta())
        delta.task_count += task_count
        delta.open_count += open_count
        if delta.is_zero():
            del self.projects[project_id]

    def add_tags(self, tag_ids: Iterable[str], amount: int) -> None:
        if amount == 0:
            return
        for tag_id in tag_ids:
            total = self.tags.get(tag_id, 0) + amount
            if total:
                self.tags[tag_id] = total
            else:
                self.tags.pop(tag_id, None)

    def merge(self, other: "CounterDeltas") -> "CounterDeltas":
        """Fold another delta set into this one. Returns self."""
        for project_id, delta in other.projects.items():
            self.add_project(project_id, delta.task_count, delta.open_count)
        for tag_id, amount in other.tags.items():
            self.add_tags([tag_id], amount)
        return self

    def is_empty(self) -> bool:
        return not self.projects and not self.tags

    def to_dict(self) -> Dict[str, Any]:
        return {
            "projects": {
                pid: {"task_count": d.task_count, "open_count": d.open_count}
                for pid, d in self.projects.items()
            },
            "tags": dict(self.tags),
        }


def compute_counter_deltas(
    before: Optional[TaskDTO], after: Optional[TaskDTO]
) -> CounterDeltas:
    """Minimal deltas that move counters from the ``before`` to the ``after`` state.

    ``before`` is None for a creation, ``after`` is None for a physical delete.
    """
    old, new = counter_contribution(before), counter_contribution(after)
    deltas = CounterDeltas()

    deltas.add_project(old.project_id, -old.task_count, -old.open_count)
    deltas.add_project(new.project_id, new.task_count, new.open_count)

    deltas.add_tags(sorted(new.tag_ids - old.tag_ids), 1)
    deltas.add_tags(sorted(old.tag_ids - new.tag_ids), -1)
    return deltas


# --- Field transitions ---


def with_status_transition(
    current: TaskDTO, changes: Dict[str, Any], now: datetime
) -> Dict[str, Any]:
    """Add the ``completed_at`` change implied by a status change.

    Moving to DONE stamps ``completed_at`` when it is unset; moving away from
    DONE clears it. An explicit ``completed_at`` in ``changes`` always wins.
    """
    result = dict(changes)
    status = result.get("status")
    if status is None or "completed_at" in result:
        return result
    if status == TaskStatus.DONE and current.completed_at is None:
        result["completed_at"] = now
    elif status != TaskStatus.DONE and current.status == TaskStatus.DONE:
        result["completed_at"] = None
    return result


def complete_changes(current: TaskDTO, now: datetime) -> Optional[Dict[str, Any]]:
    """Changes for ``complete``; None when already completed."""
    if current.status == TaskStatus.DONE and current.completed_at is not None:
        return None
    return {"status": TaskStatus.DONE.value, "completed_at": now}


def uncomplete_changes(current: TaskDTO) -> Optional[Dict[str, Any]]:
    """Changes for ``uncomplete``; None when the task is not done."""
    if current.status != TaskStatus.DONE and current.completed_at is None:
        return None
    return {"status": TaskStatus.TODO.value, "completed_at": None}


def archive_changes(current: TaskDTO, now: datetime) -> Optional[Dict[str, Any]]:
    if current.archived_at is not None:
        return None
    return {"archived_at": now}


def unarchive_changes(current: TaskDTO) -> Optional[Dict[str, Any]]:
    if current.archived_at is None:
        return None
    return {"archived_at": None}


def move_target(
    current: TaskDTO,
    project_id: Any,
    parent_id: Any,
    order: Optional[int],
) -> Tuple[Optional[str], Optional[str], int]:
    """Resolve the (project, parent, order) a move lands on.

    An omitted (UNSET) project or parent keeps the current value, an
    explicit None clears it.
    """
    next_project = current.project_id if project_id is UNSET else project_id
    next_parent = current.parent_id if parent_id is UNSET else parent_id
    next_order = current.order if order is None else order
    return next_project, next_parent, next_order
