"""
Task Service - Business logic for task operations.

Every operation that can change a task's project attribution, openness, tag
set or deletion state reads the task before and after the write and hands both
snapshots to the aggregate service, which applies the counter deltas.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Set

from task_ledger_mcp.constants import DEFAULT_LIST_LIMIT, MAX_LIST_LIMIT, MAX_TAG_FILTER
from task_ledger_mcp.database.models import get_current_timestamp
from task_ledger_mcp.database.repositories import ProjectRepository, TaskRepository
from task_ledger_mcp.domain.entities.result_types import (
    DomainError,
    DomainResult,
    DomainSuccess,
)
from task_ledger_mcp.domain.entities.task import (
    TASK_FIELDS,
    TASK_TIMESTAMP_FIELDS,
    UNSET,
    Priority,
    TaskDTO,
    TaskStatus,
    parse_datetime,
)
from task_ledger_mcp.domain.lifecycle import (
    archive_changes,
    complete_changes,
    move_target,
    unarchive_changes,
    uncomplete_changes,
    with_status_transition,
)
from task_ledger_mcp.services.aggregate_service import AggregateService
from task_ledger_mcp.services.cascade_service import CascadeService
from task_ledger_mcp.services.guards import domain_operation

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset(TASK_FIELDS)


class TaskService:
    """
    Service for task business logic.

    Orchestrates task CRUD, the status-affecting lifecycle operations, moves
    and subtree deletion, keeping project and tag counters in step.
    """

    def __init__(
        self,
        task_repo: TaskRepository,
        project_repo: ProjectRepository,
        aggregate: AggregateService,
        cascade: CascadeService,
    ):
        """Initialize service with repositories and the counter/cascade services."""
        self.task_repo = task_repo
        self.project_repo = project_repo
        self.aggregate = aggregate
        self.cascade = cascade

    # --- Helper Methods ---

    def _normalize_fields(self, values: Dict[str, Any]) -> Optional[DomainResult[Any]]:
        """
        Validate and normalize task attributes in place.

        Returns:
            A validation error result, or None if the values are acceptable.
        """
        if "title" in values:
            title = (values["title"] or "").strip()
            if not title:
                return DomainError.validation_error("Task title cannot be empty or whitespace")
            values["title"] = title

        for name in ("project_id", "parent_id"):
            if name in values and not values[name]:
                values[name] = None

        if "description" in values and values["description"] is None:
            values["description"] = ""

        if "status" in values:
            try:
                values["status"] = TaskStatus(values["status"]).value
            except ValueError:
                return DomainError.validation_error(
                    f"Invalid status: {values['status']}",
                    details={"valid_statuses": [s.value for s in TaskStatus]},
                )

        if "priority" in values:
            try:
                values["priority"] = Priority(values["priority"]).value
            except ValueError:
                return DomainError.validation_error(
                    f"Invalid priority: {values['priority']}",
                    details={"valid_priorities": [p.value for p in Priority]},
                )

        if "order" in values:
            order = values["order"]
            if isinstance(order, bool) or not isinstance(order, int) or order < 0:
                return DomainError.validation_error("Order must be a non-negative integer")

        if "tag_ids" in values:
            tag_ids = values["tag_ids"] or []
            if not isinstance(tag_ids, (list, tuple, set)) or not all(
                isinstance(t, str) and t for t in tag_ids
            ):
                return DomainError.validation_error("tag_ids must be a list of tag ids")
            values["tag_ids"] = list(tag_ids)

        for name in TASK_TIMESTAMP_FIELDS:
            if values.get(name) is not None:
                try:
                    values[name] = parse_datetime(values[name])
                except (TypeError, ValueError):
                    return DomainError.validation_error(
                        f"Invalid timestamp for {name}: {values[name]!r}"
                    )

        return None

    def _check_project(
        self, user_id: str, project_id: Optional[str]
    ) -> Optional[DomainResult[Any]]:
        """A task may only be attributed to a live project."""
        if not project_id:
            return None
        project = self.project_repo.get(user_id, project_id)
        if project is None or project.deleted_at is not None:
            return DomainError.not_found("Project", project_id)
        return None

    def _check_parent(
        self, user_id: str, task_id: Optional[str], parent_id: Optional[str]
    ) -> Optional[DomainResult[Any]]:
        """Verify a new parent exists and would not make the task its own ancestor."""
        if not parent_id:
            return None
        if parent_id == task_id:
            return DomainError.business_rule_violation(
                "no_self_parent", "A task cannot be its own parent", {"task_id": task_id}
            )

        if task_id is None:
            if self.task_repo.get(user_id, parent_id) is None:
                return DomainError.not_found("Task", parent_id)
            return None

        seen: Set[str] = set()
        current: Optional[str] = parent_id
        while current and current not in seen:
            seen.add(current)
            ancestor = self.task_repo.get(user_id, current)
            if ancestor is None:
                if current == parent_id:
                    return DomainError.not_found("Task", parent_id)
                break
            if task_id and ancestor.parent_id == task_id:
                return DomainError.business_rule_violation(
                    "no_parent_cycle",
                    "Moving the task under its own descendant would create a cycle",
                    {"task_id": task_id, "parent_id": parent_id},
                )
            current = ancestor.parent_id
        return None

    def _save(
        self, user_id: str, current: TaskDTO, changes: Dict[str, Any]
    ) -> DomainResult[Optional[Dict[str, Any]]]:
        """Write changes, then apply the counter deltas between the two snapshots."""
        if not self.task_repo.write(user_id, current.id, changes):
            return DomainSuccess.create(data=None)
        updated = self.task_repo.get(user_id, current.id)
        self.aggregate.apply(user_id, current, updated)
        return DomainSuccess.create(data=updated.to_dict() if updated else None)

    def _transition(
        self,
        user_id: str,
        task_id: str,
        changes_for: Callable[[TaskDTO], Optional[Dict[str, Any]]],
    ) -> DomainResult[Optional[Dict[str, Any]]]:
        """Apply an idempotent lifecycle transition; no-op if nothing changes."""
        current = self.task_repo.get(user_id, task_id)
        if current is None:
            return DomainSuccess.create(data=None)
        changes = changes_for(current)
        if changes is None:
            return DomainSuccess.create(data=current.to_dict())
        return self._save(user_id, current, changes)

    # --- CRUD Operations ---

    @domain_operation("create_task")
    def create_task(
        self,
        user_id: str,
        title: str,
        description: Optional[str] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        project_id: Optional[str] = None,
        parent_id: Optional[str] = None,
        tag_ids: Optional[List[str]] = None,
        order: Optional[int] = None,
        due_at: Any = None,
        remind_at: Any = None,
        url: Optional[str] = None,
    ) -> DomainResult[Dict[str, Any]]:
        """
        Create a new task.

        Args:
            user_id: Owning user id.
            title: Task title.
            description: Task description (defaults to empty).
            status: TODO, IN_PROGRESS, DONE or BLOCKED (defaults to TODO).
            priority: NONE, LOW, MEDIUM, HIGH or URGENT (defaults to MEDIUM).
            project_id: Owning project.
            parent_id: Parent task for a subtask.
            tag_ids: Referenced tags.
            order: Sibling ordering (defaults to 0).
            due_at: Due timestamp.
            remind_at: Reminder timestamp.
            url: Optional link.

        Returns:
            DomainResult with created task data.
        """
        values: Dict[str, Any] = {
            "title": title,
            "description": description or "",
            "status": status or TaskStatus.TODO.value,
            "priority": priority or Priority.MEDIUM.value,
            "project_id": project_id or None,
            "parent_id": parent_id or None,
            "tag_ids": tag_ids or [],
            "order": 0 if order is None else order,
            "due_at": due_at,
            "remind_at": remind_at,
            "completed_at": None,
            "archived_at": None,
            "deleted_at": None,
            "url": url,
        }
        error = self._normalize_fields(values)
        if error:
            return error

        error = self._check_project(user_id, values["project_id"]) or self._check_parent(
            user_id, None, values["parent_id"]
        )
        if error:
            return error

        if values["status"] == TaskStatus.DONE:
            values["completed_at"] = get_current_timestamp()

        task = self.task_repo.create(user_id, values)
        self.aggregate.apply(user_id, None, task)
        logger.debug("Created task %s for user %s", task.id, user_id)
        return DomainSuccess.create(data=task.to_dict())

    @domain_operation("get_task")
    def get_task(self, user_id: str, task_id: str) -> DomainResult[Optional[Dict[str, Any]]]:
        """Get a task by id; data is None if it does not exist."""
        task = self.task_repo.get(user_id, task_id)
        return DomainSuccess.create(data=task.to_dict() if task else None)

    @domain_operation("list_tasks")
    def list_tasks(
        self,
        user_id: str,
        project_id: Optional[str] = None,
        parent_id: Optional[str] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        archived: Optional[bool] = None,
        deleted: Optional[bool] = None,
        tag_ids_any: Optional[List[str]] = None,
        due_after: Any = None,
        due_before: Any = None,
        start_after_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> DomainResult[List[Dict[str, Any]]]:
        """
        List tasks with filters, ordered by ``order`` then creation time.

        Args:
            user_id: Owning user id.
            project_id: Filter by project; ``""`` selects tasks with no project.
            parent_id: Filter by parent; ``""`` selects top-level tasks.
            status: Filter by status.
            priority: Filter by priority.
            archived: True for archived tasks only, False for unarchived only.
            deleted: True for soft-deleted tasks only, False for live only.
            tag_ids_any: Tasks referencing any of these tags (first 10 used).
            due_after: Tasks due at or after this timestamp.
            due_before: Tasks due at or before this timestamp.
            start_after_id: Cursor; ignored if the task does not exist.
            limit: Page size, clamped to 1..100 (default 50).

        Returns:
            DomainResult with a list of task dicts.
        """
        where: List[Any] = []
        if project_id is not None:
            where.append(("projectId", "==", project_id or None))
        if parent_id is not None:
            where.append(("parentId", "==", parent_id or None))
        if status:
            where.append(("status", "==", status))
        if priority:
            where.append(("priority", "==", priority))
        if archived is not None:
            where.append(("archivedAt", "!=" if archived else "==", None))
        if deleted is not None:
            where.append(("deletedAt", "!=" if deleted else "==", None))
        if tag_ids_any:
            where.append(("tagIds", "array-contains-any", list(tag_ids_any)[:MAX_TAG_FILTER]))
        try:
            if due_after:
                where.append(("dueAt", ">=", parse_datetime(due_after)))
            if due_before:
                where.append(("dueAt", "<=", parse_datetime(due_before)))
        except (TypeError, ValueError) as e:
            return DomainError.validation_error(f"Invalid due date filter: {e}")

        page_size = min(max(DEFAULT_LIST_LIMIT if limit is None else limit, 1), MAX_LIST_LIMIT)

        cursor = None
        if start_after_id and self.task_repo.get(user_id, start_after_id) is not None:
            cursor = start_after_id

        tasks = self.task_repo.find(
            user_id,
            where=where,
            order_by=[("order", "asc"), ("createdAt", "asc")],
            limit=page_size,
            start_after=cursor,
        )
        return DomainSuccess.create(data=[t.to_dict() for t in tasks])

    @domain_operation("update_task")
    def update_task(
        self, user_id: str, task_id: str, changes: Dict[str, Any]
    ) -> DomainResult[Optional[Dict[str, Any]]]:
        """
        Update task fields.

        A status change to DONE stamps ``completed_at`` when it is unset and a
        change away from DONE clears it, unless ``completed_at`` is given.

        Args:
            user_id: Owning user id.
            task_id: Task id.
            changes: Task attributes to change (snake_case).

        Returns:
            DomainResult with the updated task, or None if it does not exist.
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            return DomainError.validation_error(
                f"Unknown task fields: {sorted(unknown)}",
                details={"valid_fields": sorted(UPDATABLE_FIELDS)},
            )

        values = dict(changes)
        error = self._normalize_fields(values)
        if error:
            return error

        current = self.task_repo.get(user_id, task_id)
        if current is None:
            return DomainSuccess.create(data=None)

        if values.get("project_id") != current.project_id and values.get("project_id"):
            error = self._check_project(user_id, values["project_id"])
            if error:
                return error
        if values.get("parent_id") != current.parent_id and values.get("parent_id"):
            error = self._check_parent(user_id, task_id, values["parent_id"])
            if error:
                return error

        values = with_status_transition(current, values, get_current_timestamp())
        return self._save(user_id, current, values)

    @domain_operation("reorder_task")
    def reorder_task(
        self, user_id: str, task_id: str, order: int
    ) -> DomainResult[Optional[Dict[str, Any]]]:
        """Change a task's sibling order. Counters are unaffected."""
        if isinstance(order, bool) or not isinstance(order, int) or order < 0:
            return DomainError.validation_error("Order must be a non-negative integer")
        if not self.task_repo.write(user_id, task_id, {"order": order}):
            return DomainSuccess.create(data=None)
        task = self.task_repo.get(user_id, task_id)
        return DomainSuccess.create(data=task.to_dict() if task else None)

    @domain_operation("move_task")
    def move_task(
        self,
        user_id: str,
        task_id: str,
        project_id: Any = UNSET,
        parent_id: Any = UNSET,
        order: Optional[int] = None,
    ) -> DomainResult[Optional[Dict[str, Any]]]:
        """
        Move a task to another project and/or parent.

        An omitted ``project_id`` or ``parent_id`` keeps the current value; an
        explicit None clears it. Moving between projects shifts ``taskCount``
        (and ``openCount`` if the task is open) from the old project to the new.
        """
        if order is not None and (isinstance(order, bool) or not isinstance(order, int) or order < 0):
            return DomainError.validation_error("Order must be a non-negative integer")

        current = self.task_repo.get(user_id, task_id)
        if current is None:
            return DomainSuccess.create(data=None)

        next_project, next_parent, next_order = move_target(current, project_id, parent_id, order)
        next_project = next_project or None
        next_parent = next_parent or None

        if next_project != current.project_id:
            error = self._check_project(user_id, next_project)
            if error:
                return error
        if next_parent != current.parent_id:
            error = self._check_parent(user_id, task_id, next_parent)
            if error:
                return error

        return self._save(
            user_id,
            current,
            {"project_id": next_project, "parent_id": next_parent, "order": next_order},
        )

    # --- Lifecycle Operations ---

    @domain_operation("complete_task")
    def complete_task(self, user_id: str, task_id: str) -> DomainResult[Optional[Dict[str, Any]]]:
        """Mark a task DONE; no-op if it is already completed."""
        return self._transition(
            user_id, task_id, lambda t: complete_changes(t, get_current_timestamp())
        )

    @domain_operation("uncomplete_task")
    def uncomplete_task(
        self, user_id: str, task_id: str
    ) -> DomainResult[Optional[Dict[str, Any]]]:
        """Reopen a DONE task as TODO; no-op if it is not done."""
        return self._transition(user_id, task_id, uncomplete_changes)

    @domain_operation("archive_task")
    def archive_task(self, user_id: str, task_id: str) -> DomainResult[Optional[Dict[str, Any]]]:
        return self._transition(
            user_id, task_id, lambda t: archive_changes(t, get_current_timestamp())
        )

    @domain_operation("unarchive_task")
    def unarchive_task(self, user_id: str, task_id: str) -> DomainResult[Optional[Dict[str, Any]]]:
        return self._transition(user_id, task_id, unarchive_changes)

    @domain_operation("restore_task")
    def restore_task(self, user_id: str, task_id: str) -> DomainResult[Optional[Dict[str, Any]]]:
        """
        Undo a soft delete of the task and of the subtasks deleted with it.

        Restored tasks count toward their projects and tags again. No-op if
        the task is not deleted.
        """
        task = self.cascade.restore_task_subtree(user_id, task_id)
        return DomainSuccess.create(data=task.to_dict() if task else None)

    @domain_operation("remove_task")
    def remove_task(
        self, user_id: str, task_id: str, soft: bool = True
    ) -> DomainResult[Optional[Dict[str, Any]]]:
        """
        Delete or soft-delete a task together with its whole subtree.

        Tasks that were already soft-deleted change no counter.

        Returns:
            DomainResult with the cascade summary, or None if the task does not exist.
        """
        return DomainSuccess.create(data=self.cascade.delete_task_subtree(user_id, task_id, soft))

