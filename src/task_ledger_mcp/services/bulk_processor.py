"""
Bulk Command Processor.

Runs a list of task actions strictly in order, one at a time, by delegating
each variant to the task service. There is no atomicity across actions: the
first failure stops the queue and everything before it stays applied.
"""

import logging
from typing import Any, Dict, List

from task_ledger_mcp.domain.entities.bulk_actions import (
    ArchiveAction,
    BulkAction,
    BulkActionError,
    CompleteAction,
    CreateAction,
    DeleteAction,
    MoveAction,
    ReorderAction,
    RestoreAction,
    SoftDeleteAction,
    UnarchiveAction,
    UncompleteAction,
    UpdateAction,
    parse_bulk_actions,
)
from task_ledger_mcp.domain.entities.result_types import (
    DomainError,
    DomainResult,
    DomainSuccess,
)
from task_ledger_mcp.services.task_service import TaskService

logger = logging.getLogger(__name__)

CREATE_FIELDS = frozenset(
    {
        "title",
        "description",
        "status",
        "priority",
        "project_id",
        "parent_id",
        "tag_ids",
        "order",
        "due_at",
        "remind_at",
        "url",
    }
)


class BulkProcessor:
    """Sequential executor for heterogeneous task actions."""

    def __init__(self, task_service: TaskService):
        self.task_service = task_service

    def _dispatch(self, user_id: str, action: BulkAction) -> DomainResult[Any]:
        tasks = self.task_service

        if isinstance(action, CreateAction):
            unknown = set(action.data) - CREATE_FIELDS
            if unknown:
                return DomainError.validation_error(f"Unknown task fields: {sorted(unknown)}")
            return tasks.create_task(user_id, **{"title": "", **action.data})
        if isinstance(action, UpdateAction):
            return tasks.update_task(user_id, action.id, action.data)
        if isinstance(action, (DeleteAction, SoftDeleteAction)):
            soft = isinstance(action, SoftDeleteAction)
            result = tasks.remove_task(user_id, action.id, soft=soft)
            if result.is_failure:
                return result
            return DomainSuccess.create(data={"id": action.id, "ok": True})
        if isinstance(action, RestoreAction):
            return tasks.restore_task(user_id, action.id)
        if isinstance(action, MoveAction):
            return tasks.move_task(
                user_id, action.id, action.project_id, action.parent_id, action.order
            )
        if isinstance(action, ReorderAction):
            return tasks.reorder_task(user_id, action.id, action.order)
        if isinstance(action, ArchiveAction):
            return tasks.archive_task(user_id, action.id)
        if isinstance(action, UnarchiveAction):
            return tasks.unarchive_task(user_id, action.id)
        if isinstance(action, CompleteAction):
            return tasks.complete_task(user_id, action.id)
        if isinstance(action, UncompleteAction):
            return tasks.uncomplete_task(user_id, action.id)
        raise TypeError(f"Unhandled bulk action: {action!r}")

    def run(self, user_id: str, actions: List[BulkAction]) -> DomainResult[Dict[str, Any]]:
        """
        Execute parsed actions in order.

        Returns:
            DomainResult with ``{"results": [...]}``, one entry per action. On
            failure, the error details carry the failing ``index`` and ``op``
            and the ``results`` collected before it.
        """
        results: List[Any] = []
        for index, action in enumerate(actions):
            result = self._dispatch(user_id, action)
            if result.is_failure:
                logger.warning(
                    "Bulk action %d (%s) failed, %d actions not run: %s",
                    index,
                    action.op,
                    len(actions) - index - 1,
                    result.error_message,
                )
                return DomainError.create(
                    result.error_type,  # type: ignore[arg-type]
                    f"Bulk action {index} ({action.op}) failed: {result.error_message}",
                    {
                        **result.error_details,
                        "index": index,
                        "op": action.op,
                        "results": results,
                    },
                    result.suggestions,
                )
            results.append(result.data)

        return DomainSuccess.create(data={"results": results})

    def bulk_tasks(
        self, user_id: str, payloads: List[Dict[str, Any]]
    ) -> DomainResult[Dict[str, Any]]:
        """Parse raw ``{"op": ...}`` payloads, then run them.

        Nothing runs if any payload is malformed.
        """
        try:
            actions = parse_bulk_actions(payloads)
        except BulkActionError as e:
            return DomainError.validation_error(
                str(e), suggestions=["Use one of the supported ops with the required fields"]
            )
        return self.run(user_id, actions)
