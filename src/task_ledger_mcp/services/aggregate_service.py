"""
Aggregate Maintenance Service.

Applies counter deltas to projects (``taskCount``, ``openCount``) and tags
(``usageCount``) whenever a task's attribution or openness changes. Every
counter write is an atomic server-side increment; the counters are never read
back and rewritten here, except by the explicit reconciliation operations.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from task_ledger_mcp.database.paths import StorePaths
from task_ledger_mcp.domain.entities.task import TaskDTO, TaskStatus
from task_ledger_mcp.domain.interfaces.document_store import IDocumentStore
from task_ledger_mcp.domain.lifecycle import CounterDeltas, compute_counter_deltas

logger = logging.getLogger(__name__)


class AggregateService:
    """Keeps the denormalized project and tag counters in step with tasks."""

    def __init__(self, store: IDocumentStore):
        """Initialize service with the document store."""
        self.store = store

    def apply(
        self, uid: str, before: Optional[TaskDTO], after: Optional[TaskDTO]
    ) -> CounterDeltas:
        """
        Apply the deltas that move counters from ``before`` to ``after``.

        Args:
            uid: Owning user id.
            before: Task snapshot before the change, None for a creation.
            after: Task snapshot after the change, None for a physical delete.

        Returns:
            The deltas that were applied.
        """
        deltas = compute_counter_deltas(before, after)
        self.apply_deltas(uid, deltas)
        return deltas

    def apply_deltas(self, uid: str, deltas: CounterDeltas) -> int:
        """
        Write a delta set as increments.

        Each counter document receives one update with an increment per
        changed field. Updates to projects or tags that no longer exist are
        skipped by the store instead of recreating the document.

        Returns:
            Number of counter documents addressed.
        """
        if deltas.is_empty():
            return 0

        updates: List[Tuple[str, Dict[str, Any]]] = []
        for project_id, delta in sorted(deltas.projects.items()):
            fields: Dict[str, Any] = {}
            if delta.task_count:
                fields["taskCount"] = self.store.increment(delta.task_count)
            if delta.open_count:
                fields["openCount"] = self.store.increment(delta.open_count)
            updates.append((StorePaths.project_doc(uid, project_id), fields))

        for tag_id, amount in sorted(deltas.tags.items()):
            updates.append(
                (StorePaths.tag_doc(uid, tag_id), {"usageCount": self.store.increment(amount)})
            )

        self.store.bulk_update(updates)
        logger.debug("Applied counter deltas for user %s: %s", uid, deltas.to_dict())
        return len(updates)

    # --- Reconciliation ---

    def reconcile_project(self, uid: str, project_id: str) -> Optional[Dict[str, int]]:
        """
        Recompute a project's counters from its tasks and overwrite them.

        Returns:
            The recomputed counters, or None if the project does not exist.
        """
        tasks_col = StorePaths.tasks_col(uid)
        live = [("projectId", "==", project_id), ("deletedAt", "==", None)]
        task_count = self.store.count(tasks_col, live)
        open_count = self.store.count(
            tasks_col,
            live + [("archivedAt", "==", None), ("status", "!=", TaskStatus.DONE.value)],
        )
        counters = {"task_count": task_count, "open_count": open_count}

        written = self.store.update(
            StorePaths.project_doc(uid, project_id),
            {"taskCount": task_count, "openCount": open_count},
        )
        if not written:
            return None
        logger.info("Reconciled project %s counters: %s", project_id, counters)
        return counters

    def reconcile_tag(self, uid: str, tag_id: str) -> Optional[Dict[str, int]]:
        """Recompute a tag's usage count from its tasks and overwrite it."""
        usage_count = self.store.count(
            StorePaths.tasks_col(uid),
            [("tagIds", "array-contains", tag_id), ("deletedAt", "==", None)],
        )
        written = self.store.update(StorePaths.tag_doc(uid, tag_id), {"usageCount": usage_count})
        if not written:
            return None
        logger.info("Reconciled tag %s usage count: %d", tag_id, usage_count)
        return {"usage_count": usage_count}
