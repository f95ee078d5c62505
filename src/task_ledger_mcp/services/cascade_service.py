"""
Cascade Engine.

Propagates deletion from a user, a project, a task or a tag to every document
that belongs to or references it. Each cascade is a paginated loop: a page is
read, written in batches of at most ``BATCH_LIMIT`` operations, and the loop
continues from a document-id cursor. Committed batches are never undone.

Tasks removed by a cascade that were not already soft-deleted give back their
counter contribution; the merged deltas are applied once the sweep is done.
"""

import logging
from collections import deque
from dataclasses import replace
from typing import Any, Deque, Dict, List, Optional, Set

from task_ledger_mcp.constants import CHILD_PAGE_SIZE, SWEEP_PAGE_SIZE, USER_COLLECTIONS
from task_ledger_mcp.database.models import get_current_timestamp
from task_ledger_mcp.database.paths import StorePaths, join_path
from task_ledger_mcp.database.query import DOCUMENT_ID
from task_ledger_mcp.database.repositories import (
    ProjectRepository,
    TagRepository,
    TaskRepository,
    UserRepository,
)
from task_ledger_mcp.domain.entities.task import TaskDTO
from task_ledger_mcp.domain.interfaces.document_store import IDocumentStore
from task_ledger_mcp.domain.lifecycle import CounterDeltas, compute_counter_deltas
from task_ledger_mcp.services.aggregate_service import AggregateService

logger = logging.getLogger(__name__)


def _removal_deltas(tasks: List[TaskDTO]) -> CounterDeltas:
    """Deltas for removing tasks; already soft-deleted tasks count for nothing."""
    deltas = CounterDeltas()
    for task in tasks:
        if task.deleted_at is None:
            deltas.merge(compute_counter_deltas(task, None))
    return deltas


class CascadeService:
    """Subtree, project, tag and user cascades."""

    def __init__(
        self,
        store: IDocumentStore,
        task_repo: TaskRepository,
        project_repo: ProjectRepository,
        tag_repo: TagRepository,
        user_repo: UserRepository,
        aggregate: AggregateService,
    ):
        """Initialize service with the store, repositories and aggregate service."""
        self.store = store
        self.task_repo = task_repo
        self.project_repo = project_repo
        self.tag_repo = tag_repo
        self.user_repo = user_repo
        self.aggregate = aggregate

    def _remove_tasks(self, uid: str, tasks: List[TaskDTO], soft: bool) -> int:
        """Soft-delete the live tasks, or hard-delete all of them."""
        if soft:
            paths = [self.task_repo.path(uid, t.id) for t in tasks if t.deleted_at is None]
            return self.store.bulk_soft_delete(paths)
        return self.store.bulk_delete([self.task_repo.path(uid, t.id) for t in tasks])

    # --- Task subtree ---

    def collect_subtree(self, uid: str, root: TaskDTO) -> List[TaskDTO]:
        """
        Breadth-first walk over ``parentId`` back-references.

        Child queries are paginated by ``CHILD_PAGE_SIZE``. Every task is
        visited once, so cycles and shared descendants terminate.

        Returns:
            The root followed by its descendants in visit order.
        """
        visited: Set[str] = {root.id}
        ordered: List[TaskDTO] = [root]
        queue: Deque[str] = deque([root.id])

        while queue:
            current = queue.popleft()
            cursor: Optional[str] = None
            while True:
                page = self.task_repo.children_page(uid, current, CHILD_PAGE_SIZE, cursor)
                for child in page:
                    if child.id in visited:
                        continue
                    visited.add(child.id)
                    ordered.append(child)
                    queue.append(child.id)
                if len(page) < CHILD_PAGE_SIZE:
                    break
                cursor = page[-1].id

        return ordered

    def delete_task_subtree(
        self, uid: str, task_id: str, soft: bool = True
    ) -> Optional[Dict[str, Any]]:
        """
        Delete or soft-delete a task and all of its descendants.

        Returns:
            Summary of the sweep, or None if the task does not exist.
        """
        root = self.task_repo.get(uid, task_id)
        if root is None:
            return None

        tasks = self.collect_subtree(uid, root)
        deltas = _removal_deltas(tasks)
        written = self._remove_tasks(uid, tasks, soft)
        self.aggregate.apply_deltas(uid, deltas)

        logger.info(
            "%s task subtree %s: %d tasks visited, %d written",
            "Soft-deleted" if soft else "Deleted",
            task_id,
            len(tasks),
            written,
        )
        return {
            "id": task_id,
            "soft": soft,
            "task_ids": [t.id for t in tasks],
            "written": written,
        }

    def restore_task_subtree(self, uid: str, task_id: str) -> Optional[TaskDTO]:
        """
        Undo a soft subtree deletion.

        A soft cascade stamps the root and every descendant it marks with the
        same ``deletedAt``; exactly those tasks are restored and their counter
        contributions given back. Descendants deleted at another time stay
        deleted.

        Returns:
            The root as stored afterwards, or None if the task does not exist.
        """
        root = self.task_repo.get(uid, task_id)
        if root is None or root.deleted_at is None:
            return root

        stamp = root.deleted_at
        restored = [t for t in self.collect_subtree(uid, root) if t.deleted_at == stamp]
        deltas = CounterDeltas()
        for task in restored:
            deltas.merge(compute_counter_deltas(task, replace(task, deleted_at=None)))

        self.store.bulk_update(
            [(self.task_repo.path(uid, t.id), {"deletedAt": None}) for t in restored]
        )
        self.aggregate.apply_deltas(uid, deltas)

        logger.info("Restored task subtree %s: %d tasks", task_id, len(restored))
        return self.task_repo.get(uid, task_id)

    # --- Project ---

    def delete_project(
        self, uid: str, project_id: str, soft: bool = True
    ) -> Optional[Dict[str, Any]]:
        """
        Delete or soft-delete a project and every task attributed to it.

        Returns:
            Summary of the sweep, or None if the project does not exist.
        """
        project = self.project_repo.get(uid, project_id)
        if project is None:
            return None

        deltas = CounterDeltas()
        swept = 0
        cursor: Optional[str] = None
        while True:
            page = self.task_repo.project_page(uid, project_id, SWEEP_PAGE_SIZE, cursor)
            if not page:
                break
            deltas.merge(_removal_deltas(page))
            self._remove_tasks(uid, page, soft)
            swept += len(page)
            if len(page) < SWEEP_PAGE_SIZE:
                break
            cursor = page[-1].id

        if soft:
            self.project_repo.write(uid, project_id, {"deleted_at": get_current_timestamp()})
        else:
            self.project_repo.delete(uid, project_id)

        # A hard-deleted project is gone, so only its tags still receive deltas.
        self.aggregate.apply_deltas(uid, deltas)

        logger.info(
            "%s project %s with %d tasks", "Soft-deleted" if soft else "Deleted", project_id, swept
        )
        return {"id": project_id, "soft": soft, "tasks": swept}

    # --- Tag ---

    def delete_tag(
        self, uid: str, tag_id: str, remove_only: bool = True
    ) -> Optional[Dict[str, Any]]:
        """
        Delete a tag, first detaching or deleting every task that references it.

        Args:
            uid: Owning user id.
            tag_id: Tag to delete.
            remove_only: Remove the tag id from referencing tasks (True) or
                hard-delete the referencing tasks (False).

        Returns:
            Summary of the sweep, or None if the tag does not exist.
        """
        tag = self.tag_repo.get(uid, tag_id)
        if tag is None:
            return None

        deltas = CounterDeltas()
        swept = 0
        cursor: Optional[str] = None
        while True:
            page = self.task_repo.tagged_page(uid, tag_id, SWEEP_PAGE_SIZE, cursor)
            if not page:
                break
            if remove_only:
                detach = {"tagIds": self.store.array_remove(tag_id)}
                self.store.bulk_update([(self.task_repo.path(uid, t.id), detach) for t in page])
            else:
                deltas.merge(_removal_deltas(page))
                self._remove_tasks(uid, page, soft=False)
            swept += len(page)
            if len(page) < SWEEP_PAGE_SIZE:
                break
            cursor = page[-1].id

        self.tag_repo.delete(uid, tag_id)
        self.aggregate.apply_deltas(uid, deltas)

        logger.info(
            "Deleted tag %s; %d tasks %s",
            tag_id,
            swept,
            "detached" if remove_only else "deleted",
        )
        return {"id": tag_id, "remove_only": remove_only, "tasks": swept}

    # --- User ---

    def _sweep_collection(self, uid: str, name: str, soft: bool) -> int:
        collection = StorePaths.collection(uid, name)
        swept = 0

        if soft:
            cursor: Optional[str] = None
            while True:
                page = self.store.find(
                    collection,
                    where=[("deletedAt", "==", None)],
                    order_by=[(DOCUMENT_ID, "asc")],
                    limit=SWEEP_PAGE_SIZE,
                    start_after=cursor,
                    select=["deletedAt"],
                )
                if not page:
                    break
                swept += self.store.bulk_soft_delete(
                    [join_path(collection, doc["id"]) for doc in page]
                )
                if len(page) < SWEEP_PAGE_SIZE:
                    break
                cursor = page[-1]["id"]
            return swept

        while True:
            page = self.store.find(collection, limit=SWEEP_PAGE_SIZE, select=["deletedAt"])
            if not page:
                break
            swept += self.store.bulk_delete([join_path(collection, doc["id"]) for doc in page])
        return swept

    def delete_user(self, uid: str, soft: bool = True) -> Dict[str, Any]:
        """
        Delete or soft-delete everything a user owns, then the user document.

        Counters are not adjusted: every counter-bearing document goes with
        the user.
        """
        summary: Dict[str, Any] = {"id": uid, "soft": soft}
        for name in USER_COLLECTIONS:
            summary[name] = self._sweep_collection(uid, name, soft)

        if soft:
            summary["user"] = self.user_repo.write(uid, {"deleted_at": get_current_timestamp()})
        else:
            summary["user"] = self.user_repo.delete(uid)

        logger.info("%s user %s: %s", "Soft-deleted" if soft else "Deleted", uid, summary)
        return summary
