"""
Task Repository.

Document-store repository for task documents, including the paginated
back-reference queries the cascades walk.
"""

from typing import Any, Dict, List, Optional

from task_ledger_mcp.database.query import DOCUMENT_ID
from task_ledger_mcp.database.repositories.base_repository import DocumentRepository
from task_ledger_mcp.domain.entities.task import TASK_FIELDS, TaskDTO, unique_ids
from task_ledger_mcp.domain.interfaces.document_store import IDocumentStore

BY_ID = [(DOCUMENT_ID, "asc")]


class TaskRepository(DocumentRepository[TaskDTO]):
    """Task repository over ``users/{uid}/tasks``."""

    collection_name = "tasks"
    field_map = TASK_FIELDS

    def __init__(self, store: IDocumentStore):
        super().__init__(store, TaskDTO.from_document)

    def to_fields(self, values: Dict[str, Any]) -> Dict[str, Any]:
        if "tag_ids" in values and isinstance(values["tag_ids"], (list, tuple, set)):
            values = {**values, "tag_ids": unique_ids(list(values["tag_ids"]))}
        return super().to_fields(values)

    def children_page(
        self, uid: str, parent_id: str, limit: int, start_after: Optional[str] = None
    ) -> List[TaskDTO]:
        """One page of direct children of ``parent_id``, ordered by id."""
        return self.find(
            uid,
            where=[("parentId", "==", parent_id)],
            order_by=BY_ID,
            limit=limit,
            start_after=start_after,
        )

    def project_page(
        self, uid: str, project_id: str, limit: int, start_after: Optional[str] = None
    ) -> List[TaskDTO]:
        """One page of tasks attributed to ``project_id``, ordered by id."""
        return self.find(
            uid,
            where=[("projectId", "==", project_id)],
            order_by=BY_ID,
            limit=limit,
            start_after=start_after,
        )

    def tagged_page(
        self, uid: str, tag_id: str, limit: int, start_after: Optional[str] = None
    ) -> List[TaskDTO]:
        """One page of tasks whose ``tagIds`` contains ``tag_id``, ordered by id."""
        return self.find(
            uid,
            where=[("tagIds", "array-contains", tag_id)],
            order_by=BY_ID,
            limit=limit,
            start_after=start_after,
        )
