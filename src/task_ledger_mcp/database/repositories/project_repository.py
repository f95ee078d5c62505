"""Project Repository."""

from task_ledger_mcp.database.repositories.base_repository import DocumentRepository
from task_ledger_mcp.domain.entities.project import ProjectDTO
from task_ledger_mcp.domain.interfaces.document_store import IDocumentStore


class ProjectRepository(DocumentRepository[ProjectDTO]):
    """Project repository over ``users/{uid}/projects``."""

    collection_name = "projects"
    field_map = {
        "name": "name",
        "color": "color",
        "order": "order",
        "task_count": "taskCount",
        "open_count": "openCount",
        "deleted_at": "deletedAt",
    }

    def __init__(self, store: IDocumentStore):
        super().__init__(store, ProjectDTO.from_document)
