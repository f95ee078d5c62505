"""Tag Repository."""

from task_ledger_mcp.database.repositories.base_repository import DocumentRepository
from task_ledger_mcp.domain.entities.tag import TagDTO
from task_ledger_mcp.domain.interfaces.document_store import IDocumentStore


class TagRepository(DocumentRepository[TagDTO]):
    """Tag repository over ``users/{uid}/tags``."""

    collection_name = "tags"
    field_map = {
        "name": "name",
        "color": "color",
        "order": "order",
        "usage_count": "usageCount",
    }

    def __init__(self, store: IDocumentStore):
        super().__init__(store, TagDTO.from_document)
