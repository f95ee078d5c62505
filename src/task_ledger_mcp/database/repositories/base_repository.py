"""
Document Repository Base.

Typed access to one per-user collection of the document store. DTO attribute
names are mapped to stored field names here so the services never deal with
the stored shape.
"""

from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, Sequence, TypeVar

from task_ledger_mcp.database.exceptions import DocumentMissingError
from task_ledger_mcp.database.paths import StorePaths, join_path
from task_ledger_mcp.domain.interfaces.document_store import IDocumentStore

D = TypeVar("D")


class DocumentRepository(Generic[D]):
    """
    Repository over ``users/{uid}/{collection_name}``.

    Store failures propagate as ``StoreUnavailableError``; the services turn
    them into domain results.
    """

    collection_name: str = ""
    field_map: Dict[str, str] = {}

    def __init__(self, store: IDocumentStore, from_document: Callable[[Dict[str, Any]], D]):
        """
        Initialize repository with a document store.

        Args:
            store: Document store the repository reads and writes.
            from_document: Converts a stored document into the DTO.
        """
        self.store = store
        self._from_document = from_document

    def collection(self, uid: str) -> str:
        return StorePaths.collection(uid, self.collection_name)

    def path(self, uid: str, doc_id: str) -> str:
        return join_path(self.collection(uid), doc_id)

    def to_fields(self, values: Dict[str, Any]) -> Dict[str, Any]:
        """Map DTO attributes to stored field names."""
        unknown = set(values) - set(self.field_map)
        if unknown:
            raise ValueError(f"Unknown {self.collection_name} fields: {sorted(unknown)}")
        return {self.field_map[name]: value for name, value in values.items()}

    def get(self, uid: str, doc_id: str) -> Optional[D]:
        """Get a DTO by id, or None if the document does not exist."""
        doc = self.store.get(self.path(uid, doc_id))
        return self._from_document(doc) if doc is not None else None

    def create(self, uid: str, values: Dict[str, Any], doc_id: Optional[str] = None) -> D:
        """Create a document from DTO attributes and return it as stored."""
        new_id = self.store.add(self.collection(uid), self.to_fields(values), doc_id)
        created = self.get(uid, new_id)
        if created is None:
            raise DocumentMissingError(self.path(uid, new_id))
        return created

    def write(self, uid: str, doc_id: str, changes: Dict[str, Any]) -> bool:
        """Merge attribute changes onto an existing document.

        Returns:
            False if the document does not exist.
        """
        return self.store.update(self.path(uid, doc_id), self.to_fields(changes))

    def delete(self, uid: str, doc_id: str) -> bool:
        return self.store.delete(self.path(uid, doc_id))

    def find(
        self,
        uid: str,
        where: Optional[Iterable[Sequence[Any]]] = None,
        order_by: Optional[Iterable[Sequence[str]]] = None,
        limit: Optional[int] = None,
        start_after: Optional[str] = None,
    ) -> List[D]:
        docs = self.store.find(
            self.collection(uid),
            where=where,
            order_by=order_by,
            limit=limit,
            start_after=start_after,
        )
        return [self._from_document(doc) for doc in docs]

    def list_ordered(self, uid: str) -> List[D]:
        """All documents ordered by ``order`` then creation time."""
        return self.find(uid, order_by=[("order", "asc"), ("createdAt", "asc")])
