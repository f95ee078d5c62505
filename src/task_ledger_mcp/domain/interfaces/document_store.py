"""Document Store Interface."""

from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple


class IWriteBatch(Protocol):
    """Protocol for a bounded set of writes committed together."""

    def set(self, path: str, fields: Dict[str, Any], merge: bool = True) -> "IWriteBatch":
        """Create or overwrite (merge) a document."""
        ...

    def update(self, path: str, fields: Dict[str, Any]) -> "IWriteBatch":
        """Merge fields onto an existing document."""
        ...

    def delete(self, path: str) -> "IWriteBatch":
        """Delete a document."""
        ...

    def commit(self) -> int:
        """Commit every write atomically."""
        ...


class IDocumentStore(Protocol):
    """Protocol for the path-addressed document store used by the core."""

    def increment(self, n: int) -> Any:
        """Sentinel: atomically add ``n`` to a field."""
        ...

    def server_timestamp(self) -> Any:
        """Sentinel: the store's commit timestamp."""
        ...

    def array_union(self, *values: Any) -> Any:
        """Sentinel: add values to an array field."""
        ...

    def array_remove(self, *values: Any) -> Any:
        """Sentinel: remove values from an array field."""
        ...

    def new_id(self) -> str:
        """Generate a fresh document id."""
        ...

    def get(self, path: str) -> Optional[Dict[str, Any]]:
        """Get a document by path."""
        ...

    def set(self, path: str, fields: Dict[str, Any], merge: bool = True) -> None:
        """Create or overwrite a document."""
        ...

    def add(self, collection: str, fields: Dict[str, Any], doc_id: Optional[str] = None) -> str:
        """Create a document in a collection."""
        ...

    def update(self, path: str, fields: Dict[str, Any]) -> bool:
        """Merge fields onto an existing document."""
        ...

    def delete(self, path: str) -> bool:
        """Delete a document."""
        ...

    def find(
        self,
        collection: str,
        where: Optional[Iterable[Sequence[Any]]] = None,
        order_by: Optional[Iterable[Sequence[str]]] = None,
        limit: Optional[int] = None,
        start_after: Optional[str] = None,
        select: Optional[Sequence[str]] = None,
    ) -> List[Dict[str, Any]]:
        """Query a collection."""
        ...

    def count(self, collection: str, where: Optional[Iterable[Sequence[Any]]] = None) -> int:
        """Count matching documents."""
        ...

    def run_batch(self, fn: Callable[[Any], None]) -> int:
        """Collect writes through ``fn`` and commit them as one batch."""
        ...

    def bulk_delete(self, paths: Sequence[str], chunk_size: int = ...) -> int:
        """Delete documents in sequential batches."""
        ...

    def bulk_soft_delete(self, paths: Sequence[str], chunk_size: int = ...) -> int:
        """Mark documents deleted in sequential batches."""
        ...

    def bulk_update(
        self, updates: Sequence[Tuple[str, Dict[str, Any]]], chunk_size: int = ...
    ) -> int:
        """Merge fields onto existing documents in sequential batches."""
        ...
