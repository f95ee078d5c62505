"""
Document Store.

Path-addressed hierarchical document store on top of SQLAlchemy. Provides typed
CRUD, filtered/ordered/paginated queries, atomic server-side increments and
write batches of at most ``BATCH_LIMIT`` operations, each committed as a single
database transaction.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Dict, Generator, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from task_ledger_mcp.constants import BATCH_LIMIT
from task_ledger_mcp.database.exceptions import (
    BatchCommittedError,
    BatchLimitExceededError,
    StoreUnavailableError,
)
from task_ledger_mcp.database.field_values import (
    SERVER_TIMESTAMP,
    ArrayRemove,
    ArrayUnion,
    Increment,
    ServerTimestamp,
    apply_fields,
)
from task_ledger_mcp.database.models import (
    Document,
    encode_value,
    generate_id,
    get_current_timestamp,
)
from task_ledger_mcp.database.orm_manager import ORMManager, get_orm_manager
from task_ledger_mcp.database.paths import join_path, split_path
from task_ledger_mcp.database.query import (
    DOCUMENT_ID,
    QueryError,
    apply_cursor,
    matches,
    normalize_order_by,
    normalize_where,
    project_fields,
    sort_documents,
)

logger = logging.getLogger(__name__)

DocumentData = Dict[str, Any]


def _to_result(doc_id: str, data: DocumentData) -> DocumentData:
    return {"id": doc_id, **data}


def _document_key(path: str) -> str:
    """Normalized document path; raises ValueError for anything else."""
    return join_path(*split_path(path))


class WriteBatch:
    """
    A bounded set of writes committed together as one store call.

    A batch is not a transaction over reads: it only guarantees that all of its
    writes land or none do.
    """

    def __init__(self, store: "DocumentStore", limit: int = BATCH_LIMIT):
        self._store = store
        self._limit = limit
        self._ops: List[Tuple[str, str, DocumentData, bool]] = []
        self._committed = False

    def __len__(self) -> int:
        return len(self._ops)

    def _add(self, kind: str, path: str, fields: DocumentData, merge: bool = True) -> "WriteBatch":
        if self._committed:
            raise BatchCommittedError("Batch already committed")
        if len(self._ops) >= self._limit:
            raise BatchLimitExceededError(self._limit)
        self._ops.append((kind, _document_key(path), dict(fields), merge))
        return self

    def set(self, path: str, fields: DocumentData, merge: bool = True) -> "WriteBatch":
        """Create or overwrite (merge) a document."""
        return self._add("set", path, fields, merge)

    def update(self, path: str, fields: DocumentData) -> "WriteBatch":
        """Merge fields onto an existing document; skipped if it is missing."""
        return self._add("update", path, fields)

    def delete(self, path: str) -> "WriteBatch":
        """Delete a document; deleting a missing document is a no-op."""
        return self._add("delete", path, {})

    def commit(self) -> int:
        """Commit every write atomically. Returns the number of operations."""
        if self._committed:
            raise BatchCommittedError("Batch already committed")
        self._committed = True
        if not self._ops:
            return 0
        self._store._commit_ops(self._ops)
        return len(self._ops)


class DocumentStore:
    """
    Document store backed by the ORM manager's database.

    Every public method maps database failures to ``StoreUnavailableError``.
    """

    def __init__(self, orm_manager: Optional[ORMManager] = None):
        """
        Initialize the store with an ORM manager.

        Args:
            orm_manager: ORM manager instance. Uses singleton if not provided.
        """
        self.orm_manager = orm_manager or get_orm_manager()

    # --- Sentinels ---

    @staticmethod
    def increment(n: int) -> Increment:
        return Increment(n)

    @staticmethod
    def server_timestamp() -> ServerTimestamp:
        return SERVER_TIMESTAMP

    @staticmethod
    def array_union(*values: Any) -> ArrayUnion:
        return ArrayUnion(tuple(values))

    @staticmethod
    def array_remove(*values: Any) -> ArrayRemove:
        return ArrayRemove(tuple(values))

    @staticmethod
    def new_id() -> str:
        return generate_id()

    # --- Internals ---

    @contextmanager
    def _guard(self, operation: str) -> Generator[None, None, None]:
        try:
            yield
        except SQLAlchemyError as e:
            logger.error("Document store failure during %s: %s", operation, e, exc_info=True)
            raise StoreUnavailableError(operation, str(e)) from e

    def _write(
        self,
        session: Session,
        path: str,
        fields: DocumentData,
        now: datetime,
        merge: bool = True,
        create: bool = True,
    ) -> bool:
        doc = session.get(Document, path)
        stamp = encode_value(now)

        if doc is None:
            if not create:
                return False
            collection, doc_id = split_path(path)
            body = apply_fields({}, fields, now)
            body.setdefault("createdAt", stamp)
            body["updatedAt"] = stamp
            doc = Document(path=path, collection=collection, doc_id=doc_id)
            doc.set_data(body)
            session.add(doc)
            session.flush()
            return True

        existing = doc.get_data()
        body = apply_fields(existing, fields, now, merge=merge)
        if "createdAt" in existing:
            body.setdefault("createdAt", existing["createdAt"])
        body["updatedAt"] = stamp
        doc.set_data(body)
        doc.updated_at = now
        session.flush()
        return True

    def _delete(self, session: Session, path: str) -> bool:
        doc = session.get(Document, path)
        if doc is None:
            return False
        session.delete(doc)
        session.flush()
        return True

    def _commit_ops(self, ops: Sequence[Tuple[str, str, DocumentData, bool]]) -> None:
        now = get_current_timestamp()
        with self._guard("batch_commit"), self.orm_manager.get_session() as session:
            for kind, path, fields, merge in ops:
                if kind == "delete":
                    self._delete(session, path)
                else:
                    self._write(session, path, fields, now, merge=merge, create=kind == "set")
        logger.debug("Committed batch of %d writes", len(ops))

    def _load_collection(
        self, session: Session, collection: str, where: Sequence[Tuple[str, str, Any]]
    ) -> List[Tuple[str, DocumentData]]:
        query = select(Document).where(Document.collection == collection.strip("/"))

        # Scalar equality filters are pushed into SQL as a prefilter; the
        # in-process evaluation below stays authoritative.
        for field, op, value in where:
            if (
                op == "=="
                and field != DOCUMENT_ID
                and isinstance(value, (str, int, float))
                and not isinstance(value, bool)
            ):
                query = query.where(func.json_extract(Document.data, f"$.{field}") == value)

        docs = session.execute(query).scalars().all()
        return [(doc.doc_id, doc.get_data()) for doc in docs]

    # --- CRUD ---

    def get(self, path: str) -> Optional[DocumentData]:
        """Get a document by path, or None if it does not exist."""
        with self._guard("get"), self.orm_manager.get_session() as session:
            doc = session.get(Document, _document_key(path))
            if doc is None:
                return None
            return _to_result(doc.doc_id, doc.get_data())

    def set(self, path: str, fields: DocumentData, merge: bool = True) -> None:
        """Create or overwrite a document. ``createdAt`` is kept on merge."""
        now = get_current_timestamp()
        with self._guard("set"), self.orm_manager.get_session() as session:
            self._write(session, _document_key(path), fields, now, merge=merge)

    def add(self, collection: str, fields: DocumentData, doc_id: Optional[str] = None) -> str:
        """Create a document in a collection and return its id."""
        doc_id = doc_id or self.new_id()
        self.set(join_path(collection, doc_id), fields, merge=True)
        return doc_id

    def update(self, path: str, fields: DocumentData) -> bool:
        """Merge fields onto an existing document and stamp ``updatedAt``.

        Returns:
            False if the document does not exist (nothing is written).
        """
        now = get_current_timestamp()
        with self._guard("update"), self.orm_manager.get_session() as session:
            return self._write(session, _document_key(path), fields, now, create=False)

    def delete(self, path: str) -> bool:
        """Delete a document. Returns False if it did not exist."""
        with self._guard("delete"), self.orm_manager.get_session() as session:
            return self._delete(session, _document_key(path))

    # --- Queries ---

    def find(
        self,
        collection: str,
        where: Optional[Iterable[Sequence[Any]]] = None,
        order_by: Optional[Iterable[Sequence[str]]] = None,
        limit: Optional[int] = None,
        start_after: Optional[str] = None,
        select: Optional[Sequence[str]] = None,
    ) -> List[DocumentData]:
        """
        Query a collection.

        Args:
            collection: Collection path, e.g. ``users/u1/tasks``.
            where: (field, op, value) clauses, all of which must match.
            order_by: (field, "asc"|"desc") clauses; the document id is always
                appended as the final tiebreaker.
            limit: Maximum number of documents to return.
            start_after: Document id of the cursor; only documents ordered
                strictly after it are returned.
            select: Restrict returned bodies to these fields (``id`` is always
                included).

        Returns:
            List of documents as dicts with an ``id`` key.
        """
        clauses = normalize_where(where)
        ordering = normalize_order_by(order_by)

        with self._guard("find"), self.orm_manager.get_session() as session:
            docs = [
                (doc_id, data)
                for doc_id, data in self._load_collection(session, collection, clauses)
                if matches(doc_id, data, clauses)
            ]
            docs = sort_documents(docs, ordering)

            if start_after is not None:
                cursor_doc = session.get(Document, join_path(collection, start_after))
                if cursor_doc is not None:
                    cursor = (cursor_doc.doc_id, cursor_doc.get_data())
                elif all(field == DOCUMENT_ID for field, _ in ordering):
                    cursor = (start_after, {})
                else:
                    raise QueryError(f"Cursor document '{start_after}' does not exist")
                docs = apply_cursor(docs, ordering, cursor)

        if limit is not None:
            docs = docs[: max(limit, 0)]
        return [_to_result(doc_id, project_fields(data, select)) for doc_id, data in docs]

    def count(self, collection: str, where: Optional[Iterable[Sequence[Any]]] = None) -> int:
        """Count documents in a collection matching the where clauses."""
        clauses = normalize_where(where)
        with self._guard("count"), self.orm_manager.get_session() as session:
            return sum(
                1
                for doc_id, data in self._load_collection(session, collection, clauses)
                if matches(doc_id, data, clauses)
            )

    # --- Batches ---

    def batch(self) -> WriteBatch:
        """Create an empty write batch."""
        return WriteBatch(self)

    def run_batch(self, fn: Callable[[WriteBatch], None]) -> int:
        """Collect writes through ``fn`` and commit them as one batch."""
        batch = self.batch()
        fn(batch)
        return batch.commit()

    def bulk_delete(self, paths: Sequence[str], chunk_size: int = BATCH_LIMIT) -> int:
        """Delete documents in sequential batches of ``chunk_size``."""

        def chunk_writer(chunk: Sequence[str]) -> Callable[[WriteBatch], None]:
            def write(batch: WriteBatch) -> None:
                for path in chunk:
                    batch.delete(path)

            return write

        total = 0
        for start in range(0, len(paths), chunk_size):
            total += self.run_batch(chunk_writer(paths[start : start + chunk_size]))
        return total

    def bulk_soft_delete(self, paths: Sequence[str], chunk_size: int = BATCH_LIMIT) -> int:
        """Mark documents ``deletedAt`` in sequential batches."""
        now = get_current_timestamp()
        return self.bulk_update([(path, {"deletedAt": now}) for path in paths], chunk_size)

    def bulk_update(
        self, updates: Sequence[Tuple[str, DocumentData]], chunk_size: int = BATCH_LIMIT
    ) -> int:
        """Merge fields onto existing documents in sequential batches."""

        def chunk_writer(chunk: Sequence[Tuple[str, DocumentData]]) -> Callable[[WriteBatch], None]:
            def write(batch: WriteBatch) -> None:
                for path, fields in chunk:
                    batch.update(path, fields)

            return write

        total = 0
        for start in range(0, len(updates), chunk_size):
            total += self.run_batch(chunk_writer(updates[start : start + chunk_size]))
        return total
