"""Domain interfaces - Protocol-based storage contracts."""

from task_ledger_mcp.domain.interfaces.document_store import IDocumentStore, IWriteBatch

__all__ = [
    "IDocumentStore",
    "IWriteBatch",
]
