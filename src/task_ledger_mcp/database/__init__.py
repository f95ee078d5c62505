"""Database layer - SQLAlchemy-backed document store and repositories."""

from task_ledger_mcp.database.document_store import DocumentStore, WriteBatch
from task_ledger_mcp.database.exceptions import (
    BatchLimitExceededError,
    DocumentStoreError,
    StoreUnavailableError,
)
from task_ledger_mcp.database.models.base import Base
from task_ledger_mcp.database.orm_manager import ORMManager, get_orm_manager
from task_ledger_mcp.database.paths import StorePaths
from task_ledger_mcp.database.query import DOCUMENT_ID

__all__ = [
    "ORMManager",
    "get_orm_manager",
    "Base",
    "DocumentStore",
    "WriteBatch",
    "DocumentStoreError",
    "StoreUnavailableError",
    "BatchLimitExceededError",
    "StorePaths",
    "DOCUMENT_ID",
]
