"""Database models."""

from task_ledger_mcp.database.models.base import (
    Base,
    BaseDataProcessor,
    encode_value,
    generate_id,
    get_current_timestamp,
)
from task_ledger_mcp.database.models.document import Document

__all__ = [
    "Base",
    "BaseDataProcessor",
    "encode_value",
    "generate_id",
    "get_current_timestamp",
    "Document",
]
