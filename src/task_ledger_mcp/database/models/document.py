"""
Document SQLAlchemy Model.

Represents one document of the hierarchical store, addressed by its full path
(for example ``users/u1/tasks/abc``).
"""

from datetime import datetime
from typing import Any, Dict

from sqlalchemy import Column, DateTime, Index, String, Text

from task_ledger_mcp.database.models.base import (
    Base,
    BaseDataProcessor,
    get_current_timestamp,
)


class Document(Base):
    """
    Document model.

    The JSON body lives in ``data``; ``collection`` is the parent collection
    path so that a collection can be listed without parsing paths.
    """

    __tablename__ = "documents"

    path: str = Column(String(512), primary_key=True)
    collection: str = Column(String(512), nullable=False)
    doc_id: str = Column(String(128), nullable=False)
    data: str = Column(Text, nullable=False, default="{}")
    created_at: datetime = Column(DateTime, nullable=False, default=get_current_timestamp)
    updated_at: datetime = Column(
        DateTime, nullable=False, default=get_current_timestamp, onupdate=get_current_timestamp
    )

    __table_args__ = (Index("ix_documents_collection_doc_id", "collection", "doc_id"),)

    def get_data(self) -> Dict[str, Any]:
        """Get the document body as a dict."""
        return BaseDataProcessor.safe_json_loads(self.data, fallback={})

    def set_data(self, data: Dict[str, Any]) -> None:
        """Replace the document body."""
        self.data = BaseDataProcessor.json_dumps(data)

    def __repr__(self) -> str:
        return f"<Document(path={self.path!r})>"
