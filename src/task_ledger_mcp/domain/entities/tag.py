"""Tag Domain Entity (DTO)."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from task_ledger_mcp.domain.entities.task import parse_datetime


@dataclass
class TagDTO:
    """
    Tag Data Transfer Object.

    Attributes:
        id: Document id
        name: Tag name
        color: Optional display color
        order: Ordering among the user's tags
        usage_count: Non-deleted tasks referencing the tag
    """

    id: str
    name: str
    color: Optional[str] = None
    order: int = 0
    usage_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert DTO to dictionary representation."""
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "order": self.order,
            "usage_count": self.usage_count,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "TagDTO":
        """Create DTO from a stored tag document."""
        return cls(
            id=doc["id"],
            name=doc.get("name", ""),
            color=doc.get("color"),
            order=doc.get("order", 0),
            usage_count=doc.get("usageCount", 0),
            created_at=parse_datetime(doc.get("createdAt")),
            updated_at=parse_datetime(doc.get("updatedAt")),
        )
