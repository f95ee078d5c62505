"""
Project Domain Entity (DTO).

Carries denormalized counters that are only ever changed through atomic
increments or an explicit recount.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from task_ledger_mcp.domain.entities.task import parse_datetime


@dataclass
class ProjectDTO:
    """
    Project Data Transfer Object.

    Attributes:
        id: Document id
        name: Project name
        color: Optional display color
        order: Ordering among the user's projects
        task_count: Non-deleted tasks attributed to the project
        open_count: Subset of task_count that is open
        deleted_at: Set while the project is soft-deleted
    """

    id: str
    name: str
    color: Optional[str] = None
    order: int = 0
    task_count: int = 0
    open_count: int = 0
    deleted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert DTO to dictionary representation."""
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "order": self.order,
            "task_count": self.task_count,
            "open_count": self.open_count,
            "deleted_at": self.deleted_at.isoformat() if self.deleted_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "ProjectDTO":
        """Create DTO from a stored project document."""
        return cls(
            id=doc["id"],
            name=doc.get("name", ""),
            color=doc.get("color"),
            order=doc.get("order", 0),
            task_count=doc.get("taskCount", 0),
            open_count=doc.get("openCount", 0),
            deleted_at=parse_datetime(doc.get("deletedAt")),
            created_at=parse_datetime(doc.get("createdAt")),
            updated_at=parse_datetime(doc.get("updatedAt")),
        )
