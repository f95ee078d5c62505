"""User Domain Entity (DTO)."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from task_ledger_mcp.domain.entities.task import parse_datetime


@dataclass
class UserDTO:
    """User identity record; owns every project, tag and task under its path."""

    id: str
    email: str
    name: Optional[str] = None
    image: Optional[str] = None
    deleted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert DTO to dictionary representation."""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "image": self.image,
            "deleted_at": self.deleted_at.isoformat() if self.deleted_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "UserDTO":
        """Create DTO from a stored user document."""
        return cls(
            id=doc["id"],
            email=doc.get("email", ""),
            name=doc.get("name"),
            image=doc.get("image"),
            deleted_at=parse_datetime(doc.get("deletedAt")),
            created_at=parse_datetime(doc.get("createdAt")),
            updated_at=parse_datetime(doc.get("updatedAt")),
        )
