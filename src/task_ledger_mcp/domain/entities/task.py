"""
Task Domain Entity (DTO).

Data Transfer Object for Task entity, providing a clean interface between
the service layer and the document store.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class TaskStatus(str, Enum):
    """Task workflow status."""

    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"
    BLOCKED = "BLOCKED"


class Priority(str, Enum):
    """Task priority."""

    NONE = "NONE"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


# DTO attribute -> document field
TASK_FIELDS: Dict[str, str] = {
    "title": "title",
    "description": "description",
    "status": "status",
    "priority": "priority",
    "project_id": "projectId",
    "parent_id": "parentId",
    "tag_ids": "tagIds",
    "order": "order",
    "due_at": "dueAt",
    "remind_at": "remindAt",
    "completed_at": "completedAt",
    "archived_at": "archivedAt",
    "deleted_at": "deletedAt",
    "url": "url",
}

TASK_TIMESTAMP_FIELDS = ("due_at", "remind_at", "completed_at", "archived_at", "deleted_at")


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string (or pass through a datetime)."""
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def unique_ids(values: Optional[List[str]]) -> List[str]:
    """Deduplicate ids, keeping first occurrence order."""
    return list(dict.fromkeys(values or []))


@dataclass
class TaskDTO:
    """
    Task Data Transfer Object.

    Attributes:
        id: Document id
        title: Task title (required)
        description: Free text description
        status: TODO, IN_PROGRESS, DONE or BLOCKED
        priority: NONE, LOW, MEDIUM, HIGH or URGENT
        project_id: Owning project, or None
        parent_id: Parent task for subtasks, or None
        tag_ids: Referenced tag ids (set semantics)
        order: Sibling ordering
        due_at: Due timestamp
        remind_at: Reminder timestamp
        completed_at: Set while the task is DONE
        archived_at: Set while the task is archived
        deleted_at: Set while the task is soft-deleted
        url: Optional link
        created_at: Creation timestamp
        updated_at: Last modification timestamp
    """

    id: str
    title: str
    description: str = ""
    status: str = TaskStatus.TODO.value
    priority: str = Priority.MEDIUM.value
    project_id: Optional[str] = None
    parent_id: Optional[str] = None
    tag_ids: List[str] = field(default_factory=list)
    order: int = 0
    due_at: Optional[datetime] = None
    remind_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    archived_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None
    url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert DTO to dictionary representation."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "priority": self.priority,
            "project_id": self.project_id,
            "parent_id": self.parent_id,
            "tag_ids": list(self.tag_ids),
            "order": self.order,
            "due_at": self.due_at.isoformat() if self.due_at else None,
            "remind_at": self.remind_at.isoformat() if self.remind_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "archived_at": self.archived_at.isoformat() if self.archived_at else None,
            "deleted_at": self.deleted_at.isoformat() if self.deleted_at else None,
            "url": self.url,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "TaskDTO":
        """Create DTO from a stored task document."""
        return cls(
            id=doc["id"],
            title=doc.get("title", ""),
            description=doc.get("description") or "",
            status=doc.get("status", TaskStatus.TODO.value),
            priority=doc.get("priority", Priority.MEDIUM.value),
            project_id=doc.get("projectId"),
            parent_id=doc.get("parentId"),
            tag_ids=unique_ids(doc.get("tagIds")),
            order=doc.get("order", 0),
            due_at=parse_datetime(doc.get("dueAt")),
            remind_at=parse_datetime(doc.get("remindAt")),
            completed_at=parse_datetime(doc.get("completedAt")),
            archived_at=parse_datetime(doc.get("archivedAt")),
            deleted_at=parse_datetime(doc.get("deletedAt")),
            url=doc.get("url"),
            created_at=parse_datetime(doc.get("createdAt")),
            updated_at=parse_datetime(doc.get("updatedAt")),
        )


class _Unset:
    """Marker for an argument the caller did not supply."""

    _instance: Optional["_Unset"] = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()
