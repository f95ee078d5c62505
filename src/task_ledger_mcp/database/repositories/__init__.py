"""Database repositories."""

from task_ledger_mcp.database.repositories.base_repository import DocumentRepository
from task_ledger_mcp.database.repositories.project_repository import ProjectRepository
from task_ledger_mcp.database.repositories.tag_repository import TagRepository
from task_ledger_mcp.database.repositories.task_repository import TaskRepository
from task_ledger_mcp.database.repositories.user_repository import UserRepository

__all__ = [
    "DocumentRepository",
    "ProjectRepository",
    "TagRepository",
    "TaskRepository",
    "UserRepository",
]
