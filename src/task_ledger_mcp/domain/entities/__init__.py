"""Domain entities - Data Transfer Objects and bulk action variants."""

from task_ledger_mcp.domain.entities.bulk_actions import (
    BulkAction,
    BulkActionError,
    parse_bulk_action,
    parse_bulk_actions,
)
from task_ledger_mcp.domain.entities.project import ProjectDTO
from task_ledger_mcp.domain.entities.result_types import (
    DomainError,
    DomainErrorType,
    DomainResult,
    DomainSuccess,
)
from task_ledger_mcp.domain.entities.tag import TagDTO
from task_ledger_mcp.domain.entities.task import UNSET, Priority, TaskDTO, TaskStatus
from task_ledger_mcp.domain.entities.user import UserDTO

__all__ = [
    "DomainError",
    "DomainErrorType",
    "DomainResult",
    "DomainSuccess",
    "ProjectDTO",
    "TagDTO",
    "TaskDTO",
    "TaskStatus",
    "Priority",
    "UserDTO",
    "UNSET",
    "BulkAction",
    "BulkActionError",
    "parse_bulk_action",
    "parse_bulk_actions",
]
