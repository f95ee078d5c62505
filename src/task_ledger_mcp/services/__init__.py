"""Service layer - Business logic orchestration."""

from task_ledger_mcp.services.aggregate_service import AggregateService
from task_ledger_mcp.services.bulk_processor import BulkProcessor
from task_ledger_mcp.services.cascade_service import CascadeService
from task_ledger_mcp.services.project_service import ProjectService
from task_ledger_mcp.services.service_factory import ServiceFactory, get_service_factory
from task_ledger_mcp.services.tag_service import TagService
from task_ledger_mcp.services.task_service import TaskService
from task_ledger_mcp.services.user_service import UserService

__all__ = [
    "AggregateService",
    "BulkProcessor",
    "CascadeService",
    "ProjectService",
    "TagService",
    "TaskService",
    "UserService",
    "ServiceFactory",
    "get_service_factory",
]
