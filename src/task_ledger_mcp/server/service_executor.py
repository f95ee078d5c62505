"""
Service Executor - Direct service layer execution for MCP tools.

Maps MCP tool names to service calls and renders every outcome as a YAML
document. Service calls run in a small thread pool so the event loop is never
blocked by store I/O.
"""

import asyncio
import json
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional

import yaml

from task_ledger_mcp.domain.entities.result_types import DomainResult
from task_ledger_mcp.domain.entities.task import UNSET
from task_ledger_mcp.server.error_sanitizer import (
    sanitize_details,
    sanitize_error_message,
    sanitize_exception,
)
from task_ledger_mcp.services import get_service_factory

logger = logging.getLogger(__name__)

TASK_UPDATE_FIELDS = (
    "title",
    "description",
    "status",
    "priority",
    "project_id",
    "parent_id",
    "tag_ids",
    "order",
    "due_at",
    "remind_at",
    "completed_at",
    "url",
)
NAMED_UPDATE_FIELDS = ("name", "color", "order")
USER_UPDATE_FIELDS = ("email", "name", "image")


def _parse_list(value: Any) -> Optional[List[Any]]:
    """Accept a list, or a JSON-encoded list as some MCP clients send it."""
    if value is None or isinstance(value, list):
        return value
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            return [value]
        return parsed if isinstance(parsed, list) else [parsed]
    return [value]


def _pick(args: Dict[str, Any], fields: tuple) -> Dict[str, Any]:
    return {name: args[name] for name in fields if name in args}


class ServiceExecutor:
    """
    Executes MCP tool calls directly via service layer.

    Every tool takes a ``user_id``; the executor passes it through to the
    service untouched.
    """

    def __init__(self):
        """Initialize the service executor."""
        self._factory = get_service_factory()
        self._executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="mcp-service-")

        # Tool to service method mapping
        self._tool_handlers: Dict[str, Callable[[Dict[str, Any]], str]] = {}
        self._register_handlers()

    def _register_handlers(self) -> None:
        """Register tool name to handler mappings."""
        # Task tools
        self._tool_handlers.update(
            {
                "task_create": self._handle_task_create,
                "task_list": self._handle_task_list,
                "task_show": self._handle_task_show,
                "task_update": self._handle_task_update,
                "task_reorder": self._handle_task_reorder,
                "task_move": self._handle_task_move,
                "task_complete": self._handle_task_complete,
                "task_uncomplete": self._handle_task_uncomplete,
                "task_archive": self._handle_task_archive,
                "task_unarchive": self._handle_task_unarchive,
                "task_restore": self._handle_task_restore,
                "task_delete": self._handle_task_delete,
                "task_bulk": self._handle_task_bulk,
            }
        )

        # Project tools
        self._tool_handlers.update(
            {
                "project_create": self._handle_project_create,
                "project_list": self._handle_project_list,
                "project_show": self._handle_project_show,
                "project_update": self._handle_project_update,
                "project_reorder": self._handle_project_reorder,
                "project_delete": self._handle_project_delete,
                "project_recount": self._handle_project_recount,
            }
        )

        # Tag tools
        self._tool_handlers.update(
            {
                "tag_create": self._handle_tag_create,
                "tag_list": self._handle_tag_list,
                "tag_show": self._handle_tag_show,
                "tag_update": self._handle_tag_update,
                "tag_reorder": self._handle_tag_reorder,
                "tag_delete": self._handle_tag_delete,
                "tag_recount": self._handle_tag_recount,
            }
        )

        # User tools
        self._tool_handlers.update(
            {
                "user_show": self._handle_user_show,
                "user_create": self._handle_user_create,
                "user_update": self._handle_user_update,
                "user_delete": self._handle_user_delete,
            }
        )

    @property
    def tool_names(self) -> List[str]:
        return list(self._tool_handlers)

    async def execute_tool(self, tool_name: str, arguments: Optional[Dict[str, Any]]) -> str:
        """
        Execute a tool and return YAML-formatted result.

        Args:
            tool_name: Name of the tool to execute.
            arguments: Tool arguments dictionary.

        Returns:
            YAML-formatted result string.
        """
        handler = self._tool_handlers.get(tool_name)
        if not handler:
            return self._format_error(f"Unknown tool: {tool_name}")

        args = dict(arguments or {})
        if not args.get("user_id"):
            return self._format_error("user_id is required", ["Pass the owning user's ID"])

        try:
            # Run handler in thread pool to avoid blocking event loop
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(self._executor, lambda: handler(args))
        except Exception as e:
            logger.error("Error executing tool %s: %s", tool_name, e, exc_info=True)
            return self._format_error(sanitize_exception(e))

    def _format_result(self, data: Any, success: bool = True) -> str:
        """Format result as YAML."""
        result = {
            "success": success,
            "data": data,
        }
        return yaml.dump(result, default_flow_style=False, allow_unicode=True, sort_keys=False)

    def _format_error(
        self,
        message: str,
        suggestions: Optional[List[str]] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Format error as YAML."""
        result: Dict[str, Any] = {
            "success": False,
            "error": sanitize_error_message(message),
            "suggestions": suggestions or [],
        }
        if details:
            result["details"] = sanitize_details(details)
        return yaml.dump(result, default_flow_style=False, allow_unicode=True, sort_keys=False)

    def _respond(self, result: DomainResult[Any], fallback: str) -> str:
        if result.is_success:
            return self._format_result(result.data)
        details = dict(result.error_details)
        if result.error_type is not None:
            details["error_type"] = result.error_type.value
        return self._format_error(result.error_message or fallback, result.suggestions, details)

    # --- Task Handlers ---

    def _handle_task_create(self, args: Dict[str, Any]) -> str:
        """Handle task_create tool."""
        service = self._factory.get_task_service()
        result = service.create_task(
            user_id=args["user_id"],
            title=args.get("title", ""),
            description=args.get("description"),
            status=args.get("status"),
            priority=args.get("priority"),
            project_id=args.get("project_id"),
            parent_id=args.get("parent_id"),
            tag_ids=_parse_list(args.get("tag_ids")),
            order=args.get("order"),
            due_at=args.get("due_at"),
            remind_at=args.get("remind_at"),
            url=args.get("url"),
        )
        return self._respond(result, "Failed to create task")

    def _handle_task_list(self, args: Dict[str, Any]) -> str:
        """Handle task_list tool."""
        service = self._factory.get_task_service()
        result = service.list_tasks(
            user_id=args["user_id"],
            project_id=args.get("project_id"),
            parent_id=args.get("parent_id"),
            status=args.get("status"),
            priority=args.get("priority"),
            archived=args.get("archived"),
            deleted=args.get("deleted"),
            tag_ids_any=_parse_list(args.get("tag_ids_any")),
            due_after=args.get("due_after"),
            due_before=args.get("due_before"),
            start_after_id=args.get("start_after_id"),
            limit=args.get("limit"),
        )
        return self._respond(result, "Failed to list tasks")

    def _handle_task_show(self, args: Dict[str, Any]) -> str:
        service = self._factory.get_task_service()
        return self._respond(
            service.get_task(args["user_id"], args.get("task_id", "")), "Failed to get task"
        )

    def _handle_task_update(self, args: Dict[str, Any]) -> str:
        """Handle task_update tool."""
        service = self._factory.get_task_service()
        changes = _pick(args, TASK_UPDATE_FIELDS)
        if "tag_ids" in changes:
            changes["tag_ids"] = _parse_list(changes["tag_ids"])
        result = service.update_task(args["user_id"], args.get("task_id", ""), changes)
        return self._respond(result, "Failed to update task")

    def _handle_task_reorder(self, args: Dict[str, Any]) -> str:
        service = self._factory.get_task_service()
        result = service.reorder_task(args["user_id"], args.get("task_id", ""), args.get("order"))
        return self._respond(result, "Failed to reorder task")

    def _handle_task_move(self, args: Dict[str, Any]) -> str:
        """Handle task_move tool. Omitted keys keep the current value."""
        service = self._factory.get_task_service()
        result = service.move_task(
            args["user_id"],
            args.get("task_id", ""),
            project_id=args["project_id"] if "project_id" in args else UNSET,
            parent_id=args["parent_id"] if "parent_id" in args else UNSET,
            order=args.get("order"),
        )
        return self._respond(result, "Failed to move task")

    def _handle_task_complete(self, args: Dict[str, Any]) -> str:
        service = self._factory.get_task_service()
        result = service.complete_task(args["user_id"], args.get("task_id", ""))
        return self._respond(result, "Failed to complete task")

    def _handle_task_uncomplete(self, args: Dict[str, Any]) -> str:
        service = self._factory.get_task_service()
        result = service.uncomplete_task(args["user_id"], args.get("task_id", ""))
        return self._respond(result, "Failed to uncomplete task")

    def _handle_task_archive(self, args: Dict[str, Any]) -> str:
        service = self._factory.get_task_service()
        result = service.archive_task(args["user_id"], args.get("task_id", ""))
        return self._respond(result, "Failed to archive task")

    def _handle_task_unarchive(self, args: Dict[str, Any]) -> str:
        service = self._factory.get_task_service()
        result = service.unarchive_task(args["user_id"], args.get("task_id", ""))
        return self._respond(result, "Failed to unarchive task")

    def _handle_task_restore(self, args: Dict[str, Any]) -> str:
        service = self._factory.get_task_service()
        result = service.restore_task(args["user_id"], args.get("task_id", ""))
        return self._respond(result, "Failed to restore task")

    def _handle_task_delete(self, args: Dict[str, Any]) -> str:
        service = self._factory.get_task_service()
        result = service.remove_task(
            args["user_id"], args.get("task_id", ""), soft=args.get("soft", True)
        )
        return self._respond(result, "Failed to delete task")

    def _handle_task_bulk(self, args: Dict[str, Any]) -> str:
        """Handle task_bulk tool."""
        processor = self._factory.get_bulk_processor()
        actions = _parse_list(args.get("actions")) or []
        result = processor.bulk_tasks(args["user_id"], actions)
        return self._respond(result, "Bulk task actions failed")

    # --- Project Handlers ---

    def _handle_project_create(self, args: Dict[str, Any]) -> str:
        service = self._factory.get_project_service()
        result = service.create_project(
            args["user_id"],
            name=args.get("name", ""),
            color=args.get("color"),
            order=args.get("order"),
        )
        return self._respond(result, "Failed to create project")

    def _handle_project_list(self, args: Dict[str, Any]) -> str:
        service = self._factory.get_project_service()
        result = service.list_projects(
            args["user_id"], include_deleted=bool(args.get("include_deleted", False))
        )
        return self._respond(result, "Failed to list projects")

    def _handle_project_show(self, args: Dict[str, Any]) -> str:
        service = self._factory.get_project_service()
        result = service.get_project(args["user_id"], args.get("project_id", ""))
        return self._respond(result, "Failed to get project")

    def _handle_project_update(self, args: Dict[str, Any]) -> str:
        service = self._factory.get_project_service()
        result = service.update_project(
            args["user_id"], args.get("project_id", ""), _pick(args, NAMED_UPDATE_FIELDS)
        )
        return self._respond(result, "Failed to update project")

    def _handle_project_reorder(self, args: Dict[str, Any]) -> str:
        service = self._factory.get_project_service()
        result = service.reorder_project(
            args["user_id"], args.get("project_id", ""), args.get("order")
        )
        return self._respond(result, "Failed to reorder project")

    def _handle_project_delete(self, args: Dict[str, Any]) -> str:
        service = self._factory.get_project_service()
        result = service.remove_project(
            args["user_id"], args.get("project_id", ""), soft=args.get("soft", True)
        )
        return self._respond(result, "Failed to delete project")

    def _handle_project_recount(self, args: Dict[str, Any]) -> str:
        service = self._factory.get_project_service()
        result = service.recount_project(args["user_id"], args.get("project_id", ""))
        return self._respond(result, "Failed to recount project")

    # --- Tag Handlers ---

    def _handle_tag_create(self, args: Dict[str, Any]) -> str:
        service = self._factory.get_tag_service()
        result = service.create_tag(
            args["user_id"],
            name=args.get("name", ""),
            color=args.get("color"),
            order=args.get("order"),
        )
        return self._respond(result, "Failed to create tag")

    def _handle_tag_list(self, args: Dict[str, Any]) -> str:
        service = self._factory.get_tag_service()
        return self._respond(service.list_tags(args["user_id"]), "Failed to list tags")

    def _handle_tag_show(self, args: Dict[str, Any]) -> str:
        service = self._factory.get_tag_service()
        result = service.get_tag(args["user_id"], args.get("tag_id", ""))
        return self._respond(result, "Failed to get tag")

    def _handle_tag_update(self, args: Dict[str, Any]) -> str:
        service = self._factory.get_tag_service()
        result = service.update_tag(
            args["user_id"], args.get("tag_id", ""), _pick(args, NAMED_UPDATE_FIELDS)
        )
        return self._respond(result, "Failed to update tag")

    def _handle_tag_reorder(self, args: Dict[str, Any]) -> str:
        service = self._factory.get_tag_service()
        result = service.reorder_tag(args["user_id"], args.get("tag_id", ""), args.get("order"))
        return self._respond(result, "Failed to reorder tag")

    def _handle_tag_delete(self, args: Dict[str, Any]) -> str:
        service = self._factory.get_tag_service()
        result = service.remove_tag(
            args["user_id"], args.get("tag_id", ""), remove_only=args.get("remove_only", True)
        )
        return self._respond(result, "Failed to delete tag")

    def _handle_tag_recount(self, args: Dict[str, Any]) -> str:
        service = self._factory.get_tag_service()
        result = service.recount_tag(args["user_id"], args.get("tag_id", ""))
        return self._respond(result, "Failed to recount tag")

    # --- User Handlers ---

    def _handle_user_show(self, args: Dict[str, Any]) -> str:
        service = self._factory.get_user_service()
        return self._respond(service.get_user(args["user_id"]), "Failed to get user")

    def _handle_user_create(self, args: Dict[str, Any]) -> str:
        service = self._factory.get_user_service()
        result = service.create_user(
            args["user_id"],
            email=args.get("email", ""),
            name=args.get("name"),
            image=args.get("image"),
        )
        return self._respond(result, "Failed to create user")

    def _handle_user_update(self, args: Dict[str, Any]) -> str:
        service = self._factory.get_user_service()
        result = service.update_user(args["user_id"], _pick(args, USER_UPDATE_FIELDS))
        return self._respond(result, "Failed to update user")

    def _handle_user_delete(self, args: Dict[str, Any]) -> str:
        service = self._factory.get_user_service()
        result = service.delete_user(args["user_id"], soft=args.get("soft", True))
        return self._respond(result, "Failed to delete user")

    def close(self) -> None:
        """Shutdown the executor."""
        self._executor.shutdown(wait=True)
