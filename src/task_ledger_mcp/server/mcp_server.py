"""
Ledger MCP Server.

Exposes the task, project, tag and user operations as MCP tools over stdio.
Every call is routed through ServiceExecutor, which answers with YAML.
"""

import asyncio
import atexit
import logging
import os
import time
from typing import Any, Dict, List

from mcp.server import Server
from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR, ErrorData, TextContent, Tool

from task_ledger_mcp import __version__
from task_ledger_mcp.database.orm_manager import ORMManager, get_orm_manager
from task_ledger_mcp.server.error_sanitizer import sanitize_exception
from task_ledger_mcp.server.service_executor import ServiceExecutor
from task_ledger_mcp.server.tools import get_all_tools

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
PREVIEW_CHARS = 200

logger = logging.getLogger(__name__)


def _is_debug_mode() -> bool:
    return os.environ.get("LEDGER_DEBUG", "").lower() in ("1", "true", "yes")


INSTRUCTIONS = """Task Ledger - Per-user Tasks, Projects and Tags

OVERVIEW:
Every user owns three collections:

1. PROJECTS: Named groups of tasks. Each project keeps task_count (live tasks)
   and open_count (live tasks that are not done and not archived).
2. TAGS: Labels attached to tasks. Each tag keeps usage_count (live tasks
   carrying it).
3. TASKS: Units of work with status, priority, optional project, optional
   parent task (subtasks nest to any depth) and a list of tags.

Every tool takes user_id. Counters are maintained for you on every write.

GETTING STARTED:
1. Create a project: project_create(user_id, name="Work")
2. Create a tag: tag_create(user_id, name="urgent")
3. Add tasks: task_create(user_id, title="Ship", project_id="...", tag_ids=["..."])
4. Track progress: task_complete, task_archive, task_move
5. Batch edits: task_bulk(user_id, actions=[{op: "complete", id: "..."}, ...])

DELETION:
- task_delete removes a task with its whole subtask tree (soft by default,
  task_restore brings a single task back)
- project_delete soft-deletes the project and all of its tasks
- tag_delete removes the tag from every task (remove_only=true) or deletes
  the tagged tasks too (remove_only=false)
- user_delete sweeps every project, tag and task of the user

REPAIR:
- project_recount and tag_recount recompute counters from the tasks

TIPS:
- Operations on a missing ID succeed with data: null
- Use task_list with start_after_id to page through large result sets
"""


def _check_database(orm_manager: ORMManager) -> None:
    """Log what the database holds; refuse to start if it cannot be queried."""
    health = orm_manager.perform_health_check()
    if not health["healthy"]:
        raise RuntimeError(f"Database initialization failed: {health['error']}")
    logger.info(
        "Database %s: %d documents, %d users",
        health["database_path"],
        health["document_count"],
        health["user_count"],
    )


class LedgerMCPServer:
    """
    MCP server for Task Ledger.

    Owns the MCP ``Server``, the ServiceExecutor thread pool and the shared
    database engine, and releases all three exactly once on shutdown.
    """

    def __init__(self):
        self._debug = _is_debug_mode()
        self._closed = False
        self._server = Server(
            name="task-ledger-mcp",
            version=__version__,
            instructions=INSTRUCTIONS,
        )

        self._orm_manager = get_orm_manager()
        _check_database(self._orm_manager)

        self._service_executor = ServiceExecutor()
        self._tools = get_all_tools()
        logger.info("Serving %d tools", len(self._tools))

        self._register_handlers()
        atexit.register(self.cleanup)

    @property
    def tools(self) -> List[Tool]:
        return self._tools

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> str:
        """Run one tool and return its YAML response text."""
        started = time.perf_counter()
        result_text = await self._service_executor.execute_tool(name, arguments)
        if self._debug:
            preview = result_text[:PREVIEW_CHARS]
            if len(result_text) > PREVIEW_CHARS:
                preview += "..."
            logger.debug(
                "%s finished in %.1f ms: %s",
                name,
                (time.perf_counter() - started) * 1000,
                preview,
            )
        return result_text

    def _register_handlers(self) -> None:
        @self._server.list_tools()
        async def handle_list_tools() -> List[Tool]:
            return self._tools

        @self._server.call_tool()
        async def handle_call_tool(name: str, arguments: Dict[str, Any]) -> List[TextContent]:
            try:
                return [TextContent(type="text", text=await self.call_tool(name, arguments))]
            except Exception as e:
                logger.error("Tool '%s' failed: %s", name, e, exc_info=True)
                raise McpError(
                    ErrorData(
                        code=INTERNAL_ERROR,
                        message=sanitize_exception(e),
                        data={"tool_name": name},
                    )
                ) from e

    async def run(self, read_stream: Any, write_stream: Any, initialization_options: Any) -> None:
        """Serve requests from the given streams until the client disconnects."""
        try:
            await self._server.run(read_stream, write_stream, initialization_options)
        finally:
            self.cleanup()

    def create_initialization_options(self) -> Any:
        return self._server.create_initialization_options()

    def cleanup(self) -> None:
        """Shut down the thread pool and dispose of the engine. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        self._service_executor.close()
        self._orm_manager.close()
        logger.info("Server resources released")


async def run_server() -> None:
    """Run the MCP server with stdio transport."""
    from mcp.server.stdio import stdio_server

    server = LedgerMCPServer()

    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main() -> None:
    """Entry point for the ``task-ledger-mcp`` console script."""
    logging.basicConfig(
        level=logging.DEBUG if _is_debug_mode() else logging.INFO,
        format=LOG_FORMAT,
    )
    try:
        asyncio.run(run_server())
    except KeyboardInterrupt:
        logger.info("Server stopped by user")


if __name__ == "__main__":
    main()
