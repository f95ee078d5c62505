"""MCP Tool definitions."""

from typing import List

from mcp.types import Tool

from task_ledger_mcp.server.tools.project_tools import get_project_tools
from task_ledger_mcp.server.tools.tag_tools import get_tag_tools
from task_ledger_mcp.server.tools.task_tools import get_task_tools
from task_ledger_mcp.server.tools.user_tools import get_user_tools


def get_all_tools() -> List[Tool]:
    """Get all available MCP tools."""
    tools = []
    tools.extend(get_task_tools())
    tools.extend(get_project_tools())
    tools.extend(get_tag_tools())
    tools.extend(get_user_tools())
    return tools


__all__ = [
    "get_all_tools",
    "get_project_tools",
    "get_tag_tools",
    "get_task_tools",
    "get_user_tools",
]
