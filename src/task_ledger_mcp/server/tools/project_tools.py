"""Project MCP tool definitions."""

from typing import List

from mcp.types import Tool

USER_ID = {"type": "string", "description": "Owning user ID"}
PROJECT_ID = {"type": "string", "description": "Project ID"}


def get_project_tools() -> List[Tool]:
    """Get project management MCP tools."""
    return [
        Tool(
            name="project_create",
            description="""Create a project. task_count and open_count start at 0 and are
maintained automatically as tasks change.""",
            inputSchema={
                "type": "object",
                "properties": {
                    "user_id": USER_ID,
                    "name": {"type": "string", "description": "Project name"},
                    "color": {"type": "string"},
                    "order": {"type": "integer", "minimum": 0},
                },
                "required": ["user_id", "name"],
            },
        ),
        Tool(
            name="project_list",
            description="List projects ordered by order then creation time.",
            inputSchema={
                "type": "object",
                "properties": {
                    "user_id": USER_ID,
                    "include_deleted": {"type": "boolean", "default": False},
                },
                "required": ["user_id"],
            },
        ),
        Tool(
            name="project_show",
            description="Get a project with its counters. Returns data: null if it does not exist.",
            inputSchema={
                "type": "object",
                "properties": {"user_id": USER_ID, "project_id": PROJECT_ID},
                "required": ["user_id", "project_id"],
            },
        ),
        Tool(
            name="project_update",
            description="Update a project's name, color or order. Counters are read-only.",
            inputSchema={
                "type": "object",
                "properties": {
                    "user_id": USER_ID,
                    "project_id": PROJECT_ID,
                    "name": {"type": "string"},
                    "color": {"type": ["string", "null"]},
                    "order": {"type": "integer", "minimum": 0},
                },
                "required": ["user_id", "project_id"],
            },
        ),
        Tool(
            name="project_reorder",
            description="Change a project's order.",
            inputSchema={
                "type": "object",
                "properties": {
                    "user_id": USER_ID,
                    "project_id": PROJECT_ID,
                    "order": {"type": "integer", "minimum": 0},
                },
                "required": ["user_id", "project_id", "order"],
            },
        ),
        Tool(
            name="project_delete",
            description="""Delete a project and every task in it.

soft=true (default) marks the project and its tasks deleted_at; soft=false
removes them. Tag usage counts of the removed tasks are decremented.""",
            inputSchema={
                "type": "object",
                "properties": {
                    "user_id": USER_ID,
                    "project_id": PROJECT_ID,
                    "soft": {"type": "boolean", "default": True},
                },
                "required": ["user_id", "project_id"],
            },
        ),
        Tool(
            name="project_recount",
            description="""Recompute task_count and open_count from the project's tasks.

Use this to repair counters that drifted under concurrent writers.""",
            inputSchema={
                "type": "object",
                "properties": {"user_id": USER_ID, "project_id": PROJECT_ID},
                "required": ["user_id", "project_id"],
            },
        ),
    ]
