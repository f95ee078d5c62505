"""Tag MCP tool definitions."""

from typing import List

from mcp.types import Tool

USER_ID = {"type": "string", "description": "Owning user ID"}
TAG_ID = {"type": "string", "description": "Tag ID"}


def get_tag_tools() -> List[Tool]:
    """Get tag management MCP tools."""
    return [
        Tool(
            name="tag_create",
            description="Create a tag. usage_count starts at 0 and follows the tasks that reference it.",
            inputSchema={
                "type": "object",
                "properties": {
                    "user_id": USER_ID,
                    "name": {"type": "string", "description": "Tag name"},
                    "color": {"type": "string"},
                    "order": {"type": "integer", "minimum": 0},
                },
                "required": ["user_id", "name"],
            },
        ),
        Tool(
            name="tag_list",
            description="List tags ordered by order then creation time.",
            inputSchema={
                "type": "object",
                "properties": {"user_id": USER_ID},
                "required": ["user_id"],
            },
        ),
        Tool(
            name="tag_show",
            description="Get a tag. Returns data: null if it does not exist.",
            inputSchema={
                "type": "object",
                "properties": {"user_id": USER_ID, "tag_id": TAG_ID},
                "required": ["user_id", "tag_id"],
            },
        ),
        Tool(
            name="tag_update",
            description="Update a tag's name, color or order.",
            inputSchema={
                "type": "object",
                "properties": {
                    "user_id": USER_ID,
                    "tag_id": TAG_ID,
                    "name": {"type": "string"},
                    "color": {"type": ["string", "null"]},
                    "order": {"type": "integer", "minimum": 0},
                },
                "required": ["user_id", "tag_id"],
            },
        ),
        Tool(
            name="tag_reorder",
            description="Change a tag's order.",
            inputSchema={
                "type": "object",
                "properties": {
                    "user_id": USER_ID,
                    "tag_id": TAG_ID,
                    "order": {"type": "integer", "minimum": 0},
                },
                "required": ["user_id", "tag_id", "order"],
            },
        ),
        Tool(
            name="tag_delete",
            description="""Delete a tag.

remove_only=true (default) removes the tag from every task that references it;
remove_only=false deletes those tasks instead.""",
            inputSchema={
                "type": "object",
                "properties": {
                    "user_id": USER_ID,
                    "tag_id": TAG_ID,
                    "remove_only": {"type": "boolean", "default": True},
                },
                "required": ["user_id", "tag_id"],
            },
        ),
        Tool(
            name="tag_recount",
            description="Recompute usage_count from the tasks that reference the tag.",
            inputSchema={
                "type": "object",
                "properties": {"user_id": USER_ID, "tag_id": TAG_ID},
                "required": ["user_id", "tag_id"],
            },
        ),
    ]
