"""User MCP tool definitions."""

from typing import List

from mcp.types import Tool

USER_ID = {"type": "string", "description": "User ID"}


def get_user_tools() -> List[Tool]:
    """Get user record MCP tools."""
    return [
        Tool(
            name="user_show",
            description="Get the user record. Returns data: null if it does not exist.",
            inputSchema={
                "type": "object",
                "properties": {"user_id": USER_ID},
                "required": ["user_id"],
            },
        ),
        Tool(
            name="user_create",
            description="Create the user record (or overwrite its profile fields).",
            inputSchema={
                "type": "object",
                "properties": {
                    "user_id": USER_ID,
                    "email": {"type": "string"},
                    "name": {"type": "string"},
                    "image": {"type": "string"},
                },
                "required": ["user_id", "email"],
            },
        ),
        Tool(
            name="user_update",
            description="Update the user's email, name or image.",
            inputSchema={
                "type": "object",
                "properties": {
                    "user_id": USER_ID,
                    "email": {"type": "string"},
                    "name": {"type": ["string", "null"]},
                    "image": {"type": ["string", "null"]},
                },
                "required": ["user_id"],
            },
        ),
        Tool(
            name="user_delete",
            description="""Delete the user and everything they own.

soft=true (default) marks every project, tag, task and the user deleted_at;
soft=false removes them all in batches.""",
            inputSchema={
                "type": "object",
                "properties": {
                    "user_id": USER_ID,
                    "soft": {"type": "boolean", "default": True},
                },
                "required": ["user_id"],
            },
        ),
    ]
