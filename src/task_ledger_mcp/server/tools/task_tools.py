"""Task MCP tool definitions."""

from typing import List

from mcp.types import Tool

USER_ID = {"type": "string", "description": "Owning user ID"}
TASK_ID = {"type": "string", "description": "Task ID"}
STATUSES = ["TODO", "IN_PROGRESS", "DONE", "BLOCKED"]
PRIORITIES = ["NONE", "LOW", "MEDIUM", "HIGH", "URGENT"]

BULK_OPS = [
    "create",
    "update",
    "delete",
    "softDelete",
    "restore",
    "move",
    "reorder",
    "archive",
    "unarchive",
    "complete",
    "uncomplete",
]


def _task_id_tool(name: str, description: str) -> Tool:
    return Tool(
        name=name,
        description=description,
        inputSchema={
            "type": "object",
            "properties": {"user_id": USER_ID, "task_id": TASK_ID},
            "required": ["user_id", "task_id"],
        },
    )


def get_task_tools() -> List[Tool]:
    """Get task management MCP tools."""
    return [
        Tool(
            name="task_create",
            description="""Create a new task.

The task counts toward its project's task_count (and open_count while it is
not done, archived or deleted) and toward the usage_count of each tag.

Parameters:
- user_id (required): Owning user ID
- title (required): Task title
- project_id (optional): Project ID; the project must exist
- parent_id (optional): Parent task ID for a subtask
- tag_ids (optional): List of tag IDs
- status (optional): TODO (default), IN_PROGRESS, DONE, BLOCKED
- priority (optional): NONE, LOW, MEDIUM (default), HIGH, URGENT

RESPONSE FORMAT:
```yaml
success: true
data:
  id: <task-id>
  title: Task title
  status: TODO
  project_id: <project-id>
  tag_ids: []
```""",
            inputSchema={
                "type": "object",
                "properties": {
                    "user_id": USER_ID,
                    "title": {"type": "string", "description": "Task title"},
                    "description": {"type": "string", "description": "Task description"},
                    "status": {"type": "string", "enum": STATUSES},
                    "priority": {"type": "string", "enum": PRIORITIES},
                    "project_id": {"type": "string", "description": "Project ID"},
                    "parent_id": {"type": "string", "description": "Parent task ID"},
                    "tag_ids": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Tag IDs",
                    },
                    "order": {"type": "integer", "minimum": 0},
                    "due_at": {"type": "string", "description": "ISO-8601 due timestamp"},
                    "remind_at": {"type": "string", "description": "ISO-8601 reminder"},
                    "url": {"type": "string"},
                },
                "required": ["user_id", "title"],
            },
        ),
        Tool(
            name="task_list",
            description="""List tasks with filters, ordered by order then creation time.

Parameters:
- project_id: Filter by project; "" selects tasks without a project
- parent_id: Filter by parent; "" selects top-level tasks
- archived / deleted: true for only archived/deleted, false to exclude them
- tag_ids_any: Tasks with any of these tags (first 10 used)
- due_after / due_before: Inclusive due date bounds
- start_after_id: Cursor (task ID of the last item of the previous page)
- limit: 1-100 (default 50)""",
            inputSchema={
                "type": "object",
                "properties": {
                    "user_id": USER_ID,
                    "project_id": {"type": "string"},
                    "parent_id": {"type": "string"},
                    "status": {"type": "string", "enum": STATUSES},
                    "priority": {"type": "string", "enum": PRIORITIES},
                    "archived": {"type": "boolean"},
                    "deleted": {"type": "boolean"},
                    "tag_ids_any": {"type": "array", "items": {"type": "string"}},
                    "due_after": {"type": "string"},
                    "due_before": {"type": "string"},
                    "start_after_id": {"type": "string"},
                    "limit": {"type": "integer", "minimum": 1, "maximum": 100},
                },
                "required": ["user_id"],
            },
        ),
        _task_id_tool("task_show", "Get a task by ID. Returns data: null if it does not exist."),
        Tool(
            name="task_update",
            description="""Update task fields.

Setting status to DONE stamps completed_at; leaving DONE clears it, unless
completed_at is passed explicitly. Project, tag and openness changes adjust
the project and tag counters.""",
            inputSchema={
                "type": "object",
                "properties": {
                    "user_id": USER_ID,
                    "task_id": TASK_ID,
                    "title": {"type": "string"},
                    "description": {"type": "string"},
                    "status": {"type": "string", "enum": STATUSES},
                    "priority": {"type": "string", "enum": PRIORITIES},
                    "project_id": {"type": ["string", "null"]},
                    "parent_id": {"type": ["string", "null"]},
                    "tag_ids": {"type": "array", "items": {"type": "string"}},
                    "order": {"type": "integer", "minimum": 0},
                    "due_at": {"type": ["string", "null"]},
                    "remind_at": {"type": ["string", "null"]},
                    "completed_at": {"type": ["string", "null"]},
                    "url": {"type": ["string", "null"]},
                },
                "required": ["user_id", "task_id"],
            },
        ),
        Tool(
            name="task_reorder",
            description="Change a task's sibling order.",
            inputSchema={
                "type": "object",
                "properties": {
                    "user_id": USER_ID,
                    "task_id": TASK_ID,
                    "order": {"type": "integer", "minimum": 0},
                },
                "required": ["user_id", "task_id", "order"],
            },
        ),
        Tool(
            name="task_move",
            description="""Move a task to another project and/or parent.

An omitted project_id or parent_id keeps the current value; null clears it.
Moving an open task shifts task_count and open_count between projects; a
closed task only shifts task_count.""",
            inputSchema={
                "type": "object",
                "properties": {
                    "user_id": USER_ID,
                    "task_id": TASK_ID,
                    "project_id": {"type": ["string", "null"]},
                    "parent_id": {"type": ["string", "null"]},
                    "order": {"type": "integer", "minimum": 0},
                },
                "required": ["user_id", "task_id"],
            },
        ),
        _task_id_tool("task_complete", "Mark a task DONE. No-op if already completed."),
        _task_id_tool("task_uncomplete", "Reopen a DONE task as TODO. No-op if not done."),
        _task_id_tool("task_archive", "Archive a task. No-op if already archived."),
        _task_id_tool("task_unarchive", "Unarchive a task. No-op if not archived."),
        _task_id_tool("task_restore", "Restore a soft-deleted task. No-op if not deleted."),
        Tool(
            name="task_delete",
            description="""Delete a task and its whole subtree of subtasks.

soft=true (default) marks every task deleted_at and keeps it restorable;
soft=false removes the documents. Counters are decremented once per task
that was not already soft-deleted.""",
            inputSchema={
                "type": "object",
                "properties": {
                    "user_id": USER_ID,
                    "task_id": TASK_ID,
                    "soft": {"type": "boolean", "default": True},
                },
                "required": ["user_id", "task_id"],
            },
        ),
        Tool(
            name="task_bulk",
            description="""Run a list of task actions in order.

Each action is an object with an "op" and op-specific fields:
- create: {op, data: {title, ...}}
- update: {op, id, data: {...}}
- delete / softDelete / restore / archive / unarchive / complete / uncomplete: {op, id}
- move: {op, id, project_id?, parent_id?, order?}
- reorder: {op, id, order}

Actions are not atomic as a group: the first failure stops the rest and the
error reports its index, op and the results collected before it.

RESPONSE FORMAT:
```yaml
success: true
data:
  results:
    - {id: <task-id>, title: ..., ...}   # entity ops
    - {id: <task-id>, ok: true}          # delete / softDelete
```""",
            inputSchema={
                "type": "object",
                "properties": {
                    "user_id": USER_ID,
                    "actions": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "op": {"type": "string", "enum": BULK_OPS},
                                "id": {"type": "string"},
                                "data": {"type": "object"},
                                "project_id": {"type": ["string", "null"]},
                                "parent_id": {"type": ["string", "null"]},
                                "order": {"type": "integer", "minimum": 0},
                            },
                            "required": ["op"],
                        },
                    },
                },
                "required": ["user_id", "actions"],
            },
        ),
    ]
