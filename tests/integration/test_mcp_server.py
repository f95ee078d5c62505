"""Integration tests for LedgerMCPServer."""

import pytest
import yaml

from task_ledger_mcp.server.mcp_server import LedgerMCPServer


@pytest.fixture
def server():
    server = LedgerMCPServer()
    yield server
    server.cleanup()


def test_tools_are_loaded(server):
    names = {tool.name for tool in server.tools}

    assert {"task_create", "task_bulk", "project_recount", "tag_delete", "user_delete"} <= names


def test_cleanup_is_idempotent(server):
    server.cleanup()
    server.cleanup()


@pytest.mark.asyncio
async def test_call_tool_round_trip(server):
    created = yaml.safe_load(
        await server.call_tool("project_create", {"user_id": "u1", "name": "Inbox"})
    )
    listed = yaml.safe_load(await server.call_tool("project_list", {"user_id": "u1"}))

    assert created["success"] is True
    assert [p["name"] for p in listed["data"]] == ["Inbox"]
