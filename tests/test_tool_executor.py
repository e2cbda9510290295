"""Tests for tools/executor.py — dispatch, error downgrading, batch ordering."""
import asyncio
import json

import pytest

from flowlist.actions import tasks as task_actions
from flowlist.tools import (
    ToolDef,
    ToolGroup,
    ToolInvocationRequest,
    ToolName,
    ToolRegistry,
    execute_tool,
    execute_tools,
    registry_for_toolset,
)


def _request(name, args=None, call_id="call_1"):
    raw = args if isinstance(args, str) else json.dumps(args or {})
    return ToolInvocationRequest(id=call_id, tool_name=name, raw_arguments=raw)


@pytest.fixture
def basic():
    return registry_for_toolset("basic")


@pytest.fixture
def finance():
    return registry_for_toolset("finance")


class TestExecuteTool:
    @pytest.mark.asyncio
    async def test_create_task(self, basic, ctx, db):
        result = await execute_tool(_request("create_task", {"title": "Buy milk", "dueDate": "2024-05-02"}), basic, ctx)
        assert result.tool_call_id == "call_1"
        assert result.tool_name == "create_task"
        assert result.payload["success"] == "Task created!"
        assert result.payload["task"]["due_date"].startswith("2024-05-02")

        tasks = await task_actions.list_tasks(db, 1)
        assert [t.title for t in tasks] == ["Buy milk"]

    @pytest.mark.asyncio
    async def test_unknown_tool(self, basic, ctx):
        result = await execute_tool(_request("launch_rocket"), basic, ctx)
        assert result.is_error
        assert result.payload["error"] == "unknown tool"
        assert result.tool_call_id == "call_1"

    @pytest.mark.asyncio
    async def test_tool_outside_active_registry(self, basic, ctx):
        result = await execute_tool(_request("get_financial_status"), basic, ctx)
        assert result.payload["error"] == "unknown tool"

    @pytest.mark.asyncio
    async def test_malformed_json(self, basic, ctx):
        result = await execute_tool(_request("create_task", '{"title": "oops"'), basic, ctx)
        assert result.payload["error"] == "malformed arguments"
        assert "invalid JSON" in result.payload["detail"]

    @pytest.mark.asyncio
    async def test_missing_required_argument(self, basic, ctx):
        result = await execute_tool(_request("create_habit", {"title": "Run"}), basic, ctx)
        assert result.payload["error"] == "malformed arguments"
        assert "frequency" in result.payload["detail"]

    @pytest.mark.asyncio
    async def test_domain_error_becomes_payload(self, basic, ctx):
        result = await execute_tool(_request("create_task", {"title": "   "}), basic, ctx)
        assert result.payload == {"error": "Title is required"}

    @pytest.mark.asyncio
    async def test_not_found_becomes_payload(self, basic, ctx):
        result = await execute_tool(_request("complete_task", {"taskId": 999}), basic, ctx)
        assert result.payload == {"error": "Task not found"}

    @pytest.mark.asyncio
    async def test_non_finite_integer_is_malformed(self, basic, ctx, db):
        result = await execute_tool(_request("create_task", '{"title": "x", "duration": NaN}'), basic, ctx)
        assert result.payload["error"] == "malformed arguments"
        assert "duration" in result.payload["detail"]
        assert await task_actions.list_tasks(db, 1) == []

    @pytest.mark.asyncio
    async def test_non_finite_number_is_malformed(self, finance, ctx):
        result = await execute_tool(
            _request("add_transaction", {"amount": "nan", "type": "EXPENSE", "category": "Food"}), finance, ctx
        )
        assert result.payload["error"] == "malformed arguments"
        assert "amount" in result.payload["detail"]

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_payload(self, ctx):
        async def broken(ctx):
            raise RuntimeError("db is gone")

        registry = ToolRegistry([ToolDef(ToolName.GET_PENDING_TASKS, "", [], broken, ToolGroup.TASKS)])
        result = await execute_tool(_request("get_pending_tasks"), registry, ctx)
        assert result.payload == {"error": "get_pending_tasks failed: db is gone"}


class TestPendingTasks:
    @pytest.mark.asyncio
    async def test_only_todo_items(self, basic, ctx, db):
        await task_actions.create_task(db, 1, "Write report")
        done = await task_actions.create_task(db, 1, "Pay rent")
        await task_actions.update_task(db, 1, done.id, status="COMPLETED")
        await task_actions.create_task(db, 1, "Call mom", status="IN_PROGRESS")

        result = await execute_tool(_request("get_pending_tasks"), basic, ctx)
        assert [t["title"] for t in result.payload["tasks"]] == ["Write report"]

    @pytest.mark.asyncio
    async def test_scoped_to_caller(self, basic, ctx, other_ctx, db):
        await task_actions.create_task(db, 1, "Mine")
        result = await execute_tool(_request("get_pending_tasks"), basic, other_ctx)
        assert result.payload == {"tasks": []}


class TestFinanceTools:
    @pytest.mark.asyncio
    async def test_transaction_then_status(self, finance, ctx):
        await execute_tool(_request("add_transaction", {"amount": 500, "type": "INCOME", "category": "Salary"}),
                           finance, ctx)
        await execute_tool(_request("add_transaction", {"amount": 380, "type": "EXPENSE", "category": "Rent"}),
                           finance, ctx)
        result = await execute_tool(_request("get_financial_status"), finance, ctx)
        assert result.payload == {"balance": 120, "income": 500, "expenses": 380}

    @pytest.mark.asyncio
    async def test_invalid_transaction_type(self, finance, ctx):
        result = await execute_tool(
            _request("add_transaction", {"amount": 5, "type": "REFUND", "category": "x"}), finance, ctx
        )
        assert result.payload["error"] == "malformed arguments"


class TestExecuteTools:
    @pytest.mark.asyncio
    async def test_results_follow_request_order(self, ctx):
        finished = []

        async def slow(ctx):
            await asyncio.sleep(0.05)
            finished.append("A")
            return {"tool": "A"}

        async def fast(ctx):
            finished.append("B")
            return {"tool": "B"}

        registry = ToolRegistry([
            ToolDef(ToolName.GET_PENDING_TASKS, "", [], slow, ToolGroup.TASKS),
            ToolDef(ToolName.GET_HABITS, "", [], fast, ToolGroup.HABITS),
        ])
        results = await execute_tools(
            [_request("get_pending_tasks", call_id="a"), _request("get_habits", call_id="b")], registry, ctx
        )
        assert finished == ["B", "A"]
        assert [r.tool_call_id for r in results] == ["a", "b"]
        assert [r.payload["tool"] for r in results] == ["A", "B"]

    @pytest.mark.asyncio
    async def test_one_failure_does_not_abort_batch(self, basic, ctx):
        results = await execute_tools(
            [_request("nope", call_id="1"), _request("create_habit", {"title": "Read", "frequency": "DAILY"}, "2")],
            basic, ctx,
        )
        assert results[0].payload["error"] == "unknown tool"
        assert results[1].payload["success"] == "Habit created!"
