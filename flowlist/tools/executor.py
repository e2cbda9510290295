"""Tool executor — dispatches model tool calls and turns every outcome into a ToolResult."""
import asyncio
import logging
import time
from typing import List, Sequence

from ..actions import ActionError
from .registry import ToolArgumentError, ToolContext, ToolInvocationRequest, ToolRegistry, ToolResult

logger = logging.getLogger(__name__)


async def execute_tool(request: ToolInvocationRequest, registry: ToolRegistry, ctx: ToolContext) -> ToolResult:
    """Execute one tool call under the caller's identity.

    Never raises for tool-level problems: unknown tools, bad arguments and
    handler failures all come back as an ``{"error": ...}`` payload so the
    model can explain them in its final answer.
    """
    def result(payload):
        return ToolResult(tool_call_id=request.id, tool_name=request.tool_name, payload=payload)

    tool = registry.get(request.tool_name)
    if not tool:
        logger.warning(f"Unknown tool: {request.tool_name}")
        return result({"error": "unknown tool", "tool": request.tool_name})

    try:
        args = tool.parse_arguments(request.raw_arguments)
    except ToolArgumentError as e:
        logger.warning(f"Malformed arguments for {request.tool_name}: {e}")
        return result({"error": "malformed arguments", "detail": str(e)})

    arg_str = ", ".join(f"{k}={v!r}" for k, v in args.items())
    logger.info(f"[user {ctx.user_id}] Executing tool: {request.tool_name}({arg_str})")
    t0 = time.monotonic()

    try:
        payload = await tool.handler(ctx, **args)
    except ActionError as e:
        payload = {"error": str(e)}
    except Exception as e:
        logger.error(f"Tool {request.tool_name} failed: {e}", exc_info=True)
        payload = {"error": f"{request.tool_name} failed: {e}"}

    elapsed = time.monotonic() - t0
    logger.info(f"Tool {request.tool_name}: {elapsed:.2f}s -> {'error' if 'error' in payload else 'ok'}")
    return result(payload)


async def execute_tools(
    requests: Sequence[ToolInvocationRequest], registry: ToolRegistry, ctx: ToolContext
) -> List[ToolResult]:
    """Run a batch concurrently; results come back in request order, not completion order."""
    results = await asyncio.gather(*(execute_tool(r, registry, ctx) for r in requests))
    return list(results)
