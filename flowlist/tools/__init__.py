"""Tool system — registry, executor."""
from .registry import (
    register_tool, get_tool, all_tools, build_registry, registry_for_toolset,
    ToolArgumentError, ToolContext, ToolDef, ToolGroup, ToolInvocationRequest,
    ToolName, ToolParam, ToolRegistry, ToolResult, TOOLSETS,
)
from .executor import execute_tool, execute_tools

# Auto-import builtin tools to trigger @register_tool decorators
from .builtin import *  # noqa
