"""Tool registry — decorator-based tool registration, grouping, and lookup."""
import json
import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)


class ToolName(str, Enum):
    CREATE_TASK = "create_task"
    GET_PENDING_TASKS = "get_pending_tasks"
    COMPLETE_TASK = "complete_task"
    CREATE_HABIT = "create_habit"
    GET_HABITS = "get_habits"
    COMPLETE_HABIT = "complete_habit"
    ADD_TRANSACTION = "add_transaction"
    GET_FINANCIAL_STATUS = "get_financial_status"
    GET_MONTHLY_SUMMARY = "get_monthly_summary"
    ADD_FINANCIAL_ACCOUNT = "add_financial_account"
    GET_FINANCIAL_ACCOUNTS = "get_financial_accounts"
    GET_NET_WORTH = "get_net_worth"
    ADD_SAVINGS_GOAL = "add_savings_goal"
    GET_SAVINGS_GOALS = "get_savings_goals"

    @classmethod
    def lookup(cls, name: str) -> Optional["ToolName"]:
        try:
            return cls(name)
        except ValueError:
            return None


class ToolGroup(str, Enum):
    TASKS = "tasks"
    HABITS = "habits"
    FINANCE = "finance"


# Named capability sets selectable via ASSISTANT_TOOLSET
TOOLSETS: Dict[str, tuple] = {
    "basic": (ToolGroup.TASKS, ToolGroup.HABITS),
    "finance": (ToolGroup.TASKS, ToolGroup.HABITS, ToolGroup.FINANCE),
}


class ToolArgumentError(ValueError):
    """Tool arguments could not be parsed or do not match the declared parameters."""


@dataclass
class ToolParam:
    name: str
    type: str = "string"  # "string" | "integer" | "number" | "boolean"
    description: str = ""
    required: bool = True
    enum: Optional[List[str]] = None
    dest: str = ""  # handler keyword, defaults to name

    @property
    def key(self) -> str:
        return self.dest or self.name

    def schema(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": self.type}
        if self.description:
            out["description"] = self.description
        if self.enum:
            out["enum"] = list(self.enum)
        return out

    def coerce(self, value: Any) -> Any:
        """Check *value* against the declared type, converting numeric strings."""
        if self.type == "string":
            if not isinstance(value, str):
                raise ToolArgumentError(f"'{self.name}' must be a string")
            if self.enum and value not in self.enum:
                raise ToolArgumentError(f"'{self.name}' must be one of {', '.join(self.enum)}")
            return value
        if self.type == "boolean":
            if not isinstance(value, bool):
                raise ToolArgumentError(f"'{self.name}' must be a boolean")
            return value
        if isinstance(value, bool):
            raise ToolArgumentError(f"'{self.name}' must be a {self.type}")
        if isinstance(value, str):
            try:
                value = float(value.strip())
            except ValueError:
                raise ToolArgumentError(f"'{self.name}' must be a {self.type}")
        if not isinstance(value, (int, float)):
            raise ToolArgumentError(f"'{self.name}' must be a {self.type}")
        if not math.isfinite(value):
            raise ToolArgumentError(f"'{self.name}' must be a finite {self.type}")
        if self.type == "integer":
            if float(value) != int(value):
                raise ToolArgumentError(f"'{self.name}' must be an integer")
            return int(value)
        return value


@dataclass
class ToolContext:
    """Caller identity and storage access handed to every tool handler."""
    user_id: int
    session_factory: Callable[[], Any]


@dataclass
class ToolInvocationRequest:
    id: str
    tool_name: str
    raw_arguments: str = ""


@dataclass
class ToolResult:
    tool_call_id: str
    tool_name: str
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        return "error" in self.payload


@dataclass
class ToolDef:
    name: ToolName
    description: str
    params: List[ToolParam]
    handler: Callable[..., Awaitable[Dict[str, Any]]]
    group: ToolGroup

    def parse_arguments(self, raw: str) -> Dict[str, Any]:
        """Parse the model's JSON argument text into handler keyword arguments."""
        if raw is None or not raw.strip():
            data: Any = {}
        else:
            try:
                data = json.loads(raw)
            except json.JSONDecodeError as e:
                raise ToolArgumentError(f"invalid JSON: {e.msg}")
        if not isinstance(data, dict):
            raise ToolArgumentError("arguments must be a JSON object")

        known = {p.name for p in self.params}
        extra = set(data) - known
        if extra:
            logger.debug(f"Ignoring unexpected arguments for {self.name.value}: {sorted(extra)}")

        kwargs: Dict[str, Any] = {}
        for param in self.params:
            value = data.get(param.name)
            if value is None:
                if param.required:
                    raise ToolArgumentError(f"missing required argument '{param.name}'")
                continue
            kwargs[param.key] = param.coerce(value)
        return kwargs

    def to_openai(self) -> Dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name.value,
                "description": self.description,
                "parameters": {
                    "type": "object",
                    "properties": {p.name: p.schema() for p in self.params},
                    "required": [p.name for p in self.params if p.required],
                },
            },
        }


_tools: Dict[ToolName, ToolDef] = {}


def register_tool(
    name: ToolName,
    description: str = "",
    params: Optional[List[ToolParam]] = None,
    group: ToolGroup = ToolGroup.TASKS,
):
    """Decorator to register a tool handler."""
    def decorator(func):
        tool = ToolDef(
            name=name,
            description=description or func.__doc__ or "",
            params=params or [],
            handler=func,
            group=group,
        )
        _tools[name] = tool
        logger.debug(f"Registered tool: {name.value} ({group.value})")
        return func
    return decorator


def get_tool(name: str) -> Optional[ToolDef]:
    tool_name = ToolName.lookup(name)
    return _tools.get(tool_name) if tool_name else None


def all_tools() -> Dict[ToolName, ToolDef]:
    return dict(_tools)


class ToolRegistry:
    """An immutable set of tools offered to the model for one assistant."""

    def __init__(self, tools: Iterable[ToolDef]):
        self._tools: Dict[ToolName, ToolDef] = {t.name: t for t in tools}

    def get(self, name: str) -> Optional[ToolDef]:
        tool_name = ToolName.lookup(name)
        if tool_name is None:
            return None
        return self._tools.get(tool_name)

    def names(self) -> List[str]:
        return [name.value for name in self._tools]

    def to_openai_tools(self) -> List[Dict[str, Any]]:
        return [tool.to_openai() for tool in self._tools.values()]

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    def __len__(self) -> int:
        return len(self._tools)


def build_registry(groups: Iterable[ToolGroup]) -> ToolRegistry:
    """Assemble a registry from tool groups, in registration order."""
    wanted = set(groups)
    return ToolRegistry(t for t in _tools.values() if t.group in wanted)


def registry_for_toolset(toolset: str) -> ToolRegistry:
    groups = TOOLSETS.get(toolset)
    if groups is None:
        raise ValueError(f"Unknown toolset '{toolset}', expected one of: {', '.join(TOOLSETS)}")
    registry = build_registry(groups)
    logger.info(f"Toolset '{toolset}': {', '.join(registry.names())}")
    return registry
