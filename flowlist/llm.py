"""Conversation orchestrator — answers a chat turn via OpenAI-style function calling."""
import asyncio
import json
import logging
import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Literal, Optional, Sequence, Union

from openai import AsyncOpenAI, OpenAIError
from pydantic import BaseModel

from .config import settings, Settings
from .database import async_session_factory
from .tools import (
    ToolContext,
    ToolInvocationRequest,
    ToolRegistry,
    ToolResult,
    execute_tools,
    registry_for_toolset,
)

logger = logging.getLogger(__name__)

MAX_HISTORY = 10

SYSTEM_PROMPT = """You are FlowList AI, a helpful productivity assistant. \
You can create tasks, habits, and retrieve the user's task list to help them plan a schedule. \
When the finance tools are available you can also record transactions and report on balances, \
accounts, net worth and savings goals. \
If you use a tool, explain what you did. \
For scheduling, fetch the tasks first, then suggest a time-blocked plan based on priorities.
Today's date: {current_date}"""

NO_ANSWER_FALLBACK = "I'm not sure how to help with that."
TOOL_ANSWER_FALLBACK = "I've processed your request."


class ErrorKind(str, Enum):
    UNAUTHORIZED = "Unauthorized"
    CONFIGURATION = "ConfigurationError"
    AI_SERVICE = "AIServiceError"


class AssistantError(Exception):
    """A turn-fatal failure, reported to the caller as {error, message}."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


class TurnState(str, Enum):
    IDLE = "idle"
    AWAITING_ROUND1 = "awaiting_round1"
    AWAITING_TOOLS = "awaiting_tool_execution"
    AWAITING_ROUND2 = "awaiting_round2"
    DONE = "done"
    FAILED = "failed"


class ChatMessage(BaseModel):
    role: Literal["user", "assistant", "system", "tool"]
    content: str = ""
    tool_call_id: Optional[str] = None
    name: Optional[str] = None

    def to_openai(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class ChatReply(BaseModel):
    message: str
    error: Optional[ErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def create_client(config: Settings = settings) -> Optional[AsyncOpenAI]:
    """Build the model client, or None when the API key is not configured."""
    if not config.groq_api_key:
        logger.warning("GROQ_API_KEY is not set; assistant will report a configuration error")
        return None
    return AsyncOpenAI(api_key=config.groq_api_key, base_url=config.llm_base_url)


def _first_message(response):
    try:
        return response.choices[0].message
    except (AttributeError, IndexError, TypeError) as e:
        raise AssistantError(ErrorKind.AI_SERVICE, f"Malformed response from AI service: {e}")


def _tool_call_message(message, requests: Sequence[ToolInvocationRequest]) -> Dict[str, Any]:
    return {
        "role": "assistant",
        "content": message.content or None,
        "tool_calls": [
            {
                "id": r.id,
                "type": "function",
                "function": {"name": r.tool_name, "arguments": r.raw_arguments},
            }
            for r in requests
        ],
    }


def _tool_result_message(result: ToolResult) -> Dict[str, Any]:
    return {
        "role": "tool",
        "tool_call_id": result.tool_call_id,
        "name": result.tool_name,
        "content": json.dumps(result.payload, default=str, ensure_ascii=False),
    }


class Assistant:
    """Runs one or two model round-trips per user turn.

    The model client, tool registry and storage access are injected so the
    surrounding application owns their lifecycle. The assistant keeps no
    per-user state between turns; history comes in with every call.
    """

    def __init__(
        self,
        client: Optional[AsyncOpenAI],
        registry: ToolRegistry,
        model: Optional[str] = None,
        max_history: int = MAX_HISTORY,
        timeout: Optional[float] = None,
        session_factory: Callable[[], Any] = async_session_factory,
        system_prompt: str = SYSTEM_PROMPT,
    ):
        self.client = client
        self.registry = registry
        self.model = model or settings.chat_model
        self.max_history = max_history
        self.timeout = timeout if timeout is not None else settings.llm_timeout_s
        self.session_factory = session_factory
        self.system_prompt = system_prompt

    def build_messages(self, messages: Sequence[Union[ChatMessage, dict]]) -> List[Dict[str, Any]]:
        """System prompt followed by the most recent ``max_history`` messages."""
        history = [m if isinstance(m, ChatMessage) else ChatMessage.model_validate(m) for m in messages]
        if self.max_history > 0:
            history = history[-self.max_history:]
        else:
            history = []
        now_str = datetime.now().strftime("%Y-%m-%d (%A)")
        system = {"role": "system", "content": self.system_prompt.replace("{current_date}", now_str)}
        return [system] + [m.to_openai() for m in history]

    async def respond(self, messages: Sequence[Union[ChatMessage, dict]], user_id: Optional[int]) -> ChatReply:
        """Answer one chat turn. Never raises; failures come back as an error reply."""
        turn_id = str(uuid.uuid4())[:8]
        try:
            text = await self._run_turn(turn_id, messages, user_id)
        except AssistantError as e:
            self._advance(turn_id, TurnState.FAILED, e.kind.value)
            if e.kind == ErrorKind.AI_SERVICE:
                logger.error(f"[{turn_id}] AI Error: {e.message}")
            return ChatReply(error=e.kind, message=e.message)
        self._advance(turn_id, TurnState.DONE)
        return ChatReply(message=text)

    def _advance(self, turn_id: str, state: TurnState, detail: str = ""):
        logger.debug(f"[{turn_id}] -> {state.value}{' (' + detail + ')' if detail else ''}")

    async def _run_turn(self, turn_id, messages, user_id) -> str:
        if user_id is None:
            raise AssistantError(ErrorKind.UNAUTHORIZED, "Unauthorized")
        if self.client is None:
            raise AssistantError(ErrorKind.CONFIGURATION, "GROQ_API_KEY is missing in server environment.")

        outbound = self.build_messages(messages)
        try:
            return await asyncio.wait_for(self._exchange(turn_id, outbound, user_id), timeout=self.timeout)
        except asyncio.TimeoutError:
            raise AssistantError(ErrorKind.AI_SERVICE, f"AI service did not respond within {self.timeout:g}s")
        except OpenAIError as e:
            raise AssistantError(ErrorKind.AI_SERVICE, str(e) or "Failed to get response from AI.")

    async def _exchange(self, turn_id: str, outbound: List[Dict[str, Any]], user_id: int) -> str:
        self._advance(turn_id, TurnState.AWAITING_ROUND1)
        request_kwargs: Dict[str, Any] = {"model": self.model, "messages": outbound}
        if len(self.registry):
            request_kwargs["tools"] = self.registry.to_openai_tools()
            request_kwargs["tool_choice"] = "auto"
        response = await self.client.chat.completions.create(**request_kwargs)
        message = _first_message(response)

        tool_calls = message.tool_calls or []
        if not tool_calls:
            return message.content or NO_ANSWER_FALLBACK

        requests = [
            ToolInvocationRequest(
                id=call.id,
                tool_name=call.function.name,
                raw_arguments=call.function.arguments or "",
            )
            for call in tool_calls
        ]
        logger.info(f"[{turn_id}] Model requested {len(requests)} tool call(s): "
                    f"{[r.tool_name for r in requests]}")

        self._advance(turn_id, TurnState.AWAITING_TOOLS)
        ctx = ToolContext(user_id=user_id, session_factory=self.session_factory)
        results = await execute_tools(requests, self.registry, ctx)

        followup = (
            outbound
            + [_tool_call_message(message, requests)]
            + [_tool_result_message(r) for r in results]
        )

        self._advance(turn_id, TurnState.AWAITING_ROUND2)
        final = await self.client.chat.completions.create(model=self.model, messages=followup)
        return _first_message(final).content or TOOL_ANSWER_FALLBACK


def build_assistant(config: Settings = settings) -> Assistant:
    """Assemble the assistant from configuration (client, active toolset, limits)."""
    return Assistant(
        client=create_client(config),
        registry=registry_for_toolset(config.assistant_toolset),
        model=config.chat_model,
        max_history=config.max_history,
        timeout=config.llm_timeout_s,
    )
