"""MovieAgent - conversational front end over the movie memory tools.

A plain tool-calling loop on the OpenAI chat completions API: the model
sees the tool registry as functions, every call it makes is validated and
executed through the same pipeline as the MCP server, and the loop ends
when the model answers without calling a tool.
"""

from __future__ import annotations

import json
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Optional

from openai import AsyncOpenAI

from cinemem.errors import CinememError
from cinemem.mcp.context import ToolContext
from cinemem.mcp.server import execute_tool, handle_tool_error, render_tool_output
from cinemem.mcp.tool_definitions import MCP_TOOL_NAMES, TOOLS_BY_NAME

logger = logging.getLogger(__name__)

DEFAULT_SESSION = "default-session"
MAX_SESSIONS = 100
MAX_HISTORY_MESSAGES = 20

INSTRUCTIONS = """
You are the memory behind a personal film and TV assistant.

Your persistent memory is a store of JSON records: movies seen (imported from
Trakt or marked by hand), watchlist changes, and free-form notes about tastes
and moods. Typical fields: type/kind, title, year, trakt_id, imdb, tmdb, slug,
rating, liked, state, source, tags, comment, marked_at/created_at.

Goals:
1) Remember what the user has watched, what is on the watchlist, and their tastes.
2) Recommend films and series that fit those tastes.
3) Keep memory up to date when the user reports something new.

Tools:
- memory_search: check whether something was seen, read watchlist notes and history.
- memory_write: store a new note (seen movie, mood, preference).
- trakt_request: read or change Trakt history and watchlist directly.
- backend_request (when available): mark seen, import Trakt history, manage the watchlist.

Always answer in the user's language and briefly say what you looked up or changed.
""".strip()


class AgentError(CinememError):
    """The agent could not produce a reply."""

    pass


@dataclass
class AgentReply:
    """Final answer plus the tool calls made along the way."""

    text: str
    tool_calls: list[dict[str, Any]] = field(default_factory=list)


def _parse_tool_call_input(arguments: Any) -> dict[str, Any]:
    """Best-effort parse for tool-call arguments; always returns a dict."""
    if isinstance(arguments, dict):
        return arguments
    if not isinstance(arguments, str) or not arguments:
        return {}
    try:
        parsed = json.loads(arguments)
    except json.JSONDecodeError:
        return {"_raw": arguments}
    return parsed if isinstance(parsed, dict) else {"_value": parsed}


def _function_spec(name: str) -> dict[str, Any]:
    tool = TOOLS_BY_NAME[name]
    return {
        "type": "function",
        "function": {
            "name": tool.name,
            "description": tool.description,
            "parameters": tool.inputSchema,
        },
    }


class MovieAgent:
    """Runs one conversational turn against the memory tools.

    Conversation history is kept per session id, in process, bounded to the
    most recent sessions and messages.
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        ctx: ToolContext,
        *,
        model: str = "gpt-4o-mini",
        max_turns: int = 6,
        tool_names: Optional[list[str]] = None,
        instructions: str = INSTRUCTIONS,
    ) -> None:
        self._client = client
        self._ctx = ctx
        self._model = model
        self._max_turns = max_turns
        self._tool_names = list(tool_names or MCP_TOOL_NAMES)
        self._instructions = instructions
        self._sessions: OrderedDict[str, list[dict[str, Any]]] = OrderedDict()

    @classmethod
    def from_context(cls, ctx: ToolContext) -> MovieAgent:
        settings = ctx.settings
        tool_names = list(MCP_TOOL_NAMES)
        if settings.agent_backend_tool:
            tool_names.append("backend_request")
        client = AsyncOpenAI(api_key=settings.openai_api_key, timeout=settings.request_timeout)
        return cls(
            client,
            ctx,
            model=settings.openai_model,
            max_turns=settings.agent_max_turns,
            tool_names=tool_names,
        )

    @property
    def tool_names(self) -> list[str]:
        return list(self._tool_names)

    async def aclose(self) -> None:
        await self._client.close()

    def history(self, session_id: str) -> list[dict[str, Any]]:
        return list(self._sessions.get(session_id, []))

    def _remember(self, session_id: str, user: str, assistant: str) -> None:
        messages = self._sessions.pop(session_id, [])
        messages.extend(
            [{"role": "user", "content": user}, {"role": "assistant", "content": assistant}]
        )
        self._sessions[session_id] = messages[-MAX_HISTORY_MESSAGES:]
        while len(self._sessions) > MAX_SESSIONS:
            self._sessions.popitem(last=False)

    async def _run_tool(self, name: str, arguments: dict[str, Any]) -> str:
        if name not in self._tool_names:
            return json.dumps({"error": f"Unknown tool: {name}"})
        try:
            result = await execute_tool(name, arguments, self._ctx)
        except Exception as e:
            return json.dumps({"error": handle_tool_error(e, name, arguments)})
        return render_tool_output(result)

    async def run(self, message: str, session_id: Optional[str] = None) -> AgentReply:
        """Answer one user message, calling tools as the model requests."""
        session_id = session_id or DEFAULT_SESSION
        messages: list[dict[str, Any]] = [{"role": "system", "content": self._instructions}]
        messages.extend(self.history(session_id))
        messages.append({"role": "user", "content": message})
        tools = [_function_spec(name) for name in self._tool_names]
        calls: list[dict[str, Any]] = []

        for _ in range(self._max_turns):
            try:
                response = await self._client.chat.completions.create(
                    model=self._model, messages=messages, tools=tools
                )
            except Exception as exc:
                logger.debug("OpenAI chat completion failed: %s", exc, exc_info=True)
                raise AgentError(f"Model call failed: {exc}") from exc

            reply = response.choices[0].message
            if not reply.tool_calls:
                text = reply.content or ""
                self._remember(session_id, message, text)
                return AgentReply(text=text, tool_calls=calls)

            messages.append(
                {
                    "role": "assistant",
                    "content": reply.content or "",
                    "tool_calls": [
                        {
                            "id": tc.id,
                            "type": "function",
                            "function": {
                                "name": tc.function.name,
                                "arguments": tc.function.arguments,
                            },
                        }
                        for tc in reply.tool_calls
                    ],
                }
            )
            for tc in reply.tool_calls:
                arguments = _parse_tool_call_input(tc.function.arguments)
                output = await self._run_tool(tc.function.name, arguments)
                calls.append({"name": tc.function.name, "arguments": arguments})
                messages.append({"role": "tool", "tool_call_id": tc.id, "content": output})

        raise AgentError(f"Agent did not finish within {self._max_turns} turns")
