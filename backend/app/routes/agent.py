"""Conversational agent route."""

from fastapi import APIRouter, Request

from ..dependencies import Agent
from ..models import AgentChatRequest, AgentChatResponse
from ..rate_limit import AGENT_CHAT_LIMIT, limiter
from ..responses import internal_error

router = APIRouter(prefix="/agent", tags=["agent"])


@router.post("/chat", response_model=AgentChatResponse)
@limiter.limit(AGENT_CHAT_LIMIT)
async def agent_chat(request: Request, body: AgentChatRequest, agent: Agent):
    """Send one message to the movie agent and return its reply."""
    try:
        reply = await agent.run(body.message, session_id=body.session_id)
    except Exception as e:
        return internal_error(e, "/agent/chat", error="agent_internal_error")

    return AgentChatResponse(reply=reply.text, tool_calls=reply.tool_calls)
