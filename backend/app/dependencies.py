"""Process-wide services for the HTTP layer.

Built once from Settings on first use and injected into routes through
FastAPI dependencies, so tests can swap them with
``app.dependency_overrides[get_services]``.
"""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends

from cinemem.agent import MovieAgent
from cinemem.config import Settings, get_settings
from cinemem.mcp.context import ToolContext
from cinemem.memory import MovieMemory


@dataclass
class Services:
    """Long-lived collaborators shared by all requests (read-only)."""

    settings: Settings
    tools: ToolContext
    agent: MovieAgent

    @property
    def memory(self) -> MovieMemory:
        return self.tools.memory

    async def aclose(self) -> None:
        await self.agent.aclose()
        await self.tools.aclose()


_services: Services | None = None


def build_services(settings: Settings) -> Services:
    tools = ToolContext.from_settings(settings)
    return Services(settings=settings, tools=tools, agent=MovieAgent.from_context(tools))


def get_services(settings: Annotated[Settings, Depends(get_settings)]) -> Services:
    """Get cached services instance."""
    global _services
    if _services is None:
        _services = build_services(settings)
    return _services


async def close_services() -> None:
    global _services
    if _services is not None:
        await _services.aclose()
        _services = None


def get_memory(services: Annotated[Services, Depends(get_services)]) -> MovieMemory:
    """FastAPI dependency for the movie memory service."""
    return services.memory


def get_agent(services: Annotated[Services, Depends(get_services)]) -> MovieAgent:
    """FastAPI dependency for the conversational agent."""
    return services.agent


# Type aliases for dependency injection
AppServices = Annotated[Services, Depends(get_services)]
Memory = Annotated[MovieMemory, Depends(get_memory)]
Agent = Annotated[MovieAgent, Depends(get_agent)]
