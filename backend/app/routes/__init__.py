"""API routes."""

from .agent import router as agent_router
from .memories import router as memories_router
from .movies import router as movies_router
from .watchlist import router as watchlist_router

__all__ = [
    "agent_router",
    "memories_router",
    "movies_router",
    "watchlist_router",
]
