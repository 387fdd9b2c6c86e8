"""Runtime collaborators handed to every tool handler."""

from dataclasses import dataclass
from typing import Optional

import httpx

from cinemem.config import Settings
from cinemem.memory import MovieMemory
from cinemem.storage import VectorStore
from cinemem.trakt import TraktClient


@dataclass
class ToolContext:
    """Everything a tool handler may touch. Built once per process."""

    settings: Settings
    memory: MovieMemory
    backend_http: Optional[httpx.AsyncClient] = None

    @property
    def store(self) -> VectorStore:
        return self.memory.store

    @property
    def trakt(self) -> TraktClient:
        return self.memory.trakt

    @classmethod
    def from_settings(cls, settings: Settings) -> "ToolContext":
        memory = MovieMemory(VectorStore.from_settings(settings), TraktClient.from_settings(settings))
        return cls(
            settings=settings,
            memory=memory,
            backend_http=httpx.AsyncClient(timeout=settings.request_timeout),
        )

    async def aclose(self) -> None:
        await self.store.aclose()
        await self.trakt.aclose()
        if self.backend_http is not None:
            await self.backend_http.aclose()
