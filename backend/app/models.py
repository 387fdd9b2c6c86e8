"""Pydantic models for API requests and responses."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from cinemem.storage import DEFAULT_TOP_K, MAX_TOP_K

# =============================================================================
# Movie Models
# =============================================================================


class MovieIds(BaseModel):
    """External identifiers; at least one is needed to reach Trakt."""
    trakt_id: str | int | None = None
    imdb: str | None = None
    slug: str | None = None
    tmdb: str | int | None = None

    def has_any(self) -> bool:
        return bool(self.trakt_id or self.imdb or self.slug or self.tmdb)


class MarkSeenRequest(MovieIds):
    """Request to record a watched movie."""
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1)
    year: int | None = None
    rating: float | None = None
    liked: bool | None = None
    tags: list[str] | None = None
    comment: str | None = None
    sync_trakt: bool = Field(default=True, alias="syncTrakt")


class WatchlistRequest(MovieIds):
    """Request to add or remove a watchlist entry."""
    model_config = ConfigDict(populate_by_name=True)

    title: str | None = None
    year: int | None = None
    tags: list[str] | None = None
    comment: str | None = None
    write_to_vector: bool = Field(default=True, alias="writeToVector")


class ImportHistoryRequest(BaseModel):
    """Request to copy Trakt history into memory."""
    limit: int | None = None


# =============================================================================
# Memory Models
# =============================================================================


class MemorySearchRequest(BaseModel):
    """Request to search memories."""
    query: str = Field(..., min_length=1)
    top_k: int = Field(default=DEFAULT_TOP_K, ge=1, le=MAX_TOP_K)
    filter_tags: list[str] | None = None


class MemorySearchResult(BaseModel):
    """A single search result."""
    text: str
    kind: str
    tags: list[Any] = []
    # stored records may carry non-string timestamps; passed through as found
    created_at: Any = None
    score: float = 1


class MemorySearchResponse(BaseModel):
    """Response from memory search."""
    ok: bool = True
    results: list[MemorySearchResult]
    query: str
    total: int


# =============================================================================
# Agent Models
# =============================================================================


class AgentChatRequest(BaseModel):
    """A message for the conversational agent."""
    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(..., min_length=1)
    session_id: str | None = Field(default=None, alias="sessionId")


class AgentChatResponse(BaseModel):
    """The agent's reply."""
    ok: bool = True
    reply: str
    tool_calls: list[dict[str, Any]] = []
