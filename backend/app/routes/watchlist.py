"""Trakt watchlist routes (optionally mirrored into memory)."""

from fastapi import APIRouter

from cinemem.documents import MovieFact
from cinemem.errors import ValidationError

from ..dependencies import Memory
from ..logging_config import log_memory_write
from ..models import WatchlistRequest
from ..responses import client_error, internal_error

router = APIRouter(prefix="/trakt/watchlist", tags=["watchlist"])

MISSING_IDS = "Need at least one id: trakt_id, imdb, slug or tmdb"


async def _modify(action: str, request: WatchlistRequest, memory: Memory):
    if not request.has_any():
        return client_error(MISSING_IDS)

    fact = MovieFact(**request.model_dump(exclude={"write_to_vector"}))
    try:
        result = await memory.modify_watchlist(
            action, fact, write_to_vector=request.write_to_vector
        )
    except ValidationError as e:
        return client_error(str(e))
    except Exception as e:
        return internal_error(e, f"/trakt/watchlist/{action}")

    if result.get("vectorStoreFileId"):
        log_memory_write(f"watchlist-{action}", result["vectorStoreFileId"])
    return result


@router.post("/add")
async def watchlist_add(request: WatchlistRequest, memory: Memory):
    """Add a movie to the Trakt watchlist and record it in memory."""
    return await _modify("add", request, memory)


@router.post("/remove")
async def watchlist_remove(request: WatchlistRequest, memory: Memory):
    """Remove a movie from the Trakt watchlist and record it in memory."""
    return await _modify("remove", request, memory)
