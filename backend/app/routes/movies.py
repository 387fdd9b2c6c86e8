"""Movie routes: mark as seen and import Trakt history."""

from fastapi import APIRouter

from cinemem.documents import MovieFact
from cinemem.errors import ValidationError

from ..dependencies import Memory
from ..logging_config import get_logger, log_memory_write
from ..models import ImportHistoryRequest, MarkSeenRequest
from ..responses import client_error, internal_error

logger = get_logger("cinemem.movies")
router = APIRouter(tags=["movies"])


@router.post("/mark-seen")
async def mark_seen(request: MarkSeenRequest, memory: Memory):
    """
    Mark a movie as seen.

    Writes a movie_seen record to the store, then (when ``syncTrakt`` is
    true, an id is given and Trakt is configured) adds it to Trakt history.
    A Trakt failure is reported in ``trakt.error`` and does not fail the
    request.
    """
    fact = MovieFact(**request.model_dump(exclude={"sync_trakt"}))
    try:
        result = await memory.mark_seen(fact, sync_trakt=request.sync_trakt)
    except ValidationError as e:
        return client_error(str(e))
    except Exception as e:
        log_memory_write("mark-seen", None, False, str(e))
        return internal_error(e, "/mark-seen")

    log_memory_write("mark-seen", result["vectorStoreFileId"])
    return result


@router.post("/import-trakt-history")
async def import_trakt_history(memory: Memory, request: ImportHistoryRequest | None = None):
    """Import Trakt movie history into memory as one batch."""
    limit = request.limit if request else None
    try:
        result = await memory.import_trakt_history(limit)
    except ValidationError as e:
        return client_error(str(e))
    except Exception as e:
        return internal_error(e, "/import-trakt-history")

    if result.get("vectorStoreFileId"):
        log_memory_write("import-trakt-history", result["vectorStoreFileId"])
    logger.info(f"IMPORT | imported={result['imported']}")
    return result
