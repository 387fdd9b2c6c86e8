"""MovieMemory - the write paths of the movie memory.

Each operation serializes a fact, uploads it to the vector store and, where
applicable, mirrors the change to Trakt. The memory write always happens
first; a failing Trakt mirror never rolls it back.
"""

import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional

import httpx

from cinemem.documents import (
    MOVIE_SEEN,
    MOVIE_WATCHLIST,
    MOVIE_WATCHLIST_REMOVED,
    MovieFact,
    NoteFact,
    encode_batch,
    encode_movie,
    encode_note,
)
from cinemem.errors import TraktError, ValidationError
from cinemem.storage import SearchResult, UploadResult, VectorStore
from cinemem.trakt import TraktClient, build_ids

logger = logging.getLogger(__name__)

_WATCHLIST = {
    "add": {
        "type": MOVIE_WATCHLIST,
        "state": "in_watchlist",
        "source": "trakt_watchlist_add",
        "tags": ["watchlist"],
    },
    "remove": {
        "type": MOVIE_WATCHLIST_REMOVED,
        "state": "removed_from_watchlist",
        "source": "trakt_watchlist_remove",
        "tags": ["watchlist_removed"],
    },
}


class MovieMemory:
    """Records movie activity in the store and mirrors it to Trakt."""

    def __init__(self, store: VectorStore, trakt: TraktClient):
        self.store = store
        self.trakt = trakt

    async def write_note(
        self, kind: str, text: str, source: str = "", tags: Optional[List[str]] = None
    ) -> UploadResult:
        return await self.store.upload_text(
            encode_note(NoteFact(kind=kind, text=text, source=source, tags=list(tags or [])))
        )

    async def search(
        self, query: str, top_k: Optional[int] = None, filter_tags: Optional[List[str]] = None
    ) -> List[SearchResult]:
        return await self.store.search(query, top_k=top_k, filter_tags=filter_tags)

    async def mark_seen(self, fact: MovieFact, *, sync_trakt: bool = True) -> Dict[str, Any]:
        """Record a watched movie, then optionally add it to Trakt history.

        The Trakt mirror runs only when ``sync_trakt`` is set, the fact has an
        external id and Trakt is configured. A mirror failure is reported in
        the ``trakt`` field instead of being raised.
        """
        if not fact.title or not isinstance(fact.title, str):
            raise ValidationError("title is required (string)")

        fact = replace(
            fact,
            type=MOVIE_SEEN,
            state="seen",
            source="mark_seen_trakt+vector" if sync_trakt else "mark_seen_vector_only",
        )
        uploaded = await self.store.upload_text(encode_movie(fact))

        trakt_result: Optional[Dict[str, Any]] = None
        if sync_trakt and fact.has_external_id() and self.trakt.configured:
            try:
                trakt_result = await self.trakt.add_to_history(
                    build_ids(fact.trakt_id, fact.imdb, fact.slug, fact.tmdb)
                )
            except (TraktError, httpx.HTTPError) as e:
                logger.warning("Error syncing to Trakt history: %s", e)
                trakt_result = {"error": str(e)}

        return {
            "ok": True,
            "stored": {
                "title": fact.title,
                "year": fact.year,
                "trakt_id": fact.trakt_id,
                "imdb": fact.imdb,
                "slug": fact.slug,
                "tmdb": fact.tmdb,
                "rating": fact.rating,
                "liked": fact.liked,
                "tags": list(fact.tags or []),
            },
            "vectorStoreFileId": uploaded.file_id,
            "trakt": trakt_result,
        }

    async def import_trakt_history(self, limit: Any = None) -> Dict[str, Any]:
        """Copy Trakt watch history into the store as one batch upload."""
        history = await self.trakt.fetch_history(limit)
        if not history:
            return {"ok": True, "imported": 0, "message": "Trakt history is empty"}

        facts = []
        for item in history:
            movie = (item or {}).get("movie") or {}
            if not movie.get("title"):
                continue
            ids = movie.get("ids") or {}
            facts.append(
                MovieFact(
                    type=MOVIE_SEEN,
                    title=movie["title"],
                    year=movie.get("year"),
                    trakt_id=ids.get("trakt"),
                    imdb=ids.get("imdb"),
                    slug=ids.get("slug"),
                    tmdb=ids.get("tmdb"),
                    rating=item.get("rating"),
                    state="seen",
                    source="trakt_history",
                    tags=["trakt_history"],
                )
            )

        if not facts:
            return {"ok": True, "imported": 0, "message": "No Trakt entries had a title"}

        uploaded = await self.store.upload_text(encode_batch(facts))
        logger.info("Imported %d Trakt history entries into %s", len(facts), uploaded.file_id)
        return {"ok": True, "imported": len(facts), "vectorStoreFileId": uploaded.file_id}

    async def modify_watchlist(
        self, action: str, fact: MovieFact, *, write_to_vector: bool = True
    ) -> Dict[str, Any]:
        """Add to or remove from the Trakt watchlist, recording it in memory.

        The memory record is written only when a title is known. When Trakt
        is not configured the mirror is skipped and ``watchlist`` is None.
        """
        if action not in _WATCHLIST:
            raise ValidationError(f"action must be one of {sorted(_WATCHLIST)}, got '{action}'")
        if not fact.has_external_id():
            raise ValidationError("Need at least one id: trakt_id, imdb, slug or tmdb")
        ids = build_ids(fact.trakt_id, fact.imdb, fact.slug, fact.tmdb)

        file_id = None
        if write_to_vector and fact.title:
            preset = _WATCHLIST[action]
            record = replace(
                fact,
                type=preset["type"],
                state=preset["state"],
                source=preset["source"],
                tags=list(preset["tags"]) if fact.tags is None else fact.tags,
            )
            file_id = (await self.store.upload_text(encode_movie(record))).file_id

        watchlist = None
        if self.trakt.configured:
            watchlist = await self.trakt.modify_watchlist(action, ids)
        else:
            logger.info("Trakt not configured; watchlist %s kept in memory only", action)

        return {
            "ok": True,
            "action": action,
            "watchlist": watchlist,
            "vectorStoreFileId": file_id,
        }
