"""
Memory documents: the line-delimited JSON records persisted to the store.

Every fact is serialized as exactly one JSON object followed by a single
newline. Several encoded lines may be concatenated into one upload; the
store treats batch boundaries as meaningless.

Two record shapes exist:

- movie facts (seen, watchlist add/remove), keyed by ``type``
- free-form notes written by agents, keyed by ``kind``

Timestamps (``marked_at`` / ``created_at``) are stamped at encode time and
are never taken from the caller.
"""

import json
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

# Record types written by the movie memory service. Not an enum: the store
# accepts any string and readers must tolerate unknown kinds.
MOVIE_SEEN = "movie_seen"
MOVIE_WATCHLIST = "movie_watchlist"
MOVIE_WATCHLIST_REMOVED = "movie_watchlist_removed"

DEFAULT_STATE = "seen"
DEFAULT_SOURCE = "manual"


def utc_now() -> str:
    """Get current timestamp as ISO string in UTC."""
    return datetime.now(timezone.utc).isoformat()


@dataclass
class MovieFact:
    """A partially-filled movie event. Every field is optional.

    ``trakt_id`` and ``tmdb`` are kept as given (Trakt returns integers,
    callers usually send strings).
    """

    type: Optional[str] = None
    title: Optional[str] = None
    year: Optional[int] = None
    trakt_id: Optional[Union[str, int]] = None
    imdb: Optional[str] = None
    slug: Optional[str] = None
    tmdb: Optional[Union[str, int]] = None
    rating: Optional[float] = None
    liked: Optional[bool] = None
    state: Optional[str] = None
    source: Optional[str] = None
    tags: Optional[List[str]] = None
    comment: Optional[str] = None

    def has_external_id(self) -> bool:
        return bool(self.trakt_id or self.imdb or self.slug or self.tmdb)


@dataclass
class NoteFact:
    """A free-form note (mood, preference, profile remark, ...)."""

    kind: str
    text: str
    source: str = ""
    tags: List[str] = field(default_factory=list)


_MOVIE_FIELDS = frozenset(f.name for f in fields(MovieFact))


def movie_fact_from_dict(data: Mapping[str, Any]) -> MovieFact:
    """Build a MovieFact from a loose mapping, dropping unknown keys."""
    return MovieFact(**{k: v for k, v in data.items() if k in _MOVIE_FIELDS})


def movie_record(fact: MovieFact, *, now: Optional[str] = None) -> Dict[str, Any]:
    """Fill defaults and stamp ``marked_at``.

    A missing title is not rejected here; it is simply left out of the
    record. Required-field checks belong to the caller.
    """
    record: Dict[str, Any] = {"type": fact.type or MOVIE_SEEN}
    if fact.title is not None:
        record["title"] = fact.title
    record.update(
        {
            "year": fact.year,
            "trakt_id": fact.trakt_id,
            "imdb": fact.imdb,
            "slug": fact.slug,
            "tmdb": fact.tmdb,
            "rating": fact.rating,
            "liked": fact.liked,
            "state": fact.state if fact.state is not None else DEFAULT_STATE,
            "source": fact.source if fact.source is not None else DEFAULT_SOURCE,
            "marked_at": now or utc_now(),
            "tags": list(fact.tags) if fact.tags is not None else [],
            "comment": fact.comment,
        }
    )
    return record


def note_record(fact: NoteFact, *, now: Optional[str] = None) -> Dict[str, Any]:
    return {
        "kind": fact.kind,
        "text": fact.text,
        "source": fact.source,
        "tags": list(fact.tags or []),
        "created_at": now or utc_now(),
    }


def _dump_line(record: Dict[str, Any]) -> str:
    # json.dumps escapes "\n" inside strings, so one record is one line
    return json.dumps(record, ensure_ascii=False) + "\n"


def encode_movie(fact: MovieFact) -> str:
    """Serialize a movie fact to one newline-terminated JSON line."""
    return _dump_line(movie_record(fact))


def encode_note(fact: NoteFact) -> str:
    """Serialize a note to one newline-terminated JSON line."""
    return _dump_line(note_record(fact))


def encode_batch(facts: Iterable[MovieFact]) -> str:
    """Concatenate encoded movie facts into a multi-record upload payload."""
    return "".join(encode_movie(f) for f in facts)


class RecordParseError(ValueError):
    """Structured parse failure for one stored line."""

    def __init__(self, line: str, cause: Optional[Exception] = None):
        super().__init__(f"Invalid memory record: {line[:80]!r}")
        self.line = line
        self.cause = cause


def decode_line(line: str) -> Union[Dict[str, Any], RecordParseError]:
    """Parse one stored line.

    Returns the record dict, or a RecordParseError describing why the line
    is not a record. Never raises: the search path discards errors and
    keeps scanning.
    """
    try:
        doc = json.loads(line)
    except (TypeError, ValueError) as exc:
        return RecordParseError(line, exc)
    if not isinstance(doc, dict):
        return RecordParseError(line)
    return doc
