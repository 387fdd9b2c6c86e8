"""
cinemem - Movie memory for a personal film assistant.

Records watched movies and watchlist changes as line-delimited JSON facts
in an OpenAI vector store, mirrors them to Trakt, and exposes the memory
as tools for conversational agents.
"""

from importlib.metadata import PackageNotFoundError, version

from .documents import MovieFact, NoteFact, decode_line, encode_movie, encode_note
from .memory import MovieMemory
from .storage import SearchResult, UploadResult, VectorStore

try:
    __version__ = version("cinemem")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "MovieFact",
    "NoteFact",
    "MovieMemory",
    "SearchResult",
    "UploadResult",
    "VectorStore",
    "decode_line",
    "encode_movie",
    "encode_note",
]
