"""Persistent memory storage backed by an OpenAI vector store."""

from .vector_store import (
    DEFAULT_TOP_K,
    FILE_PURPOSE,
    LIST_PAGE_SIZE,
    MAX_TOP_K,
    SearchResult,
    UploadResult,
    VectorStore,
    clamp_top_k,
    match_record,
)

__all__ = [
    "DEFAULT_TOP_K",
    "FILE_PURPOSE",
    "LIST_PAGE_SIZE",
    "MAX_TOP_K",
    "SearchResult",
    "UploadResult",
    "VectorStore",
    "clamp_top_k",
    "match_record",
]
