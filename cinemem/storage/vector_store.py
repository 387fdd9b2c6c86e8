"""OpenAI vector store used as flat, line-delimited JSON memory.

The vector store is only used as durable file storage: uploads attach a
file of record-lines to the collection, and search is a linear scan of
file contents with case-insensitive substring matching.

Scan limits:
1. Only the first page (LIST_PAGE_SIZE files) of the collection is read
2. Matches come back in file-listing-then-line order, score is always 1
3. Scanning stops as soon as ``top_k`` matches are collected
"""

import json
import logging
import secrets
import tempfile
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiofiles
import aiofiles.os
import openai
from openai import AsyncOpenAI

from cinemem.config import Settings
from cinemem.documents import RecordParseError, decode_line
from cinemem.errors import StoreError

logger = logging.getLogger(__name__)

LIST_PAGE_SIZE = 20
DEFAULT_TOP_K = 10
MAX_TOP_K = 50
FILE_PURPOSE = "assistants"
TEMP_PREFIX = "cinemem"


@dataclass
class UploadResult:
    """Outcome of a successful upload. The attach id is not kept."""

    file_id: str


@dataclass
class SearchResult:
    """A single search match. Ephemeral, never persisted."""

    text: str
    kind: str
    tags: List[Any] = field(default_factory=list)
    created_at: Optional[Any] = None
    score: float = 1

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _describe(exc: Exception) -> str:
    """Status and body of a vendor error, for embedding in StoreError."""
    if isinstance(exc, openai.APIStatusError):
        return f"{exc.status_code}: {exc.response.text}"
    return str(exc)


def _field(doc: Dict[str, Any], key: str) -> str:
    value = doc.get(key)
    if not value:
        return ""
    return value if isinstance(value, str) else str(value)


def _compact_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def clamp_top_k(top_k: Optional[int]) -> int:
    if not top_k:
        return DEFAULT_TOP_K
    return max(1, min(int(top_k), MAX_TOP_K))


def match_record(
    doc: Dict[str, Any], query_lower: str, required_tags: Optional[List[str]] = None
) -> Optional[SearchResult]:
    """Match one decoded record against a lowercased query.

    Tag filtering is conjunctive: every required tag must be present.
    The haystack is ``text title comment json(tags) kind type``.
    """
    tags = doc.get("tags")
    if not isinstance(tags, list):
        tags = []

    if required_tags and not all(t in tags for t in required_tags):
        return None

    haystack = " ".join(
        [
            _field(doc, "text"),
            _field(doc, "title"),
            _field(doc, "comment"),
            _compact_json(tags),
            _field(doc, "kind"),
            _field(doc, "type"),
        ]
    ).lower()

    if query_lower not in haystack:
        return None

    return SearchResult(
        text=_field(doc, "text") or _field(doc, "title") or _compact_json(doc),
        kind=_field(doc, "kind") or _field(doc, "type") or "unknown",
        tags=tags,
        created_at=doc.get("created_at") or doc.get("marked_at") or None,
        score=1,
    )


class VectorStore:
    """Upload, search and delete memory files in one OpenAI vector store."""

    def __init__(
        self,
        client: AsyncOpenAI,
        vector_store_id: str,
        *,
        tmp_dir: Optional[str] = None,
    ):
        self._client = client
        self._vector_store_id = vector_store_id
        self._tmp_dir = tmp_dir

    @classmethod
    def from_settings(cls, settings: Settings) -> "VectorStore":
        client = AsyncOpenAI(api_key=settings.openai_api_key, timeout=settings.request_timeout)
        return cls(client, settings.vector_store_id)

    @property
    def vector_store_id(self) -> str:
        return self._vector_store_id

    async def aclose(self) -> None:
        await self._client.close()

    # ---- Upload ----

    def _temp_path(self) -> Path:
        # monotonic clock + random suffix keeps names unique across concurrent calls
        name = f"{TEMP_PREFIX}-{time.monotonic_ns()}-{secrets.token_hex(6)}.txt"
        return Path(self._tmp_dir or tempfile.gettempdir()) / name

    async def upload_text(self, text: str) -> UploadResult:
        """Persist a blob of record-lines and attach it to the collection.

        The local temp file is removed on every exit path.

        Raises:
            StoreError: If the file upload or the attach call fails. When the
                attach fails the uploaded file object is deleted again so it
                is not left orphaned.
        """
        tmp_path = self._temp_path()
        try:
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as fh:
                await fh.write(text)

            try:
                uploaded = await self._client.files.create(file=tmp_path, purpose=FILE_PURPOSE)
            except openai.APIError as e:
                raise StoreError(f"File upload failed {_describe(e)}") from e

            try:
                vs_file = await self._client.vector_stores.files.create(
                    vector_store_id=self._vector_store_id,
                    file_id=uploaded.id,
                )
            except openai.APIError as e:
                await self._discard_orphan(uploaded.id)
                status = getattr(e, "status_code", None)
                raise StoreError(
                    f"Vector store attach failed {_describe(e)}",
                    status=status,
                    body=e.response.text if isinstance(e, openai.APIStatusError) else None,
                ) from e

            logger.info(
                "Uploaded to vector store: file_id=%s vs_file_id=%s",
                uploaded.id,
                getattr(vs_file, "id", None),
            )
            return UploadResult(file_id=uploaded.id)
        except StoreError:
            logger.error("Error uploading to vector store", exc_info=True)
            raise
        finally:
            try:
                await aiofiles.os.remove(tmp_path)
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning("Could not remove temp file %s: %s", tmp_path, e)

    async def _discard_orphan(self, file_id: str) -> None:
        try:
            await self._client.files.delete(file_id)
            logger.info("Deleted orphaned file %s after failed attach", file_id)
        except openai.APIError as e:
            logger.warning("Could not delete orphaned file %s: %s", file_id, _describe(e))

    # ---- Delete ----

    async def delete_file(self, file_id: str) -> None:
        """Detach a file from the collection and delete the file object."""
        try:
            await self._client.vector_stores.files.delete(
                file_id, vector_store_id=self._vector_store_id
            )
            await self._client.files.delete(file_id)
        except openai.APIError as e:
            raise StoreError(f"Vector store delete failed {_describe(e)}") from e
        logger.info("Deleted memory file %s", file_id)

    # ---- Search ----

    async def list_files(self, limit: int = LIST_PAGE_SIZE) -> List[Any]:
        """First page of files attached to the collection (no pagination)."""
        try:
            page = await self._client.vector_stores.files.list(
                vector_store_id=self._vector_store_id, limit=limit
            )
        except openai.APIError as e:
            raise StoreError(f"Vector store list failed {_describe(e)}") from e
        return list(getattr(page, "data", None) or [])

    async def read_file(self, file_id: str) -> Optional[str]:
        """Full raw text of a file, or None if it cannot be fetched."""
        try:
            content = await self._client.files.content(file_id)
        except openai.APIError as e:
            logger.warning("Error fetching file content %s: %s", file_id, _describe(e))
            return None
        return content.text

    async def search(
        self,
        query: str,
        top_k: Optional[int] = DEFAULT_TOP_K,
        filter_tags: Optional[List[str]] = None,
    ) -> List[SearchResult]:
        """Linear substring search over every record line in the collection.

        Args:
            query: Case-insensitive substring to look for
            top_k: Maximum matches (default 10, capped at 50)
            filter_tags: Tags that must all be present on a record

        Returns:
            Matches in scan order; empty list when nothing matches.

        Raises:
            StoreError: If the collection cannot be listed.
        """
        max_results = clamp_top_k(top_k)
        query_lower = query.lower()
        required_tags = list(filter_tags) if filter_tags else None
        results: List[SearchResult] = []

        for file in await self.list_files():
            if len(results) >= max_results:
                break

            text = await self.read_file(file.id)
            if not text:
                continue

            for line in text.split("\n"):
                if len(results) >= max_results:
                    break
                if not line.strip():
                    continue

                doc = decode_line(line)
                if isinstance(doc, RecordParseError):
                    continue

                match = match_record(doc, query_lower, required_tags)
                if match is not None:
                    results.append(match)

        logger.debug("Memory search %r matched %d record(s)", query, len(results))
        return results[:max_results]

