"""Tests for MovieMemory: memory writes mirrored to Trakt."""

import json

import httpx
import pytest

from cinemem.documents import MovieFact
from cinemem.errors import ConfigurationError, StoreError, TraktError, ValidationError
from cinemem.memory import MovieMemory


def _stored(openai_client, file_id):
    return [json.loads(line) for line in openai_client.contents[file_id].splitlines()]


class TestMarkSeen:
    @pytest.mark.asyncio
    async def test_writes_record_and_mirrors_to_trakt(self, memory, openai_client, fake_trakt):
        fake_trakt.respond("POST", "/sync/history", status=201, json_body={"added": {"movies": 1}})

        result = await memory.mark_seen(MovieFact(title="Heat", year=1995, imdb="tt0113277"))

        assert result["ok"] is True
        assert result["trakt"] == {"added": {"movies": 1}}
        assert result["stored"]["title"] == "Heat"
        (doc,) = _stored(openai_client, result["vectorStoreFileId"])
        assert doc["type"] == "movie_seen"
        assert doc["state"] == "seen"
        assert doc["source"] == "mark_seen_trakt+vector"

    @pytest.mark.asyncio
    async def test_missing_title_performs_no_calls(self, memory, openai_client, fake_trakt):
        with pytest.raises(ValidationError, match="title"):
            await memory.mark_seen(MovieFact(imdb="tt0113277"))

        assert openai_client.calls == []
        assert fake_trakt.requests == []

    @pytest.mark.asyncio
    async def test_trakt_failure_keeps_memory_write(self, memory, openai_client, fake_trakt):
        fake_trakt.respond("POST", "/sync/history", status=500, text="trakt down")

        result = await memory.mark_seen(MovieFact(title="Heat", imdb="tt0113277"))

        assert result["ok"] is True
        assert "trakt down" in result["trakt"]["error"]
        assert result["vectorStoreFileId"] in openai_client.attached

    @pytest.mark.asyncio
    async def test_trakt_transport_failure_is_reported(self, memory, fake_trakt):
        fake_trakt.raise_on("POST", "/sync/history", httpx.ConnectError("unreachable"))

        result = await memory.mark_seen(MovieFact(title="Heat", imdb="tt0113277"))

        assert result["trakt"] == {"error": "unreachable"}

    @pytest.mark.asyncio
    async def test_no_mirror_without_ids(self, memory, fake_trakt):
        result = await memory.mark_seen(MovieFact(title="Heat"))

        assert result["trakt"] is None
        assert fake_trakt.requests == []

    @pytest.mark.asyncio
    async def test_sync_disabled(self, memory, openai_client, fake_trakt):
        result = await memory.mark_seen(MovieFact(title="Heat", imdb="tt1"), sync_trakt=False)

        assert result["trakt"] is None
        assert fake_trakt.requests == []
        (doc,) = _stored(openai_client, result["vectorStoreFileId"])
        assert doc["source"] == "mark_seen_vector_only"

    @pytest.mark.asyncio
    async def test_unconfigured_trakt_is_skipped(self, store, fake_trakt):
        memory = MovieMemory(store, fake_trakt.client(configured=False))

        result = await memory.mark_seen(MovieFact(title="Heat", imdb="tt1"))

        assert result["ok"] is True
        assert result["trakt"] is None
        assert fake_trakt.requests == []

    @pytest.mark.asyncio
    async def test_store_failure_skips_trakt(self, memory, openai_client, fake_trakt):
        openai_client.fail("upload")

        with pytest.raises(StoreError):
            await memory.mark_seen(MovieFact(title="Heat", imdb="tt1"))
        assert fake_trakt.requests == []


class TestImportHistory:
    @pytest.mark.asyncio
    async def test_imports_one_batch(self, memory, openai_client, fake_trakt):
        fake_trakt.respond(
            "GET",
            "/sync/history/movies",
            json_body=[
                {"movie": {"title": "Heat", "year": 1995, "ids": {"trakt": 1, "imdb": "tt0113277"}}},
                {"movie": {"title": "Alien", "year": 1979, "ids": {"slug": "alien-1979"}}},
                {"movie": {"year": 2000}},
                {"episode": {"title": "Pilot"}},
            ],
        )

        result = await memory.import_trakt_history(limit=50)

        assert result["ok"] is True
        assert result["imported"] == 2
        assert fake_trakt.requests[0].url.params["limit"] == "50"
        assert openai_client.calls.count("files.create") == 1
        docs = _stored(openai_client, result["vectorStoreFileId"])
        assert [d["title"] for d in docs] == ["Heat", "Alien"]
        assert docs[0]["trakt_id"] == 1
        assert docs[0]["source"] == "trakt_history"
        assert docs[1]["tags"] == ["trakt_history"]

    @pytest.mark.asyncio
    async def test_empty_history_uploads_nothing(self, memory, openai_client, fake_trakt):
        fake_trakt.respond("GET", "/sync/history/movies", json_body=[])

        result = await memory.import_trakt_history()

        assert result["imported"] == 0
        assert "vectorStoreFileId" not in result
        assert openai_client.calls == []

    @pytest.mark.asyncio
    async def test_requires_trakt(self, store, fake_trakt):
        memory = MovieMemory(store, fake_trakt.client(configured=False))

        with pytest.raises(ConfigurationError):
            await memory.import_trakt_history()


class TestWatchlist:
    @pytest.mark.asyncio
    async def test_add_records_and_calls_trakt(self, memory, openai_client, fake_trakt):
        fake_trakt.respond("POST", "/sync/watchlist", status=201, json_body={"added": {"movies": 1}})

        result = await memory.modify_watchlist("add", MovieFact(title="Dune", imdb="tt1160419"))

        assert result["action"] == "add"
        assert result["watchlist"] == {"added": {"movies": 1}}
        (doc,) = _stored(openai_client, result["vectorStoreFileId"])
        assert doc["type"] == "movie_watchlist"
        assert doc["state"] == "in_watchlist"
        assert doc["source"] == "trakt_watchlist_add"
        assert doc["tags"] == ["watchlist"]

    @pytest.mark.asyncio
    async def test_remove_keeps_caller_tags(self, memory, openai_client, fake_trakt):
        fake_trakt.respond("POST", "/sync/watchlist/remove", json_body={"deleted": {"movies": 1}})

        result = await memory.modify_watchlist(
            "remove", MovieFact(title="Dune", imdb="tt1160419", tags=["meh"])
        )

        (doc,) = _stored(openai_client, result["vectorStoreFileId"])
        assert doc["type"] == "movie_watchlist_removed"
        assert doc["state"] == "removed_from_watchlist"
        assert doc["tags"] == ["meh"]

    @pytest.mark.asyncio
    async def test_no_title_no_memory_write(self, memory, openai_client, fake_trakt):
        fake_trakt.respond("POST", "/sync/watchlist", json_body={})

        result = await memory.modify_watchlist("add", MovieFact(imdb="tt1160419"))

        assert result["vectorStoreFileId"] is None
        assert openai_client.calls == []
        assert fake_trakt.calls == [("POST", "/sync/watchlist")]

    @pytest.mark.asyncio
    async def test_write_to_vector_disabled(self, memory, openai_client, fake_trakt):
        fake_trakt.respond("POST", "/sync/watchlist", json_body={})

        result = await memory.modify_watchlist(
            "add", MovieFact(title="Dune", imdb="tt1"), write_to_vector=False
        )

        assert result["vectorStoreFileId"] is None
        assert openai_client.calls == []

    @pytest.mark.asyncio
    async def test_requires_an_id(self, memory, openai_client, fake_trakt):
        with pytest.raises(ValidationError, match="at least one id"):
            await memory.modify_watchlist("add", MovieFact(title="Dune"))
        assert openai_client.calls == []
        assert fake_trakt.requests == []

    @pytest.mark.asyncio
    async def test_unconfigured_trakt_records_only(self, store, openai_client, fake_trakt):
        memory = MovieMemory(store, fake_trakt.client(configured=False))

        result = await memory.modify_watchlist("add", MovieFact(title="Dune", imdb="tt1"))

        assert result["watchlist"] is None
        assert result["vectorStoreFileId"] in openai_client.attached
        assert fake_trakt.requests == []

    @pytest.mark.asyncio
    async def test_trakt_error_propagates(self, memory, fake_trakt):
        fake_trakt.respond("POST", "/sync/watchlist", status=500, text="boom")

        with pytest.raises(TraktError):
            await memory.modify_watchlist("add", MovieFact(imdb="tt1"))


@pytest.mark.asyncio
async def test_write_note_and_search(memory):
    uploaded = await memory.write_note("mood", "Wants something cozy", "chat", ["mood"])

    (result,) = await memory.search("cozy", filter_tags=["mood"])
    assert uploaded.file_id
    assert result.kind == "mood"
    assert result.text == "Wants something cozy"


@pytest.mark.asyncio
async def test_callers_fact_is_not_modified(memory, fake_trakt):
    fake_trakt.respond("POST", "/sync/watchlist", json_body={})
    seen = MovieFact(title="Heat", imdb="tt0113277")
    wanted = MovieFact(title="Dune", imdb="tt1160419")

    await memory.mark_seen(seen, sync_trakt=False)
    await memory.modify_watchlist("add", wanted)

    assert seen == MovieFact(title="Heat", imdb="tt0113277")
    assert wanted == MovieFact(title="Dune", imdb="tt1160419")
