"""Tests for cinemem.documents: record encoding and line decoding."""

import json
from datetime import datetime

from cinemem.documents import (
    MOVIE_SEEN,
    MovieFact,
    NoteFact,
    RecordParseError,
    decode_line,
    encode_batch,
    encode_movie,
    encode_note,
    movie_fact_from_dict,
    movie_record,
)


class TestEncodeMovie:
    def test_one_line_with_single_trailing_newline(self):
        line = encode_movie(MovieFact(title="Heat", comment="first\nsecond"))
        assert line.endswith("\n")
        assert line.count("\n") == 1

    def test_defaults_are_filled(self):
        doc = json.loads(encode_movie(MovieFact(title="Heat")))
        assert doc["type"] == MOVIE_SEEN
        assert doc["state"] == "seen"
        assert doc["source"] == "manual"
        assert doc["tags"] == []
        assert doc["year"] is None
        assert doc["comment"] is None

    def test_key_order(self):
        doc = json.loads(encode_movie(MovieFact(title="Heat", year=1995)))
        assert list(doc) == [
            "type",
            "title",
            "year",
            "trakt_id",
            "imdb",
            "slug",
            "tmdb",
            "rating",
            "liked",
            "state",
            "source",
            "marked_at",
            "tags",
            "comment",
        ]

    def test_missing_title_is_omitted_not_rejected(self):
        doc = json.loads(encode_movie(MovieFact(imdb="tt0113277")))
        assert "title" not in doc
        assert doc["imdb"] == "tt0113277"

    def test_marked_at_is_stamped_at_encode_time(self):
        before = datetime.now().astimezone()
        doc = json.loads(encode_movie(MovieFact(title="Heat")))
        after = datetime.now().astimezone()
        marked = datetime.fromisoformat(doc["marked_at"])
        assert before <= marked <= after

    def test_non_ascii_is_kept(self):
        line = encode_movie(MovieFact(title="Amélie"))
        assert "Amélie" in line

    def test_roundtrip_preserves_fields(self):
        fact = MovieFact(
            title="Inception",
            year=2010,
            trakt_id=16662,
            imdb="tt1375666",
            rating=9,
            liked=True,
            tags=["nolan", "scifi"],
        )
        doc = decode_line(encode_movie(fact).rstrip("\n"))
        assert doc["title"] == "Inception"
        assert doc["year"] == 2010
        assert doc["trakt_id"] == 16662
        assert doc["imdb"] == "tt1375666"
        assert doc["liked"] is True
        assert doc["tags"] == ["nolan", "scifi"]

    def test_explicit_now(self):
        record = movie_record(MovieFact(title="Heat"), now="2024-01-01T00:00:00+00:00")
        assert record["marked_at"] == "2024-01-01T00:00:00+00:00"


class TestEncodeNote:
    def test_note_shape(self):
        doc = json.loads(encode_note(NoteFact(kind="mood", text="wants a comedy", source="chat")))
        assert list(doc) == ["kind", "text", "source", "tags", "created_at"]
        assert doc["tags"] == []
        assert doc["created_at"]


def test_encode_batch_concatenates_lines():
    payload = encode_batch([MovieFact(title="A"), MovieFact(title="B"), MovieFact(title="C")])
    lines = payload.split("\n")
    assert lines[-1] == ""
    assert [json.loads(line)["title"] for line in lines[:-1]] == ["A", "B", "C"]


def test_encode_batch_empty():
    assert encode_batch([]) == ""


def test_movie_fact_from_dict_drops_unknown_keys():
    fact = movie_fact_from_dict({"title": "Heat", "director": "Mann"})
    assert fact.title == "Heat"
    assert not hasattr(fact, "director")


class TestDecodeLine:
    def test_valid_object(self):
        assert decode_line('{"kind": "mood", "text": "x"}') == {"kind": "mood", "text": "x"}

    def test_invalid_json_returns_error(self):
        result = decode_line("{not json")
        assert isinstance(result, RecordParseError)
        assert result.line == "{not json"
        assert result.cause is not None

    def test_non_object_returns_error(self):
        assert isinstance(decode_line("[1, 2]"), RecordParseError)
        assert isinstance(decode_line('"text"'), RecordParseError)
