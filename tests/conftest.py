"""
Pytest fixtures and test configuration for cinemem tests.
"""

import json
import os

import pytest

os.environ.setdefault("OPENAI_API_KEY", "sk-test-only")
os.environ.setdefault("VECTOR_STORE_ID", "vs_test")

from cinemem.config import Settings  # noqa: E402
from cinemem.mcp.context import ToolContext  # noqa: E402
from cinemem.memory import MovieMemory  # noqa: E402
from cinemem.storage import VectorStore  # noqa: E402
from cinemem.testing import FakeOpenAI, FakeTrakt  # noqa: E402


@pytest.fixture
def settings():
    """Settings with Trakt configured, independent of any .env file."""
    return Settings(
        _env_file=None,
        openai_api_key="sk-test-only",
        vector_store_id="vs_test",
        trakt_client_id="test-client-id",
        trakt_access_token="test-access-token",
        backend_url="http://backend.test",
    )


@pytest.fixture
def openai_client():
    """In-memory OpenAI files / vector store."""
    return FakeOpenAI()


@pytest.fixture
def store(openai_client, tmp_path):
    """VectorStore writing its temp files under tmp_path."""
    return VectorStore(openai_client, "vs_test", tmp_dir=str(tmp_path))


@pytest.fixture
def fake_trakt():
    return FakeTrakt()


@pytest.fixture
def trakt(fake_trakt):
    return fake_trakt.client()


@pytest.fixture
def memory(store, trakt):
    return MovieMemory(store, trakt)


@pytest.fixture
def tool_context(settings, memory):
    return ToolContext(settings=settings, memory=memory)


@pytest.fixture
def seed(openai_client):
    """Attach a file of records (dicts or raw lines) and return its id."""

    def _seed(*records):
        lines = [r if isinstance(r, str) else json.dumps(r) for r in records]
        return openai_client.add_file("\n".join(lines) + "\n")

    return _seed
