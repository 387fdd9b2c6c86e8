"""Pytest configuration and fixtures."""

import os

import pytest

# Unit tests never talk to OpenAI or Trakt; app.main reads settings at import
os.environ.setdefault("OPENAI_API_KEY", "sk-test-only")
os.environ.setdefault("VECTOR_STORE_ID", "vs_test")

from app.dependencies import Services, get_services  # noqa: E402
from app.main import app  # noqa: E402
from app.rate_limit import limiter  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from cinemem.agent import MovieAgent  # noqa: E402
from cinemem.config import Settings  # noqa: E402
from cinemem.mcp.context import ToolContext  # noqa: E402
from cinemem.memory import MovieMemory  # noqa: E402
from cinemem.storage import VectorStore  # noqa: E402
from cinemem.testing import FakeOpenAI, FakeTrakt  # noqa: E402


@pytest.fixture
def openai_client():
    return FakeOpenAI()


@pytest.fixture
def fake_trakt():
    return FakeTrakt()


@pytest.fixture
def trakt_configured():
    """Override in a test module (or parametrize) to run without Trakt."""
    return True


@pytest.fixture
def services(openai_client, fake_trakt, trakt_configured, tmp_path):
    """Services wired to in-memory fakes."""
    settings = Settings(
        _env_file=None,
        openai_api_key="sk-test-only",
        vector_store_id="vs_test",
        trakt_client_id="test-client-id" if trakt_configured else None,
        trakt_access_token="test-access-token" if trakt_configured else None,
    )
    store = VectorStore(openai_client, settings.vector_store_id, tmp_dir=str(tmp_path))
    memory = MovieMemory(store, fake_trakt.client(configured=trakt_configured))
    tools = ToolContext(settings=settings, memory=memory)
    agent = MovieAgent(openai_client, tools, model="test-model", max_turns=3)
    return Services(settings=settings, tools=tools, agent=agent)


@pytest.fixture
def client(services):
    """Create a test client with services overridden."""
    app.dependency_overrides[get_services] = lambda: services
    limiter.reset()
    yield TestClient(app)
    app.dependency_overrides.clear()
