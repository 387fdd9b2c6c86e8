"""Tests for the service info and health endpoints."""

import pytest


def test_root_lists_endpoints(client):
    response = client.get("/")

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["vectorStoreId"]
    assert "POST /mark-seen" in body["endpoints"]
    assert "POST /agent/chat" in body["endpoints"]


def test_health_connected(client, openai_client):
    response = client.get("/health")

    assert response.json() == {
        "status": "healthy",
        "vector_store": "connected",
        "trakt": "configured",
    }
    assert openai_client.list_limits == [1]


def test_health_degraded(client, openai_client):
    openai_client.fail("list", 503, "unavailable")

    body = client.get("/health").json()

    assert body["status"] == "degraded"
    assert body["vector_store"].startswith("error:")


@pytest.mark.parametrize("trakt_configured", [False])
def test_health_without_trakt(client):
    assert client.get("/health").json()["trakt"] == "not_configured"


def test_cors_preflight(client):
    response = client.options(
        "/mark-seen",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "POST",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
