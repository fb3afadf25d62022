"""
Tests for the caching proxy API.
"""

import dataclasses
import json

import httpx
import pytest
from fastapi.testclient import TestClient

from caching_proxy.api.app import create_app


class Origin:
    """Fake origin server behind an httpx.MockTransport."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes = {
            "/x": httpx.Response(200, json={"a": 1}),
            "/text": httpx.Response(200, text="plain"),
            "/a/b": httpx.Response(200, json={"b": 2}),
            "/missing": httpx.Response(404, json={"message": "not found"}),
        }

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.routes.get(request.url.path)
        if response is None:
            return httpx.Response(500)
        return httpx.Response(response.status_code, content=response.content, headers=response.headers)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def origin():
    return Origin()


@pytest.fixture
def client(app_settings, origin):
    """Create a test client with the lifespan running."""
    app = create_app(app_settings, transport=origin.transport)
    with TestClient(app) as test_client:
        yield test_client


def test_miss_then_hit(client, origin):
    """End-to-end: first request forwards, second is served from cache."""
    first = client.get("/x")
    second = client.get("/x")

    assert first.status_code == 200
    assert first.json() == {"a": 1}
    assert first.headers["X-Cache"] == "MISS"
    assert second.json() == {"a": 1}
    assert second.headers["X-Cache"] == "HIT"
    assert len(origin.requests) == 1


def test_query_string_is_part_of_target(client, origin):
    client.get("/x?page=1")
    client.get("/x?page=2")

    assert [str(r.url) for r in origin.requests] == [
        "https://api.example.com/x?page=1",
        "https://api.example.com/x?page=2",
    ]


def test_percent_encoded_target_is_forwarded_verbatim(client, origin):
    """Escaped slashes and question marks reach the origin undecoded."""
    client.get("/files/a%2Fb")
    client.get("/q%3Fx=1")

    assert [r.url.raw_path for r in origin.requests] == [b"/files/a%2Fb", b"/q%3Fx=1"]


def test_encoded_and_plain_slash_are_cached_separately(client, origin):
    encoded = client.get("/a%2Fb")
    plain = client.get("/a/b")

    assert encoded.headers["X-Cache"] == "MISS"
    assert plain.headers["X-Cache"] == "MISS"
    assert [r.url.raw_path for r in origin.requests] == [b"/a%2Fb", b"/a/b"]


def test_different_headers_are_cached_separately(client, origin):
    client.get("/x", headers={"x-client": "one"})
    response = client.get("/x", headers={"x-client": "two"})

    assert response.headers["X-Cache"] == "MISS"
    assert len(origin.requests) == 2


def test_conditional_headers_not_forwarded(client, origin):
    client.get("/x", headers={"if-none-match": '"abc"', "if-modified-since": "Wed, 21 Oct 2015 07:28:00 GMT"})

    sent = origin.requests[0]
    assert "if-none-match" not in sent.headers
    assert "if-modified-since" not in sent.headers
    assert sent.headers["host"] == "api.example.com"


def test_text_payload(client):
    response = client.get("/text")
    assert response.status_code == 200
    assert response.json() == "plain"


def test_upstream_error_status_is_propagated(client):
    response = client.get("/missing")

    assert response.status_code == 404
    assert response.json()["error"] == "Proxy request failed"
    assert "404" in response.json()["details"]
    assert "X-Cache" not in response.headers


def test_upstream_unreachable_is_500(app_settings):
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    app = create_app(app_settings, transport=httpx.MockTransport(refuse))
    with TestClient(app) as client:
        response = client.get("/x")

    assert response.status_code == 500
    assert "connection refused" in response.json()["details"]


def test_post_is_forwarded(client, origin):
    response = client.post("/x")

    assert response.status_code == 200
    assert origin.requests[0].method == "POST"


def test_health(client):
    """Test health check endpoint."""
    response = client.get("/__proxy/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "cache_healthy": True}


def test_stats(client):
    client.get("/x")
    client.get("/x")

    response = client.get("/__proxy/stats")
    assert response.status_code == 200
    data = response.json()
    assert data["total_entries"] == 1
    assert data["ttl_seconds"] == 60
    assert data["origin"] == "https://api.example.com"
    assert data["metrics"]["cache_hits"] == 1
    assert data["metrics"]["cache_misses"] == 1


def test_clear_cache(client, origin, cache_file):
    client.get("/x")
    assert cache_file.exists()

    response = client.delete("/__proxy/cache")
    assert response.status_code == 200
    assert response.json()["success"] is True
    assert response.json()["deleted_count"] == 1
    assert not cache_file.exists()

    assert client.get("/x").headers["X-Cache"] == "MISS"
    assert len(origin.requests) == 2


def test_clear_empty_cache(client):
    first = client.delete("/__proxy/cache")
    second = client.delete("/__proxy/cache")

    assert first.status_code == second.status_code == 200
    assert second.json()["deleted_count"] == 0


def test_delete_single_entry(client, origin, cache_file):
    client.get("/x")
    client.get("/text")
    snapshot = json.loads(cache_file.read_text())
    key = next(k for k, v in snapshot.items() if v == {"a": 1})

    response = client.delete(f"/__proxy/cache/{key}")
    assert response.status_code == 200
    assert response.json() == {"success": True, "key": key, "message": "Entry deleted"}
    assert key not in json.loads(cache_file.read_text())

    assert client.get("/x").headers["X-Cache"] == "MISS"
    assert client.get("/text").headers["X-Cache"] == "HIT"
    assert len(origin.requests) == 3


def test_delete_unknown_entry_is_404(client):
    response = client.delete("/__proxy/cache/" + "0" * 32)
    assert response.status_code == 404


def test_cache_survives_restart(app_settings, origin, cache_file):
    with TestClient(create_app(app_settings, transport=origin.transport)) as client:
        assert client.get("/x").headers["X-Cache"] == "MISS"

    assert cache_file.exists()

    with TestClient(create_app(app_settings, transport=origin.transport)) as client:
        response = client.get("/x")

    assert response.headers["X-Cache"] == "HIT"
    assert response.json() == {"a": 1}
    assert len(origin.requests) == 1


def test_corrupt_snapshot_does_not_block_startup(app_settings, origin, cache_file):
    cache_file.write_text("{{{ definitely not json")

    with TestClient(create_app(app_settings, transport=origin.transport)) as client:
        response = client.get("/x")

    assert response.status_code == 200
    assert response.headers["X-Cache"] == "MISS"
    assert json.loads(cache_file.read_text()) != {}


def test_missing_origin_fails_startup(app_settings):
    app = create_app(dataclasses.replace(app_settings, origin=None))

    with pytest.raises(RuntimeError):
        with TestClient(app):
            pass
