from __future__ import annotations

import httpx
import pytest

from mcp_mermaid.server.transports import SSETransport, StreamableHTTPTransport
from mcp_mermaid.server.transports._asgi import cors_headers
from tests.helpers import make_context


@pytest.fixture(params=[SSETransport, StreamableHTTPTransport], ids=["sse", "streamable"])
def app(request):
    transport = request.param(make_context())
    return transport.build_app()


def _client(app) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver")


@pytest.mark.anyio
async def test_health_and_ping(app):
    async with _client(app) as client:
        health = await client.get("/health")
        ping = await client.get("/ping")

    assert health.status_code == 200
    assert health.text == "OK"
    assert health.headers["content-type"].startswith("text/plain")
    assert ping.status_code == 200
    assert ping.text == "pong"


@pytest.mark.anyio
async def test_cors_reflects_origin(app):
    async with _client(app) as client:
        response = await client.get("/health", headers={"Origin": "https://inspector.example:6274/some/path"})

    assert response.headers["access-control-allow-origin"] == "https://inspector.example:6274"
    assert response.headers["access-control-allow-credentials"] == "true"
    assert response.headers["access-control-allow-methods"] == "GET, POST, OPTIONS"
    assert response.headers["access-control-allow-headers"] == "*"


@pytest.mark.anyio
async def test_preflight_short_circuits(app):
    async with _client(app) as client:
        response = await client.options("/anything", headers={"Origin": "http://localhost:5173"})

    assert response.status_code == 204
    assert response.content == b""
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"


@pytest.mark.anyio
async def test_unparseable_origin_gets_no_cors_headers(app):
    async with _client(app) as client:
        response = await client.get("/ping", headers={"Origin": "not a url"})

    assert response.status_code == 200
    assert "access-control-allow-origin" not in response.headers


@pytest.mark.anyio
async def test_unknown_path_is_404(app):
    async with _client(app) as client:
        response = await client.get("/nope")

    assert response.status_code == 404


def test_cors_headers_without_origin():
    assert cors_headers(None) == {}
    assert cors_headers("") == {}
