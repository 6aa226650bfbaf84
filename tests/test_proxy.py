from __future__ import annotations

import httpx
import pytest
from werkzeug.test import Client

from src.timeharbor.timeharbor.proxy.gateway import ProxyGateway
from src.timeharbor.timeharbor.proxy.routing import BACKEND, FRONTEND, resolve


@pytest.mark.parametrize(
    "path, upstream, forwarded",
    [
        ("/api", BACKEND, "/"),
        ("/api/", BACKEND, "/"),
        ("/api/teams/1", BACKEND, "/teams/1"),
        ("/socket.io/", BACKEND, "/socket.io/"),
        ("/apiary", FRONTEND, "/apiary"),
        ("/", FRONTEND, "/"),
        ("/dashboard/member", FRONTEND, "/dashboard/member"),
    ],
)
def test_resolve(path, upstream, forwarded):
    route = resolve(path)

    assert (route.upstream, route.path) == (upstream, forwarded)


def _gateway(handler):
    return ProxyGateway(
        frontend_url="http://frontend:3000",
        backend_url="http://backend:3001/",
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


def test_api_requests_reach_backend_without_prefix():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, json={"ok": True}, headers={"X-Upstream": "backend"})

    client = Client(_gateway(handler))
    resp = client.post(
        "/api/teams?expand=1",
        json={"name": "Core"},
        headers={"Authorization": "Bearer abc", "Proxy-Authorization": "Basic eHk="},
    )

    assert resp.status_code == 201
    assert resp.get_json() == {"ok": True}
    assert resp.headers["X-Upstream"] == "backend"

    forwarded = seen[0]
    assert str(forwarded.url) == "http://backend:3001/teams?expand=1"
    assert forwarded.method == "POST"
    assert forwarded.headers["Authorization"] == "Bearer abc"
    assert forwarded.headers["X-Forwarded-Host"] == "localhost"
    assert forwarded.content == b'{"name": "Core"}'
    assert "proxy-authorization" not in forwarded.headers


def test_other_paths_reach_frontend():
    seen = []

    def handler(request):
        seen.append(str(request.url))
        return httpx.Response(200, text="<html></html>", headers={"Content-Type": "text/html"})

    resp = Client(_gateway(handler)).get("/dashboard")

    assert resp.status_code == 200
    assert resp.get_data(as_text=True) == "<html></html>"
    assert seen == ["http://frontend:3000/dashboard"]


@pytest.mark.parametrize(
    "path, message",
    [
        ("/api/teams", "Bad Gateway: Backend not reachable"),
        ("/", "Bad Gateway: Frontend not reachable"),
    ],
)
def test_unreachable_upstream_returns_502(path, message):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    resp = Client(_gateway(handler)).get(path)

    assert resp.status_code == 502
    assert resp.mimetype == "text/plain"
    assert resp.get_data(as_text=True) == message


def test_hop_by_hop_headers_are_dropped_both_ways():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            text="ok",
            headers={"Keep-Alive": "timeout=5", "Proxy-Authenticate": "Basic", "Trailers": "X-Sum", "X-Upstream": "backend"},
        )

    resp = Client(_gateway(handler)).get(
        "/api/teams",
        headers={"Keep-Alive": "timeout=5", "TE": "trailers", "Upgrade": "h2c", "X-Request-Id": "r-1"},
    )

    forwarded = seen[0].headers
    for name in ("keep-alive", "te", "upgrade"):
        assert name not in forwarded
    assert forwarded["X-Request-Id"] == "r-1"
    assert forwarded["X-Forwarded-For"] == "127.0.0.1"
    assert forwarded["X-Forwarded-Proto"] == "http"

    for name in ("Keep-Alive", "Proxy-Authenticate", "Trailers"):
        assert name not in resp.headers
    assert resp.headers["X-Upstream"] == "backend"
