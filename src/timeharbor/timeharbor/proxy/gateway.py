from __future__ import annotations

import logging
from typing import Iterable, Optional

import httpx
from werkzeug.wrappers import Request, Response

from .routing import BACKEND, FRONTEND, resolve

logger = logging.getLogger(__name__)

# RFC 7230 hop-by-hop headers are never forwarded.
HOP_BY_HOP_HEADERS = {
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailers",
    "transfer-encoding",
    "upgrade",
}


def _forwardable(headers: Iterable[tuple[str, str]], *, drop: Iterable[str] = ()) -> list[tuple[str, str]]:
    skip = HOP_BY_HOP_HEADERS | {h.lower() for h in drop}
    return [(k, v) for k, v in headers if k.lower() not in skip]


class ProxyGateway:
    """WSGI reverse proxy in front of the API backend and the static frontend."""

    def __init__(
        self,
        *,
        frontend_url: str,
        backend_url: str,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._targets = {
            BACKEND: backend_url.rstrip("/"),
            FRONTEND: frontend_url.rstrip("/"),
        }
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=False)

    def _upstream_request(self, request: Request, base_url: str, path: str) -> httpx.Request:
        url = f"{base_url}{path}"
        query = request.environ.get("QUERY_STRING", "")
        if query:
            url = f"{url}?{query}"

        headers = _forwardable(request.headers.items(), drop=("host", "content-length"))
        headers.append(("X-Forwarded-For", request.remote_addr or ""))
        headers.append(("X-Forwarded-Host", request.host))
        headers.append(("X-Forwarded-Proto", request.scheme))
        return self._client.build_request(request.method, url, headers=headers, content=request.get_data())

    def __call__(self, environ, start_response):
        request = Request(environ)
        logger.info("%s %s", request.method, request.full_path.rstrip("?"))

        route = resolve(request.path)
        try:
            upstream = self._client.send(
                self._upstream_request(request, self._targets[route.upstream], route.path),
                stream=True,
            )
        except httpx.TransportError as e:
            logger.error("%s proxy error: %s", route.upstream.capitalize(), e)
            response = Response(route.unreachable_message, status=502, mimetype="text/plain")
            return response(environ, start_response)

        # The body is relayed decoded, so the upstream encoding and length no longer apply.
        response = Response(
            upstream.iter_bytes(),
            status=upstream.status_code,
            headers=_forwardable(upstream.headers.multi_items(), drop=("content-encoding", "content-length")),
        )
        response.call_on_close(upstream.close)
        return response(environ, start_response)
