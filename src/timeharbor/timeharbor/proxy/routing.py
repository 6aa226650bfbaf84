from __future__ import annotations

from dataclasses import dataclass

API_PREFIX = "/api"
SOCKET_IO_PREFIX = "/socket.io"

BACKEND = "backend"
FRONTEND = "frontend"


@dataclass(frozen=True)
class Route:
    upstream: str
    path: str

    @property
    def unreachable_message(self) -> str:
        return f"Bad Gateway: {self.upstream.capitalize()} not reachable"


def _has_prefix(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")


def resolve(path: str) -> Route:
    """Pick the upstream for ``path``.

    ``/api`` is stripped before reaching the backend (``/api`` alone becomes ``/``);
    ``/socket.io`` is forwarded to the backend unchanged; everything else is the frontend.
    """
    if _has_prefix(path, API_PREFIX):
        return Route(upstream=BACKEND, path=path[len(API_PREFIX):] or "/")
    if _has_prefix(path, SOCKET_IO_PREFIX):
        return Route(upstream=BACKEND, path=path)
    return Route(upstream=FRONTEND, path=path or "/")
