"""Serve the reverse proxy in front of the frontend and the API."""

from __future__ import annotations

import logging

from werkzeug.serving import run_simple

from _bootstrap import load_settings

from src.timeharbor.timeharbor.proxy.gateway import ProxyGateway

logger = logging.getLogger("timeharbor.proxy")


def main() -> None:
    settings = load_settings()
    gateway = ProxyGateway(frontend_url=settings.PROXY_FRONTEND_URL, backend_url=settings.PROXY_BACKEND_URL)

    port = int(settings.PROXY_PORT)
    logger.info("Proxy listening on port %d", port)
    logger.info("Routing /api -> %s", settings.PROXY_BACKEND_URL)
    logger.info("Routing /* -> %s", settings.PROXY_FRONTEND_URL)
    run_simple("0.0.0.0", port, gateway, threaded=True)


if __name__ == "__main__":
    main()
