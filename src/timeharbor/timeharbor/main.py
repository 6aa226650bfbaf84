from __future__ import annotations

import importlib
import logging
import time
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, g, request

from config import get_settings_module

from .common.errors import register_error_handlers
from .common.logging_setup import setup_logging
from .core.constants import SLOW_REQUEST_MS
from .database.migrations import apply_migrations, list_tables

from .container import Container, build_container
from .activity.controller import register as register_activity
from .dashboard.controller import register as register_dashboard
from .notifications.controller import register as register_notifications
from .teams.controller import register as register_teams
from .tickets.controller import register as register_tickets
from .timelog.controller import register as register_timelog
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parents[3] / "database" / "migrations"


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if container is None:
        if bool(getattr(settings, "AUTO_MIGRATE", False)):
            applied = apply_migrations(db_config, migrations_dir=MIGRATIONS_DIR)
            logger.info("schema ready (applied=%s, tables=%d)", applied, len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            secret_key=app.secret_key,
            access_token_minutes=getattr(settings, "ACCESS_TOKEN_MINUTES"),
            refresh_token_days=getattr(settings, "REFRESH_TOKEN_DAYS"),
            reset_token_minutes=getattr(settings, "RESET_TOKEN_MINUTES"),
            fcm_project_id=getattr(settings, "FCM_PROJECT_ID", ""),
            fcm_access_token=getattr(settings, "FCM_ACCESS_TOKEN", ""),
        )

    app.extensions["timeharbor"] = container

    @app.before_request
    def _start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def _log_slow_request(response):
        started = g.get("request_started")
        if started is not None:
            elapsed_ms = (time.perf_counter() - started) * 1000
            if elapsed_ms > SLOW_REQUEST_MS:
                logger.warning(
                    "Slow request: %s %s took %.0fms (status %s)",
                    request.method,
                    request.path,
                    elapsed_ms,
                    response.status_code,
                )
        return response

    @app.route("/", methods=["GET"], endpoint="health")
    def health():
        return "Timeharbor API is running", 200, {"Content-Type": "text/plain; charset=utf-8"}

    register_error_handlers(app)

    register_users(app, container)
    register_teams(app, container)
    register_tickets(app, container)
    register_activity(app, container)
    register_timelog(app, container)
    register_dashboard(app, container)
    register_notifications(app, container)

    return app
