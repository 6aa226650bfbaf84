from __future__ import annotations

import logging

from flask import Flask, jsonify, request
from mysql.connector.errors import IntegrityError
from werkzeug.exceptions import HTTPException

from ..core.exceptions import DomainError
from ..database.mysql_base import is_duplicate_key

logger = logging.getLogger(__name__)


def register_error_handlers(app: Flask) -> None:
    """Translate exceptions into ``{"error": ...}`` JSON responses."""

    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        return jsonify({"error": str(e)}), e.status_code

    @app.errorhandler(404)
    def handle_not_found(e):
        return jsonify({"error": "Route not found", "path": request.path}), 404

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(e: IntegrityError):
        if is_duplicate_key(e):
            return jsonify({"error": "Resource already exists"}), 409
        logger.warning("Integrity error on %s %s: %s", request.method, request.path, e)
        return jsonify({"error": "Invalid reference"}), 400

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        return jsonify({"error": e.description or e.name}), e.code or 500

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        body = {"error": "Internal server error"}
        if app.config.get("DEBUG", False):
            body["details"] = str(e)
        return jsonify(body), 500
