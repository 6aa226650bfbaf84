from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_user, int_arg, json_body, make_token_required
from ..container import Container
from ..core.constants import DEFAULT_NOTIFICATION_PAGE_SIZE


def register(app: Flask, container: Container) -> None:
    token_required = make_token_required(container.auth_service)
    service = container.notification_service

    @app.route("/notifications", methods=["GET"], endpoint="list_notifications")
    @token_required
    def list_notifications():
        page = service.list_page(
            current_user().id,
            page=int_arg("page", 1),
            limit=int_arg("limit", DEFAULT_NOTIFICATION_PAGE_SIZE, maximum=100),
        )
        return jsonify(page.to_dict())

    @app.route("/notifications/read-all", methods=["PATCH"], endpoint="read_all_notifications")
    @token_required
    def read_all():
        count = service.mark_all_read(current_user().id)
        return jsonify({"message": "All notifications marked as read", "count": count})

    @app.route("/notifications/<notification_id>/read", methods=["PATCH"], endpoint="read_notification")
    @token_required
    def read_one(notification_id: str):
        notification = service.mark_read(current_user().id, notification_id)
        return jsonify(notification.to_dict())

    @app.route("/notifications/<notification_id>", methods=["DELETE"], endpoint="delete_notification")
    @token_required
    def delete_one(notification_id: str):
        service.delete(current_user().id, notification_id)
        return jsonify({"message": "Notification deleted"})

    @app.route("/notifications", methods=["DELETE"], endpoint="delete_notifications")
    @token_required
    def delete_many():
        count = service.delete_many(current_user().id, json_body().get("ids"))
        return jsonify({"count": count})
