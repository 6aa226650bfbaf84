from __future__ import annotations

from datetime import datetime
from typing import Optional

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_datetime
from ..common.http import current_user, json_body, json_payload, make_token_required
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    token_required = make_token_required(container.auth_service)
    time_sync = container.time_sync_service

    def _datetime_arg(name: str) -> Optional[datetime]:
        raw = request.args.get(name)
        if not raw:
            return None
        try:
            return parse_iso_datetime(raw)
        except ValueError:
            raise ValidationError(f"Invalid {name} timestamp")

    @app.route("/time/sync", methods=["POST"], endpoint="time_sync")
    @token_required
    def sync():
        synced = time_sync.sync_events(current_user(), json_payload())
        return jsonify({"message": "Time data synced successfully", "synced": synced})

    @app.route("/time/events", methods=["GET"], endpoint="time_events")
    @token_required
    def events():
        items = time_sync.list_events(
            viewer_id=current_user().id,
            user_id=request.args.get("userId") or None,
            team_id=request.args.get("teamId") or None,
            start=_datetime_arg("start"),
            end=_datetime_arg("end"),
        )
        return jsonify([e.to_dict() for e in items])

    @app.route("/worklogs/<work_log_id>/replies", methods=["GET"], endpoint="worklog_replies")
    @token_required
    def replies(work_log_id: str):
        items = time_sync.list_replies(user_id=current_user().id, work_log_id=work_log_id)
        return jsonify([r.to_dict() for r in items])

    @app.route("/worklogs/<work_log_id>/replies", methods=["POST"], endpoint="add_worklog_reply")
    @token_required
    def add_reply(work_log_id: str):
        reply = time_sync.add_reply(current_user(), work_log_id=work_log_id, content=json_body().get("content", ""))
        return jsonify(reply.to_dict()), 201
