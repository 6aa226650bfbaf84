from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_user, int_arg, json_payload, make_token_required
from ..container import Container
from ..core.constants import DEFAULT_ACTIVITY_LIMIT


def register(app: Flask, container: Container) -> None:
    token_required = make_token_required(container.auth_service)
    activities = container.activity_service

    @app.route("/teams/<team_id>/activity", methods=["GET"], endpoint="team_activity")
    @token_required
    def team_activity(team_id: str):
        items = activities.list_for_team(
            user_id=current_user().id,
            team_id=team_id,
            limit=int_arg("limit", DEFAULT_ACTIVITY_LIMIT, maximum=200),
        )
        return jsonify([a.to_dict() for a in items])

    @app.route("/teams/<team_id>/activity", methods=["POST"], endpoint="sync_team_activity")
    @token_required
    def sync_team_activity(team_id: str):
        synced = activities.sync(user_id=current_user().id, team_id=team_id, payload=json_payload())
        return jsonify({"success": True, "syncedIds": synced})
