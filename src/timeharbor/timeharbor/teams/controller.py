from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_user, json_body, make_token_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    token_required = make_token_required(container.auth_service)
    teams = container.team_service

    @app.route("/teams", methods=["POST"], endpoint="create_team")
    @token_required
    def create_team():
        data = json_body()
        team = teams.create_team(
            current_user(),
            name=data.get("name", ""),
            code=data.get("code"),
            team_id=data.get("id"),
            created_at=data.get("createdAt"),
        )
        return jsonify(team.to_dict()), 201

    @app.route("/teams", methods=["GET"], endpoint="list_teams")
    @token_required
    def list_teams():
        return jsonify(teams.list_teams(current_user().id))

    @app.route("/teams/join", methods=["POST"], endpoint="join_team")
    @token_required
    def join_team():
        team = teams.join_team(current_user(), code=json_body().get("code", ""))
        return jsonify(team.to_dict())

    @app.route("/teams/<team_id>", methods=["PUT"], endpoint="update_team")
    @token_required
    def update_team(team_id: str):
        team = teams.update_team(current_user().id, team_id, name=json_body().get("name", ""))
        return jsonify(team.to_dict())

    @app.route("/teams/<team_id>", methods=["DELETE"], endpoint="delete_team")
    @token_required
    def delete_team(team_id: str):
        teams.delete_team(current_user().id, team_id)
        return jsonify({"message": "Team deleted successfully"})

    @app.route("/teams/<team_id>/members", methods=["POST"], endpoint="add_team_member")
    @token_required
    def add_member(team_id: str):
        member = teams.add_member_by_email(current_user().id, team_id, email=json_body().get("email", ""))
        return jsonify(member.to_dict()), 201

    @app.route("/teams/<team_id>/members/<user_id>", methods=["DELETE"], endpoint="remove_team_member")
    @token_required
    def remove_member(team_id: str, user_id: str):
        teams.remove_member(current_user().id, team_id, user_id)
        return jsonify({"message": "Member removed successfully"})

    @app.route("/teams/<team_id>/members/<user_id>/role", methods=["PUT"], endpoint="change_member_role")
    @token_required
    def change_role(team_id: str, user_id: str):
        member = teams.change_role(current_user().id, team_id, user_id, role=json_body().get("role", ""))
        return jsonify(member.to_dict())

    @app.route("/teams/<team_id>/qr", methods=["GET"], endpoint="team_qr_image")
    @token_required
    def team_qr(team_id: str):
        png = teams.join_qr_png(current_user().id, team_id)
        return app.response_class(png, mimetype="image/png")
