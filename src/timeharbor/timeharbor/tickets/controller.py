from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_user, json_body, make_token_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    token_required = make_token_required(container.auth_service)
    tickets = container.ticket_service

    @app.route("/teams/<team_id>/tickets", methods=["POST"], endpoint="create_ticket")
    @token_required
    def create_ticket(team_id: str):
        ticket = tickets.create_ticket(user_id=current_user().id, team_id=team_id, data=json_body())
        return jsonify(ticket.to_dict()), 201

    @app.route("/teams/<team_id>/tickets", methods=["GET"], endpoint="list_tickets")
    @token_required
    def list_tickets(team_id: str):
        items = tickets.list_tickets(
            user_id=current_user().id,
            team_id=team_id,
            status=request.args.get("status") or None,
            sort=request.args.get("sort") or None,
        )
        return jsonify([t.to_dict() for t in items])

    @app.route("/teams/<team_id>/tickets/<ticket_id>", methods=["PUT"], endpoint="update_ticket")
    @token_required
    def update_ticket(team_id: str, ticket_id: str):
        ticket = tickets.update_ticket(user_id=current_user().id, team_id=team_id, ticket_id=ticket_id, data=json_body())
        return jsonify(ticket.to_dict())

    @app.route("/teams/<team_id>/tickets/<ticket_id>", methods=["DELETE"], endpoint="delete_ticket")
    @token_required
    def delete_ticket(team_id: str, ticket_id: str):
        tickets.delete_ticket(user_id=current_user().id, team_id=team_id, ticket_id=ticket_id)
        return jsonify({"message": "Ticket deleted successfully"})
