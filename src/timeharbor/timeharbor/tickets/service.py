from __future__ import annotations

import logging
import uuid
from typing import List, Optional

from ..common.validators import parse_enum, require_non_empty
from ..core.enums import TicketPriority, TicketStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..notifications.service import NotificationService
from ..teams.service import TeamService
from .model import Ticket
from .repository import TicketRepository

logger = logging.getLogger(__name__)

_DETAIL_FIELDS = ("title", "description", "priority", "link", "assignedTo")


class TicketService:
    """Use cases: tickets inside one team.

    Business rules:
    - Only team members can see or change tickets.
    - Only the creator can edit details, assign, or delete; others may change the status.
    """

    def __init__(self, tickets: TicketRepository, teams: TeamService, notifications: NotificationService):
        self._tickets = tickets
        self._teams = teams
        self._notifications = notifications

    def _require_assignee_member(self, team_id: str, assignee_id: Optional[str]) -> None:
        if assignee_id and not self._teams.is_member(team_id, assignee_id):
            raise ValidationError("Assignee is not a member of this team")

    def _get(self, team_id: str, ticket_id: str) -> Ticket:
        ticket = self._tickets.get(ticket_id, team_id)
        if not ticket:
            raise NotFoundError("Ticket not found")
        return ticket

    def create_ticket(self, *, user_id: str, team_id: str, data: dict) -> Ticket:
        self._teams.require_member(team_id, user_id)

        title = require_non_empty(data.get("title"), "Title")
        status = parse_enum(TicketStatus, data.get("status") or TicketStatus.OPEN.value, "status")
        priority = parse_enum(TicketPriority, data.get("priority") or TicketPriority.MEDIUM.value, "priority")
        assignee_id = data.get("assignedTo") or None
        self._require_assignee_member(team_id, assignee_id)

        ticket_id = data.get("id") or str(uuid.uuid4())
        self._tickets.create(
            ticket_id=ticket_id,
            team_id=team_id,
            title=title,
            description=data.get("description"),
            status=status,
            priority=priority,
            link=data.get("link"),
            created_by=user_id,
            assigned_to=assignee_id,
        )

        if assignee_id and assignee_id != user_id:
            self._notifications.ticket_assigned(
                assignee_id=assignee_id, ticket_id=ticket_id, ticket_title=title, team_id=team_id
            )
        return self._get(team_id, ticket_id)

    def list_tickets(
        self,
        *,
        user_id: str,
        team_id: str,
        status: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> List[Ticket]:
        self._teams.require_member(team_id, user_id)

        open_only = status == "open"
        status_filter = None
        if status and not open_only:
            status_filter = parse_enum(TicketStatus, status, "status")

        return list(
            self._tickets.list_for_team(
                team_id,
                status=status_filter,
                open_only=open_only,
                sort_recent=sort == "recent",
            )
        )

    def update_ticket(self, *, user_id: str, team_id: str, ticket_id: str, data: dict) -> Ticket:
        self._teams.require_member(team_id, user_id)
        ticket = self._get(team_id, ticket_id)
        is_creator = ticket.created_by == user_id

        if not is_creator and any(data.get(f) for f in _DETAIL_FIELDS):
            raise AuthorizationError(
                "Only the creator can edit ticket details or assign members. You can only update status."
            )

        new_assignee = ticket.assigned_to
        if is_creator and "assignedTo" in data:
            new_assignee = data.get("assignedTo") or None
            if new_assignee != ticket.assigned_to:
                self._require_assignee_member(team_id, new_assignee)

        status = ticket.status
        if data.get("status"):
            status = parse_enum(TicketStatus, data["status"], "status")

        title = ticket.title
        description = ticket.description
        priority = ticket.priority
        link = ticket.link
        if is_creator:
            if data.get("title"):
                title = require_non_empty(data["title"], "Title")
            if "description" in data:
                description = data.get("description")
            if data.get("priority"):
                priority = parse_enum(TicketPriority, data["priority"], "priority")
            if "link" in data:
                link = data.get("link")

        self._tickets.update(
            ticket.id,
            title=title,
            description=description,
            status=status,
            priority=priority,
            link=link,
            assigned_to=new_assignee,
        )

        if new_assignee and new_assignee != ticket.assigned_to and new_assignee != user_id:
            self._notifications.ticket_assigned(
                assignee_id=new_assignee, ticket_id=ticket.id, ticket_title=title, team_id=team_id
            )
        if status != ticket.status and ticket.created_by != user_id:
            self._notifications.ticket_status_changed(
                user_id=ticket.created_by,
                ticket_id=ticket.id,
                ticket_title=title,
                status=status.value,
                team_id=team_id,
            )
        return self._get(team_id, ticket.id)

    def delete_ticket(self, *, user_id: str, team_id: str, ticket_id: str) -> None:
        self._teams.require_member(team_id, user_id)
        ticket = self._get(team_id, ticket_id)
        if ticket.created_by != user_id:
            raise AuthorizationError("Only the creator can delete this ticket")
        self._tickets.delete(ticket.id)
        logger.info("Ticket %s deleted by %s", ticket.id, user_id)

    def count_open_assigned(self, user_id: str, *, team_id: Optional[str] = None) -> int:
        return self._tickets.count_open_assigned(user_id, team_id=team_id)
