from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import TicketPriority, TicketStatus
from .model import Ticket


class TicketRepository(Protocol):
    def create(
        self,
        *,
        ticket_id: str,
        team_id: str,
        title: str,
        description: Optional[str],
        status: TicketStatus,
        priority: TicketPriority,
        link: Optional[str],
        created_by: str,
        assigned_to: Optional[str],
    ) -> None:
        raise NotImplementedError

    def get(self, ticket_id: str, team_id: str) -> Optional[Ticket]:
        raise NotImplementedError

    def list_for_team(
        self,
        team_id: str,
        *,
        status: Optional[TicketStatus] = None,
        open_only: bool = False,
        sort_recent: bool = False,
    ) -> Sequence[Ticket]:
        raise NotImplementedError

    def update(
        self,
        ticket_id: str,
        *,
        title: str,
        description: Optional[str],
        status: TicketStatus,
        priority: TicketPriority,
        link: Optional[str],
        assigned_to: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def delete(self, ticket_id: str) -> bool:
        raise NotImplementedError

    def count_open_assigned(self, user_id: str, *, team_id: Optional[str] = None) -> int:
        raise NotImplementedError
