from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_iso
from ..core.enums import TicketPriority, TicketStatus


@dataclass(frozen=True)
class TicketPerson:
    id: str
    full_name: Optional[str]
    email: str

    def to_dict(self) -> dict:
        return {"id": self.id, "full_name": self.full_name, "email": self.email}


@dataclass(frozen=True)
class Ticket:
    id: str
    team_id: str
    title: str
    created_by: str
    status: TicketStatus = TicketStatus.OPEN
    priority: TicketPriority = TicketPriority.MEDIUM
    description: Optional[str] = None
    link: Optional[str] = None
    assigned_to: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    creator: Optional[TicketPerson] = None
    assignee: Optional[TicketPerson] = None
    last_activity_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "teamId": self.team_id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "priority": self.priority.value,
            "link": self.link,
            "createdBy": self.created_by,
            "assignedTo": self.assigned_to,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
            "lastActivityAt": to_iso(self.last_activity_at),
            "creator": self.creator.to_dict() if self.creator else None,
            "assignee": self.assignee.to_dict() if self.assignee else None,
        }
