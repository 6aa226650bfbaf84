from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_iso
from ..core.enums import WorkLogType


@dataclass(frozen=True)
class WorkLogEvent:
    """One clock/ticket/break event recorded by a client."""

    id: str
    user_id: str
    type: WorkLogType
    timestamp: datetime
    team_id: Optional[str] = None
    ticket_id: Optional[str] = None
    ticket_title: Optional[str] = None
    comment: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "type": self.type.value,
            "timestamp": to_iso(self.timestamp),
            "teamId": self.team_id,
            "ticketId": self.ticket_id,
            "ticketTitle": self.ticket_title,
            "comment": self.comment,
        }


@dataclass(frozen=True)
class WorkLogReply:
    id: str
    work_log_id: str
    user_id: str
    content: str
    created_at: Optional[datetime] = None
    author_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "workLogId": self.work_log_id,
            "userId": self.user_id,
            "authorName": self.author_name,
            "content": self.content,
            "createdAt": to_iso(self.created_at),
        }
