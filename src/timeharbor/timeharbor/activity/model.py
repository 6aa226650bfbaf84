from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_iso


@dataclass(frozen=True)
class ActivityLog:
    """A client-generated feed entry; ``activity_id`` is the id the client chose."""

    activity_id: str
    team_id: str
    title: str
    start_time: datetime
    type: str = "LOG"
    user_id: Optional[str] = None
    subtitle: Optional[str] = None
    description: Optional[str] = None
    status: str = "Completed"
    end_time: Optional[datetime] = None
    duration: Optional[str] = None
    link: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.activity_id,
            "teamId": self.team_id,
            "userId": self.user_id,
            "type": self.type,
            "title": self.title,
            "subtitle": self.subtitle,
            "description": self.description,
            "status": self.status,
            "startTime": to_iso(self.start_time),
            "endTime": to_iso(self.end_time),
            "duration": self.duration,
            "link": self.link,
        }
