from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

from ..core.enums import WorkLogType
from ..timelog.model import WorkLogEvent

_TICKET_EVENTS = (WorkLogType.START_TICKET, WorkLogType.STOP_TICKET)


@dataclass
class WorkSession:
    """Events between one CLOCK_IN and the matching CLOCK_OUT (or still open)."""

    id: str
    start: datetime
    end: Optional[datetime] = None
    events: List[WorkLogEvent] = field(default_factory=list)

    @property
    def is_active(self) -> bool:
        return self.end is None

    def ticket_titles(self, *, team_id: Optional[str] = None) -> List[str]:
        titles: list[str] = []
        for e in self.events:
            if e.type not in _TICKET_EVENTS or not e.ticket_title:
                continue
            if team_id and e.team_id != team_id:
                continue
            if e.ticket_title not in titles:
                titles.append(e.ticket_title)
        return titles

    def has_ticket_events(self) -> bool:
        return any(e.type in _TICKET_EVENTS for e in self.events)


def build_sessions(events: Sequence[WorkLogEvent]) -> List[WorkSession]:
    """Group events into sessions in chronological order.

    A CLOCK_IN while a session is open closes the open one at that instant.
    Events outside any session are ignored.
    """
    sessions: list[WorkSession] = []
    current: Optional[WorkSession] = None

    for event in sorted(events, key=lambda e: e.timestamp):
        if event.type == WorkLogType.CLOCK_IN:
            if current is not None:
                current.end = event.timestamp
            current = WorkSession(id=event.id, start=event.timestamp, events=[event])
            sessions.append(current)
            continue

        if current is None:
            continue

        current.events.append(event)
        if event.type == WorkLogType.CLOCK_OUT:
            current.end = event.timestamp
            current = None

    return sessions
