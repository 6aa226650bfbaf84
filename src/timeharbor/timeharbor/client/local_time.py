from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

from ..core.enums import WorkLogType
from .offline_store import LocalEvent, OfflineStore


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LocalTimeStore:
    """Records clock and ticket events locally until they can be synced."""

    def __init__(self, store: OfflineStore, *, user_id: str, clock: Callable[[], datetime] = _utc_now):
        self._store = store
        self._user_id = user_id
        self._clock = clock

    def record(
        self,
        event_type,
        *,
        team_id: Optional[str] = None,
        ticket_id: Optional[str] = None,
        ticket_title: Optional[str] = None,
        comment: Optional[str] = None,
    ) -> LocalEvent:
        event = LocalEvent(
            id=str(uuid.uuid4()),
            user_id=self._user_id,
            type=WorkLogType(event_type).value,
            timestamp=self._clock().isoformat(timespec="milliseconds"),
            ticket_id=ticket_id,
            team_id=team_id,
            ticket_title=ticket_title,
            comment=comment,
        )
        self._store.add_event(event)
        return event

    def pending(self) -> list[LocalEvent]:
        return self._store.list_events(user_id=self._user_id, unsynced_only=True)

    def has_pending(self) -> bool:
        return bool(self.pending())
