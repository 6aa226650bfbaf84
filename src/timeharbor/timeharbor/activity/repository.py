from __future__ import annotations

from typing import Protocol, Sequence

from .model import ActivityLog


class ActivityLogRepository(Protocol):
    def list_for_team(self, team_id: str, *, limit: int) -> Sequence[ActivityLog]:
        raise NotImplementedError

    def upsert(self, activity: ActivityLog) -> None:
        raise NotImplementedError
