from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Protocol, Sequence, Tuple

from .model import WorkLogEvent, WorkLogReply


class WorkLogRepository(Protocol):
    def upsert_owned(self, user_id: str, events: Sequence[WorkLogEvent]) -> List[str]:
        """Insert or update ``user_id``'s events in one transaction.

        Returns the ids already owned by another user; when there are any nothing is written.
        """
        raise NotImplementedError

    def get(self, event_id: str) -> Optional[WorkLogEvent]:
        raise NotImplementedError

    def list_events(
        self,
        user_id: str,
        *,
        team_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[WorkLogEvent]:
        raise NotImplementedError

    def first_timestamp(self, user_id: str, *, team_id: Optional[str] = None) -> Optional[datetime]:
        raise NotImplementedError

    def user_team_pairs(self) -> Sequence[Tuple[str, Optional[str]]]:
        raise NotImplementedError


class WorkLogReplyRepository(Protocol):
    def create(self, *, work_log_id: str, user_id: str, content: str) -> WorkLogReply:
        raise NotImplementedError

    def list_for_log(self, work_log_id: str) -> Sequence[WorkLogReply]:
        raise NotImplementedError
