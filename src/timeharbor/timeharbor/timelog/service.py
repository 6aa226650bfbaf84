from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, List, Optional

from ..common.datetime_utils import now_local, parse_iso_datetime
from ..common.validators import parse_enum, require_non_empty
from ..core.constants import CLOCK_NOTIFY_WINDOW_MINUTES
from ..core.enums import WorkLogType
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..notifications.service import NotificationService
from ..stats.service import DailyStatsService
from ..teams.service import TeamService
from ..users.model import User
from .model import WorkLogEvent, WorkLogReply
from .repository import WorkLogReplyRepository, WorkLogRepository

logger = logging.getLogger(__name__)

_MAX_EVENT_ID_LENGTH = 36


class TimeSyncService:
    """Use cases: sync offline work-log events, read them back, reply to them."""

    def __init__(
        self,
        work_logs: WorkLogRepository,
        replies: WorkLogReplyRepository,
        teams: TeamService,
        daily_stats: DailyStatsService,
        notifications: NotificationService,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._work_logs = work_logs
        self._replies = replies
        self._teams = teams
        self._daily_stats = daily_stats
        self._notifications = notifications
        self._clock = clock

    # -------- Sync --------
    def _parse_event(self, user_id: str, raw: Any, index: int) -> WorkLogEvent:
        if not isinstance(raw, dict):
            raise ValidationError(f"Event {index} must be an object")

        event_id = require_non_empty(raw.get("id"), f"Event {index} id")
        if len(event_id) > _MAX_EVENT_ID_LENGTH:
            raise ValidationError(f"Event {index} id is too long")

        event_type = parse_enum(WorkLogType, raw.get("type"), f"type for event {event_id}")
        try:
            timestamp = parse_iso_datetime(raw.get("timestamp"))
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid timestamp for event {event_id}")

        return WorkLogEvent(
            id=event_id,
            user_id=user_id,
            type=event_type,
            timestamp=timestamp,
            team_id=raw.get("teamId") or None,
            ticket_id=raw.get("ticketId") or None,
            ticket_title=raw.get("ticketTitle") or None,
            comment=raw.get("comment") or None,
        )

    def sync_events(self, user: User, payload: Any) -> int:
        """Upsert the caller's events atomically; nothing is written when any event is invalid."""
        if not isinstance(payload, dict) or not isinstance(payload.get("events", []), list):
            raise ValidationError("Expected an object with an events array")

        events = [self._parse_event(user.id, raw, i) for i, raw in enumerate(payload.get("events", []))]
        if not events:
            return 0

        for team_id in {e.team_id for e in events if e.team_id}:
            self._teams.require_member(team_id, user.id)

        foreign = self._work_logs.upsert_owned(user.id, events)
        if foreign:
            raise ConflictError(f"Event ids already used by another user: {', '.join(foreign)}")
        synced = len(events)
        logger.info("Synced %d work-log events for user %s", synced, user.id)

        self._daily_stats.recompute_for_events(user.id, events)
        self._notify_clock_events(user, events)
        return synced

    def _notify_clock_events(self, user: User, events: List[WorkLogEvent]) -> None:
        cutoff = self._clock() - timedelta(minutes=CLOCK_NOTIFY_WINDOW_MINUTES)
        for event in events:
            if event.type not in (WorkLogType.CLOCK_IN, WorkLogType.CLOCK_OUT) or not event.team_id:
                continue
            if event.timestamp < cutoff:
                continue
            leaders = [uid for uid in self._teams.leader_ids(event.team_id) if uid != user.id]
            if not leaders:
                continue
            team = self._teams.get_team(event.team_id)
            self._notifications.clock_event(
                leader_ids=leaders,
                clocked_in=event.type == WorkLogType.CLOCK_IN,
                member_id=user.id,
                member_name=user.display_name,
                team_id=team.id,
                team_name=team.name,
            )

    # -------- Reads --------
    def list_events(
        self,
        *,
        viewer_id: str,
        user_id: Optional[str] = None,
        team_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[WorkLogEvent]:
        target = user_id or viewer_id
        if target != viewer_id:
            if not team_id:
                raise ValidationError("teamId is required to view another member's time")
            self._teams.require_member(team_id, viewer_id)
            if not self._teams.is_member(team_id, target):
                raise NotFoundError("Member not found")
        elif team_id:
            self._teams.require_member(team_id, viewer_id)

        return list(self._work_logs.list_events(target, team_id=team_id, start=start, end=end))

    # -------- Replies --------
    def _readable_log(self, user_id: str, work_log_id: str) -> WorkLogEvent:
        event = self._work_logs.get(work_log_id)
        if not event:
            raise NotFoundError("Work log not found")
        if event.user_id != user_id and not (event.team_id and self._teams.is_member(event.team_id, user_id)):
            raise AuthorizationError("You cannot access this work log")
        return event

    def list_replies(self, *, user_id: str, work_log_id: str) -> List[WorkLogReply]:
        self._readable_log(user_id, work_log_id)
        return list(self._replies.list_for_log(work_log_id))

    def add_reply(self, user: User, *, work_log_id: str, content: str) -> WorkLogReply:
        event = self._readable_log(user.id, work_log_id)
        content = require_non_empty(content, "Content")
        reply = self._replies.create(work_log_id=work_log_id, user_id=user.id, content=content)
        if event.user_id != user.id:
            self._notifications.worklog_reply(
                owner_id=event.user_id,
                author_name=user.display_name,
                work_log_id=work_log_id,
                content=content,
            )
        return reply
