from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from ..common.datetime_utils import now_local
from ..timelog.model import WorkLogEvent
from ..timelog.repository import WorkLogRepository
from .calculator.base import WorkTimeCalculator
from .calculator.event_replay_calculator import EventReplayCalculator
from .model import DailyStat
from .repository import DailyStatRepository

logger = logging.getLogger(__name__)


class DailyStatsService:
    """Keeps ``user_daily_stats`` in line with the work-log events."""

    def __init__(
        self,
        work_logs: WorkLogRepository,
        daily_stats: DailyStatRepository,
        *,
        calculator: Optional[WorkTimeCalculator] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._work_logs = work_logs
        self._daily_stats = daily_stats
        self._calculator = calculator or EventReplayCalculator()
        self._clock = clock

    def recompute(self, user_id: str, team_id: Optional[str], *, since: Optional[date] = None) -> Dict[date, int]:
        """Replay the pair's events and rewrite its rows from ``since`` (default: first event)."""
        first = self._work_logs.first_timestamp(user_id, team_id=team_id)
        if first is None:
            return {}

        since_day = since or first.date()
        events = self._work_logs.list_events(user_id, team_id=team_id)
        totals = self._calculator.totals_by_day(
            events,
            now=self._clock(),
            since=datetime.combine(since_day, time.min),
        )
        self._daily_stats.replace_from(user_id, team_id, since_day, totals)
        return totals

    def recompute_for_events(self, user_id: str, events: Iterable[WorkLogEvent]) -> None:
        events = list(events)
        if not events:
            return
        since = min(e.timestamp for e in events).date()
        team_ids: List[Optional[str]] = [None]
        for e in events:
            if e.team_id and e.team_id not in team_ids:
                team_ids.append(e.team_id)
        for team_id in team_ids:
            self.recompute(user_id, team_id, since=since)

    def backfill_all(self) -> int:
        pairs = set(self._work_logs.user_team_pairs())
        # The all-teams row for every user.
        pairs.update((user_id, None) for user_id, _ in list(pairs))
        for user_id, team_id in sorted(pairs, key=lambda p: (p[0], p[1] or "")):
            totals = self.recompute(user_id, team_id)
            logger.info("userId=%s teamId=%s -> %d days", user_id, team_id or "null", len(totals))
        return len(pairs)

    def list_daily(self, user_id: str, *, team_id: Optional[str], start: date, end: date) -> Sequence[DailyStat]:
        return self._daily_stats.list_range(user_id, team_id=team_id, start=start, end=end)
