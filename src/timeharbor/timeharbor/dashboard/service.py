from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional

from ..common.datetime_utils import format_hms, format_hours_minutes, now_local, start_of_day, start_of_week, to_iso
from ..core.constants import DASHBOARD_ACTIVITY_DAYS, DASHBOARD_LOOKBACK_DAYS, DASHBOARD_SESSION_LIMIT
from ..core.exceptions import ValidationError
from ..stats.calculator.base import WorkTimeCalculator
from ..stats.calculator.event_replay_calculator import EventReplayCalculator
from ..stats.service import DailyStatsService
from ..stats.sessions import WorkSession, build_sessions
from ..teams.service import TeamService
from ..tickets.service import TicketService
from ..timelog.repository import WorkLogRepository


@dataclass(frozen=True)
class TimesheetData:
    rows: list[dict]
    total_hours: str


class DashboardService:
    def __init__(
        self,
        work_logs: WorkLogRepository,
        tickets: TicketService,
        teams: TeamService,
        daily_stats: DailyStatsService,
        *,
        calculator: Optional[WorkTimeCalculator] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._work_logs = work_logs
        self._tickets = tickets
        self._teams = teams
        self._daily_stats = daily_stats
        self._calculator = calculator or EventReplayCalculator()
        self._clock = clock

    def stats(self, user_id: str, *, team_id: Optional[str] = None) -> dict:
        now = self._clock()
        today = start_of_day(now)
        week = start_of_week(now)

        if team_id:
            self._teams.require_member(team_id, user_id)

        events = self._work_logs.list_events(user_id, start=week - timedelta(days=DASHBOARD_LOOKBACK_DAYS))
        today_ms = self._calculator.total_ms(events, now=now, since=today)
        week_ms = self._calculator.total_ms(events, now=now, since=week)

        return {
            "totalHoursToday": format_hours_minutes(today_ms),
            "totalHoursWeek": format_hours_minutes(week_ms),
            "openTickets": self._tickets.count_open_assigned(user_id, team_id=team_id),
            "teamMembers": self._teams.count_members(team_id) if team_id else 0,
        }

    def _session_to_activity(self, session: WorkSession, *, team_id: Optional[str], now: datetime) -> dict:
        titles = session.ticket_titles(team_id=team_id)
        if titles:
            subtitle = f"Worked on: {', '.join(titles)}"
        elif team_id and session.has_ticket_events():
            subtitle = "Worked on tasks for other teams"
        else:
            subtitle = "No recorded tasks"

        duration_ms = self._calculator.total_ms(session.events, now=session.end or now)
        return {
            "id": session.id,
            "type": "SESSION",
            "title": "Work Session",
            "subtitle": subtitle,
            "startTime": to_iso(session.start),
            "endTime": to_iso(session.end),
            "status": "Active" if session.is_active else "Completed",
            "duration": format_hms(duration_ms),
        }

    def recent_activity(self, user_id: str, *, team_id: Optional[str] = None) -> List[dict]:
        now = self._clock()
        if team_id:
            self._teams.require_member(team_id, user_id)

        events = self._work_logs.list_events(user_id, start=now - timedelta(days=DASHBOARD_ACTIVITY_DAYS))
        sessions = build_sessions(events)
        recent = list(reversed(sessions))[:DASHBOARD_SESSION_LIMIT]
        return [self._session_to_activity(s, team_id=team_id, now=now) for s in recent]

    def timesheet(self, user_id: str, *, start: date, end: date, team_id: Optional[str] = None) -> TimesheetData:
        if end < start:
            raise ValidationError("end must be on or after start")
        if team_id:
            self._teams.require_member(team_id, user_id)

        stats = self._daily_stats.list_daily(user_id, team_id=team_id, start=start, end=end)
        rows = [
            {
                "date": s.date.strftime("%Y-%m-%d"),
                "team_id": s.team_id or "",
                "hours": f"{s.hours:.2f}",
                "duration": format_hms(s.total_ms),
            }
            for s in stats
        ]
        total_ms = sum(s.total_ms for s in stats)
        return TimesheetData(rows=rows, total_hours=format_hours_minutes(total_ms))
