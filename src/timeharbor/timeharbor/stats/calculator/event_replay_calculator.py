from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Dict, MutableMapping, Optional, Sequence, Tuple

from ...core.enums import WorkLogType
from ...timelog.model import WorkLogEvent
from .base import WorkTimeCalculator

_ONE_MS = timedelta(milliseconds=1)


def accumulate_ms_by_day(totals: MutableMapping[date, int], start: datetime, end: datetime) -> None:
    """Add the interval [start, end) to ``totals``, split at local midnights."""
    current = start
    while current < end:
        next_midnight = datetime.combine(current.date() + timedelta(days=1), time.min)
        segment_end = min(next_midnight, end)
        day = current.date()
        totals[day] = totals.get(day, 0) + (segment_end - current) // _ONE_MS
        current = segment_end


def next_state(event_type: WorkLogType, clocked_in: bool, on_break: bool) -> Tuple[bool, bool]:
    """(clocked_in, on_break) after an event.

    Ticket events imply the user is working; a break pauses counting without clocking out.
    """
    if event_type == WorkLogType.CLOCK_OUT:
        return False, False
    if event_type in (WorkLogType.CLOCK_IN, WorkLogType.START_TICKET, WorkLogType.BREAK_END):
        return True, False
    if event_type == WorkLogType.STOP_TICKET:
        return True, on_break
    if event_type == WorkLogType.BREAK_START:
        return clocked_in, clocked_in
    return clocked_in, on_break


class EventReplayCalculator(WorkTimeCalculator):
    """Replay events in timestamp order and count time while clocked in and not on break.

    An interval still open after the last event counts up to ``now``.
    """

    def totals_by_day(
        self,
        events: Sequence[WorkLogEvent],
        *,
        now: datetime,
        since: Optional[datetime] = None,
    ) -> Dict[date, int]:
        totals: Dict[date, int] = {}
        clocked_in = False
        on_break = False
        segment_start: Optional[datetime] = None

        for event in sorted(events, key=lambda e: e.timestamp):
            if clocked_in and not on_break and segment_start is not None:
                self._add(totals, segment_start, event.timestamp, since=since, now=now)
            segment_start = event.timestamp
            clocked_in, on_break = next_state(event.type, clocked_in, on_break)

        if clocked_in and not on_break and segment_start is not None:
            self._add(totals, segment_start, now, since=since, now=now)
        return totals

    @staticmethod
    def _add(totals: Dict[date, int], start: datetime, end: datetime, *, since: Optional[datetime], now: datetime) -> None:
        if since is not None and start < since:
            start = since
        if end > now:
            end = now
        if end > start:
            accumulate_ms_by_day(totals, start, end)
