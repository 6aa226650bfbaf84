from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Dict, Optional, Sequence

from ...timelog.model import WorkLogEvent


class WorkTimeCalculator(ABC):
    """Calculator interface (Strategy Pattern for worked time)."""

    @abstractmethod
    def totals_by_day(
        self,
        events: Sequence[WorkLogEvent],
        *,
        now: datetime,
        since: Optional[datetime] = None,
    ) -> Dict[date, int]:
        """Milliseconds worked per local day, counting only time at or after ``since``."""
        raise NotImplementedError

    def total_ms(self, events: Sequence[WorkLogEvent], *, now: datetime, since: Optional[datetime] = None) -> int:
        return sum(self.totals_by_day(events, now=now, since=since).values())
