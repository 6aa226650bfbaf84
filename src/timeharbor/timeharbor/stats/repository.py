from __future__ import annotations

from datetime import date
from typing import Mapping, Optional, Protocol, Sequence

from .model import DailyStat


class DailyStatRepository(Protocol):
    def replace_from(self, user_id: str, team_id: Optional[str], since: date, totals: Mapping[date, int]) -> int:
        """Replace the rows dated ``since`` or later for one (user, team) pair."""
        raise NotImplementedError

    def list_range(self, user_id: str, *, team_id: Optional[str], start: date, end: date) -> Sequence[DailyStat]:
        raise NotImplementedError
