from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class DailyStat:
    """Worked milliseconds for one user/day; ``team_id`` None holds the user's total over all teams."""

    user_id: str
    team_id: Optional[str]
    date: date
    total_ms: int

    @property
    def hours(self) -> float:
        return round(self.total_ms / 3_600_000, 2)
