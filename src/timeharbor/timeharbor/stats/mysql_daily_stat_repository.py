from __future__ import annotations

import uuid
from datetime import date
from typing import Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import DailyStat
from .repository import DailyStatRepository


def _team_clause(team_id: Optional[str]) -> tuple[str, tuple]:
    # team_id is nullable, and NULL never equals NULL in SQL.
    if team_id is None:
        return "team_id IS NULL", ()
    return "team_id=%s", (team_id,)


class MySQLDailyStatRepository(DailyStatRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def replace_from(self, user_id: str, team_id: Optional[str], since: date, totals: Mapping[date, int]) -> int:
        team_sql, team_params = _team_clause(team_id)
        rows = [(d, ms) for d, ms in sorted(totals.items()) if d >= since]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"DELETE FROM user_daily_stats WHERE user_id=%s AND {team_sql} AND date >= %s",
                (user_id, *team_params, since),
            )
            for day, total_ms in rows:
                cur.execute(
                    "INSERT INTO user_daily_stats(id, user_id, team_id, date, total_ms) VALUES(%s,%s,%s,%s,%s)",
                    (str(uuid.uuid4()), user_id, team_id, day, int(total_ms)),
                )
        return len(rows)

    def list_range(self, user_id: str, *, team_id: Optional[str], start: date, end: date) -> Sequence[DailyStat]:
        team_sql, team_params = _team_clause(team_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT user_id, team_id, date, total_ms
                FROM user_daily_stats
                WHERE user_id=%s AND {team_sql} AND date BETWEEN %s AND %s
                ORDER BY date ASC
                """,
                (user_id, *team_params, start, end),
            )
            return [
                DailyStat(
                    user_id=r["user_id"],
                    team_id=r.get("team_id"),
                    date=r["date"],
                    total_ms=int(r["total_ms"]),
                )
                for r in fetchall(cur)
            ]
