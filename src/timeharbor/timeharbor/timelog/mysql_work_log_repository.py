from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from ..core.enums import WorkLogType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, placeholders
from .model import WorkLogEvent
from .repository import WorkLogRepository

_EVENT_COLUMNS = "id, user_id, type, timestamp, team_id, ticket_id, ticket_title, comment"


def _row_to_event(row: dict) -> WorkLogEvent:
    return WorkLogEvent(
        id=row["id"],
        user_id=row["user_id"],
        type=WorkLogType(row["type"]),
        timestamp=row["timestamp"],
        team_id=row.get("team_id"),
        ticket_id=row.get("ticket_id"),
        ticket_title=row.get("ticket_title"),
        comment=row.get("comment"),
    )


class MySQLWorkLogRepository(WorkLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert_owned(self, user_id: str, events: Sequence[WorkLogEvent]) -> List[str]:
        ids = list(dict.fromkeys(e.id for e in events))
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            # Row locks keep the ownership check valid until the upsert commits.
            cur.execute(
                f"SELECT id, user_id FROM work_logs WHERE id IN ({placeholders(len(ids))}) FOR UPDATE",
                tuple(ids),
            )
            foreign = sorted(r["id"] for r in fetchall(cur) if r["user_id"] != user_id)
            if foreign:
                return foreign
            for e in events:
                cur.execute(
                    f"""
                    INSERT INTO work_logs({_EVENT_COLUMNS})
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                    ON DUPLICATE KEY UPDATE
                        type=VALUES(type), timestamp=VALUES(timestamp), team_id=VALUES(team_id),
                        ticket_id=VALUES(ticket_id), ticket_title=VALUES(ticket_title), comment=VALUES(comment)
                    """,
                    (
                        e.id,
                        e.user_id,
                        e.type.value,
                        e.timestamp,
                        e.team_id,
                        e.ticket_id,
                        e.ticket_title,
                        e.comment,
                    ),
                )
        return []

    def get(self, event_id: str) -> Optional[WorkLogEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_EVENT_COLUMNS} FROM work_logs WHERE id=%s", (event_id,))
            row = fetchone(cur)
            return _row_to_event(row) if row else None

    def list_events(
        self,
        user_id: str,
        *,
        team_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[WorkLogEvent]:
        where = ["user_id=%s"]
        params: list = [user_id]
        if team_id:
            where.append("team_id=%s")
            params.append(team_id)
        if start:
            where.append("timestamp >= %s")
            params.append(start)
        if end:
            where.append("timestamp < %s")
            params.append(end)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_EVENT_COLUMNS} FROM work_logs WHERE {' AND '.join(where)} ORDER BY timestamp ASC, id ASC",
                tuple(params),
            )
            return [_row_to_event(r) for r in fetchall(cur)]

    def first_timestamp(self, user_id: str, *, team_id: Optional[str] = None) -> Optional[datetime]:
        sql = "SELECT MIN(timestamp) AS first_ts FROM work_logs WHERE user_id=%s"
        params: list = [user_id]
        if team_id:
            sql += " AND team_id=%s"
            params.append(team_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            row = fetchone(cur)
            return row.get("first_ts") if row else None

    def user_team_pairs(self) -> Sequence[Tuple[str, Optional[str]]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT DISTINCT user_id, team_id FROM work_logs")
            return [(r["user_id"], r.get("team_id")) for r in fetchall(cur)]
