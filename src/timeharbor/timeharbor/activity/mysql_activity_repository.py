from __future__ import annotations

import uuid
from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import ActivityLog
from .repository import ActivityLogRepository


class MySQLActivityLogRepository(ActivityLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_team(self, team_id: str, *, limit: int) -> Sequence[ActivityLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT activity_id, team_id, user_id, type, title, subtitle, description,
                       status, start_time, end_time, duration, link
                FROM activity_logs
                WHERE team_id=%s
                ORDER BY start_time DESC
                LIMIT %s
                """,
                (team_id, int(limit)),
            )
            return [
                ActivityLog(
                    activity_id=r["activity_id"],
                    team_id=r["team_id"],
                    user_id=r.get("user_id"),
                    type=r.get("type") or "LOG",
                    title=r["title"],
                    subtitle=r.get("subtitle"),
                    description=r.get("description"),
                    status=r.get("status") or "Completed",
                    start_time=r["start_time"],
                    end_time=r.get("end_time"),
                    duration=r.get("duration"),
                    link=r.get("link"),
                )
                for r in fetchall(cur)
            ]

    def upsert(self, activity: ActivityLog) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO activity_logs(
                    id, activity_id, team_id, user_id, type, title, subtitle, description,
                    status, start_time, end_time, duration, link
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    team_id=VALUES(team_id), type=VALUES(type), title=VALUES(title),
                    subtitle=VALUES(subtitle), description=VALUES(description), status=VALUES(status),
                    start_time=VALUES(start_time), end_time=VALUES(end_time),
                    duration=VALUES(duration), link=VALUES(link)
                """,
                (
                    str(uuid.uuid4()),
                    activity.activity_id,
                    activity.team_id,
                    activity.user_id,
                    activity.type,
                    activity.title,
                    activity.subtitle,
                    activity.description,
                    activity.status,
                    activity.start_time,
                    activity.end_time,
                    activity.duration,
                    activity.link,
                ),
            )
