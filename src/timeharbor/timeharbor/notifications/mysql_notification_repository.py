from __future__ import annotations

import json
import uuid
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, load_json, placeholders
from .model import Notification
from .repository import NotificationRepository


def _row_to_notification(row: dict) -> Notification:
    return Notification(
        id=row["id"],
        user_id=row["user_id"],
        title=row["title"],
        body=row["body"],
        type=row.get("type") or "info",
        data=load_json(row.get("data")),
        read_at=row.get("read_at"),
        created_at=row.get("created_at"),
    )


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        user_id: str,
        title: str,
        body: str,
        type: str,
        data: Optional[Dict[str, Any]],
    ) -> Notification:
        notification_id = str(uuid.uuid4())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(id, user_id, title, body, type, data)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (notification_id, user_id, title, body, type, json.dumps(data) if data is not None else None),
            )
            cur.execute(
                "SELECT id, user_id, title, body, type, data, read_at, created_at FROM notifications WHERE id=%s",
                (notification_id,),
            )
            return _row_to_notification(fetchone(cur))

    def list_for_user(self, user_id: str, *, offset: int, limit: int) -> Sequence[Notification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, user_id, title, body, type, data, read_at, created_at
                FROM notifications
                WHERE user_id=%s
                ORDER BY created_at DESC, id DESC
                LIMIT %s OFFSET %s
                """,
                (user_id, int(limit), int(offset)),
            )
            return [_row_to_notification(r) for r in fetchall(cur)]

    def count_for_user(self, user_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS total FROM notifications WHERE user_id=%s", (user_id,))
            row = fetchone(cur)
            return int(row["total"]) if row else 0

    def get_for_user(self, notification_id: str, user_id: str) -> Optional[Notification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, user_id, title, body, type, data, read_at, created_at
                FROM notifications
                WHERE id=%s AND user_id=%s
                """,
                (notification_id, user_id),
            )
            row = fetchone(cur)
            return _row_to_notification(row) if row else None

    def mark_read(self, notification_id: str, user_id: str, *, read_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE notifications SET read_at=%s WHERE id=%s AND user_id=%s",
                (read_at, notification_id, user_id),
            )
            return cur.rowcount > 0

    def mark_all_read(self, user_id: str, *, read_at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE notifications SET read_at=%s WHERE user_id=%s AND read_at IS NULL",
                (read_at, user_id),
            )
            return int(cur.rowcount)

    def delete(self, notification_id: str, user_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM notifications WHERE id=%s AND user_id=%s", (notification_id, user_id))
            return cur.rowcount > 0

    def delete_many(self, notification_ids: Sequence[str], user_id: str) -> int:
        ids = list(notification_ids)
        if not ids:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"DELETE FROM notifications WHERE user_id=%s AND id IN ({placeholders(len(ids))})",
                (user_id, *ids),
            )
            return int(cur.rowcount)
