from __future__ import annotations

import uuid
from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import WorkLogReply
from .repository import WorkLogReplyRepository

_SELECT_REPLIES = """
    SELECT r.id, r.work_log_id, r.user_id, r.content, r.created_at,
           COALESCE(u.full_name, u.email) AS author_name
    FROM work_log_replies r
    JOIN users u ON u.id = r.user_id
"""


def _row_to_reply(row: dict) -> WorkLogReply:
    return WorkLogReply(
        id=row["id"],
        work_log_id=row["work_log_id"],
        user_id=row["user_id"],
        content=row["content"],
        created_at=row.get("created_at"),
        author_name=row.get("author_name"),
    )


class MySQLWorkLogReplyRepository(WorkLogReplyRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, work_log_id: str, user_id: str, content: str) -> WorkLogReply:
        reply_id = str(uuid.uuid4())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO work_log_replies(id, work_log_id, user_id, content) VALUES(%s,%s,%s,%s)",
                (reply_id, work_log_id, user_id, content),
            )
            cur.execute(_SELECT_REPLIES + " WHERE r.id=%s", (reply_id,))
            return _row_to_reply(fetchone(cur))

    def list_for_log(self, work_log_id: str) -> Sequence[WorkLogReply]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_REPLIES + " WHERE r.work_log_id=%s ORDER BY r.created_at ASC", (work_log_id,))
            return [_row_to_reply(r) for r in fetchall(cur)]
