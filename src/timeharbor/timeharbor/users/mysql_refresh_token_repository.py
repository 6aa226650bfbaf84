from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import RefreshToken
from .repository import RefreshTokenRepository


class MySQLRefreshTokenRepository(RefreshTokenRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, user_id: str, token: str, expires_at: datetime) -> str:
        token_id = str(uuid.uuid4())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO refresh_tokens(id, user_id, token, expires_at, revoked)
                VALUES(%s,%s,%s,%s,0)
                """,
                (token_id, user_id, token, expires_at),
            )
        return token_id

    def get_by_token(self, token: str) -> Optional[RefreshToken]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, user_id, token, expires_at, revoked, created_at
                FROM refresh_tokens
                WHERE token=%s
                """,
                (token,),
            )
            row = fetchone(cur)
            if not row:
                return None
            return RefreshToken(
                id=row["id"],
                user_id=row["user_id"],
                token=row["token"],
                expires_at=row["expires_at"],
                revoked=bool(row.get("revoked", False)),
                created_at=row.get("created_at"),
            )

    def revoke(self, token: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE refresh_tokens SET revoked=1 WHERE token=%s AND revoked=0", (token,))
            return cur.rowcount > 0

    def revoke_all_for_user(self, user_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE refresh_tokens SET revoked=1 WHERE user_id=%s AND revoked=0", (user_id,))
            return int(cur.rowcount)

    def delete_expired(self, now: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM refresh_tokens WHERE expires_at < %s", (now,))
            return int(cur.rowcount)
