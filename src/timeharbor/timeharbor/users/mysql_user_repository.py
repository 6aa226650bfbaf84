from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import DevicePlatform, UserStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, placeholders
from .model import User
from .repository import UserRepository

_USER_COLUMNS = """
    id, email, password_hash, full_name, status, email_verified,
    reset_token, reset_token_expiry, fcm_token, fcm_platform, fcm_updated_at, created_at
"""


def _row_to_user(row: dict) -> User:
    return User(
        id=row["id"],
        email=row["email"],
        password_hash=row["password_hash"],
        full_name=row.get("full_name"),
        status=UserStatus(row.get("status") or UserStatus.OFFLINE.value),
        email_verified=bool(row.get("email_verified", False)),
        reset_token=row.get("reset_token"),
        reset_token_expiry=row.get("reset_token_expiry"),
        fcm_token=row.get("fcm_token"),
        fcm_platform=DevicePlatform(row["fcm_platform"]) if row.get("fcm_platform") else None,
        fcm_updated_at=row.get("fcm_updated_at"),
        created_at=row.get("created_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, value) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE {where}=%s", (value,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self._get_one("id", user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return self._get_one("email", email)

    def get_by_reset_token(self, token: str) -> Optional[User]:
        return self._get_one("reset_token", token)

    def list_by_ids(self, user_ids: Sequence[str]) -> Sequence[User]:
        ids = list(dict.fromkeys(user_ids))
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE id IN ({placeholders(len(ids))})",
                tuple(ids),
            )
            return [_row_to_user(r) for r in fetchall(cur)]

    def create_user(self, *, user_id: str, email: str, password_hash: str, full_name: Optional[str]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(id, email, password_hash, full_name, email_verified, status)
                VALUES(%s,%s,%s,%s,0,'offline')
                """,
                (user_id, email, password_hash, full_name),
            )

    def update_profile(
        self,
        user_id: str,
        *,
        full_name: Optional[str] = None,
        password_hash: Optional[str] = None,
    ) -> bool:
        sets: list[str] = []
        params: list = []
        if full_name is not None:
            sets.append("full_name=%s")
            params.append(full_name)
        if password_hash is not None:
            sets.append("password_hash=%s")
            params.append(password_hash)
        if not sets:
            return False
        params.append(user_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE users SET {', '.join(sets)} WHERE id=%s", tuple(params))
            return cur.rowcount > 0

    def set_status(self, user_id: str, status: UserStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET status=%s WHERE id=%s", (status.value, user_id))
            return cur.rowcount > 0

    def set_reset_token(self, user_id: str, *, token: Optional[str], expires_at: Optional[datetime]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET reset_token=%s, reset_token_expiry=%s WHERE id=%s",
                (token, expires_at, user_id),
            )
            return cur.rowcount > 0

    def set_device_token(
        self,
        user_id: str,
        *,
        fcm_token: Optional[str],
        platform: Optional[DevicePlatform],
        updated_at: Optional[datetime],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET fcm_token=%s, fcm_platform=%s, fcm_updated_at=%s WHERE id=%s",
                (fcm_token, platform.value if platform else None, updated_at, user_id),
            )
            return cur.rowcount > 0
