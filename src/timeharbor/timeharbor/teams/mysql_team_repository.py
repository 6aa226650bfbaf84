from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import MemberRole, UserStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Member, MemberProfile, Team
from .repository import TeamRepository


def _row_to_team(row: dict) -> Team:
    return Team(
        id=row["id"],
        name=row["name"],
        code=row["code"],
        created_by=row["user_id"],
        created_at=row.get("created_at"),
    )


class MySQLTeamRepository(TeamRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_team(
        self,
        *,
        team_id: str,
        name: str,
        code: str,
        created_by: str,
        created_at: Optional[datetime] = None,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO teams(id, name, code, user_id, created_at)
                VALUES(%s,%s,%s,%s,COALESCE(%s, CURRENT_TIMESTAMP))
                """,
                (team_id, name, code, created_by, created_at),
            )

    def get_by_id(self, team_id: str) -> Optional[Team]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name, code, user_id, created_at FROM teams WHERE id=%s", (team_id,))
            row = fetchone(cur)
            return _row_to_team(row) if row else None

    def get_by_code(self, code: str) -> Optional[Team]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name, code, user_id, created_at FROM teams WHERE code=%s", (code,))
            row = fetchone(cur)
            return _row_to_team(row) if row else None

    def list_for_user(self, user_id: str) -> Sequence[Team]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT t.id, t.name, t.code, t.user_id, t.created_at
                FROM teams t
                JOIN members m ON m.team_id = t.id
                WHERE m.user_id=%s
                ORDER BY m.joined_at ASC
                """,
                (user_id,),
            )
            return [_row_to_team(r) for r in fetchall(cur)]

    def update_name(self, team_id: str, name: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE teams SET name=%s WHERE id=%s", (name, team_id))
            return cur.rowcount > 0

    def delete(self, team_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM teams WHERE id=%s", (team_id,))
            return cur.rowcount > 0

    def add_member(self, *, team_id: str, user_id: str, role: MemberRole) -> Member:
        member_id = str(uuid.uuid4())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO members(id, user_id, team_id, role) VALUES(%s,%s,%s,%s)",
                (member_id, user_id, team_id, role.value),
            )
        return self.get_member(team_id, user_id)

    def get_member(self, team_id: str, user_id: str) -> Optional[Member]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, user_id, team_id, role, joined_at FROM members WHERE team_id=%s AND user_id=%s",
                (team_id, user_id),
            )
            row = fetchone(cur)
            if not row:
                return None
            return Member(
                id=row["id"],
                user_id=row["user_id"],
                team_id=row["team_id"],
                role=MemberRole(row["role"]),
                joined_at=row.get("joined_at"),
            )

    def list_members(self, team_id: str) -> Sequence[MemberProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT m.user_id, m.team_id, m.role, m.joined_at, u.full_name, u.email, u.status
                FROM members m
                JOIN users u ON u.id = m.user_id
                WHERE m.team_id=%s
                ORDER BY m.joined_at ASC
                """,
                (team_id,),
            )
            return [
                MemberProfile(
                    user_id=r["user_id"],
                    team_id=r["team_id"],
                    full_name=r.get("full_name"),
                    email=r["email"],
                    status=UserStatus(r.get("status") or UserStatus.OFFLINE.value),
                    role=MemberRole(r["role"]),
                    joined_at=r.get("joined_at"),
                )
                for r in fetchall(cur)
            ]

    def remove_member(self, team_id: str, user_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM members WHERE team_id=%s AND user_id=%s", (team_id, user_id))
            return cur.rowcount > 0

    def set_member_role(self, team_id: str, user_id: str, role: MemberRole) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE members SET role=%s WHERE team_id=%s AND user_id=%s",
                (role.value, team_id, user_id),
            )
            return cur.rowcount > 0

    def count_members(self, team_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS total FROM members WHERE team_id=%s", (team_id,))
            row = fetchone(cur)
            return int(row["total"]) if row else 0
