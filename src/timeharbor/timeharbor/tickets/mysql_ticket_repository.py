from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import TicketPriority, TicketStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Ticket, TicketPerson
from .repository import TicketRepository

_SELECT_TICKETS = """
    SELECT t.id, t.team_id, t.title, t.description, t.status, t.priority, t.link,
           t.created_by, t.assigned_to, t.created_at, t.updated_at,
           c.full_name AS creator_name, c.email AS creator_email,
           a.full_name AS assignee_name, a.email AS assignee_email,
           (SELECT MAX(w.timestamp) FROM work_logs w WHERE w.ticket_id = t.id) AS last_activity_at
    FROM tickets t
    JOIN users c ON c.id = t.created_by
    LEFT JOIN users a ON a.id = t.assigned_to
"""


def _row_to_ticket(row: dict) -> Ticket:
    assignee = None
    if row.get("assigned_to") and row.get("assignee_email"):
        assignee = TicketPerson(id=row["assigned_to"], full_name=row.get("assignee_name"), email=row["assignee_email"])
    return Ticket(
        id=row["id"],
        team_id=row["team_id"],
        title=row["title"],
        created_by=row["created_by"],
        status=TicketStatus(row["status"]),
        priority=TicketPriority(row["priority"]),
        description=row.get("description"),
        link=row.get("link"),
        assigned_to=row.get("assigned_to"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
        creator=TicketPerson(id=row["created_by"], full_name=row.get("creator_name"), email=row["creator_email"]),
        assignee=assignee,
        last_activity_at=row.get("last_activity_at"),
    )


class MySQLTicketRepository(TicketRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        ticket_id: str,
        team_id: str,
        title: str,
        description: Optional[str],
        status: TicketStatus,
        priority: TicketPriority,
        link: Optional[str],
        created_by: str,
        assigned_to: Optional[str],
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO tickets(id, team_id, title, description, status, priority, link, created_by, assigned_to)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    ticket_id,
                    team_id,
                    title,
                    description,
                    status.value,
                    priority.value,
                    link,
                    created_by,
                    assigned_to,
                ),
            )

    def get(self, ticket_id: str, team_id: str) -> Optional[Ticket]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_TICKETS + " WHERE t.id=%s AND t.team_id=%s", (ticket_id, team_id))
            row = fetchone(cur)
            return _row_to_ticket(row) if row else None

    def list_for_team(
        self,
        team_id: str,
        *,
        status: Optional[TicketStatus] = None,
        open_only: bool = False,
        sort_recent: bool = False,
    ) -> Sequence[Ticket]:
        where = ["t.team_id=%s"]
        params: list = [team_id]
        if open_only:
            where.append("t.status <> %s")
            params.append(TicketStatus.CLOSED.value)
        elif status is not None:
            where.append("t.status=%s")
            params.append(status.value)

        if sort_recent:
            order = "ORDER BY last_activity_at IS NULL, last_activity_at DESC, t.created_at DESC"
        else:
            order = "ORDER BY t.created_at DESC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT_TICKETS} WHERE {' AND '.join(where)} {order}", tuple(params))
            return [_row_to_ticket(r) for r in fetchall(cur)]

    def update(
        self,
        ticket_id: str,
        *,
        title: str,
        description: Optional[str],
        status: TicketStatus,
        priority: TicketPriority,
        link: Optional[str],
        assigned_to: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE tickets
                SET title=%s, description=%s, status=%s, priority=%s, link=%s, assigned_to=%s
                WHERE id=%s
                """,
                (title, description, status.value, priority.value, link, assigned_to, ticket_id),
            )
            return cur.rowcount > 0

    def delete(self, ticket_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM tickets WHERE id=%s", (ticket_id,))
            return cur.rowcount > 0

    def count_open_assigned(self, user_id: str, *, team_id: Optional[str] = None) -> int:
        sql = "SELECT COUNT(*) AS total FROM tickets WHERE assigned_to=%s AND status <> %s"
        params: list = [user_id, TicketStatus.CLOSED.value]
        if team_id:
            sql += " AND team_id=%s"
            params.append(team_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            row = fetchone(cur)
            return int(row["total"]) if row else 0
