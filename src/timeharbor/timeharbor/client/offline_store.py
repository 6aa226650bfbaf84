"""Local SQLite cache used by the client while offline."""

from __future__ import annotations

import json
import sqlite3
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, List, Optional, Sequence, Union

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS offline_mutations(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        url TEXT NOT NULL,
        method TEXT NOT NULL,
        body TEXT,
        timestamp INTEGER NOT NULL,
        retry_count INTEGER NOT NULL DEFAULT 0,
        temp_id TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS events(
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        type TEXT NOT NULL,
        timestamp TEXT NOT NULL,
        ticket_id TEXT,
        team_id TEXT,
        ticket_title TEXT,
        comment TEXT,
        synced INTEGER NOT NULL DEFAULT 0
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_events_synced ON events(synced, timestamp)",
    """
    CREATE TABLE IF NOT EXISTS cache(
        key TEXT PRIMARY KEY,
        data TEXT NOT NULL,
        updated_at INTEGER NOT NULL
    )
    """,
)

MUTATION_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


@dataclass(frozen=True)
class OfflineMutation:
    id: int
    url: str
    method: str
    body: Any
    timestamp: int
    retry_count: int
    temp_id: Optional[str]


@dataclass(frozen=True)
class LocalEvent:
    id: str
    user_id: str
    type: str
    timestamp: str
    ticket_id: Optional[str] = None
    team_id: Optional[str] = None
    ticket_title: Optional[str] = None
    comment: Optional[str] = None
    synced: bool = False

    def to_sync_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "timestamp": self.timestamp,
            "ticketId": self.ticket_id,
            "teamId": self.team_id,
            "ticketTitle": self.ticket_title,
            "comment": self.comment,
        }


def _now_ms() -> int:
    return int(time.time() * 1000)


class OfflineStore:
    def __init__(self, path: Union[str, Path]):
        self._path = str(path)
        with self._cursor() as cur:
            for stmt in _SCHEMA:
                cur.execute(stmt)

    @contextmanager
    def _cursor(self) -> Iterator[sqlite3.Cursor]:
        conn = sqlite3.connect(self._path)
        conn.row_factory = sqlite3.Row
        try:
            cur = conn.cursor()
            yield cur
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    # mutations

    def add_mutation(self, url: str, method: str, body: Any = None, *, temp_id: Optional[str] = None) -> int:
        method = method.upper()
        if method not in MUTATION_METHODS:
            raise ValueError(f"Unsupported mutation method: {method}")
        with self._cursor() as cur:
            cur.execute(
                "INSERT INTO offline_mutations(url, method, body, timestamp, retry_count, temp_id) VALUES(?,?,?,?,0,?)",
                (url, method, json.dumps(body), _now_ms(), temp_id),
            )
            return int(cur.lastrowid)

    def list_mutations(self) -> List[OfflineMutation]:
        with self._cursor() as cur:
            cur.execute("SELECT * FROM offline_mutations ORDER BY id")
            rows = cur.fetchall()
        return [
            OfflineMutation(
                id=r["id"],
                url=r["url"],
                method=r["method"],
                body=json.loads(r["body"]) if r["body"] is not None else None,
                timestamp=r["timestamp"],
                retry_count=r["retry_count"],
                temp_id=r["temp_id"],
            )
            for r in rows
        ]

    def delete_mutation(self, mutation_id: int) -> None:
        with self._cursor() as cur:
            cur.execute("DELETE FROM offline_mutations WHERE id=?", (mutation_id,))

    def increment_retry(self, mutation_id: int) -> None:
        with self._cursor() as cur:
            cur.execute("UPDATE offline_mutations SET retry_count = retry_count + 1 WHERE id=?", (mutation_id,))

    def clear_mutations(self) -> None:
        with self._cursor() as cur:
            cur.execute("DELETE FROM offline_mutations")

    # events

    def add_event(self, event: LocalEvent) -> None:
        with self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO events(id, user_id, type, timestamp, ticket_id, team_id, ticket_title, comment, synced)
                VALUES(?,?,?,?,?,?,?,?,?)
                """,
                (
                    event.id,
                    event.user_id,
                    event.type,
                    event.timestamp,
                    event.ticket_id,
                    event.team_id,
                    event.ticket_title,
                    event.comment,
                    1 if event.synced else 0,
                ),
            )

    def list_events(self, *, user_id: Optional[str] = None, unsynced_only: bool = False) -> List[LocalEvent]:
        sql = "SELECT * FROM events WHERE 1=1"
        params: list = []
        if user_id:
            sql += " AND user_id=?"
            params.append(user_id)
        if unsynced_only:
            sql += " AND synced=0"
        # Same-millisecond events keep the order they were recorded in.
        sql += " ORDER BY timestamp, rowid"
        with self._cursor() as cur:
            cur.execute(sql, params)
            rows = cur.fetchall()
        return [
            LocalEvent(
                id=r["id"],
                user_id=r["user_id"],
                type=r["type"],
                timestamp=r["timestamp"],
                ticket_id=r["ticket_id"],
                team_id=r["team_id"],
                ticket_title=r["ticket_title"],
                comment=r["comment"],
                synced=bool(r["synced"]),
            )
            for r in rows
        ]

    def mark_events_synced(self, event_ids: Sequence[str]) -> None:
        if not event_ids:
            return
        marks = ",".join(["?"] * len(event_ids))
        with self._cursor() as cur:
            cur.execute(f"UPDATE events SET synced=1 WHERE id IN ({marks})", list(event_ids))

    # cache

    def cache_put(self, key: str, data: Any) -> None:
        with self._cursor() as cur:
            cur.execute(
                "INSERT OR REPLACE INTO cache(key, data, updated_at) VALUES(?,?,?)",
                (key, json.dumps(data), _now_ms()),
            )

    def cache_get(self, key: str) -> Any:
        with self._cursor() as cur:
            cur.execute("SELECT data FROM cache WHERE key=?", (key,))
            row = cur.fetchone()
        return json.loads(row["data"]) if row else None
