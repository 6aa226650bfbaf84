from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

import mysql.connector

from .connection import DatabaseConnection, DBConfig

logger = logging.getLogger(__name__)

_MIGRATION_FILE_RE = re.compile(r"^(\d{4})_([A-Za-z0-9_]+)\.sql$")

_CREATE_MIGRATIONS_TABLE = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    version INT NOT NULL PRIMARY KEY,
    name VARCHAR(255) NOT NULL,
    applied_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP
)
"""


@dataclass(frozen=True)
class Migration:
    version: int
    name: str
    path: Path

    def read_sql(self) -> str:
        return _strip_create_db_and_use(self.path.read_text(encoding="utf-8"))


def _strip_create_db_and_use(sql: str) -> str:
    # Keep migration files independent of the configured DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_line_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for migration files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in _strip_line_comments(sql):
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
            buf.append(ch)
            continue

        if ch == '"' and not in_single:
            in_double = not in_double
            buf.append(ch)
            continue

        if ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def discover_migrations(migrations_dir: str | Path) -> list[Migration]:
    """List ``NNNN_name.sql`` files ordered by version."""
    found: dict[int, Migration] = {}
    for path in sorted(Path(migrations_dir).glob("*.sql")):
        m = _MIGRATION_FILE_RE.match(path.name)
        if not m:
            logger.warning("Ignoring migration file with unexpected name: %s", path.name)
            continue
        version = int(m.group(1))
        if version in found:
            raise ValueError(f"Duplicate migration version {version}: {found[version].path.name}, {path.name}")
        found[version] = Migration(version=version, name=m.group(2), path=path)
    return [found[v] for v in sorted(found)]


def pending_migrations(applied: Iterable[int], available: Sequence[Migration]) -> list[Migration]:
    done = set(int(v) for v in applied)
    return [m for m in sorted(available, key=lambda m: m.version) if m.version not in done]


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = DatabaseConnection(target).connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def applied_versions(cur) -> set[int]:
    cur.execute(_CREATE_MIGRATIONS_TABLE)
    cur.execute("SELECT version FROM schema_migrations")
    return {int(row[0]) for row in cur.fetchall()}


def apply_migrations(db_config: dict, *, migrations_dir: str | Path) -> list[int]:
    """Apply pending migrations in version order and return the versions applied.

    A failing migration aborts the run; it is not recorded so the next run retries it.
    """

    ensure_database_exists(db_config)
    target = DBConfig.from_dict(db_config)
    available = discover_migrations(migrations_dir)

    conn = DatabaseConnection(target).connect()
    applied: list[int] = []
    try:
        cur = conn.cursor()
        todo = pending_migrations(applied_versions(cur), available)
        if not todo:
            logger.info("Database schema is up to date (%d migrations)", len(available))
            return applied

        for migration in todo:
            logger.info("Applying migration %04d_%s", migration.version, migration.name)
            try:
                for stmt in iter_sql_statements(migration.read_sql()):
                    cur.execute(stmt)
                cur.execute(
                    "INSERT INTO schema_migrations(version, name) VALUES(%s, %s)",
                    (migration.version, migration.name),
                )
                conn.commit()
            except mysql.connector.Error:
                conn.rollback()
                logger.exception("Migration %04d_%s failed", migration.version, migration.name)
                raise
            applied.append(migration.version)
        return applied
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    target = DBConfig.from_dict(db_config)
    conn = DatabaseConnection(target).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()


def truncate_all(db_config: dict, tables: Sequence[str]) -> None:
    """Delete all rows from ``tables`` in the given order (children first)."""
    target = DBConfig.from_dict(db_config)
    conn = DatabaseConnection(target).connect()
    try:
        cur = conn.cursor()
        for table in tables:
            logger.info("Clearing table %s", table)
            cur.execute(f"DELETE FROM `{table}`")
        conn.commit()
    finally:
        conn.close()
