"""Schema bootstrap for the attendance and notification tables.

Used by ``scripts/init_db.py`` and by ``create_app()`` when AUTO_INIT_DB is
set. Every statement in ``database/schema.sql`` is idempotent.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Iterator

from .connection import DatabaseConnection, DBConfig

logger = logging.getLogger(__name__)

# The target database comes from DB_CONFIG, not from the script.
_DATABASE_SELECTION = re.compile(r"^\s*(CREATE\s+DATABASE|USE)\b", re.IGNORECASE)


def iter_sql_statements(sql: str) -> Iterator[str]:
    """Yield statements terminated by ';' at end of line, skipping '--' comment lines."""

    buf: list[str] = []
    for line in sql.splitlines():
        if line.lstrip().startswith("--"):
            continue
        stripped = line.rstrip()
        if stripped.endswith(";"):
            buf.append(stripped[:-1])
            stmt = "\n".join(buf).strip()
            buf = []
            if stmt:
                yield stmt
        else:
            buf.append(line)

    tail = "\n".join(buf).strip()
    if tail:
        yield tail


def _schema_statements(statements: Iterable[str]) -> list[str]:
    return [s for s in statements if not _DATABASE_SELECTION.match(s)]


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = DatabaseConnection(target).connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)

    schema_path = Path(schema_path)
    statements = _schema_statements(iter_sql_statements(schema_path.read_text(encoding="utf-8")))

    target = DBConfig.from_dict(db_config)
    conn = DatabaseConnection(target).connect()
    try:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("Applied %d statements from %s to %s", len(statements), schema_path.name, target.database)


def list_tables(db_config: dict) -> list[str]:
    conn = DatabaseConnection(DBConfig.from_dict(db_config)).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
