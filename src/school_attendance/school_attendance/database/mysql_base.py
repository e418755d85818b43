from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, time, timedelta
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..common.datetime_utils import parse_clock_time
from ..core.exceptions import StoreError

logger = logging.getLogger(__name__)


@contextmanager
def db_cursor(conn_factory, *, dictionary: bool = True):
    """One short-lived connection and one transaction.

    Yields (conn, cursor). Commits when the block exits cleanly, rolls back
    when it raises; the connection is closed either way.
    """

    conn = conn_factory.connect()
    cur = None
    try:
        cur = conn.cursor(dictionary=dictionary)
        yield conn, cur
    except Exception:
        if cur is not None:
            cur.close()
            cur = None
        conn.rollback()
        raise
    else:
        cur.close()
        cur = None
        conn.commit()
    finally:
        conn.close()


@contextmanager
def store_errors(operation: str):
    """Translate connector errors into StoreError, leaving domain errors alone."""

    try:
        yield
    except mysql.connector.Error as e:
        logger.error("Store operation %s failed: %s", operation, e, exc_info=True)
        raise StoreError(f"{operation} failed: {e}") from e


def is_duplicate_key(error: Exception) -> bool:
    return isinstance(error, mysql.connector.IntegrityError) and getattr(error, "errno", None) == errorcode.ER_DUP_ENTRY


def fetchone(cur) -> Optional[Dict[str, Any]]:
    return cur.fetchone() or None


def fetchall(cur) -> List[Dict[str, Any]]:
    return list(cur.fetchall() or [])


def normalize_mysql_time(value: Any) -> Optional[time]:
    """TIME columns come back as time, timedelta or 'HH:MM[:SS]' depending on the connector."""

    if value is None or isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        seconds = int(value.total_seconds()) % 86400
        return (datetime.min + timedelta(seconds=seconds)).time()
    if isinstance(value, str):
        return parse_clock_time(value)
    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")


def where_clause(clauses: list[str]) -> str:
    return " AND ".join(clauses) if clauses else "1=1"
