from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, store_errors, where_clause
from .repository import RosterRepository


class MySQLRosterRepository(RosterRepository):
    """Reads the roster tables owned by the surrounding application."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_student_ids(self, *, class_id: Optional[str] = None) -> Sequence[str]:
        clauses = ["is_deleted=0"]
        params: list[object] = []
        if class_id is not None:
            clauses.append("class_id=%s")
            params.append(class_id)

        with store_errors("list students"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT student_id FROM students WHERE {where_clause(clauses)} ORDER BY roll_number",
                tuple(params),
            )
            return [str(r["student_id"]) for r in fetchall(cur)]

    def list_enrolled_student_ids(self, *, class_id: str, subject_id: str) -> Sequence[str]:
        with store_errors("list enrolled students"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT DISTINCT e.student_id
                FROM student_subject_enrollments e
                JOIN students s ON s.student_id = e.student_id
                WHERE e.class_id=%s AND e.subject_id=%s AND e.is_active=1 AND s.is_deleted=0
                """,
                (class_id, subject_id),
            )
            return [str(r["student_id"]) for r in fetchall(cur)]
