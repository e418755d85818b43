from __future__ import annotations

from datetime import date, time
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import AttendanceStatus
from ..core.exceptions import AlreadyPostedError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    fetchall,
    fetchone,
    is_duplicate_key,
    normalize_mysql_time,
    store_errors,
    where_clause,
)
from .model import AttendanceRecord, AttendanceSession, NewAttendanceRecord
from .repository import AttendanceRepository

_RECORD_COLUMNS = (
    "attendance_id, student_id, class_id, subject_id, work_date, status, "
    "arrival_time, late_minutes, marked_by, created_at"
)


def _to_record(r: dict) -> AttendanceRecord:
    late = r.get("late_minutes")
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        student_id=str(r["student_id"]),
        class_id=str(r["class_id"]),
        subject_id=str(r["subject_id"]),
        work_date=r["work_date"],
        status=AttendanceStatus(r["status"]),
        arrival_time=normalize_mysql_time(r.get("arrival_time")),
        late_minutes=int(late) if late is not None else None,
        marked_by=str(r["marked_by"]),
        created_at=r["created_at"],
    )


def _to_session(r: dict) -> AttendanceSession:
    return AttendanceSession(
        class_id=str(r["class_id"]),
        subject_id=str(r["subject_id"]),
        work_date=r["work_date"],
        total_students=int(r["total_students"]),
        present_count=int(r["present_count"]),
        late_count=int(r["late_count"]),
        absent_count=int(r["absent_count"]),
        posted_by=str(r["posted_by"]),
        posted_at=r["posted_at"],
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def exists_for_session(self, *, class_id: str, subject_id: str, work_date: date) -> bool:
        with store_errors("check posted attendance"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT attendance_id
                FROM attendance
                WHERE class_id=%s AND subject_id=%s AND work_date=%s
                LIMIT 1
                """,
                (class_id, subject_id, work_date),
            )
            return fetchone(cur) is not None

    def insert_posting(self, records: Sequence[NewAttendanceRecord], session: AttendanceSession) -> int:
        params = [
            (
                r.student_id,
                r.class_id,
                r.subject_id,
                r.work_date,
                r.status.value,
                r.arrival_time,
                r.late_minutes,
                r.marked_by,
                r.created_at,
            )
            for r in records
        ]

        with store_errors("insert attendance posting"):
            try:
                with db_cursor(self._conn_factory) as (_, cur):
                    cur.executemany(
                        """
                        INSERT INTO attendance(
                            student_id, class_id, subject_id, work_date, status,
                            arrival_time, late_minutes, marked_by, created_at
                        )
                        VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                        """,
                        params,
                    )
                    cur.execute(
                        """
                        INSERT INTO attendance_sessions(
                            class_id, subject_id, work_date, total_students,
                            present_count, late_count, absent_count, posted_by, posted_at
                        )
                        VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                        """,
                        (
                            session.class_id,
                            session.subject_id,
                            session.work_date,
                            session.total_students,
                            session.present_count,
                            session.late_count,
                            session.absent_count,
                            session.posted_by,
                            session.posted_at,
                        ),
                    )
            except mysql.connector.IntegrityError as e:
                if is_duplicate_key(e):
                    raise AlreadyPostedError(session.class_id, session.subject_id, session.work_date) from e
                raise
        return len(params)

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with store_errors("get attendance"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_RECORD_COLUMNS} FROM attendance WHERE attendance_id=%s",
                (int(attendance_id),),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_records(
        self,
        *,
        class_id: Optional[str] = None,
        subject_id: Optional[str] = None,
        student_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses: list[str] = []
        params: list[object] = []

        if class_id is not None:
            clauses.append("class_id=%s")
            params.append(class_id)
        if subject_id is not None:
            clauses.append("subject_id=%s")
            params.append(subject_id)
        if student_id is not None:
            clauses.append("student_id=%s")
            params.append(student_id)
        if start_date is not None:
            clauses.append("work_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("work_date <= %s")
            params.append(end_date)

        with store_errors("list attendance"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM attendance
                WHERE {where_clause(clauses)}
                ORDER BY work_date DESC, student_id ASC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def update_record(
        self,
        *,
        attendance_id: int,
        status: AttendanceStatus,
        arrival_time: Optional[time],
        late_minutes: Optional[int],
    ) -> bool:
        with store_errors("update attendance"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET status=%s, arrival_time=%s, late_minutes=%s
                WHERE attendance_id=%s
                """,
                (status.value, arrival_time, late_minutes, int(attendance_id)),
            )
            return cur.rowcount > 0

    def list_sessions(
        self,
        *,
        class_id: str,
        subject_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceSession]:
        clauses = ["class_id=%s"]
        params: list[object] = [class_id]

        if subject_id is not None:
            clauses.append("subject_id=%s")
            params.append(subject_id)
        if start_date is not None:
            clauses.append("work_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("work_date <= %s")
            params.append(end_date)

        with store_errors("list attendance sessions"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT class_id, subject_id, work_date, total_students, present_count,
                       late_count, absent_count, posted_by, posted_at
                FROM attendance_sessions
                WHERE {where_clause(clauses)}
                ORDER BY work_date DESC
                """,
                tuple(params),
            )
            return [_to_session(r) for r in fetchall(cur)]
