from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "record_id, class_id, session_id, student_id, status, timestamp"


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=int(r["record_id"]),
        class_id=int(r["class_id"]),
        session_id=int(r["session_id"]),
        student_id=int(r["student_id"]),
        status=AttendanceStatus(r["status"]),
        timestamp=r["timestamp"],
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_session(self, *, class_id: int, session_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE class_id=%s AND session_id=%s
                ORDER BY record_id ASC
                """,
                (int(class_id), int(session_id)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def get_for_student(self, *, class_id: int, session_id: int, student_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE class_id=%s AND session_id=%s AND student_id=%s
                """,
                (int(class_id), int(session_id), int(student_id)),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def insert_record(
        self,
        *,
        class_id: int,
        session_id: int,
        student_id: int,
        status: AttendanceStatus,
        timestamp: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            # The unique (session_id, student_id) key turns a racing second insert into an update.
            cur.execute(
                """
                INSERT INTO attendance_records(class_id, session_id, student_id, status, timestamp)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE status=VALUES(status), timestamp=VALUES(timestamp)
                """,
                (int(class_id), int(session_id), int(student_id), status.value, timestamp),
            )
            return int(cur.lastrowid)

    def update_record(self, *, record_id: int, status: AttendanceStatus, timestamp: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_records SET status=%s, timestamp=%s WHERE record_id=%s",
                (status.value, timestamp, int(record_id)),
            )
            return cur.rowcount > 0

    def delete_for_session(self, *, class_id: int, session_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM attendance_records WHERE class_id=%s AND session_id=%s",
                (int(class_id), int(session_id)),
            )
            return int(cur.rowcount or 0)
