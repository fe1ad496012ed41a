from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchall, fetchone
from .model import ClassSession, Geofence
from .repository import SessionRepository

_COLUMNS = "session_id, class_id, start_time, end_time, teacher_latitude, teacher_longitude, location_radius"


def _to_session(r: dict) -> ClassSession:
    geofence = None
    if r.get("teacher_latitude") is not None and r.get("location_radius") is not None:
        geofence = Geofence(
            latitude=as_float(r["teacher_latitude"]),
            longitude=as_float(r["teacher_longitude"]),
            radius_m=as_float(r["location_radius"]),
        )
    return ClassSession(
        session_id=int(r["session_id"]),
        class_id=int(r["class_id"]),
        start_time=r["start_time"],
        end_time=r.get("end_time"),
        geofence=geofence,
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_session(self, *, class_id: int, start_time: datetime, geofence: Optional[Geofence] = None) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO class_sessions(class_id, start_time, teacher_latitude, teacher_longitude, location_radius)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (
                    int(class_id),
                    start_time,
                    geofence.latitude if geofence else None,
                    geofence.longitude if geofence else None,
                    geofence.radius_m if geofence else None,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, session_id: int) -> Optional[ClassSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM class_sessions WHERE session_id=%s", (int(session_id),))
            r = fetchone(cur)
            return _to_session(r) if r else None

    def get_latest_open(self, class_id: int) -> Optional[ClassSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM class_sessions
                WHERE class_id=%s AND end_time IS NULL
                ORDER BY start_time DESC, session_id DESC
                LIMIT 1
                """,
                (int(class_id),),
            )
            r = fetchone(cur)
            return _to_session(r) if r else None

    def end_session(self, session_id: int, *, end_time: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE class_sessions SET end_time=%s WHERE session_id=%s AND end_time IS NULL",
                (end_time, int(session_id)),
            )
            return cur.rowcount > 0

    def update_geofence(self, session_id: int, *, geofence: Geofence) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE class_sessions
                SET teacher_latitude=%s, teacher_longitude=%s, location_radius=%s
                WHERE session_id=%s AND end_time IS NULL
                """,
                (geofence.latitude, geofence.longitude, geofence.radius_m, int(session_id)),
            )
            return cur.rowcount > 0

    def list_for_class_between(self, class_id: int, *, start: datetime, end: datetime) -> Sequence[ClassSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM class_sessions
                WHERE class_id=%s AND start_time >= %s AND start_time < %s
                ORDER BY start_time ASC, session_id ASC
                """,
                (int(class_id), start, end),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def delete_session(self, session_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM class_sessions WHERE session_id=%s", (int(session_id),))
            return cur.rowcount > 0
