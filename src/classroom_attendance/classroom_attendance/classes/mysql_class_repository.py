from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..users.model import Profile
from .model import ClassRoom
from .repository import ClassRepository

_COLUMNS = "c.class_id, c.name, c.teacher_id, c.active_session_id, c.online_mode"


def _to_class(r: dict) -> ClassRoom:
    active = r.get("active_session_id")
    return ClassRoom(
        class_id=int(r["class_id"]),
        name=r["name"],
        teacher_id=int(r["teacher_id"]),
        active_session_id=int(active) if active is not None else None,
        online_mode=bool(r.get("online_mode")),
    )


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, class_id: int) -> Optional[ClassRoom]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM classes c WHERE c.class_id=%s", (int(class_id),))
            r = fetchone(cur)
            return _to_class(r) if r else None

    def list_for_teacher(self, teacher_id: int) -> Sequence[ClassRoom]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM classes c WHERE c.teacher_id=%s ORDER BY c.created_at, c.class_id",
                (int(teacher_id),),
            )
            return [_to_class(r) for r in fetchall(cur)]

    def create_class(self, *, name: str, teacher_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO classes(name, teacher_id, online_mode) VALUES(%s,%s,0)",
                (name, int(teacher_id)),
            )
            return int(cur.lastrowid)

    def delete_class(self, class_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT active_session_id FROM classes WHERE class_id=%s FOR UPDATE",
                (int(class_id),),
            )
            r = fetchone(cur)
            if not r or r.get("active_session_id") is not None:
                return False
            # Sessions and roster rows cascade; records reference sessions so go first.
            cur.execute("DELETE FROM attendance_records WHERE class_id=%s", (int(class_id),))
            cur.execute("DELETE FROM classes WHERE class_id=%s", (int(class_id),))
            return cur.rowcount > 0

    def set_online_mode(self, class_id: int, *, enabled: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE classes SET online_mode=%s WHERE class_id=%s",
                (1 if enabled else 0, int(class_id)),
            )
            return cur.rowcount > 0

    def activate_if_idle(self, class_id: int, *, session_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE classes
                SET active_session_id=%s
                WHERE class_id=%s AND active_session_id IS NULL
                """,
                (int(session_id), int(class_id)),
            )
            return cur.rowcount > 0

    def deactivate(self, class_id: int, *, session_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE classes
                SET active_session_id=NULL
                WHERE class_id=%s AND active_session_id=%s
                """,
                (int(class_id), int(session_id)),
            )
            return cur.rowcount > 0

    def list_roster(self, class_id: int) -> Sequence[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT p.profile_id, p.username, p.name, p.role
                FROM classes_students cs
                JOIN profiles p ON p.profile_id = cs.student_id
                WHERE cs.class_id=%s
                ORDER BY cs.added_at ASC, cs.student_id ASC
                """,
                (int(class_id),),
            )
            return [
                Profile(
                    profile_id=int(r["profile_id"]),
                    username=r["username"],
                    name=r["name"],
                    role=Role(r["role"]),
                )
                for r in fetchall(cur)
            ]

    def add_students(self, class_id: int, student_ids: Sequence[int]) -> int:
        ids = list(dict.fromkeys(int(s) for s in student_ids))
        if not ids:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                "INSERT IGNORE INTO classes_students(class_id, student_id) VALUES(%s,%s)",
                [(int(class_id), sid) for sid in ids],
            )
            return int(cur.rowcount or 0)

    def replace_roster(self, class_id: int, student_ids: Sequence[int]) -> None:
        ids = list(dict.fromkeys(int(s) for s in student_ids))
        with db_cursor(self._conn_factory) as (_, cur):
            if ids:
                placeholders = ",".join(["%s"] * len(ids))
                cur.execute(
                    f"DELETE FROM classes_students WHERE class_id=%s AND student_id NOT IN ({placeholders})",
                    (int(class_id), *ids),
                )
                cur.executemany(
                    "INSERT IGNORE INTO classes_students(class_id, student_id) VALUES(%s,%s)",
                    [(int(class_id), sid) for sid in ids],
                )
            else:
                cur.execute("DELETE FROM classes_students WHERE class_id=%s", (int(class_id),))

    def list_active_for_student(self, student_id: int) -> Sequence[ClassRoom]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM classes_students cs
                JOIN classes c ON c.class_id = cs.class_id
                WHERE cs.student_id=%s AND c.active_session_id IS NOT NULL
                ORDER BY c.class_id
                """,
                (int(student_id),),
            )
            return [_to_class(r) for r in fetchall(cur)]
