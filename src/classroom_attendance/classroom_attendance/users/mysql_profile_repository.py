from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Profile
from .repository import ProfileRepository

_COLUMNS = "profile_id, username, name, role, password_hash"


def _to_profile(r: dict) -> Profile:
    return Profile(
        profile_id=int(r["profile_id"]),
        username=r["username"],
        name=r["name"],
        role=Role(r["role"]),
        password_hash=r.get("password_hash") or "",
    )


class MySQLProfileRepository(ProfileRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, profile_id: int) -> Optional[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM profiles WHERE profile_id=%s", (int(profile_id),))
            r = fetchone(cur)
            return _to_profile(r) if r else None

    def get_by_username(self, username: str) -> Optional[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM profiles WHERE username=%s", (username,))
            r = fetchone(cur)
            return _to_profile(r) if r else None

    def get_many(self, profile_ids: Sequence[int]) -> Sequence[Profile]:
        ids = [int(i) for i in profile_ids]
        if not ids:
            return []
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM profiles WHERE profile_id IN ({placeholders})", tuple(ids))
            return [_to_profile(r) for r in fetchall(cur)]
