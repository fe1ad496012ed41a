from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import ClassSession, Geofence


class SessionRepository(Protocol):
    """Session store: sessions are always scoped to a class."""

    def create_session(self, *, class_id: int, start_time: datetime, geofence: Optional[Geofence] = None) -> int:
        raise NotImplementedError

    def get_by_id(self, session_id: int) -> Optional[ClassSession]:
        raise NotImplementedError

    def get_latest_open(self, class_id: int) -> Optional[ClassSession]:
        raise NotImplementedError

    def end_session(self, session_id: int, *, end_time: datetime) -> bool:
        """Set end_time only when it is still NULL; False means nothing changed."""

        raise NotImplementedError

    def update_geofence(self, session_id: int, *, geofence: Geofence) -> bool:
        raise NotImplementedError

    def list_for_class_between(self, class_id: int, *, start: datetime, end: datetime) -> Sequence[ClassSession]:
        """Sessions whose start_time falls in [start, end)."""

        raise NotImplementedError

    def delete_session(self, session_id: int) -> bool:
        raise NotImplementedError
