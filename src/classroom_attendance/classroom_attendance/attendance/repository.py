from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def list_for_session(self, *, class_id: int, session_id: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def get_for_student(self, *, class_id: int, session_id: int, student_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def insert_record(
        self,
        *,
        class_id: int,
        session_id: int,
        student_id: int,
        status: AttendanceStatus,
        timestamp: datetime,
    ) -> int:
        raise NotImplementedError

    def update_record(self, *, record_id: int, status: AttendanceStatus, timestamp: datetime) -> bool:
        raise NotImplementedError

    def delete_for_session(self, *, class_id: int, session_id: int) -> int:
        """Delete every record of one session; returns how many rows went away."""

        raise NotImplementedError
