from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Sequence

from ..attendance.model import StudentAttendanceView
from ..attendance.repository import AttendanceRepository
from ..attendance.service import AttendanceService
from ..common.datetime_utils import day_bounds
from ..core.enums import AttendanceStatus
from ..core.exceptions import PersistenceFailure, ValidationError
from ..sessions.model import ClassSession
from ..sessions.repository import SessionRepository

logger = logging.getLogger(__name__)


class HistoryService:
    """Browse past sessions of a class, correct their records or delete them."""

    def __init__(
        self,
        sessions: SessionRepository,
        attendance: AttendanceRepository,
        attendance_service: AttendanceService,
    ):
        self._sessions = sessions
        self._attendance = attendance
        self._attendance_service = attendance_service

    def sessions_for_date(self, actor_id: int, class_id: int, day: date) -> Sequence[ClassSession]:
        class_room = self._attendance_service.get_owned_class(actor_id, class_id)
        start, end = day_bounds(day)
        return self._sessions.list_for_class_between(class_room.class_id, start=start, end=end)

    def session_records(self, actor_id: int, class_id: int, session_id: int) -> list[StudentAttendanceView]:
        class_room = self._attendance_service.get_owned_class(actor_id, class_id)
        session = self._attendance_service.get_class_session(class_room, session_id)
        return self._attendance_service.view_for(class_room, session)

    def set_status(
        self,
        actor_id: int,
        class_id: int,
        session_id: int,
        student_id: int,
        status: AttendanceStatus,
        *,
        now: datetime | None = None,
    ) -> list[StudentAttendanceView]:
        return self._attendance_service.set_attendance(
            actor_id, class_id, session_id, student_id, status, history_edit=True, now=now
        )

    def delete_session(self, actor_id: int, class_id: int, session_id: int) -> None:
        """Delete the session's records, then the session itself.

        Both steps must succeed; a partial failure is reported and not retried.
        """

        class_room = self._attendance_service.get_owned_class(actor_id, class_id)
        session = self._attendance_service.get_class_session(class_room, session_id)
        if session.session_id == class_room.active_session_id:
            raise ValidationError("Stop the class before deleting its running session")

        try:
            removed = self._attendance.delete_for_session(class_id=class_room.class_id, session_id=session.session_id)
        except PersistenceFailure as e:
            raise PersistenceFailure("Failed to delete the session's attendance records") from e

        try:
            deleted = self._sessions.delete_session(session.session_id)
        except PersistenceFailure as e:
            raise PersistenceFailure(
                "Attendance records were deleted but the session could not be removed"
            ) from e
        if not deleted:
            raise PersistenceFailure("Attendance records were deleted but the session could not be removed")

        logger.info("Deleted session %s of class %s (%s records)", session.session_id, class_room.class_id, removed)
