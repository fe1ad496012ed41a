from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional

from ..classes.model import ClassRoom
from ..classes.repository import ClassRepository
from ..common.datetime_utils import now_local
from ..core.constants import INVALID_SAMPLE_SIZE
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import NotFound, PermissionDenied, PersistenceFailure, ValidationError
from ..sessions.model import ClassSession
from ..sessions.repository import SessionRepository
from ..users.repository import ProfileRepository
from .factory import DefaultStatusFactory
from .model import BulkMarkResult, StudentAttendanceView
from .reconciler import AttendanceReconciler
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Use cases: mark, toggle and reset attendance; build the per-student view."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        classes: ClassRepository,
        sessions: SessionRepository,
        profiles: ProfileRepository,
        *,
        reconciler: AttendanceReconciler | None = None,
        default_factory: DefaultStatusFactory | None = None,
    ):
        self._attendance = attendance
        self._classes = classes
        self._sessions = sessions
        self._profiles = profiles
        self._reconciler = reconciler or AttendanceReconciler()
        self._factory = default_factory or DefaultStatusFactory()

    def get_owned_class(self, actor_id: int, class_id: int) -> ClassRoom:
        class_room = self._classes.get_by_id(int(class_id))
        if not class_room:
            raise NotFound("Class not found")
        if class_room.teacher_id != int(actor_id):
            raise PermissionDenied("You don't have permission to manage this class")
        return class_room

    def get_class_session(self, class_room: ClassRoom, session_id: int) -> ClassSession:
        session = self._sessions.get_by_id(int(session_id))
        if not session or session.class_id != class_room.class_id:
            raise NotFound("Session not found")
        return session

    def view_for(self, class_room: ClassRoom, session: Optional[ClassSession]) -> list[StudentAttendanceView]:
        """Reconcile the live roster against one session (or no session at all)."""

        roster = self._classes.list_roster(class_room.class_id)
        records = (
            self._attendance.list_for_session(class_id=class_room.class_id, session_id=session.session_id)
            if session
            else []
        )
        strategy = self._factory.for_view(class_room=class_room, session=session)
        return self._reconciler.reconcile(roster, records, strategy=strategy, session=session)

    def current_view(self, actor_id: int, class_id: int) -> list[StudentAttendanceView]:
        class_room = self.get_owned_class(actor_id, class_id)
        session = None
        if class_room.is_active:
            session = self._sessions.get_by_id(class_room.active_session_id)
        return self.view_for(class_room, session)

    def set_attendance(
        self,
        actor_id: int,
        class_id: int,
        session_id: int,
        student_id: int,
        status: AttendanceStatus,
        *,
        history_edit: bool = False,
        now: datetime | None = None,
    ) -> list[StudentAttendanceView]:
        """Upsert one (session, student) record and return the re-reconciled view.

        Without `history_edit` the session must be the class's running session.
        History edits may correct any existing session of the class.
        """

        class_room = self.get_owned_class(actor_id, class_id)
        session = self.get_class_session(class_room, session_id)
        if not history_edit:
            self._require_live(class_room, session)

        self._upsert(class_room, session, int(student_id), AttendanceStatus(status), now=now)
        return self.view_for(class_room, session)

    def toggle_attendance(
        self,
        actor_id: int,
        class_id: int,
        session_id: int,
        student_id: int,
        *,
        history_edit: bool = False,
        now: datetime | None = None,
    ) -> list[StudentAttendanceView]:
        existing = self._attendance.get_for_student(
            class_id=int(class_id), session_id=int(session_id), student_id=int(student_id)
        )
        new_status = AttendanceStatus.PRESENT
        if existing and existing.status == AttendanceStatus.PRESENT:
            new_status = AttendanceStatus.ABSENT
        return self.set_attendance(
            actor_id, class_id, session_id, student_id, new_status, history_edit=history_edit, now=now
        )

    def reset_attendance(self, actor_id: int, class_id: int, session_id: int) -> list[StudentAttendanceView]:
        """Delete every record of the session; the view falls back to the defaults."""

        class_room = self.get_owned_class(actor_id, class_id)
        session = self.get_class_session(class_room, session_id)
        removed = self._attendance.delete_for_session(class_id=class_room.class_id, session_id=session.session_id)
        logger.info("Reset attendance class=%s session=%s removed=%s", class_room.class_id, session.session_id, removed)
        return self.view_for(class_room, session)

    def mark_from_usernames(
        self,
        actor_id: int,
        class_id: int,
        usernames: Iterable[str],
        *,
        now: datetime | None = None,
    ) -> BulkMarkResult:
        """Mark every recognised, enrolled username present in the running session."""

        class_room = self.get_owned_class(actor_id, class_id)
        if not class_room.is_active:
            raise ValidationError("Start the class before uploading attendance")
        session = self.get_class_session(class_room, class_room.active_session_id)
        self._require_live(class_room, session)

        enrolled = {p.profile_id for p in self._classes.list_roster(class_room.class_id)}
        marked = 0
        invalid: list[str] = []
        for raw in usernames:
            username = (raw or "").strip()
            if not username:
                continue
            profile = self._profiles.get_by_username(username)
            if not profile or profile.role != Role.STUDENT or profile.profile_id not in enrolled:
                invalid.append(username)
                continue
            self._upsert(class_room, session, profile.profile_id, AttendanceStatus.PRESENT, now=now, enrolled=enrolled)
            marked += 1

        logger.info(
            "Bulk attendance class=%s session=%s marked=%s invalid=%s",
            class_room.class_id,
            session.session_id,
            marked,
            len(invalid),
        )
        return BulkMarkResult(
            marked=marked,
            invalid_count=len(invalid),
            invalid_sample=tuple(invalid[:INVALID_SAMPLE_SIZE]),
        )

    def mark_self_present(self, class_room: ClassRoom, session: ClassSession, student_id: int, *, now=None) -> None:
        """Student self check-in; callers have already passed the location/face gates."""

        self._require_live(class_room, session)
        self._upsert(class_room, session, int(student_id), AttendanceStatus.PRESENT, now=now)

    @staticmethod
    def _require_live(class_room: ClassRoom, session: ClassSession) -> None:
        if session.session_id != class_room.active_session_id or not session.is_open:
            raise ValidationError("This session is not running")

    def _upsert(
        self,
        class_room: ClassRoom,
        session: ClassSession,
        student_id: int,
        status: AttendanceStatus,
        *,
        now: datetime | None,
        enrolled: set[int] | None = None,
    ) -> None:
        if status == AttendanceStatus.UNMARKED:
            raise ValidationError("Status must be present or absent")

        if enrolled is None:
            enrolled = {p.profile_id for p in self._classes.list_roster(class_room.class_id)}
        if student_id not in enrolled:
            raise NotFound("Student is not enrolled in this class")

        now = now or now_local()
        existing = self._attendance.get_for_student(
            class_id=class_room.class_id, session_id=session.session_id, student_id=student_id
        )
        if existing:
            if not self._attendance.update_record(record_id=existing.record_id, status=status, timestamp=now):
                raise PersistenceFailure("Failed to update attendance")
        else:
            self._attendance.insert_record(
                class_id=class_room.class_id,
                session_id=session.session_id,
                student_id=student_id,
                status=status,
                timestamp=now,
            )
        logger.debug(
            "Attendance class=%s session=%s student=%s -> %s",
            class_room.class_id,
            session.session_id,
            student_id,
            status.value,
        )
