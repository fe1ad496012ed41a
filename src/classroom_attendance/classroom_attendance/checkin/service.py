from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Optional

from ..attendance.service import AttendanceService
from ..classes.model import ClassRoom
from ..classes.repository import ClassRepository
from ..core.constants import LOCATION_SLACK_METERS
from ..core.enums import LifecycleEventKind
from ..core.exceptions import NotFound, PermissionDenied, ValidationError
from ..location.provider import GeolocationProvider
from ..location.verifier import LocationVerifier
from ..sessions.lifecycle import LifecycleEvent
from ..sessions.model import ClassSession
from ..sessions.repository import SessionRepository
from ..users.repository import ProfileRepository
from .face import FaceVerifier

logger = logging.getLogger(__name__)


class CheckInService:
    """Student self check-in: location gate, then face check, then mark present.

    The last location outcome per (student, session) is remembered so that the
    submission can be refused unless it was VALID. Any lifecycle change
    after the start (stop, new geofence, mode switch) drops the outcomes.
    """

    def __init__(
        self,
        classes: ClassRepository,
        sessions: SessionRepository,
        profiles: ProfileRepository,
        attendance_service: AttendanceService,
        face_verifier: FaceVerifier,
        *,
        slack_m: float = LOCATION_SLACK_METERS,
    ):
        self._classes = classes
        self._sessions = sessions
        self._profiles = profiles
        self._attendance_service = attendance_service
        self._faces = face_verifier
        self._slack_m = float(slack_m)
        self._verifiers: dict[tuple[int, int], LocationVerifier] = {}
        self._lock = threading.Lock()

    def active_class_for_student(self, student_id: int) -> Optional[ClassRoom]:
        classes = self._classes.list_active_for_student(int(student_id))
        return classes[0] if classes else None

    def _live_session(self, student_id: int, class_id: int) -> tuple[ClassRoom, ClassSession]:
        class_room = self._classes.get_by_id(int(class_id))
        if not class_room:
            raise NotFound("Class not found")
        enrolled = {p.profile_id for p in self._classes.list_roster(class_room.class_id)}
        if int(student_id) not in enrolled:
            raise PermissionDenied("You are not enrolled in this class")
        if not class_room.is_active:
            raise ValidationError("This class is not running")
        session = self._sessions.get_by_id(class_room.active_session_id)
        if not session or not session.is_open:
            raise NotFound("Session not found")
        return class_room, session

    def _verifier_for(self, student_id: int, class_room: ClassRoom, session: ClassSession) -> LocationVerifier:
        key = (int(student_id), session.session_id)
        with self._lock:
            verifier = self._verifiers.get(key)
            if verifier is None:
                verifier = LocationVerifier(session.geofence, online_mode=class_room.online_mode, slack_m=self._slack_m)
                self._verifiers[key] = verifier
            return verifier

    def check_location(self, student_id: int, class_id: int, location: GeolocationProvider) -> LocationVerifier:
        class_room, session = self._live_session(student_id, class_id)
        verifier = self._verifier_for(student_id, class_room, session)
        if verifier.gate_required:
            verifier.check(location)
            logger.info(
                "Location check student=%s session=%s -> %s (distance=%s)",
                student_id,
                session.session_id,
                verifier.state.value,
                None if verifier.last_distance is None else round(verifier.last_distance, 1),
            )
        return verifier

    def check_in(self, student_id: int, class_id: int, *, image_base64: str, now: datetime | None = None) -> None:
        class_room, session = self._live_session(student_id, class_id)
        if class_room.online_mode:
            raise PermissionDenied("Only teachers can mark attendance in online mode")

        self._verifier_for(student_id, class_room, session).require_submission_allowed()

        if not image_base64:
            raise ValidationError("A photo is required to mark attendance")
        student = self._profiles.get_by_id(int(student_id))
        if not student:
            raise NotFound("Profile not found")
        if not self._faces.verify(image_base64=image_base64, username=student.username):
            raise PermissionDenied("Face verification failed. Please try again.")

        self._attendance_service.mark_self_present(class_room, session, student.profile_id, now=now)
        logger.info("Student %s checked in to class %s session=%s", student.profile_id, class_room.class_id, session.session_id)

    def on_lifecycle_event(self, event: LifecycleEvent) -> None:
        if event.kind == LifecycleEventKind.STARTED:
            return
        if event.session_id is None:
            return
        with self._lock:
            for key in [k for k in self._verifiers if k[1] == event.session_id]:
                del self._verifiers[key]
