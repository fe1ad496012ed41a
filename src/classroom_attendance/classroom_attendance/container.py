from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .checkin.face import FaceVerifier, HttpFaceVerifier
from .checkin.service import CheckInService
from .classes.mysql_class_repository import MySQLClassRepository
from .classes.repository import ClassRepository
from .classes.service import ClassService
from .core.constants import LOCATION_SLACK_METERS
from .database.connection import DBConfig, DatabaseConnection
from .history.service import HistoryService
from .sessions.lifecycle import SessionLifecycleManager
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.repository import SessionRepository
from .users.mysql_profile_repository import MySQLProfileRepository
from .users.repository import ProfileRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    profiles_repo: ProfileRepository
    classes_repo: ClassRepository
    sessions_repo: SessionRepository
    attendance_repo: AttendanceRepository

    auth_service: AuthService
    class_service: ClassService
    lifecycle: SessionLifecycleManager
    attendance_service: AttendanceService
    history_service: HistoryService
    checkin_service: CheckInService


def wire(
    *,
    profiles_repo: ProfileRepository,
    classes_repo: ClassRepository,
    sessions_repo: SessionRepository,
    attendance_repo: AttendanceRepository,
    face_verifier: FaceVerifier,
    location_slack_m: float = LOCATION_SLACK_METERS,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Build services on top of any repository implementations."""

    auth_service = AuthService(profiles_repo)
    class_service = ClassService(classes_repo, profiles_repo)
    lifecycle = SessionLifecycleManager(classes_repo, sessions_repo)
    attendance_service = AttendanceService(attendance_repo, classes_repo, sessions_repo, profiles_repo)
    history_service = HistoryService(sessions_repo, attendance_repo, attendance_service)
    checkin_service = CheckInService(
        classes_repo,
        sessions_repo,
        profiles_repo,
        attendance_service,
        face_verifier,
        slack_m=location_slack_m,
    )
    lifecycle.subscribe(checkin_service.on_lifecycle_event)

    return Container(
        conn=conn,
        profiles_repo=profiles_repo,
        classes_repo=classes_repo,
        sessions_repo=sessions_repo,
        attendance_repo=attendance_repo,
        auth_service=auth_service,
        class_service=class_service,
        lifecycle=lifecycle,
        attendance_service=attendance_service,
        history_service=history_service,
        checkin_service=checkin_service,
    )


def build_container(
    *,
    db_config: dict,
    face_verify_url: str,
    face_verify_timeout: float = 10.0,
    location_slack_m: float = LOCATION_SLACK_METERS,
) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection.get_instance(config)

    return wire(
        profiles_repo=MySQLProfileRepository(conn),
        classes_repo=MySQLClassRepository(conn),
        sessions_repo=MySQLSessionRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        face_verifier=HttpFaceVerifier(face_verify_url, timeout=face_verify_timeout),
        location_slack_m=location_slack_m,
        conn=conn,
    )
