from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

import pytest

from src.classroom_attendance.classroom_attendance.container import Container, wire

from tests.fakes import (
    OTHER_TEACHER,
    OUTSIDER,
    STUDENTS,
    TEACHER,
    FakeAttendance,
    FakeClasses,
    FakeFaceVerifier,
    FakeProfiles,
    FakeSessions,
)


@dataclass
class World:
    container: Container
    profiles: FakeProfiles
    classes: FakeClasses
    sessions: FakeSessions
    attendance: FakeAttendance
    faces: FakeFaceVerifier
    class_id: int


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 3, 10, 9, 0, 0)


@pytest.fixture
def world() -> World:
    profiles = FakeProfiles([TEACHER, OTHER_TEACHER, *STUDENTS, OUTSIDER])
    classes = FakeClasses(profiles)
    sessions = FakeSessions()
    attendance = FakeAttendance()
    faces = FakeFaceVerifier(result=True)

    class_id = classes.create_class(name="Physics 101", teacher_id=TEACHER.profile_id)
    classes.add_students(class_id, [s.profile_id for s in STUDENTS])

    container = wire(
        profiles_repo=profiles,
        classes_repo=classes,
        sessions_repo=sessions,
        attendance_repo=attendance,
        face_verifier=faces,
    )
    return World(
        container=container,
        profiles=profiles,
        classes=classes,
        sessions=sessions,
        attendance=attendance,
        faces=faces,
        class_id=class_id,
    )
