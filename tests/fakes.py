from __future__ import annotations

import math
from dataclasses import replace
from datetime import datetime
from typing import Optional

from src.classroom_attendance.classroom_attendance.attendance.model import AttendanceRecord
from src.classroom_attendance.classroom_attendance.classes.model import ClassRoom
from src.classroom_attendance.classroom_attendance.core.constants import EARTH_RADIUS_METERS
from src.classroom_attendance.classroom_attendance.core.enums import Role
from src.classroom_attendance.classroom_attendance.core.exceptions import PersistenceFailure
from src.classroom_attendance.classroom_attendance.sessions.model import ClassSession
from src.classroom_attendance.classroom_attendance.users.model import Profile


CAMPUS = (10.7626, 106.6602)


def north_of(lat: float, lon: float, meters: float) -> tuple[float, float]:
    """Point `meters` due north; along a meridian Haversine is exact."""
    return lat + math.degrees(meters / EARTH_RADIUS_METERS), lon


class FakeProfiles:
    def __init__(self, profiles=()):
        self._by_id: dict[int, Profile] = {p.profile_id: p for p in profiles}

    def add(self, profile: Profile) -> Profile:
        self._by_id[profile.profile_id] = profile
        return profile

    def get_by_id(self, profile_id):
        return self._by_id.get(int(profile_id))

    def get_by_username(self, username):
        return next((p for p in self._by_id.values() if p.username == username), None)

    def get_many(self, profile_ids):
        return [self._by_id[int(i)] for i in profile_ids if int(i) in self._by_id]


class FakeClasses:
    def __init__(self, profiles: FakeProfiles):
        self._profiles = profiles
        self._next_id = 100
        self.classes: dict[int, ClassRoom] = {}
        self.rosters: dict[int, list[int]] = {}
        # Simulates another device winning the activation race.
        self.steal_activation_with: Optional[int] = None

    def get_by_id(self, class_id):
        return self.classes.get(int(class_id))

    def list_for_teacher(self, teacher_id):
        return [c for c in self.classes.values() if c.teacher_id == int(teacher_id)]

    def create_class(self, *, name, teacher_id):
        class_id = self._next_id
        self._next_id += 1
        self.classes[class_id] = ClassRoom(class_id=class_id, name=name, teacher_id=int(teacher_id))
        self.rosters[class_id] = []
        return class_id

    def delete_class(self, class_id):
        c = self.classes.get(int(class_id))
        if not c or c.is_active:
            return False
        del self.classes[c.class_id]
        self.rosters.pop(c.class_id, None)
        return True

    def set_online_mode(self, class_id, *, enabled):
        c = self.classes.get(int(class_id))
        if not c:
            return False
        self.classes[c.class_id] = replace(c, online_mode=bool(enabled))
        return True

    def activate_if_idle(self, class_id, *, session_id):
        c = self.classes[int(class_id)]
        if self.steal_activation_with is not None:
            c = replace(c, active_session_id=self.steal_activation_with)
            self.classes[c.class_id] = c
        if c.active_session_id is not None:
            return False
        self.classes[c.class_id] = replace(c, active_session_id=int(session_id))
        return True

    def deactivate(self, class_id, *, session_id):
        c = self.classes[int(class_id)]
        if c.active_session_id != int(session_id):
            return False
        self.classes[c.class_id] = replace(c, active_session_id=None)
        return True

    def list_roster(self, class_id):
        return self._profiles.get_many(self.rosters.get(int(class_id), []))

    def add_students(self, class_id, student_ids):
        roster = self.rosters.setdefault(int(class_id), [])
        added = 0
        for sid in student_ids:
            if int(sid) not in roster:
                roster.append(int(sid))
                added += 1
        return added

    def replace_roster(self, class_id, student_ids):
        ids = list(dict.fromkeys(int(s) for s in student_ids))
        kept = [s for s in self.rosters.get(int(class_id), []) if s in ids]
        self.rosters[int(class_id)] = kept + [s for s in ids if s not in kept]

    def list_active_for_student(self, student_id):
        return [
            c
            for c in self.classes.values()
            if c.is_active and int(student_id) in self.rosters.get(c.class_id, [])
        ]


class FakeSessions:
    def __init__(self):
        self._next_id = 1
        self.sessions: dict[int, ClassSession] = {}
        self.fail_delete = False

    def create_session(self, *, class_id, start_time, geofence=None):
        sid = self._next_id
        self._next_id += 1
        self.sessions[sid] = ClassSession(session_id=sid, class_id=int(class_id), start_time=start_time, geofence=geofence)
        return sid

    def get_by_id(self, session_id):
        return self.sessions.get(int(session_id))

    def get_latest_open(self, class_id):
        open_ = [s for s in self.sessions.values() if s.class_id == int(class_id) and s.is_open]
        return max(open_, key=lambda s: (s.start_time, s.session_id)) if open_ else None

    def end_session(self, session_id, *, end_time):
        s = self.sessions.get(int(session_id))
        if not s or not s.is_open:
            return False
        self.sessions[s.session_id] = replace(s, end_time=end_time)
        return True

    def update_geofence(self, session_id, *, geofence):
        s = self.sessions.get(int(session_id))
        if not s or not s.is_open:
            return False
        self.sessions[s.session_id] = replace(s, geofence=geofence)
        return True

    def list_for_class_between(self, class_id, *, start, end):
        items = [s for s in self.sessions.values() if s.class_id == int(class_id) and start <= s.start_time < end]
        return sorted(items, key=lambda s: s.start_time)

    def delete_session(self, session_id):
        if self.fail_delete:
            raise PersistenceFailure("Database error")
        return self.sessions.pop(int(session_id), None) is not None

    # test helper
    def add_past(self, *, class_id: int, start: datetime, end: datetime, geofence=None) -> int:
        sid = self.create_session(class_id=class_id, start_time=start, geofence=geofence)
        self.end_session(sid, end_time=end)
        return sid


class FakeAttendance:
    def __init__(self):
        self._next_id = 1
        self.records: dict[int, AttendanceRecord] = {}

    def list_for_session(self, *, class_id, session_id):
        return [r for r in self.records.values() if r.class_id == int(class_id) and r.session_id == int(session_id)]

    def get_for_student(self, *, class_id, session_id, student_id):
        return next(
            (
                r
                for r in self.records.values()
                if (r.class_id, r.session_id, r.student_id) == (int(class_id), int(session_id), int(student_id))
            ),
            None,
        )

    def insert_record(self, *, class_id, session_id, student_id, status, timestamp):
        rid = self._next_id
        self._next_id += 1
        self.records[rid] = AttendanceRecord(
            record_id=rid,
            class_id=int(class_id),
            session_id=int(session_id),
            student_id=int(student_id),
            status=status,
            timestamp=timestamp,
        )
        return rid

    def update_record(self, *, record_id, status, timestamp):
        r = self.records.get(int(record_id))
        if not r:
            return False
        self.records[r.record_id] = replace(r, status=status, timestamp=timestamp)
        return True

    def delete_for_session(self, *, class_id, session_id):
        ids = [r.record_id for r in self.list_for_session(class_id=class_id, session_id=session_id)]
        for rid in ids:
            del self.records[rid]
        return len(ids)


class FakeFaceVerifier:
    def __init__(self, result: bool = True):
        self.result = result
        self.calls: list[tuple[str, str]] = []

    def verify(self, *, image_base64, username):
        self.calls.append((image_base64, username))
        return self.result


TEACHER = Profile(profile_id=1, username="teacher1", name="Teacher One", role=Role.TEACHER)
OTHER_TEACHER = Profile(profile_id=2, username="teacher2", name="Teacher Two", role=Role.TEACHER)
STUDENTS = (
    Profile(profile_id=11, username="student1", name="Student One", role=Role.STUDENT),
    Profile(profile_id=12, username="student2", name="Student Two", role=Role.STUDENT),
    Profile(profile_id=13, username="student3", name="Student Three", role=Role.STUDENT),
)
OUTSIDER = Profile(profile_id=14, username="student4", name="Student Four", role=Role.STUDENT)
