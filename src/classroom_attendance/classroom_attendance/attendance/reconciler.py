from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..sessions.model import ClassSession
from ..users.model import Profile
from .model import AttendanceRecord, StudentAttendanceView
from .strategies.base import DefaultStatusStrategy


class AttendanceReconciler:
    """Merge raw attendance rows with the class roster.

    Produces exactly one entry per roster member, in roster order. Rows for
    students who are not on the roster are ignored. The roster passed in is
    the live one; past sessions are not snapshotted.
    """

    def reconcile(
        self,
        roster: Sequence[Profile],
        records: Iterable[AttendanceRecord],
        *,
        strategy: DefaultStatusStrategy,
        session: Optional[ClassSession] = None,
    ) -> list[StudentAttendanceView]:
        by_student: dict[int, AttendanceRecord] = {}
        for rec in records:
            # Later rows win, mirroring update-in-place semantics.
            by_student[rec.student_id] = rec

        fallback = strategy.decide_missing(session=session)

        views: list[StudentAttendanceView] = []
        seen: set[int] = set()
        for student in roster:
            if student.profile_id in seen:
                continue
            seen.add(student.profile_id)

            rec = by_student.get(student.profile_id)
            if rec:
                views.append(
                    StudentAttendanceView(
                        student_id=student.profile_id,
                        username=student.username,
                        name=student.name,
                        status=rec.status,
                        timestamp=rec.timestamp,
                        recorded=True,
                    )
                )
            else:
                views.append(
                    StudentAttendanceView(
                        student_id=student.profile_id,
                        username=student.username,
                        name=student.name,
                        status=fallback.status,
                        timestamp=fallback.timestamp,
                    )
                )
        return views
