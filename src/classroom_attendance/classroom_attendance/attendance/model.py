from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's status within one session.

    Identity is (class_id, session_id, student_id); updated in place.
    """

    record_id: int
    class_id: int
    session_id: int
    student_id: int
    status: AttendanceStatus
    timestamp: datetime


@dataclass(frozen=True)
class StudentAttendanceView:
    """Read-model: one roster member merged with their record (or the default)."""

    student_id: int
    username: str
    name: str
    status: AttendanceStatus
    timestamp: Optional[datetime] = None
    recorded: bool = False


@dataclass(frozen=True)
class BulkMarkResult:
    marked: int
    invalid_count: int
    invalid_sample: tuple[str, ...] = ()
