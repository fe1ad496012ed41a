from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class AttendanceStatus(str, Enum):
    """Per-student attendance status.

    Only PRESENT and ABSENT are persisted; UNMARKED means no session is running.
    """

    PRESENT = "present"
    ABSENT = "absent"
    UNMARKED = "unmarked"


class ClassState(str, Enum):
    INACTIVE = "inactive"
    ACTIVE = "active"


class LocationCheck(str, Enum):
    """Outcome of the student-side location check."""

    PENDING = "pending"
    CHECKING = "checking"
    VALID = "valid"
    OUT = "out"
    LOCATION_ERROR = "location-error"


class LifecycleEventKind(str, Enum):
    STARTED = "started"
    STOPPED = "stopped"
    ONLINE_MODE_CHANGED = "online_mode_changed"
    GEOFENCE_UPDATED = "geofence_updated"
