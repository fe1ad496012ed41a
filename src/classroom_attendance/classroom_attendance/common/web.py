from __future__ import annotations

import csv
import io
import logging
from functools import wraps
from typing import Any, Iterable, Optional

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    DomainError,
    LocationUnavailable,
    NotFound,
    OutOfRange,
    PermissionDenied,
    PersistenceFailure,
    SessionConflict,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (AuthenticationError, 401),
    (PermissionDenied, 403),
    (NotFound, 404),
    (SessionConflict, 409),
    (LocationUnavailable, 422),
    (OutOfRange, 422),
    (PersistenceFailure, 503),
    (ValidationError, 400),
)


def error_response(error: DomainError):
    status = next((code for cls, code in _STATUS_BY_ERROR if isinstance(error, cls)), 400)
    return jsonify({"success": False, "error": type(error).__name__, "message": str(error)}), status


def api_view(view):
    """Catch failures at the operation boundary and turn them into JSON."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Unhandled error in %s", request.path)
            return jsonify({"success": False, "error": "InternalError", "message": "System error"}), 500

    return wrapper


def login_required(role: Optional[Role] = None):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "profile_id" not in session:
                return jsonify({"success": False, "message": "Please log in to continue"}), 401
            if role is not None and session.get("role") != role.value:
                return jsonify({"success": False, "message": "You don't have permission"}), 403
            return view(*args, **kwargs)

        return wrapper

    return decorator


def current_profile_id() -> int:
    return int(session["profile_id"])


def json_body() -> dict[str, Any]:
    return request.get_json(silent=True) or {}


def uploaded_usernames() -> list[str]:
    """Usernames from the first column of an uploaded CSV, or a JSON `usernames` list."""

    upload = request.files.get("file")
    if upload is None:
        return [str(u) for u in (json_body().get("usernames") or [])]
    if not (upload.filename or "").lower().endswith(".csv"):
        raise ValidationError("Please upload a CSV file")
    text = upload.read().decode("utf-8-sig", errors="replace")
    return [row[0].strip() for row in csv.reader(io.StringIO(text)) if row and row[0].strip()]


def ok(**payload):
    return jsonify({"success": True, **payload})


def dt(value) -> Optional[str]:
    return value.isoformat(timespec="seconds") if value else None


def class_to_dict(class_room) -> dict:
    return {
        "class_id": class_room.class_id,
        "name": class_room.name,
        "teacher_id": class_room.teacher_id,
        "active_session_id": class_room.active_session_id,
        "state": class_room.state.value,
        "online_mode": class_room.online_mode,
    }


def session_to_dict(s) -> Optional[dict]:
    if s is None:
        return None
    return {
        "session_id": s.session_id,
        "class_id": s.class_id,
        "start_time": dt(s.start_time),
        "end_time": dt(s.end_time),
        "latitude": s.geofence.latitude if s.geofence else None,
        "longitude": s.geofence.longitude if s.geofence else None,
        "radius": s.geofence.radius_m if s.geofence else None,
    }


def views_to_list(views: Iterable) -> list[dict]:
    return [
        {
            "student_id": v.student_id,
            "username": v.username,
            "name": v.name,
            "status": v.status.value,
            "timestamp": dt(v.timestamp),
        }
        for v in views
    ]
