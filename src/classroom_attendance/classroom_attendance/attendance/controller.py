from __future__ import annotations

from flask import Flask

from ..common.web import (
    api_view,
    current_profile_id,
    json_body,
    login_required,
    ok,
    session_to_dict,
    uploaded_usernames,
    views_to_list,
)
from ..container import Container
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import ValidationError


def parse_status(raw) -> AttendanceStatus:
    try:
        status = AttendanceStatus(str(raw or "").lower())
    except ValueError:
        raise ValidationError("Status must be present or absent")
    if status == AttendanceStatus.UNMARKED:
        raise ValidationError("Status must be present or absent")
    return status


def register(app: Flask, container: Container) -> None:
    teacher_only = login_required(Role.TEACHER)
    service = container.attendance_service

    @app.route("/api/classes/<int:class_id>/attendance", methods=["GET"], endpoint="class_attendance")
    @teacher_only
    @api_view
    def class_attendance(class_id: int):
        teacher_id = current_profile_id()
        class_room = service.get_owned_class(teacher_id, class_id)
        session = container.lifecycle.current_session(class_room.class_id)
        return ok(
            state=class_room.state.value,
            session=session_to_dict(session),
            students=views_to_list(service.view_for(class_room, session)),
        )

    @app.route(
        "/api/classes/<int:class_id>/sessions/<int:session_id>/attendance/<int:student_id>",
        methods=["PUT"],
        endpoint="set_attendance",
    )
    @teacher_only
    @api_view
    def set_attendance(class_id: int, session_id: int, student_id: int):
        status = parse_status(json_body().get("status"))
        views = service.set_attendance(current_profile_id(), class_id, session_id, student_id, status)
        return ok(students=views_to_list(views))

    @app.route(
        "/api/classes/<int:class_id>/sessions/<int:session_id>/attendance/<int:student_id>/toggle",
        methods=["POST"],
        endpoint="toggle_attendance",
    )
    @teacher_only
    @api_view
    def toggle_attendance(class_id: int, session_id: int, student_id: int):
        views = service.toggle_attendance(current_profile_id(), class_id, session_id, student_id)
        return ok(students=views_to_list(views))

    @app.route(
        "/api/classes/<int:class_id>/sessions/<int:session_id>/attendance",
        methods=["DELETE"],
        endpoint="reset_attendance",
    )
    @teacher_only
    @api_view
    def reset_attendance(class_id: int, session_id: int):
        views = service.reset_attendance(current_profile_id(), class_id, session_id)
        return ok(message="Attendance has been reset.", students=views_to_list(views))

    @app.route("/api/classes/<int:class_id>/attendance/upload", methods=["POST"], endpoint="upload_attendance")
    @teacher_only
    @api_view
    def upload_attendance(class_id: int):
        teacher_id = current_profile_id()
        result = service.mark_from_usernames(teacher_id, class_id, uploaded_usernames())
        return ok(
            marked=result.marked,
            invalid_count=result.invalid_count,
            invalid_sample=list(result.invalid_sample),
            students=views_to_list(service.current_view(teacher_id, class_id)),
        )
