from __future__ import annotations

from flask import Flask, request

from ..attendance.controller import parse_status
from ..common.datetime_utils import now_local, parse_iso_date
from ..common.web import api_view, current_profile_id, json_body, login_required, ok, session_to_dict, views_to_list
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import ValidationError


def _requested_day():
    raw = request.args.get("date")
    if not raw:
        return now_local().date()
    try:
        return parse_iso_date(raw)
    except ValueError:
        raise ValidationError("Date must be YYYY-MM-DD")


def register(app: Flask, container: Container) -> None:
    teacher_only = login_required(Role.TEACHER)
    history = container.history_service

    @app.route("/api/classes/<int:class_id>/sessions", methods=["GET"], endpoint="sessions_for_date")
    @teacher_only
    @api_view
    def sessions_for_date(class_id: int):
        day = _requested_day()
        sessions = history.sessions_for_date(current_profile_id(), class_id, day)
        return ok(date=day.isoformat(), sessions=[session_to_dict(s) for s in sessions])

    @app.route(
        "/api/classes/<int:class_id>/sessions/<int:session_id>/records",
        methods=["GET"],
        endpoint="session_records",
    )
    @teacher_only
    @api_view
    def session_records(class_id: int, session_id: int):
        views = history.session_records(current_profile_id(), class_id, session_id)
        return ok(students=views_to_list(views))

    @app.route(
        "/api/classes/<int:class_id>/sessions/<int:session_id>/records/<int:student_id>",
        methods=["PUT"],
        endpoint="edit_session_record",
    )
    @teacher_only
    @api_view
    def edit_session_record(class_id: int, session_id: int, student_id: int):
        status = parse_status(json_body().get("status"))
        views = history.set_status(current_profile_id(), class_id, session_id, student_id, status)
        return ok(students=views_to_list(views))

    @app.route(
        "/api/classes/<int:class_id>/sessions/<int:session_id>",
        methods=["DELETE"],
        endpoint="delete_session",
    )
    @teacher_only
    @api_view
    def delete_session(class_id: int, session_id: int):
        history.delete_session(current_profile_id(), class_id, session_id)
        return ok(message="Session deleted.")
