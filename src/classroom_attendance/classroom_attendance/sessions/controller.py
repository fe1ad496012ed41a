from __future__ import annotations

from flask import Flask

from ..common.validators import require_flag
from ..common.web import (
    api_view,
    class_to_dict,
    current_profile_id,
    json_body,
    login_required,
    ok,
    session_to_dict,
    views_to_list,
)
from ..container import Container
from ..core.enums import Role
from ..location.provider import ReportedPosition


def register(app: Flask, container: Container) -> None:
    teacher_only = login_required(Role.TEACHER)

    @app.route("/api/classes/<int:class_id>/start", methods=["POST"], endpoint="start_class")
    @teacher_only
    @api_view
    def start_class(class_id: int):
        data = json_body()
        teacher_id = current_profile_id()
        session = container.lifecycle.start_class(
            teacher_id,
            class_id,
            radius=data.get("radius"),
            location=ReportedPosition.from_payload(data),
        )
        class_room = container.attendance_service.get_owned_class(teacher_id, class_id)
        return ok(
            message="Session started. Students can now check in.",
            session=session_to_dict(session),
            students=views_to_list(container.attendance_service.view_for(class_room, session)),
        )

    @app.route("/api/classes/<int:class_id>/stop", methods=["POST"], endpoint="stop_class")
    @teacher_only
    @api_view
    def stop_class(class_id: int):
        teacher_id = current_profile_id()
        session = container.lifecycle.stop_class(teacher_id, class_id)
        return ok(
            message="Session ended and saved.",
            session=session_to_dict(session),
            students=views_to_list(container.attendance_service.current_view(teacher_id, class_id)),
        )

    @app.route("/api/classes/<int:class_id>/session", methods=["GET"], endpoint="current_session")
    @teacher_only
    @api_view
    def current_session(class_id: int):
        class_room = container.attendance_service.get_owned_class(current_profile_id(), class_id)
        pending = container.lifecycle.pending_online_toggle(class_id)
        return ok(
            session=session_to_dict(container.lifecycle.current_session(class_room.class_id)),
            pending_online_toggle=pending is not None,
        )

    @app.route("/api/classes/<int:class_id>/online-mode", methods=["POST"], endpoint="set_online_mode")
    @teacher_only
    @api_view
    def set_online_mode(class_id: int):
        change = container.lifecycle.set_online_mode(
            current_profile_id(), class_id, require_flag(json_body().get("enabled"), "enabled")
        )
        return ok(
            applied=change.applied,
            requires_location=change.requires_location,
            class_room=class_to_dict(change.class_room),
        )

    @app.route("/api/classes/<int:class_id>/online-mode/location", methods=["POST"], endpoint="complete_online_mode")
    @teacher_only
    @api_view
    def complete_online_mode(class_id: int):
        data = json_body()
        change = container.lifecycle.complete_pending_online_toggle(
            current_profile_id(),
            class_id,
            radius=data.get("radius"),
            location=ReportedPosition.from_payload(data),
        )
        return ok(applied=change.applied, class_room=class_to_dict(change.class_room))

    @app.route("/api/classes/<int:class_id>/online-mode/pending", methods=["DELETE"], endpoint="cancel_online_mode")
    @teacher_only
    @api_view
    def cancel_online_mode(class_id: int):
        return ok(cancelled=container.lifecycle.cancel_pending_online_toggle(current_profile_id(), class_id))

    @app.route("/api/classes/<int:class_id>/radius", methods=["POST"], endpoint="edit_radius")
    @teacher_only
    @api_view
    def edit_radius(class_id: int):
        data = json_body()
        session = container.lifecycle.edit_radius(
            current_profile_id(),
            class_id,
            radius=data.get("radius"),
            location=ReportedPosition.from_payload(data),
        )
        return ok(session=session_to_dict(session))
