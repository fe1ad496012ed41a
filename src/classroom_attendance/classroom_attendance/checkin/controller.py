from __future__ import annotations

from flask import Flask

from ..common.web import api_view, class_to_dict, current_profile_id, json_body, login_required, ok
from ..container import Container
from ..core.enums import Role
from ..location.provider import ReportedPosition


def register(app: Flask, container: Container) -> None:
    student_only = login_required(Role.STUDENT)
    checkin = container.checkin_service

    @app.route("/api/student/active-class", methods=["GET"], endpoint="student_active_class")
    @student_only
    @api_view
    def student_active_class():
        class_room = checkin.active_class_for_student(current_profile_id())
        return ok(class_room=class_to_dict(class_room) if class_room else None)

    @app.route("/api/student/classes/<int:class_id>/location-check", methods=["POST"], endpoint="location_check")
    @student_only
    @api_view
    def location_check(class_id: int):
        data = json_body()
        verifier = checkin.check_location(current_profile_id(), class_id, ReportedPosition.from_payload(data))
        return ok(
            state=verifier.state.value,
            gate_required=verifier.gate_required,
            allowed=verifier.allows_submission(),
            distance=None if verifier.last_distance is None else round(verifier.last_distance, 1),
        )

    @app.route("/api/student/classes/<int:class_id>/checkin", methods=["POST"], endpoint="student_checkin")
    @student_only
    @api_view
    def student_checkin(class_id: int):
        checkin.check_in(current_profile_id(), class_id, image_base64=json_body().get("image_base64", ""))
        return ok(message="Attendance marked successfully!")
