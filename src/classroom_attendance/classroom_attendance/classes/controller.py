from __future__ import annotations

from flask import Flask

from ..common.web import (
    api_view,
    class_to_dict,
    current_profile_id,
    json_body,
    login_required,
    ok,
    uploaded_usernames,
)
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    teacher_only = login_required(Role.TEACHER)

    def _roster_payload(profiles):
        return [{"student_id": p.profile_id, "username": p.username, "name": p.name} for p in profiles]

    @app.route("/api/classes", methods=["GET"], endpoint="list_classes")
    @teacher_only
    @api_view
    def list_classes():
        classes = container.class_service.list_for_teacher(current_profile_id())
        return ok(classes=[class_to_dict(c) for c in classes])

    @app.route("/api/classes", methods=["POST"], endpoint="create_class")
    @teacher_only
    @api_view
    def create_class():
        data = json_body()
        class_id = container.class_service.create_class(
            teacher_id=current_profile_id(),
            name=data.get("name", ""),
            student_ids=data.get("student_ids") or [],
        )
        return ok(class_id=class_id), 201

    @app.route("/api/classes/<int:class_id>", methods=["DELETE"], endpoint="delete_class")
    @teacher_only
    @api_view
    def delete_class(class_id: int):
        container.class_service.delete_class(teacher_id=current_profile_id(), class_id=class_id)
        return ok(message="Class has been deleted successfully.")

    @app.route("/api/classes/<int:class_id>/roster", methods=["GET"], endpoint="class_roster")
    @teacher_only
    @api_view
    def class_roster(class_id: int):
        return ok(students=_roster_payload(container.class_service.roster(current_profile_id(), class_id)))

    @app.route("/api/classes/<int:class_id>/roster", methods=["PUT"], endpoint="update_roster")
    @teacher_only
    @api_view
    def update_roster(class_id: int):
        students = container.class_service.update_participants(
            teacher_id=current_profile_id(),
            class_id=class_id,
            student_ids=json_body().get("student_ids") or [],
        )
        return ok(students=_roster_payload(students))

    @app.route("/api/classes/<int:class_id>/roster/bulk", methods=["POST"], endpoint="bulk_add_students")
    @teacher_only
    @api_view
    def bulk_add_students(class_id: int):
        added = container.class_service.bulk_add_students(
            teacher_id=current_profile_id(), class_id=class_id, usernames=uploaded_usernames()
        )
        return ok(added=added)
