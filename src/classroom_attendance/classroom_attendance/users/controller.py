from __future__ import annotations

from flask import Flask, session

from ..common.web import api_view, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/login", methods=["POST"], endpoint="login")
    @api_view
    def login():
        data = json_body()
        user = container.auth_service.authenticate(data.get("username", ""), data.get("password", ""))

        session.clear()
        session["profile_id"] = user.profile_id
        session["username"] = user.username
        session["name"] = user.name
        session["role"] = user.role.value
        return ok(profile_id=user.profile_id, name=user.name, role=user.role.value)

    @app.route("/api/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return ok()

    @app.route("/api/me", methods=["GET"], endpoint="me")
    @login_required()
    def me():
        return ok(
            profile_id=session["profile_id"],
            username=session.get("username"),
            name=session.get("name"),
            role=session.get("role"),
        )
