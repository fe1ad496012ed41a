from __future__ import annotations

import io
from dataclasses import replace

import pytest
from werkzeug.security import generate_password_hash

from src.classroom_attendance.classroom_attendance.main import create_app

from tests.fakes import CAMPUS, STUDENTS, TEACHER, north_of

PASSWORD = "123456"


@pytest.fixture
def app(world, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    for profile in (TEACHER, *STUDENTS):
        world.profiles.add(replace(profile, password_hash=generate_password_hash(PASSWORD)))
    return create_app(container=world.container)


def _login(app, username):
    client = app.test_client()
    r = client.post("/api/login", json={"username": username, "password": PASSWORD})
    assert r.status_code == 200, r.get_json()
    return client


def _start(client, class_id, **extra):
    payload = {"radius": 50, "latitude": CAMPUS[0], "longitude": CAMPUS[1], **extra}
    return client.post(f"/api/classes/{class_id}/start", json=payload)


def test_login_rejects_bad_password(app):
    r = app.test_client().post("/api/login", json={"username": "teacher1", "password": "nope"})
    assert r.status_code == 401
    assert r.get_json()["success"] is False


def test_me_requires_login(app):
    assert app.test_client().get("/api/me").status_code == 401


def test_student_cannot_use_teacher_endpoints(app, world):
    client = _login(app, "student1")
    assert client.post(f"/api/classes/{world.class_id}/start", json={}).status_code == 403


def test_full_checkin_flow(app, world):
    teacher = _login(app, "teacher1")
    r = _start(teacher, world.class_id)
    assert r.status_code == 200
    body = r.get_json()
    session_id = body["session"]["session_id"]
    assert body["session"]["radius"] == 50
    assert {s["status"] for s in body["students"]} == {"absent"}

    student = _login(app, "student1")
    active = student.get("/api/student/active-class").get_json()["class_room"]
    assert active["class_id"] == world.class_id

    lat, lon = north_of(*CAMPUS, 60)
    r = student.post(
        f"/api/student/classes/{world.class_id}/location-check", json={"latitude": lat, "longitude": lon}
    )
    assert r.get_json()["state"] == "valid"
    assert r.get_json()["allowed"] is True

    r = student.post(f"/api/student/classes/{world.class_id}/checkin", json={"image_base64": "QUJD"})
    assert r.status_code == 200

    r = teacher.get(f"/api/classes/{world.class_id}/attendance")
    statuses = {s["student_id"]: s["status"] for s in r.get_json()["students"]}
    assert statuses == {11: "present", 12: "absent", 13: "absent"}

    r = teacher.post(f"/api/classes/{world.class_id}/stop")
    assert r.status_code == 200
    assert r.get_json()["session"]["session_id"] == session_id
    assert r.get_json()["session"]["end_time"] is not None


def test_out_of_range_checkin_is_rejected(app, world):
    _start(_login(app, "teacher1"), world.class_id)
    student = _login(app, "student2")
    lat, lon = north_of(*CAMPUS, 500)
    r = student.post(
        f"/api/student/classes/{world.class_id}/location-check", json={"latitude": lat, "longitude": lon}
    )
    assert r.get_json()["state"] == "out"

    r = student.post(f"/api/student/classes/{world.class_id}/checkin", json={"image_base64": "QUJD"})
    assert r.status_code == 422
    assert r.get_json()["error"] == "OutOfRange"


def test_start_with_location_error_leaves_class_inactive(app, world):
    teacher = _login(app, "teacher1")
    r = teacher.post(
        f"/api/classes/{world.class_id}/start", json={"radius": 50, "location_error": "permission denied"}
    )
    assert r.status_code == 422
    assert world.classes.get_by_id(world.class_id).active_session_id is None

    r = teacher.get(f"/api/classes/{world.class_id}/attendance")
    assert r.get_json()["state"] == "inactive"
    assert {s["status"] for s in r.get_json()["students"]} == {"unmarked"}


def test_start_twice_conflicts(app, world):
    teacher = _login(app, "teacher1")
    assert _start(teacher, world.class_id).status_code == 200
    assert _start(teacher, world.class_id).status_code == 409


def test_csv_upload_marks_present(app, world):
    teacher = _login(app, "teacher1")
    _start(teacher, world.class_id)

    r = teacher.post(
        f"/api/classes/{world.class_id}/attendance/upload",
        data={"file": (io.BytesIO(b"student1\nstudent3,extra\nghost\n\n"), "list.csv")},
        content_type="multipart/form-data",
    )
    body = r.get_json()
    assert r.status_code == 200
    assert (body["marked"], body["invalid_count"], body["invalid_sample"]) == (2, 1, ["ghost"])


def test_upload_rejects_non_csv(app, world):
    teacher = _login(app, "teacher1")
    _start(teacher, world.class_id)
    r = teacher.post(
        f"/api/classes/{world.class_id}/attendance/upload",
        data={"file": (io.BytesIO(b"student1"), "list.txt")},
        content_type="multipart/form-data",
    )
    assert r.status_code == 400


def test_set_attendance_validates_status(app, world):
    teacher = _login(app, "teacher1")
    session_id = _start(teacher, world.class_id).get_json()["session"]["session_id"]
    url = f"/api/classes/{world.class_id}/sessions/{session_id}/attendance/12"

    assert teacher.put(url, json={"status": "late"}).status_code == 400
    r = teacher.put(url, json={"status": "present"})
    assert {s["student_id"]: s["status"] for s in r.get_json()["students"]}[12] == "present"


def test_history_endpoints(app, world):
    teacher = _login(app, "teacher1")
    session_id = _start(teacher, world.class_id).get_json()["session"]["session_id"]
    teacher.post(f"/api/classes/{world.class_id}/stop")
    day = world.sessions.get_by_id(session_id).start_time.date().isoformat()

    r = teacher.get(f"/api/classes/{world.class_id}/sessions", query_string={"date": day})
    assert [s["session_id"] for s in r.get_json()["sessions"]] == [session_id]
    assert teacher.get(f"/api/classes/{world.class_id}/sessions?date=10-03-2025").status_code == 400

    r = teacher.put(
        f"/api/classes/{world.class_id}/sessions/{session_id}/records/13", json={"status": "present"}
    )
    assert {s["student_id"]: s["status"] for s in r.get_json()["students"]}[13] == "present"

    assert teacher.delete(f"/api/classes/{world.class_id}/sessions/{session_id}").status_code == 200
    r = teacher.get(f"/api/classes/{world.class_id}/sessions/{session_id}/records")
    assert r.status_code == 404


def test_class_management_endpoints(app, world):
    teacher = _login(app, "teacher1")
    r = teacher.post("/api/classes", json={"name": "Biology", "student_ids": [11]})
    assert r.status_code == 201
    class_id = r.get_json()["class_id"]

    r = teacher.post(
        f"/api/classes/{class_id}/roster/bulk",
        data={"file": (io.BytesIO(b"student2\nstudent3\n"), "roster.csv")},
        content_type="multipart/form-data",
    )
    assert r.get_json()["added"] == 2

    r = teacher.put(f"/api/classes/{class_id}/roster", json={"student_ids": [13]})
    assert [s["username"] for s in r.get_json()["students"]] == ["student3"]

    assert teacher.delete(f"/api/classes/{class_id}").status_code == 200
    assert class_id not in {c["class_id"] for c in teacher.get("/api/classes").get_json()["classes"]}


@pytest.mark.parametrize("enabled", ["false", 0, None])
def test_online_mode_requires_boolean_flag(app, world, enabled):
    teacher = _login(app, "teacher1")
    assert _start(teacher, world.class_id).status_code == 200
    r = teacher.post(f"/api/classes/{world.class_id}/online-mode", json={"enabled": enabled})
    assert r.status_code == 400
    assert "enabled" in r.get_json()["message"]
    assert world.classes.get_by_id(world.class_id).online_mode is False


def test_roster_rejects_non_integer_ids(app, world):
    teacher = _login(app, "teacher1")
    r = teacher.post("/api/classes", json={"name": "Biology", "student_ids": ["abc"]})
    assert r.status_code == 400
    r = teacher.put(f"/api/classes/{world.class_id}/roster", json={"student_ids": [11, None]})
    assert r.status_code == 400
    assert [s.profile_id for s in world.classes.list_roster(world.class_id)] == [11, 12, 13]
