from datetime import datetime

import pytest

from src.classroom_attendance.classroom_attendance.core.enums import LifecycleEventKind
from src.classroom_attendance.classroom_attendance.core.exceptions import (
    LocationUnavailable,
    PermissionDenied,
    SessionConflict,
    ValidationError,
)
from src.classroom_attendance.classroom_attendance.location.provider import ReportedPosition

from tests.fakes import CAMPUS, OTHER_TEACHER, TEACHER

HERE = ReportedPosition(latitude=CAMPUS[0], longitude=CAMPUS[1])
DENIED = ReportedPosition(error="User denied Geolocation")


def _start(world, **kwargs):
    kwargs.setdefault("radius", 50)
    kwargs.setdefault("location", HERE)
    return world.container.lifecycle.start_class(TEACHER.profile_id, world.class_id, **kwargs)


def test_offline_start_captures_geofence(world, fixed_now):
    session = _start(world, now=fixed_now)

    class_room = world.classes.get_by_id(world.class_id)
    assert class_room.active_session_id == session.session_id
    assert session.start_time == fixed_now
    assert session.geofence.radius_m == 50
    assert (session.geofence.latitude, session.geofence.longitude) == CAMPUS
    assert world.container.lifecycle.current_session(world.class_id) == session


def test_offline_start_with_denied_location_changes_nothing(world):
    with pytest.raises(LocationUnavailable):
        _start(world, location=DENIED)

    assert world.classes.get_by_id(world.class_id).active_session_id is None
    assert world.sessions.sessions == {}


@pytest.mark.parametrize("radius", [None, 0, -10, "far", 0.5, 1_000_000])
def test_offline_start_requires_positive_radius(world, radius):
    with pytest.raises(ValidationError):
        _start(world, radius=radius)
    assert world.sessions.sessions == {}


def test_online_start_needs_no_location(world):
    world.classes.set_online_mode(world.class_id, enabled=True)
    session = world.container.lifecycle.start_class(TEACHER.profile_id, world.class_id)
    assert session.geofence is None
    assert world.classes.get_by_id(world.class_id).is_active


def test_start_twice_is_a_conflict(world):
    _start(world)
    with pytest.raises(SessionConflict):
        _start(world)
    assert len(world.sessions.sessions) == 1


def test_lost_activation_race_removes_created_session(world):
    world.classes.steal_activation_with = 999
    with pytest.raises(SessionConflict):
        _start(world)
    assert world.sessions.sessions == {}


def test_only_owner_can_start(world):
    with pytest.raises(PermissionDenied):
        world.container.lifecycle.start_class(OTHER_TEACHER.profile_id, world.class_id, radius=50, location=HERE)


def test_stop_ends_session_and_is_idempotent(world):
    started = _start(world)
    end = datetime(2025, 3, 10, 10, 0, 0)

    stopped = world.container.lifecycle.stop_class(TEACHER.profile_id, world.class_id, now=end)
    assert stopped.session_id == started.session_id
    assert stopped.end_time == end
    assert world.classes.get_by_id(world.class_id).active_session_id is None
    assert world.container.lifecycle.current_session(world.class_id) is None

    assert world.container.lifecycle.stop_class(TEACHER.profile_id, world.class_id) is None
    assert world.sessions.get_by_id(started.session_id).end_time == end


def test_stop_closes_dangling_open_session(world, fixed_now):
    sid = world.sessions.create_session(class_id=world.class_id, start_time=fixed_now)
    stopped = world.container.lifecycle.stop_class(TEACHER.profile_id, world.class_id, now=fixed_now)
    assert stopped.session_id == sid
    assert not world.sessions.get_by_id(sid).is_open


def test_listeners_receive_events_and_failures_are_contained(world):
    seen = []

    def broken(event):
        raise RuntimeError("boom")

    world.container.lifecycle.subscribe(broken)
    world.container.lifecycle.subscribe(lambda e: seen.append(e.kind))

    _start(world)
    world.container.lifecycle.stop_class(TEACHER.profile_id, world.class_id)

    assert seen == [LifecycleEventKind.STARTED, LifecycleEventKind.STOPPED]


def test_online_mode_off_during_geofenceless_session_waits_for_location(world):
    lifecycle = world.container.lifecycle
    world.classes.set_online_mode(world.class_id, enabled=True)
    session = lifecycle.start_class(TEACHER.profile_id, world.class_id)

    change = lifecycle.set_online_mode(TEACHER.profile_id, world.class_id, False)
    assert not change.applied
    assert change.requires_location
    assert world.classes.get_by_id(world.class_id).online_mode is True

    with pytest.raises(LocationUnavailable):
        lifecycle.complete_pending_online_toggle(TEACHER.profile_id, world.class_id, radius=40, location=DENIED)
    assert lifecycle.pending_online_toggle(world.class_id) is not None

    change = lifecycle.complete_pending_online_toggle(TEACHER.profile_id, world.class_id, radius=40, location=HERE)
    assert change.applied
    assert world.classes.get_by_id(world.class_id).online_mode is False
    assert world.sessions.get_by_id(session.session_id).geofence.radius_m == 40
    assert lifecycle.pending_online_toggle(world.class_id) is None


def test_cancel_pending_online_toggle(world):
    lifecycle = world.container.lifecycle
    world.classes.set_online_mode(world.class_id, enabled=True)
    lifecycle.start_class(TEACHER.profile_id, world.class_id)
    lifecycle.set_online_mode(TEACHER.profile_id, world.class_id, False)

    assert lifecycle.cancel_pending_online_toggle(TEACHER.profile_id, world.class_id)
    assert not lifecycle.cancel_pending_online_toggle(TEACHER.profile_id, world.class_id)
    assert world.classes.get_by_id(world.class_id).online_mode is True
    with pytest.raises(ValidationError):
        lifecycle.complete_pending_online_toggle(TEACHER.profile_id, world.class_id, radius=40, location=HERE)


def test_online_mode_toggle_without_running_session_applies_directly(world):
    change = world.container.lifecycle.set_online_mode(TEACHER.profile_id, world.class_id, True)
    assert change.applied
    assert change.class_room.online_mode is True
    change = world.container.lifecycle.set_online_mode(TEACHER.profile_id, world.class_id, False)
    assert change.applied
    assert world.classes.get_by_id(world.class_id).online_mode is False


def test_edit_radius_resamples_location(world):
    session = _start(world, radius=100)
    moved = ReportedPosition(latitude=CAMPUS[0] + 0.001, longitude=CAMPUS[1])

    updated = world.container.lifecycle.edit_radius(TEACHER.profile_id, world.class_id, radius=25, location=moved)

    assert updated.session_id == session.session_id
    assert updated.geofence.radius_m == 25
    assert updated.geofence.latitude == pytest.approx(CAMPUS[0] + 0.001)


def test_edit_radius_requires_running_class(world):
    with pytest.raises(ValidationError):
        world.container.lifecycle.edit_radius(TEACHER.profile_id, world.class_id, radius=25, location=HERE)
