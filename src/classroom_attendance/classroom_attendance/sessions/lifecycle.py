from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Optional

from ..classes.model import ClassRoom
from ..classes.repository import ClassRepository
from ..common.datetime_utils import now_local
from ..common.validators import require_positive_radius
from ..core.enums import LifecycleEventKind
from ..core.exceptions import (
    LocationUnavailable,
    NotFound,
    PermissionDenied,
    PersistenceFailure,
    SessionConflict,
    ValidationError,
)
from ..location.provider import GeolocationProvider
from .model import ClassSession, Geofence
from .repository import SessionRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LifecycleEvent:
    kind: LifecycleEventKind
    class_id: int
    session_id: Optional[int] = None


@dataclass(frozen=True)
class PendingOnlineToggle:
    """Online mode OFF requested for a running session that has no geofence yet."""

    class_id: int
    session_id: int
    requested_at: datetime


@dataclass(frozen=True)
class OnlineModeChange:
    class_room: ClassRoom
    applied: bool
    pending: Optional[PendingOnlineToggle] = None

    @property
    def requires_location(self) -> bool:
        return not self.applied and self.pending is not None


Listener = Callable[[LifecycleEvent], None]


class SessionLifecycleManager:
    """Start/stop state machine of a class (INACTIVE <-> ACTIVE).

    The class row's `active_session_id` is authoritative. Activation goes
    through a compare-and-swap on that column, so two clients racing to start
    the same class cannot both win. A failed transition never leaves a
    half-started class behind.

    The manager keeps two pieces of in-memory state per class: a cached
    pointer to the current session (always re-validated against the class
    row) and an optional pending online-mode toggle.
    """

    def __init__(self, classes: ClassRepository, sessions: SessionRepository):
        self._classes = classes
        self._sessions = sessions
        self._listeners: list[Listener] = []
        self._current: dict[int, ClassSession] = {}
        self._pending: dict[int, PendingOnlineToggle] = {}
        self._lock = threading.Lock()

    # -- observers -----------------------------------------------------------

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _emit(self, kind: LifecycleEventKind, class_id: int, session_id: Optional[int]) -> None:
        event = LifecycleEvent(kind=kind, class_id=int(class_id), session_id=session_id)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                # A broken dependent must not undo a committed transition.
                logger.exception("Lifecycle listener failed for %s", event)

    # -- queries -------------------------------------------------------------

    def _owned(self, teacher_id: int, class_id: int) -> ClassRoom:
        class_room = self._classes.get_by_id(int(class_id))
        if not class_room:
            raise NotFound("Class not found")
        if class_room.teacher_id != int(teacher_id):
            raise PermissionDenied("You don't have permission to manage this class")
        return class_room

    def current_session(self, class_id: int) -> Optional[ClassSession]:
        class_room = self._classes.get_by_id(int(class_id))
        if not class_room:
            raise NotFound("Class not found")
        if not class_room.is_active:
            self.reset_cache(class_room.class_id)
            return None

        with self._lock:
            cached = self._current.get(class_room.class_id)
        if cached and cached.session_id == class_room.active_session_id:
            return cached

        session = self._sessions.get_by_id(class_room.active_session_id)
        if session:
            with self._lock:
                self._current[class_room.class_id] = session
        return session

    def reset_cache(self, class_id: int) -> None:
        with self._lock:
            self._current.pop(int(class_id), None)

    def pending_online_toggle(self, class_id: int) -> Optional[PendingOnlineToggle]:
        with self._lock:
            return self._pending.get(int(class_id))

    # -- transitions ---------------------------------------------------------

    def start_class(
        self,
        teacher_id: int,
        class_id: int,
        *,
        radius=None,
        location: GeolocationProvider | None = None,
        now: datetime | None = None,
    ) -> ClassSession:
        class_room = self._owned(teacher_id, class_id)
        if class_room.is_active:
            raise SessionConflict("Class is already running")

        geofence = None
        if not class_room.online_mode:
            if radius is None:
                raise ValidationError("Attendance radius is required")
            geofence = self._capture_geofence(location, require_positive_radius(radius))

        now = now or now_local()
        session_id = self._sessions.create_session(class_id=class_room.class_id, start_time=now, geofence=geofence)

        try:
            activated = self._classes.activate_if_idle(class_room.class_id, session_id=session_id)
        except PersistenceFailure:
            self._discard_session(session_id)
            raise
        if not activated:
            self._discard_session(session_id)
            raise SessionConflict("Class was started from another device")

        session = ClassSession(
            session_id=session_id,
            class_id=class_room.class_id,
            start_time=now,
            geofence=geofence,
        )
        with self._lock:
            self._current[class_room.class_id] = session
            self._pending.pop(class_room.class_id, None)

        logger.info(
            "Class %s started session=%s online=%s radius=%s",
            class_room.class_id,
            session_id,
            class_room.online_mode,
            geofence.radius_m if geofence else None,
        )
        self._emit(LifecycleEventKind.STARTED, class_room.class_id, session_id)
        return session

    def stop_class(self, teacher_id: int, class_id: int, *, now: datetime | None = None) -> Optional[ClassSession]:
        """End the running session. Safe to call when nothing is running."""

        class_room = self._owned(teacher_id, class_id)
        now = now or now_local()

        session_id = class_room.active_session_id
        if session_id is not None:
            if not self._classes.deactivate(class_room.class_id, session_id=session_id):
                raise SessionConflict("Class state changed on another device; refresh and try again")
            self._sessions.end_session(session_id, end_time=now)
        else:
            # Close sessions left open by an interrupted stop.
            dangling = self._sessions.get_latest_open(class_room.class_id)
            while dangling is not None:
                self._sessions.end_session(dangling.session_id, end_time=now)
                session_id = dangling.session_id
                dangling = self._sessions.get_latest_open(class_room.class_id)

        with self._lock:
            self._current.pop(class_room.class_id, None)
            self._pending.pop(class_room.class_id, None)

        logger.info("Class %s stopped session=%s", class_room.class_id, session_id)
        self._emit(LifecycleEventKind.STOPPED, class_room.class_id, session_id)
        return self._sessions.get_by_id(session_id) if session_id is not None else None

    def set_online_mode(
        self,
        teacher_id: int,
        class_id: int,
        enabled: bool,
        *,
        now: datetime | None = None,
    ) -> OnlineModeChange:
        """Switch online mode.

        Turning it OFF while a geofence-less session runs is deferred until the
        teacher supplies a location and radius (see complete_pending_online_toggle).
        """

        class_room = self._owned(teacher_id, class_id)
        enabled = bool(enabled)

        if class_room.online_mode == enabled:
            with self._lock:
                self._pending.pop(class_room.class_id, None)
            return OnlineModeChange(class_room=class_room, applied=True)

        if not enabled and class_room.is_active:
            session = self.current_session(class_room.class_id)
            if session and not session.has_geofence:
                pending = PendingOnlineToggle(
                    class_id=class_room.class_id,
                    session_id=session.session_id,
                    requested_at=now or now_local(),
                )
                with self._lock:
                    self._pending[class_room.class_id] = pending
                logger.info("Class %s online mode OFF waits for a location", class_room.class_id)
                return OnlineModeChange(class_room=class_room, applied=False, pending=pending)

        return self._apply_online_mode(class_room, enabled)

    def complete_pending_online_toggle(
        self,
        teacher_id: int,
        class_id: int,
        *,
        radius,
        location: GeolocationProvider | None,
    ) -> OnlineModeChange:
        class_room = self._owned(teacher_id, class_id)
        pending = self.pending_online_toggle(class_room.class_id)
        if not pending:
            raise ValidationError("No online mode change is waiting for a location")
        radius = require_positive_radius(radius)

        if class_room.active_session_id != pending.session_id:
            # The session ended meanwhile; nothing left to fence.
            return self._apply_online_mode(class_room, False)

        # On failure the pending toggle stays so the teacher can retry or cancel.
        geofence = self._capture_geofence(location, radius)
        if not self._sessions.update_geofence(pending.session_id, geofence=geofence):
            raise PersistenceFailure("Failed to save the session location")
        self.reset_cache(class_room.class_id)
        self._emit(LifecycleEventKind.GEOFENCE_UPDATED, class_room.class_id, pending.session_id)

        return self._apply_online_mode(class_room, False)

    def cancel_pending_online_toggle(self, teacher_id: int, class_id: int) -> bool:
        class_room = self._owned(teacher_id, class_id)
        with self._lock:
            return self._pending.pop(class_room.class_id, None) is not None

    def edit_radius(
        self,
        teacher_id: int,
        class_id: int,
        *,
        radius,
        location: GeolocationProvider | None,
    ) -> ClassSession:
        """Overwrite the running session's geofence from a freshly sampled position."""

        class_room = self._owned(teacher_id, class_id)
        if not class_room.is_active:
            raise ValidationError("Class is not running")
        radius = require_positive_radius(radius)

        geofence = self._capture_geofence(location, radius)
        if not self._sessions.update_geofence(class_room.active_session_id, geofence=geofence):
            raise PersistenceFailure("Failed to update the attendance radius")

        self.reset_cache(class_room.class_id)
        session = self.current_session(class_room.class_id)
        logger.info("Class %s radius set to %.0fm", class_room.class_id, radius)
        self._emit(LifecycleEventKind.GEOFENCE_UPDATED, class_room.class_id, class_room.active_session_id)
        return session

    # -- helpers -------------------------------------------------------------

    @staticmethod
    def _capture_geofence(location: GeolocationProvider | None, radius: float) -> Geofence:
        if location is None:
            raise LocationUnavailable("Geolocation is not supported on this device")
        position = location.current_position()
        return Geofence(latitude=position.latitude, longitude=position.longitude, radius_m=radius)

    def _apply_online_mode(self, class_room: ClassRoom, enabled: bool) -> OnlineModeChange:
        if not self._classes.set_online_mode(class_room.class_id, enabled=enabled):
            raise PersistenceFailure("Failed to change online mode")
        with self._lock:
            self._pending.pop(class_room.class_id, None)

        logger.info("Class %s online mode %s", class_room.class_id, "ON" if enabled else "OFF")
        self._emit(LifecycleEventKind.ONLINE_MODE_CHANGED, class_room.class_id, class_room.active_session_id)
        return OnlineModeChange(class_room=replace(class_room, online_mode=enabled), applied=True)

    def _discard_session(self, session_id: int) -> None:
        try:
            self._sessions.delete_session(session_id)
        except PersistenceFailure:
            logger.exception("Could not remove orphan session %s", session_id)
