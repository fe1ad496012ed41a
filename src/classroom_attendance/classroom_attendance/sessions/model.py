from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Geofence:
    """Teacher-set check-in area: center + radius in meters."""

    latitude: float
    longitude: float
    radius_m: float


@dataclass(frozen=True)
class ClassSession:
    """Domain entity: one timed meeting of a class.

    A session with an end_time is terminal.
    """

    session_id: int
    class_id: int
    start_time: datetime
    end_time: Optional[datetime] = None
    geofence: Optional[Geofence] = None

    @property
    def is_open(self) -> bool:
        return self.end_time is None

    @property
    def has_geofence(self) -> bool:
        return self.geofence is not None
