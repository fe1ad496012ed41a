from __future__ import annotations

import logging
from typing import Optional

from ..common.geo import distance_meters
from ..core.constants import LOCATION_SLACK_METERS
from ..core.enums import LocationCheck
from ..core.exceptions import LocationUnavailable, OutOfRange, ValidationError
from ..sessions.model import Geofence
from .provider import GeolocationProvider

logger = logging.getLogger(__name__)


class LocationVerifier:
    """Student-side gate: is the student inside the session geofence?

    States: PENDING -> CHECKING -> VALID | OUT | LOCATION_ERROR. Each `check`
    samples the provider once; there are no retries, the student re-triggers.
    Sessions without a geofence (or classes in online mode) skip the gate.
    """

    def __init__(
        self,
        geofence: Optional[Geofence],
        *,
        online_mode: bool = False,
        slack_m: float = LOCATION_SLACK_METERS,
    ):
        self._geofence = geofence
        self._online_mode = bool(online_mode)
        self._slack_m = float(slack_m)
        self.state = LocationCheck.PENDING
        self.last_distance: Optional[float] = None

    @property
    def gate_required(self) -> bool:
        return self._geofence is not None and not self._online_mode

    def is_within(self, distance: float) -> bool:
        return distance <= self._geofence.radius_m + self._slack_m

    def check(self, provider: GeolocationProvider) -> LocationCheck:
        if self._geofence is None:
            raise ValidationError("This session has no attendance area")

        self.state = LocationCheck.CHECKING
        try:
            position = provider.current_position()
        except LocationUnavailable as e:
            logger.info("Student location unavailable: %s", e)
            self.state = LocationCheck.LOCATION_ERROR
            self.last_distance = None
            return self.state

        distance = distance_meters(
            position.latitude,
            position.longitude,
            self._geofence.latitude,
            self._geofence.longitude,
        )
        self.last_distance = distance
        self.state = LocationCheck.VALID if self.is_within(distance) else LocationCheck.OUT
        return self.state

    def allows_submission(self) -> bool:
        return not self.gate_required or self.state == LocationCheck.VALID

    def require_submission_allowed(self) -> None:
        if self.allows_submission():
            return
        if self.state == LocationCheck.OUT:
            raise OutOfRange(
                "You're currently outside the attendance range "
                f"({self.last_distance:.1f} meters from the allowed location)"
            )
        if self.state == LocationCheck.LOCATION_ERROR:
            raise LocationUnavailable(
                "Could not determine your location. Please allow permission and enable location."
            )
        raise ValidationError("Check your location before marking attendance")
