from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol

from ..common.validators import require_coordinates
from ..core.exceptions import LocationUnavailable, ValidationError
from ..sessions.model import Coordinates


class GeolocationProvider(Protocol):
    """Single-shot "get current position"; raises LocationUnavailable on failure."""

    def current_position(self) -> Coordinates:
        raise NotImplementedError


@dataclass(frozen=True)
class ReportedPosition(GeolocationProvider):
    """Position the browser sampled and sent along with one request.

    The client either posts `latitude`/`longitude` or a `location_error`
    (permission denied, unsupported, timeout ...).
    """

    latitude: Optional[Any] = None
    longitude: Optional[Any] = None
    error: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any] | None) -> "ReportedPosition":
        payload = payload or {}
        return cls(
            latitude=payload.get("latitude"),
            longitude=payload.get("longitude"),
            error=(payload.get("location_error") or None),
        )

    def current_position(self) -> Coordinates:
        if self.error:
            raise LocationUnavailable(f"Could not get your location: {self.error}")
        if self.latitude is None or self.longitude is None:
            raise LocationUnavailable("Location was not provided")
        try:
            lat, lng = require_coordinates(self.latitude, self.longitude)
        except ValidationError as e:
            raise LocationUnavailable(str(e)) from e
        return Coordinates(latitude=lat, longitude=lng)
