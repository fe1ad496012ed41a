from __future__ import annotations

import math
from typing import Any

from ..core.constants import MAX_RADIUS_METERS, MIN_RADIUS_METERS
from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_positive_radius(value) -> float:
    try:
        radius = float(value)
    except (TypeError, ValueError):
        raise ValidationError("Radius must be a number of meters")
    if not math.isfinite(radius) or radius <= 0:
        raise ValidationError("Radius must be a positive number of meters")
    if not MIN_RADIUS_METERS <= radius <= MAX_RADIUS_METERS:
        raise ValidationError(f"Radius must be between {MIN_RADIUS_METERS} and {MAX_RADIUS_METERS} meters")
    return round(radius, 2)


def require_coordinates(lat, lng) -> tuple[float, float]:
    try:
        lat_f, lng_f = float(lat), float(lng)
    except (TypeError, ValueError):
        raise ValidationError("Coordinates must be numbers")
    if not (-90.0 <= lat_f <= 90.0) or not (-180.0 <= lng_f <= 180.0):
        raise ValidationError("Coordinates are out of range")
    return lat_f, lng_f


def require_ids(values: Any) -> list[int]:
    """Distinct integer ids in first-seen order."""
    if isinstance(values, (str, bytes)) or not hasattr(values, "__iter__"):
        raise ValidationError("Student ids must be a list of integers")
    ids: list[int] = []
    for v in values:
        if isinstance(v, bool):
            raise ValidationError("Student ids must be integers")
        try:
            ids.append(int(v))
        except (TypeError, ValueError):
            raise ValidationError("Student ids must be integers")
    return list(dict.fromkeys(ids))


def require_flag(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"{field_name} must be true or false")
    return value
