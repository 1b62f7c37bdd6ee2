from __future__ import annotations

import math
from typing import Tuple, Union

from app.errors import InvalidArgument

# Geoapify place categories that count as a "city" for the nearby lookup
POPULATED_PLACE_CATEGORIES: Tuple[str, ...] = (
    "populated_place.city",
    "populated_place.town",
    "populated_place.village",
)

RADIUS_STEP_KM = 5
RADIUS_MAX_KM = 50
# 0 means the nearby lookup is disabled
RADIUS_OPTIONS_KM: Tuple[int, ...] = tuple(range(0, RADIUS_MAX_KM + 1, RADIUS_STEP_KM))


def coerce_radius_km(radius: Union[int, float, str, None]) -> float:
    """
    Parse a radius coming off the wire into kilometres.

    Numeric strings are accepted. Anything that is not a finite,
    non-negative number raises InvalidArgument.
    """
    if isinstance(radius, bool) or radius is None:
        raise InvalidArgument("Missing or invalid 'radius' parameter.")
    if isinstance(radius, str):
        try:
            value = float(radius.strip())
        except ValueError:
            raise InvalidArgument("Missing or invalid 'radius' parameter.") from None
    elif isinstance(radius, (int, float)):
        value = float(radius)
    else:
        raise InvalidArgument("Missing or invalid 'radius' parameter.")

    if not math.isfinite(value) or value < 0:
        raise InvalidArgument("Missing or invalid 'radius' parameter.")
    return value


def radius_filter(lat: float, lng: float, radius_km: float) -> str:
    """Geoapify circular geofence: ``circle:<lng>,<lat>,<meters>``."""
    meters = radius_km * 1000
    if float(meters).is_integer():
        meters = int(meters)
    return f"circle:{lng},{lat},{meters}"
