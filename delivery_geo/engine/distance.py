"""Great-circle distance between coordinates (Haversine)."""

from __future__ import annotations

import math

from delivery_geo.common.constants import EARTH_RADIUS_KM
from delivery_geo.common.models import Coordinate


def calculate_distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance in kilometres on a sphere of mean Earth radius.

    Inputs are not range checked; validate with ``Coordinate`` at the boundary.
    """
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    # Rounding can push a just past 1 for antipodal points.
    a = min(max(a, 0.0), 1.0)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_between(origin: Coordinate, destination: Coordinate) -> float:
    return calculate_distance_km(origin.latitude, origin.longitude, destination.latitude, destination.longitude)
