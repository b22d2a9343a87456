"""Tiered delivery fee schedule."""

from __future__ import annotations

import math

from delivery_geo.common.errors import NegativeDistanceError
from delivery_geo.common.models import FeeSchedule

DEFAULT_FEE_SCHEDULE = FeeSchedule()


def calculate_delivery_fee(distance_km: float, schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE) -> float:
    """Map a distance to a fee.

    Tier bounds are inclusive, so a distance sitting exactly on a bound pays
    the lower tier. Past the last tier every started kilometre adds
    ``schedule.extra_km_fee``: 15.1 km pays one extra kilometre, not 0.1.
    """
    if math.isnan(distance_km) or math.isinf(distance_km) or distance_km < 0:
        raise NegativeDistanceError(f"Distance must be a finite, non-negative number of km, got {distance_km}")

    for max_km, fee in schedule.tiers:
        if distance_km <= max_km:
            return float(fee)

    last_km, last_fee = schedule.last_tier
    extra_km = math.ceil(distance_km - last_km)
    return float(last_fee + extra_km * schedule.extra_km_fee)
