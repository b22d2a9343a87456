"""Delivery quote composed from distance, fee and service area checks."""

from __future__ import annotations

from delivery_geo.common.models import Coordinate, DeliveryQuote, FeeSchedule, ServiceAreaBoundary
from delivery_geo.engine.distance import distance_between
from delivery_geo.engine.fees import DEFAULT_FEE_SCHEDULE, calculate_delivery_fee
from delivery_geo.engine.service_area import DEFAULT_SERVICE_AREA, coordinate_in_service_area


def quote_delivery(
    store: Coordinate,
    customer: Coordinate,
    *,
    boundary: ServiceAreaBoundary = DEFAULT_SERVICE_AREA,
    schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE,
) -> DeliveryQuote:
    distance_km = distance_between(store, customer)
    return DeliveryQuote(
        distance_km=distance_km,
        fee=calculate_delivery_fee(distance_km, schedule),
        within_service_area=coordinate_in_service_area(customer, boundary),
    )
