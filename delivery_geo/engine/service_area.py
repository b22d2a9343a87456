"""Rectangular service area containment."""

from __future__ import annotations

from typing import Sequence, Union

from delivery_geo.common.constants import MODIMOLLE_BBOX
from delivery_geo.common.models import Coordinate, ServiceAreaBoundary

DEFAULT_SERVICE_AREA = ServiceAreaBoundary.from_bbox(MODIMOLLE_BBOX)

BoundaryLike = Union[ServiceAreaBoundary, Sequence[float]]


def _as_boundary(boundary: BoundaryLike) -> ServiceAreaBoundary:
    if isinstance(boundary, ServiceAreaBoundary):
        return boundary
    return ServiceAreaBoundary.from_bbox(boundary)


def is_within_service_area(
    latitude: float,
    longitude: float,
    boundary: BoundaryLike = DEFAULT_SERVICE_AREA,
) -> bool:
    # Planar test on a closed rectangle; fine at the scale of one town.
    area = _as_boundary(boundary)
    return (
        area.min_longitude <= longitude <= area.max_longitude
        and area.min_latitude <= latitude <= area.max_latitude
    )


def coordinate_in_service_area(point: Coordinate, boundary: BoundaryLike = DEFAULT_SERVICE_AREA) -> bool:
    return is_within_service_area(point.latitude, point.longitude, boundary)
