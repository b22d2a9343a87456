import pytest

from delivery_geo.common.errors import ContractError
from delivery_geo.common.models import Coordinate, ServiceAreaBoundary
from delivery_geo.engine.service_area import (
    DEFAULT_SERVICE_AREA,
    coordinate_in_service_area,
    is_within_service_area,
)

BBOX = [28.30, -24.80, 28.55, -24.60]


def test_point_inside_configured_bbox():
    assert is_within_service_area(-24.70, 28.40, BBOX) is True


def test_point_north_of_bbox_is_outside():
    assert is_within_service_area(-24.50, 28.40, BBOX) is False


@pytest.mark.parametrize(
    "lat,lng",
    [
        (-24.70, 28.30),
        (-24.70, 28.55),
        (-24.80, 28.40),
        (-24.60, 28.40),
        (-24.80, 28.30),
        (-24.60, 28.55),
    ],
)
def test_edges_and_corners_count_as_inside(lat, lng):
    assert is_within_service_area(lat, lng, BBOX) is True


@pytest.mark.parametrize(
    "lat,lng",
    [
        (-24.70, 27.30),
        (-24.70, 29.55),
        (-25.80, 28.40),
        (-23.60, 28.40),
    ],
)
def test_one_unit_outside_each_edge(lat, lng):
    assert is_within_service_area(lat, lng, BBOX) is False


def test_default_area_is_modimolle():
    assert DEFAULT_SERVICE_AREA.to_bbox() == tuple(BBOX)
    assert is_within_service_area(-24.6958, 28.4206) is True
    assert is_within_service_area(-26.2041, 28.0473) is False


def test_accepts_boundary_object():
    boundary = ServiceAreaBoundary.from_bbox(BBOX)
    assert is_within_service_area(-24.70, 28.40, boundary) is True
    assert coordinate_in_service_area(Coordinate(latitude=-24.70, longitude=28.40), boundary) is True


def test_boundary_rejects_inverted_axes():
    with pytest.raises(ContractError):
        ServiceAreaBoundary.from_bbox([28.55, -24.80, 28.30, -24.60])
    with pytest.raises(ContractError):
        ServiceAreaBoundary.from_bbox([28.30, -24.60, 28.55, -24.80])


def test_boundary_rejects_wrong_length():
    with pytest.raises(ContractError):
        ServiceAreaBoundary.from_bbox([28.30, -24.80, 28.55])
