"""Value types shared by the engine, the geocoder and the CLI."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Sequence

from delivery_geo.common.constants import DEFAULT_COUNTRY, DEFAULT_EXTRA_KM_FEE, DEFAULT_FEE_TIERS
from delivery_geo.common.errors import ContractError, InvalidCoordinateError


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.latitude) and math.isfinite(self.longitude)):
            raise InvalidCoordinateError(f"Non-finite coordinate: ({self.latitude}, {self.longitude})")
        if not -90 <= self.latitude <= 90:
            raise InvalidCoordinateError(f"Latitude out of range [-90, 90]: {self.latitude}")
        if not -180 <= self.longitude <= 180:
            raise InvalidCoordinateError(f"Longitude out of range [-180, 180]: {self.longitude}")

    @classmethod
    def from_lng_lat(cls, pair: Sequence[float]) -> "Coordinate":
        longitude, latitude = pair
        return cls(latitude=float(latitude), longitude=float(longitude))

    def to_lng_lat(self) -> tuple[float, float]:
        return (self.longitude, self.latitude)


@dataclass(frozen=True)
class ServiceAreaBoundary:
    """Axis-aligned rectangle in degrees, edges included."""

    min_longitude: float
    min_latitude: float
    max_longitude: float
    max_latitude: float

    def __post_init__(self) -> None:
        if self.min_longitude > self.max_longitude:
            raise ContractError(f"min_longitude {self.min_longitude} exceeds max_longitude {self.max_longitude}")
        if self.min_latitude > self.max_latitude:
            raise ContractError(f"min_latitude {self.min_latitude} exceeds max_latitude {self.max_latitude}")

    @classmethod
    def from_bbox(cls, bbox: Sequence[float]) -> "ServiceAreaBoundary":
        if len(bbox) != 4:
            raise ContractError(f"bbox must have 4 values [minLng, minLat, maxLng, maxLat], got {len(bbox)}")
        min_lng, min_lat, max_lng, max_lat = (float(v) for v in bbox)
        return cls(
            min_longitude=min_lng,
            min_latitude=min_lat,
            max_longitude=max_lng,
            max_latitude=max_lat,
        )

    def to_bbox(self) -> tuple[float, float, float, float]:
        return (self.min_longitude, self.min_latitude, self.max_longitude, self.max_latitude)


@dataclass(frozen=True)
class NormalizedAddress:
    formatted: str
    latitude: float
    longitude: float
    street: str = ""
    street_number: str = ""
    locality: str = ""
    region: str = ""
    postal_code: str = ""
    country: str = DEFAULT_COUNTRY

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class FeeSchedule:
    """Step schedule of ``(max_km, fee)`` tiers plus a per-started-km tail."""

    tiers: tuple[tuple[float, float], ...] = DEFAULT_FEE_TIERS
    extra_km_fee: float = DEFAULT_EXTRA_KM_FEE

    def __post_init__(self) -> None:
        if not self.tiers:
            raise ContractError("Fee schedule needs at least one tier")
        previous: tuple[float, float] | None = None
        for idx, tier in enumerate(self.tiers):
            if len(tier) != 2:
                raise ContractError(f"Fee tier {idx} must be a (max_km, fee) pair, got {tier!r}")
            max_km, fee = tier
            if not (math.isfinite(max_km) and math.isfinite(fee)) or max_km < 0 or fee < 0:
                raise ContractError(f"Fee tier {idx} must be finite and non-negative, got {tier!r}")
            if previous is not None:
                if max_km <= previous[0]:
                    raise ContractError(f"Fee tier {idx} max_km {max_km} must exceed {previous[0]}")
                if fee < previous[1]:
                    raise ContractError(f"Fee tier {idx} fee {fee} must not be lower than {previous[1]}")
            previous = (max_km, fee)
        if not math.isfinite(self.extra_km_fee) or self.extra_km_fee < 0:
            raise ContractError(f"extra_km_fee must be finite and non-negative, got {self.extra_km_fee}")

    @property
    def last_tier(self) -> tuple[float, float]:
        return self.tiers[-1]


@dataclass(frozen=True)
class DeliveryQuote:
    distance_km: float
    fee: float
    within_service_area: bool

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
