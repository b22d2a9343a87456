"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

import math

from delivery_geo.common.errors import ConfigError

SERVICE_AREA_KEYS = {"name", "bbox", "default_center", "default_zoom"}
DELIVERY_FEE_KEYS = {"tiers", "extra_km_fee"}
FEE_TIER_KEYS = {"max_km", "fee"}
ADDRESS_KEYS = {"default_country"}
MAPBOX_KEYS = {
    "enabled",
    "base_url",
    "access_token_env",
    "country",
    "types",
    "limit",
    "timeout_seconds",
    "rate_limit_per_sec",
}


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _number(value: object, ctx: str) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"{ctx} must be a number, got {value!r}")
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{ctx} must be a number, got {value!r}") from exc
    if not math.isfinite(number):
        raise ConfigError(f"{ctx} must be finite, got {value!r}")
    return number


def _numeric_list(value: object, length: int, ctx: str) -> list[float]:
    if not isinstance(value, list) or len(value) != length:
        raise ConfigError(f"{ctx} must be a list of {length} numbers")
    return [_number(item, f"{ctx}[{idx}]") for idx, item in enumerate(value)]


def validate_bbox(bbox: object, ctx: str) -> list[float]:
    min_lng, min_lat, max_lng, max_lat = _numeric_list(bbox, 4, ctx)
    if min_lng > max_lng or min_lat > max_lat:
        raise ConfigError(f"{ctx} must be ordered [minLng, minLat, maxLng, maxLat]")
    if not (-180 <= min_lng and max_lng <= 180 and -90 <= min_lat and max_lat <= 90):
        raise ConfigError(f"{ctx} lies outside valid longitude/latitude ranges")
    return [min_lng, min_lat, max_lng, max_lat]


def validate_fee_tiers(
    tiers: object,
    ctx: str = "delivery_fees.tiers",
    *,
    allow_unknown: bool = False,
) -> list[tuple[float, float]]:
    if not isinstance(tiers, list) or not tiers:
        raise ConfigError(f"{ctx} must be a non-empty list")

    parsed: list[tuple[float, float]] = []
    for idx, tier in enumerate(tiers):
        _assert_required_keys(tier, FEE_TIER_KEYS, f"{ctx}[{idx}]")
        _assert_no_unknown_keys(tier, FEE_TIER_KEYS, f"{ctx}[{idx}]", allow_unknown)
        max_km = _number(tier["max_km"], f"{ctx}[{idx}].max_km")
        fee = _number(tier["fee"], f"{ctx}[{idx}].fee")
        if max_km < 0 or fee < 0:
            raise ConfigError(f"{ctx}[{idx}] must not be negative")
        if parsed:
            prev_km, prev_fee = parsed[-1]
            if max_km <= prev_km:
                raise ConfigError(f"{ctx}[{idx}].max_km must be greater than {prev_km}")
            if fee < prev_fee:
                raise ConfigError(f"{ctx}[{idx}].fee must not be lower than {prev_fee}")
        parsed.append((max_km, fee))
    return parsed


def validate_service_area_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    top_required = {"service_area", "delivery_fees", "address", "mapbox"}
    _assert_required_keys(cfg, top_required, "service area config")
    _assert_no_unknown_keys(cfg, top_required, "service area config", allow_unknown)

    _assert_required_keys(cfg["service_area"], {"name", "bbox", "default_center"}, "service_area")
    _assert_no_unknown_keys(cfg["service_area"], SERVICE_AREA_KEYS, "service_area", allow_unknown)
    validate_bbox(cfg["service_area"]["bbox"], "service_area.bbox")
    center_lng, center_lat = _numeric_list(cfg["service_area"]["default_center"], 2, "service_area.default_center")
    if not (-180 <= center_lng <= 180 and -90 <= center_lat <= 90):
        raise ConfigError("service_area.default_center lies outside valid longitude/latitude ranges")

    _assert_required_keys(cfg["delivery_fees"], DELIVERY_FEE_KEYS, "delivery_fees")
    _assert_no_unknown_keys(cfg["delivery_fees"], DELIVERY_FEE_KEYS, "delivery_fees", allow_unknown)
    validate_fee_tiers(cfg["delivery_fees"]["tiers"], allow_unknown=allow_unknown)
    if _number(cfg["delivery_fees"]["extra_km_fee"], "delivery_fees.extra_km_fee") < 0:
        raise ConfigError("delivery_fees.extra_km_fee must not be negative")

    _assert_required_keys(cfg["address"], ADDRESS_KEYS, "address")
    _assert_no_unknown_keys(cfg["address"], ADDRESS_KEYS, "address", allow_unknown)
    default_country = cfg["address"]["default_country"]
    if not isinstance(default_country, str) or not default_country.strip():
        raise ConfigError("address.default_country must be a non-empty string")

    _assert_required_keys(cfg["mapbox"], {"enabled", "base_url", "access_token_env"}, "mapbox")
    _assert_no_unknown_keys(cfg["mapbox"], MAPBOX_KEYS, "mapbox", allow_unknown)
    types = cfg["mapbox"].get("types")
    if types is not None and (not isinstance(types, list) or not types):
        raise ConfigError("mapbox.types must be a non-empty list")

    return cfg
