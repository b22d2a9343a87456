"""Geocoder feature to canonical address normalisation."""

from __future__ import annotations

from typing import Any, Mapping

from delivery_geo.common.constants import CONTEXT_PREFIX_FIELDS, DEFAULT_COUNTRY
from delivery_geo.common.errors import InvalidCoordinateError, InvalidFeatureError
from delivery_geo.common.geometry import extract_point_from_center
from delivery_geo.common.models import Coordinate, NormalizedAddress


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _context_components(context: Any) -> dict[str, str]:
    """Classify context entries by id prefix; later entries overwrite earlier ones."""
    components: dict[str, str] = {}
    if not isinstance(context, (list, tuple)):
        return components

    for entry in context:
        if not isinstance(entry, Mapping):
            continue
        entry_id = entry.get("id")
        if not isinstance(entry_id, str):
            continue
        for prefix, field_name in CONTEXT_PREFIX_FIELDS:
            if entry_id.startswith(prefix):
                components[field_name] = _text(entry.get("text"))
                break
    return components


def normalise_address(feature: Any, default_country: str = DEFAULT_COUNTRY) -> NormalizedAddress:
    if not isinstance(feature, Mapping):
        raise InvalidFeatureError(f"Geocoder feature must be a mapping, got {type(feature).__name__}")

    feature_id = feature.get("id", "<unknown>")
    # Provider order is [lng, lat].
    latitude, longitude = extract_point_from_center(feature.get("center"))
    if latitude is None or longitude is None:
        raise InvalidFeatureError(f"Geocoder feature {feature_id!r} has no usable center coordinate")
    try:
        point = Coordinate(latitude=latitude, longitude=longitude)
    except InvalidCoordinateError as exc:
        raise InvalidFeatureError(f"Geocoder feature {feature_id!r} has an invalid center: {exc}") from exc

    properties = feature.get("properties")
    street_number = ""
    if isinstance(properties, Mapping) and properties.get("address"):
        street_number = _text(properties["address"])

    components = _context_components(feature.get("context"))
    country = components.pop("country", "") or default_country

    return NormalizedAddress(
        formatted=_text(feature.get("place_name")),
        latitude=point.latitude,
        longitude=point.longitude,
        street=_text(feature.get("text")),
        street_number=street_number,
        country=country,
        **components,
    )


def normalise_first_feature(response: Any, default_country: str = DEFAULT_COUNTRY) -> NormalizedAddress | None:
    """Normalise the top-ranked feature of a collection, ``None`` when there is none."""
    if not isinstance(response, Mapping):
        raise InvalidFeatureError("Geocoder response must be a mapping")
    features = response.get("features") or []
    if not isinstance(features, list):
        raise InvalidFeatureError("Geocoder response 'features' must be a list")
    if not features:
        return None
    return normalise_address(features[0], default_country=default_country)
