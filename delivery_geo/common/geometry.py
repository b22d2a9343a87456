"""Geometry helpers."""

from __future__ import annotations

from typing import Any


def _safe_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def extract_point_from_center(center: Any) -> tuple[float | None, float | None]:
    """Return ``(lat, lon)`` from a provider ``[lng, lat]`` pair."""
    if not isinstance(center, (list, tuple)) or len(center) != 2:
        return None, None
    lon = _safe_float(center[0])
    lat = _safe_float(center[1])
    if lat is None or lon is None:
        return None, None
    return lat, lon
