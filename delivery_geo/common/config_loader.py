"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from delivery_geo.common.constants import CONFIG_FILENAME, DEFAULT_ZOOM
from delivery_geo.common.errors import ConfigError
from delivery_geo.common.fs import read_yaml
from delivery_geo.common.models import Coordinate, FeeSchedule, ServiceAreaBoundary
from delivery_geo.common.schema import validate_service_area_config


@dataclass(frozen=True)
class EngineConfig:
    area_name: str
    boundary: ServiceAreaBoundary
    default_center: Coordinate
    default_zoom: int
    fee_schedule: FeeSchedule
    default_country: str
    mapbox: dict[str, Any] = field(default_factory=dict)


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    base = read_yaml(path)
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path)
    if overlay is None:
        return base
    return _deep_merge(base, overlay)


def build_engine_config(cfg: dict) -> EngineConfig:
    area = cfg["service_area"]
    fees = cfg["delivery_fees"]
    return EngineConfig(
        area_name=str(area["name"]),
        boundary=ServiceAreaBoundary.from_bbox(area["bbox"]),
        default_center=Coordinate.from_lng_lat(area["default_center"]),
        default_zoom=int(area.get("default_zoom", DEFAULT_ZOOM)),
        fee_schedule=FeeSchedule(
            tiers=tuple((float(tier["max_km"]), float(tier["fee"])) for tier in fees["tiers"]),
            extra_km_fee=float(fees["extra_km_fee"]),
        ),
        default_country=cfg["address"]["default_country"].strip(),
        mapbox=dict(cfg["mapbox"]),
    )


def load_engine_config(
    config_dir: Path,
    *,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
) -> EngineConfig:
    overlay_path = None
    if overlay_config_dir is not None:
        overlay_path = overlay_config_dir / CONFIG_FILENAME
    cfg = _load_yaml_with_overlay(config_dir / CONFIG_FILENAME, overlay_path)
    if not isinstance(cfg, dict):
        raise ConfigError(f"{config_dir / CONFIG_FILENAME} must contain a mapping")
    validated = validate_service_area_config(cfg, allow_unknown=allow_unknown)
    return build_engine_config(validated)
