"""Mapbox geocoding adapter: address search, forward and reverse lookups."""

from __future__ import annotations

import os
from types import TracebackType
from typing import Any, Sequence
from urllib.parse import quote

from delivery_geo.common.constants import (
    DEFAULT_CENTER,
    DEFAULT_COUNTRY,
    MAPBOX_GEOCODING_URL,
    MAPBOX_TOKEN_ENV,
)
from delivery_geo.common.errors import ConfigError, ContractError, GeocodingError
from delivery_geo.common.http import HttpClient, TimeoutConfig
from delivery_geo.common.models import Coordinate, NormalizedAddress
from delivery_geo.engine.address import normalise_first_feature

DEFAULT_TYPES = ("address", "place")


def resolve_access_token(mapbox_config: dict, environ: dict[str, str] | None = None) -> str:
    env = os.environ if environ is None else environ
    env_name = mapbox_config.get("access_token_env") or MAPBOX_TOKEN_ENV
    token = (env.get(env_name) or "").strip()
    if not token:
        raise ConfigError(f"Mapbox token not configured: set {env_name}")
    return token


def _join(values: Sequence[float]) -> str:
    return ",".join(str(v) for v in values)


class MapboxGeocoder:
    def __init__(
        self,
        access_token: str,
        mapbox_config: dict | None = None,
        *,
        default_center: Sequence[float] = DEFAULT_CENTER,
        default_country: str = DEFAULT_COUNTRY,
        http_client: HttpClient | None = None,
    ) -> None:
        if not access_token:
            raise ConfigError("Mapbox token not configured")
        cfg = mapbox_config or {}
        if cfg.get("enabled") is False:
            raise ConfigError("Mapbox geocoding is disabled in config")

        self.access_token = access_token
        self.base_url = str(cfg.get("base_url") or MAPBOX_GEOCODING_URL).rstrip("/")
        self.country = cfg.get("country", "ZA")
        self.types = tuple(cfg.get("types") or DEFAULT_TYPES)
        self.limit = int(cfg.get("limit", 5))
        self.default_center = tuple(default_center)
        self.default_country = default_country
        timeout_seconds = float(cfg.get("timeout_seconds", 10))
        self.timeout = TimeoutConfig(connect=min(5.0, timeout_seconds), read=timeout_seconds)

        self._owns_client = http_client is None
        self.client = http_client or HttpClient(rate_limit_per_sec=float(cfg.get("rate_limit_per_sec", 10)))

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "MapboxGeocoder":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _fetch(self, path_segment: str, params: dict[str, Any]) -> dict:
        payload = self.client.get_json(
            f"{self.base_url}/{path_segment}.json",
            params={"access_token": self.access_token, **params},
            timeout=self.timeout,
        )
        if not isinstance(payload, dict):
            raise GeocodingError("Mapbox returned a non-object payload")
        if "features" not in payload:
            message = payload.get("message") or "missing features"
            raise GeocodingError(f"Mapbox geocoding failed: {message}")
        return payload

    def search_addresses(
        self,
        query: str,
        *,
        proximity: Sequence[float] | None = None,
        bbox: Sequence[float] | None = None,
        limit: int | None = None,
        autocomplete: bool = False,
    ) -> list[dict]:
        """Raw features for ``query``, biased towards ``proximity`` ``[lng, lat]``."""
        query = (query or "").strip()
        if not query:
            raise ContractError("Search query must not be empty")

        params: dict[str, Any] = {
            "limit": str(limit if limit is not None else self.limit),
            "types": ",".join(self.types),
            "proximity": _join(proximity if proximity is not None else self.default_center),
        }
        if self.country:
            params["country"] = self.country
        if bbox is not None:
            params["bbox"] = _join(bbox)
        if autocomplete:
            params["autocomplete"] = "true"

        return list(self._fetch(quote(query, safe=""), params).get("features") or [])

    def forward_geocode(self, address: str) -> NormalizedAddress | None:
        features = self.search_addresses(address, limit=1)
        return normalise_first_feature({"features": features}, default_country=self.default_country)

    def reverse_geocode(self, longitude: float, latitude: float) -> NormalizedAddress | None:
        point = Coordinate(latitude=latitude, longitude=longitude)
        payload = self._fetch(
            f"{point.longitude},{point.latitude}",
            {"types": "address", "limit": "1"},
        )
        return normalise_first_feature(payload, default_country=self.default_country)
