"""CLI entrypoint for the township delivery geo engine."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Any

from delivery_geo.common.config_loader import EngineConfig, load_engine_config
from delivery_geo.common.constants import EXIT_HARD_FAIL, EXIT_REJECTED, EXIT_SUCCESS
from delivery_geo.common.errors import GeoEngineError, InvalidFeatureError
from delivery_geo.common.fs import read_json, write_json
from delivery_geo.common.ids import generate_request_id
from delivery_geo.common.logging import build_logger, close_logger, log_event
from delivery_geo.common.models import Coordinate, ServiceAreaBoundary
from delivery_geo.engine.address import normalise_address
from delivery_geo.engine.distance import calculate_distance_km
from delivery_geo.engine.fees import calculate_delivery_fee
from delivery_geo.engine.quote import quote_delivery
from delivery_geo.engine.service_area import is_within_service_area
from delivery_geo.geocoding.mapbox import MapboxGeocoder, resolve_access_token

GEOCODER_COMMANDS = ("search", "geocode", "reverse")


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--log-dir", default=None)
    parser.add_argument("--request-id", default=None)
    parser.add_argument("--output", default=None, help="write the JSON result here instead of stdout")

    commands = parser.add_subparsers(dest="command", required=True)

    distance = commands.add_parser("distance", help="great-circle distance in km")
    for name in ("lat1", "lon1", "lat2", "lon2"):
        distance.add_argument(name, type=float)

    fee = commands.add_parser("fee", help="delivery fee for a distance in km")
    fee.add_argument("distance_km", type=float)

    check_area = commands.add_parser("check-area", help="is a point inside the service area")
    check_area.add_argument("lat", type=float)
    check_area.add_argument("lng", type=float)
    check_area.add_argument("--bbox", nargs=4, type=float, default=None, metavar=("MINLNG", "MINLAT", "MAXLNG", "MAXLAT"))

    quote = commands.add_parser("quote", help="distance, fee and service area check for one delivery")
    quote.add_argument("--store", nargs=2, type=float, default=None, metavar=("LAT", "LNG"))
    quote.add_argument("--customer", nargs=2, type=float, required=True, metavar=("LAT", "LNG"))

    normalise = commands.add_parser("normalise", help="normalise a saved geocoder response")
    normalise.add_argument("path")

    search = commands.add_parser("search", help="address autocomplete search")
    search.add_argument("query")
    search.add_argument("--limit", type=int, default=None)
    search.add_argument("--within-service-area", action="store_true")

    geocode = commands.add_parser("geocode", help="address to coordinates")
    geocode.add_argument("address")

    reverse = commands.add_parser("reverse", help="coordinates to address")
    reverse.add_argument("lng", type=float)
    reverse.add_argument("lat", type=float)

    return parser.parse_args(argv)


def build_geocoder(config: EngineConfig) -> MapboxGeocoder:
    return MapboxGeocoder(
        resolve_access_token(config.mapbox),
        config.mapbox,
        default_center=config.default_center.to_lng_lat(),
        default_country=config.default_country,
    )


def _normalise_payload(payload: Any, config: EngineConfig) -> list[dict]:
    if isinstance(payload, dict) and "features" in payload:
        features = payload.get("features") or []
    else:
        features = [payload]
    return [normalise_address(feature, default_country=config.default_country).to_dict() for feature in features]


def _normalise_search_results(
    features: list[dict],
    config: EngineConfig,
    logger: logging.Logger,
    log_fields: dict[str, Any],
) -> tuple[list[dict], int]:
    addresses: list[dict] = []
    skipped = 0
    for feature in features:
        try:
            addresses.append(normalise_address(feature, default_country=config.default_country).to_dict())
        except InvalidFeatureError as exc:
            skipped += 1
            log_event(
                logger,
                f"skipped geocoder feature: {exc}",
                level=logging.WARNING,
                event="FEATURE_SKIPPED",
                status="skipped",
                error_code=exc.error_code,
                **log_fields,
            )
    return addresses, skipped


def _run_geocoder_command(
    args: argparse.Namespace,
    config: EngineConfig,
    logger: logging.Logger,
    log_fields: dict[str, Any],
) -> tuple[int, Any]:
    with build_geocoder(config) as geocoder:
        if args.command == "search":
            bbox = config.boundary.to_bbox() if args.within_service_area else None
            features = geocoder.search_addresses(args.query, bbox=bbox, limit=args.limit, autocomplete=True)
            addresses, skipped = _normalise_search_results(features, config, logger, log_fields)
            payload = {"query": args.query, "results": addresses, "skipped": skipped}
            return (EXIT_SUCCESS if addresses else EXIT_REJECTED), payload

        if args.command == "geocode":
            address = geocoder.forward_geocode(args.address)
        else:
            address = geocoder.reverse_geocode(args.lng, args.lat)

    if address is None:
        return EXIT_REJECTED, {"result": None}
    return EXIT_SUCCESS, {
        "result": address.to_dict(),
        "within_service_area": is_within_service_area(address.latitude, address.longitude, config.boundary),
    }


def execute_command(
    args: argparse.Namespace,
    config: EngineConfig,
    logger: logging.Logger | None = None,
    log_fields: dict[str, Any] | None = None,
) -> tuple[int, Any]:
    if args.command == "distance":
        start = Coordinate(latitude=args.lat1, longitude=args.lon1)
        end = Coordinate(latitude=args.lat2, longitude=args.lon2)
        distance_km = calculate_distance_km(start.latitude, start.longitude, end.latitude, end.longitude)
        return EXIT_SUCCESS, {"distance_km": distance_km}

    if args.command == "fee":
        return EXIT_SUCCESS, {
            "distance_km": args.distance_km,
            "fee": calculate_delivery_fee(args.distance_km, config.fee_schedule),
        }

    if args.command == "check-area":
        point = Coordinate(latitude=args.lat, longitude=args.lng)
        boundary = ServiceAreaBoundary.from_bbox(args.bbox) if args.bbox else config.boundary
        within = is_within_service_area(point.latitude, point.longitude, boundary)
        payload = {"within_service_area": within, "bbox": list(boundary.to_bbox())}
        return (EXIT_SUCCESS if within else EXIT_REJECTED), payload

    if args.command == "quote":
        store = Coordinate(latitude=args.store[0], longitude=args.store[1]) if args.store else config.default_center
        customer = Coordinate(latitude=args.customer[0], longitude=args.customer[1])
        quoted = quote_delivery(store, customer, boundary=config.boundary, schedule=config.fee_schedule)
        return (EXIT_SUCCESS if quoted.within_service_area else EXIT_REJECTED), quoted.to_dict()

    if args.command == "normalise":
        return EXIT_SUCCESS, {"addresses": _normalise_payload(read_json(Path(args.path)), config)}

    if args.command in GEOCODER_COMMANDS:
        return _run_geocoder_command(args, config, logger or logging.getLogger(__name__), log_fields or {})

    raise ValueError(f"Unknown command: {args.command}")


def _emit(payload: Any, output: str | None) -> None:
    if output:
        write_json(Path(output), payload)
        return
    sys.stdout.write(json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n")


def run_command(args: argparse.Namespace) -> int:
    request_id = args.request_id or generate_request_id()
    log_dir = Path(args.log_dir) if args.log_dir else None
    logger = build_logger(request_id, level=args.log_level, log_dir=log_dir)
    provider = "mapbox" if args.command in GEOCODER_COMMANDS else None
    fields = {"request_id": request_id, "command": args.command, "provider": provider}
    started = time.monotonic()

    log_event(logger, "command start", event="COMMAND_START", status="ok", **fields)
    try:
        overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None
        config = load_engine_config(Path(args.config_dir), overlay_config_dir=overlay_config_dir)
        exit_code, payload = execute_command(args, config, logger, fields)
        _emit(payload, args.output)
    except GeoEngineError as exc:
        log_event(
            logger,
            f"command failed: {exc}",
            level=logging.ERROR,
            event="COMMAND_FAIL",
            status="error",
            error_code=exc.error_code,
            **fields,
        )
        return EXIT_HARD_FAIL
    except Exception:
        logger.exception(
            "unexpected failure",
            extra={"event": "COMMAND_FAIL", "status": "error", "error_code": "UNEXPECTED_ERROR", **fields},
        )
        return EXIT_HARD_FAIL
    else:
        log_event(
            logger,
            "command end",
            event="COMMAND_END",
            status="ok" if exit_code == EXIT_SUCCESS else "rejected",
            duration_ms=int((time.monotonic() - started) * 1000),
            **fields,
        )
        return exit_code
    finally:
        close_logger(logger)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    return run_command(args)


if __name__ == "__main__":
    raise SystemExit(main())
