import json
from pathlib import Path

import pytest

from delivery_geo import cli
from delivery_geo.cli import parse_args, run_command
from delivery_geo.common.constants import EXIT_HARD_FAIL, EXIT_REJECTED, EXIT_SUCCESS

CONFIG_DIR = str(Path(__file__).resolve().parents[2] / "config")


def _run(argv, capsys):
    exit_code = run_command(parse_args(["--config-dir", CONFIG_DIR, *argv]))
    out = capsys.readouterr().out
    return exit_code, (json.loads(out) if out.strip() else None)


@pytest.mark.integration
def test_cli_fee(capsys):
    exit_code, payload = _run(["fee", "15.1"], capsys)
    assert exit_code == EXIT_SUCCESS
    assert payload == {"distance_km": 15.1, "fee": 65.0}


@pytest.mark.integration
def test_cli_negative_fee_is_hard_failure(capsys):
    exit_code, payload = _run(["fee", "-1"], capsys)
    assert exit_code == EXIT_HARD_FAIL
    assert payload is None


@pytest.mark.integration
def test_cli_distance_rejects_out_of_range_latitude(capsys):
    exit_code, _payload = _run(["distance", "-124.6958", "28.4206", "-24.1944", "29.0097"], capsys)
    assert exit_code == EXIT_HARD_FAIL


@pytest.mark.integration
def test_cli_check_area_inside_and_outside(capsys):
    exit_code, payload = _run(["check-area", "-24.70", "28.40"], capsys)
    assert exit_code == EXIT_SUCCESS
    assert payload["within_service_area"] is True

    exit_code, payload = _run(["check-area", "-24.50", "28.40"], capsys)
    assert exit_code == EXIT_REJECTED
    assert payload["within_service_area"] is False


@pytest.mark.integration
def test_cli_quote_defaults_store_to_town_centre(capsys):
    exit_code, payload = _run(["quote", "--customer", "-24.7050", "28.4100"], capsys)
    assert exit_code == EXIT_SUCCESS
    assert payload["fee"] == 15.0
    assert payload["within_service_area"] is True


@pytest.mark.integration
def test_cli_normalise_writes_output_file(tmp_path: Path, capsys):
    source = tmp_path / "response.json"
    source.write_text(
        json.dumps(
            {
                "type": "FeatureCollection",
                "features": [
                    {
                        "center": [28.42, -24.70],
                        "context": [
                            {"id": "place.123", "text": "Modimolle"},
                            {"id": "region.456", "text": "Limpopo"},
                        ],
                    }
                ],
            }
        ),
        encoding="utf-8",
    )
    output = tmp_path / "out" / "addresses.json"

    exit_code = run_command(parse_args(["--config-dir", CONFIG_DIR, "--output", str(output), "normalise", str(source)]))

    assert exit_code == EXIT_SUCCESS
    assert capsys.readouterr().out == ""
    (address,) = json.loads(output.read_text(encoding="utf-8"))["addresses"]
    assert address["locality"] == "Modimolle"
    assert address["country"] == "South Africa"


@pytest.mark.integration
def test_cli_normalise_feature_without_center_fails(tmp_path: Path, capsys):
    source = tmp_path / "feature.json"
    source.write_text(json.dumps({"text": "Somewhere", "context": []}), encoding="utf-8")

    exit_code, payload = _run(["normalise", str(source)], capsys)

    assert exit_code == EXIT_HARD_FAIL
    assert payload is None


@pytest.mark.integration
def test_cli_geocode_without_token_is_hard_failure(monkeypatch, capsys):
    monkeypatch.delenv("MAPBOX_ACCESS_TOKEN", raising=False)
    exit_code, _payload = _run(["geocode", "12 Nelson Mandela Drive"], capsys)
    assert exit_code == EXIT_HARD_FAIL


@pytest.mark.integration
def test_cli_reverse_uses_geocoder(monkeypatch, capsys):
    class FakeGeocoder:
        def __enter__(self):
            return self

        def __exit__(self, *_exc):
            return None

        def reverse_geocode(self, longitude, latitude):
            from delivery_geo.common.models import NormalizedAddress

            return NormalizedAddress(formatted="Modimolle", latitude=latitude, longitude=longitude, locality="Modimolle")

    monkeypatch.setattr(cli, "build_geocoder", lambda _config: FakeGeocoder())

    exit_code, payload = _run(["reverse", "28.41", "-24.70"], capsys)

    assert exit_code == EXIT_SUCCESS
    assert payload["result"]["locality"] == "Modimolle"
    assert payload["within_service_area"] is True


@pytest.mark.integration
def test_cli_search_with_no_results_is_rejected(monkeypatch, capsys):
    class EmptyGeocoder:
        def __enter__(self):
            return self

        def __exit__(self, *_exc):
            return None

        def search_addresses(self, query, **kwargs):
            assert kwargs["bbox"] == (28.30, -24.80, 28.55, -24.60)
            return []

    monkeypatch.setattr(cli, "build_geocoder", lambda _config: EmptyGeocoder())

    exit_code, payload = _run(["search", "Spar", "--within-service-area"], capsys)

    assert exit_code == EXIT_REJECTED
    assert payload == {"query": "Spar", "results": [], "skipped": 0}


@pytest.mark.integration
def test_cli_logs_to_log_dir(tmp_path: Path, capsys):
    exit_code = run_command(
        parse_args(["--config-dir", CONFIG_DIR, "--log-dir", str(tmp_path), "--request-id", "req-smoke", "fee", "3"])
    )
    capsys.readouterr()

    assert exit_code == EXIT_SUCCESS
    events = [json.loads(line)["event"] for line in (tmp_path / "req-smoke.log.jsonl").read_text(encoding="utf-8").splitlines()]
    assert events == ["COMMAND_START", "COMMAND_END"]


@pytest.mark.integration
def test_cli_search_skips_feature_without_center(monkeypatch, tmp_path: Path, capsys):
    class PartlyBrokenGeocoder:
        def __enter__(self):
            return self

        def __exit__(self, *_exc):
            return None

        def search_addresses(self, query, **_kwargs):
            return [
                {"id": "address.1", "text": "Nelson Mandela Drive", "center": [28.42, -24.70]},
                {"id": "address.2", "text": "Somewhere"},
                {"id": "address.3", "text": "Thabo Mbeki Street", "center": [28.41, -24.69]},
            ]

    monkeypatch.setattr(cli, "build_geocoder", lambda _config: PartlyBrokenGeocoder())

    exit_code = run_command(
        parse_args(["--config-dir", CONFIG_DIR, "--log-dir", str(tmp_path), "--request-id", "req-search", "search", "Drive"])
    )
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == EXIT_SUCCESS
    assert [result["street"] for result in payload["results"]] == ["Nelson Mandela Drive", "Thabo Mbeki Street"]
    assert payload["skipped"] == 1

    records = [json.loads(line) for line in (tmp_path / "req-search.log.jsonl").read_text(encoding="utf-8").splitlines()]
    skipped = [record for record in records if record["event"] == "FEATURE_SKIPPED"]
    assert len(skipped) == 1
    assert skipped[0]["error_code"] == "INVALID_FEATURE"
    assert skipped[0]["level"] == "WARNING"
    assert "address.2" in skipped[0]["message"]


@pytest.mark.integration
def test_cli_search_with_only_broken_features_is_rejected(monkeypatch, capsys):
    class BrokenGeocoder:
        def __enter__(self):
            return self

        def __exit__(self, *_exc):
            return None

        def search_addresses(self, query, **_kwargs):
            return [{"id": "address.9", "center": ["nan", "nan"]}]

    monkeypatch.setattr(cli, "build_geocoder", lambda _config: BrokenGeocoder())

    exit_code, payload = _run(["search", "Drive"], capsys)

    assert exit_code == EXIT_REJECTED
    assert payload == {"query": "Drive", "results": [], "skipped": 1}
