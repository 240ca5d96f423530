from __future__ import annotations

import pytest

from zipfence.config import ZipFenceConfig
from zipfence.exceptions import InvalidInputError, ZipFenceConfigError
from zipfence.ingestion.normalize import is_valid_zip, normalize_zip, parse_radius, safe_float


def test_defaults() -> None:
    config = ZipFenceConfig()

    assert config.max_radius_miles == 50.0
    assert config.candidate_margin_miles == 10.0
    assert config.geometry_cache_enabled is False
    assert config.reverse_geocode_enabled is True
    assert "OpenDataDE" in config.geometry_base_url


def test_from_env_reads_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ZIPFENCE_GEOMETRY_BASE_URL", "http://geo.test/")
    monkeypatch.setenv("ZIPFENCE_REQUEST_TIMEOUT", "3.5")
    monkeypatch.setenv("ZIPFENCE_MAX_RADIUS_MILES", "25")
    monkeypatch.setenv("ZIPFENCE_GEOMETRY_CACHE", "yes")
    monkeypatch.setenv("ZIPFENCE_REVERSE_GEOCODE", "off")

    config = ZipFenceConfig.from_env()

    assert config.geometry_base_url == "http://geo.test/"
    assert config.request_timeout == 3.5
    assert config.max_radius_miles == 25.0
    assert config.geometry_cache_enabled is True
    assert config.reverse_geocode_enabled is False


def test_overrides_beat_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ZIPFENCE_MAX_RADIUS_MILES", "25")
    monkeypatch.setenv("ZIPFENCE_GEOMETRY_CACHE", "1")

    config = ZipFenceConfig.from_env(max_radius_miles=40.0, geometry_cache_enabled=False)

    assert config.max_radius_miles == 40.0
    assert config.geometry_cache_enabled is False


def test_invalid_values_raise(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ZIPFENCE_REQUEST_TIMEOUT", "soon")
    with pytest.raises(ZipFenceConfigError):
        ZipFenceConfig.from_env()

    with pytest.raises(ZipFenceConfigError):
        ZipFenceConfig(request_timeout=0)
    with pytest.raises(ZipFenceConfigError):
        ZipFenceConfig(max_radius_miles=-1)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("75", 50.0),
        (75, 50.0),
        ("12.5", 12.5),
        (" 10 ", 10.0),
        (-3, 0.0),
        (0, 0.0),
    ],
)
def test_parse_radius_clamps(raw: object, expected: float) -> None:
    assert parse_radius(raw, max_radius=50.0) == expected


@pytest.mark.parametrize("raw", ["abc", "", None, True, "nan"])
def test_parse_radius_rejects_non_numeric(raw: object) -> None:
    with pytest.raises(InvalidInputError):
        parse_radius(raw)


def test_zip_helpers() -> None:
    assert normalize_zip(" 19102 ") == "19102"
    assert normalize_zip(None) == ""
    assert is_valid_zip("191")
    assert not is_valid_zip("19")
    assert safe_float("1.5") == 1.5
    assert safe_float(False) is None
