from __future__ import annotations

from typing import Any

from zipfence.ingestion.geojson import flatten_rings, parse_feature, parse_feature_collection


def _polygon(zip_code: str | None, coordinates: Any, kind: str = "Polygon") -> dict[str, Any]:
    properties = {} if zip_code is None else {"ZCTA5CE10": zip_code, "STATEFP10": "42"}
    return {"type": "Feature", "properties": properties, "geometry": {"type": kind, "coordinates": coordinates}}


RING = [[-75.17, 39.95], [-75.16, 39.95], [-75.16, 39.96], [-75.17, 39.95]]


def test_polygon_feature() -> None:
    feature = parse_feature(_polygon("19102", [RING]), "pa")

    assert feature is not None
    assert feature.zip_code == "19102"
    assert feature.region_code == "PA"
    assert len(feature.rings) == 1
    first = feature.rings[0][0]
    assert (first.latitude, first.longitude) == (39.95, -75.17)


def test_multipolygon_rings_are_flattened() -> None:
    hole = [[-75.165, 39.952], [-75.164, 39.952], [-75.164, 39.953], [-75.165, 39.952]]
    island = [[-74.5, 39.5], [-74.4, 39.5], [-74.4, 39.6], [-74.5, 39.5]]

    rings = flatten_rings({"type": "MultiPolygon", "coordinates": [[RING, hole], [island]]})

    assert rings is not None
    assert len(rings) == 3
    assert rings[2][0].longitude == -74.5


def test_other_zip_property_keys_are_accepted() -> None:
    raw = {"properties": {"ZCTA5CE20": 8102}, "geometry": {"type": "Polygon", "coordinates": [RING]}}

    feature = parse_feature(raw, "NJ")

    assert feature is not None
    assert feature.zip_code == "8102"


def test_unusable_features_are_skipped() -> None:
    body = {
        "type": "FeatureCollection",
        "features": [
            _polygon("19102", [RING]),
            _polygon(None, [RING]),
            _polygon("19103", [-75.0, 40.0], kind="Point"),
            _polygon("19104", [[[-75.0]]]),
            _polygon("19106", [[["x", "y"]]]),
            "not a feature",
            _polygon("19107", [RING], kind="MultiPolygon"),
        ],
    }

    features = parse_feature_collection(body, "PA")

    assert features is not None
    assert [feature.zip_code for feature in features] == ["19102"]


def test_non_collection_bodies() -> None:
    assert parse_feature_collection([], "PA") is None
    assert parse_feature_collection({"type": "FeatureCollection"}, "PA") is None
    assert parse_feature_collection({"features": []}, "PA") == []


def test_object_positions_are_skipped() -> None:
    raw = _polygon("08102", [[{"lng": -75.1, "lat": 39.9}, {"lng": -75.0, "lat": 39.9}]])

    assert parse_feature(raw, "NJ") is None
