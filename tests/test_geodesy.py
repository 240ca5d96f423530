from __future__ import annotations

import pytest

from zipfence.geodesy import (
    distance_miles,
    distance_to_region_miles,
    haversine_miles,
    region_contains,
    region_for_point,
    regions_containing,
)
from zipfence.models.geo import GeoPoint
from zipfence.regions import REGIONS, region_by_code, region_by_name, resolve_region

PHILADELPHIA = GeoPoint(latitude=39.9526, longitude=-75.1652)
NEW_YORK = GeoPoint(latitude=40.7128, longitude=-74.0060)


def test_one_degree_of_latitude_is_about_69_miles() -> None:
    assert haversine_miles(40.0, -75.0, 41.0, -75.0) == pytest.approx(69.09, abs=0.05)


def test_distance_is_symmetric_and_zero_at_same_point() -> None:
    assert distance_miles(PHILADELPHIA, NEW_YORK) == pytest.approx(distance_miles(NEW_YORK, PHILADELPHIA))
    assert distance_miles(PHILADELPHIA, PHILADELPHIA) == 0.0


def test_philadelphia_to_new_york() -> None:
    assert distance_miles(PHILADELPHIA, NEW_YORK) == pytest.approx(80.6, rel=0.02)


def test_distance_to_region_is_zero_inside_box() -> None:
    pa = REGIONS["PA"]
    assert region_contains(pa, GeoPoint(latitude=40.5, longitude=-77.0))
    assert distance_to_region_miles(GeoPoint(latitude=40.5, longitude=-77.0), pa) == 0.0


def test_distance_to_region_uses_nearest_edge() -> None:
    ny = REGIONS["NY"]
    point = GeoPoint(latitude=40.0, longitude=-75.0)
    # Nearest point of the box is straight north on its southern edge.
    expected = haversine_miles(40.0, -75.0, ny.min_lat, -75.0)
    assert distance_to_region_miles(point, ny) == pytest.approx(expected)


def test_region_for_point_prefers_smallest_box() -> None:
    washington = GeoPoint(latitude=38.9, longitude=-77.03)
    containing = [region.code for region in regions_containing(washington)]
    assert containing[0] == "DC"
    assert {"MD", "VA"} <= set(containing)
    assert region_for_point(washington) == REGIONS["DC"]


def test_region_for_point_inland() -> None:
    assert region_for_point(GeoPoint(latitude=39.74, longitude=-104.99)) == REGIONS["CO"]


def test_region_for_point_at_sea_is_none() -> None:
    assert region_for_point(GeoPoint(latitude=30.0, longitude=-140.0)) is None


def test_region_table_lookups() -> None:
    assert len(REGIONS) == 51
    assert region_by_name("  new   JERSEY ") == REGIONS["NJ"]
    assert region_by_name("District_of_Columbia") == REGIONS["DC"]
    assert region_by_code("us-pa") == REGIONS["PA"]
    assert resolve_region("Pennsylvania") == REGIONS["PA"]
    assert resolve_region("PA") == REGIONS["PA"]
    assert resolve_region("Atlantis") is None
    assert resolve_region(None) is None
