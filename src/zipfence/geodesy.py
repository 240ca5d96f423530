"""Geodesy helper functions.

Pure functions only; no I/O.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from zipfence._constants import EARTH_RADIUS_MILES
from zipfence.ingestion.normalize import clamp
from zipfence.models.geo import GeoPoint
from zipfence.models.region import Region
from zipfence.regions import REGIONS


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in miles using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # Rounding can push ``a`` a hair above 1 for antipodal points.
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(max(0.0, 1 - a)))
    return EARTH_RADIUS_MILES * c


def distance_miles(a: GeoPoint, b: GeoPoint) -> float:
    return haversine_miles(a.latitude, a.longitude, b.latitude, b.longitude)


def region_contains(region: Region, point: GeoPoint) -> bool:
    """Whether *point* lies inside the region's bounding box."""
    return (
        region.min_lat <= point.latitude <= region.max_lat
        and region.min_lon <= point.longitude <= region.max_lon
    )


def distance_to_region_miles(point: GeoPoint, region: Region) -> float:
    """Distance from *point* to the nearest point of the region's bounding box.

    Zero when the point is inside the box.  The nearest point is found by
    clamping each coordinate to the box, which is exact along meridians
    and slightly optimistic along parallels; the candidate margin absorbs
    the difference.
    """
    if region_contains(region, point):
        return 0.0
    nearest_lat = clamp(point.latitude, region.min_lat, region.max_lat)
    nearest_lon = clamp(point.longitude, region.min_lon, region.max_lon)
    return haversine_miles(point.latitude, point.longitude, nearest_lat, nearest_lon)


def regions_containing(point: GeoPoint, regions: Iterable[Region] | None = None) -> list[Region]:
    """All regions whose bounding box contains *point*, smallest box first."""
    pool = REGIONS.values() if regions is None else regions
    matches = [region for region in pool if region_contains(region, point)]
    matches.sort(key=lambda region: (region.bbox_area, region.code))
    return matches


def region_for_point(point: GeoPoint, regions: Iterable[Region] | None = None) -> Region | None:
    """Offline reverse lookup of the region containing *point*.

    Picks the smallest bounding box that contains the point, which favors
    enclaves such as DC over their neighbors.  Near shared borders the
    answer is approximate; use the HTTP reverse geocoder when it matters.
    Returns ``None`` for points outside every known region.
    """
    matches = regions_containing(point, regions)
    return matches[0] if matches else None
