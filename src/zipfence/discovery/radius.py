"""Within-radius filtering of ZIP features."""

from __future__ import annotations

from collections.abc import Iterable

from zipfence.geodesy import haversine_miles
from zipfence.models.geo import GeoPoint
from zipfence.models.zip_feature import ZipFeature


class RadiusFilter:
    """Vertex-sampling radius test.

    A feature is kept iff at least one vertex of any of its rings lies
    within ``radius_miles`` great-circle distance of the point.  This is
    an approximation of polygon/circle intersection: a large polygon
    covering the circle with every vertex outside it is dropped, and a
    single vertex inside the circle keeps the whole polygon.
    """

    def includes(self, point: GeoPoint, radius_miles: float, feature: ZipFeature) -> bool:
        lat, lon = point.latitude, point.longitude
        return any(
            haversine_miles(lat, lon, vertex.latitude, vertex.longitude) <= radius_miles
            for vertex in feature.vertices()
        )

    def filter(self, point: GeoPoint, radius_miles: float, features: Iterable[ZipFeature]) -> list[ZipFeature]:
        """Return the features within the radius, in source order."""
        return [feature for feature in features if self.includes(point, radius_miles, feature)]
