"""Map-framing bounding region."""

from __future__ import annotations

from collections.abc import Iterable

from zipfence._constants import BOUNDING_PADDING, MIN_BOUNDING_SPAN
from zipfence.models.geo import BoundingRegion, GeoPoint
from zipfence.models.zip_feature import ZipFeature


class BoundingRegionCalculator:
    """Compute a padded window around every vertex of a feature set.

    Each span is the data extent times ``padding``, floored at
    ``min_span`` degrees so a single small ZIP never over-zooms.
    """

    def __init__(self, *, padding: float = BOUNDING_PADDING, min_span: float = MIN_BOUNDING_SPAN) -> None:
        self._padding = padding
        self._min_span = min_span

    def compute(self, features: Iterable[ZipFeature]) -> BoundingRegion | None:
        min_lat = min_lon = float("inf")
        max_lat = max_lon = float("-inf")
        seen = False

        for feature in features:
            for vertex in feature.vertices():
                seen = True
                min_lat = min(min_lat, vertex.latitude)
                max_lat = max(max_lat, vertex.latitude)
                min_lon = min(min_lon, vertex.longitude)
                max_lon = max(max_lon, vertex.longitude)

        if not seen:
            return None

        return BoundingRegion(
            center=GeoPoint(latitude=(min_lat + max_lat) / 2, longitude=(min_lon + max_lon) / 2),
            latitude_span=max((max_lat - min_lat) * self._padding, self._min_span),
            longitude_span=max((max_lon - min_lon) * self._padding, self._min_span),
        )
