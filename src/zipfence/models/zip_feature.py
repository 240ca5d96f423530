"""ZIP code geometry model."""

from __future__ import annotations

from collections.abc import Iterator

from pydantic import Field

from zipfence.models._base import ZipFenceModel
from zipfence.models.geo import GeoPoint


class ZipFeature(ZipFenceModel):
    """One ZIP code's polygon geometry.

    Polygon and MultiPolygon sources are both flattened to a plain
    sequence of rings; nothing downstream cares which one it was.
    """

    zip_code: str
    region_code: str
    rings: tuple[tuple[GeoPoint, ...], ...] = Field(default_factory=tuple)

    def vertices(self) -> Iterator[GeoPoint]:
        """Yield every vertex of every ring, in source order."""
        for ring in self.rings:
            yield from ring
