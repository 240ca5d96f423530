"""Region (US state) model."""

from __future__ import annotations

from zipfence.models._base import ZipFenceModel


class Region(ZipFenceModel):
    """A first-level administrative area.

    Parameters
    ----------
    name : str
        Canonical name, e.g. ``"Pennsylvania"``.
    code : str
        Upper-case postal abbreviation, e.g. ``"PA"``.
    min_lat, max_lat, min_lon, max_lon : float
        Approximate bounding box of the region's territory.
    """

    name: str
    code: str
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    @property
    def bbox_area(self) -> float:
        """Bounding box area in square degrees."""
        return (self.max_lat - self.min_lat) * (self.max_lon - self.min_lon)

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"
