"""Geographic value types."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from zipfence.ingestion.normalize import safe_float
from zipfence.models._base import ZipFenceModel


class GeoPoint(ZipFenceModel):
    """A WGS84 coordinate.

    Parameters
    ----------
    latitude : float
        Latitude in degrees, ``-90`` to ``90``.
    longitude : float
        Longitude in degrees, ``-180`` to ``180``.
    """

    latitude: float = Field(ge=-90.0, le=90.0, validation_alias=AliasChoices("latitude", "lat"))
    longitude: float = Field(ge=-180.0, le=180.0, validation_alias=AliasChoices("longitude", "lng", "lon"))

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _coerce_floats(cls, value: Any) -> Any:
        parsed = safe_float(value)
        return value if parsed is None else parsed

    @classmethod
    def from_lng_lat(cls, pair: Any) -> GeoPoint:
        """Build a point from a GeoJSON ``[lng, lat]`` position."""
        return cls(latitude=pair[1], longitude=pair[0])

    def as_dict(self) -> dict[str, float]:
        return {"latitude": self.latitude, "longitude": self.longitude}


class BoundingRegion(ZipFenceModel):
    """Padded window used to frame a map view.

    Never persisted.
    """

    center: GeoPoint
    latitude_span: float = Field(ge=0.0)
    longitude_span: float = Field(ge=0.0)
