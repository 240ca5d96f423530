"""GeoJSON -> :class:`ZipFeature` parsing.

The geometry source serves one ``FeatureCollection`` per state.  Each
feature's geometry is either a ``Polygon`` (list of rings) or a
``MultiPolygon`` (list of polygons); both are flattened to a plain
sequence of rings here so the rest of the engine never branches on it.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from zipfence._constants import ZIP_PROPERTY_KEYS
from zipfence.models.geo import GeoPoint
from zipfence.models.zip_feature import ZipFeature

_logger = logging.getLogger(__name__)


def _zip_code(properties: Any) -> str | None:
    if not isinstance(properties, Mapping):
        return None
    for key in ZIP_PROPERTY_KEYS:
        value = properties.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


def _ring(raw: Any) -> tuple[GeoPoint, ...]:
    return tuple(GeoPoint.from_lng_lat(position) for position in raw)


def flatten_rings(geometry: Any) -> tuple[tuple[GeoPoint, ...], ...] | None:
    """Return the rings of a Polygon/MultiPolygon, or ``None`` if unsupported."""
    if not isinstance(geometry, Mapping):
        return None
    kind = geometry.get("type")
    coordinates = geometry.get("coordinates")
    if not isinstance(coordinates, list):
        return None
    if kind == "Polygon":
        return tuple(_ring(ring) for ring in coordinates)
    if kind == "MultiPolygon":
        return tuple(_ring(ring) for polygon in coordinates for ring in polygon)
    return None


def parse_feature(raw: Any, region_code: str) -> ZipFeature | None:
    """Parse a single GeoJSON feature; ``None`` when it is unusable."""
    if not isinstance(raw, Mapping):
        return None
    zip_code = _zip_code(raw.get("properties"))
    if zip_code is None:
        _logger.debug("Skipping feature without ZIP code in %s", region_code)
        return None
    try:
        rings = flatten_rings(raw.get("geometry"))
    except (IndexError, KeyError, TypeError, ValueError, ValidationError):
        _logger.debug("Skipping feature %s with malformed coordinates", zip_code, exc_info=True)
        return None
    if rings is None:
        _logger.debug("Skipping feature %s with unsupported geometry", zip_code)
        return None
    return ZipFeature(zip_code=zip_code, region_code=region_code.upper(), rings=rings)


def parse_feature_collection(body: Any, region_code: str) -> list[ZipFeature] | None:
    """Parse a ``FeatureCollection`` body.

    Returns ``None`` when the body is not a feature collection at all, so
    the caller can report a fetch failure; individual bad features are
    dropped silently.
    """
    if not isinstance(body, Mapping):
        return None
    raw_features = body.get("features")
    if not isinstance(raw_features, list):
        return None

    features: list[ZipFeature] = []
    for raw in raw_features:
        feature = parse_feature(raw, region_code)
        if feature is not None:
            features.append(feature)
    return features
