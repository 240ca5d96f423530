"""Data models for zipfence."""

from zipfence.models._base import ZipFenceModel
from zipfence.models.discovery import DiscoveryResult, MapFeature
from zipfence.models.geo import BoundingRegion, GeoPoint
from zipfence.models.region import Region
from zipfence.models.territory import Territory, TerritoryAssignment, parse_assignments, unique_assignments
from zipfence.models.zip_feature import ZipFeature

__all__ = [
    "BoundingRegion",
    "DiscoveryResult",
    "GeoPoint",
    "MapFeature",
    "Region",
    "Territory",
    "TerritoryAssignment",
    "ZipFeature",
    "ZipFenceModel",
    "parse_assignments",
    "unique_assignments",
]
