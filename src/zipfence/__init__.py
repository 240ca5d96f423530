"""zipfence - Async territory discovery and ZIP geofencing for field drivers."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("zipfence")
except PackageNotFoundError:
    __version__ = "0+local"
from zipfence.client import ZipFenceClient
from zipfence.config import ZipFenceConfig
from zipfence.discovery import (
    BoundingRegionCalculator,
    DiscoveryOrchestrator,
    DiscoveryState,
    RadiusFilter,
    StateCandidateFinder,
)
from zipfence.exceptions import (
    FetchFailureError,
    InvalidInputError,
    PersistFailureError,
    UnresolvedRegionError,
    ZipFenceConfigError,
    ZipFenceError,
    ZipFenceTransportError,
)
from zipfence.manager import MapSink, TerritoryManager
from zipfence.models import (
    BoundingRegion,
    DiscoveryResult,
    GeoPoint,
    MapFeature,
    Region,
    Territory,
    TerritoryAssignment,
    ZipFeature,
)
from zipfence.regions import REGIONS, region_by_code, region_by_name, resolve_region
from zipfence.state.documents import DocumentStore, InMemoryDocumentStore
from zipfence.state.selection import TerritorySelectionStore

__all__ = [
    "__version__",
    "BoundingRegion",
    "BoundingRegionCalculator",
    "DiscoveryOrchestrator",
    "DiscoveryResult",
    "DiscoveryState",
    "DocumentStore",
    "FetchFailureError",
    "GeoPoint",
    "InMemoryDocumentStore",
    "InvalidInputError",
    "MapFeature",
    "MapSink",
    "PersistFailureError",
    "REGIONS",
    "RadiusFilter",
    "Region",
    "StateCandidateFinder",
    "Territory",
    "TerritoryAssignment",
    "TerritoryManager",
    "TerritorySelectionStore",
    "UnresolvedRegionError",
    "ZipFeature",
    "ZipFenceClient",
    "ZipFenceConfig",
    "ZipFenceConfigError",
    "ZipFenceError",
    "ZipFenceTransportError",
    "region_by_code",
    "region_by_name",
    "resolve_region",
]
