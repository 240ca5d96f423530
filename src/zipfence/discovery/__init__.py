"""Territory discovery: which ZIP codes fall inside the driver's radius."""

from zipfence.discovery.bounds import BoundingRegionCalculator
from zipfence.discovery.candidates import StateCandidateFinder
from zipfence.discovery.orchestrator import DiscoveryOrchestrator, DiscoveryState
from zipfence.discovery.radius import RadiusFilter

__all__ = [
    "BoundingRegionCalculator",
    "DiscoveryOrchestrator",
    "DiscoveryState",
    "RadiusFilter",
    "StateCandidateFinder",
]
