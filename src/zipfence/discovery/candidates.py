"""Candidate state selection.

Narrows the whole country down to the few states whose ZIP geometry
could intersect the driver's radius circle.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable

from zipfence._constants import DEFAULT_CANDIDATE_MARGIN_MILES
from zipfence.exceptions import InvalidInputError, ZipFenceError
from zipfence.geodesy import distance_to_region_miles, region_for_point
from zipfence.models.geo import GeoPoint
from zipfence.models.region import Region
from zipfence.regions import REGIONS, resolve_region

_logger = logging.getLogger(__name__)

RegionResolver = Callable[[GeoPoint], Awaitable[Region | None]]


class StateCandidateFinder:
    """Pick the states worth fetching ZIP geometry for.

    Expansion rule: every state whose bounding box lies within
    ``radius + margin_miles`` of the point.  A state's territory is
    inside its box, so no intersecting state is missed; the margin
    bounds the extra fetches.

    Parameters
    ----------
    resolver
        Async point -> region lookup (typically the HTTP reverse
        geocoder).  When omitted, the offline bounding-box lookup is used.
    margin_miles
        Safety margin added to the radius.
    regions
        Region table to search; defaults to the built-in US states.
    """

    def __init__(
        self,
        *,
        resolver: RegionResolver | None = None,
        margin_miles: float = DEFAULT_CANDIDATE_MARGIN_MILES,
        regions: Iterable[Region] | None = None,
    ) -> None:
        self._resolver = resolver
        self._margin_miles = margin_miles
        self._regions: tuple[Region, ...] = tuple(REGIONS.values() if regions is None else regions)

    async def resolve_region(self, point: GeoPoint) -> Region | None:
        """Resolve the region containing *point*; ``None`` if unresolvable."""
        if self._resolver is None:
            return region_for_point(point, self._regions)
        try:
            region = await self._resolver(point)
        except ZipFenceError:
            _logger.warning("Region lookup for %s failed", point, exc_info=True)
            return None
        return resolve_region(region)

    async def find(
        self,
        point: GeoPoint,
        radius_miles: float,
        known_region: Region | None = None,
    ) -> tuple[Region, ...]:
        """Return candidate regions, known region first, then nearest first.

        An unresolvable point yields an empty tuple; the caller must not
        fetch anything in that case.
        """
        if radius_miles < 0:
            raise InvalidInputError(f"radius must not be negative, got {radius_miles}")

        anchor = resolve_region(known_region)
        if anchor is None:
            anchor = await self.resolve_region(point)
        if anchor is None:
            _logger.debug("No region for %s; no candidates", point)
            return ()

        threshold = radius_miles + self._margin_miles
        nearby: list[tuple[float, str, Region]] = []
        for region in self._regions:
            if region.code == anchor.code:
                continue
            distance = distance_to_region_miles(point, region)
            if distance <= threshold:
                nearby.append((distance, region.code, region))
        nearby.sort(key=lambda item: (item[0], item[1]))

        candidates = (anchor, *(region for _, _, region in nearby))
        _logger.debug(
            "Candidates for %s r=%.1fmi: %s",
            point,
            radius_miles,
            ", ".join(region.code for region in candidates),
        )
        return candidates
