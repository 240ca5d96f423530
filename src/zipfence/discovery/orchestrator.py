"""Discovery state machine.

Drives candidate selection -> concurrent geometry fetches -> radius
filter -> bounding region, and publishes the result.  Inputs arrive as
discrete events (location, region, radius); each qualifying change
starts a new run stamped with a monotonically increasing id, and any
completion whose id is no longer current is dropped.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable, Sequence
from enum import StrEnum

from zipfence.discovery.bounds import BoundingRegionCalculator
from zipfence.discovery.candidates import StateCandidateFinder
from zipfence.discovery.radius import RadiusFilter
from zipfence.exceptions import ZipFenceError
from zipfence.models.discovery import DiscoveryResult
from zipfence.models.geo import BoundingRegion, GeoPoint
from zipfence.models.region import Region
from zipfence.models.zip_feature import ZipFeature

_logger = logging.getLogger(__name__)

GeometryFetcher = Callable[[Region], Awaitable[Sequence[ZipFeature]]]
ResultCallback = Callable[[DiscoveryResult], None]


class DiscoveryState(StrEnum):
    IDLE = "idle"
    RESOLVING = "resolving"
    FETCHING = "fetching"
    READY = "ready"


class DiscoveryOrchestrator:
    """Reactive coordinator for territory discovery.

    Usage::

        orchestrator = DiscoveryOrchestrator(finder, client.fetch_zip_geometry)
        orchestrator.subscribe(on_result)
        orchestrator.set_radius(10)
        orchestrator.set_location(point, region)
        await orchestrator.wait_idle()

    A run starts once location, region and radius are all known, and
    again whenever one of them changes.  A location without a region
    publishes an empty result right away, superseding any run in flight.
    ``rerun()`` forces a run with unchanged inputs (explicit radius
    re-apply).
    """

    def __init__(
        self,
        finder: StateCandidateFinder,
        fetch_geometry: GeometryFetcher,
        *,
        radius_filter: RadiusFilter | None = None,
        bounds: BoundingRegionCalculator | None = None,
    ) -> None:
        self._finder = finder
        self._fetch_geometry = fetch_geometry
        self._radius_filter = radius_filter or RadiusFilter()
        self._bounds = bounds or BoundingRegionCalculator()
        self._callbacks: list[ResultCallback] = []

        self._state = DiscoveryState.IDLE
        self._location: GeoPoint | None = None
        self._region: Region | None = None
        self._radius_miles: float | None = None

        self._run_id = 0
        self._task: asyncio.Task[None] | None = None
        self._result: DiscoveryResult | None = None

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def state(self) -> DiscoveryState:
        return self._state

    @property
    def run_id(self) -> int:
        return self._run_id

    @property
    def location(self) -> GeoPoint | None:
        return self._location

    @property
    def region(self) -> Region | None:
        return self._region

    @property
    def radius_miles(self) -> float | None:
        return self._radius_miles

    @property
    def last_result(self) -> DiscoveryResult | None:
        return self._result

    @property
    def features(self) -> tuple[ZipFeature, ...]:
        return self._result.features if self._result is not None else ()

    @property
    def bounding_region(self) -> BoundingRegion | None:
        return self._result.bounding_region if self._result is not None else None

    def visible_zip_codes(self) -> list[str]:
        """ZIP codes of the currently published features (select-all input)."""
        return [feature.zip_code for feature in self.features]

    def subscribe(self, callback: ResultCallback) -> Callable[[], None]:
        """Register a result callback; returns an unsubscribe function."""
        self._callbacks.append(callback)

        def _unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._callbacks.remove(callback)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Input events
    # ------------------------------------------------------------------

    def set_location(self, location: GeoPoint, region: Region | None) -> bool:
        """Location feed update.  Returns whether a new run started."""
        if location == self._location and region == self._region:
            return False
        self._location = location
        self._region = region
        return self._maybe_start()

    def set_region(self, region: Region | None) -> bool:
        if region == self._region:
            return False
        self._region = region
        return self._maybe_start()

    def set_radius(self, radius_miles: float) -> bool:
        if radius_miles == self._radius_miles:
            return False
        self._radius_miles = radius_miles
        return self._maybe_start()

    def rerun(self) -> bool:
        """Start a new run even if no input changed."""
        return self._maybe_start()

    # ------------------------------------------------------------------
    # Run lifecycle
    # ------------------------------------------------------------------

    def _maybe_start(self) -> bool:
        location = self._location
        radius_miles = self._radius_miles
        if location is None or radius_miles is None:
            return False

        previous = self._task
        self._task = None
        if previous is not None and not previous.done():
            previous.cancel()

        self._run_id += 1
        run_id = self._run_id
        region = self._region
        if region is None:
            # Unresolved location: supersede any earlier run with an empty result.
            _logger.debug("No region for run %d; publishing empty result", run_id)
            self._publish(DiscoveryResult(run_id=run_id))
            return False

        self._state = DiscoveryState.RESOLVING
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(
            self._run(run_id, location, region, radius_miles),
            name=f"zipfence-discovery-{run_id}",
        )
        _logger.debug("Discovery run %d started", run_id)
        return True

    def _is_current(self, run_id: int) -> bool:
        return run_id == self._run_id

    async def _run(self, run_id: int, location: GeoPoint, region: Region, radius_miles: float) -> None:
        try:
            candidates = await self._finder.find(location, radius_miles, region)
        except Exception:
            _logger.warning("Candidate lookup failed for run %d", run_id, exc_info=True)
            candidates = ()

        if not self._is_current(run_id):
            _logger.debug("Discarding stale run %d after resolve", run_id)
            return

        if not candidates:
            self._publish(DiscoveryResult(run_id=run_id))
            return

        self._state = DiscoveryState.FETCHING
        # gather keeps argument order, so slots line up with candidates.
        slots = await asyncio.gather(
            *(self._fetch_region(run_id, candidate, location, radius_miles) for candidate in candidates)
        )

        if not self._is_current(run_id):
            _logger.debug("Discarding stale run %d after fetch", run_id)
            return

        features: list[ZipFeature] = []
        failed: list[str] = []
        for candidate, slot in zip(candidates, slots, strict=True):
            if slot is None:
                failed.append(candidate.code)
                continue
            features.extend(slot)

        self._publish(
            DiscoveryResult(
                run_id=run_id,
                features=tuple(features),
                bounding_region=self._bounds.compute(features),
                candidates=candidates,
                failed_regions=tuple(failed),
            )
        )

    async def _fetch_region(
        self,
        run_id: int,
        region: Region,
        location: GeoPoint,
        radius_miles: float,
    ) -> list[ZipFeature] | None:
        """Fetch and filter one region; ``None`` marks a failed slot."""
        try:
            collection = await self._fetch_geometry(region)
            return self._radius_filter.filter(location, radius_miles, collection)
        except (ZipFenceError, asyncio.TimeoutError):
            _logger.warning("Geometry fetch for %s failed in run %d", region.code, run_id, exc_info=True)
        except Exception:
            _logger.warning("Unusable geometry for %s in run %d", region.code, run_id, exc_info=True)
        return None

    def _publish(self, result: DiscoveryResult) -> None:
        self._result = result
        self._state = DiscoveryState.READY
        _logger.info(
            "Discovery run %d ready: %d ZIPs from %d regions (%d failed)",
            result.run_id,
            len(result.features),
            len(result.candidates),
            len(result.failed_regions),
        )
        for callback in list(self._callbacks):
            try:
                callback(result)
            except Exception:
                _logger.debug("Discovery result callback failed", exc_info=True)

    async def wait_idle(self) -> DiscoveryResult | None:
        """Wait until the latest run has finished; return its result."""
        while self._task is not None and not self._task.done():
            task = self._task
            await asyncio.wait({task})
        return self._result

    async def aclose(self) -> None:
        """Cancel any in-flight run."""
        task = self._task
        self._task = None
        self._run_id += 1
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
