"""Territory screen coordinator.

Connects the location feed, the driver document, the discovery
orchestrator, the selection store and the map sink.  Every input is an
explicit method call or document notification; nothing is polled.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any, Protocol

from zipfence._constants import DEFAULT_MAP_SPAN, DOC_LOCATION, DOC_RADIUS, DOC_REGION, DOC_ZIP_CODES
from zipfence.client import ZipFenceClient
from zipfence.discovery.candidates import StateCandidateFinder
from zipfence.discovery.orchestrator import DiscoveryOrchestrator
from zipfence.exceptions import PersistFailureError
from zipfence.ingestion.normalize import clamp, parse_radius
from zipfence.models.discovery import DiscoveryResult, MapFeature
from zipfence.models.geo import BoundingRegion, GeoPoint
from zipfence.models.region import Region
from zipfence.models.territory import Territory, TerritoryAssignment
from zipfence.regions import resolve_region
from zipfence.state.documents import DocumentStore
from zipfence.state.selection import TerritorySelectionStore

_logger = logging.getLogger(__name__)


class MapSink(Protocol):
    """Receives what the map should draw."""

    def render(
        self,
        features: list[MapFeature],
        bounding_region: BoundingRegion | None,
        center: GeoPoint | None,
    ) -> None:
        ...


class TerritoryManager:
    """Per-driver territory session.

    Parameters
    ----------
    driver_id
        Key of the driver's document.
    documents
        Driver document store.
    orchestrator
        Discovery state machine.
    selection
        ZIP selection store for the same driver.
    finder
        Used to resolve the current state when the location feed does
        not supply one.
    map_sink
        Optional renderer, refreshed after every change.
    max_radius_miles
        Clamp applied by :meth:`apply_radius`.
    persist_location
        Also write location/region updates to the document.  Off by
        default because the location feed owns those fields.
    """

    def __init__(
        self,
        driver_id: str,
        documents: DocumentStore,
        orchestrator: DiscoveryOrchestrator,
        selection: TerritorySelectionStore,
        finder: StateCandidateFinder,
        *,
        map_sink: MapSink | None = None,
        max_radius_miles: float = 50.0,
        persist_location: bool = False,
    ) -> None:
        self._driver_id = driver_id
        self._documents = documents
        self._orchestrator = orchestrator
        self._selection = selection
        self._finder = finder
        self._map_sink = map_sink
        self._max_radius_miles = max_radius_miles
        self._persist_location = persist_location

        self._location: GeoPoint | None = None
        self._requested_location: GeoPoint | None = None
        self._location_generation = 0
        self._region: Region | None = None
        self._radius_miles: float | None = None
        self._applying_radius: float | None = None
        self._unsubscribers: list[Callable[[], None]] = []
        self._pending: set[asyncio.Task[Any]] = set()

    @classmethod
    def from_client(
        cls,
        client: ZipFenceClient,
        documents: DocumentStore,
        driver_id: str,
        *,
        map_sink: MapSink | None = None,
        persist_location: bool = False,
    ) -> TerritoryManager:
        """Wire a manager whose I/O goes through *client*."""
        finder = client.candidate_finder()
        return cls(
            driver_id,
            documents,
            client.discovery(finder),
            TerritorySelectionStore(documents, driver_id, zip_lookup=client.lookup_zip_region),
            finder,
            map_sink=map_sink,
            max_radius_miles=client.config.max_radius_miles,
            persist_location=persist_location,
        )

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def orchestrator(self) -> DiscoveryOrchestrator:
        return self._orchestrator

    @property
    def selection(self) -> TerritorySelectionStore:
        return self._selection

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
    def assignments(self) -> tuple[TerritoryAssignment, ...]:
        return self._selection.assignments

    def map_features(self) -> list[MapFeature]:
        """Visible features tagged with their current selection state."""
        return [
            MapFeature(feature=feature, selected=self._selection.contains(feature.zip_code))
            for feature in self._orchestrator.features
        ]

    def framing_region(self) -> BoundingRegion | None:
        """Bounding region of the visible features, else a window on home."""
        region = self._orchestrator.bounding_region
        if region is not None:
            return region
        if self._location is None:
            return None
        return BoundingRegion(
            center=self._location,
            latitude_span=DEFAULT_MAP_SPAN,
            longitude_span=DEFAULT_MAP_SPAN,
        )

    def render(self) -> None:
        if self._map_sink is None:
            return
        try:
            self._map_sink.render(self.map_features(), self.framing_region(), self._location)
        except Exception:
            _logger.debug("Map sink render failed", exc_info=True)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> Territory:
        """Load the driver document, seed inputs and subscribe to changes."""
        document = await self._documents.read(self._driver_id)
        territory = Territory.from_document(document)
        self._selection.replace_all(territory.assignments)

        radius = self._stored_radius(territory)
        if radius is not None:
            self._radius_miles = radius
            self._orchestrator.set_radius(radius)
        if territory.home_location is not None:
            await self.on_location(territory.home_location, territory.home_region)

        self._unsubscribers.append(self._orchestrator.subscribe(self._on_discovery_result))
        self._unsubscribers.append(self._documents.subscribe(self._driver_id, self._on_document_change))
        self.render()
        return territory

    async def wait_idle(self) -> DiscoveryResult | None:
        """Wait for pending document-driven updates and the current discovery run."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
        return await self._orchestrator.wait_idle()

    async def aclose(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        for task in list(self._pending):
            task.cancel()
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        await self._orchestrator.aclose()

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    async def on_location(self, point: GeoPoint, region: Region | str | None = None) -> bool:
        """Location feed update.

        Resolves the current state from the point when the feed does not
        supply one.  Updates are stamped with a generation; a resolution
        that completes after a newer point arrived is dropped.  Returns
        whether anything changed.
        """
        resolved = resolve_region(region)
        latest = self._requested_location or self._location
        if point == latest and (resolved is None or resolved == self._region):
            return False

        self._location_generation += 1
        generation = self._location_generation
        self._requested_location = point
        if resolved is None:
            resolved = await self._finder.resolve_region(point)
            if generation != self._location_generation:
                _logger.debug("Dropping stale region resolution for %s", point)
                return False

        self._location = point
        self._region = resolved
        if self._persist_location:
            partial: dict[str, Any] = {DOC_LOCATION: point.as_dict()}
            if resolved is not None:
                partial[DOC_REGION] = resolved.name
            await self._write(partial)
            if generation != self._location_generation:
                return False

        self._orchestrator.set_location(point, resolved)
        self.render()
        return True

    async def apply_radius(self, value: Any) -> float:
        """Parse, clamp, persist the radius and re-run discovery.

        Raises :class:`InvalidInputError` for non-numeric input and
        :class:`PersistFailureError` when the write fails (the in-memory
        radius is then left unchanged).
        """
        radius = parse_radius(value, max_radius=self._max_radius_miles)
        self._applying_radius = radius
        try:
            await self._write({DOC_RADIUS: radius})
        finally:
            self._applying_radius = None
        self._radius_miles = radius
        if not self._orchestrator.set_radius(radius):
            self._orchestrator.rerun()
        return radius

    async def add_zip(self, zip_code: str) -> tuple[TerritoryAssignment, ...]:
        result = await self._selection.add(zip_code, self._region.code if self._region else None)
        self.render()
        return result

    async def remove_zip(self, zip_code: str) -> tuple[TerritoryAssignment, ...]:
        result = await self._selection.remove(zip_code)
        self.render()
        return result

    async def on_map_tap(self, zip_code: str) -> tuple[TerritoryAssignment, ...]:
        """Map tap on a ZIP polygon toggles its selection."""
        result = await self._selection.toggle(zip_code, self._region)
        self.render()
        return result

    async def select_all_visible(self) -> tuple[TerritoryAssignment, ...]:
        """Select every visible ZIP, tagging the whole set with the current state.

        No-op without a resolvable current state.
        """
        if self._region is None:
            return self._selection.assignments
        result = await self._selection.select_all(self._orchestrator.visible_zip_codes(), self._region)
        self.render()
        return result

    async def deselect_all(self) -> tuple[TerritoryAssignment, ...]:
        result = await self._selection.deselect_all()
        self.render()
        return result

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    async def _write(self, partial: dict[str, Any]) -> None:
        try:
            await self._documents.write(self._driver_id, partial)
        except PersistFailureError:
            raise
        except Exception as exc:
            raise PersistFailureError(
                f"Saving {', '.join(partial)} for {self._driver_id} failed: {exc}",
                driver_id=self._driver_id,
            ) from exc

    def _stored_radius(self, territory: Territory) -> float | None:
        """Document radius clamped to ``[0, max_radius_miles]``."""
        if territory.radius_miles is None:
            return None
        return clamp(territory.radius_miles, 0.0, self._max_radius_miles)

    def _on_discovery_result(self, _result: DiscoveryResult) -> None:
        self.render()

    def _on_document_change(self, document: dict[str, Any]) -> None:
        """Adopt changes written elsewhere (another device, the feed)."""
        if isinstance(document.get(DOC_ZIP_CODES), list):
            self._selection.replace_from_document(document[DOC_ZIP_CODES])

        territory = Territory.from_document(document)
        radius = self._stored_radius(territory)
        if radius is not None and radius != self._radius_miles and radius != self._applying_radius:
            self._radius_miles = radius
            self._orchestrator.set_radius(radius)

        location = territory.home_location
        if location is not None and location != (self._requested_location or self._location):
            self._track(self.on_location(location, territory.home_region))

        self.render()

    def _track(self, coro: Any) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task[Any]) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            _logger.warning("Background territory update failed", exc_info=task.exception())
