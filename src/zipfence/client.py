"""High-level async client for the geometry and lookup services."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp

from zipfence._api import geometry as _geometry_api
from zipfence._api import reverse_geocode as _reverse_api
from zipfence._api import zip_lookup as _zip_api
from zipfence._transport import HttpTransport, Transport
from zipfence.config import ZipFenceConfig
from zipfence.discovery.candidates import StateCandidateFinder
from zipfence.discovery.orchestrator import DiscoveryOrchestrator
from zipfence.exceptions import ZipFenceError
from zipfence.geodesy import region_for_point
from zipfence.models.geo import GeoPoint
from zipfence.models.region import Region
from zipfence.models.zip_feature import ZipFeature

_logger = logging.getLogger(__name__)


class ZipFenceClient:
    """Async client for ZIP geometry, ZIP lookup and reverse geocoding.

    Usage::

        async with ZipFenceClient(config) as client:
            features = await client.fetch_zip_geometry(region)
    """

    def __init__(
        self,
        config: ZipFenceConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config or ZipFenceConfig()
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._external_transport = transport is not None
        self._geometry_cache: dict[str, list[ZipFeature]] = {}
        self._geometry_locks: dict[str, asyncio.Lock] = {}

    @property
    def config(self) -> ZipFenceConfig:
        return self._config

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> ZipFenceClient:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._external_transport:
            self._transport = None
        self._geometry_cache.clear()

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise ZipFenceError("Client not initialized. Use 'async with ZipFenceClient(...) as client:'")
        return self._transport

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    async def fetch_zip_geometry(self, region: Region) -> list[ZipFeature]:
        """Fetch the ZIP geometry collection for *region*.

        With ``geometry_cache_enabled`` the parsed collection is kept for
        the lifetime of the client; concurrent requests for the same
        region share a single download.
        """
        transport = self._require_transport()
        if not self._config.geometry_cache_enabled:
            return await _geometry_api.fetch_zip_geometry(self._config, transport, region)

        lock = self._geometry_locks.setdefault(region.code, asyncio.Lock())
        async with lock:
            cached = self._geometry_cache.get(region.code)
            if cached is not None:
                _logger.debug("Geometry cache hit for %s", region.code)
                return list(cached)
            features = await _geometry_api.fetch_zip_geometry(self._config, transport, region)
            self._geometry_cache[region.code] = features
            return list(features)

    async def lookup_zip_region(self, zip_code: str) -> Region | None:
        """Return the state owning *zip_code*, or ``None``."""
        transport = self._require_transport()
        return await _zip_api.lookup_zip_region(self._config, transport, zip_code)

    async def reverse_geocode(self, point: GeoPoint) -> Region | None:
        """Return the state containing *point*, or ``None``.

        Falls back to the offline bounding-box lookup when HTTP reverse
        geocoding is disabled in the configuration.
        """
        if not self._config.reverse_geocode_enabled:
            return region_for_point(point)
        transport = self._require_transport()
        return await _reverse_api.reverse_geocode(self._config, transport, point)

    # ------------------------------------------------------------------
    # Wiring helpers
    # ------------------------------------------------------------------

    def candidate_finder(self) -> StateCandidateFinder:
        return StateCandidateFinder(
            resolver=self.reverse_geocode,
            margin_miles=self._config.candidate_margin_miles,
        )

    def discovery(self, finder: StateCandidateFinder | None = None) -> DiscoveryOrchestrator:
        """Build a :class:`DiscoveryOrchestrator` fetching through this client."""
        return DiscoveryOrchestrator(finder or self.candidate_finder(), self.fetch_zip_geometry)
