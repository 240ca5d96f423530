"""Point -> state reverse geocoding endpoint (Nominatim-style).

Response shape::

    {"address": {"state": "Pennsylvania", "ISO3166-2-lvl4": "US-PA", ...}}
"""

from __future__ import annotations

import logging
from typing import Any

from zipfence._transport import Transport
from zipfence.config import ZipFenceConfig
from zipfence.exceptions import ZipFenceTransportError
from zipfence.models.geo import GeoPoint
from zipfence.models.region import Region
from zipfence.regions import region_by_code, region_by_name

_logger = logging.getLogger(__name__)


def _parse_region(body: Any) -> Region | None:
    if not isinstance(body, dict):
        return None
    address = body.get("address")
    if not isinstance(address, dict):
        return None
    state = address.get("state")
    region = region_by_name(state) if isinstance(state, str) else None
    if region is None:
        iso_code = address.get("ISO3166-2-lvl4")
        region = region_by_code(iso_code) if isinstance(iso_code, str) else None
    return region


async def reverse_geocode(
    config: ZipFenceConfig,
    transport: Transport,
    point: GeoPoint,
) -> Region | None:
    """Return the region containing *point*, or ``None`` if unresolvable."""
    params = {
        "format": "jsonv2",
        "lat": f"{point.latitude:.6f}",
        "lon": f"{point.longitude:.6f}",
        "zoom": "5",
        "addressdetails": "1",
    }
    try:
        body = await transport.get_json(config.reverse_geocode_url, params=params)
    except ZipFenceTransportError:
        _logger.debug("Reverse geocode for %s failed", point, exc_info=True)
        return None
    return _parse_region(body)
