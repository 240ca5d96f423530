"""ZIP code -> state lookup endpoint.

Response shape::

    {"post code": "19102", "places": [{"state": "Pennsylvania", ...}]}
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

from zipfence._transport import Transport
from zipfence.config import ZipFenceConfig
from zipfence.exceptions import ZipFenceTransportError
from zipfence.models.region import Region
from zipfence.regions import region_by_code, region_by_name

_logger = logging.getLogger(__name__)


def _parse_state(body: Any) -> Region | None:
    if not isinstance(body, dict):
        return None
    places = body.get("places")
    if not isinstance(places, list) or not places:
        return None
    first = places[0]
    if not isinstance(first, dict):
        return None
    state = first.get("state")
    region = region_by_name(state) if isinstance(state, str) else None
    if region is None:
        abbreviation = first.get("state abbreviation")
        region = region_by_code(abbreviation) if isinstance(abbreviation, str) else None
    return region


async def lookup_zip_region(
    config: ZipFenceConfig,
    transport: Transport,
    zip_code: str,
) -> Region | None:
    """Return the region owning *zip_code*, or ``None`` on any failure."""
    url = f"{config.zip_lookup_url.rstrip('/')}/{quote(zip_code, safe='')}"
    try:
        body = await transport.get_json(url)
    except ZipFenceTransportError:
        _logger.debug("ZIP lookup for %s failed", zip_code, exc_info=True)
        return None

    region = _parse_state(body)
    if region is None:
        _logger.debug("ZIP lookup for %s returned no known state", zip_code)
    return region
