"""Per-state ZIP geometry endpoint.

Geometry is served as one static GeoJSON file per state, named
``<code>_<name>_zip_codes_geo.min.json`` with both parts lower-cased and
spaces in the name replaced by underscores.
"""

from __future__ import annotations

import logging

from zipfence._transport import Transport
from zipfence.config import ZipFenceConfig
from zipfence.exceptions import FetchFailureError, ZipFenceTransportError
from zipfence.ingestion.geojson import parse_feature_collection
from zipfence.models.region import Region
from zipfence.models.zip_feature import ZipFeature

_logger = logging.getLogger(__name__)


def geometry_resource_name(region: Region) -> str:
    slug = region.name.lower().replace(" ", "_")
    return f"{region.code.lower()}_{slug}_zip_codes_geo.min.json"


def geometry_url(config: ZipFenceConfig, region: Region) -> str:
    return f"{config.geometry_base_url.rstrip('/')}/{geometry_resource_name(region)}"


async def fetch_zip_geometry(
    config: ZipFenceConfig,
    transport: Transport,
    region: Region,
) -> list[ZipFeature]:
    """Fetch and parse the ZIP geometry collection for *region*.

    Raises
    ------
    FetchFailureError
        Network error, non-2xx status, or a body that is not a
        GeoJSON ``FeatureCollection``.
    """
    url = geometry_url(config, region)
    try:
        body = await transport.get_json(url)
    except ZipFenceTransportError as exc:
        raise FetchFailureError(
            f"Geometry fetch for {region.code} failed: {exc}",
            region_code=region.code,
            status_code=exc.status_code,
            url=url,
        ) from exc

    features = parse_feature_collection(body, region.code)
    if features is None:
        raise FetchFailureError(
            f"Geometry for {region.code} is not a FeatureCollection",
            region_code=region.code,
            url=url,
        )

    _logger.debug("Fetched %d ZIP features for %s", len(features), region.code)
    return features
