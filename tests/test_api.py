from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any

import aiohttp
import pytest

from zipfence._api.geometry import fetch_zip_geometry, geometry_url
from zipfence._api.reverse_geocode import reverse_geocode
from zipfence._api.zip_lookup import lookup_zip_region
from zipfence._transport import HttpTransport
from zipfence.config import ZipFenceConfig
from zipfence.exceptions import FetchFailureError, ZipFenceTransportError
from zipfence.models.geo import GeoPoint
from zipfence.regions import REGIONS

CONFIG = ZipFenceConfig(
    geometry_base_url="http://geo.test/states/",
    zip_lookup_url="http://zip.test/us",
    reverse_geocode_url="http://reverse.test/reverse",
)


class _FakeTransport:
    def __init__(self, responses: Mapping[str, Any]) -> None:
        self.responses = dict(responses)
        self.calls: list[tuple[str, dict[str, str] | None]] = []

    async def get_json(self, url: str, *, params: Mapping[str, str] | None = None) -> Any:
        self.calls.append((url, dict(params) if params else None))
        response = self.responses.get(url)
        if response is None:
            raise ZipFenceTransportError(f"HTTP 404 from {url}", status_code=404, url=url)
        if isinstance(response, Exception):
            raise response
        return response


def test_geometry_url_naming() -> None:
    assert geometry_url(CONFIG, REGIONS["NJ"]) == "http://geo.test/states/nj_new_jersey_zip_codes_geo.min.json"
    assert (
        geometry_url(CONFIG, REGIONS["DC"])
        == "http://geo.test/states/dc_district_of_columbia_zip_codes_geo.min.json"
    )


@pytest.mark.asyncio
async def test_fetch_zip_geometry_parses_collection() -> None:
    url = geometry_url(CONFIG, REGIONS["PA"])
    body = {
        "type": "FeatureCollection",
        "features": [
            {
                "properties": {"ZCTA5CE10": "19102"},
                "geometry": {"type": "Polygon", "coordinates": [[[-75.17, 39.95], [-75.16, 39.95], [-75.17, 39.95]]]},
            }
        ],
    }

    features = await fetch_zip_geometry(CONFIG, _FakeTransport({url: body}), REGIONS["PA"])

    assert [(f.zip_code, f.region_code) for f in features] == [("19102", "PA")]


@pytest.mark.asyncio
async def test_fetch_zip_geometry_wraps_transport_errors() -> None:
    with pytest.raises(FetchFailureError) as excinfo:
        await fetch_zip_geometry(CONFIG, _FakeTransport({}), REGIONS["DE"])

    assert excinfo.value.region_code == "DE"
    assert excinfo.value.status_code == 404
    assert excinfo.value.url.endswith("de_delaware_zip_codes_geo.min.json")


@pytest.mark.asyncio
async def test_fetch_zip_geometry_rejects_non_collection() -> None:
    url = geometry_url(CONFIG, REGIONS["PA"])

    with pytest.raises(FetchFailureError):
        await fetch_zip_geometry(CONFIG, _FakeTransport({url: {"error": "rate limited"}}), REGIONS["PA"])


@pytest.mark.asyncio
async def test_lookup_zip_region() -> None:
    transport = _FakeTransport(
        {
            "http://zip.test/us/19102": {"post code": "19102", "places": [{"state": "Pennsylvania"}]},
            "http://zip.test/us/08102": {"places": [{"state": "Nowhere", "state abbreviation": "NJ"}]},
            "http://zip.test/us/00000": {"places": []},
        }
    )

    assert await lookup_zip_region(CONFIG, transport, "19102") == REGIONS["PA"]
    assert await lookup_zip_region(CONFIG, transport, "08102") == REGIONS["NJ"]
    assert await lookup_zip_region(CONFIG, transport, "00000") is None
    assert await lookup_zip_region(CONFIG, transport, "99999") is None


@pytest.mark.asyncio
async def test_reverse_geocode() -> None:
    transport = _FakeTransport({CONFIG.reverse_geocode_url: {"address": {"state": "Pennsylvania"}}})

    region = await reverse_geocode(CONFIG, transport, GeoPoint(latitude=39.95, longitude=-75.16))

    assert region == REGIONS["PA"]
    _url, params = transport.calls[0]
    assert params is not None
    assert params["lat"] == "39.950000"
    assert params["lon"] == "-75.160000"
    assert params["format"] == "jsonv2"


@pytest.mark.asyncio
async def test_reverse_geocode_iso_fallback_and_failures() -> None:
    point = GeoPoint(latitude=39.95, longitude=-75.16)
    iso_only = _FakeTransport({CONFIG.reverse_geocode_url: {"address": {"ISO3166-2-lvl4": "US-NJ"}}})
    offshore = _FakeTransport({CONFIG.reverse_geocode_url: {"error": "Unable to geocode"}})

    assert await reverse_geocode(CONFIG, iso_only, point) == REGIONS["NJ"]
    assert await reverse_geocode(CONFIG, offshore, point) is None
    assert await reverse_geocode(CONFIG, _FakeTransport({}), point) is None


class _FakeResponse:
    def __init__(self, status: int, text: str) -> None:
        self.status = status
        self._text = text

    async def text(self) -> str:
        return self._text

    async def __aenter__(self) -> _FakeResponse:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


class _FakeSession:
    def __init__(self, response: _FakeResponse | Exception) -> None:
        self.response = response
        self.requests: list[dict[str, Any]] = []

    def get(self, url: str, **kwargs: Any) -> _FakeResponse:
        self.requests.append({"url": url, **kwargs})
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


@pytest.mark.asyncio
async def test_http_transport_decodes_text_body() -> None:
    session = _FakeSession(_FakeResponse(200, '{"type": "FeatureCollection", "features": []}'))
    transport = HttpTransport(CONFIG, session)  # type: ignore[arg-type]

    body = await transport.get_json("http://geo.test/x.json", params={"a": "1"})

    assert body == {"type": "FeatureCollection", "features": []}
    request = session.requests[0]
    assert request["params"] == {"a": "1"}
    assert request["headers"]["user-agent"] == CONFIG.user_agent
    assert request["timeout"].total == CONFIG.request_timeout


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("response", "status"),
    [
        (_FakeResponse(404, "Not Found"), 404),
        (_FakeResponse(200, "<html>"), None),
        (aiohttp.ClientConnectionError("refused"), None),
        (asyncio.TimeoutError(), None),
    ],
)
async def test_http_transport_errors(response: _FakeResponse | Exception, status: int | None) -> None:
    transport = HttpTransport(CONFIG, _FakeSession(response))  # type: ignore[arg-type]

    with pytest.raises(ZipFenceTransportError) as excinfo:
        await transport.get_json("http://geo.test/x.json")

    assert excinfo.value.status_code == status
    assert excinfo.value.url == "http://geo.test/x.json"
