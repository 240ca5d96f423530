"""HTTP transport for the public geometry and lookup services."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from zipfence.config import ZipFenceConfig
from zipfence.exceptions import ZipFenceTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles/mocks while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def get_json(self, url: str, *, params: Mapping[str, str] | None = None) -> Any:
        ...


class HttpTransport:
    """GET-only JSON transport with a per-request timeout."""

    def __init__(
        self,
        config: ZipFenceConfig,
        http_session: aiohttp.ClientSession,
    ) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def get_json(self, url: str, *, params: Mapping[str, str] | None = None) -> Any:
        """GET *url* and decode the body as JSON.

        The body is decoded from text rather than via ``resp.json()``
        because static file hosts serve GeoJSON as ``text/plain``.

        Raises :class:`ZipFenceTransportError` on network errors,
        timeouts, non-2xx statuses and undecodable bodies.
        """
        headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": self._config.user_agent,
        }

        _logger.debug("GET %s params=%s", url, dict(params) if params else {})

        try:
            async with self._http.get(url, params=params, headers=headers, timeout=self._timeout) as resp:
                text = await resp.text()
                if not 200 <= resp.status < 300:
                    raise ZipFenceTransportError(
                        f"HTTP {resp.status} from {url}: {text[:200]}",
                        status_code=resp.status,
                        url=url,
                    )
        except ZipFenceTransportError:
            raise
        except asyncio.TimeoutError as exc:
            raise ZipFenceTransportError(
                f"Request to {url} timed out after {self._config.request_timeout}s",
                url=url,
            ) from exc
        except aiohttp.ClientError as exc:
            raise ZipFenceTransportError(
                f"Request to {url} failed: {exc}",
                url=url,
            ) from exc

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ZipFenceTransportError(
                f"Invalid JSON from {url}: {text[:200]}",
                url=url,
            ) from exc
