"""Custom exception hierarchy for zipfence."""

from __future__ import annotations


class ZipFenceError(Exception):
    """Base exception for all zipfence errors."""


class ZipFenceConfigError(ZipFenceError):
    """Invalid or missing configuration."""


class InvalidInputError(ZipFenceError):
    """Caller-supplied value rejected before any state was touched.

    Covers malformed ZIP strings, non-numeric radius input and
    out-of-range coordinates.
    """


class UnresolvedRegionError(InvalidInputError):
    """A point or ZIP code could not be mapped to a known region.

    Discovery treats this as "no candidates" and carries on; the
    selection store surfaces it so the caller can report a declined add.
    """


class ZipFenceTransportError(ZipFenceError):
    """HTTP-level failure (network, non-2xx, timeout, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class FetchFailureError(ZipFenceTransportError):
    """Geometry for a single region could not be fetched or parsed."""

    def __init__(
        self,
        message: str,
        *,
        region_code: str = "",
        status_code: int | None = None,
        url: str = "",
    ) -> None:
        self.region_code = region_code
        super().__init__(message, status_code=status_code, url=url)


class PersistFailureError(ZipFenceError):
    """Writing the territory document failed.

    In-memory selection state is left untouched when this is raised.
    """

    def __init__(self, message: str, *, driver_id: str = "") -> None:
        self.driver_id = driver_id
        super().__init__(message)
