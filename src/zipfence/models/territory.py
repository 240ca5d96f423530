"""Territory document models."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import AliasChoices, Field, ValidationError, field_validator

from zipfence._constants import DOC_LOCATION, DOC_RADIUS, DOC_REGION, DOC_ZIP_CODES
from zipfence.ingestion.normalize import safe_float
from zipfence.models._base import ZipFenceModel
from zipfence.models.geo import GeoPoint
from zipfence.models.region import Region

_logger = logging.getLogger(__name__)


class TerritoryAssignment(ZipFenceModel):
    """A ZIP code assigned to a driver, tagged with its state code.

    Serialized as ``{"key": <zip>, "state": <code>}`` in the driver
    document.
    """

    zip_code: str = Field(validation_alias=AliasChoices("key", "zip_code", "zipCode"))
    region_code: str = Field(validation_alias=AliasChoices("state", "region_code", "regionCode"))

    @field_validator("zip_code", "region_code", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        if isinstance(value, (int, str)):
            return str(value).strip()
        return value

    @field_validator("region_code")
    @classmethod
    def _upper(cls, value: str) -> str:
        return value.upper()

    def to_document(self) -> dict[str, str]:
        return {"key": self.zip_code, "state": self.region_code}


def unique_assignments(items: Iterable[TerritoryAssignment]) -> tuple[TerritoryAssignment, ...]:
    """Collapse duplicate ZIP codes, keeping the last occurrence's tag.

    First-seen order of keys is preserved.
    """
    merged: dict[str, TerritoryAssignment] = {}
    for item in items:
        merged[item.zip_code] = item
    return tuple(merged.values())


def parse_assignments(raw: Any) -> tuple[TerritoryAssignment, ...]:
    """Parse the ``zipCodes`` document field, skipping malformed entries."""
    if not isinstance(raw, list):
        return ()
    parsed: list[TerritoryAssignment] = []
    for entry in raw:
        try:
            parsed.append(TerritoryAssignment.model_validate(entry))
        except ValidationError:
            _logger.debug("Skipping malformed zipCodes entry: %r", entry)
    return unique_assignments(parsed)


class Territory(ZipFenceModel):
    """Full persisted state for one driver."""

    home_location: GeoPoint | None = None
    home_region: Region | None = None
    radius_miles: float | None = None
    assignments: tuple[TerritoryAssignment, ...] = ()

    @field_validator("assignments")
    @classmethod
    def _no_duplicate_keys(cls, value: tuple[TerritoryAssignment, ...]) -> tuple[TerritoryAssignment, ...]:
        return unique_assignments(value)

    @classmethod
    def from_document(cls, document: Mapping[str, Any] | None) -> Territory:
        """Build a territory from a raw driver document.

        Unknown or malformed fields fall back to ``None`` / empty.
        """
        if not document:
            return cls()

        location: GeoPoint | None = None
        raw_location = document.get(DOC_LOCATION)
        if isinstance(raw_location, Mapping):
            try:
                location = GeoPoint.model_validate(dict(raw_location))
            except ValidationError:
                _logger.debug("Ignoring malformed location: %r", raw_location)

        # Import lazily; the region table itself imports this package.
        from zipfence.regions import resolve_region

        region: Region | None = None
        raw_region = document.get(DOC_REGION)
        if isinstance(raw_region, str):
            region = resolve_region(raw_region)

        radius = safe_float(document.get(DOC_RADIUS))

        return cls(
            home_location=location,
            home_region=region,
            radius_miles=radius,
            assignments=parse_assignments(document.get(DOC_ZIP_CODES)),
        )

    def to_document(self) -> dict[str, Any]:
        """Serialize to the driver document shape (``None`` fields omitted)."""
        doc: dict[str, Any] = {DOC_ZIP_CODES: [a.to_document() for a in self.assignments]}
        if self.home_location is not None:
            doc[DOC_LOCATION] = self.home_location.as_dict()
        if self.home_region is not None:
            doc[DOC_REGION] = self.home_region.name
        if self.radius_miles is not None:
            doc[DOC_RADIUS] = self.radius_miles
        return doc
