"""Discovery output models."""

from __future__ import annotations

from zipfence.models._base import ZipFenceModel
from zipfence.models.geo import BoundingRegion
from zipfence.models.region import Region
from zipfence.models.zip_feature import ZipFeature


class DiscoveryResult(ZipFenceModel):
    """Published outcome of one discovery run.

    Parameters
    ----------
    run_id : int
        Generation number of the run that produced this result.
    features : tuple of ZipFeature
        Filtered features, in candidate-region order then source order.
    bounding_region : BoundingRegion or None
        Map framing for ``features``; ``None`` when there are none.
    candidates : tuple of Region
        Regions the run fetched geometry for.
    failed_regions : tuple of str
        Codes of candidate regions whose fetch failed and were skipped.
    """

    run_id: int
    features: tuple[ZipFeature, ...] = ()
    bounding_region: BoundingRegion | None = None
    candidates: tuple[Region, ...] = ()
    failed_regions: tuple[str, ...] = ()

    @property
    def zip_codes(self) -> list[str]:
        return [feature.zip_code for feature in self.features]


class MapFeature(ZipFenceModel):
    """A feature as handed to the map sink, with its selection flag."""

    feature: ZipFeature
    selected: bool = False

    @property
    def zip_code(self) -> str:
        return self.feature.zip_code
