"""Base model for zipfence value types."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ZipFenceModel(BaseModel):
    """Immutable pydantic model shared by every zipfence value type.

    * ``frozen=True`` so values are hashable and safe to share between
      the discovery path and the selection store.
    * ``populate_by_name=True`` so document aliases (``key``/``state``)
      and Python field names are both accepted.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )
