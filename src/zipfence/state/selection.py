"""Driver ZIP selection store.

This is the only component allowed to mutate a driver's assignments.
Every mutation writes the full set to the document store first and
updates memory only once that write succeeded, so a failed persist never
leaves the two out of step.  There is no locking: concurrent writers
resolve last-write-wins at the document store.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable

from zipfence._constants import DOC_ZIP_CODES
from zipfence.exceptions import InvalidInputError, PersistFailureError, UnresolvedRegionError
from zipfence.ingestion.normalize import is_valid_zip, normalize_zip
from zipfence.models.region import Region
from zipfence.models.territory import Territory, TerritoryAssignment, parse_assignments, unique_assignments
from zipfence.regions import region_code_for
from zipfence.state.documents import DocumentStore

_logger = logging.getLogger(__name__)

ZipRegionLookup = Callable[[str], Awaitable[Region | None]]

Assignments = tuple[TerritoryAssignment, ...]


class TerritorySelectionStore:
    """Mutable, persisted set of ZIP -> state assignments for one driver.

    Parameters
    ----------
    documents
        Document store holding the driver's territory document.
    driver_id
        Key of the driver's document.
    zip_lookup
        Async ZIP -> region lookup used by :meth:`add`.  Without one,
        :meth:`add` trusts the caller-supplied region code.
    """

    def __init__(
        self,
        documents: DocumentStore,
        driver_id: str,
        *,
        zip_lookup: ZipRegionLookup | None = None,
    ) -> None:
        self._documents = documents
        self._driver_id = driver_id
        self._zip_lookup = zip_lookup
        # zip -> region code; dict order is first-insertion order.
        self._assignments: dict[str, str] = {}

    @property
    def assignments(self) -> Assignments:
        return tuple(
            TerritoryAssignment(zip_code=zip_code, region_code=code) for zip_code, code in self._assignments.items()
        )

    def as_mapping(self) -> dict[str, str]:
        return dict(self._assignments)

    def contains(self, zip_code: str) -> bool:
        return normalize_zip(zip_code) in self._assignments

    def __len__(self) -> int:
        return len(self._assignments)

    # ------------------------------------------------------------------
    # Loading / external changes
    # ------------------------------------------------------------------

    async def load(self) -> Assignments:
        """Replace in-memory state with what the document store holds."""
        document = await self._documents.read(self._driver_id)
        return self.replace_all(Territory.from_document(document).assignments)

    def replace_all(self, assignments: Iterable[TerritoryAssignment]) -> Assignments:
        """Adopt an externally supplied set without persisting it.

        Duplicate keys collapse to their last occurrence.
        """
        self._assignments = {a.zip_code: a.region_code for a in unique_assignments(assignments)}
        return self.assignments

    def replace_from_document(self, raw_zip_codes: object) -> Assignments:
        return self.replace_all(parse_assignments(raw_zip_codes))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def _commit(self, updated: dict[str, str]) -> Assignments:
        payload = [{"key": zip_code, "state": code} for zip_code, code in updated.items()]
        try:
            await self._documents.write(self._driver_id, {DOC_ZIP_CODES: payload})
        except PersistFailureError:
            raise
        except Exception as exc:
            raise PersistFailureError(
                f"Saving ZIP codes for {self._driver_id} failed: {exc}",
                driver_id=self._driver_id,
            ) from exc
        self._assignments = updated
        _logger.debug("Persisted %d ZIP assignments for %s", len(updated), self._driver_id)
        return self.assignments

    async def add(self, zip_code: str, region_code: str | None = None) -> Assignments:
        """Add a ZIP code, tagged with the state that owns it.

        Already-present ZIPs are a no-op.  The owning state comes from
        the ZIP lookup when one is configured, else from *region_code*.

        Raises
        ------
        InvalidInputError
            The ZIP is empty or shorter than three characters.
        UnresolvedRegionError
            The owning state could not be determined or is unknown.
        """
        zip_code = normalize_zip(zip_code)
        if not is_valid_zip(zip_code):
            raise InvalidInputError(f"invalid ZIP code {zip_code!r}")
        if zip_code in self._assignments:
            return self.assignments

        if self._zip_lookup is not None:
            code = region_code_for(await self._zip_lookup(zip_code))
        else:
            code = region_code_for(region_code)
        if code is None:
            raise UnresolvedRegionError(f"could not resolve a state for ZIP {zip_code}")

        # The lookup awaited; another operation may have added it meanwhile.
        if zip_code in self._assignments:
            return self.assignments

        updated = dict(self._assignments)
        updated[zip_code] = code
        return await self._commit(updated)

    async def remove(self, zip_code: str) -> Assignments:
        """Remove a ZIP code; no-op (and no write) if it is absent."""
        zip_code = normalize_zip(zip_code)
        if zip_code not in self._assignments:
            return self.assignments
        updated = {key: code for key, code in self._assignments.items() if key != zip_code}
        return await self._commit(updated)

    async def toggle(self, zip_code: str, current_region: Region | str | None) -> Assignments:
        """Remove the ZIP if selected, else add it tagged with *current_region*.

        No-op when there is no resolvable current region.
        """
        code = region_code_for(current_region)
        if code is None:
            _logger.debug("Ignoring toggle of %s without a current region", zip_code)
            return self.assignments

        zip_code = normalize_zip(zip_code)
        if not zip_code:
            raise InvalidInputError("ZIP code must not be empty")

        updated = dict(self._assignments)
        if zip_code in updated:
            del updated[zip_code]
        else:
            updated[zip_code] = code
        return await self._commit(updated)

    async def select_all(self, visible_zips: Iterable[str], region_code: Region | str) -> Assignments:
        """Union the saved set with *visible_zips*, all tagged *region_code*.

        Previously saved ZIPs from other states are re-tagged too.  This
        overwrite is long-standing user-visible behavior and is kept.
        """
        code = region_code_for(region_code)
        if code is None:
            raise UnresolvedRegionError(f"unknown region {region_code!r}")

        updated = dict.fromkeys(self._assignments, code)
        for raw in visible_zips:
            zip_code = normalize_zip(raw)
            if zip_code:
                updated.setdefault(zip_code, code)
        return await self._commit(updated)

    async def deselect_all(self) -> Assignments:
        return await self._commit({})
