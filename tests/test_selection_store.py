from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

from zipfence.exceptions import InvalidInputError, PersistFailureError, UnresolvedRegionError
from zipfence.models.region import Region
from zipfence.regions import REGIONS
from zipfence.state.documents import InMemoryDocumentStore
from zipfence.state.selection import TerritorySelectionStore

DRIVER = "driver-1"


def _store(
    documents: InMemoryDocumentStore | None = None,
    owners: dict[str, str] | None = None,
) -> tuple[TerritorySelectionStore, InMemoryDocumentStore]:
    documents = documents or InMemoryDocumentStore()
    lookup = None
    if owners is not None:

        async def lookup(zip_code: str) -> Region | None:
            code = owners.get(zip_code)
            return REGIONS[code] if code else None

    return TerritorySelectionStore(documents, DRIVER, zip_lookup=lookup), documents


async def _persisted(documents: InMemoryDocumentStore) -> list[dict[str, str]]:
    return (await documents.read(DRIVER)).get("zipCodes", [])


class _ExplodingStore(InMemoryDocumentStore):
    async def write(self, driver_id: str, partial: Mapping[str, Any]) -> None:
        raise RuntimeError("network down")


@pytest.mark.asyncio
async def test_add_persists_lookup_tag() -> None:
    store, documents = _store(owners={"08102": "NJ"})

    result = await store.add(" 08102 ")

    assert [(a.zip_code, a.region_code) for a in result] == [("08102", "NJ")]
    assert await _persisted(documents) == [{"key": "08102", "state": "NJ"}]


@pytest.mark.asyncio
async def test_add_without_lookup_uses_given_region() -> None:
    store, documents = _store()

    await store.add("19102", "pa")

    assert await _persisted(documents) == [{"key": "19102", "state": "PA"}]


@pytest.mark.asyncio
async def test_add_duplicate_is_a_no_op() -> None:
    store, documents = _store(owners={"19102": "PA"})
    await store.add("19102")
    writes = documents.write_count

    result = await store.add("19102")

    assert len(result) == 1
    assert documents.write_count == writes


@pytest.mark.asyncio
async def test_add_rejects_short_zip() -> None:
    store, documents = _store(owners={})

    with pytest.raises(InvalidInputError):
        await store.add("12")
    with pytest.raises(InvalidInputError):
        await store.add("")
    assert documents.write_count == 0


@pytest.mark.asyncio
async def test_add_with_unresolvable_owner_is_declined() -> None:
    store, documents = _store(owners={})

    with pytest.raises(UnresolvedRegionError):
        await store.add("99999")
    assert len(store) == 0
    assert documents.write_count == 0


@pytest.mark.asyncio
async def test_add_then_remove_restores_set() -> None:
    store, _ = _store(owners={"19102": "PA", "19103": "PA"})
    await store.add("19102")
    before = store.assignments

    await store.add("19103")
    after = await store.remove("19103")

    assert after == before


@pytest.mark.asyncio
async def test_remove_absent_zip_does_not_write() -> None:
    store, documents = _store()

    await store.remove("19102")

    assert documents.write_count == 0


@pytest.mark.asyncio
async def test_toggle_twice_restores_set() -> None:
    store, documents = _store()

    await store.toggle("19102", REGIONS["PA"])
    assert store.contains("19102")
    assert await _persisted(documents) == [{"key": "19102", "state": "PA"}]

    await store.toggle("19102", REGIONS["PA"])
    assert not store.contains("19102")
    assert await _persisted(documents) == []


@pytest.mark.asyncio
async def test_toggle_without_current_region_is_ignored() -> None:
    store, documents = _store()

    await store.toggle("19102", None)
    await store.toggle("19102", "Atlantis")

    assert len(store) == 0
    assert documents.write_count == 0


@pytest.mark.asyncio
async def test_select_all_on_empty_set_tags_current_state() -> None:
    store, documents = _store()

    await store.select_all(["19102", "19103"], REGIONS["PA"])

    assert await _persisted(documents) == [
        {"key": "19102", "state": "PA"},
        {"key": "19103", "state": "PA"},
    ]


@pytest.mark.asyncio
async def test_select_all_retags_previously_saved_zips() -> None:
    documents = InMemoryDocumentStore({DRIVER: {"zipCodes": [{"key": "08102", "state": "NJ"}]}})
    store, _ = _store(documents)
    await store.load()

    await store.select_all(["19102", "08102"], "PA")

    assert store.as_mapping() == {"08102": "PA", "19102": "PA"}


@pytest.mark.asyncio
async def test_select_all_then_deselect_all_is_empty() -> None:
    store, documents = _store()
    await store.select_all(["19102", "19103"], "PA")

    result = await store.deselect_all()

    assert result == ()
    assert await _persisted(documents) == []


@pytest.mark.asyncio
async def test_select_all_with_unknown_region_is_declined() -> None:
    store, _ = _store()

    with pytest.raises(UnresolvedRegionError):
        await store.select_all(["19102"], "Atlantis")


@pytest.mark.asyncio
async def test_failed_persist_leaves_memory_unchanged() -> None:
    store, documents = _store()
    await store.toggle("19102", "PA")
    documents.fail_writes = True

    with pytest.raises(PersistFailureError):
        await store.toggle("19103", "PA")
    with pytest.raises(PersistFailureError):
        await store.deselect_all()

    assert store.as_mapping() == {"19102": "PA"}


@pytest.mark.asyncio
async def test_unexpected_store_errors_surface_as_persist_failures() -> None:
    store = TerritorySelectionStore(_ExplodingStore(), DRIVER)

    with pytest.raises(PersistFailureError) as excinfo:
        await store.toggle("19102", "PA")

    assert excinfo.value.driver_id == DRIVER
    assert len(store) == 0


@pytest.mark.asyncio
async def test_load_collapses_duplicate_keys() -> None:
    documents = InMemoryDocumentStore(
        {
            DRIVER: {
                "zipCodes": [
                    {"key": "19102", "state": "PA"},
                    {"key": "08102", "state": "NJ"},
                    {"key": "19102", "state": "NJ"},
                    {"state": "PA"},
                ]
            }
        }
    )
    store, _ = _store(documents)

    result = await store.load()

    assert [(a.zip_code, a.region_code) for a in result] == [("19102", "NJ"), ("08102", "NJ")]
