"""Persisted driver documents.

The engine treats persistence as a generic key-value document store with
merge-on-write and change notification.  :class:`InMemoryDocumentStore`
is the reference implementation used by tests and the CLI.
"""

from __future__ import annotations

import contextlib
import copy
import logging
from collections.abc import Callable, Mapping
from typing import Any, Protocol

from zipfence.exceptions import PersistFailureError

_logger = logging.getLogger(__name__)

DocumentCallback = Callable[[dict[str, Any]], None]


class DocumentStore(Protocol):
    """Structural interface for the driver document store."""

    async def read(self, driver_id: str) -> dict[str, Any]:
        """Return the full document (empty dict if it does not exist)."""
        ...

    async def write(self, driver_id: str, partial: Mapping[str, Any]) -> None:
        """Merge *partial* into the document; unspecified fields are kept."""
        ...

    def subscribe(self, driver_id: str, on_change: DocumentCallback) -> Callable[[], None]:
        """Register a change callback; returns an unsubscribe function."""
        ...


class InMemoryDocumentStore:
    """Dict-backed document store.

    Values are deep-copied on the way in and out so callers never share
    mutable state with the store.  Subscribers are notified synchronously
    after every successful write.  Setting ``fail_writes`` makes every
    write raise :class:`PersistFailureError`.
    """

    def __init__(self, documents: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        self._documents: dict[str, dict[str, Any]] = {
            key: copy.deepcopy(dict(value)) for key, value in (documents or {}).items()
        }
        self._subscribers: dict[str, list[DocumentCallback]] = {}
        self.fail_writes = False
        self.write_count = 0

    async def read(self, driver_id: str) -> dict[str, Any]:
        return copy.deepcopy(self._documents.get(driver_id, {}))

    async def write(self, driver_id: str, partial: Mapping[str, Any]) -> None:
        if self.fail_writes:
            raise PersistFailureError(f"write to {driver_id} rejected", driver_id=driver_id)
        document = self._documents.setdefault(driver_id, {})
        document.update(copy.deepcopy(dict(partial)))
        self.write_count += 1
        self._notify(driver_id)

    def set_external(self, driver_id: str, partial: Mapping[str, Any]) -> None:
        """Apply a change as if another client wrote it, and notify."""
        self._documents.setdefault(driver_id, {}).update(copy.deepcopy(dict(partial)))
        self._notify(driver_id)

    def subscribe(self, driver_id: str, on_change: DocumentCallback) -> Callable[[], None]:
        callbacks = self._subscribers.setdefault(driver_id, [])
        callbacks.append(on_change)

        def _unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                callbacks.remove(on_change)

        return _unsubscribe

    def _notify(self, driver_id: str) -> None:
        snapshot = self._documents.get(driver_id, {})
        for callback in list(self._subscribers.get(driver_id, [])):
            try:
                callback(copy.deepcopy(snapshot))
            except Exception:
                _logger.debug("Document change callback failed for %s", driver_id, exc_info=True)
