"""Session holder for the normalized collection."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Literal, Optional, Sequence

from tooldir.storage import KeyValueStore, StorageError, StorageEvent

from .errors import RecordNotFoundError, RecordRejectedError, SourceUnavailableError
from .identity import ensure_unique_ids, with_unique_id
from .importer import BatchImporter, ImportProgress, ImportResult
from .models import ToolRecord
from .normalize import DEFAULT_LOGO_LOOKUP, derive_logo, missing_fields, normalize_tool
from .sources import DEFAULT_TOOLS, DocumentSource

LOGGER = logging.getLogger(__name__)

DEFAULT_OVERRIDE_KEY = "tools_override"

_URL_ALIASES = ("website", "link")
_PRICING_ALIASES = ("pricing", "pricing_type")


class StoreState(str, Enum):
    """Lifecycle of a :class:`CatalogStore`; there is no error state."""

    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


@dataclass(slots=True, frozen=True)
class CatalogChange:
    """Notification that the collection was replaced.

    Attributes:
        key: Storage key of the override that changed.
        size: Number of records in the new collection.
        origin: ``local`` for writes made through this store, ``storage`` for
            changes picked up from another writer of the same storage.
    """

    key: str
    size: int
    origin: Literal["local", "storage"]


CatalogListener = Callable[[CatalogChange], None]


class CatalogStore:
    """Load, cache, and replace the catalog collection.

    Sources are tried in order: the persisted override, the static document,
    then the built-in defaults. Failures fall through silently, so
    :meth:`load` always returns a collection.
    """

    def __init__(
        self,
        storage: KeyValueStore,
        source: Optional[DocumentSource] = None,
        *,
        override_key: str = DEFAULT_OVERRIDE_KEY,
        defaults: Sequence[Mapping[str, Any]] = DEFAULT_TOOLS,
        importer: Optional[BatchImporter] = None,
        logo_lookup: str = DEFAULT_LOGO_LOOKUP,
    ) -> None:
        self._storage = storage
        self._source = source
        self._override_key = override_key
        self._defaults = list(defaults)
        self._logo_lookup = logo_lookup
        self._importer = importer or BatchImporter(logo_lookup=logo_lookup)
        self._collection: list[ToolRecord] = []
        self._state = StoreState.UNINITIALIZED
        self._written: Optional[str] = None
        self._listeners: list[CatalogListener] = []
        self._unsubscribe_storage = storage.subscribe(self._on_storage_event)

    @property
    def state(self) -> StoreState:
        """Return the current lifecycle state."""
        return self._state

    @property
    def override_key(self) -> str:
        """Return the storage key holding the persisted override."""
        return self._override_key

    def load(self) -> list[ToolRecord]:
        """Resolve the collection from the first usable source and cache it."""
        self._state = StoreState.LOADING
        self._written = self._stored_override()
        self._collection = self._resolve()
        self._state = StoreState.READY
        return list(self._collection)

    def current(self) -> list[ToolRecord]:
        """Return the cached collection, loading it on first use."""
        if self._state is not StoreState.READY:
            return self.load()
        return list(self._collection)

    def replace(self, records: Iterable[Any]) -> list[ToolRecord]:
        """Persist ``records`` as the override and notify subscribers.

        Raises:
            StorageError: If the override cannot be written; the cache is left untouched.
        """
        collection = ensure_unique_ids(self._normalize_all(list(records)))
        payload = json.dumps([record.model_dump(mode="json") for record in collection])
        previous = self._written
        self._written = payload
        try:
            self._storage.set(self._override_key, payload)
        except StorageError:
            self._written = previous
            raise
        self._collection = collection
        self._state = StoreState.READY
        self._notify("local")
        return list(collection)

    def reset(self) -> list[ToolRecord]:
        """Drop the override so the static document (or defaults) apply again."""
        self._written = None
        self._storage.remove(self._override_key)
        collection = self.load()
        self._notify("local")
        return collection

    def subscribe(self, listener: CatalogListener) -> Callable[[], None]:
        """Register ``listener`` for change notifications; returns an unsubscriber."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def close(self) -> None:
        """Stop following storage changes."""
        self._unsubscribe_storage()
        self._listeners.clear()

    # Commands ---------------------------------------------------------

    def find(self, ref: Any) -> ToolRecord:
        """Return the record whose id, or failing that whose name, matches ``ref``.

        Raises:
            RecordNotFoundError: If nothing matches.
        """
        collection = self.current()
        for record in collection:
            if record.id == ref or str(record.id) == str(ref):
                return record
        lowered = str(ref).strip().lower()
        for record in collection:
            if record.name.lower() == lowered:
                return record
        raise RecordNotFoundError(f"No tool matches {ref!r}.")

    def add_tool(self, raw: Mapping[str, Any]) -> ToolRecord:
        """Validate ``raw`` and prepend it to the collection.

        Raises:
            RecordRejectedError: If name, url, or category are missing.
        """
        record = self._validated(normalize_tool(raw, logo_lookup=self._logo_lookup))
        collection = self.current()
        record = with_unique_id(record, {existing.id for existing in collection})
        self.replace([record, *collection])
        return record

    def update_tool(self, ref: Any, changes: Mapping[str, Any]) -> ToolRecord:
        """Apply ``changes`` to the record matching ``ref``; the id never changes.

        Raises:
            RecordNotFoundError: If nothing matches ``ref``.
            RecordRejectedError: If the edited record misses a required field.
        """
        target = self.find(ref)
        base = target.model_dump()
        if any(alias in changes for alias in _URL_ALIASES) and "url" not in changes:
            base.pop("url")
        if any(alias in changes for alias in _PRICING_ALIASES) and "pricing_text" not in changes:
            base.pop("pricing_text")
        url_changed = any(field in changes for field in ("url", *_URL_ALIASES))
        if url_changed and "logo" not in changes:
            if target.logo == derive_logo(target.url, lookup=self._logo_lookup):
                base.pop("logo")

        merged = {**base, **changes, "id": target.id}
        updated = self._validated(normalize_tool(merged, logo_lookup=self._logo_lookup))
        self.replace(updated if record.id == target.id else record for record in self.current())
        return updated

    def delete_tool(self, ref: Any) -> ToolRecord:
        """Remove the record matching ``ref`` and return it."""
        target = self.find(ref)
        self.replace(record for record in self.current() if record.id != target.id)
        return target

    def import_records(
        self,
        candidates: Any,
        *,
        on_progress: Optional[Callable[[ImportProgress], None]] = None,
    ) -> ImportResult:
        """Import ``candidates`` ahead of the current collection.

        The collection is replaced once, after the whole batch, and only when
        something was accepted.
        """
        result = self._importer.run(candidates, self.current(), on_progress=on_progress)
        if result.accepted:
            self.replace(result.collection)
        return result

    def preview_import(self, candidates: Any) -> ImportResult:
        """Partition ``candidates`` against the current collection without saving.

        Returns:
            ImportResult: The partition :meth:`import_records` would produce.

        Raises:
            InvalidPayloadError: If ``candidates`` is not an array.
            ImportInProgressError: If another import is running on the same importer.
        """
        return self._importer.run(candidates, self.current())

    # Internal helpers -------------------------------------------------

    def _resolve(self) -> list[ToolRecord]:
        for name, reader in (("override", self._read_override), ("document", self._read_document)):
            try:
                records = reader()
            except (SourceUnavailableError, StorageError) as exc:
                LOGGER.debug("Catalog %s unavailable: %s", name, exc)
                continue
            if records:
                LOGGER.debug("Loaded %d tools from %s", len(records), name)
                return ensure_unique_ids(records)
        LOGGER.debug("Falling back to %d built-in tools", len(self._defaults))
        return ensure_unique_ids(self._normalize_all(self._defaults))

    def _stored_override(self) -> Optional[str]:
        try:
            return self._storage.get(self._override_key)
        except StorageError:
            return None

    def _read_override(self) -> list[ToolRecord]:
        raw = self._storage.get(self._override_key)
        if not raw:
            return []
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise SourceUnavailableError(f"Corrupt override: {exc}") from exc
        return self._normalize_all(payload)

    def _read_document(self) -> list[ToolRecord]:
        if self._source is None:
            return []
        return self._normalize_all(self._source.fetch())

    def _normalize_all(self, payload: Any) -> list[ToolRecord]:
        if not isinstance(payload, (list, tuple)):
            return []
        return [
            normalize_tool(item, logo_lookup=self._logo_lookup)
            for item in payload
            if isinstance(item, (Mapping, ToolRecord))
        ]

    def _validated(self, record: ToolRecord) -> ToolRecord:
        missing = missing_fields(record)
        if missing:
            raise RecordRejectedError(f"Tool is missing required fields: {', '.join(missing)}.")
        return record

    def _on_storage_event(self, event: StorageEvent) -> None:
        if event.key != self._override_key or event.new_value == self._written:
            return
        LOGGER.debug("Override changed by another writer; reloading")
        self.load()
        self._notify("storage")

    def _notify(self, origin: Literal["local", "storage"]) -> None:
        change = CatalogChange(key=self._override_key, size=len(self._collection), origin=origin)
        for listener in list(self._listeners):
            listener(change)


__all__ = [
    "DEFAULT_OVERRIDE_KEY",
    "CatalogChange",
    "CatalogListener",
    "CatalogStore",
    "StoreState",
]
