"""String key-value stores with change notifications."""

from __future__ import annotations

import json
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from .errors import StorageError

LOGGER = logging.getLogger(__name__)

DEFAULT_STORAGE_PATH = Path("~/.tooldir/storage.json")


@dataclass(slots=True, frozen=True)
class StorageEvent:
    """Notification that the value stored under ``key`` changed.

    ``new_value`` is ``None`` when the key was removed.
    """

    key: str
    old_value: Optional[str]
    new_value: Optional[str]


StorageListener = Callable[[StorageEvent], None]


class KeyValueStore(ABC):
    """Base class wiring subscribers; subclasses provide ``get``/``set``/``remove``."""

    def __init__(self) -> None:
        self._listeners: list[StorageListener] = []

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the value stored under ``key``, or ``None``."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key`` and notify subscribers."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key`` and notify subscribers when it existed."""

    def subscribe(self, listener: StorageListener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _emit(self, key: str, old_value: Optional[str], new_value: Optional[str]) -> None:
        if old_value == new_value:
            return
        event = StorageEvent(key=key, old_value=old_value, new_value=new_value)
        LOGGER.debug("Storage key %s changed", key)
        for listener in list(self._listeners):
            listener(event)


class MemoryKeyValueStore(KeyValueStore):
    """In-process store, mostly useful for tests and one-shot sessions."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        super().__init__()
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        old = self._data.get(key)
        self._data[key] = value
        self._emit(key, old, value)

    def remove(self, key: str) -> None:
        old = self._data.pop(key, None)
        self._emit(key, old, None)


class FileKeyValueStore(KeyValueStore):
    """Persist string values in a JSON object on disk.

    Several instances (or processes) may share one file. Reads always go to
    disk; :meth:`sync` reports changes made by other writers since this
    instance last looked. There is no locking: the last writer wins.
    """

    def __init__(self, path: Path = DEFAULT_STORAGE_PATH) -> None:
        super().__init__()
        self._path = path.expanduser()
        self._snapshot: dict[str, str] = self._read_quietly()

    @property
    def path(self) -> Path:
        """Return the resolved storage file path."""
        return self._path

    def get(self, key: str) -> Optional[str]:
        """Return the stored value for ``key``.

        Raises:
            StorageError: If the storage file cannot be parsed.
        """
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        old = data.get(key)
        data[key] = value
        self._write_all(data)
        self._snapshot = data
        self._emit(key, old, value)

    def remove(self, key: str) -> None:
        data = self._read_all()
        old = data.pop(key, None)
        if old is not None:
            self._write_all(data)
        self._snapshot = data
        self._emit(key, old, None)

    def sync(self) -> list[StorageEvent]:
        """Re-read the file and emit one event per key changed by another writer."""
        current = self._read_quietly()
        previous = self._snapshot
        self._snapshot = current
        events = [
            StorageEvent(key=key, old_value=previous.get(key), new_value=current.get(key))
            for key in sorted(previous.keys() | current.keys())
            if previous.get(key) != current.get(key)
        ]
        for event in events:
            self._emit(event.key, event.old_value, event.new_value)
        return events

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise StorageError(f"Invalid storage data in {self._path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise StorageError(f"Storage file {self._path} must contain a JSON object.")
        return {str(key): value for key, value in raw.items() if isinstance(value, str)}

    def _read_quietly(self) -> dict[str, str]:
        try:
            return self._read_all()
        except StorageError as exc:
            LOGGER.debug("Ignoring unreadable storage: %s", exc)
            return {}

    def _write_all(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        staging = self._path.with_name(self._path.name + ".tmp")
        try:
            staging.write_text(json.dumps(data, indent=2), encoding="utf-8")
            os.replace(staging, self._path)
        except OSError as exc:
            raise StorageError(f"Unable to write {self._path}: {exc}") from exc


__all__ = [
    "DEFAULT_STORAGE_PATH",
    "FileKeyValueStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "StorageError",
    "StorageEvent",
    "StorageListener",
]
