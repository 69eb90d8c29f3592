"""Tests for the key-value stores."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from tooldir.storage import (
    FileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
    StorageError,
    StorageEvent,
)


def test_memory_store_emits_events_on_change() -> None:
    store = MemoryKeyValueStore()
    events: list[StorageEvent] = []
    unsubscribe = store.subscribe(events.append)

    store.set("k", "1")
    store.set("k", "1")
    store.remove("k")
    unsubscribe()
    store.set("k", "2")

    assert events == [
        StorageEvent(key="k", old_value=None, new_value="1"),
        StorageEvent(key="k", old_value="1", new_value=None),
    ]
    assert store.get("k") == "2"


def test_file_store_persists_values(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "storage.json"
    FileKeyValueStore(path).set("tools_override", "[]")

    assert json.loads(path.read_text(encoding="utf-8")) == {"tools_override": "[]"}
    assert FileKeyValueStore(path).get("tools_override") == "[]"
    assert not path.with_name("storage.json.tmp").exists()


def test_file_store_remove(tmp_path: Path) -> None:
    store = FileKeyValueStore(tmp_path / "storage.json")
    store.set("a", "1")
    store.set("b", "2")

    store.remove("a")
    store.remove("missing")

    assert store.get("a") is None
    assert store.get("b") == "2"


def test_sync_reports_changes_from_another_writer(tmp_path: Path) -> None:
    path = tmp_path / "storage.json"
    reader = FileKeyValueStore(path)
    writer = FileKeyValueStore(path)
    events: list[StorageEvent] = []
    reader.subscribe(events.append)

    writer.set("tools_override", '[{"name": "A"}]')

    assert events == []
    assert reader.sync() == [
        StorageEvent(key="tools_override", old_value=None, new_value='[{"name": "A"}]')
    ]
    assert len(events) == 1
    assert reader.sync() == []


def test_corrupt_file_raises_storage_error(tmp_path: Path) -> None:
    path = tmp_path / "storage.json"
    path.write_text("{not json", encoding="utf-8")
    store = FileKeyValueStore(path)

    with pytest.raises(StorageError):
        store.get("tools_override")


def test_non_string_values_are_ignored(tmp_path: Path) -> None:
    path = tmp_path / "storage.json"
    path.write_text(json.dumps({"a": 1, "b": "two"}), encoding="utf-8")

    store = FileKeyValueStore(path)

    assert store.get("a") is None
    assert store.get("b") == "two"


def test_undecodable_file_raises_storage_error(tmp_path: Path) -> None:
    path = tmp_path / "storage.json"
    path.write_bytes(b'{"tools_override": "\xff"}')

    store = FileKeyValueStore(path)

    assert store.sync() == []
    with pytest.raises(StorageError):
        store.get("tools_override")


def test_key_value_store_requires_get_set_remove() -> None:
    class _ReadOnly(KeyValueStore):
        def get(self, key: str) -> str | None:
            return None

    with pytest.raises(TypeError):
        KeyValueStore()  # type: ignore[abstract]
    with pytest.raises(TypeError):
        _ReadOnly()  # type: ignore[abstract]
