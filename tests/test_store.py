"""Tests for the catalog store."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import pytest

from tooldir.catalog.errors import (
    ImportInProgressError,
    RecordNotFoundError,
    RecordRejectedError,
)
from tooldir.catalog.importer import BatchImporter
from tooldir.catalog.sources import DEFAULT_TOOLS, StaticDocumentSource
from tooldir.catalog.store import CatalogChange, CatalogStore, StoreState
from tooldir.storage import FileKeyValueStore, KeyValueStore, MemoryKeyValueStore, StorageError


def _write_document(path: Path, tools: list[dict[str, Any]]) -> Path:
    path.write_text(json.dumps(tools), encoding="utf-8")
    return path


def _doc_tools() -> list[dict[str, Any]]:
    return [
        {"id": 1, "name": "A", "url": "https://a.com", "category": "Coding"},
        {"id": 2, "name": "B", "url": "https://b.com", "category": "Image"},
    ]


class _FailingStore(KeyValueStore):
    def get(self, key: str) -> Optional[str]:
        raise StorageError("unavailable")

    def set(self, key: str, value: str) -> None:
        raise StorageError("quota exceeded")

    def remove(self, key: str) -> None:
        raise StorageError("unavailable")


def test_load_prefers_override(tmp_path: Path) -> None:
    storage = MemoryKeyValueStore({"tools_override": json.dumps([{"name": "O", "url": "https://o.com"}])})
    source = StaticDocumentSource(_write_document(tmp_path / "tools.json", _doc_tools()))

    store = CatalogStore(storage, source)

    assert store.state is StoreState.UNINITIALIZED
    assert [record.name for record in store.load()] == ["O"]
    assert store.state is StoreState.READY


def test_load_falls_back_to_document_then_defaults(tmp_path: Path) -> None:
    path = tmp_path / "tools.json"
    store = CatalogStore(MemoryKeyValueStore(), StaticDocumentSource(path))

    assert len(store.load()) == len(DEFAULT_TOOLS)

    _write_document(path, _doc_tools())
    assert [record.name for record in store.load()] == ["A", "B"]


@pytest.mark.parametrize("override", ["{corrupt", "[]", json.dumps({"name": "x"})])
def test_unusable_override_falls_through(tmp_path: Path, override: str) -> None:
    storage = MemoryKeyValueStore({"tools_override": override})
    source = StaticDocumentSource(_write_document(tmp_path / "tools.json", _doc_tools()))

    assert [record.name for record in CatalogStore(storage, source).load()] == ["A", "B"]


def test_invalid_document_falls_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "tools.json"
    path.write_text("not json", encoding="utf-8")

    collection = CatalogStore(MemoryKeyValueStore(), StaticDocumentSource(path)).load()

    assert [record.name for record in collection][:2] == ["ChatGPT", "Claude"]


def test_undecodable_document_falls_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "tools.json"
    path.write_bytes(b'[{"name": "\xff"}]')

    collection = CatalogStore(MemoryKeyValueStore(), StaticDocumentSource(path)).load()

    assert len(collection) == len(DEFAULT_TOOLS)


def test_undecodable_storage_file_falls_back_to_document(tmp_path: Path) -> None:
    storage_path = tmp_path / "storage.json"
    storage_path.write_bytes(b'{"tools_override": "\xff"}')
    source = StaticDocumentSource(_write_document(tmp_path / "tools.json", _doc_tools()))

    collection = CatalogStore(FileKeyValueStore(storage_path), source).load()

    assert [record.name for record in collection] == ["A", "B"]


def test_unavailable_storage_still_loads() -> None:
    collection = CatalogStore(_FailingStore()).load()

    assert len(collection) == len(DEFAULT_TOOLS)


def test_loaded_ids_are_unique(tmp_path: Path) -> None:
    tools = _doc_tools()
    tools[1]["id"] = 1
    source = StaticDocumentSource(_write_document(tmp_path / "tools.json", tools))

    ids = [record.id for record in CatalogStore(MemoryKeyValueStore(), source).load()]

    assert len(set(ids)) == 2


def test_replace_persists_and_notifies() -> None:
    storage = MemoryKeyValueStore()
    store = CatalogStore(storage)
    changes: list[CatalogChange] = []
    store.subscribe(changes.append)

    store.replace([{"id": 9, "name": "Z", "url": "https://z.com", "category": "Video"}])

    assert json.loads(storage.get("tools_override") or "[]")[0]["name"] == "Z"
    assert [record.name for record in store.current()] == ["Z"]
    assert changes == [CatalogChange(key="tools_override", size=1, origin="local")]


def test_replace_failure_keeps_cache() -> None:
    store = CatalogStore(_FailingStore())
    before = store.load()

    with pytest.raises(StorageError):
        store.replace([])

    assert store.current() == before


def test_reset_returns_to_document(tmp_path: Path) -> None:
    storage = MemoryKeyValueStore()
    source = StaticDocumentSource(_write_document(tmp_path / "tools.json", _doc_tools()))
    store = CatalogStore(storage, source)
    store.replace([{"name": "Z", "url": "https://z.com", "category": "Video"}])

    collection = store.reset()

    assert [record.name for record in collection] == ["A", "B"]
    assert storage.get("tools_override") is None


def test_changes_from_another_writer_reload(tmp_path: Path) -> None:
    path = tmp_path / "storage.json"
    first_storage = FileKeyValueStore(path)
    first = CatalogStore(first_storage)
    first.load()
    changes: list[CatalogChange] = []
    first.subscribe(changes.append)

    second = CatalogStore(FileKeyValueStore(path))
    second.replace([{"name": "Shared", "url": "https://shared.io", "category": "Coding"}])
    first_storage.sync()

    assert [record.name for record in first.current()] == ["Shared"]
    assert changes == [CatalogChange(key="tools_override", size=1, origin="storage")]


def test_own_writes_do_not_trigger_storage_reload(tmp_path: Path) -> None:
    storage = FileKeyValueStore(tmp_path / "storage.json")
    store = CatalogStore(storage)
    changes: list[CatalogChange] = []
    store.subscribe(changes.append)

    store.replace([{"name": "Mine", "url": "https://mine.io", "category": "Coding"}])
    storage.sync()

    assert [change.origin for change in changes] == ["local"]


def test_import_records_prepends_and_persists(tmp_path: Path) -> None:
    storage = MemoryKeyValueStore()
    source = StaticDocumentSource(_write_document(tmp_path / "tools.json", _doc_tools()))
    store = CatalogStore(storage, source, importer=BatchImporter(batch_size=1))

    result = store.import_records(
        [
            {"name": "C", "url": "https://c.com", "category": "Video"},
            {"name": "a", "url": "https://other.com", "category": "Video"},
            {"name": "D", "url": "https://d.com", "category": "Video"},
        ]
    )

    assert result.counts["accepted"] == 2
    assert [record.name for record in store.current()] == ["C", "D", "A", "B"]
    stored = json.loads(storage.get("tools_override") or "[]")
    assert [item["name"] for item in stored] == ["C", "D", "A", "B"]


def test_preview_import_does_not_persist(tmp_path: Path) -> None:
    storage = MemoryKeyValueStore()
    source = StaticDocumentSource(_write_document(tmp_path / "tools.json", _doc_tools()))
    store = CatalogStore(storage, source)
    changes: list[CatalogChange] = []
    store.subscribe(changes.append)

    result = store.preview_import([{"name": "C", "url": "https://c.com", "category": "Video"}])

    assert [record.name for record in result.collection] == ["C", "A", "B"]
    assert [record.name for record in store.current()] == ["A", "B"]
    assert storage.get("tools_override") is None
    assert changes == []


def test_import_without_accepted_records_leaves_override_alone() -> None:
    storage = MemoryKeyValueStore()
    store = CatalogStore(storage)

    result = store.import_records([{"name": "ChatGPT", "url": "https://x.com", "category": "X"}])

    assert result.counts["duplicates"] == 1
    assert storage.get("tools_override") is None


def test_import_while_running_is_refused() -> None:
    importer = BatchImporter(batch_size=1)
    store = CatalogStore(MemoryKeyValueStore(), importer=importer)
    job = importer.start([{"name": "x", "url": "https://x.io", "category": "c"}] * 2, [])
    progress = iter(job)
    next(progress)

    with pytest.raises(ImportInProgressError):
        store.import_records([])

    for _ in progress:
        pass


def test_add_tool_validates_and_prepends() -> None:
    store = CatalogStore(MemoryKeyValueStore())

    record = store.add_tool({"name": "New", "website": "https://new.dev", "category": "Coding"})

    assert store.current()[0] == record
    assert record.url == "https://new.dev"
    with pytest.raises(RecordRejectedError):
        store.add_tool({"name": "Broken", "category": "Coding"})


def test_update_tool_keeps_id_and_rederives_logo() -> None:
    store = CatalogStore(MemoryKeyValueStore())
    target = store.find("ChatGPT")

    updated = store.update_tool(target.id, {"url": "https://chatgpt.com", "featured": True})

    assert updated.id == target.id
    assert updated.url == "https://chatgpt.com"
    assert updated.logo == "https://www.google.com/s2/favicons?domain=chatgpt.com"
    assert updated.featured is True
    assert store.find(target.id) == updated


def test_update_tool_keeps_custom_logo() -> None:
    store = CatalogStore(MemoryKeyValueStore())

    updated = store.update_tool("Claude", {"website": "https://claude.com"})

    assert updated.url == "https://claude.com"
    assert updated.logo == "https://logo.clearbit.com/anthropic.com"


def test_update_tool_rejects_clearing_required_fields() -> None:
    store = CatalogStore(MemoryKeyValueStore())

    with pytest.raises(RecordRejectedError):
        store.update_tool("ChatGPT", {"url": ""})


def test_delete_tool_and_missing_reference() -> None:
    store = CatalogStore(MemoryKeyValueStore())

    removed = store.delete_tool("cursor")

    assert removed.name == "Cursor"
    assert all(record.name != "Cursor" for record in store.current())
    with pytest.raises(RecordNotFoundError):
        store.delete_tool("cursor")


def test_close_stops_following_storage() -> None:
    storage = MemoryKeyValueStore()
    store = CatalogStore(storage)
    store.load()
    changes: list[CatalogChange] = []
    store.subscribe(changes.append)
    store.close()

    storage.set("tools_override", json.dumps([{"name": "X", "url": "https://x.io"}]))

    assert changes == []
