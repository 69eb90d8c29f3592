"""Tests for duplicate detection and id uniqueness."""

from __future__ import annotations

from tooldir.catalog.identity import (
    DedupIndex,
    dedup_key,
    ensure_unique_ids,
    is_duplicate,
    with_unique_id,
)
from tooldir.catalog.normalize import normalize_tool


def _tool(name: str, url: str, **extra: object):
    return normalize_tool({"name": name, "url": url, "category": "Coding", **extra})


def test_dedup_key_uses_normalized_url_and_lowercased_name() -> None:
    key = dedup_key(_tool("  Cursor ", "HTTPS://Cursor.sh/"))

    assert key.url == "https://cursor.sh"
    assert key.name == "cursor"


def test_index_matches_on_url_or_name() -> None:
    index = DedupIndex([_tool("Cursor", "https://cursor.sh")])

    assert is_duplicate(_tool("Other Name", "https://CURSOR.sh/"), index)
    assert is_duplicate(_tool("CURSOR", "https://elsewhere.dev"), index)
    assert not is_duplicate(_tool("Zed", "https://zed.dev"), index)


def test_index_ignores_empty_keys() -> None:
    index = DedupIndex([normalize_tool({"name": "", "url": "", "category": "Coding"})])

    assert not index.contains(normalize_tool({"name": "", "url": "", "category": "Coding"}))


def test_index_add_tracks_new_records() -> None:
    index = DedupIndex()
    record = _tool("Zed", "https://zed.dev")

    assert not index.contains(record)
    index.add(record)
    assert index.contains(record)


def test_with_unique_id_rekeys_clashes() -> None:
    used = {1}
    record = with_unique_id(_tool("A", "https://a.com", id=1), used)

    assert record.id != 1
    assert record.id in used


def test_ensure_unique_ids_keeps_first_holder() -> None:
    records = ensure_unique_ids(
        [_tool("A", "https://a.com", id=5), _tool("B", "https://b.com", id=5)]
    )

    assert records[0].id == 5
    assert records[1].id != 5
    assert records[1].name == "B"
