"""Tests for import parsing and export serialization."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from tooldir.catalog.errors import InvalidFileTypeError, InvalidPayloadError, ParseFailureError
from tooldir.catalog.normalize import normalize_tool
from tooldir.catalog.transfer import (
    export_collection,
    parse_import_text,
    read_import_file,
    sanitize_json_text,
    write_export,
)


def test_sanitize_strips_bom_and_zero_width_characters() -> None:
    text = "\ufeff  [{\"name\": \"A\u200b\"}]\u200d  "

    assert sanitize_json_text(text) == '[{"name": "A"}]'
    assert sanitize_json_text(None) == ""


def test_parse_import_text_accepts_arrays() -> None:
    assert parse_import_text("\ufeff[{\"name\": \"A\"}, 3]") == [{"name": "A"}, 3]


def test_parse_import_text_rejects_invalid_json() -> None:
    with pytest.raises(ParseFailureError):
        parse_import_text("[{name: 'A'}]")

    with pytest.raises(ParseFailureError):
        parse_import_text("")


def test_parse_import_text_rejects_non_arrays() -> None:
    with pytest.raises(InvalidPayloadError):
        parse_import_text('{"name": "A"}')


def test_invalid_payload_is_a_parse_failure() -> None:
    assert issubclass(InvalidPayloadError, ParseFailureError)


def test_read_import_file_requires_json_suffix(tmp_path: Path) -> None:
    path = tmp_path / "tools.txt"
    path.write_text("[]", encoding="utf-8")

    with pytest.raises(InvalidFileTypeError):
        read_import_file(path)


def test_read_import_file_parses_contents(tmp_path: Path) -> None:
    path = tmp_path / "tools.JSON"
    path.write_text('[{"name": "A", "url": "https://a.com"}]', encoding="utf-8")

    assert read_import_file(path) == [{"name": "A", "url": "https://a.com"}]


def test_read_import_file_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ParseFailureError):
        read_import_file(tmp_path / "missing.json")


def test_export_then_import_reproduces_collection(tmp_path: Path) -> None:
    records = [
        normalize_tool({"id": 1, "name": "Écrire", "url": "https://ecrire.fr", "category": "AI Writing"}),
        normalize_tool({"id": "x-2", "name": "B", "url": "https://b.com", "category": "Video",
                        "featured": True, "pricing": "Paid"}),
    ]

    target = write_export(records, tmp_path / "out" / "tools-export.json")

    text = target.read_text(encoding="utf-8")
    assert "Écrire" in text
    assert text.startswith("[\n  {")
    reparsed = [normalize_tool(item) for item in read_import_file(target)]
    assert reparsed == records


def test_export_collection_is_indented_json() -> None:
    text = export_collection([normalize_tool({"id": 1, "name": "A"})])

    assert json.loads(text)[0]["name"] == "A"
    assert "\n  " in text
