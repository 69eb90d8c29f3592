"""Import and export of catalog JSON payloads."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Iterable

from .errors import InvalidFileTypeError, InvalidPayloadError, ParseFailureError
from .models import ToolRecord

EXPORT_FILENAME = "tools-export.json"

_ZERO_WIDTH = re.compile("[\u200b-\u200d\ufeff]")


def sanitize_json_text(text: str | None) -> str:
    """Strip a leading BOM and zero-width characters, then trim."""
    cleaned = (text or "").removeprefix("\ufeff")
    return _ZERO_WIDTH.sub("", cleaned).strip()


def parse_import_text(text: str | None) -> list[Any]:
    """Parse pasted or uploaded text into a list of raw records.

    Args:
        text: Raw text as pasted or read from a file.

    Returns:
        list[Any]: Parsed array; its items are not validated here.

    Raises:
        ParseFailureError: If the sanitized text is not valid JSON.
        InvalidPayloadError: If the JSON document is not an array.
    """
    try:
        payload = json.loads(sanitize_json_text(text))
    except json.JSONDecodeError as exc:
        raise ParseFailureError(f"Invalid JSON: {exc.msg} (line {exc.lineno})") from exc
    if not isinstance(payload, list):
        raise InvalidPayloadError("JSON must be an array of tools.")
    return payload


def read_import_file(path: Path) -> list[Any]:
    """Read a ``.json`` upload and parse it like pasted text.

    Raises:
        InvalidFileTypeError: If ``path`` does not end in ``.json``.
        ParseFailureError: If the file cannot be read or parsed.
    """
    if path.suffix.lower() != ".json":
        raise InvalidFileTypeError("Invalid file type. Please select a .json file.")
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise ParseFailureError(f"Unable to read {path}: {exc}") from exc
    return parse_import_text(text)


def export_collection(records: Iterable[ToolRecord]) -> str:
    """Serialize records as indented JSON."""
    payload = [record.model_dump(mode="json") for record in records]
    return json.dumps(payload, indent=2, ensure_ascii=False)


def write_export(records: Iterable[ToolRecord], path: Path | None = None) -> Path:
    """Write the export document and return its location."""
    target = path or Path(EXPORT_FILENAME)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(export_collection(records) + "\n", encoding="utf-8")
    return target


__all__ = [
    "EXPORT_FILENAME",
    "export_collection",
    "parse_import_text",
    "read_import_file",
    "sanitize_json_text",
    "write_export",
]
