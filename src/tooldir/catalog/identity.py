"""Record identity and duplicate detection."""

from __future__ import annotations

from typing import Any, Iterable, NamedTuple

from .models import ToolRecord
from .normalize import generate_id, normalize_url


class DedupKey(NamedTuple):
    """Comparison key for a record: normalized url and lowercased name."""

    url: str
    name: str


def dedup_key(record: ToolRecord) -> DedupKey:
    """Return the dedup key for ``record``."""
    return DedupKey(url=normalize_url(record.url), name=record.name.strip().lower())


class DedupIndex:
    """Running set of known urls and names.

    A record is a duplicate when its url OR its name is already known. Empty
    urls and names never match anything.
    """

    def __init__(self, records: Iterable[ToolRecord] = ()) -> None:
        self._urls: set[str] = set()
        self._names: set[str] = set()
        for record in records:
            self.add(record)

    def contains(self, record: ToolRecord) -> bool:
        """Return whether ``record`` clashes with a known url or name.

        Args:
            record: Normalized record to look up.

        Returns:
            bool: ``True`` when either the normalized url or the lowercased name
            is already indexed.
        """
        key = dedup_key(record)
        return bool(
            (key.url and key.url in self._urls) or (key.name and key.name in self._names)
        )

    def add(self, record: ToolRecord) -> None:
        """Index the url and name of ``record``; empty values are skipped."""
        key = dedup_key(record)
        if key.url:
            self._urls.add(key.url)
        if key.name:
            self._names.add(key.name)


def is_duplicate(record: ToolRecord, index: DedupIndex) -> bool:
    """Return whether ``record`` clashes with an entry already in ``index``."""
    return index.contains(record)


def with_unique_id(record: ToolRecord, used_ids: set[Any]) -> ToolRecord:
    """Return ``record``, re-keyed if its id is taken, and mark the id as used."""
    while record.id in used_ids:
        record = record.model_copy(update={"id": generate_id()})
    used_ids.add(record.id)
    return record


def ensure_unique_ids(records: Iterable[ToolRecord]) -> list[ToolRecord]:
    """Keep the first holder of each id and re-key later clashes."""
    used_ids: set[Any] = set()
    return [with_unique_id(record, used_ids) for record in records]


__all__ = [
    "DedupIndex",
    "DedupKey",
    "dedup_key",
    "ensure_unique_ids",
    "is_duplicate",
    "with_unique_id",
]
