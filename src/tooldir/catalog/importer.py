"""Batch import of raw records into an existing collection."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Optional, Sequence

from .errors import ImportInProgressError, InvalidPayloadError
from .identity import DedupIndex, with_unique_id
from .models import ToolRecord
from .normalize import DEFAULT_LOGO_LOOKUP, missing_fields, normalize_tool

LOGGER = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 500


@dataclass(slots=True, frozen=True)
class ImportProgress:
    """Progress snapshot emitted after each processed chunk."""

    processed: int
    total: int


@dataclass(slots=True)
class ImportResult:
    """Partition of an import batch.

    Attributes:
        accepted: Normalized records added to the collection, in input order.
        duplicates: Normalized records that clashed with a known url or name.
        rejected: Raw candidates missing a name, url, or category.
        collection: Accepted records followed by the pre-existing collection.
    """

    accepted: list[ToolRecord] = field(default_factory=list)
    duplicates: list[ToolRecord] = field(default_factory=list)
    rejected: list[Any] = field(default_factory=list)
    collection: list[ToolRecord] = field(default_factory=list)

    @property
    def counts(self) -> dict[str, int]:
        """Return bucket sizes plus the size of the resulting collection."""
        return {
            "accepted": len(self.accepted),
            "duplicates": len(self.duplicates),
            "rejected": len(self.rejected),
            "total": len(self.collection),
        }


class ImportJob:
    """A single import run; iterate it to process candidates chunk by chunk."""

    def __init__(
        self,
        importer: "BatchImporter",
        candidates: Sequence[Any],
        existing: Sequence[ToolRecord],
    ) -> None:
        self._importer = importer
        self._candidates = list(candidates)
        self._existing = list(existing)
        self._result: ImportResult | None = None

    @property
    def done(self) -> bool:
        """Return whether every chunk has been processed."""
        return self._result is not None

    @property
    def result(self) -> ImportResult:
        """Return the finished partition.

        Raises:
            RuntimeError: If the job has not been iterated to completion.
        """
        if self._result is None:
            raise RuntimeError("Import job has not finished; iterate it first.")
        return self._result

    def __iter__(self) -> Iterator[ImportProgress]:
        return self._process()

    def _process(self) -> Iterator[ImportProgress]:
        if self._result is not None:
            return
        self._importer._acquire()
        try:
            index = DedupIndex(self._existing)
            used_ids = {record.id for record in self._existing}
            partial = ImportResult()
            total = len(self._candidates)
            size = self._importer.batch_size
            for start in range(0, total, size):
                for raw in self._candidates[start : start + size]:
                    self._classify(raw, index, used_ids, partial)
                yield ImportProgress(processed=min(start + size, total), total=total)
            partial.collection = [*partial.accepted, *self._existing]
            self._result = partial
            LOGGER.debug("Import finished: %s", partial.counts)
        finally:
            self._importer._release()

    def _classify(
        self,
        raw: Any,
        index: DedupIndex,
        used_ids: set[Any],
        partial: ImportResult,
    ) -> None:
        if not isinstance(raw, Mapping):
            partial.rejected.append(raw)
            return
        record = normalize_tool(raw, logo_lookup=self._importer.logo_lookup)
        missing = missing_fields(record)
        if missing:
            LOGGER.debug("Rejected candidate missing %s: %r", ", ".join(missing), raw)
            partial.rejected.append(raw)
            return
        if index.contains(record):
            partial.duplicates.append(record)
            return
        record = with_unique_id(record, used_ids)
        index.add(record)
        partial.accepted.append(record)


class BatchImporter:
    """Normalize, validate, and deduplicate candidates against a collection.

    Only one job per importer may be in flight; the chunk size changes the
    pacing of progress events, never the resulting partition.
    """

    def __init__(
        self,
        batch_size: int = DEFAULT_BATCH_SIZE,
        *,
        logo_lookup: str = DEFAULT_LOGO_LOOKUP,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1.")
        self.batch_size = batch_size
        self.logo_lookup = logo_lookup
        self._running = False

    @property
    def running(self) -> bool:
        """Return whether a job from this importer is currently in flight."""
        return self._running

    def start(self, candidates: Any, existing: Sequence[ToolRecord]) -> ImportJob:
        """Prepare an import job.

        Args:
            candidates: Parsed payload; must be a list or tuple of raw records.
            existing: Current collection.

        Returns:
            ImportJob: Job to iterate for progress and read the result from.

        Raises:
            InvalidPayloadError: If ``candidates`` is not a list or tuple.
        """
        if not isinstance(candidates, (list, tuple)):
            raise InvalidPayloadError("Import payload must be an array of tools.")
        return ImportJob(self, candidates, existing)

    def run(
        self,
        candidates: Any,
        existing: Sequence[ToolRecord],
        *,
        on_progress: Optional[Callable[[ImportProgress], None]] = None,
    ) -> ImportResult:
        """Run an import to completion and return its partition."""
        job = self.start(candidates, existing)
        for progress in job:
            if on_progress is not None:
                on_progress(progress)
        return job.result

    def _acquire(self) -> None:
        if self._running:
            raise ImportInProgressError("An import is already in progress.")
        self._running = True

    def _release(self) -> None:
        self._running = False


__all__ = [
    "DEFAULT_BATCH_SIZE",
    "BatchImporter",
    "ImportJob",
    "ImportProgress",
    "ImportResult",
]
