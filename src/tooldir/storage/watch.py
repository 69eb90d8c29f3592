"""Follow a storage file written by other processes."""

from __future__ import annotations

import logging
import queue
import threading
import time
from pathlib import Path
from typing import Callable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from . import FileKeyValueStore, StorageEvent

LOGGER = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.2


class StorageWatcher:
    """Call :meth:`FileKeyValueStore.sync` whenever the backing file changes.

    Filesystem notifications arrive on the watchdog thread and are only
    queued there; ``sync`` and therefore every subscriber of the store run on
    the thread that called :meth:`watch`.
    """

    def __init__(
        self,
        store: FileKeyValueStore,
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        self._store = store
        self._debounce_seconds = max(0.05, debounce_seconds)
        self._queue: queue.Queue[Optional[Path]] = queue.Queue()
        self._stop_event = threading.Event()
        self._observer: Optional[BaseObserver] = None

    @property
    def path(self) -> Path:
        return self._store.path

    @property
    def running(self) -> bool:
        return self._observer is not None and self._observer.is_alive()

    def poll(self) -> list[StorageEvent]:
        """Check the file once and return the changes found."""
        return self._store.sync()

    def watch(self, callback: Callable[[list[StorageEvent]], None]) -> None:
        """Block until :meth:`stop`, reporting each debounced batch of changes.

        Args:
            callback: Invoked with the storage events of every non-empty sync.

        Raises:
            RuntimeError: If the watcher is already running.
        """
        if self._observer is not None:
            raise RuntimeError("StorageWatcher is already running.")

        directory = self.path.parent
        directory.mkdir(parents=True, exist_ok=True)
        self._stop_event.clear()
        self._queue = queue.Queue()
        self._observer = Observer()
        self._observer.schedule(_StorageFileHandler(self.path, self._queue), str(directory))
        self._observer.start()
        LOGGER.debug("Watching %s", self.path)
        try:
            self._run_loop(callback)
        finally:
            self.stop()

    def stop(self) -> None:
        """Stop the observer and unblock :meth:`watch`."""
        self._stop_event.set()
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None
        self._queue.put(None)

    def _run_loop(self, callback: Callable[[list[StorageEvent]], None]) -> None:
        deadline: Optional[float] = None
        while not self._stop_event.is_set():
            timeout = None if deadline is None else max(0.0, deadline - time.monotonic())
            try:
                path = self._queue.get(timeout=timeout)
            except queue.Empty:
                deadline = None
                events = self.poll()
                if events:
                    callback(events)
                continue
            if path is None:
                break
            deadline = time.monotonic() + self._debounce_seconds


class _StorageFileHandler(FileSystemEventHandler):
    """Queue notifications that touch the storage file."""

    def __init__(self, target: Path, queue_handle: queue.Queue[Optional[Path]]) -> None:
        self._target = target.resolve()
        self._queue = queue_handle

    def on_created(self, event: FileSystemEvent) -> None:
        self._enqueue(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._enqueue(event)

    def on_moved(self, event: FileSystemEvent) -> None:
        self._enqueue(event)

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._enqueue(event)

    def _enqueue(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        # Writes land through an atomic rename, so the target shows up as dest_path.
        for raw in (event.src_path, getattr(event, "dest_path", "")):
            if raw and Path(str(raw)).resolve() == self._target:
                self._queue.put(self._target)
                return


__all__ = ["DEFAULT_DEBOUNCE_SECONDS", "StorageWatcher"]
