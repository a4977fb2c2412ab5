"""Debounced change notification for the beads store directory.

A ``watchdog`` observer thread forwards relevant file events into a
single-slot mailbox. The UI loop polls the mailbox without blocking; bursts
of writes collapse into one pending change.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from collections.abc import Callable
from pathlib import Path

from watchdog.events import (
    EVENT_TYPE_CLOSED,
    EVENT_TYPE_CREATED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from .errors import StartupError

logger = logging.getLogger("beadboard.watch")

DEFAULT_DEBOUNCE_SECONDS = 0.1
TOUCH_FILENAME = "last-touched"
DATABASE_FILENAME = "beads.db"

# Which event types count as a store change, per watched filename. A reader
# opening beads.db read-only touches the -wal and -shm files and emits
# opened/closed_no_write events on the database itself, none of which appear
# here. In-place page writes show up as a close-after-write instead.
STORE_CHANGE_EVENTS: dict[str, frozenset[str]] = {
    TOUCH_FILENAME: frozenset(
        {
            EVENT_TYPE_CREATED,
            EVENT_TYPE_MODIFIED,
            EVENT_TYPE_MOVED,
            EVENT_TYPE_CLOSED,
        }
    ),
    DATABASE_FILENAME: frozenset({EVENT_TYPE_CREATED, EVENT_TYPE_MOVED, EVENT_TYPE_CLOSED}),
}


class ChangeMailbox:
    """Coalescing single-slot change flag with a quiet-period debounce."""

    def __init__(
        self,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._debounce_seconds = max(0.0, debounce_seconds)
        self._monotonic = monotonic
        self._lock = threading.Lock()
        self._pending = False
        self._last_event = 0.0

    def notify(self) -> None:
        with self._lock:
            self._pending = True
            self._last_event = self._monotonic()

    def pending(self) -> bool:
        with self._lock:
            return self._pending

    def poll(self) -> bool:
        """Return True once per burst, after the burst has gone quiet."""
        with self._lock:
            if not self._pending:
                return False
            if (self._monotonic() - self._last_event) < self._debounce_seconds:
                return False
            self._pending = False
            return True


def is_store_change(event_type: str, path: str | bytes | None) -> bool:
    if not path:
        return False
    return event_type in STORE_CHANGE_EVENTS.get(os.path.basename(os.fsdecode(path)), ())


class StoreEventHandler(FileSystemEventHandler):
    """Forward store writes into a ``ChangeMailbox``."""

    def __init__(self, mailbox: ChangeMailbox) -> None:
        super().__init__()
        self.mailbox = mailbox

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        dest_path = getattr(event, "dest_path", None)
        if is_store_change(event.event_type, event.src_path) or is_store_change(event.event_type, dest_path):
            logger.debug("store change: %s %s", event.event_type, event.src_path)
            self.mailbox.notify()


class ChangeWatcher:
    """Watch ``beads_dir`` (non-recursively) and expose a pollable change flag."""

    def __init__(
        self,
        beads_dir: Path,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        observer_factory: Callable[[], object] = Observer,
    ) -> None:
        self.beads_dir = Path(beads_dir)
        self.mailbox = ChangeMailbox(debounce_seconds)
        self._handler = StoreEventHandler(self.mailbox)
        self._observer_factory = observer_factory
        self._observer = None

    def start(self) -> None:
        observer = self._observer_factory()
        try:
            observer.schedule(self._handler, str(self.beads_dir), recursive=False)
            observer.start()
        except OSError as exc:
            raise StartupError(f"Unable to watch {self.beads_dir} for changes") from exc
        self._observer = observer
        logger.info("watching %s", self.beads_dir)

    def poll(self) -> bool:
        return self.mailbox.poll()

    def stop(self) -> None:
        observer = self._observer
        self._observer = None
        if observer is None:
            return
        observer.stop()
        observer.join(timeout=1.0)

    def __enter__(self) -> "ChangeWatcher":
        self.start()
        return self

    def __exit__(self, *_exc: object) -> None:
        self.stop()
