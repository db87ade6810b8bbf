from __future__ import annotations

import logging
from pathlib import Path
from queue import Empty, Queue
from typing import Tuple

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from services.change_dispatcher import ChangeDispatcher
from services.note_store import NoteStore, NoteStoreError

LOGGER = logging.getLogger(__name__)

MODIFIED = "modified"
FOCUSED = "focused"

NoteEvent = Tuple[str, str]


class _NoteEventHandler(FileSystemEventHandler):
    def __init__(self, queue: Queue[NoteEvent], store: NoteStore) -> None:
        self._queue = queue
        self._store = store
        self.suppressed = False

    def on_created(self, event) -> None:  # type: ignore[override]
        if not event.is_directory:
            self._emit(MODIFIED, Path(event.src_path))

    def on_modified(self, event) -> None:  # type: ignore[override]
        if not event.is_directory:
            self._emit(MODIFIED, Path(event.src_path))

    def on_moved(self, event) -> None:  # type: ignore[override]
        if not event.is_directory:
            self._emit(MODIFIED, Path(event.dest_path))

    def on_opened(self, event) -> None:  # type: ignore[override]
        if not event.is_directory:
            self._emit(FOCUSED, Path(event.src_path))

    def _emit(self, kind: str, path: Path) -> None:
        if self.suppressed or not self._store.is_note(path):
            return
        try:
            note_path = self._store.note_id(path)
        except NoteStoreError:
            return
        if any(part.startswith(".") for part in Path(note_path).parts):
            return
        self._queue.put((kind, note_path))


class VaultWatcher:
    """Feeds filesystem change notifications for the vault into the dispatcher.

    Events are collected on the observer thread and handled one at a time on
    the calling thread, so no two evaluations ever overlap.
    """

    def __init__(self, store: NoteStore, dispatcher: ChangeDispatcher) -> None:
        self._store = store
        self._dispatcher = dispatcher
        self._queue: Queue[NoteEvent] = Queue()
        self._handler = _NoteEventHandler(self._queue, store)
        self._observer = Observer()
        self._observer.schedule(self._handler, str(store.vault_dir), recursive=True)

    def run_forever(self) -> None:
        self._observer.start()
        LOGGER.info("Watching %s for note changes", self._store.vault_dir)
        try:
            while True:
                try:
                    kind, note_path = self._queue.get(timeout=1.0)
                except Empty:
                    continue
                self.handle(kind, note_path)
        finally:
            self._observer.stop()
            self._observer.join(timeout=5)

    def handle(self, kind: str, note_path: str) -> bool:
        self._handler.suppressed = True
        try:
            if kind == FOCUSED:
                return self._dispatcher.handle_focus_changed(note_path)
            return self._dispatcher.handle_modified(note_path)
        finally:
            self._handler.suppressed = False
            self._drain_queue()

    def _drain_queue(self) -> None:
        drained = 0
        while True:
            try:
                self._queue.get_nowait()
                drained += 1
            except Empty:
                break
        if drained:
            LOGGER.debug("Drained %d self-triggered event(s) after processing", drained)


__all__ = ["VaultWatcher", "MODIFIED", "FOCUSED"]
