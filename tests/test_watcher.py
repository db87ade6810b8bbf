from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from typing import List, Tuple

from services.note_store import NoteStore
from services.watcher import FOCUSED, MODIFIED, VaultWatcher


class RecordingDispatcher:
    def __init__(self) -> None:
        self.calls: List[Tuple[str, str]] = []

    def handle_modified(self, note_path: str) -> bool:
        self.calls.append((MODIFIED, note_path))
        return True

    def handle_focus_changed(self, note_path: str) -> bool:
        self.calls.append((FOCUSED, note_path))
        return True


def _event(path: Path, is_directory: bool = False) -> SimpleNamespace:
    return SimpleNamespace(src_path=str(path), dest_path=str(path), is_directory=is_directory)


def test_handle_routes_events_to_the_dispatcher(vault: Path) -> None:
    dispatcher = RecordingDispatcher()
    watcher = VaultWatcher(NoteStore(vault), dispatcher)
    watcher.handle(MODIFIED, "a.md")
    watcher.handle(FOCUSED, "b.md")
    assert dispatcher.calls == [(MODIFIED, "a.md"), (FOCUSED, "b.md")]


def test_events_are_filtered_to_visible_notes(vault: Path) -> None:
    watcher = VaultWatcher(NoteStore(vault), RecordingDispatcher())
    handler = watcher._handler
    handler.on_modified(_event(vault / "folder" / "a.md"))
    handler.on_modified(_event(vault / "image.png"))
    handler.on_modified(_event(vault / ".autoprops" / "settings.md"))
    handler.on_modified(_event(vault / "folder", is_directory=True))
    handler.on_opened(_event(vault / "b.md"))

    queued = []
    while not watcher._queue.empty():
        queued.append(watcher._queue.get_nowait())
    assert queued == [(MODIFIED, "folder/a.md"), (FOCUSED, "b.md")]


def test_events_raised_while_processing_are_discarded(vault: Path) -> None:
    store = NoteStore(vault)

    class WritingDispatcher(RecordingDispatcher):
        def handle_modified(self, note_path: str) -> bool:
            watcher._handler.on_modified(_event(vault / note_path))
            return super().handle_modified(note_path)

    dispatcher = WritingDispatcher()
    watcher = VaultWatcher(store, dispatcher)
    watcher.handle(MODIFIED, "a.md")
    assert watcher._queue.empty()
