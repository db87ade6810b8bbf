from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from services.note_store import NoteStore
from services.notifier import Notifier
from utils.match_reducer import PropertyValue
from utils.rules_engine import RulesEngine

LOGGER = logging.getLogger(__name__)

Patch = Dict[str, PropertyValue]


@dataclass(slots=True)
class BatchResult:
    updated: Dict[str, Patch] = field(default_factory=dict)
    unchanged: int = 0
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.updated) + self.unchanged + len(self.failed)


class PropertyUpdater:
    """Applies rule-derived patches to notes, one note or the whole vault."""

    def __init__(self, store: NoteStore, engine: RulesEngine, notifier: Optional[Notifier] = None):
        self.store = store
        self.engine = engine
        self.notifier = notifier

    def update_note(self, note_path: str, dry_run: bool = False) -> Patch:
        note = self.store.load_note(note_path)
        patch = self.engine.compute_patch(note)
        if not patch:
            LOGGER.debug("No property changes for %s", note_path)
            return patch
        if dry_run:
            LOGGER.info("Would update %s on %s", sorted(patch), note_path)
            return patch
        self.store.write(note_path, patch)
        LOGGER.info("Updated %s on %s", sorted(patch), note_path)
        return patch

    def update_all(self, dry_run: bool = False) -> BatchResult:
        """Update every note in the vault, isolating failures to the note that raised them."""

        result = BatchResult()
        for note_path in self.store.list_notes():
            try:
                patch = self.update_note(note_path, dry_run=dry_run)
            except Exception as exc:  # noqa: BLE001
                LOGGER.warning("Failed to update %s: %s", note_path, exc)
                result.failed[note_path] = str(exc)
                continue
            if patch:
                result.updated[note_path] = patch
            else:
                result.unchanged += 1

        LOGGER.info(
            "Batch finished: %d updated, %d unchanged, %d failed",
            len(result.updated),
            result.unchanged,
            len(result.failed),
        )
        if not dry_run and self.notifier and self.engine.settings.show_notices:
            self.notifier.notify("Updated all auto-property values in vault")
        return result
