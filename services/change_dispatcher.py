from __future__ import annotations

import logging

from services.property_updater import PropertyUpdater
from services.reentrancy_guard import QuiescenceGuard
from utils.settings import TriggerMode

LOGGER = logging.getLogger(__name__)


class ChangeDispatcher:
    """Entry point for change notifications.

    Reactive runs pass through the quiescence guard; failures are logged and
    never propagate back into the notification channel.
    """

    def __init__(self, updater: PropertyUpdater, guard: QuiescenceGuard):
        self._updater = updater
        self._guard = guard

    @property
    def settings(self):
        return self._updater.engine.settings

    def handle_modified(self, note_path: str) -> bool:
        if self.settings.manual_mode or self.settings.trigger_mode is not TriggerMode.MODIFY:
            return False
        return self._dispatch(note_path)

    def handle_focus_changed(self, note_path: str) -> bool:
        if self.settings.manual_mode or self.settings.trigger_mode is not TriggerMode.FOCUS:
            return False
        if self.is_ignored(note_path):
            LOGGER.debug("Ignoring %s", note_path)
            return False
        return self._dispatch(note_path)

    def is_ignored(self, note_path: str) -> bool:
        return any(
            ignored and (note_path == ignored or note_path.startswith(ignored))
            for ignored in self.settings.ignored_paths
        )

    def _dispatch(self, note_path: str) -> bool:
        if not self._guard.admit():
            return False
        try:
            self._updater.update_note(note_path)
        except Exception:  # noqa: BLE001
            LOGGER.exception("Auto-property update failed for %s", note_path)
            return False
        return True
