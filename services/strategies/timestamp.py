from __future__ import annotations

from datetime import datetime
from typing import Optional

from models.note import Note
from models.rule import Rule
from utils.match_reducer import PropertyValue

from .base import ValueStrategy

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"


class TimestampStrategy(ValueStrategy):
    """Reads the creation or modification time recorded for the note.

    When the store cannot report ``attribute`` (no birth time on most Linux
    filesystems), a value already present in the note is kept as is, and an
    empty or missing one is stamped once from ``fallback_attribute``.
    """

    def __init__(
        self,
        attribute: str,
        fallback_attribute: Optional[str] = None,
        timestamp_format: str = TIMESTAMP_FORMAT,
    ):
        self._attribute = attribute
        self._fallback_attribute = fallback_attribute
        self._timestamp_format = timestamp_format

    def value_for(self, rule: Rule, note: Note) -> PropertyValue:
        instant: datetime | None = getattr(note, self._attribute)
        if instant is None:
            current = note.metadata.get(rule.key)
            if current not in (None, ""):
                return current
            if self._fallback_attribute:
                instant = getattr(note, self._fallback_attribute)
        if instant is None:
            return ""
        return instant.strftime(self._timestamp_format)
