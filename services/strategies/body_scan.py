from __future__ import annotations

from models.note import Note
from models.rule import Rule
from utils.match_reducer import PropertyValue, reduce_matches

from .base import ValueStrategy


class BodyScanStrategy(ValueStrategy):
    """Line-matching strategy over the note body."""

    def value_for(self, rule: Rule, note: Note) -> PropertyValue:
        return reduce_matches(note.body_lines, rule)
