from __future__ import annotations

from models.note import Note
from models.rule import Rule
from utils.match_reducer import PropertyValue

from .base import ValueStrategy


class CharacterCountStrategy(ValueStrategy):
    def value_for(self, rule: Rule, note: Note) -> PropertyValue:  # noqa: ARG002
        return len(note.body)
