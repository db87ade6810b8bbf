from __future__ import annotations

from abc import ABC, abstractmethod

from models.note import Note
from models.rule import Rule
from utils.match_reducer import PropertyValue


class ValueStrategy(ABC):
    """Strategy interface for deriving a property value from a note."""

    @abstractmethod
    def value_for(self, rule: Rule, note: Note) -> PropertyValue:
        """Return the value ``rule`` produces for ``note``."""
        raise NotImplementedError
