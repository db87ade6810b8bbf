from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from models.note import Note
from models.rule import Rule
from services.strategies import strategy_for
from utils.match_reducer import PropertyValue
from utils.settings import EngineSettings, load_settings, save_settings

LOGGER = logging.getLogger(__name__)


class RulesEngine:
    """Loads auto-property rules and computes the frontmatter patch for a note."""

    def __init__(self, settings_file: Path):
        self.settings_file = settings_file
        self.settings = EngineSettings()
        self.reload()

    def reload(self) -> None:
        self.settings = load_settings(self.settings_file)
        LOGGER.debug("Loaded %d rule(s) from %s", len(self.settings.rules), self.settings_file)

    def save(self) -> None:
        save_settings(self.settings_file, self.settings)

    @property
    def rules(self) -> List[Rule]:
        return self.settings.rules

    @property
    def enabled_rules(self) -> List[Rule]:
        return [rule for rule in self.settings.rules if rule.enabled]

    def rule_for(self, key: str) -> Optional[Rule]:
        """Return the first enabled rule governing ``key``."""

        for rule in self.settings.rules:
            if rule.enabled and rule.key == key:
                return rule
        return None

    def add_rule(self, rule: Rule) -> None:
        """Add ``rule``, replacing any existing rule for the same key, and persist."""

        for index, existing in enumerate(self.settings.rules):
            if existing.key == rule.key:
                self.settings.rules[index] = rule
                break
        else:
            self.settings.rules.append(rule)
        self.save()

    def remove_rule(self, key: str) -> bool:
        remaining = [rule for rule in self.settings.rules if rule.key != key]
        if len(remaining) == len(self.settings.rules):
            return False
        self.settings.rules = remaining
        self.save()
        return True

    def set_enabled(self, key: str, enabled: bool) -> bool:
        found = False
        for rule in self.settings.rules:
            if rule.key == key:
                rule.enabled = enabled
                found = True
        if found:
            self.save()
        return found

    def evaluate(self, rule: Rule, note: Note) -> PropertyValue:
        value = strategy_for(rule.source).value_for(rule, note)
        LOGGER.debug("Rule for %s on %s produced %r", rule.key, note.path, value)
        return value

    def compute_patch(self, note: Note) -> Dict[str, PropertyValue]:
        """Return only the properties whose derived value differs from the note's metadata."""

        patch: Dict[str, PropertyValue] = {}
        for key, current in note.metadata.items():
            rule = self.rule_for(key)
            if rule is None:
                continue
            value = self.evaluate(rule, note)
            if not same_value(current, value):
                patch[key] = value

        for rule in self.enabled_rules:
            if not rule.auto_add or rule.key in note.metadata or rule.key in patch:
                continue
            if self.rule_for(rule.key) is not rule:
                continue
            patch[rule.key] = self.evaluate(rule, note)
        return patch


def same_value(current: Any, new: Any) -> bool:
    """Deep equality that keeps list order and does not conflate ``True`` with ``1``."""

    if isinstance(current, list) and isinstance(new, list):
        return len(current) == len(new) and all(same_value(a, b) for a, b in zip(current, new))
    return type(current) is type(new) and current == new
