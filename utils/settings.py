from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List

from models.rule import Rule, RuleValidationError

LOGGER = logging.getLogger(__name__)


class TriggerMode(str, Enum):
    MODIFY = "modify"
    FOCUS = "focus"


@dataclass(slots=True)
class EngineSettings:
    """Persisted rule set plus engine-wide options."""

    rules: List[Rule] = field(default_factory=list)
    manual_mode: bool = False
    trigger_mode: TriggerMode = TriggerMode.MODIFY
    show_notices: bool = True
    ignored_paths: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rules": [rule.to_dict() for rule in self.rules],
            "manual_mode": self.manual_mode,
            "trigger_mode": self.trigger_mode.value,
            "show_notices": self.show_notices,
            "ignored_paths": list(self.ignored_paths),
        }


def load_settings(settings_file: Path) -> EngineSettings:
    """Load settings from JSON, falling back to defaults when the file is absent."""

    if not settings_file.exists():
        LOGGER.debug("No settings file at %s, using defaults", settings_file)
        return EngineSettings()
    try:
        data = json.loads(settings_file.read_text(encoding="utf-8") or "{}")
    except json.JSONDecodeError as exc:
        raise ValueError(f"Settings file {settings_file} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {settings_file} must contain a JSON object")

    raw_mode = data.get("trigger_mode", TriggerMode.MODIFY.value)
    try:
        trigger_mode = TriggerMode(raw_mode)
    except ValueError:
        LOGGER.warning("Unknown trigger mode %r in %s, using 'modify'", raw_mode, settings_file)
        trigger_mode = TriggerMode.MODIFY

    return EngineSettings(
        rules=_load_rules(data.get("rules", data.get("autopropertySettings", []))),
        manual_mode=bool(data.get("manual_mode", data.get("manualMode", False))),
        trigger_mode=trigger_mode,
        show_notices=bool(data.get("show_notices", True)),
        ignored_paths=[str(path) for path in data.get("ignored_paths", [])],
    )


def save_settings(settings_file: Path, settings: EngineSettings) -> None:
    settings_file.parent.mkdir(parents=True, exist_ok=True)
    settings_file.write_text(json.dumps(settings.to_dict(), indent=2), encoding="utf-8")
    LOGGER.debug("Saved %d rule(s) to %s", len(settings.rules), settings_file)


def _load_rules(items: Iterable[Dict[str, Any]]) -> List[Rule]:
    rules: List[Rule] = []
    for index, item in enumerate(items):
        try:
            rules.append(Rule.from_dict(item))
        except RuleValidationError as exc:
            LOGGER.warning("Skipping rule #%d: %s", index, exc)
    return rules
