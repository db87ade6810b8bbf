from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class RuleValidationError(ValueError):
    """Raised when a rule definition cannot be saved or evaluated."""


class _AliasedEnum(str, Enum):
    """String enum that also accepts the camelCase names used by older settings files."""

    @classmethod
    def _missing_(cls, value: object) -> Optional["_AliasedEnum"]:
        if isinstance(value, str):
            normalized = re.sub(r"(?<!^)(?=[A-Z])", "_", value).lower()
            for member in cls:
                if member.value == normalized:
                    return member
        return None


class Selector(_AliasedEnum):
    FIRST = "first"
    ALL = "all"
    COUNT = "count"


class Predicate(_AliasedEnum):
    STARTS_WITH = "starts_with"
    CONTAINS = "contains"
    ENDS_WITH = "ends_with"
    REGEX = "regex"


class SourceKind(_AliasedEnum):
    BODY_SCAN = "body_scan"
    CREATED_TIMESTAMP = "created_timestamp"
    MODIFIED_TIMESTAMP = "modified_timestamp"
    BODY_CHARACTER_COUNT = "body_character_count"


SELECTOR_TEXT = {
    Selector.FIRST: "Pull the first line",
    Selector.ALL: "Pull all lines",
    Selector.COUNT: "Count the lines",
}

PREDICATE_TEXT = {
    Predicate.STARTS_WITH: "starting with",
    Predicate.CONTAINS: "containing",
    Predicate.ENDS_WITH: "ending with",
    Predicate.REGEX: "matching regex",
}

SOURCE_TEXT = {
    SourceKind.CREATED_TIMESTAMP: "Creation time of the note",
    SourceKind.MODIFIED_TIMESTAMP: "Last modification time of the note",
    SourceKind.BODY_CHARACTER_COUNT: "Character count of the note body",
}


def _coerce_enum(enum_type: type[_AliasedEnum], value: Any, field_name: str) -> Any:
    try:
        return enum_type(value)
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_type)
        raise RuleValidationError(f"Invalid {field_name} '{value}'. Expected one of: {allowed}") from exc


@dataclass(slots=True)
class Rule:
    """User-defined rule deriving one frontmatter property from the note body."""

    key: str
    pattern: str = ""
    enabled: bool = True
    selector: Selector = Selector.FIRST
    predicate: Predicate = Predicate.STARTS_WITH
    trim_whitespace: bool = True
    omit_pattern: bool = False
    case_sensitive: bool = False
    auto_add: bool = False
    source: SourceKind = SourceKind.BODY_SCAN
    compiled_pattern: Optional[re.Pattern[str]] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.selector = _coerce_enum(Selector, self.selector, "selector")
        self.predicate = _coerce_enum(Predicate, self.predicate, "predicate")
        self.source = _coerce_enum(SourceKind, self.source, "source")
        self.validate()

    def validate(self) -> None:
        if not self.key or not self.key.strip():
            raise RuleValidationError("Key cannot be blank")
        if self.source is not SourceKind.BODY_SCAN:
            self.compiled_pattern = None
            return
        if not self.pattern or not self.pattern.strip():
            raise RuleValidationError(f"Rule value cannot be blank (property '{self.key}')")
        if self.predicate is Predicate.REGEX:
            flags = 0 if self.case_sensitive else re.IGNORECASE
            try:
                self.compiled_pattern = re.compile(self.pattern, flags)
            except re.error as exc:
                raise RuleValidationError(
                    f"Invalid regular expression for property '{self.key}': {exc}"
                ) from exc
        else:
            self.compiled_pattern = None

    @property
    def scans_body(self) -> bool:
        return self.source is SourceKind.BODY_SCAN

    def summary(self) -> str:
        if not self.enabled:
            return "- auto-property not enabled"
        if not self.scans_body:
            return SOURCE_TEXT[self.source]
        return f'{SELECTOR_TEXT[self.selector]} {PREDICATE_TEXT[self.predicate]} "{self.pattern}"'

    @classmethod
    def from_dict(cls, item: Mapping[str, Any]) -> "Rule":
        """Build a rule from a settings entry, accepting the legacy plugin field names."""

        return cls(
            key=str(item.get("key", "")),
            pattern=str(item.get("pattern", item.get("ruleValue", ""))),
            enabled=bool(item.get("enabled", True)),
            selector=item.get("selector", item.get("rulePartOne", Selector.FIRST)),
            predicate=item.get("predicate", item.get("rulePartTwo", Predicate.STARTS_WITH)),
            trim_whitespace=_modifier(item, "trim_whitespace", "modifierWhitespace", "trim", True),
            omit_pattern=_modifier(item, "omit_pattern", "modifierOmitSearch", "omit", False),
            case_sensitive=_modifier(item, "case_sensitive", "modifierCaseSensitive", "sensitive", False),
            auto_add=bool(item.get("auto_add", item.get("autoAdd", False))),
            source=item.get("source", item.get("sourceKind", SourceKind.BODY_SCAN)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "enabled": self.enabled,
            "selector": self.selector.value,
            "predicate": self.predicate.value,
            "pattern": self.pattern,
            "trim_whitespace": self.trim_whitespace,
            "omit_pattern": self.omit_pattern,
            "case_sensitive": self.case_sensitive,
            "auto_add": self.auto_add,
            "source": self.source.value,
        }


def normalize_pattern(value: str) -> str:
    """Strip the backslash wrapping users sometimes put around regular expressions."""

    if len(value) >= 2 and value.startswith("\\") and value.endswith("\\"):
        return value[1:-1]
    return value


def _modifier(item: Mapping[str, Any], name: str, legacy_name: str, on_value: str, default: bool) -> bool:
    if name in item:
        return bool(item[name])
    if legacy_name in item:
        return item[legacy_name] == on_value
    return default
