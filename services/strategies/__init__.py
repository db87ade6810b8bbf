"""Value strategy implementations keyed by rule source kind."""

from models.rule import SourceKind

from .base import ValueStrategy
from .body_scan import BodyScanStrategy
from .character_count import CharacterCountStrategy
from .timestamp import TIMESTAMP_FORMAT, TimestampStrategy

STRATEGIES: dict[SourceKind, ValueStrategy] = {
    SourceKind.BODY_SCAN: BodyScanStrategy(),
    SourceKind.CREATED_TIMESTAMP: TimestampStrategy("created_at", fallback_attribute="modified_at"),
    SourceKind.MODIFIED_TIMESTAMP: TimestampStrategy("modified_at"),
    SourceKind.BODY_CHARACTER_COUNT: CharacterCountStrategy(),
}


def strategy_for(source: SourceKind) -> ValueStrategy:
    return STRATEGIES[source]


__all__ = [
    "ValueStrategy",
    "BodyScanStrategy",
    "TimestampStrategy",
    "CharacterCountStrategy",
    "STRATEGIES",
    "TIMESTAMP_FORMAT",
    "strategy_for",
]
