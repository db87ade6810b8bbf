from __future__ import annotations

from models.rule import Predicate, Rule


def line_matches(line: str, rule: Rule) -> bool:
    """Decide whether a single body line satisfies the rule's predicate."""

    predicate = rule.predicate
    if predicate is Predicate.REGEX:
        if rule.compiled_pattern is None:
            return False
        return rule.compiled_pattern.search(line.strip()) is not None

    candidate = line
    pattern = rule.pattern
    if not rule.case_sensitive:
        candidate = candidate.lower()
        pattern = pattern.lower()

    if predicate is Predicate.CONTAINS:
        return pattern in candidate
    if rule.trim_whitespace:
        candidate = candidate.strip()
    if predicate is Predicate.STARTS_WITH:
        return candidate.startswith(pattern)
    if predicate is Predicate.ENDS_WITH:
        return candidate.endswith(pattern)
    raise ValueError(f"Unsupported predicate: {predicate}")
