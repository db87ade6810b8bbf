"""Reduce the body lines matched by a rule into a property value."""

from __future__ import annotations

import re
from typing import List, Sequence, Union

from models.rule import Predicate, Rule, Selector
from utils.line_matcher import line_matches

PropertyValue = Union[str, int, List[str]]

EMBED_MARKER = "!"
_BLOCK_REFERENCE_RE = re.compile(r"\s+(\^\w+)$")


def matching_lines(body_lines: Sequence[str], rule: Rule) -> List[str]:
    return [line for line in body_lines if line_matches(line, rule)]


def reduce_matches(body_lines: Sequence[str], rule: Rule) -> PropertyValue:
    """Compute the value of ``rule`` for a note body.

    ``count`` rules return the number of matching lines. Any other selector
    returns an empty string when nothing matched, otherwise the post-processed
    first line (``first``) or every post-processed line in body order (``all``).
    """

    matches = matching_lines(body_lines, rule)
    if rule.selector is Selector.COUNT:
        return len(matches)
    if not matches:
        return ""

    results = [postprocess_line(line, rule) for line in matches]
    if rule.selector is Selector.FIRST:
        return results[0]
    return results


def postprocess_line(line: str, rule: Rule) -> str:
    text = line
    if rule.omit_pattern:
        text = omit_pattern(text, rule)
    if rule.trim_whitespace:
        text = text.strip()
    text = link_block_reference(text)
    if rule.pattern.startswith(EMBED_MARKER) and text.startswith(EMBED_MARKER):
        text = text[len(EMBED_MARKER) :]
    return text


def omit_pattern(text: str, rule: Rule) -> str:
    if rule.predicate is Predicate.REGEX and rule.compiled_pattern is not None:
        return rule.compiled_pattern.sub("", text)
    if rule.case_sensitive:
        return text.replace(rule.pattern, "")
    return re.sub(re.escape(rule.pattern), "", text, flags=re.IGNORECASE)


def link_block_reference(text: str) -> str:
    """Turn ``"text ^id"`` into ``"[[#^id|text ]]"`` so the property links back to its line."""

    match = _BLOCK_REFERENCE_RE.search(text)
    if not match:
        return text
    marker = match.group(1)
    return f"[[#{marker}|{text[: match.start(1)]}]]"
