from __future__ import annotations

import pytest

from models.rule import Predicate, Rule, Selector
from utils.match_reducer import link_block_reference, reduce_matches


def test_count_returns_number_of_matching_lines() -> None:
    rule = Rule(key="n", pattern="a", predicate=Predicate.CONTAINS, selector=Selector.COUNT)
    assert reduce_matches(["a", "b", "a"], rule) == 2


def test_count_with_no_matches_is_zero() -> None:
    rule = Rule(key="n", pattern="z", predicate=Predicate.CONTAINS, selector=Selector.COUNT)
    assert reduce_matches(["a", "b"], rule) == 0


def test_first_with_omit_and_trim() -> None:
    rule = Rule(
        key="note",
        pattern="note:",
        predicate=Predicate.CONTAINS,
        selector=Selector.FIRST,
        omit_pattern=True,
        trim_whitespace=True,
    )
    assert reduce_matches(["  note: secret stuff  "], rule) == "secret stuff"


@pytest.mark.parametrize("selector", [Selector.FIRST, Selector.ALL])
def test_no_match_yields_empty_string(selector: Selector) -> None:
    rule = Rule(key="prop", pattern="missing", predicate=Predicate.CONTAINS, selector=selector)
    assert reduce_matches(["one", "two"], rule) == ""


def test_all_returns_every_match_in_body_order() -> None:
    rule = Rule(key="tasks", pattern="- [ ]", selector=Selector.ALL, omit_pattern=True)
    body = ["- [ ] write tests", "intro", "  - [ ] ship it", "- [x] done"]
    assert reduce_matches(body, rule) == ["write tests", "ship it"]


def test_block_reference_becomes_a_link() -> None:
    rule = Rule(key="summary", pattern="Summary")
    assert reduce_matches(["Summary text ^blk1"], rule) == "[[#^blk1|Summary text ]]"


def test_block_reference_requires_leading_whitespace() -> None:
    assert link_block_reference("text^blk1") == "text^blk1"


def test_block_reference_synthesis_applies_to_every_match() -> None:
    rule = Rule(key="quotes", pattern=">", selector=Selector.ALL)
    body = ["> first ^a1", "> second ^b2"]
    assert reduce_matches(body, rule) == ["[[#^a1|> first ]]", "[[#^b2|> second ]]"]


def test_embed_marker_is_stripped_from_results() -> None:
    rule = Rule(key="cover", pattern="![[")
    assert reduce_matches(["![[cover.png]]", "![[other.png]]"], rule) == "[[cover.png]]"


def test_embed_marker_is_stripped_from_every_result() -> None:
    rule = Rule(key="images", pattern="![[", selector=Selector.ALL)
    assert reduce_matches(["![[a.png]]", "![[b.png]]"], rule) == ["[[a.png]]", "[[b.png]]"]


def test_omit_is_case_insensitive_when_matching_is() -> None:
    rule = Rule(key="todo", pattern="todo:", predicate=Predicate.CONTAINS, omit_pattern=True)
    assert reduce_matches(["TODO: call back"], rule) == "call back"


def test_omit_removes_every_occurrence() -> None:
    rule = Rule(key="x", pattern="ab", predicate=Predicate.CONTAINS, omit_pattern=True, case_sensitive=True)
    assert reduce_matches(["ab 1 ab 2"], rule) == "1  2"


def test_regex_omit_removes_the_matched_text() -> None:
    rule = Rule(key="idea", pattern=r"#idea\b", predicate=Predicate.REGEX, omit_pattern=True)
    assert reduce_matches(["#idea remember this"], rule) == "remember this"


def test_without_trim_the_line_is_returned_as_is() -> None:
    rule = Rule(key="x", pattern="x", predicate=Predicate.CONTAINS, trim_whitespace=False)
    assert reduce_matches(["  x  "], rule) == "  x  "
