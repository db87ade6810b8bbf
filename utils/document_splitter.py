"""Separate a note's frontmatter block from the body lines that rules scan."""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

FRONTMATTER_DELIMITER = "---"
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


def split_lines(text: str) -> List[str]:
    return _LINE_BREAK_RE.split(text)


def split_frontmatter(raw_text: str) -> Tuple[Optional[List[str]], List[str]]:
    """Return ``(frontmatter_lines, body_lines)``.

    ``frontmatter_lines`` is ``None`` when the note does not open with a
    delimiter line. When the block is never closed, every remaining line is
    treated as frontmatter and the body is empty.
    """

    lines = split_lines(raw_text)
    if lines[0] != FRONTMATTER_DELIMITER:
        return None, lines
    index = 1
    while index < len(lines) and lines[index] != FRONTMATTER_DELIMITER:
        index += 1
    frontmatter = lines[1:index]
    return frontmatter, lines[index + 1 :]


def extract_body_lines(raw_text: str) -> List[str]:
    _, body = split_frontmatter(raw_text)
    return body
