from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List


@dataclass(slots=True)
class Note:
    """A note rebuilt from its current text for a single evaluation."""

    path: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    body_lines: List[str] = field(default_factory=list)
    created_at: datetime | None = None
    modified_at: datetime | None = None

    @property
    def body(self) -> str:
        return "\n".join(self.body_lines)
