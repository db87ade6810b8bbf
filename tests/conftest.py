from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable

import pytest

from models.rule import Rule


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    root = tmp_path / "vault"
    root.mkdir()
    return root


@pytest.fixture
def write_note(vault: Path):
    def _write(name: str, text: str) -> Path:
        path = vault / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def settings_file(tmp_path: Path):
    path = tmp_path / "settings.json"

    def _write(rules: Iterable[Rule], **options) -> Path:
        payload = {"rules": [rule.to_dict() for rule in rules], **options}
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    return _write
