from __future__ import annotations

from pathlib import Path

import pytest

from utils.config import load_config

ENV_VARS = ["VAULT_DIR", "SETTINGS_FILE", "LOG_DIR", "LOG_LEVEL", "QUIESCENCE_SECONDS", "NOTE_SUFFIXES", "SCHEDULE_INTERVAL"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path: Path) -> None:
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


def test_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path / "missing.env")
    assert config.vault_dir == tmp_path / "vault"
    assert config.settings_file == tmp_path / "vault" / ".autoprops" / "settings.json"
    assert config.log_level == "INFO"
    assert config.quiescence_seconds == 2.0
    assert config.note_suffixes == (".md",)
    assert config.schedule_interval == 15


def test_values_from_env_file(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "VAULT_DIR=notes\nSETTINGS_FILE=/etc/autoprops.json\nQUIESCENCE_SECONDS=0.5\nNOTE_SUFFIXES=md, markdown\n",
        encoding="utf-8",
    )
    config = load_config(env_file)
    assert config.vault_dir == tmp_path / "notes"
    assert config.settings_file == Path("/etc/autoprops.json")
    assert config.quiescence_seconds == 0.5
    assert config.note_suffixes == (".md", ".markdown")


def test_negative_quiescence_is_rejected(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("QUIESCENCE_SECONDS", "-1")
    with pytest.raises(ValueError, match="QUIESCENCE_SECONDS"):
        load_config(tmp_path / "missing.env")
