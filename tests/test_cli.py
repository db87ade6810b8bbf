from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from click.testing import CliRunner

from main import cli


@pytest.fixture
def runner(tmp_path: Path, vault: Path, monkeypatch) -> CliRunner:
    monkeypatch.chdir(tmp_path)
    env = {
        "VAULT_DIR": str(vault),
        "SETTINGS_FILE": str(tmp_path / "settings.json"),
        "LOG_DIR": str(tmp_path / "logs"),
        "LOG_LEVEL": "WARNING",
        "COLUMNS": "200",
    }
    yield CliRunner(env=env)
    root = logging.getLogger()
    for handler in list(root.handlers):
        handler.close()
        root.removeHandler(handler)


def _invoke(runner: CliRunner, tmp_path: Path, *args: str):
    return runner.invoke(cli, ["--env-file", str(tmp_path / "none.env"), *args])


def test_rules_add_and_list(runner: CliRunner, tmp_path: Path) -> None:
    result = _invoke(runner, tmp_path, "rules", "add", "summary", "--pattern", "Summary:", "--omit")
    assert result.exit_code == 0, result.output
    assert "Auto-property saved" in result.output

    listed = _invoke(runner, tmp_path, "rules", "list")
    assert listed.exit_code == 0
    assert "summary" in listed.output
    assert "Pull the first line" in listed.output

    saved = json.loads((tmp_path / "settings.json").read_text(encoding="utf-8"))
    assert saved["rules"][0]["omit_pattern"] is True


def test_invalid_regex_is_not_saved(runner: CliRunner, tmp_path: Path) -> None:
    result = _invoke(runner, tmp_path, "rules", "add", "bad", "--pattern", "([", "--predicate", "regex")
    assert result.exit_code != 0
    assert "Invalid regular expression" in result.output
    assert not (tmp_path / "settings.json").exists()


def test_blank_pattern_is_not_saved(runner: CliRunner, tmp_path: Path) -> None:
    result = _invoke(runner, tmp_path, "rules", "add", "summary")
    assert result.exit_code != 0
    assert not (tmp_path / "settings.json").exists()


def test_update_applies_patch(runner: CliRunner, tmp_path: Path, vault: Path) -> None:
    note = vault / "a.md"
    note.write_text("---\nsummary: old\n---\nSummary: new\n", encoding="utf-8")
    _invoke(runner, tmp_path, "rules", "add", "summary", "--pattern", "Summary:", "--omit")

    result = _invoke(runner, tmp_path, "update", "a.md")

    assert result.exit_code == 0, result.output
    assert note.read_text(encoding="utf-8") == "---\nsummary: new\n---\nSummary: new\n"

    again = _invoke(runner, tmp_path, "update", "a.md")
    assert "up to date" in again.output


def test_update_missing_note_fails(runner: CliRunner, tmp_path: Path) -> None:
    result = _invoke(runner, tmp_path, "update", "missing.md")
    assert result.exit_code != 0
    assert "Note not found" in result.output


def test_update_all_dry_run(runner: CliRunner, tmp_path: Path, vault: Path) -> None:
    note = vault / "a.md"
    note.write_text("- [ ] one\n- [ ] two\n", encoding="utf-8")
    _invoke(
        runner, tmp_path, "rules", "add", "open_tasks", "--pattern", "- [ ]", "--selector", "count", "--auto-add"
    )

    result = _invoke(runner, tmp_path, "update-all", "--dry-run")

    assert result.exit_code == 0, result.output
    assert "Would update" in result.output
    assert note.read_text(encoding="utf-8") == "- [ ] one\n- [ ] two\n"


def test_watch_refuses_manual_mode(runner: CliRunner, tmp_path: Path) -> None:
    _invoke(runner, tmp_path, "options", "--manual-mode")
    result = _invoke(runner, tmp_path, "watch")
    assert result.exit_code != 0
    assert "Manual mode" in result.output


def test_options_are_persisted(runner: CliRunner, tmp_path: Path) -> None:
    result = _invoke(runner, tmp_path, "options", "--trigger", "focus", "--no-notices", "--ignore", "Templates/")
    assert result.exit_code == 0, result.output

    saved = json.loads((tmp_path / "settings.json").read_text(encoding="utf-8"))
    assert saved["trigger_mode"] == "focus"
    assert saved["show_notices"] is False
    assert saved["ignored_paths"] == ["Templates/"]
