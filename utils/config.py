from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from dotenv import load_dotenv

from services.reentrancy_guard import DEFAULT_QUIESCENCE_SECONDS


@dataclass(slots=True)
class AppConfig:
    vault_dir: Path
    settings_file: Path
    log_dir: Path
    log_level: str
    quiescence_seconds: float
    note_suffixes: Tuple[str, ...]
    schedule_interval: int


def _resolve_path(value: str | None, fallback: str, base: Path | None = None) -> Path:
    candidate = Path(value or fallback).expanduser()
    if not candidate.is_absolute():
        candidate = (base or Path.cwd()) / candidate
    return candidate


def _parse_suffixes(value: str | None) -> Tuple[str, ...]:
    suffixes = []
    for item in (value or ".md").split(","):
        item = item.strip()
        if not item:
            continue
        suffixes.append(item if item.startswith(".") else f".{item}")
    return tuple(suffixes) or (".md",)


def load_config(env_file: str | os.PathLike[str] | None = None) -> AppConfig:
    """Load configuration values from a .env file and environment variables."""

    if env_file:
        load_dotenv(env_file, override=False)
    else:
        load_dotenv(override=False)

    vault_dir = _resolve_path(os.getenv("VAULT_DIR"), "vault")
    settings_file = _resolve_path(os.getenv("SETTINGS_FILE"), ".autoprops/settings.json", base=vault_dir)
    log_dir = _resolve_path(os.getenv("LOG_DIR"), "logs")

    quiescence_seconds = float(os.getenv("QUIESCENCE_SECONDS", str(DEFAULT_QUIESCENCE_SECONDS)))
    if quiescence_seconds < 0:
        raise ValueError("QUIESCENCE_SECONDS must not be negative")

    return AppConfig(
        vault_dir=vault_dir,
        settings_file=settings_file,
        log_dir=log_dir,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        quiescence_seconds=quiescence_seconds,
        note_suffixes=_parse_suffixes(os.getenv("NOTE_SUFFIXES")),
        schedule_interval=int(os.getenv("SCHEDULE_INTERVAL", "15")),
    )
