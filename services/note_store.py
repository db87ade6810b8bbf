from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence

import yaml

from models.note import Note
from utils.document_splitter import split_frontmatter

LOGGER = logging.getLogger(__name__)

DEFAULT_SUFFIXES = (".md",)
_FRONTMATTER_RE = re.compile(
    r"\A---(?:\r\n|\r|\n)(?:(?P<block>.*?)(?:\r\n|\r|\n))?---(?:\r\n|\r|\n|\Z)",
    re.DOTALL,
)


class NoteStoreError(Exception):
    """Raised when a note cannot be read, parsed or written."""


class NoteStore:
    """Vault-backed metadata store and document text source.

    Notes are addressed by their POSIX path relative to the vault root.
    Unsaved editor text registered with :meth:`set_buffer` takes precedence
    over the file on disk.
    """

    def __init__(self, vault_dir: Path, suffixes: Sequence[str] = DEFAULT_SUFFIXES):
        self.vault_dir = vault_dir
        self._suffixes = tuple(suffix.lower() for suffix in suffixes)
        self._buffers: Dict[str, str] = {}

    def list_notes(self) -> List[str]:
        if not self.vault_dir.exists():
            raise NoteStoreError(f"Vault directory does not exist: {self.vault_dir}")
        notes = []
        for path in self.vault_dir.rglob("*"):
            relative = path.relative_to(self.vault_dir)
            if any(part.startswith(".") for part in relative.parts):
                continue
            if path.is_file() and path.suffix.lower() in self._suffixes:
                notes.append(relative.as_posix())
        return sorted(notes)

    def is_note(self, path: Path) -> bool:
        return path.suffix.lower() in self._suffixes

    def note_id(self, path: Path) -> str:
        try:
            return path.resolve().relative_to(self.vault_dir.resolve()).as_posix()
        except ValueError as exc:
            raise NoteStoreError(f"{path} is outside the vault {self.vault_dir}") from exc

    def resolve(self, note_path: str) -> Path:
        candidate = (self.vault_dir / note_path).resolve()
        if not candidate.is_relative_to(self.vault_dir.resolve()):
            raise NoteStoreError(f"{note_path} is outside the vault {self.vault_dir}")
        return candidate

    def set_buffer(self, note_path: str, text: str) -> None:
        self._buffers[note_path] = text

    def clear_buffer(self, note_path: str) -> None:
        self._buffers.pop(note_path, None)

    def current_text(self, note_path: str) -> str:
        if note_path in self._buffers:
            return self._buffers[note_path]
        path = self.resolve(note_path)
        try:
            with path.open(encoding="utf-8", newline="") as handle:
                return handle.read()
        except FileNotFoundError as exc:
            raise NoteStoreError(f"Note not found: {note_path}") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise NoteStoreError(f"Unable to read {note_path}: {exc}") from exc

    def read(self, note_path: str) -> Dict[str, Any]:
        frontmatter, _ = split_frontmatter(self.current_text(note_path))
        return _parse_frontmatter(frontmatter, note_path)

    def load_note(self, note_path: str) -> Note:
        text = self.current_text(note_path)
        frontmatter, body_lines = split_frontmatter(text)
        created_at, modified_at = self._timestamps(note_path)
        return Note(
            path=note_path,
            metadata=_parse_frontmatter(frontmatter, note_path),
            body_lines=body_lines,
            created_at=created_at,
            modified_at=modified_at,
        )

    def write(self, note_path: str, patch: Mapping[str, Any]) -> None:
        """Replace the given frontmatter keys in one write, leaving the rest untouched."""

        if not patch:
            return
        text = self.current_text(note_path)
        match = _FRONTMATTER_RE.match(text)
        if match:
            metadata = _load_yaml(match.group("block") or "", note_path)
            body = text[match.end() :]
        elif split_frontmatter(text)[0] is not None:
            raise NoteStoreError(f"Frontmatter block in {note_path} is not terminated")
        else:
            metadata = {}
            body = text
        metadata.update(patch)
        rendered = render_note(metadata, body)

        path = self.resolve(note_path)
        try:
            with path.open("w", encoding="utf-8", newline="") as handle:
                handle.write(rendered)
        except OSError as exc:
            raise NoteStoreError(f"Unable to write {note_path}: {exc}") from exc
        if note_path in self._buffers:
            self._buffers[note_path] = rendered
        LOGGER.debug("Wrote %d propert(ies) to %s", len(patch), note_path)

    def _timestamps(self, note_path: str) -> tuple[datetime | None, datetime | None]:
        try:
            stat = self.resolve(note_path).stat()
        except FileNotFoundError:
            return None, None
        # st_ctime is the inode change time on Linux, which our own writes bump
        birthtime = getattr(stat, "st_birthtime", None)
        created = datetime.fromtimestamp(birthtime) if birthtime is not None else None
        return created, datetime.fromtimestamp(stat.st_mtime)


def render_note(metadata: Mapping[str, Any], body: str) -> str:
    block = yaml.safe_dump(dict(metadata), sort_keys=False, allow_unicode=True, default_flow_style=False)
    return f"---\n{block}---\n{body}"


def _parse_frontmatter(lines: List[str] | None, note_path: str) -> Dict[str, Any]:
    if lines is None:
        return {}
    return _load_yaml("\n".join(lines), note_path)


def _load_yaml(block: str, note_path: str) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(block) if block.strip() else {}
    except yaml.YAMLError as exc:
        raise NoteStoreError(f"Invalid frontmatter in {note_path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise NoteStoreError(f"Frontmatter in {note_path} is not a mapping")
    return data
