"""
Session Store - Named durable slots for the board session.

The store:
- Holds five independent slots (board text, title, used cells, teams,
  form draft)
- Writes whole values only, no merging
- Stores each slot as its own JSON document (file or memory backend)
- Has no cross-slot transaction; a stale used-cells slot degrades to
  "no cells used"

Persistence failures never propagate: a slot that cannot be read or
decoded is treated as absent, and a failed write is logged and dropped.
"""

from __future__ import annotations
from enum import Enum
from pathlib import Path
from typing import Any, Protocol
import json
import logging
import os
import tempfile

from ..board_format.model import CellId, FormDraftSnapshot, Team


logger = logging.getLogger(__name__)


class Slot(Enum):
    """Durable slots. Values are the storage keys."""
    BOARD_TEXT = "jeopardyBoard"
    TITLE = "jeopardyTitle"
    USED_CELLS = "jeopardyUsedCells"
    TEAMS = "jeopardyTeams"
    FORM_DRAFT = "jeopardyFormDraft"


class PersistenceUnavailable(Exception):
    """Raised by backends when a slot cannot be read or written."""


class StorageBackend(Protocol):
    """Raw text storage keyed by slot name."""

    def read(self, key: str) -> str | None: ...

    def write(self, key: str, data: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryBackend:
    """In-process backend, used by tests and ephemeral sessions."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self.data.get(key)

    def write(self, key: str, data: str) -> None:
        self.data[key] = data

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class FileBackend:
    """
    One JSON file per slot under a directory.

    The directory is created on first write. Writes go to a temporary
    file that replaces the slot file, so each slot is updated atomically.
    """

    def __init__(self, directory: str | Path | None = None):
        if directory is None:
            directory = Path.home() / ".clueboard" / "session"
        self.directory = Path(directory).expanduser()

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def read(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise PersistenceUnavailable(f"Cannot read {path}: {exc}") from exc

    def write(self, key: str, data: str) -> None:
        path = self._path(key)
        tmp_name = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(data)
            os.replace(tmp_name, path)
        except OSError as exc:
            if tmp_name is not None:
                try:
                    Path(tmp_name).unlink(missing_ok=True)
                except OSError:
                    logger.warning("Could not remove temp file %s", tmp_name)
            raise PersistenceUnavailable(f"Cannot write {path}: {exc}") from exc

    def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise PersistenceUnavailable(f"Cannot delete {path}: {exc}") from exc


class SessionStore:
    """
    Slot-level access to durable session state.

    Usage:
        store = SessionStore(FileBackend("~/.clueboard/session"))

        store.save_board_text(text)
        text = store.board_text()

        store.clear_all()  # reset
    """

    def __init__(self, backend: StorageBackend | None = None):
        self.backend = backend if backend is not None else MemoryBackend()

    # =========================================================================
    # Generic slot operations
    # =========================================================================

    def get(self, slot: Slot, default: Any = None) -> Any:
        """
        Decoded value of a slot, or default when absent or unreadable.
        """
        try:
            raw = self.backend.read(slot.value)
        except PersistenceUnavailable as exc:
            logger.warning("Slot %s unavailable, treating as absent: %s", slot.value, exc)
            return default
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("Slot %s holds corrupt data, treating as absent: %s", slot.value, exc)
            return default

    def set(self, slot: Slot, value: Any) -> bool:
        """Overwrite a slot. Returns False if the write was lost."""
        try:
            self.backend.write(slot.value, json.dumps(value))
        except PersistenceUnavailable as exc:
            logger.warning("Could not persist slot %s: %s", slot.value, exc)
            return False
        return True

    def remove(self, slot: Slot) -> bool:
        """Delete one slot. Returns False if the delete was lost."""
        try:
            self.backend.delete(slot.value)
        except PersistenceUnavailable as exc:
            logger.warning("Could not remove slot %s: %s", slot.value, exc)
            return False
        return True

    def clear_all(self):
        """Remove every slot together. Only the reset action calls this."""
        for slot in Slot:
            self.remove(slot)

    # =========================================================================
    # Typed accessors
    # =========================================================================

    def board_text(self) -> str | None:
        value = self.get(Slot.BOARD_TEXT)
        return value if isinstance(value, str) else None

    def save_board_text(self, text: str) -> bool:
        return self.set(Slot.BOARD_TEXT, text)

    def title(self) -> str | None:
        value = self.get(Slot.TITLE)
        return value if isinstance(value, str) else None

    def save_title(self, title: str) -> bool:
        return self.set(Slot.TITLE, title)

    def used_cells(self) -> frozenset[CellId]:
        """Used cells; unparseable entries are skipped."""
        value = self.get(Slot.USED_CELLS, [])
        if not isinstance(value, list):
            return frozenset()
        cells = (CellId.parse(item) for item in value)
        return frozenset(cell for cell in cells if cell is not None)

    def save_used_cells(self, cells: frozenset[CellId] | set[CellId]) -> bool:
        return self.set(Slot.USED_CELLS, [cell.encode() for cell in sorted(cells)])

    def teams(self) -> tuple[Team, ...]:
        value = self.get(Slot.TEAMS, [])
        if not isinstance(value, list):
            return ()
        return tuple(Team.from_dict(item) for item in value if isinstance(item, dict))

    def save_teams(self, teams: tuple[Team, ...] | list[Team]) -> bool:
        return self.set(Slot.TEAMS, [team.to_dict() for team in teams])

    def form_draft(self) -> FormDraftSnapshot | None:
        value = self.get(Slot.FORM_DRAFT)
        if not isinstance(value, dict):
            return None
        try:
            return FormDraftSnapshot.from_dict(value)
        except (AttributeError, TypeError) as exc:
            logger.warning("Form draft slot has an unexpected shape, treating as absent: %s", exc)
            return None

    def save_form_draft(self, snapshot: FormDraftSnapshot) -> bool:
        return self.set(Slot.FORM_DRAFT, snapshot.to_dict())

    def remove_form_draft(self) -> bool:
        return self.remove(Slot.FORM_DRAFT)
