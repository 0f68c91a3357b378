"""
Session Manager - Lifecycle of the board session over the durable store.

LIFECYCLE:
1. Startup: reconcile the slots into what the user sees
   - board text present -> it is the active game (used cells, teams restored)
   - title from its slot, else parsed from the board text (and back-filled)
   - no board but a saved form draft -> offer to resume editing
2. Play path: validate uploaded text, store it, start with chosen teams
3. Authoring path: commit a complete form, store it, start
4. During play: every scoring action persists used cells and teams
5. Reset: clear every slot together; caller starts from an empty board

The store is the only holder of durable state. GameState values are
replaced, never mutated.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable
import logging

from ..authoring import FormImport, board_from_form, default_teams, import_into_form
from ..board_format.assembler import BoardAssemblyError, ClueboardError, assemble_strict
from ..board_format.grammar import extract, parse_title
from ..board_format.model import Board, DraftBoard, FormDraftSnapshot, Team
from ..board_format.serializer import serialize_game
from ..board_format.validation import PlayVerdict, validate_for_play
from ..game import GameState, start_game
from .store import SessionStore
from .uploads import UploadChannel


logger = logging.getLogger(__name__)


class SessionPhase(Enum):
    """What the session is showing."""
    EMPTY = "empty"  # Upload/create controls, no active board
    PLAYING = "playing"  # Active board on screen


class NoActiveGameError(ClueboardError):
    """Raised when a play operation needs a board and none is loaded."""


@dataclass(frozen=True)
class StartupView:
    """
    Result of startup reconciliation.

    resume_draft_prompt is a non-blocking hint: the draft is not loaded.
    """
    phase: SessionPhase
    title: str = ""
    game: GameState | None = None
    resume_draft_prompt: bool = False


class SessionManager:
    """
    Coordinates the store, the play state and the authoring form.

    Usage:
        manager = SessionManager(SessionStore(FileBackend()))
        view = manager.restore()

        verdict = manager.load_game_file(text)
        if verdict.ok:
            game = manager.start_loaded_game([Team("Red"), Team("Blue")])
    """

    def __init__(self, store: SessionStore | None = None):
        self.store = store if store is not None else SessionStore()
        self.game: GameState | None = None
        self.draft_uploads = UploadChannel("draft-upload")
        self.game_uploads = UploadChannel("game-upload")

    # =========================================================================
    # Startup
    # =========================================================================

    def reconcile(self) -> StartupView:
        """Decide what the stored slots mean, without changing play state."""
        text = self.store.board_text()

        board = None
        if text is not None:
            board = self._board_from_text(text)

        title = self.store.title() or ""
        if not title and text:
            title = parse_title(text)
            if title:
                self.store.save_title(title)

        if board is None:
            has_draft = self.store.form_draft() is not None
            logger.debug("No active board at startup (form draft saved: %s)", has_draft)
            return StartupView(
                phase=SessionPhase.EMPTY,
                title=title,
                resume_draft_prompt=has_draft,
            )

        game = GameState(
            board=board,
            teams=self.store.teams(),
            used_cells=self.store.used_cells(),
        )
        return StartupView(phase=SessionPhase.PLAYING, title=title, game=game)

    def restore(self) -> StartupView:
        """Reconcile and adopt the restored game as the active one."""
        view = self.reconcile()
        self.game = view.game
        return view

    def _board_from_text(self, text: str) -> Board | None:
        try:
            return assemble_strict(extract(text))
        except BoardAssemblyError as exc:
            logger.warning("Stored board text does not assemble, ignoring it: %s", exc)
            return None

    # =========================================================================
    # Play path
    # =========================================================================

    def load_game_file(self, text: str) -> PlayVerdict:
        """
        Accept a game file for play.

        On success the board text and title are stored; the game starts
        once teams are chosen. Nothing is written on rejection.
        """
        verdict = validate_for_play(text)
        if not verdict.ok:
            logger.info("Game file rejected: %s", verdict.reason.value)
            return verdict

        self.store.save_title(parse_title(text))
        self.store.save_board_text(text)
        self.game = None
        return verdict

    def start_loaded_game(self, teams: Iterable[Team]) -> GameState:
        """Start play on the stored board with fresh scores and no used cells."""
        team_list = tuple(Team(name=team.name) for team in teams)
        if not team_list:
            raise ValueError("Please add at least one team before continuing.")

        text = self.store.board_text()
        board = self._board_from_text(text) if text is not None else None
        if board is None:
            raise NoActiveGameError("No game file has been loaded")

        return self.record(start_game(board, team_list))

    def create_board_from_form(self, draft: DraftBoard, teams: Iterable[Team] = ()) -> GameState:
        """
        Commit the authoring form and start play.

        Raises FormIncompleteError when required fields are empty.
        """
        board = board_from_form(draft)
        self.store.save_title(board.title)
        self.store.save_board_text(serialize_game(board))
        self.discard_form_draft()
        return self.record(start_game(board, teams))

    def record(self, game: GameState) -> GameState:
        """Adopt a new play state and persist its teams and used cells."""
        self.game = game
        self.store.save_used_cells(game.used_cells)
        self.store.save_teams(game.teams)
        return game

    def require_game(self) -> GameState:
        if self.game is None:
            raise NoActiveGameError("No game is in progress")
        return self.game

    def select_cell(self, row: int, col: int) -> GameState:
        self.game = self.require_game().select_cell(row, col)
        return self.game

    def cancel_clue(self) -> GameState:
        self.game = self.require_game().cancel()
        return self.game

    def award(self, team_index: int, correct: bool) -> GameState:
        return self.record(self.require_game().award(team_index, correct))

    def adjust_score(self, team_index: int, points: int) -> GameState:
        return self.record(self.require_game().adjust_score(team_index, points))

    def rename_team(self, team_index: int, name: str) -> GameState:
        return self.record(self.require_game().rename_team(team_index, name))

    # =========================================================================
    # Authoring form
    # =========================================================================

    def save_form_draft(
        self,
        draft: DraftBoard,
        teams: Iterable[Team] = (),
        now: datetime | None = None,
    ) -> FormDraftSnapshot:
        snapshot = FormDraftSnapshot(
            draft=draft,
            teams=tuple(teams),
            last_modified=now or datetime.now(timezone.utc),
        )
        self.store.save_form_draft(snapshot)
        return snapshot

    def load_form_draft(self) -> FormDraftSnapshot | None:
        return self.store.form_draft()

    def discard_form_draft(self):
        self.store.remove_form_draft()

    def import_upload(self, text: str) -> FormImport:
        """
        Open an uploaded file (draft or game) in the form.

        The import replaces the saved form draft.
        """
        imported = import_into_form(text)
        self.save_form_draft(imported.draft, imported.teams or default_teams())
        return imported

    # =========================================================================
    # Upload reads
    # =========================================================================

    def receive_draft_upload(self, ticket: int, text: str) -> FormImport | None:
        """Apply a finished draft-upload read unless a newer one superseded it."""
        if not self.draft_uploads.deliver(ticket, text):
            return None
        return self.import_upload(text)

    def receive_game_upload(self, ticket: int, text: str) -> PlayVerdict | None:
        """Apply a finished game-upload read unless a newer one superseded it."""
        if not self.game_uploads.deliver(ticket, text):
            return None
        return self.load_game_file(text)

    # =========================================================================
    # Reset
    # =========================================================================

    def reset(self):
        """Clear every slot. The caller reinitializes an empty board."""
        self.store.clear_all()
        self.game = None
