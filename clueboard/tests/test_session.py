"""
Tests for the session store, upload channels and session manager.

Tests:
- Slot storage on memory and file backends
- Corrupt and unavailable slots degrade to absent
- Startup reconciliation (active board, title back-fill, resume prompt)
- Play and authoring paths persist the right slots
- Reset clears everything
- Stale upload reads are ignored
"""

import json
import logging
from datetime import datetime, timezone

import pytest

from ..authoring import FormIncompleteError, blank_form
from ..board_format.model import CellId, Clue, FormDraftSnapshot, Team
from ..board_format.validation import RejectionReason, UploadRoute
from ..session import (
    FileBackend,
    MemoryBackend,
    NoActiveGameError,
    PersistenceUnavailable,
    SessionManager,
    SessionPhase,
    SessionStore,
    Slot,
    UploadChannel,
)
from .conftest import make_game_text


class BrokenBackend:
    """Backend whose every operation fails."""

    def read(self, key):
        raise PersistenceUnavailable(f"read {key}")

    def write(self, key, data):
        raise PersistenceUnavailable(f"write {key}")

    def delete(self, key):
        raise PersistenceUnavailable(f"delete {key}")


class TestSessionStore:
    """Tests for slot-level storage."""

    def test_slot_keys(self):
        assert [slot.value for slot in Slot] == [
            "jeopardyBoard",
            "jeopardyTitle",
            "jeopardyUsedCells",
            "jeopardyTeams",
            "jeopardyFormDraft",
        ]

    def test_empty_store(self, store):
        assert store.board_text() is None
        assert store.title() is None
        assert store.used_cells() == frozenset()
        assert store.teams() == ()
        assert store.form_draft() is None

    def test_used_cells_encoding(self, store, backend):
        store.save_used_cells({CellId(2, 1), CellId(0, 3)})
        assert json.loads(backend.data["jeopardyUsedCells"]) == ["0,3", "2,1"]
        assert store.used_cells() == frozenset({CellId(0, 3), CellId(2, 1)})

    def test_bad_used_cells_skipped(self):
        backend = MemoryBackend({"jeopardyUsedCells": json.dumps(["1,1", "9,9", "x", 4])})
        assert SessionStore(backend).used_cells() == frozenset({CellId(1, 1)})

    def test_teams(self, store, teams):
        store.save_teams([teams[0].with_points(300), teams[1]])
        assert store.teams() == (Team("Red", 300), Team("Blue", 0))

    def test_form_draft(self, store, partial_draft, teams):
        moment = datetime(2026, 2, 3, 4, 5, 6, tzinfo=timezone.utc)
        store.save_form_draft(FormDraftSnapshot(partial_draft, tuple(teams), moment))
        snapshot = store.form_draft()
        assert snapshot.draft == partial_draft
        assert snapshot.teams == tuple(teams)
        assert snapshot.last_modified == moment

    def test_corrupt_slot_is_absent(self, caplog):
        backend = MemoryBackend({"jeopardyBoard": "{not json", "jeopardyFormDraft": "[1, 2]"})
        store = SessionStore(backend)
        with caplog.at_level(logging.WARNING):
            assert store.board_text() is None
        assert "corrupt" in caplog.text
        assert store.form_draft() is None

    def test_broken_backend_never_raises(self, caplog):
        store = SessionStore(BrokenBackend())
        with caplog.at_level(logging.WARNING):
            assert store.save_board_text("x") is False
            assert store.board_text() is None
            assert store.remove_form_draft() is False
            store.clear_all()
        assert "Could not persist slot jeopardyBoard" in caplog.text

    def test_clear_all(self, store, backend, teams):
        store.save_board_text("text")
        store.save_title("Geo")
        store.save_teams(teams)
        store.clear_all()
        assert backend.data == {}


class TestFileBackend:
    """Tests for the file backend."""

    def test_round_trip(self, tmp_path):
        store = SessionStore(FileBackend(tmp_path / "session"))
        assert store.save_title("Geo")
        assert (tmp_path / "session" / "jeopardyTitle.json").read_text() == '"Geo"'
        assert SessionStore(FileBackend(tmp_path / "session")).title() == "Geo"

    def test_missing_directory_reads_absent(self, tmp_path):
        store = SessionStore(FileBackend(tmp_path / "nowhere"))
        assert store.board_text() is None
        assert store.remove_form_draft()

    def test_unwritable_location(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        store = SessionStore(FileBackend(blocker))
        assert store.save_board_text("text") is False
        assert store.board_text() is None

    def test_no_temp_files_left(self, tmp_path):
        store = SessionStore(FileBackend(tmp_path))
        store.save_board_text("a")
        store.save_board_text("b")
        assert sorted(p.name for p in tmp_path.iterdir()) == ["jeopardyBoard.json"]

    def test_failed_replace_removes_temp_file(self, tmp_path, monkeypatch, caplog):
        def refuse(src, dst):
            raise PermissionError("read-only")

        monkeypatch.setattr("os.replace", refuse)
        store = SessionStore(FileBackend(tmp_path))
        with caplog.at_level(logging.WARNING):
            assert store.save_board_text("a") is False
        assert list(tmp_path.iterdir()) == []
        assert "read-only" in caplog.text


class TestUploadChannel:
    """Tests for upload read sequencing."""

    def test_latest_read_applies(self):
        channel = UploadChannel("test")
        ticket = channel.begin()
        assert channel.pending
        assert channel.deliver(ticket, "text")
        assert not channel.pending

    def test_superseded_read_ignored(self):
        channel = UploadChannel("test")
        first = channel.begin()
        second = channel.begin()
        assert channel.deliver(second, "newer")
        assert not channel.deliver(first, "older")

    def test_older_read_finishing_first_ignored(self):
        channel = UploadChannel("test")
        first = channel.begin()
        second = channel.begin()
        assert not channel.deliver(first, "older")
        assert channel.deliver(second, "newer")

    def test_delivered_once(self):
        channel = UploadChannel("test")
        ticket = channel.begin()
        assert channel.deliver(ticket, "text")
        assert not channel.deliver(ticket, "text")


class TestStartup:
    """Tests for startup reconciliation."""

    def test_empty_session(self, manager):
        view = manager.restore()
        assert view.phase == SessionPhase.EMPTY
        assert view.game is None
        assert not view.resume_draft_prompt

    def test_restores_game(self, manager, store, game_text, board, teams):
        store.save_board_text(game_text)
        store.save_title("Geo")
        store.save_teams(teams)
        store.save_used_cells({CellId(1, 1)})
        view = manager.restore()
        assert view.phase == SessionPhase.PLAYING
        assert view.title == "Geo"
        assert view.game.board == board
        assert view.game.teams == tuple(teams)
        assert view.game.is_used(1, 1)
        assert manager.game == view.game

    def test_title_back_filled(self, manager, store, game_text):
        store.save_board_text(game_text)
        view = manager.restore()
        assert view.title == "Geo"
        assert store.title() == "Geo"

    def test_resume_prompt(self, manager, partial_draft):
        manager.save_form_draft(partial_draft)
        view = manager.restore()
        assert view.phase == SessionPhase.EMPTY
        assert view.resume_draft_prompt

    def test_board_wins_over_draft(self, manager, store, game_text, partial_draft):
        store.save_board_text(game_text)
        manager.save_form_draft(partial_draft)
        view = manager.restore()
        assert view.phase == SessionPhase.PLAYING
        assert not view.resume_draft_prompt

    def test_unplayable_stored_text(self, manager, store):
        store.save_board_text(make_game_text(short_category=1))
        view = manager.restore()
        assert view.phase == SessionPhase.EMPTY
        assert view.title == "Geo"

    def test_reconcile_does_not_adopt(self, manager, store, game_text):
        store.save_board_text(game_text)
        manager.reconcile()
        assert manager.game is None


class TestPlayPath:
    """Tests for loading and playing a game file."""

    def test_load_and_start(self, manager, store, game_text, teams):
        assert manager.load_game_file(game_text).ok
        assert store.board_text() == game_text
        assert store.title() == "Geo"

        game = manager.start_loaded_game(teams)
        assert game.teams == tuple(teams)
        assert store.teams() == tuple(teams)
        assert store.used_cells() == frozenset()

    def test_rejection_writes_nothing(self, manager, backend):
        verdict = manager.load_game_file("[JEOPARDY DRAFT]\nTitle: X\n")
        assert verdict.reason == RejectionReason.DRAFT_MARKER_PRESENT
        assert backend.data == {}

    def test_start_resets_scores(self, manager, game_text):
        manager.load_game_file(game_text)
        game = manager.start_loaded_game([Team("Red", 900)])
        assert game.teams[0].score == 0

    def test_start_needs_teams(self, manager, game_text):
        manager.load_game_file(game_text)
        with pytest.raises(ValueError, match="at least one team"):
            manager.start_loaded_game([])

    def test_start_without_board(self, manager, teams):
        with pytest.raises(NoActiveGameError):
            manager.start_loaded_game(teams)

    def test_scoring_persists(self, manager, store, game_text, teams):
        manager.load_game_file(game_text)
        manager.start_loaded_game(teams)
        manager.select_cell(3, 2)
        manager.award(0, correct=True)
        assert store.used_cells() == frozenset({CellId(3, 2)})
        assert store.teams()[0].score == 400

        restored = SessionManager(store).restore()
        assert restored.game.teams[0].score == 400
        assert restored.game.is_used(3, 2)

    def test_selection_not_persisted(self, manager, store, game_text, teams):
        manager.load_game_file(game_text)
        manager.start_loaded_game(teams)
        manager.select_cell(0, 0)
        manager.cancel_clue()
        assert store.used_cells() == frozenset()

    def test_scoreboard_edits_persist(self, manager, store, game_text, teams):
        manager.load_game_file(game_text)
        manager.start_loaded_game(teams)
        manager.adjust_score(1, 50)
        manager.rename_team(1, "Navy")
        assert store.teams()[1] == Team("Navy", 50)

    def test_play_without_game(self, manager):
        with pytest.raises(NoActiveGameError):
            manager.select_cell(0, 0)

    def test_game_upload_stale_read(self, manager, game_text):
        first = manager.game_uploads.begin()
        second = manager.game_uploads.begin()
        assert manager.receive_game_upload(second, game_text).ok
        assert manager.receive_game_upload(first, "junk") is None


class TestAuthoringPath:
    """Tests for the authoring form within a session."""

    def test_create_board(self, manager, store, board, partial_draft):
        manager.save_form_draft(partial_draft)
        game = manager.create_board_from_form(board.as_draft(), [Team("Solo")])
        assert game.board == board
        assert store.title() == "Geo"
        assert store.form_draft() is None
        assert SessionManager(store).restore().game.board == board

    @pytest.mark.parametrize("col, row, question, answer", [
        (0, 0, "Which river?", "Nile | Amazon"),
        (4, 4, "<img>volcano", "<img>etna"),
        (2, 1, "  padded  ", "  answer  "),
    ])
    def test_created_board_restores(self, manager, store, board, col, row, question, answer):
        draft = board.as_draft()
        clue = Clue(value=0, question=question, answer=answer)
        draft = draft.with_category(col, draft.categories[col].with_clue(row, clue))
        game = manager.create_board_from_form(draft)
        restored = SessionManager(store).restore()
        assert restored.game.board == game.board
        assert restored.game.board.clue_at(row, col).question == question.strip()

    def test_multi_line_title_refused(self, manager, store, board):
        with pytest.raises(FormIncompleteError) as exc_info:
            manager.create_board_from_form(board.as_draft().with_title("Geo\nCategory: Oops"))
        assert exc_info.value.problems[0].kind == "line_break"
        assert store.board_text() is None
        assert store.title() is None

    def test_create_incomplete(self, manager, store, partial_draft):
        manager.save_form_draft(partial_draft)
        with pytest.raises(FormIncompleteError):
            manager.create_board_from_form(partial_draft)
        assert store.board_text() is None
        assert store.form_draft() is not None

    def test_import_replaces_draft(self, manager):
        manager.save_form_draft(blank_form())
        imported = manager.import_upload("[JEOPARDY DRAFT]\nTitle: X\nTeams: A, B\n\nCategory: C1\n100|q|a\n")
        assert imported.route == UploadRoute.EDIT_DRAFT
        snapshot = manager.load_form_draft()
        assert snapshot.title == "X"
        assert [t.name for t in snapshot.teams] == ["A", "B"]

    def test_draft_upload_stale_read(self, manager, game_text):
        first = manager.draft_uploads.begin()
        second = manager.draft_uploads.begin()
        assert manager.receive_draft_upload(first, "Title: Old\n") is None
        imported = manager.receive_draft_upload(second, game_text)
        assert imported.route == UploadRoute.EDIT_GAME
        assert manager.load_form_draft().title == "Geo"

    def test_discard(self, manager, partial_draft):
        manager.save_form_draft(partial_draft)
        manager.discard_form_draft()
        assert manager.load_form_draft() is None


class TestReset:
    """Tests for resetting the session."""

    def test_reset_clears_everything(self, manager, backend, game_text, teams, partial_draft):
        manager.load_game_file(game_text)
        manager.start_loaded_game(teams)
        manager.save_form_draft(partial_draft)
        manager.reset()
        assert backend.data == {}
        assert manager.game is None
        assert manager.restore().phase == SessionPhase.EMPTY
