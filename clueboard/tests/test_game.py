"""
Tests for play-mode state.
"""

import pytest

from ..board_format.model import CellId, CellOutOfRangeError, Team
from ..game import NoCellSelectedError, UnknownTeamError, start_game


class TestStartGame:
    """Tests for starting play."""

    def test_default_team(self, board):
        state = start_game(board)
        assert state.teams == (Team(name="Team 1"),)
        assert state.used_cells == frozenset()
        assert state.selected is None

    def test_restores_used_cells(self, board, teams):
        state = start_game(board, teams, [CellId(0, 0), CellId(4, 4)])
        assert state.is_used(0, 0)
        assert state.is_used(4, 4)
        assert len(state.remaining_cells()) == 23


class TestPlay:
    """Tests for selecting and scoring clues."""

    def test_select_opens_clue(self, board, teams):
        state = start_game(board, teams).select_cell(2, 1)
        assert state.selected == CellId(2, 1)
        assert state.last_value == 300
        assert state.selected_clue().question == "Mountains clue 3"

    def test_correct_award(self, board, teams):
        state = start_game(board, teams).select_cell(0, 0).award(1, correct=True)
        assert state.teams[1].score == 100
        assert state.teams[0].score == 0
        assert state.is_used(0, 0)
        assert state.selected is None

    def test_wrong_award_subtracts(self, board, teams):
        state = start_game(board, teams).select_cell(4, 0).award(0, correct=False)
        assert state.teams[0].score == -500
        assert state.is_used(4, 0)

    def test_cancel_leaves_cell_unused(self, board, teams):
        state = start_game(board, teams).select_cell(1, 1).cancel()
        assert state.selected is None
        assert not state.is_used(1, 1)

    def test_award_without_selection(self, board, teams):
        with pytest.raises(NoCellSelectedError):
            start_game(board, teams).award(0, correct=True)

    def test_out_of_range_cell(self, board, teams):
        with pytest.raises(CellOutOfRangeError):
            start_game(board, teams).select_cell(5, 0)

    def test_unknown_team(self, board, teams):
        state = start_game(board, teams).select_cell(0, 0)
        with pytest.raises(UnknownTeamError, match="No team at index 7"):
            state.award(7, correct=True)

    def test_team_and_cell_errors_are_distinct(self, board, teams):
        state = start_game(board, teams)
        assert not issubclass(UnknownTeamError, CellOutOfRangeError)
        with pytest.raises(UnknownTeamError):
            state.rename_team(-1, "Ghost")
        with pytest.raises(CellOutOfRangeError):
            state.select_cell(0, 5)

    def test_states_are_not_mutated(self, board, teams):
        before = start_game(board, teams)
        before.select_cell(0, 0).award(0, correct=True)
        assert before.teams[0].score == 0
        assert before.used_cells == frozenset()

    def test_finished_after_every_cell(self, board, teams):
        state = start_game(board, teams)
        for cell in state.remaining_cells():
            state = state.select_cell(cell.row, cell.col).award(0, correct=True)
        assert state.is_finished
        assert state.teams[0].score == 5 * (100 + 200 + 300 + 400 + 500)


class TestScoreboard:
    """Tests for manual scoreboard edits."""

    def test_adjust_score(self, board, teams):
        state = start_game(board, teams).adjust_score(0, -250)
        assert state.teams[0].score == -250

    def test_rename_keeps_score(self, board, teams):
        state = start_game(board, teams).adjust_score(1, 40).rename_team(1, "Navy")
        assert state.teams[1] == Team(name="Navy", score=40)
