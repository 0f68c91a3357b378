"""
Game State - Play-mode state for an active board.

Design principles:
- Immutable-friendly: every operation returns a new GameState
- The board never changes during play; only teams, used cells and
  the current selection do
- Scores move only by the value of the selected clue (or an explicit
  adjustment from the scoreboard)
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Iterable

from .board_format.assembler import ClueboardError
from .board_format.model import (
    Board,
    CellId,
    Clue,
    Team,
    CATEGORY_COUNT,
    CLUES_PER_CATEGORY,
)


class NoCellSelectedError(ClueboardError):
    """Raised when awarding points with no clue open."""


class UnknownTeamError(ClueboardError, IndexError):
    """Raised for a team index with no team behind it."""


@dataclass(frozen=True)
class GameState:
    """
    The active game.

    selected is the cell whose clue is open; last_value is the value
    used for scoreboard adjustments (the last clue opened).
    """
    board: Board
    teams: tuple[Team, ...] = ()
    used_cells: frozenset[CellId] = field(default_factory=frozenset)
    selected: CellId | None = None
    last_value: int = 0

    @property
    def title(self) -> str:
        return self.board.title

    @property
    def is_finished(self) -> bool:
        return len(self.used_cells) >= CATEGORY_COUNT * CLUES_PER_CATEGORY

    def is_used(self, row: int, col: int) -> bool:
        return CellId(row, col) in self.used_cells

    def remaining_cells(self) -> list[CellId]:
        """Unused cells in row-major order."""
        return [
            CellId(row, col)
            for row in range(CLUES_PER_CATEGORY)
            for col in range(CATEGORY_COUNT)
            if CellId(row, col) not in self.used_cells
        ]

    def selected_clue(self) -> Clue | None:
        if self.selected is None:
            return None
        return self.board.clue_at(self.selected.row, self.selected.col)

    def select_cell(self, row: int, col: int) -> GameState:
        """Open a clue. Used cells can be reopened."""
        clue = self.board.clue_at(row, col)
        return replace(self, selected=CellId(row, col), last_value=clue.value)

    def cancel(self) -> GameState:
        """Close the open clue without marking it used."""
        return replace(self, selected=None)

    def award(self, team_index: int, correct: bool) -> GameState:
        """
        Score the open clue for a team and mark it used.

        A wrong response subtracts the clue value.
        """
        if self.selected is None:
            raise NoCellSelectedError("No clue is open")
        points = self.last_value if correct else -self.last_value
        state = self.adjust_score(team_index, points)
        return replace(
            state,
            used_cells=state.used_cells | {self.selected},
            selected=None,
        )

    def adjust_score(self, team_index: int, points: int) -> GameState:
        """Add (or subtract) points for a team."""
        team = self._team(team_index)
        return self._with_team(team_index, team.with_points(points))

    def rename_team(self, team_index: int, name: str) -> GameState:
        team = self._team(team_index)
        return self._with_team(team_index, team.with_name(name))

    def _team(self, team_index: int) -> Team:
        if not 0 <= team_index < len(self.teams):
            raise UnknownTeamError(f"No team at index {team_index}")
        return self.teams[team_index]

    def _with_team(self, team_index: int, team: Team) -> GameState:
        teams = list(self.teams)
        teams[team_index] = team
        return replace(self, teams=tuple(teams))


def start_game(
    board: Board,
    teams: Iterable[Team] = (),
    used_cells: Iterable[CellId] = (),
) -> GameState:
    """
    Create the play state for a board.

    An empty team list gets one default team.
    """
    team_list = tuple(teams)
    if not team_list:
        team_list = (Team(name="Team 1"),)
    return GameState(board=board, teams=team_list, used_cells=frozenset(used_cells))
