"""
Pytest fixtures for Clueboard tests.
"""

import pytest

from ..board_format.model import Board, Category, Clue, DraftBoard, Team
from ..session import MemoryBackend, SessionManager, SessionStore


CATEGORY_NAMES = ["Rivers", "Mountains", "Capitals", "Deserts", "Islands"]


def make_game_text(title="Geo", short_category=None, short_rows=3):
    """
    Game file text with five categories of five clues.

    short_category (index) gets only short_rows rows.
    """
    lines = [f"Title: {title}", ""]
    for col, name in enumerate(CATEGORY_NAMES):
        lines.append(f"Category: {name}")
        rows = short_rows if col == short_category else 5
        for row in range(rows):
            lines.append(f"{(row + 1) * 100}|{name} clue {row + 1}|{name} answer {row + 1}")
        lines.append("")
    return "\n".join(lines) + "\n"


def make_board(title="Geo"):
    categories = tuple(
        Category(
            name=name,
            clues=tuple(
                Clue(
                    value=(row + 1) * 100,
                    question=f"{name} clue {row + 1}",
                    answer=f"{name} answer {row + 1}",
                )
                for row in range(5)
            ),
        )
        for name in CATEGORY_NAMES
    )
    return Board(title=title, categories=categories)


def replace_clue(board, col, row, question, answer):
    """board with one clue swapped out, keeping its ladder value."""
    categories = list(board.categories)
    clue = Clue(value=(row + 1) * 100, question=question, answer=answer)
    categories[col] = categories[col].with_clue(row, clue)
    return Board(title=board.title, categories=tuple(categories))


@pytest.fixture
def game_text() -> str:
    """A complete, playable game file."""
    return make_game_text()


@pytest.fixture
def board() -> Board:
    """The Board described by game_text."""
    return make_board()


@pytest.fixture
def partial_draft() -> DraftBoard:
    """Two categories, the second one half filled."""
    return DraftBoard(
        title="Work in progress",
        categories=(
            Category(name="Rivers", clues=(
                Clue(value=100, question="Longest river", answer="Nile"),
                Clue(value=200, question="", answer=""),
            )),
            Category(name="", clues=()),
        ),
    )


@pytest.fixture
def teams() -> list[Team]:
    return [Team(name="Red"), Team(name="Blue")]


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def store(backend: MemoryBackend) -> SessionStore:
    return SessionStore(backend)


@pytest.fixture
def manager(store: SessionStore) -> SessionManager:
    return SessionManager(store)
