"""
Authoring - The board creation form, independent of any UI.

The form is a 5x5 DraftBoard plus a team list. This module:
1. Creates blank forms
2. Reports which required fields are still empty
3. Commits a complete form into a playable Board
4. Imports uploaded text (game or draft) into the form
5. Exports the form as a game file or a draft file
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from .board_format.assembler import ClueboardError, assemble, pad_for_form
from .board_format.grammar import extract
from .board_format.model import (
    Board,
    Category,
    Clue,
    DraftBoard,
    Team,
    CATEGORY_COUNT,
    CLUES_PER_CATEGORY,
    FIELD_SEPARATOR,
    has_line_break,
    ladder_value,
)
from .board_format.serializer import (
    export_filename,
    serialize_draft,
    serialize_game,
)
from .board_format.validation import UploadRoute, route_upload


@dataclass(frozen=True)
class FormProblem:
    """
    A required field that is empty or cannot be written to a game file.

    field is "title", "name", "question" or "answer"; category and clue
    are 0-based positions where they apply. kind is "missing",
    "line_break" or "separator".
    """
    field: str
    category: int | None = None
    clue: int | None = None
    kind: str = "missing"

    def _where(self) -> str:
        if self.category is None:
            return "The game title"
        if self.clue is None:
            return f"The name of category {self.category + 1}"
        return f"The {self.field} of category {self.category + 1}, clue {self.clue + 1}"

    def describe(self) -> str:
        if self.kind == "line_break":
            return f"{self._where()} must fit on one line."
        if self.kind == "separator":
            return f"{self._where()} cannot contain '{FIELD_SEPARATOR}'."
        if self.category is None:
            return "Please enter a game title."
        if self.clue is None:
            return f"Category {self.category + 1} needs a name."
        return f"Category {self.category + 1}, clue {self.clue + 1} needs a {self.field}."


def _field_problem(value: str, field: str, category=None, clue=None):
    text = value.strip()
    if not text:
        kind = "missing"
    elif has_line_break(text):
        kind = "line_break"
    elif field == "question" and FIELD_SEPARATOR in text:
        kind = "separator"
    else:
        return None
    return FormProblem(field=field, category=category, clue=clue, kind=kind)


class FormIncompleteError(ClueboardError):
    """Raised when committing a form that still has empty required fields."""

    def __init__(self, problems: list[FormProblem]):
        self.problems = problems
        super().__init__("Please fill out all required fields")


def default_team_name(index: int) -> str:
    return f"Team {index + 1}"


def default_teams() -> tuple[Team, ...]:
    return (Team(name=default_team_name(0)),)


def blank_form() -> DraftBoard:
    """Five unnamed categories of five empty clues."""
    return pad_for_form(DraftBoard())


def is_form_complete(draft: DraftBoard) -> bool:
    return draft.is_complete()


def form_problems(draft: DraftBoard) -> list[FormProblem]:
    """
    Every required field that blocks a commit, in form order.

    Besides empty fields this reports text that would not survive a
    game file: line breaks anywhere and `|` inside a question.
    """
    found = [_field_problem(draft.title, "title")]
    padded = pad_for_form(draft)
    for col, category in enumerate(padded.categories):
        found.append(_field_problem(category.name, "name", col))
        for row, clue in enumerate(category.clues):
            found.append(_field_problem(clue.question, "question", col, row))
            found.append(_field_problem(clue.answer, "answer", col, row))
    return [problem for problem in found if problem is not None]


def board_from_form(draft: DraftBoard) -> Board:
    """
    Commit a complete form.

    Fields are trimmed, values follow the ladder and categories beyond
    the fifth are ignored. Raises FormIncompleteError when any field is
    missing or unwritable.
    """
    problems = form_problems(draft)
    if problems or len(draft.categories) < CATEGORY_COUNT:
        raise FormIncompleteError(problems)

    categories = []
    for category in draft.categories[:CATEGORY_COUNT]:
        clues = tuple(
            Clue(
                value=ladder_value(row),
                question=clue.question.strip(),
                answer=clue.answer.strip(),
            )
            for row, clue in enumerate(category.clues[:CLUES_PER_CATEGORY])
        )
        categories.append(Category(name=category.name.strip(), clues=clues))

    return Board(title=draft.title.strip(), categories=tuple(categories))


@dataclass(frozen=True)
class FormImport:
    """An upload loaded into the form."""
    draft: DraftBoard
    teams: tuple[Team, ...]
    route: UploadRoute


def import_into_form(text: str) -> FormImport:
    """
    Load uploaded text into the 5x5 form.

    Teams come from a `Teams:` line when present, else one default
    team. Scores always start at zero.
    """
    raw = extract(text)
    draft = pad_for_form(assemble(raw))
    teams = tuple(Team(name=name) for name in raw.teams) or default_teams()
    return FormImport(draft=draft, teams=teams, route=route_upload(text))


@dataclass(frozen=True)
class ExportedFile:
    """A rendered file ready to hand to the user."""
    filename: str
    content: str
    complete: bool


def export_form(
    draft: DraftBoard,
    teams: Iterable[Team],
    timestamp: datetime,
) -> ExportedFile:
    """
    Export the form.

    Complete forms that fit the game format become game files, anything
    else a draft file.
    """
    if draft.is_complete() and not form_problems(draft):
        board = board_from_form(draft)
        return ExportedFile(
            filename=export_filename(board.title, complete=True),
            content=serialize_game(board),
            complete=True,
        )
    return ExportedFile(
        filename=export_filename(draft.title, complete=False),
        content=serialize_draft(draft, teams, timestamp),
        complete=False,
    )
