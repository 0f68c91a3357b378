"""
Board Model - Value objects for trivia boards, teams and form drafts.

Design principles:
- Immutable-friendly: all mutations return new values
- Serializable: every value round-trips through plain dicts (JSON slots)
- Shape-checked at the edges: a Board is always 5 complete categories
  whose fields survive a trip through game text, a DraftBoard may be
  anything up to that
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


CATEGORY_COUNT = 5
CLUES_PER_CATEGORY = 5
VALUE_LADDER = (100, 200, 300, 400, 500)

DRAFT_MARKER = "[JEOPARDY DRAFT]"
FIELD_SEPARATOR = "|"


class ClueboardError(Exception):
    """Base class for errors raised by the board core."""


class CellOutOfRangeError(ClueboardError, IndexError):
    """Raised for a cell outside the 5x5 board."""


def ladder_value(row: int) -> int:
    """Point value for a row (0-based) on the fixed ladder."""
    return 100 * (row + 1)


def has_line_break(text: str) -> bool:
    return "\r" in text or "\n" in text


def _require_single_line(text: str, label: str):
    if has_line_break(text):
        raise ValueError(f"{label} spans several lines")
    if text != text.strip():
        raise ValueError(f"{label} has leading or trailing whitespace")


@dataclass(frozen=True)
class Clue:
    """
    One cell of the board.

    `question` is the prompt shown first, `answer` is the expected
    response revealed afterwards.
    """
    value: int
    question: str = ""
    answer: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.question.strip()) and bool(self.answer.strip())

    def to_dict(self) -> dict[str, Any]:
        return {"value": self.value, "question": self.question, "answer": self.answer}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Clue:
        raw_value = data.get("value", 0)
        try:
            value = int(raw_value)
        except (TypeError, ValueError):
            value = 0
        return cls(
            value=value,
            question=str(data.get("question") or ""),
            answer=str(data.get("answer") or ""),
        )


@dataclass(frozen=True)
class Category:
    """A named column of up to five clues."""
    name: str
    clues: tuple[Clue, ...] = ()

    @property
    def is_complete(self) -> bool:
        return (
            len(self.clues) == CLUES_PER_CATEGORY
            and all(clue.is_complete for clue in self.clues)
        )

    def with_clue(self, index: int, clue: Clue) -> Category:
        """Return new category with the clue at index replaced."""
        clues = list(self.clues)
        clues[index] = clue
        return Category(name=self.name, clues=tuple(clues))

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "clues": [c.to_dict() for c in self.clues]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Category:
        return cls(
            name=str(data.get("name") or ""),
            clues=tuple(Clue.from_dict(c) for c in data.get("clues") or []),
        )


@dataclass(frozen=True)
class DraftBoard:
    """
    A board that may be partially filled.

    Produced by any non-rejected parse and by the authoring form.
    Categories may number 0..5 and clues 0..5 with empty fields.
    """
    title: str = ""
    categories: tuple[Category, ...] = ()

    def is_complete(self) -> bool:
        """Title present and five named categories of five complete clues."""
        if not self.title.strip():
            return False
        if len(self.categories) < CATEGORY_COUNT:
            return False
        for category in self.categories:
            if not category.name.strip():
                return False
            if len(category.clues) < CLUES_PER_CATEGORY:
                return False
            if not all(clue.is_complete for clue in category.clues):
                return False
        return True

    def with_title(self, title: str) -> DraftBoard:
        return DraftBoard(title=title, categories=self.categories)

    def with_category(self, index: int, category: Category) -> DraftBoard:
        """Return new draft with the category at index replaced."""
        categories = list(self.categories)
        categories[index] = category
        return DraftBoard(title=self.title, categories=tuple(categories))

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "categories": [c.to_dict() for c in self.categories],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DraftBoard:
        return cls(
            title=str(data.get("title") or ""),
            categories=tuple(Category.from_dict(c) for c in data.get("categories") or []),
        )


@dataclass(frozen=True)
class Board:
    """
    The complete, playable 5x5 board.

    This is the only representation allowed to enter play.
    Construct it through the assembler or the authoring form,
    which guarantee the shape.

    Every field is a single trimmed line, questions hold no `|` and
    values follow the ladder, so serializing and parsing a Board
    gives back an equal Board.
    """
    title: str
    categories: tuple[Category, ...]

    def __post_init__(self):
        if len(self.categories) != CATEGORY_COUNT:
            raise ValueError(
                f"Board needs {CATEGORY_COUNT} categories, got {len(self.categories)}"
            )
        _require_single_line(self.title, "Board title")
        for category in self.categories:
            if not category.is_complete:
                raise ValueError(f"Category '{category.name}' is incomplete")
            _require_single_line(category.name, f"Category '{category.name}' name")
            for row, clue in enumerate(category.clues):
                where = f"Clue {row + 1} of '{category.name}'"
                if clue.value != ladder_value(row):
                    raise ValueError(
                        f"{where} is worth {clue.value}, expected {ladder_value(row)}"
                    )
                _require_single_line(clue.question, f"{where} question")
                _require_single_line(clue.answer, f"{where} answer")
                if FIELD_SEPARATOR in clue.question:
                    raise ValueError(f"{where} question contains '{FIELD_SEPARATOR}'")

    def clue_at(self, row: int, col: int) -> Clue:
        """Clue at (row, col); col selects the category."""
        if not (0 <= row < CLUES_PER_CATEGORY and 0 <= col < CATEGORY_COUNT):
            raise CellOutOfRangeError(f"Cell ({row}, {col}) is outside the board")
        return self.categories[col].clues[row]

    def as_draft(self) -> DraftBoard:
        return DraftBoard(title=self.title, categories=self.categories)

    def to_dict(self) -> dict[str, Any]:
        return self.as_draft().to_dict()


@dataclass(frozen=True)
class Team:
    """A competing team. Score changes only through point awards."""
    name: str
    score: int = 0

    def with_points(self, points: int) -> Team:
        return Team(name=self.name, score=self.score + points)

    def with_name(self, name: str) -> Team:
        return Team(name=name, score=self.score)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "score": self.score}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Team:
        try:
            score = int(data.get("score", 0))
        except (TypeError, ValueError):
            score = 0
        return cls(name=str(data.get("name") or ""), score=score)


@dataclass(frozen=True, order=True)
class CellId:
    """
    Identifier of a board cell.

    Encoded as "row,col" in the used-cells slot.
    """
    row: int
    col: int

    def encode(self) -> str:
        return f"{self.row},{self.col}"

    @classmethod
    def parse(cls, text: Any) -> CellId | None:
        """Decode "row,col"; anything else yields None."""
        if not isinstance(text, str):
            return None
        parts = text.split(",")
        if len(parts) != 2:
            return None
        try:
            row, col = int(parts[0]), int(parts[1])
        except ValueError:
            return None
        if not (0 <= row < CLUES_PER_CATEGORY and 0 <= col < CATEGORY_COUNT):
            return None
        return cls(row=row, col=col)


@dataclass(frozen=True)
class FormDraftSnapshot:
    """
    The durable authoring form in progress.

    Independent of any uploaded file.
    """
    draft: DraftBoard
    teams: tuple[Team, ...] = ()
    last_modified: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @property
    def title(self) -> str:
        return self.draft.title

    @property
    def categories(self) -> tuple[Category, ...]:
        return self.draft.categories

    def to_dict(self) -> dict[str, Any]:
        data = self.draft.to_dict()
        data["teams"] = [t.to_dict() for t in self.teams]
        data["lastModified"] = self.last_modified.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FormDraftSnapshot:
        raw_modified = data.get("lastModified")
        try:
            last_modified = datetime.fromisoformat(str(raw_modified).replace("Z", "+00:00"))
        except ValueError:
            last_modified = datetime.fromtimestamp(0, timezone.utc)
        return cls(
            draft=DraftBoard.from_dict(data),
            teams=tuple(Team.from_dict(t) for t in data.get("teams") or []),
            last_modified=last_modified,
        )
