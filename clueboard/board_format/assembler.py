"""
Board Assembler - Turns a RawTree into a DraftBoard or a strict Board.

Two entry points:
- assemble(): structural copy, no padding, no truncation, never fails
- assemble_strict(): requires the full 5x5 shape and re-derives every
  value from the ladder, so hand-edited values never leak into play

Also home to the image-reference convention: a field whose trimmed text
starts with `<img>` names an image key resolved at presentation time.
"""

from __future__ import annotations
from dataclasses import dataclass

from .grammar import RawTree, RawRow
from .model import (
    Board,
    Category,
    Clue,
    DraftBoard,
    CATEGORY_COUNT,
    CLUES_PER_CATEGORY,
    ClueboardError,
    ladder_value,
)


IMAGE_MARKER = "<img>"
QUESTION_IMAGE_DIR = "images/questions/"
ANSWER_IMAGE_DIR = "images/answers/"
IMAGE_EXTENSION = ".png"


class BoardAssemblyError(ClueboardError):
    """Raised when a raw tree does not describe a complete board."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__(
            f"Board assembly failed with {len(problems)} problem(s): " + "; ".join(problems)
        )


def parse_value(value_text: str) -> int:
    """Integer value of the text, or 0 when it is not numeric."""
    try:
        return int(value_text.strip())
    except ValueError:
        return 0


def _clue_from_row(row: RawRow) -> Clue:
    return Clue(value=parse_value(row.value_text), question=row.question, answer=row.answer)


def assemble(raw: RawTree) -> DraftBoard:
    """Copy the raw tree into a DraftBoard as-is."""
    return DraftBoard(
        title=raw.title or "",
        categories=tuple(
            Category(name=cat.name, clues=tuple(_clue_from_row(r) for r in cat.rows))
            for cat in raw.categories
        ),
    )


def assemble_strict(raw: RawTree) -> Board:
    """
    Build a playable Board.

    Raises BoardAssemblyError listing every shape problem found.

    Only complete rows (question and answer both present) count, and
    only the first five categories and first five complete rows of each
    are used, matching the 5x5 grid. Text accepted by validate_for_play
    therefore always assembles.
    """
    problems: list[str] = []

    if len(raw.categories) < CATEGORY_COUNT:
        problems.append(
            f"expected {CATEGORY_COUNT} categories, found {len(raw.categories)}"
        )

    categories = []
    for cat in raw.categories[:CATEGORY_COUNT]:
        complete_rows = [row for row in cat.rows if row.question and row.answer]
        if len(complete_rows) < CLUES_PER_CATEGORY:
            problems.append(
                f"category '{cat.name}' has {len(complete_rows)} complete rows, "
                f"expected {CLUES_PER_CATEGORY}"
            )
            continue
        clues = tuple(
            Clue(value=ladder_value(row_index), question=row.question, answer=row.answer)
            for row_index, row in enumerate(complete_rows[:CLUES_PER_CATEGORY])
        )
        categories.append(Category(name=cat.name, clues=clues))

    if problems:
        raise BoardAssemblyError(problems)

    return Board(title=raw.title or "", categories=tuple(categories))


# =============================================================================
# Image references
# =============================================================================

@dataclass(frozen=True)
class MediaRef:
    """
    How a clue field should be presented.

    kind is "image" (value is a relative path) or "text" (value is the
    field text).
    """
    kind: str
    value: str

    @property
    def is_image(self) -> bool:
        return self.kind == "image"


def image_key(field_text: str) -> str | None:
    """Image key for an `<img>` field, else None."""
    stripped = field_text.strip()
    if not stripped.startswith(IMAGE_MARKER):
        return None
    return stripped[len(IMAGE_MARKER):].strip()


def resolve_media(field_text: str, is_answer: bool) -> MediaRef:
    """
    Resolve a question or answer field for presentation.

    Question and answer images live in different directories.
    File existence is not checked.
    """
    key = image_key(field_text)
    if key is None:
        return MediaRef(kind="text", value=field_text)
    directory = ANSWER_IMAGE_DIR if is_answer else QUESTION_IMAGE_DIR
    return MediaRef(kind="image", value=f"{directory}{key}{IMAGE_EXTENSION}")


def pad_for_form(draft: DraftBoard) -> DraftBoard:
    """
    Fit a draft to the 5x5 authoring form.

    Missing categories and clues are added empty, values follow the
    ladder, anything beyond five is dropped.
    """
    categories = []
    for col in range(CATEGORY_COUNT):
        source = draft.categories[col] if col < len(draft.categories) else Category(name="")
        clues = []
        for row in range(CLUES_PER_CATEGORY):
            if row < len(source.clues):
                clue = source.clues[row]
                clues.append(Clue(value=ladder_value(row), question=clue.question, answer=clue.answer))
            else:
                clues.append(Clue(value=ladder_value(row)))
        categories.append(Category(name=source.name, clues=tuple(clues)))
    return DraftBoard(title=draft.title, categories=tuple(categories))
