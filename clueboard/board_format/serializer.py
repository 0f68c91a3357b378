"""
Board Serializer - Renders boards back into the line format.

Inverse of the grammar:
- serialize_game: canonical game text, no marker
- serialize_draft: marker, title, created timestamp, teams, then
  whatever categories and clues exist (nothing skipped)

Output is deterministic: equal inputs give byte-identical text.
"""

from __future__ import annotations
from datetime import datetime, timezone
from typing import Iterable
import re

from .model import Board, Category, DraftBoard, Team, DRAFT_MARKER


DEFAULT_EXPORT_NAME = "jeopardy"


def format_timestamp(moment: datetime) -> str:
    """
    ISO-8601 in UTC with milliseconds and a Z suffix.

    Naive datetimes are taken to be UTC already.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def _render_categories(categories: Iterable[Category]) -> str:
    parts = []
    for category in categories:
        parts.append(f"Category: {category.name}\n")
        for clue in category.clues:
            parts.append(f"{clue.value}|{clue.question}|{clue.answer}\n")
        parts.append("\n")
    return "".join(parts)


def serialize_game(board: Board) -> str:
    """Render a complete board as game text."""
    return f"Title: {board.title}\n\n" + _render_categories(board.categories)


def serialize_draft(
    draft: DraftBoard,
    teams: Iterable[Team | str],
    timestamp: datetime,
) -> str:
    """Render a draft board with its teams and creation time."""
    team_names = [t.name if isinstance(t, Team) else str(t) for t in teams]
    header = (
        f"{DRAFT_MARKER}\n"
        f"Title: {draft.title}\n"
        f"Created: {format_timestamp(timestamp)}\n"
        f"Teams: {', '.join(team_names)}\n\n"
    )
    return header + _render_categories(draft.categories)


def export_filename(title: str, complete: bool) -> str:
    """
    Download filename for a board.

    "My Quiz" -> "my-quiz.txt" or "my-quiz-draft.txt".
    """
    base = re.sub(r"\s+", "-", title.strip()).lower() or DEFAULT_EXPORT_NAME
    return f"{base}.txt" if complete else f"{base}-draft.txt"
