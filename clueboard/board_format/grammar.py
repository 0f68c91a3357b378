"""
Line Grammar - Tokenizes board text and extracts the raw category tree.

The grammar is deliberately permissive:
- Lines are trimmed, blank lines are skipped and never close a category
- Unknown lines are ignored (forward compatible)
- Malformed clue rows are dropped
- It never raises; the worst case is an empty RawTree

Extraction is a two-state machine (IDLE, IN_CATEGORY) over classified
lines, so category boundaries and the end-of-input flush are explicit.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator
import re

from .model import DRAFT_MARKER


CLUE_ROW_PATTERN = re.compile(r"^\d+\|")
LINE_SPLIT_PATTERN = re.compile(r"\r?\n")

TITLE_PREFIX = "title:"
TEAMS_PREFIX = "teams:"
CREATED_PREFIX = "created:"
CATEGORY_PREFIX = "category:"


class LineKind(Enum):
    """Semantic kind of a single trimmed line."""
    BLANK = "blank"
    MARKER = "marker"
    TITLE = "title"
    TEAMS = "teams"
    CREATED = "created"
    CATEGORY = "category"
    CLUE_ROW = "clue_row"
    UNKNOWN = "unknown"


class ParserState(Enum):
    """Extraction state."""
    IDLE = "idle"  # No category open yet
    IN_CATEGORY = "in_category"  # Rows attach to the open category


@dataclass(frozen=True)
class Line:
    """A classified line with its payload (text after the prefix)."""
    kind: LineKind
    text: str
    payload: str = ""


@dataclass(frozen=True)
class RawRow:
    """A clue row exactly as written: value text, question, answer."""
    value_text: str
    question: str
    answer: str


@dataclass
class RawCategory:
    """A category header and the rows that followed it."""
    name: str
    rows: list[RawRow] = field(default_factory=list)


@dataclass
class RawTree:
    """
    Everything the grammar recognised in a text blob.

    Possibly incomplete; the assembler decides what it becomes.
    """
    marker: bool = False
    title: str | None = None
    teams: list[str] = field(default_factory=list)
    created: str | None = None  # Never populated; `created:` lines are discarded
    categories: list[RawCategory] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return (
            not self.marker
            and self.title is None
            and not self.teams
            and not self.categories
        )


def split_lines(text: str) -> list[str]:
    """Split on LF with optional CR."""
    return LINE_SPLIT_PATTERN.split(text)


def _has_prefix(line: str, prefix: str) -> bool:
    return line[:len(prefix)].lower() == prefix


def classify_line(raw_line: str) -> Line:
    """
    Classify one line of board text.

    Prefixes are case-insensitive; the marker is matched exactly.
    """
    line = raw_line.strip()
    if not line:
        return Line(LineKind.BLANK, line)
    if line == DRAFT_MARKER:
        return Line(LineKind.MARKER, line)
    if _has_prefix(line, TITLE_PREFIX):
        return Line(LineKind.TITLE, line, line[len(TITLE_PREFIX):].strip())
    if _has_prefix(line, TEAMS_PREFIX):
        return Line(LineKind.TEAMS, line, line[len(TEAMS_PREFIX):].strip())
    if _has_prefix(line, CREATED_PREFIX):
        return Line(LineKind.CREATED, line, line[len(CREATED_PREFIX):].strip())
    if _has_prefix(line, CATEGORY_PREFIX):
        return Line(LineKind.CATEGORY, line, line[len(CATEGORY_PREFIX):].strip())
    if CLUE_ROW_PATTERN.match(line):
        return Line(LineKind.CLUE_ROW, line, line)
    return Line(LineKind.UNKNOWN, line)


def tokenize(text: str) -> Iterator[Line]:
    """Yield a classified Line for every line of text, blanks included."""
    for raw_line in split_lines(text):
        yield classify_line(raw_line)


def parse_clue_row(line: str) -> RawRow | None:
    """
    Split a clue row into value, question and answer.

    The answer keeps any further `|` characters. Rows with fewer
    than three fields return None.
    """
    parts = line.split("|")
    if len(parts) < 3:
        return None
    return RawRow(
        value_text=parts[0].strip(),
        question=parts[1].strip(),
        answer="|".join(parts[2:]).strip(),
    )


def parse_teams(payload: str) -> list[str]:
    """Comma separated team names, trimmed, empties dropped."""
    return [name.strip() for name in payload.split(",") if name.strip()]


class _Extractor:
    """State machine driving extraction over classified lines."""

    def __init__(self):
        self.tree = RawTree()
        self.state = ParserState.IDLE
        self.current: RawCategory | None = None

    def feed(self, line: Line):
        kind = line.kind
        if kind in (LineKind.BLANK, LineKind.UNKNOWN, LineKind.CREATED):
            return
        if kind == LineKind.MARKER:
            self.tree.marker = True
        elif kind == LineKind.TITLE:
            # First title wins
            if self.tree.title is None:
                self.tree.title = line.payload
        elif kind == LineKind.TEAMS:
            self.tree.teams = parse_teams(line.payload)
        elif kind == LineKind.CATEGORY:
            self._close_category()
            self.current = RawCategory(name=line.payload)
            self.state = ParserState.IN_CATEGORY
        elif kind == LineKind.CLUE_ROW:
            if self.state != ParserState.IN_CATEGORY:
                return
            row = parse_clue_row(line.payload)
            if row is not None:
                self.current.rows.append(row)

    def finish(self) -> RawTree:
        self._close_category()
        return self.tree

    def _close_category(self):
        if self.state == ParserState.IN_CATEGORY and self.current is not None:
            self.tree.categories.append(self.current)
        self.current = None
        self.state = ParserState.IDLE


def extract(text: str) -> RawTree:
    """
    Tokenize text and extract the raw category/clue tree.

    Never raises for string input.
    """
    extractor = _Extractor()
    for line in tokenize(text):
        extractor.feed(line)
    return extractor.finish()


def parse_title(text: str) -> str:
    """The first `Title:` line anywhere in the text, or empty string."""
    for line in tokenize(text):
        if line.kind == LineKind.TITLE:
            return line.payload
    return ""


def first_line(text: str) -> str:
    """First line of text, trimmed (empty when text is empty)."""
    return split_lines(text)[0].strip()
