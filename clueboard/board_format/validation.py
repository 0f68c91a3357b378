"""
Board Validation - Classifies uploaded text and gates the Play path.

Two independent decision procedures over raw text:
1. classify_upload: draft or complete, total, never rejects
2. validate_for_play: ok, or rejected with exactly one reason

Both share the incremental category scan: a category is flagged
incomplete the moment the next `Category:` line appears while its
running count of complete rows is below five, and the last category
is checked at end of input.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from .assembler import ClueboardError
from .grammar import (
    LineKind,
    classify_line,
    first_line,
    parse_clue_row,
    split_lines,
    TITLE_PREFIX,
)
from .model import DRAFT_MARKER, CATEGORY_COUNT, CLUES_PER_CATEGORY


class UploadKind(Enum):
    """Verdict of the generic upload classifier."""
    DRAFT = "draft"
    COMPLETE = "complete"


class UploadRoute(Enum):
    """Which import flow opens an upload in the editor."""
    EDIT_DRAFT = "edit_draft"  # Marker present: teams line understood
    EDIT_GAME = "edit_game"  # Everything else


class RejectionReason(Enum):
    """Why text cannot be loaded as an active game. Checked in this order."""
    DRAFT_MARKER_PRESENT = "draft_marker_present"
    MISSING_OR_INVALID_TITLE = "missing_or_invalid_title"
    TOO_FEW_CATEGORIES = "too_few_categories"
    INCOMPLETE_CATEGORY = "incomplete_category"


REJECTION_MESSAGES = {
    RejectionReason.DRAFT_MARKER_PRESENT: (
        'This appears to be a draft file. Please use the "Edit" button instead.'
    ),
    RejectionReason.MISSING_OR_INVALID_TITLE: (
        "This does not appear to be a valid game file. "
        'Game files should start with "Title: [name]".'
    ),
    RejectionReason.TOO_FEW_CATEGORIES: (
        "This game file is incomplete. It should have 5 categories with 5 questions each. "
        'Please use the "Edit" button instead.'
    ),
    RejectionReason.INCOMPLETE_CATEGORY: (
        "This game file has incomplete categories (missing questions/answers). "
        'Please use the "Edit" button instead.'
    ),
}


@dataclass(frozen=True)
class PlayVerdict:
    """Result of validate_for_play."""
    ok: bool
    reason: RejectionReason | None = None
    message: str = ""

    @classmethod
    def accepted(cls) -> PlayVerdict:
        return cls(ok=True)

    @classmethod
    def rejected(cls, reason: RejectionReason) -> PlayVerdict:
        return cls(ok=False, reason=reason, message=REJECTION_MESSAGES[reason])


class PlayRejected(ClueboardError):
    """Raised by callers that turn a failing PlayVerdict into an exception."""

    def __init__(self, verdict: PlayVerdict):
        self.verdict = verdict
        super().__init__(verdict.message)


@dataclass(frozen=True)
class CategoryScan:
    """Outcome of the incremental category scan."""
    category_count: int
    has_incomplete_category: bool

    @property
    def is_complete(self) -> bool:
        return self.category_count >= CATEGORY_COUNT and not self.has_incomplete_category


def _is_complete_row(line: str) -> bool:
    row = parse_clue_row(line)
    return row is not None and bool(row.question) and bool(row.answer)


def scan_categories(lines: list[str]) -> CategoryScan:
    """
    Count categories and flag incomplete ones incrementally.

    Rows are counted for whichever category is open; rows before the
    first category count toward nothing but the final check.
    """
    category_count = 0
    has_incomplete = False
    complete_rows = 0

    for raw_line in lines:
        line = classify_line(raw_line)
        if line.kind == LineKind.CATEGORY:
            if category_count > 0 and complete_rows < CLUES_PER_CATEGORY:
                has_incomplete = True
            category_count += 1
            complete_rows = 0
        elif line.kind == LineKind.CLUE_ROW and _is_complete_row(line.text):
            complete_rows += 1

    # Last (or only) category
    if complete_rows < CLUES_PER_CATEGORY:
        has_incomplete = True

    return CategoryScan(category_count=category_count, has_incomplete_category=has_incomplete)


def _starts_with_title(text: str) -> bool:
    return first_line(text).lower().startswith(TITLE_PREFIX)


def has_marker(text: str) -> bool:
    """True if any line, trimmed, is exactly the draft marker."""
    return any(line.strip() == DRAFT_MARKER for line in split_lines(text))


def classify_upload(text: str) -> UploadKind:
    """
    Classify an upload as draft or complete.

    Total: every string is one or the other.
    """
    if has_marker(text):
        return UploadKind.DRAFT

    if _starts_with_title(text):
        scan = scan_categories(split_lines(text))
        if scan.is_complete:
            return UploadKind.COMPLETE
        return UploadKind.DRAFT

    return UploadKind.DRAFT


def route_upload(text: str) -> UploadRoute:
    """
    Pick the editor import flow for an upload.

    Complete game files are still opened for editing rather than
    sent straight to play.
    """
    if has_marker(text):
        return UploadRoute.EDIT_DRAFT
    return UploadRoute.EDIT_GAME


def validate_for_play(text: str) -> PlayVerdict:
    """
    Decide whether text can be loaded as the active game.

    The first failing rule determines the single reported reason.
    """
    lines = split_lines(text)

    if any(line.strip() == DRAFT_MARKER for line in lines):
        return PlayVerdict.rejected(RejectionReason.DRAFT_MARKER_PRESENT)

    if not _starts_with_title(text):
        return PlayVerdict.rejected(RejectionReason.MISSING_OR_INVALID_TITLE)

    scan = scan_categories(lines)
    if scan.category_count < CATEGORY_COUNT:
        return PlayVerdict.rejected(RejectionReason.TOO_FEW_CATEGORIES)
    if scan.has_incomplete_category:
        return PlayVerdict.rejected(RejectionReason.INCOMPLETE_CATEGORY)

    return PlayVerdict.accepted()
