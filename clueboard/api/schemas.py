"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between a board UI and the engine.
The UI owns rendering and dialogs; it sends raw text or form data and
receives boards, verdicts and serialized text.

Error Codes:
- VALIDATION_REJECTED: Text cannot be loaded for play (reason in details)
- FORM_INCOMPLETE: Form has empty required fields (listed in details)
- NO_ACTIVE_GAME: Play operation without a loaded board
- NO_CELL_SELECTED: Scoring with no clue open
- INVALID_TEAM: Team index out of range
- INVALID_CELL: Cell outside the 5x5 board
- VALIDATION_ERROR: Uploaded file is not UTF-8 text
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field

from ..board_format.assembler import resolve_media
from ..board_format.model import (
    Board,
    Category,
    Clue,
    DraftBoard,
    FormDraftSnapshot,
    Team,
    CATEGORY_COUNT,
    CLUES_PER_CATEGORY,
)
from ..game import GameState


# =============================================================================
# Enums
# =============================================================================

class ErrorCode(str, Enum):
    """Structured error codes."""
    VALIDATION_REJECTED = "VALIDATION_REJECTED"
    FORM_INCOMPLETE = "FORM_INCOMPLETE"
    NO_ACTIVE_GAME = "NO_ACTIVE_GAME"
    NO_CELL_SELECTED = "NO_CELL_SELECTED"
    INVALID_TEAM = "INVALID_TEAM"
    INVALID_CELL = "INVALID_CELL"
    VALIDATION_ERROR = "VALIDATION_ERROR"


class UploadKindInfo(str, Enum):
    DRAFT = "draft"
    COMPLETE = "complete"


class UploadRouteInfo(str, Enum):
    EDIT_DRAFT = "edit_draft"
    EDIT_GAME = "edit_game"


class SessionPhaseInfo(str, Enum):
    EMPTY = "empty"
    PLAYING = "playing"


# =============================================================================
# Shared Models
# =============================================================================

class MediaInfo(BaseModel):
    """How to present a clue field: text, or an image path."""
    kind: str = Field(description="text or image")
    value: str


class ClueInfo(BaseModel):
    """One clue."""
    value: int = 0
    question: str = ""
    answer: str = ""

    model_config = {"from_attributes": True}

    def to_clue(self) -> Clue:
        return Clue(value=self.value, question=self.question, answer=self.answer)


class CategoryInfo(BaseModel):
    """A category and its clues."""
    name: str = ""
    clues: list[ClueInfo] = Field(default_factory=list)

    def to_category(self) -> Category:
        return Category(name=self.name, clues=tuple(c.to_clue() for c in self.clues))


class BoardInfo(BaseModel):
    """A board, complete or draft."""
    title: str = ""
    categories: list[CategoryInfo] = Field(default_factory=list)

    def to_draft(self) -> DraftBoard:
        return DraftBoard(
            title=self.title,
            categories=tuple(c.to_category() for c in self.categories),
        )

    @classmethod
    def from_board(cls, board: Board | DraftBoard) -> "BoardInfo":
        return cls.model_validate(board.to_dict())


class TeamInfo(BaseModel):
    """A team and its score."""
    name: str
    score: int = 0

    def to_team(self) -> Team:
        return Team(name=self.name, score=self.score)


class CellInfo(BaseModel):
    """A board cell as the play grid needs it."""
    row: int
    col: int
    value: int
    used: bool = False
    question: MediaInfo
    answer: MediaInfo


# =============================================================================
# Request Models
# =============================================================================

class TextRequest(BaseModel):
    """Raw board text."""
    text: str = Field(..., description="Board text in the line format")


class DraftSerializeRequest(BaseModel):
    """Draft board plus its teams and timestamp."""
    board: BoardInfo
    teams: list[str] = Field(default_factory=list)
    timestamp: Optional[datetime] = Field(None, description="Defaults to now (UTC)")


class FormRequest(BaseModel):
    """The authoring form: board fields and teams."""
    board: BoardInfo
    teams: list[TeamInfo] = Field(default_factory=list)


class StartGameRequest(BaseModel):
    """Teams for a loaded game file."""
    teams: list[TeamInfo] = Field(..., min_length=1)


class SelectCellRequest(BaseModel):
    row: int = Field(..., ge=0, lt=CLUES_PER_CATEGORY)
    col: int = Field(..., ge=0, lt=CATEGORY_COUNT)


class AwardRequest(BaseModel):
    team_index: int = Field(..., ge=0)
    correct: bool = True


class AdjustScoreRequest(BaseModel):
    points: int


class RenameTeamRequest(BaseModel):
    name: str


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    environment: str


class ClassifyResponse(BaseModel):
    """Generic upload classification."""
    kind: UploadKindInfo
    route: UploadRouteInfo


class ValidationResponse(BaseModel):
    """Play-path validation verdict."""
    ok: bool
    reason: Optional[str] = None
    message: str = ""


class ParseResponse(BaseModel):
    """What the grammar found, assembled as a draft."""
    marker: bool
    title: Optional[str] = None
    teams: list[str] = Field(default_factory=list)
    board: BoardInfo


class SerializedResponse(BaseModel):
    text: str


class ExportResponse(BaseModel):
    """A file the UI offers for download."""
    filename: str
    content: str
    complete: bool


class FormImportResponse(BaseModel):
    """Upload loaded into the form."""
    route: UploadRouteInfo
    board: BoardInfo
    teams: list[TeamInfo]


class FormDraftResponse(BaseModel):
    """Saved form draft."""
    board: BoardInfo
    teams: list[TeamInfo]
    last_modified: datetime

    @classmethod
    def from_snapshot(cls, snapshot: FormDraftSnapshot) -> "FormDraftResponse":
        return cls(
            board=BoardInfo.from_board(snapshot.draft),
            teams=[TeamInfo(**t.to_dict()) for t in snapshot.teams],
            last_modified=snapshot.last_modified,
        )


class GameStateResponse(BaseModel):
    """The active game grid and scoreboard."""
    title: str
    categories: list[str]
    cells: list[CellInfo] = Field(description="Row-major, 25 cells")
    teams: list[TeamInfo]
    selected: Optional[CellInfo] = None
    last_value: int = 0
    finished: bool = False

    @classmethod
    def from_state(cls, game: GameState) -> "GameStateResponse":
        cells = []
        for row in range(CLUES_PER_CATEGORY):
            for col in range(CATEGORY_COUNT):
                cells.append(_cell_info(game, row, col))
        selected = None
        if game.selected is not None:
            selected = _cell_info(game, game.selected.row, game.selected.col)
        return cls(
            title=game.title,
            categories=[c.name for c in game.board.categories],
            cells=cells,
            teams=[TeamInfo(**t.to_dict()) for t in game.teams],
            selected=selected,
            last_value=game.last_value,
            finished=game.is_finished,
        )


def _cell_info(game: GameState, row: int, col: int) -> CellInfo:
    clue = game.board.clue_at(row, col)
    question = resolve_media(clue.question, is_answer=False)
    answer = resolve_media(clue.answer, is_answer=True)
    return CellInfo(
        row=row,
        col=col,
        value=clue.value,
        used=game.is_used(row, col),
        question=MediaInfo(kind=question.kind, value=question.value),
        answer=MediaInfo(kind=answer.kind, value=answer.value),
    )


class StartupResponse(BaseModel):
    """Startup reconciliation result."""
    phase: SessionPhaseInfo
    title: str = ""
    resume_draft_prompt: bool = False
    game: Optional[GameStateResponse] = None


class ResetResponse(BaseModel):
    success: bool = True
