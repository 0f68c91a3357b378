"""
FastAPI Application - REST API for a board UI.

Endpoints:
    GET    /api/v1/health                     Liveness and version
    POST   /api/v1/classify                   Draft or complete upload
    POST   /api/v1/validate                   Play-path validation verdict
    POST   /api/v1/parse                      Grammar output as a draft board
    POST   /api/v1/serialize/game             Board -> game text
    POST   /api/v1/serialize/draft            Draft + teams -> draft text
    POST   /api/v1/export                     Form -> downloadable file
    GET    /api/v1/session                    Startup reconciliation
    DELETE /api/v1/session                    Reset (clear every slot)
    POST   /api/v1/session/game               Load game text for play
    POST   /api/v1/session/game/upload        Load a game file for play
    POST   /api/v1/session/game/start         Start the loaded game with teams
    GET    /api/v1/session/game               Current game state
    POST   /api/v1/session/board              Create board from the form
    POST   /api/v1/session/select             Open a clue
    POST   /api/v1/session/cancel             Close the clue unscored
    POST   /api/v1/session/award              Score the open clue
    POST   /api/v1/session/teams/{i}/score    Adjust a team score
    POST   /api/v1/session/teams/{i}/name     Rename a team
    GET    /api/v1/session/draft              Saved form draft
    PUT    /api/v1/session/draft              Save the form draft
    DELETE /api/v1/session/draft              Discard the form draft
    POST   /api/v1/session/draft/import       Load text into the form
    POST   /api/v1/session/draft/upload       Load a file into the form

All responses are JSON with explicit Pydantic schemas.
Uploads are multipart/form-data.
"""

from typing import Annotated, Union
import logging
import os

from fastapi import FastAPI, File, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..session import FileBackend, SessionManager, SessionStore
from .service import APIService
from .schemas import (
    # Request models
    AdjustScoreRequest,
    AwardRequest,
    BoardInfo,
    DraftSerializeRequest,
    FormRequest,
    RenameTeamRequest,
    SelectCellRequest,
    StartGameRequest,
    TextRequest,
    # Response models
    ClassifyResponse,
    ErrorResponse,
    ExportResponse,
    FormDraftResponse,
    FormImportResponse,
    GameStateResponse,
    HealthResponse,
    ParseResponse,
    ResetResponse,
    SerializedResponse,
    StartupResponse,
    ValidationResponse,
    # Enums
    ErrorCode,
)


# Environment configuration
CLUEBOARD_ENV = os.getenv("CLUEBOARD_ENV", "development")
CLUEBOARD_STORE_DIR = os.getenv("CLUEBOARD_STORE_DIR", None)
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorCode.VALIDATION_REJECTED: 400,
    ErrorCode.FORM_INCOMPLETE: 422,
    ErrorCode.NO_ACTIVE_GAME: 404,
    ErrorCode.NO_CELL_SELECTED: 409,
    ErrorCode.INVALID_TEAM: 400,
    ErrorCode.INVALID_CELL: 400,
    ErrorCode.VALIDATION_ERROR: 400,
}


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates one over the file
            store at CLUEBOARD_STORE_DIR if not provided)

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="Clueboard API",
        description="""
Trivia board authoring and play engine.

## Upload flows

- **Edit**: `POST /classify` then `POST /session/draft/import`. Every upload,
  draft or complete, opens in the form.
- **Play**: `POST /session/game` (or `/session/game/upload`) validates and
  stores the text, then `POST /session/game/start` with the teams.

## Error Codes

| Code | Description |
|------|-------------|
| `VALIDATION_REJECTED` | Text cannot be played (reason in details) |
| `FORM_INCOMPLETE` | Required form fields are empty |
| `NO_ACTIVE_GAME` | No board is loaded |
| `NO_CELL_SELECTED` | Scoring with no clue open |
| `INVALID_TEAM` | Team index out of range |
| `INVALID_CELL` | Cell outside the board |
| `VALIDATION_ERROR` | Uploaded file is not UTF-8 text |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if service is None:
        store = SessionStore(FileBackend(CLUEBOARD_STORE_DIR))
        service = APIService(session_manager=SessionManager(store))
    api_service = service

    # =========================================================================
    # Error helpers
    # =========================================================================

    def error_json(error: ErrorResponse) -> JSONResponse:
        """Render an ErrorResponse with its HTTP status."""
        return JSONResponse(
            status_code=ERROR_STATUS.get(error.error_code, 400),
            content=error.model_dump(mode="json"),
        )

    def respond(result):
        if isinstance(result, ErrorResponse):
            return error_json(result)
        return result

    async def read_upload(upload: UploadFile) -> str | None:
        """Upload contents as text, or None when it is not UTF-8."""
        data = await upload.read()
        try:
            return data.decode("utf-8-sig")
        except UnicodeDecodeError:
            logger.info("Rejected upload %s: not UTF-8 text", upload.filename)
            return None

    def not_text_error(upload: UploadFile) -> JSONResponse:
        return error_json(ErrorResponse(
            error="Uploaded file is not UTF-8 text",
            error_code=ErrorCode.VALIDATION_ERROR,
            details={"filename": upload.filename},
        ))

    # =========================================================================
    # Format Endpoints
    # =========================================================================

    @app.get("/api/v1/health", response_model=HealthResponse, tags=["System"])
    async def health() -> HealthResponse:
        return HealthResponse(version=__version__, environment=CLUEBOARD_ENV)

    @app.post(
        "/api/v1/classify",
        response_model=ClassifyResponse,
        tags=["Format"],
        summary="Classify an upload as draft or complete",
    )
    async def classify(body: TextRequest) -> ClassifyResponse:
        """Never rejects: every text is a draft or a complete game."""
        return api_service.classify(body.text)

    @app.post(
        "/api/v1/validate",
        response_model=ValidationResponse,
        tags=["Format"],
        summary="Check whether text can be loaded for play",
    )
    async def validate(body: TextRequest) -> ValidationResponse:
        return api_service.validate(body.text)

    @app.post("/api/v1/parse", response_model=ParseResponse, tags=["Format"])
    async def parse(body: TextRequest) -> ParseResponse:
        """Structural parse; no padding, no validation."""
        return api_service.parse(body.text)

    @app.post(
        "/api/v1/serialize/game",
        response_model=SerializedResponse,
        responses={422: {"model": ErrorResponse}},
        tags=["Format"],
    )
    async def serialize_game(body: BoardInfo) -> Union[SerializedResponse, JSONResponse]:
        return respond(api_service.serialize_game(body))

    @app.post("/api/v1/serialize/draft", response_model=SerializedResponse, tags=["Format"])
    async def serialize_draft(body: DraftSerializeRequest) -> SerializedResponse:
        return api_service.serialize_draft(body)

    @app.post("/api/v1/export", response_model=ExportResponse, tags=["Format"])
    async def export(body: FormRequest) -> ExportResponse:
        """Complete forms export as game files, others as drafts."""
        return api_service.export(body)

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.get("/api/v1/session", response_model=StartupResponse, tags=["Session"])
    async def startup() -> StartupResponse:
        """Reconcile stored slots into what the UI should show."""
        return api_service.startup()

    @app.delete("/api/v1/session", response_model=ResetResponse, tags=["Session"])
    async def reset() -> ResetResponse:
        """Clear every slot. The UI starts again from an empty board."""
        return ResetResponse(success=api_service.reset())

    @app.post(
        "/api/v1/session/game",
        response_model=ValidationResponse,
        responses={400: {"model": ErrorResponse}},
        tags=["Play"],
        summary="Load game text for play",
    )
    async def load_game(body: TextRequest) -> Union[ValidationResponse, JSONResponse]:
        return respond(api_service.load_game(body.text))

    @app.post(
        "/api/v1/session/game/upload",
        response_model=ValidationResponse,
        responses={
            400: {"model": ErrorResponse},
            409: {"description": "Superseded by a newer upload"},
        },
        tags=["Play"],
        summary="Load a game file for play",
    )
    async def upload_game(
        file: Annotated[UploadFile, File(description="Game file (.txt)")],
    ) -> Union[ValidationResponse, JSONResponse]:
        ticket = api_service.session_manager.game_uploads.begin()
        text = await read_upload(file)
        if text is None:
            return not_text_error(file)
        result = api_service.receive_game_upload(ticket, text)
        if result is None:
            return JSONResponse(status_code=409, content={"superseded": True})
        return respond(result)

    @app.post(
        "/api/v1/session/game/start",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Play"],
    )
    async def start_game(body: StartGameRequest) -> Union[GameStateResponse, JSONResponse]:
        return respond(api_service.start_game(body))

    @app.get(
        "/api/v1/session/game",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Play"],
    )
    async def game_state() -> Union[GameStateResponse, JSONResponse]:
        return respond(api_service.game_state())

    @app.post(
        "/api/v1/session/board",
        response_model=GameStateResponse,
        responses={422: {"model": ErrorResponse}},
        tags=["Authoring"],
        summary="Create the board from the form and start play",
    )
    async def create_board(body: FormRequest) -> Union[GameStateResponse, JSONResponse]:
        return respond(api_service.create_board(body))

    @app.post("/api/v1/session/select", response_model=GameStateResponse, tags=["Play"])
    async def select_cell(body: SelectCellRequest) -> Union[GameStateResponse, JSONResponse]:
        return respond(api_service.select_cell(body.row, body.col))

    @app.post("/api/v1/session/cancel", response_model=GameStateResponse, tags=["Play"])
    async def cancel_clue() -> Union[GameStateResponse, JSONResponse]:
        return respond(api_service.cancel_clue())

    @app.post("/api/v1/session/award", response_model=GameStateResponse, tags=["Play"])
    async def award(body: AwardRequest) -> Union[GameStateResponse, JSONResponse]:
        return respond(api_service.award(body.team_index, body.correct))

    @app.post(
        "/api/v1/session/teams/{team_index}/score",
        response_model=GameStateResponse,
        tags=["Play"],
    )
    async def adjust_score(
        team_index: int,
        body: AdjustScoreRequest,
    ) -> Union[GameStateResponse, JSONResponse]:
        return respond(api_service.adjust_score(team_index, body.points))

    @app.post(
        "/api/v1/session/teams/{team_index}/name",
        response_model=GameStateResponse,
        tags=["Play"],
    )
    async def rename_team(
        team_index: int,
        body: RenameTeamRequest,
    ) -> Union[GameStateResponse, JSONResponse]:
        return respond(api_service.rename_team(team_index, body.name))

    # =========================================================================
    # Form Draft Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/session/draft",
        response_model=FormDraftResponse,
        responses={404: {"description": "No draft saved"}},
        tags=["Authoring"],
    )
    async def get_draft() -> Union[FormDraftResponse, JSONResponse]:
        draft = api_service.get_form_draft()
        if draft is None:
            return JSONResponse(status_code=404, content={"error": "No draft saved"})
        return draft

    @app.put("/api/v1/session/draft", response_model=FormDraftResponse, tags=["Authoring"])
    async def save_draft(body: FormRequest) -> FormDraftResponse:
        return api_service.save_form_draft(body)

    @app.delete("/api/v1/session/draft", response_model=ResetResponse, tags=["Authoring"])
    async def discard_draft() -> ResetResponse:
        return ResetResponse(success=api_service.discard_form_draft())

    @app.post(
        "/api/v1/session/draft/import",
        response_model=FormImportResponse,
        tags=["Authoring"],
        summary="Open uploaded text in the form",
    )
    async def import_draft(body: TextRequest) -> FormImportResponse:
        return api_service.import_draft(body.text)

    @app.post(
        "/api/v1/session/draft/upload",
        response_model=FormImportResponse,
        responses={
            400: {"model": ErrorResponse},
            409: {"description": "Superseded by a newer upload"},
        },
        tags=["Authoring"],
    )
    async def upload_draft(
        file: Annotated[UploadFile, File(description="Draft or game file (.txt)")],
    ) -> Union[FormImportResponse, JSONResponse]:
        ticket = api_service.session_manager.draft_uploads.begin()
        text = await read_upload(file)
        if text is None:
            return not_text_error(file)
        result = api_service.receive_draft_upload(ticket, text)
        if result is None:
            return JSONResponse(status_code=409, content={"superseded": True})
        return result

    return app


# For running directly: uvicorn clueboard.api.app:app
app = create_app()
