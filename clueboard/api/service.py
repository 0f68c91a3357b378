"""
API Service - Business logic layer between the HTTP API and the core.

The service:
1. Translates API requests to core calls
2. Owns the SessionManager (and through it the store)
3. Maps core errors to structured ErrorResponse values

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging

from .schemas import (
    # Requests
    DraftSerializeRequest,
    FormRequest,
    StartGameRequest,
    # Responses
    BoardInfo,
    ClassifyResponse,
    ErrorResponse,
    ExportResponse,
    FormDraftResponse,
    FormImportResponse,
    GameStateResponse,
    ParseResponse,
    SerializedResponse,
    StartupResponse,
    TeamInfo,
    ValidationResponse,
    # Enums
    ErrorCode,
    SessionPhaseInfo,
    UploadKindInfo,
    UploadRouteInfo,
)
from ..authoring import FormIncompleteError, board_from_form, export_form
from ..board_format.assembler import assemble
from ..board_format.grammar import extract
from ..board_format.model import CellOutOfRangeError
from ..board_format.serializer import serialize_draft, serialize_game
from ..board_format.validation import PlayVerdict, classify_upload, route_upload, validate_for_play
from ..game import NoCellSelectedError, UnknownTeamError
from ..session import NoActiveGameError, SessionManager


logger = logging.getLogger(__name__)


def _error(code: ErrorCode, message: str, **details) -> ErrorResponse:
    return ErrorResponse(error=message, error_code=code, details=details or None)


def _verdict_response(verdict: PlayVerdict) -> ValidationResponse:
    return ValidationResponse(
        ok=verdict.ok,
        reason=verdict.reason.value if verdict.reason else None,
        message=verdict.message,
    )


@dataclass
class APIService:
    """
    Main API service for a board UI.

    Usage:
        service = APIService()

        # Stateless format operations
        service.classify(text)
        service.validate(text)

        # Session
        service.startup()
        service.load_game(text)
        service.start_game(request)
    """
    session_manager: SessionManager = field(default_factory=SessionManager)

    # =========================================================================
    # Format operations (stateless)
    # =========================================================================

    def classify(self, text: str) -> ClassifyResponse:
        return ClassifyResponse(
            kind=UploadKindInfo(classify_upload(text).value),
            route=UploadRouteInfo(route_upload(text).value),
        )

    def validate(self, text: str) -> ValidationResponse:
        return _verdict_response(validate_for_play(text))

    def parse(self, text: str) -> ParseResponse:
        raw = extract(text)
        return ParseResponse(
            marker=raw.marker,
            title=raw.title,
            teams=raw.teams,
            board=BoardInfo.from_board(assemble(raw)),
        )

    def serialize_game(self, board: BoardInfo) -> SerializedResponse | ErrorResponse:
        """
        Render a board as game text.

        The board must pass the same checks as the authoring form; values
        are normalized to the ladder.
        """
        try:
            strict = board_from_form(board.to_draft())
        except FormIncompleteError as exc:
            return _error(
                ErrorCode.FORM_INCOMPLETE,
                "Board is not complete",
                problems=[p.describe() for p in exc.problems],
            )
        return SerializedResponse(text=serialize_game(strict))

    def serialize_draft(self, request: DraftSerializeRequest) -> SerializedResponse:
        timestamp = request.timestamp or datetime.now(timezone.utc)
        return SerializedResponse(
            text=serialize_draft(request.board.to_draft(), request.teams, timestamp)
        )

    def export(self, request: FormRequest) -> ExportResponse:
        exported = export_form(
            request.board.to_draft(),
            [t.to_team() for t in request.teams],
            datetime.now(timezone.utc),
        )
        return ExportResponse(
            filename=exported.filename,
            content=exported.content,
            complete=exported.complete,
        )

    # =========================================================================
    # Session
    # =========================================================================

    def startup(self) -> StartupResponse:
        view = self.session_manager.restore()
        return StartupResponse(
            phase=SessionPhaseInfo(view.phase.value),
            title=view.title,
            resume_draft_prompt=view.resume_draft_prompt,
            game=GameStateResponse.from_state(view.game) if view.game else None,
        )

    def load_game(self, text: str) -> ValidationResponse | ErrorResponse:
        verdict = self.session_manager.load_game_file(text)
        return self._load_result(verdict)

    def receive_game_upload(self, ticket: int, text: str) -> ValidationResponse | ErrorResponse | None:
        """None means a newer upload superseded this one."""
        verdict = self.session_manager.receive_game_upload(ticket, text)
        if verdict is None:
            return None
        return self._load_result(verdict)

    def _load_result(self, verdict: PlayVerdict) -> ValidationResponse | ErrorResponse:
        if not verdict.ok:
            return _error(
                ErrorCode.VALIDATION_REJECTED,
                verdict.message,
                reason=verdict.reason.value,
            )
        return _verdict_response(verdict)

    def start_game(self, request: StartGameRequest) -> GameStateResponse | ErrorResponse:
        try:
            game = self.session_manager.start_loaded_game(t.to_team() for t in request.teams)
        except NoActiveGameError as exc:
            return _error(ErrorCode.NO_ACTIVE_GAME, str(exc))
        except ValueError as exc:
            return _error(ErrorCode.INVALID_TEAM, str(exc))
        return GameStateResponse.from_state(game)

    def create_board(self, request: FormRequest) -> GameStateResponse | ErrorResponse:
        try:
            game = self.session_manager.create_board_from_form(
                request.board.to_draft(),
                [t.to_team() for t in request.teams],
            )
        except FormIncompleteError as exc:
            return _error(
                ErrorCode.FORM_INCOMPLETE,
                str(exc),
                problems=[p.describe() for p in exc.problems],
            )
        return GameStateResponse.from_state(game)

    def game_state(self) -> GameStateResponse | ErrorResponse:
        game = self.session_manager.game
        if game is None:
            return _error(ErrorCode.NO_ACTIVE_GAME, "No game is in progress")
        return GameStateResponse.from_state(game)

    def select_cell(self, row: int, col: int) -> GameStateResponse | ErrorResponse:
        return self._play(lambda m: m.select_cell(row, col))

    def cancel_clue(self) -> GameStateResponse | ErrorResponse:
        return self._play(lambda m: m.cancel_clue())

    def award(self, team_index: int, correct: bool) -> GameStateResponse | ErrorResponse:
        return self._play(lambda m: m.award(team_index, correct))

    def adjust_score(self, team_index: int, points: int) -> GameStateResponse | ErrorResponse:
        return self._play(lambda m: m.adjust_score(team_index, points))

    def rename_team(self, team_index: int, name: str) -> GameStateResponse | ErrorResponse:
        return self._play(lambda m: m.rename_team(team_index, name))

    def _play(self, operation) -> GameStateResponse | ErrorResponse:
        try:
            game = operation(self.session_manager)
        except NoActiveGameError as exc:
            return _error(ErrorCode.NO_ACTIVE_GAME, str(exc))
        except NoCellSelectedError as exc:
            return _error(ErrorCode.NO_CELL_SELECTED, str(exc))
        except UnknownTeamError as exc:
            return _error(ErrorCode.INVALID_TEAM, str(exc))
        except CellOutOfRangeError as exc:
            return _error(ErrorCode.INVALID_CELL, str(exc))
        return GameStateResponse.from_state(game)

    # =========================================================================
    # Form draft
    # =========================================================================

    def get_form_draft(self) -> FormDraftResponse | None:
        snapshot = self.session_manager.load_form_draft()
        if snapshot is None:
            return None
        return FormDraftResponse.from_snapshot(snapshot)

    def save_form_draft(self, request: FormRequest) -> FormDraftResponse:
        snapshot = self.session_manager.save_form_draft(
            request.board.to_draft(),
            [t.to_team() for t in request.teams],
        )
        return FormDraftResponse.from_snapshot(snapshot)

    def discard_form_draft(self) -> bool:
        self.session_manager.discard_form_draft()
        return True

    def import_draft(self, text: str) -> FormImportResponse:
        return self._import_result(self.session_manager.import_upload(text))

    def receive_draft_upload(self, ticket: int, text: str) -> FormImportResponse | None:
        imported = self.session_manager.receive_draft_upload(ticket, text)
        if imported is None:
            return None
        return self._import_result(imported)

    def _import_result(self, imported) -> FormImportResponse:
        return FormImportResponse(
            route=UploadRouteInfo(imported.route.value),
            board=BoardInfo.from_board(imported.draft),
            teams=[TeamInfo(**t.to_dict()) for t in imported.teams],
        )

    def reset(self) -> bool:
        self.session_manager.reset()
        logger.info("Session reset")
        return True
