"""Board text format - model, grammar, assembly, validation and serialization."""

from .model import (
    Clue,
    Category,
    Board,
    DraftBoard,
    Team,
    CellId,
    CellOutOfRangeError,
    FormDraftSnapshot,
    CATEGORY_COUNT,
    CLUES_PER_CATEGORY,
    VALUE_LADDER,
    DRAFT_MARKER,
    ladder_value,
)
from .grammar import RawTree, RawCategory, RawRow, LineKind, extract, parse_title, tokenize
from .assembler import (
    ClueboardError,
    BoardAssemblyError,
    MediaRef,
    assemble,
    assemble_strict,
    image_key,
    resolve_media,
    pad_for_form,
)
from .validation import (
    UploadKind,
    UploadRoute,
    RejectionReason,
    PlayVerdict,
    PlayRejected,
    classify_upload,
    route_upload,
    validate_for_play,
)
from .serializer import serialize_game, serialize_draft, export_filename, format_timestamp

__all__ = [
    "Clue",
    "Category",
    "Board",
    "DraftBoard",
    "Team",
    "CellId",
    "CellOutOfRangeError",
    "FormDraftSnapshot",
    "CATEGORY_COUNT",
    "CLUES_PER_CATEGORY",
    "VALUE_LADDER",
    "DRAFT_MARKER",
    "ladder_value",
    "RawTree",
    "RawCategory",
    "RawRow",
    "LineKind",
    "extract",
    "parse_title",
    "tokenize",
    "ClueboardError",
    "BoardAssemblyError",
    "MediaRef",
    "assemble",
    "assemble_strict",
    "image_key",
    "resolve_media",
    "pad_for_form",
    "UploadKind",
    "UploadRoute",
    "RejectionReason",
    "PlayVerdict",
    "PlayRejected",
    "classify_upload",
    "route_upload",
    "validate_for_play",
    "serialize_game",
    "serialize_draft",
    "export_filename",
    "format_timestamp",
]
