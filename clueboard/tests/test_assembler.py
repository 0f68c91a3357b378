"""
Tests for the board assembler.

Tests:
- Structural assembly of drafts
- Strict assembly and ladder values
- Image references
- Padding drafts for the form
- Board invariants that keep it writable as game text
"""

import pytest

from ..board_format.assembler import (
    BoardAssemblyError,
    assemble,
    assemble_strict,
    image_key,
    pad_for_form,
    resolve_media,
)
from ..board_format.grammar import extract
from ..board_format.model import Board, Category, CellOutOfRangeError, Clue, DraftBoard, VALUE_LADDER
from .conftest import make_game_text, replace_clue


class TestAssemble:
    """Tests for structural assembly."""

    def test_values_parsed(self):
        draft = assemble(extract("Category: A\n250|q|a\n"))
        assert draft.categories[0].clues[0].value == 250

    def test_no_padding(self):
        draft = assemble(extract("Title: X\nCategory: A\n100|q|a\n"))
        assert len(draft.categories) == 1
        assert len(draft.categories[0].clues) == 1

    def test_no_truncation(self):
        text = "Category: A\n" + "".join(f"{n}|q|a\n" for n in range(1, 8))
        draft = assemble(extract(text))
        assert len(draft.categories[0].clues) == 7

    def test_missing_title(self):
        assert assemble(extract("Category: A\n")).title == ""

    def test_draft_scenario(self):
        text = "[JEOPARDY DRAFT]\nTitle: X\nTeams: A, B\n\nCategory: C1\n100|q|a\n"
        raw = extract(text)
        draft = assemble(raw)
        assert raw.teams == ["A", "B"]
        assert len(draft.categories) == 1
        assert draft.categories[0].clues[0].question == "q"


class TestAssembleStrict:
    """Tests for strict assembly."""

    def test_complete_board(self, game_text, board):
        assert assemble_strict(extract(game_text)) == board

    def test_values_come_from_ladder(self):
        text = make_game_text().replace("100|Rivers", "999|Rivers")
        built = assemble_strict(extract(text))
        values = tuple(c.value for c in built.categories[0].clues)
        assert values == VALUE_LADDER

    def test_too_few_categories(self):
        text = make_game_text().split("Category: Islands")[0]
        with pytest.raises(BoardAssemblyError) as exc_info:
            assemble_strict(extract(text))
        assert any("categories" in p for p in exc_info.value.problems)

    def test_short_category(self):
        with pytest.raises(BoardAssemblyError) as exc_info:
            assemble_strict(extract(make_game_text(short_category=2)))
        assert any("Capitals" in p for p in exc_info.value.problems)

    def test_empty_answer_not_counted(self):
        text = make_game_text().replace("|Rivers answer 3", "|")
        with pytest.raises(BoardAssemblyError):
            assemble_strict(extract(text))

    def test_extra_categories_ignored(self, board):
        text = make_game_text() + "Category: Extra\n100|q|a\n"
        assert assemble_strict(extract(text)) == board


class TestImages:
    """Tests for the image reference convention."""

    def test_image_key(self):
        assert image_key("<img>bobby") == "bobby"
        assert image_key("  <img>  bobby ") == "bobby"
        assert image_key("bobby") is None

    def test_question_and_answer_directories_differ(self):
        question = resolve_media("<img>bobby", is_answer=False)
        answer = resolve_media("<img>bobby", is_answer=True)
        assert question.is_image and answer.is_image
        assert question.value == "images/questions/bobby.png"
        assert answer.value == "images/answers/bobby.png"

    def test_plain_text(self):
        media = resolve_media("Nile", is_answer=True)
        assert media.kind == "text"
        assert media.value == "Nile"


class TestPadForForm:
    """Tests for fitting drafts into the 5x5 form."""

    def test_pads_to_five_by_five(self, partial_draft):
        padded = pad_for_form(partial_draft)
        assert len(padded.categories) == 5
        assert all(len(c.clues) == 5 for c in padded.categories)
        assert padded.categories[0].clues[0].answer == "Nile"
        assert padded.categories[4].name == ""

    def test_values_follow_ladder(self, partial_draft):
        padded = pad_for_form(partial_draft)
        assert tuple(c.value for c in padded.categories[1].clues) == VALUE_LADDER

    def test_truncates_extras(self):
        text = make_game_text() + "Category: Extra\n100|q|a\n"
        padded = pad_for_form(assemble(extract(text)))
        assert [c.name for c in padded.categories][-1] == "Islands"

    def test_empty_draft(self):
        padded = pad_for_form(DraftBoard())
        assert padded.title == ""
        assert len(padded.categories) == 5


class TestBoardInvariants:
    """Tests for what a Board refuses to hold."""

    def test_off_ladder_value(self, board):
        category = board.categories[0].with_clue(0, Clue(value=150, question="q", answer="a"))
        with pytest.raises(ValueError, match="worth 150, expected 100"):
            Board(title="Geo", categories=(category,) + board.categories[1:])

    @pytest.mark.parametrize("question, answer", [
        ("q\nCategory: Oops", "a"),
        ("q", "a\r\nb"),
        (" q", "a"),
        ("q", "a "),
        ("a|b", "a"),
    ])
    def test_unwritable_clue(self, board, question, answer):
        with pytest.raises(ValueError):
            replace_clue(board, 2, 3, question, answer)

    def test_pipe_in_answer_allowed(self, board):
        built = replace_clue(board, 2, 3, "q", "a|b")
        assert built.clue_at(3, 2).answer == "a|b"

    @pytest.mark.parametrize("title", ["Geo\nCategory: Oops", "Geo\r", " Geo"])
    def test_unwritable_title(self, board, title):
        with pytest.raises(ValueError, match="Board title"):
            Board(title=title, categories=board.categories)

    def test_multi_line_category_name(self, board):
        renamed = Category(name="Rivers\nTitle: X", clues=board.categories[0].clues)
        with pytest.raises(ValueError, match="name"):
            Board(title="Geo", categories=(renamed,) + board.categories[1:])

    def test_cell_outside_board(self, board):
        with pytest.raises(CellOutOfRangeError, match=r"Cell \(5, 0\)"):
            board.clue_at(5, 0)
        with pytest.raises(IndexError):
            board.clue_at(0, -1)
