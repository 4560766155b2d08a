import pytest

from models import BLOCKED, Free, PieceCell
from shapes import ShapeParseError, parse_field, parse_piece, parse_pieces


def test_parse_field_cells_and_padding():
    field = parse_field("-1\n 9-\n")
    assert (field.width, field.height) == (3, 2)
    assert field.cells == [Free(0), Free(1), BLOCKED, BLOCKED, Free(9), Free(0)]


def test_parse_field_rejects_unknown_character():
    with pytest.raises(ShapeParseError) as exc:
        parse_field("--\n-0")
    assert exc.value.line == 2
    assert exc.value.column == 2


def test_parse_field_rejects_empty_text():
    with pytest.raises(ShapeParseError):
        parse_field("")


def test_parse_piece_pads_short_lines():
    piece = parse_piece("X\nXXX\n X", 5)
    assert (piece.ident, piece.width, piece.height) == (5, 3, 3)
    assert piece.occupied_count() == 5
    assert piece.at(1, 0) is PieceCell.FREE
    assert piece.at(2, 2) is PieceCell.FREE


def test_parse_piece_rejects_unknown_character():
    with pytest.raises(ShapeParseError):
        parse_piece("XO")


def test_parse_pieces_assigns_sequential_identifiers():
    pieces = parse_pieces("XX\n\nX\nX\n\nX X\nXXX\n")
    assert [p.ident for p in pieces] == [0, 1, 2]
    assert [(p.width, p.height) for p in pieces] == [(2, 1), (1, 2), (3, 2)]


def test_parse_pieces_rejects_two_blank_lines():
    with pytest.raises(ShapeParseError, match="two empty lines"):
        parse_pieces("XX\n\n\nX")


def test_parse_pieces_error_points_at_piece_line():
    with pytest.raises(ShapeParseError) as exc:
        parse_pieces("XX\n\nX\nXY")
    assert exc.value.line == 4


def test_parse_pieces_requires_a_piece():
    with pytest.raises(ShapeParseError):
        parse_pieces("")


def test_parse_error_is_a_value_error():
    assert issubclass(ShapeParseError, ValueError)
