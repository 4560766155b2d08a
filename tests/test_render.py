from models import Field, Free, OccupiedBy, BLOCKED
from render import piece_letter, render_field, render_piece, render_result, render_results
from shapes import parse_field, parse_piece


def test_render_field_round_trips_text():
    text = "-12\n 9-\n---"
    assert render_field(parse_field(text)) == text


def test_render_field_shows_piece_letters():
    field = Field(3, 1, [OccupiedBy(0), OccupiedBy(2), BLOCKED])
    assert render_field(field) == "AC "


def test_render_piece():
    assert render_piece(parse_piece("X \nXX")) == "X \nXX"
    assert piece_letter(1) == "B"


def test_render_result_svg_and_legend():
    field = Field(2, 1, [OccupiedBy(1), Free(7)])
    svg, legend = render_result(field, scale=10)
    assert svg.startswith("<svg")
    assert 'width="22"' in svg
    assert ">B</text>" in svg
    assert ">7</text>" in svg
    assert legend.count("<li>") == 1


def test_render_results_merges_legends():
    a = Field(1, 1, [OccupiedBy(0)])
    b = Field(1, 1, [OccupiedBy(1)])
    svgs, legend = render_results([a, b])
    assert len(svgs) == 2
    assert legend.count("<li>") == 2
    # colours are stable per letter
    assert render_result(a)[1] in legend
