# render.py — text and SVG views of fields and pieces
import random
from typing import Dict, List, Tuple

from models import Blocked, Field, FieldCell, OccupiedBy, Piece, PieceCell


def piece_letter(ident: int) -> str:
    return chr(ord("A") + ident)


def _field_char(cell: FieldCell) -> str:
    if isinstance(cell, Blocked):
        return " "
    if isinstance(cell, OccupiedBy):
        return piece_letter(cell.piece)
    if cell.score == 0:
        return "-"
    return str(cell.score)


def render_field(field: Field) -> str:
    rows = []
    for y in range(field.height):
        row = field.cells[y * field.width:(y + 1) * field.width]
        rows.append("".join(_field_char(c) for c in row))
    return "\n".join(rows)


def render_piece(piece: Piece) -> str:
    rows = []
    for y in range(piece.height):
        row = piece.cells[y * piece.width:(y + 1) * piece.width]
        rows.append("".join("X" if c is PieceCell.OCCUPIED else " " for c in row))
    return "\n".join(rows)


def _color(name: str) -> str:
    # deterministic per letter; str hash() is salted per process
    random.seed(sum(ord(ch) * 131 ** i for i, ch in enumerate(name)) & 0xFFFFFFFF)
    r = random.randint(40, 200)
    g = random.randint(40, 200)
    b = random.randint(40, 200)
    return f"rgb({r},{g},{b})"


def render_result(field: Field, scale: int = 40) -> Tuple[str, str]:
    """Return ``(svg, legend_html)`` for one field."""
    palette: Dict[str, str] = {}
    for cell in field.cells:
        if isinstance(cell, OccupiedBy):
            name = piece_letter(cell.piece)
            palette.setdefault(name, _color(name))

    svg_w = field.width * scale + 2
    svg_h = field.height * scale + 2

    rects: List[str] = []
    for y in range(field.height):
        for x in range(field.width):
            cell = field.at(x, y)
            px = x * scale + 1
            py = y * scale + 1
            if isinstance(cell, Blocked):
                fill, label = "#444", ""
            elif isinstance(cell, OccupiedBy):
                label = piece_letter(cell.piece)
                fill = palette[label]
            else:
                fill, label = "white", (str(cell.score) if cell.score else "")
            rects.append(
                f'<rect x="{px}" y="{py}" width="{scale}" height="{scale}" fill="{fill}" stroke="black" stroke-width="1"/>'
            )
            if label:
                rects.append(
                    f'<text x="{px + scale // 2}" y="{py + scale // 2 + 5}" font-size="14" '
                    f'text-anchor="middle" fill="black">{label}</text>'
                )
    border = f'<rect x="1" y="1" width="{svg_w-2}" height="{svg_h-2}" fill="none" stroke="black" stroke-width="2"/>'
    svg = (
        f'<svg class="layout-svg" xmlns="http://www.w3.org/2000/svg" '
        f'width="{svg_w}" height="{svg_h}" '
        f'viewBox="0 0 {svg_w} {svg_h}" preserveAspectRatio="xMinYMin meet">'
        f'{"".join(rects)}{border}</svg>'
    )

    return svg, _legend(palette)


def _legend(palette: Dict[str, str]) -> str:
    return "".join(f"<li><span class='swatch' style='background:{c}'></span>{n}</li>" for n, c in sorted(palette.items()))


def render_results(fields: List[Field], scale: int = 40) -> Tuple[List[str], str]:
    """SVGs for several fields sharing one legend."""
    svgs: List[str] = []
    palette: Dict[str, str] = {}
    for f in fields:
        svgs.append(render_result(f, scale)[0])
        for cell in f.cells:
            if isinstance(cell, OccupiedBy):
                name = piece_letter(cell.piece)
                palette.setdefault(name, _color(name))
    return svgs, _legend(palette)


__all__ = ["piece_letter", "render_field", "render_piece", "render_result", "render_results"]
