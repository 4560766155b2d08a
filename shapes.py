# shapes.py — text formats for fields and pieces
from __future__ import annotations

from typing import Dict, List, Optional

from models import BLOCKED, Field, FieldCell, Free, Piece, PieceCell

_PIECE_CHARS: Dict[str, PieceCell] = {
    "X": PieceCell.OCCUPIED,
    " ": PieceCell.FREE,
}


class ShapeParseError(ValueError):
    """Malformed field or piece text."""

    def __init__(self, message: str, *, line: Optional[int] = None, column: Optional[int] = None):
        self.line = line
        self.column = column
        where = ""
        if line is not None:
            where = f" (line {line}" + (f", column {column}" if column is not None else "") + ")"
        super().__init__(f"{message}{where}")


def _field_cell(ch: str) -> Optional[FieldCell]:
    if ch == " ":
        return BLOCKED
    if ch == "-":
        return Free(0)
    if "1" <= ch <= "9":
        return Free(int(ch))
    return None


def parse_field(text: str) -> Field:
    """Parse a field block: space = blocked, ``-`` = free, ``1``-``9`` = scored."""
    lines = text.splitlines()
    if not lines:
        raise ShapeParseError("field text has no lines")
    width = max(len(line) for line in lines)
    if width == 0:
        raise ShapeParseError("field text has no cells")

    cells: List[FieldCell] = [BLOCKED] * (width * len(lines))
    for y, line in enumerate(lines):
        for x, ch in enumerate(line):
            cell = _field_cell(ch)
            if cell is None:
                raise ShapeParseError(f"unexpected character {ch!r} in field", line=y + 1, column=x + 1)
            cells[x + y * width] = cell
    return Field(width, len(lines), cells)


def parse_piece(text: str, ident: int = 0, *, first_line: int = 1) -> Piece:
    """Parse one piece block of ``X`` and spaces; short lines are padded free."""
    lines = text.splitlines()
    if not lines:
        raise ShapeParseError("a piece needs at least one line", line=first_line)
    width = max(len(line) for line in lines)
    if width == 0:
        raise ShapeParseError("piece has no cells", line=first_line)

    cells: List[PieceCell] = [PieceCell.FREE] * (width * len(lines))
    for y, line in enumerate(lines):
        for x, ch in enumerate(line):
            cell = _PIECE_CHARS.get(ch)
            if cell is None:
                raise ShapeParseError(
                    f"unexpected character {ch!r} in piece", line=first_line + y, column=x + 1
                )
            cells[x + y * width] = cell
    return Piece(ident, width, len(lines), tuple(cells))


def parse_pieces(text: str) -> List[Piece]:
    """Parse blank-line separated piece blocks; identifiers follow input order."""
    pieces: List[Piece] = []
    current: List[str] = []
    start = 1

    def _flush() -> None:
        pieces.append(parse_piece("\n".join(current), len(pieces), first_line=start))

    for lineno, line in enumerate(text.splitlines(), start=1):
        if line == "":
            if not current:
                raise ShapeParseError("pieces text contains two empty lines", line=lineno)
            _flush()
            current = []
            start = lineno + 1
        else:
            current.append(line)

    if current:
        _flush()
    if not pieces:
        raise ShapeParseError("pieces text defines no piece")
    return pieces


__all__ = ["ShapeParseError", "parse_field", "parse_piece", "parse_pieces"]
