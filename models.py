# models.py — cells, pieces, fields and placement enumeration
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Set, Tuple, Union


class PieceCell(Enum):
    OCCUPIED = "X"
    FREE = " "


@dataclass(frozen=True)
class Blocked:
    pass


@dataclass(frozen=True)
class OccupiedBy:
    piece: int  # identifier of the covering piece


@dataclass(frozen=True)
class Free:
    score: int = 0


FieldCell = Union[Blocked, OccupiedBy, Free]

BLOCKED = Blocked()


@dataclass(frozen=True)
class Piece:
    """Rigid occupancy bitmap, row-major (``cells[x + y * width]``)."""

    ident: int
    width: int
    height: int
    cells: Tuple[PieceCell, ...]

    def at(self, x: int, y: int) -> PieceCell:
        return self.cells[x + y * self.width]

    def occupied_count(self) -> int:
        return sum(1 for c in self.cells if c is PieceCell.OCCUPIED)

    def flipped_horizontally(self) -> "Piece":
        # row y comes from row height-1-y
        cells = tuple(
            self.at(x, self.height - y - 1)
            for y in range(self.height)
            for x in range(self.width)
        )
        return Piece(self.ident, self.width, self.height, cells)

    def flipped_vertically(self) -> "Piece":
        # column x comes from column width-1-x
        cells = tuple(
            self.at(self.width - x - 1, y)
            for y in range(self.height)
            for x in range(self.width)
        )
        return Piece(self.ident, self.width, self.height, cells)

    def transposed(self) -> "Piece":
        cells = tuple(
            self.at(y, x)
            for y in range(self.width)
            for x in range(self.height)
        )
        return Piece(self.ident, self.height, self.width, cells)

    def all_variants(self) -> Set["Piece"]:
        """Distinct orientations under flips and transpose (at most 8).

        The result is a set: callers must not depend on its iteration order.
        """
        variants: Set[Piece] = set()
        for start in (self, self.transposed()):
            vert = start.flipped_vertically()
            variants.add(start)
            variants.add(start.flipped_horizontally())
            variants.add(vert)
            variants.add(vert.flipped_horizontally())
        return variants


@dataclass
class Field:
    """Target grid, row-major (``cells[x + y * width]``).

    Placement never mutates a field; every placement yields a copy.
    """

    width: int
    height: int
    cells: List[FieldCell]

    def at(self, x: int, y: int) -> FieldCell:
        return self.cells[x + y * self.width]

    def copy(self) -> "Field":
        return Field(self.width, self.height, list(self.cells))

    def count(self) -> int:
        """Residual score: the sum of scores of cells still free."""
        return sum(c.score for c in self.cells if isinstance(c, Free))

    def place_iter(self, piece: Piece) -> Iterator["Field"]:
        return iter_placements(self, piece)


# ---------------- placement enumeration ----------------

def _stamp_indices(field: Field, piece: Piece, x: int, y: int) -> Optional[List[int]]:
    """Field indices the piece covers at anchor (x, y), or None on collision."""
    covered: List[int] = []
    for py in range(piece.height):
        row = (y + py) * field.width + x
        for px in range(piece.width):
            if piece.cells[px + py * piece.width] is not PieceCell.OCCUPIED:
                continue
            idx = row + px
            if not isinstance(field.cells[idx], Free):
                return None
            covered.append(idx)
    return covered


def iter_anchors(field: Field, piece: Piece) -> Iterator[Tuple[int, int, List[int]]]:
    """Yield ``(x, y, covered_indices)`` for every legal anchor, row-major."""
    if piece.width <= 0 or piece.height <= 0 or field.width <= 0 or field.height <= 0:
        return
    if piece.width > field.width or piece.height > field.height:
        return
    for y in range(field.height - piece.height + 1):
        for x in range(field.width - piece.width + 1):
            covered = _stamp_indices(field, piece, x, y)
            if covered is not None:
                yield x, y, covered


def stamp(field: Field, piece: Piece, covered: List[int]) -> Field:
    placed = field.copy()
    tag = OccupiedBy(piece.ident)
    for idx in covered:
        placed.cells[idx] = tag
    return placed


def iter_placements(field: Field, piece: Piece) -> Iterator[Field]:
    """Every field obtained by placing ``piece`` on ``field`` without overlap."""
    for _x, _y, covered in iter_anchors(field, piece):
        yield stamp(field, piece, covered)


__all__ = [
    "PieceCell", "Blocked", "OccupiedBy", "Free", "FieldCell", "BLOCKED",
    "Piece", "Field", "iter_anchors", "iter_placements", "stamp",
]
