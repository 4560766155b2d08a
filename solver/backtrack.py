# solver/backtrack.py — exhaustive depth-first placement search
from __future__ import annotations

from dataclasses import dataclass, field as dc_field
from typing import Any, Dict, List, Optional, Sequence

from models import Field, Piece
from solver.selection import BestTracker, best_solutions, highest_score


def solve(state: Field, remaining: Sequence[Sequence[Piece]], out) -> None:
    """Append every complete configuration reachable from ``state`` to ``out``.

    ``remaining`` holds one orientation list per piece still to place, in
    placement order.  ``out`` only needs an ``append`` method.  The only
    pruning is the overlap check done while enumerating placements.
    """
    if not remaining:
        raise ValueError("solve() needs at least one piece to place")

    top = remaining[0]
    rest = remaining[1:]

    for piece in top:
        for placement in state.place_iter(piece):
            if not rest:
                out.append(placement)
            else:
                solve(placement, rest, out)


def orientation_sets(pieces: Sequence[Piece]) -> List[List[Piece]]:
    return [list(p.all_variants()) for p in pieces]


@dataclass
class Solution:
    start: Field
    pieces: List[List[Piece]]
    solutions: List[Field] = dc_field(default_factory=list)
    # set instead of ``solutions`` when the run streamed the reduction
    tracker: Optional[BestTracker] = None
    meta: Dict[str, Any] = dc_field(default_factory=dict)

    @classmethod
    def new(cls, start: Field, pieces: Sequence[Piece]) -> "Solution":
        variants = orientation_sets(pieces)
        found: List[Field] = []
        solve(start, variants, found)
        return cls(start=start, pieces=variants, solutions=found)

    def solution_count(self) -> int:
        if self.tracker is not None:
            return self.tracker.count
        return len(self.solutions)

    def highest_score(self) -> int:
        if self.tracker is not None:
            return self.tracker.highest_score()
        return highest_score(self.solutions)

    def best_solutions(self) -> List[Field]:
        if self.tracker is not None:
            return list(self.tracker.best)
        return best_solutions(self.solutions)
