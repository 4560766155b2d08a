# solver/selection.py
from typing import Iterable, List, Optional

from models import Field


def highest_score(solutions: Iterable[Field]) -> int:
    return max((f.count() for f in solutions), default=0)


def best_solutions(solutions: List[Field]) -> List[Field]:
    """Every configuration whose residual score equals the highest one."""
    top = highest_score(solutions)
    return [f for f in solutions if f.count() == top]


class BestTracker:
    """Streaming max-score reduction; drop-in ``out`` accumulator for ``solve``.

    Keeps the number of complete configurations seen and the ones at the
    current highest score, in discovery order.
    """

    def __init__(self) -> None:
        self.count = 0
        self.best_score: Optional[int] = None
        self.best: List[Field] = []

    def append(self, field: Field) -> None:
        self.count += 1
        score = field.count()
        if self.best_score is None or score > self.best_score:
            self.best_score = score
            self.best = [field]
        elif score == self.best_score:
            self.best.append(field)

    def merge(self, other: "BestTracker") -> None:
        self.count += other.count
        if other.best_score is None:
            return
        if self.best_score is None or other.best_score > self.best_score:
            self.best_score = other.best_score
            self.best = list(other.best)
        elif other.best_score == self.best_score:
            self.best.extend(other.best)

    def highest_score(self) -> int:
        return 0 if self.best_score is None else self.best_score

    def __len__(self) -> int:
        return self.count
