# solver/cp_sat.py — CP-SAT model of the best residual score
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

from ortools.sat.python import cp_model as _cp

from config import CFG
from models import Field, Piece, iter_anchors, stamp

# (orientation, covered field indices)
Option = Tuple[Piece, List[int]]


def build_options(start: Field, pieces: Sequence[Piece]) -> List[List[Option]]:
    """Every legal (orientation, anchor) of each piece on the start field."""
    opts: List[List[Option]] = []
    for piece in pieces:
        t: List[Option] = []
        # sorted so the model is identical from run to run
        for variant in sorted(piece.all_variants(), key=lambda v: (v.width, v.height, [c.value for c in v.cells])):
            for _x, _y, covered in iter_anchors(start, variant):
                t.append((variant, covered))
        opts.append(t)
    return opts


def max_score_cp_sat(
    start: Field,
    pieces: Sequence[Piece],
    max_seconds: Optional[float] = None,
) -> Tuple[bool, Optional[int], Optional[Field], Optional[str]]:
    """Highest residual score over all complete configurations.

    Returns ``(ok, score, field, reason)``.  ``ok`` means the answer is proven:
    either ``score``/``field`` are optimal, or ``score`` is None because no
    complete configuration exists.
    """
    if max_seconds is None:
        max_seconds = float(CFG.CP_SAT_SECONDS)

    options = build_options(start, pieces)
    for i, opts in enumerate(options):
        if not opts:
            return True, None, None, f"Proven infeasible: piece {i} has no legal placement"

    m = _cp.CpModel()
    n = len(pieces)

    # exactly one placement per piece
    p = [[m.NewBoolVar(f"p_{i}_{k}") for k in range(len(options[i]))] for i in range(n)]
    for i in range(n):
        m.Add(sum(p[i]) == 1)

    # no overlap
    cell_to_vars: Dict[int, List[_cp.IntVar]] = defaultdict(list)
    for i in range(n):
        for k, (_variant, covered) in enumerate(options[i]):
            for idx in covered:
                cell_to_vars[idx].append(p[i][k])
    for vars_here in cell_to_vars.values():
        if len(vars_here) > 1:
            m.AddAtMostOne(vars_here)

    # residual score = start score - covered score; minimise what gets covered
    covered_terms = []
    for i in range(n):
        for k, (_variant, covered) in enumerate(options[i]):
            weight = sum(start.cells[idx].score for idx in covered)
            if weight:
                covered_terms.append(weight * p[i][k])
    if covered_terms:
        m.Minimize(sum(covered_terms))

    solver = _cp.CpSolver()
    solver.parameters.max_time_in_seconds = float(max_seconds)
    solver.parameters.max_memory_in_mb = int(CFG.MAX_MEMORY_MB)
    solver.parameters.num_search_workers = max(1, int(CFG.WORKERS))
    solver.parameters.log_search_progress = False

    res = solver.Solve(m)

    if res in (_cp.OPTIMAL, _cp.FEASIBLE):
        best = start
        for i in range(n):
            for k, (variant, covered) in enumerate(options[i]):
                if solver.BooleanValue(p[i][k]):
                    best = stamp(best, variant, covered)
                    break
        if res == _cp.OPTIMAL:
            return True, best.count(), best, None
        return False, best.count(), best, "Stopped before proving optimality (timebox)"

    if res == _cp.INFEASIBLE:
        return True, None, None, "Proven infeasible: no complete configuration"
    if res == _cp.MODEL_INVALID:
        return False, None, None, "Model invalid (configuration error)"
    return False, None, None, "Stopped before solution (timebox)"


__all__ = ["build_options", "max_score_cp_sat"]
