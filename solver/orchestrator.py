# Orchestrator: orientation sets, branch fan-out, optional CP-SAT cross-check
from __future__ import annotations

import time
from typing import Any, Dict, List, Optional, Sequence, Tuple

import multiprocessing as mp

from config import CFG
from models import Field, Piece
from progress import (
    set_status, set_phase, start_branch, finish_branch,
    set_solutions_found, set_piece_count, set_message, log_attempt_detail,
)
from render import piece_letter
from solver.backtrack import Solution, orientation_sets, solve
from solver.cp_isolate import run_cp_sat_isolated
from solver.selection import BestTracker


# ---------- helpers ----------

# (first-piece orientation index, field after placing it)
Branch = Tuple[int, Field]


class _ProgressSink:
    """Accumulator wrapper that publishes the running count every ``every`` hits."""

    def __init__(self, inner, every: int):
        self.inner = inner
        self.every = max(1, int(every))
        self.count = 0
        self.best: Optional[int] = None

    def append(self, field: Field) -> None:
        self.inner.append(field)
        self._tick(1, field.count())

    def add_many(self, count: int, best: Optional[int]) -> None:
        self._tick(count, best, force=True)

    def _tick(self, n: int, score: Optional[int], force: bool = False) -> None:
        before = self.count
        self.count += n
        if score is not None and (self.best is None or score > self.best):
            self.best = score
        if force or self.count // self.every != before // self.every:
            set_solutions_found(self.count, self.best)


def _top_level_branches(start: Field, first: Sequence[Piece]) -> List[Branch]:
    return [(k, placed) for k, o in enumerate(first) for placed in start.place_iter(o)]


def _solve_branch(args: Tuple[Field, List[List[Piece]], bool]):
    """Pool worker: finish one top-level branch in a child process."""
    placed, rest, keep = args
    out: Any = [] if keep else BestTracker()
    if rest:
        solve(placed, rest, out)
    else:
        out.append(placed)
    return out


def _run_serial(branches: List[Branch], rest: List[List[Piece]], sink: _ProgressSink, label: str, n_variants: int) -> None:
    total = len(branches)
    for idx, (k, placed) in enumerate(branches):
        start_branch(idx, total, f"piece {label} variant {k + 1}/{n_variants}")
        before = sink.count
        if rest:
            solve(placed, rest, sink)
        else:
            sink.append(placed)
        set_solutions_found(sink.count, sink.best)
        finish_branch(idx, total, sink.count - before)


def _run_parallel(
    branches: List[Branch],
    rest: List[List[Piece]],
    keep: bool,
    workers: int,
    solutions: List[Field],
    tracker: Optional[BestTracker],
    sink: _ProgressSink,
) -> None:
    ctx = mp.get_context("spawn")
    total = len(branches)
    jobs = [(placed, rest, keep) for _k, placed in branches]
    with ctx.Pool(processes=min(workers, total)) as pool:
        # imap keeps branch order, so the merged list matches the serial run
        for idx, out in enumerate(pool.imap(_solve_branch, jobs)):
            if keep:
                solutions.extend(out)
                found = len(out)
                sink.add_many(found, max((f.count() for f in out), default=None))
            else:
                tracker.merge(out)
                found = out.count
                sink.add_many(found, out.best_score)
            finish_branch(idx, total, found)


def _cp_sat_check(solution: Solution, pieces: Sequence[Piece]) -> Dict[str, Any]:
    seconds = float(CFG.CP_SAT_SECONDS)
    set_phase("cp-sat")
    if CFG.CP_SAT_ISOLATE:
        ok, score, _best, reason, crash = run_cp_sat_isolated(solution.start, list(pieces), seconds)
    else:
        from solver.cp_sat import max_score_cp_sat
        ok, score, _best, reason = max_score_cp_sat(solution.start, pieces, seconds)
        crash = None

    if not ok:
        agrees = None
    elif score is None:
        agrees = solution.solution_count() == 0
    else:
        agrees = solution.solution_count() > 0 and score == solution.highest_score()

    verdict = {"ok": ok, "score": score, "reason": reason, "crash": crash, "agrees": agrees}
    log_attempt_detail("CP-SAT check", **verdict)
    if agrees is False:
        set_message(f"CP-SAT optimum {score} disagrees with enumeration ({solution.highest_score()})")
    return verdict


# ---------- public entrypoint ----------

def solve_orchestrator(
    start: Field,
    pieces: Sequence[Piece],
    *,
    workers: Optional[int] = None,
    keep_solutions: Optional[bool] = None,
    cp_sat_check: Optional[bool] = None,
) -> Solution:
    """Enumerate every complete configuration of ``pieces`` on ``start``.

    ``None`` arguments fall back to ``CFG``.  With ``keep_solutions`` false the
    configurations are reduced on the fly and only the count and the best
    ones are retained.
    """
    if not pieces:
        raise ValueError("at least one piece is required")

    workers = int(CFG.WORKERS if workers is None else workers)
    keep = bool(CFG.KEEP_SOLUTIONS if keep_solutions is None else keep_solutions)
    check = bool(CFG.CP_SAT_CHECK if cp_sat_check is None else cp_sat_check)

    t0 = time.time()
    set_status("Solving")
    set_piece_count(len(pieces))
    log_attempt_detail(
        "Run setup",
        field=f"{start.width}x{start.height}",
        pieces=len(pieces),
        start_score=start.count(),
        workers=workers,
        keep_solutions=int(keep),
        cp_sat_check=int(check),
    )

    try:
        set_phase("variants")
        variants = orientation_sets(pieces)
        log_attempt_detail(
            "Orientation sets",
            sizes=",".join(str(len(v)) for v in variants),
        )

        first, rest = variants[0], variants[1:]
        branches = _top_level_branches(start, first)
        set_phase("search", len(branches))

        solutions: List[Field] = []
        tracker = None if keep else BestTracker()
        sink = _ProgressSink(solutions if keep else tracker, CFG.PROGRESS_EVERY)

        parallel = workers > 1 and len(branches) > 1
        if parallel:
            _run_parallel(branches, rest, keep, workers, solutions, tracker, sink)
        else:
            _run_serial(branches, rest, sink, piece_letter(pieces[0].ident), len(first))
        set_solutions_found(sink.count, sink.best)

        solution = Solution(start=start, pieces=variants, solutions=solutions, tracker=tracker)
        solution.meta.update({
            "branches": len(branches),
            "workers": workers if parallel else 1,
            "streamed": not keep,
            "search_sec": round(time.time() - t0, 3),
        })
        log_attempt_detail(
            "Search finished",
            solutions=solution.solution_count(),
            highest_score=solution.highest_score(),
            best=len(solution.best_solutions()),
            duration=f"{solution.meta['search_sec']:.2f}s",
        )

        if check:
            solution.meta["cp_sat"] = _cp_sat_check(solution, pieces)
        return solution
    except Exception as e:
        set_status("Error")
        set_message(f"orchestrator exception: {type(e).__name__}: {e}")
        raise


__all__ = ["solve_orchestrator"]
