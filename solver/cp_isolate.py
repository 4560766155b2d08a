# solver/cp_isolate.py
import multiprocessing as mp
import queue
import traceback
from typing import List, Optional, Tuple

from models import Field, Piece


# Worker must be top-level (picklable on Windows spawn)
def _solve_worker(q, start: Field, pieces: List[Piece], max_seconds: float):
    try:
        from solver.cp_sat import max_score_cp_sat  # import inside child
        ok, score, best, reason = max_score_cp_sat(start, pieces, max_seconds)
        q.put(("ok", ok, score, best, reason))
    except MemoryError:
        q.put(("err", False, None, None, "Child ran out of memory"))
    except Exception as e:
        q.put(("exc", False, None, None, f"{e}\n{traceback.format_exc()}"))


def run_cp_sat_isolated(
    start: Field, pieces: List[Piece], max_seconds: float
) -> Tuple[bool, Optional[int], Optional[Field], Optional[str], Optional[str]]:
    """
    Returns (ok, score, field, reason, crash_note).
    crash_note is non-empty only if the child crashed/was killed/timed out.
    """
    ctx = mp.get_context("spawn")  # safest on Windows
    q = ctx.Queue()
    p = ctx.Process(target=_solve_worker, args=(q, start, list(pieces), float(max_seconds)))
    p.daemon = True
    p.start()

    # Allow a small buffer beyond model time for teardown
    timeout = float(max_seconds) + 5.0
    try:
        tag, ok, score, best, reason = q.get(timeout=timeout)
    except queue.Empty:
        tag = None
    p.join(2.0)

    if tag is None:
        if p.is_alive():
            p.terminate()
            p.join(2.0)
            return False, None, None, "Stopped before solution (timebox)", "killed: timeout"
        if p.exitcode not in (0, None):
            return False, None, None, f"Stopped before solution (child exit {p.exitcode})", "child crashed"
        return False, None, None, "No result from child process", "no-result"

    if tag == "ok":
        return ok, score, best, reason, None
    return False, None, None, reason, None
