from __future__ import annotations

import json
import logging
import os
import threading
import time
from pathlib import Path
from typing import Any, Dict, Optional

# One run at a time: variants -> search (one entry per top-level branch) -> cp-sat.
# The state is mirrored to a JSON file so another process can read it.

PROGRESS_LOCK = threading.Lock()

_LOG_DIR = Path(__file__).resolve().parent / "logs"
STATE_FILE = Path(os.environ.get("PROGRESS_STATE_FILE") or _LOG_DIR / "progress_state.json")
RUN_LOG_FILE = Path(os.environ.get("ATTEMPT_LOG_FILE") or _LOG_DIR / "solver_attempts.log")


def _init_logger() -> logging.Logger:
    logger = logging.getLogger("solver.attempt_log")
    logger.setLevel(logging.INFO)
    logger.propagate = False
    if logger.handlers:
        return logger
    try:
        RUN_LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(RUN_LOG_FILE, encoding="utf-8")
    except OSError:
        # read-only install: no run log
        return logger
    handler.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    logger.addHandler(handler)
    return logger


ATTEMPT_LOGGER = _init_logger()


def _initial(run_id: int) -> Dict[str, Any]:
    return {
        "status": "Idle",          # Idle | Solving | Solved | Error
        "phase": "",               # variants | search | cp-sat
        "branch": 0,               # top-level branches finished
        "branches": 0,             # top-level branches in the search
        "current": "",             # e.g. "piece A variant 3/8"
        "percent": 0.0,
        "solutions_found": 0,
        "best_score": None,
        "piece_count": 0,
        "elapsed_start": None,
        "elapsed": 0.0,
        "message": "",
        "done": False,
        "ok": None,
        "result_url": "",
        "run_id": run_id,
    }


PROGRESS: Dict[str, Any] = _initial(0)


def fmt_elapsed(seconds: float) -> str:
    m, s = divmod(int(max(0.0, float(seconds))), 60)
    if m == 0:
        return f"{s}s"
    h, m = divmod(m, 60)
    if h == 0:
        return f"{m}m {s}s"
    return f"{h}h {m}m {s}s"


def _log_locked(event: str, **fields: Any) -> None:
    if not ATTEMPT_LOGGER.handlers:
        return
    extras = " ".join(f"{k}={v}" for k, v in fields.items() if v is not None and v != "")
    if extras:
        ATTEMPT_LOGGER.info("%s | %s", event, extras)
    else:
        ATTEMPT_LOGGER.info("%s", event)


def _search_fields() -> Dict[str, Any]:
    return {
        "solutions": PROGRESS["solutions_found"],
        "best_score": PROGRESS["best_score"],
    }


def _save_locked() -> None:
    tmp = STATE_FILE.with_name(STATE_FILE.name + ".tmp")
    try:
        STATE_FILE.parent.mkdir(parents=True, exist_ok=True)
        with tmp.open("w", encoding="utf-8") as fh:
            json.dump(PROGRESS, fh, separators=(",", ":"))
        tmp.replace(STATE_FILE)
    except OSError:
        pass


def _touch_elapsed_locked() -> None:
    t0 = PROGRESS["elapsed_start"]
    if t0 is not None:
        PROGRESS["elapsed"] = time.time() - float(t0)


def read_state(path: Optional[Path] = None) -> Optional[Dict[str, Any]]:
    """Last state saved by whichever process is solving, or None."""
    try:
        with Path(path or STATE_FILE).open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, ValueError):
        return None
    return data if isinstance(data, dict) else None


def log_attempt_detail(event: str, **fields: Any) -> None:
    """Free-form ``event | key=value ...`` line in the run log."""
    with PROGRESS_LOCK:
        _log_locked(event, phase=PROGRESS["phase"], **fields)


# ---------- run lifecycle ----------

def reset() -> None:
    with PROGRESS_LOCK:
        PROGRESS.clear()
        PROGRESS.update(_initial(int(PROGRESS.get("run_id") or 0) + 1))
        _save_locked()


def start_timer() -> None:
    with PROGRESS_LOCK:
        PROGRESS["elapsed_start"] = time.time()
        PROGRESS["elapsed"] = 0.0
        _log_locked("Run started", run_id=PROGRESS["run_id"])
        _save_locked()


def set_phase(name: str, total: Optional[int] = None) -> None:
    """Enter ``name``; ``total`` is the branch count of a search phase."""
    with PROGRESS_LOCK:
        PROGRESS["phase"] = name
        PROGRESS["current"] = ""
        if total is not None:
            PROGRESS["branches"] = int(total)
            PROGRESS["branch"] = 0
            PROGRESS["percent"] = 0.0
        _touch_elapsed_locked()
        _log_locked(f"Phase {name}", branches=total, elapsed=fmt_elapsed(PROGRESS["elapsed"]))
        _save_locked()


def start_branch(index: int, total: int, label: str) -> None:
    with PROGRESS_LOCK:
        PROGRESS["current"] = label
        _log_locked("Branch started", branch=f"{index + 1}/{total}", choice=label, **_search_fields())
        _save_locked()


def finish_branch(index: int, total: int, found: int) -> None:
    """Record top-level branch ``index`` as done after it produced ``found`` configurations."""
    with PROGRESS_LOCK:
        PROGRESS["branch"] = index + 1
        PROGRESS["percent"] = 100.0 * (index + 1) / total if total else 100.0
        _touch_elapsed_locked()
        _log_locked("Branch finished", branch=f"{index + 1}/{total}", found=found, **_search_fields())
        _save_locked()


def set_solutions_found(n: int, best_score: Optional[int] = None) -> None:
    with PROGRESS_LOCK:
        PROGRESS["solutions_found"] = max(0, int(n))
        if best_score is not None:
            PROGRESS["best_score"] = int(best_score)
        _touch_elapsed_locked()
        _save_locked()


def set_done(ok: Optional[bool] = None, *, reason: Any = None) -> None:
    """Mark the run complete.

    ``ok`` picks ``Solved`` or ``Error``; without it a run that never failed is
    reported as solved. ``reason`` becomes the message.
    """
    with PROGRESS_LOCK:
        _touch_elapsed_locked()
        if ok is None:
            ok = PROGRESS["status"] != "Error"
        PROGRESS.update({
            "status": "Solved" if ok else "Error",
            "ok": bool(ok),
            "done": True,
            "percent": 100.0,
        })
        if reason is not None:
            PROGRESS["message"] = str(reason)
        _log_locked(
            "Run finished",
            status=PROGRESS["status"],
            elapsed=fmt_elapsed(PROGRESS["elapsed"]),
            message=PROGRESS["message"],
            **_search_fields(),
        )
        _save_locked()


# ---------- plain setters ----------

def _setter(key: str, convert):
    def setter(value: Any) -> None:
        with PROGRESS_LOCK:
            PROGRESS[key] = convert(value)
            _save_locked()
    setter.__name__ = f"set_{key}"
    return setter


set_status = _setter("status", str)
set_piece_count = _setter("piece_count", lambda n: max(0, int(n)))
set_elapsed = _setter("elapsed", lambda s: max(0.0, float(s)))
set_message = _setter("message", lambda m: "" if m is None else str(m))
set_result_url = _setter("result_url", lambda u: "" if u is None else str(u))


# ---------- snapshots for the UI ----------

def snapshot() -> Dict[str, Any]:
    with PROGRESS_LOCK:
        _touch_elapsed_locked()
        snap = {k: v for k, v in PROGRESS.items() if k != "elapsed_start"}
    snap["elapsed_str"] = fmt_elapsed(snap["elapsed"])
    return snap


def as_json() -> Dict[str, Any]:
    # alias used by /progress
    return snapshot()
