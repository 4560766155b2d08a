import json
import logging

import progress
from progress import (
    finish_branch, fmt_elapsed, log_attempt_detail, read_state, reset, set_done,
    set_phase, set_result_url, set_solutions_found, set_status, snapshot, start_branch,
)


def test_set_done_no_args_defaults_to_solved():
    reset()
    set_done()
    snap = snapshot()
    assert snap["status"] == "Solved"
    assert snap["percent"] == 100.0
    assert snap["done"] is True
    assert snap["ok"] is True
    assert snap["result_url"] == ""


def test_set_done_failure_keeps_reason():
    reset()
    set_status("Solving")
    set_done(False, reason="boom")
    snap = snapshot()
    assert snap["status"] == "Error"
    assert snap["percent"] == 100.0
    assert snap["message"] == "boom"
    assert snap["done"] is True
    assert snap["ok"] is False


def test_set_done_without_flag_keeps_error():
    reset()
    set_status("Error")
    set_done()
    snap = snapshot()
    assert snap["status"] == "Error"
    assert snap["ok"] is False


def test_set_result_url_tracks_navigation_target():
    reset()
    set_result_url("/foo")
    snap = snapshot()
    assert snap["result_url"] == "/foo"
    assert snap["done"] is False


def test_reset_increments_run_identifier():
    reset()
    first = snapshot()["run_id"]
    reset()
    second = snapshot()["run_id"]
    assert isinstance(first, int)
    assert isinstance(second, int)
    assert second == first + 1


def test_solutions_found_keeps_last_best_score():
    reset()
    set_solutions_found(10, 7)
    set_solutions_found(12)
    snap = snapshot()
    assert snap["solutions_found"] == 12
    assert snap["best_score"] == 7


def test_branches_drive_percent():
    reset()
    set_phase("search", 4)
    start_branch(0, 4, "piece A variant 1/2")
    assert snapshot()["current"] == "piece A variant 1/2"
    finish_branch(0, 4, 3)
    snap = snapshot()
    assert snap["phase"] == "search"
    assert (snap["branch"], snap["branches"]) == (1, 4)
    assert snap["percent"] == 25.0

    set_phase("cp-sat")
    snap = snapshot()
    assert snap["current"] == ""
    assert snap["branches"] == 4


def test_state_file_is_readable_from_outside(tmp_path, monkeypatch):
    state_path = tmp_path / "state.json"
    monkeypatch.setattr(progress, "STATE_FILE", state_path)

    reset()
    set_phase("search", 9)
    set_solutions_found(5, 2)

    state = read_state(state_path)
    assert state["phase"] == "search"
    assert state["branches"] == 9
    assert state["solutions_found"] == 5
    assert json.loads(state_path.read_text(encoding="utf-8"))["best_score"] == 2


def test_read_state_without_file(tmp_path):
    assert read_state(tmp_path / "missing.json") is None
    (tmp_path / "junk.json").write_text("[1, 2]", encoding="utf-8")
    assert read_state(tmp_path / "junk.json") is None


def test_run_log_lines_carry_search_data(tmp_path):
    log_path = tmp_path / "run.log"
    handler = logging.FileHandler(log_path, encoding="utf-8")
    logger = logging.getLogger("solver.attempt_log")
    logger.addHandler(handler)
    try:
        reset()
        set_phase("search", 2)
        set_solutions_found(5, 7)
        finish_branch(0, 2, 5)
        log_attempt_detail("CP-SAT check", score=3, reason=None)
    finally:
        logger.removeHandler(handler)
        handler.close()

    lines = log_path.read_text(encoding="utf-8").splitlines()
    assert "Phase search | branches=2 elapsed=0s" in lines
    assert "Branch finished | branch=1/2 found=5 solutions=5 best_score=7" in lines
    assert "CP-SAT check | phase=search score=3" in lines


def test_fmt_elapsed():
    assert fmt_elapsed(0.4) == "0s"
    assert fmt_elapsed(59) == "59s"
    assert fmt_elapsed(61) == "1m 1s"
    assert fmt_elapsed(3723) == "1h 2m 3s"
    assert fmt_elapsed(-5) == "0s"
