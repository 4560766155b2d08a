import queue

import pytest

cp_sat = pytest.importorskip("solver.cp_sat")

from render import render_field
from shapes import parse_field, parse_piece, parse_pieces
from solver.backtrack import Solution

max_score_cp_sat = cp_sat.max_score_cp_sat


@pytest.mark.parametrize(
    "field_text,pieces_text",
    [
        ("11\n11", "X"),
        ("19\n11", "XX"),
        ("123\n456\n789", "XX\n X\n\nXX"),
        ("1-2 \n-3-9\n4-5-", "XXX\n\nX\nX"),
    ],
)
def test_cp_sat_optimum_matches_enumeration(field_text, pieces_text):
    start = parse_field(field_text)
    pieces = parse_pieces(pieces_text)

    ok, score, best, reason = max_score_cp_sat(start, pieces, max_seconds=10.0)
    expected = Solution.new(start, pieces)

    assert ok, reason
    assert score == expected.highest_score()
    assert render_field(best) in {render_field(f) for f in expected.best_solutions()}


def test_cp_sat_reports_piece_without_placement():
    ok, score, best, reason = max_score_cp_sat(parse_field("--"), [parse_piece("XXX")], max_seconds=5.0)
    assert ok
    assert score is None and best is None
    assert "infeasible" in reason


def test_cp_sat_reports_infeasible_combination():
    # each piece fits alone, but not both together
    ok, score, best, reason = max_score_cp_sat(parse_field("---"), parse_pieces("XX\n\nXX"), max_seconds=5.0)
    assert ok
    assert score is None
    assert reason == "Proven infeasible: no complete configuration"


def test_build_options_counts_legal_anchors():
    options = cp_sat.build_options(parse_field("--\n--"), parse_pieces("XX\n\nX"))
    assert [len(o) for o in options] == [4, 4]


def test_run_cp_sat_isolated_returns_child_result():
    from solver.cp_isolate import run_cp_sat_isolated

    ok, score, best, reason, crash = run_cp_sat_isolated(parse_field("11\n11"), [parse_piece("X")], 10.0)
    assert crash is None
    assert ok, reason
    assert score == 3
    assert best.count() == 3


def test_cp_sat_timebox_reports_not_ok(monkeypatch):
    monkeypatch.setattr(cp_sat._cp.CpSolver, "Solve", lambda self, model: cp_sat._cp.UNKNOWN)

    ok, score, best, reason = max_score_cp_sat(parse_field("11\n11"), [parse_piece("X")], max_seconds=0.001)
    assert not ok
    assert score is None and best is None
    assert reason == "Stopped before solution (timebox)"


def test_cp_sat_feasible_but_unproven_keeps_incumbent(monkeypatch):
    monkeypatch.setattr(cp_sat._cp.CpSolver, "Solve", lambda self, model: cp_sat._cp.FEASIBLE)
    monkeypatch.setattr(cp_sat._cp.CpSolver, "BooleanValue", lambda self, literal: True)

    ok, score, best, reason = max_score_cp_sat(parse_field("11\n11"), [parse_piece("X")], max_seconds=0.001)
    assert not ok
    assert score == 3 and best.count() == 3
    assert "timebox" in reason


class _HungProcess:
    def __init__(self, target=None, args=()):
        self.daemon = False
        self.alive = False
        self.terminated = False
        self.exitcode = None

    def start(self):
        self.alive = True

    def join(self, timeout=None):
        pass

    def is_alive(self):
        return self.alive

    def terminate(self):
        self.terminated = True
        self.alive = False


class _SilentQueue:
    def get(self, timeout=None):
        raise queue.Empty


class _HungContext:
    def __init__(self):
        self.processes = []

    def Queue(self):
        return _SilentQueue()

    def Process(self, target=None, args=()):
        proc = _HungProcess(target, args)
        self.processes.append(proc)
        return proc


def test_run_cp_sat_isolated_kills_child_on_timeout(monkeypatch):
    import solver.cp_isolate as cp_isolate

    ctx = _HungContext()
    monkeypatch.setattr(cp_isolate.mp, "get_context", lambda method: ctx)

    ok, score, best, reason, crash = cp_isolate.run_cp_sat_isolated(parse_field("-"), [parse_piece("X")], 0.0)
    assert not ok
    assert score is None and best is None
    assert reason == "Stopped before solution (timebox)"
    assert crash == "killed: timeout"
    assert ctx.processes[0].terminated
