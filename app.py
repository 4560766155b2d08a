# app.py — web front end for the scored piece packer
from __future__ import annotations
import os
import time
from typing import Any, Dict, Tuple

from flask import Flask, request, render_template, send_from_directory, jsonify, url_for

from config import CFG
from io_files import write_solutions, write_layout_view_html
from render import render_field, render_piece, render_results
from shapes import ShapeParseError, parse_field, parse_pieces
from solver.orchestrator import solve_orchestrator

from progress import (
    reset as progress_reset,
    as_json as progress_json,
    start_timer as progress_start,
    fmt_elapsed, set_status, set_done, set_elapsed, set_result_url,
)

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


def _resolve_output_paths(configured: str, fallback: str) -> Tuple[str, str, str]:
    name = (configured or "").strip() or fallback
    if os.path.isabs(name):
        full_path = name
    else:
        full_path = os.path.abspath(os.path.join(BASE_DIR, name))
    directory = os.path.dirname(full_path) or BASE_DIR
    filename = os.path.basename(full_path) or fallback
    return full_path, directory, filename


_SOLUTIONS_FULL_PATH, SOLUTIONS_DIR, SOLUTIONS_FILENAME = _resolve_output_paths(
    CFG.SOLUTIONS_OUT, "solutions.txt"
)
_LAYOUT_FULL_PATH, LAYOUT_DIR, LAYOUT_FILENAME = _resolve_output_paths(
    CFG.LAYOUT_HTML, "layout_view.html"
)


def _empty_result() -> Dict[str, Any]:
    return {
        "ok": False,
        "message": "",
        "start": "",
        "pieces": [],
        "solution_count": 0,
        "highest_score": 0,
        "best_count": 0,
        "svgs": [],
        "legend": "",
        "elapsed_str": "0s",
        "solutions_filename": SOLUTIONS_FILENAME,
        "layout_filename": LAYOUT_FILENAME,
    }


LAST_RESULT: Dict[str, Any] = _empty_result()

app = Flask(__name__, template_folder="templates")


@app.after_request
def _no_cache_progress(resp):
    if request.path == "/progress":
        resp.headers["Cache-Control"] = "no-store, max-age=0"
        resp.headers["Pragma"] = "no-cache"
        resp.headers["Expires"] = "0"
    return resp


@app.route("/")
def index():
    return render_template("index.html")


@app.route("/result/latest")
def result_latest():
    return render_template("result.html", **LAST_RESULT)


def _finalize_solver_progress(ok_flag: bool, message: str) -> None:
    """Write the terminal solver status without clobbering failure states."""

    set_status("Solved" if ok_flag else "Error")
    set_done(ok_flag, reason=message)


def _fail(reason: str, t0: float):
    _finalize_solver_progress(False, reason)
    LAST_RESULT.clear()
    LAST_RESULT.update(_empty_result())
    LAST_RESULT.update({"message": reason, "elapsed_str": fmt_elapsed(time.time() - t0)})
    set_result_url(url_for("result_latest"))
    return render_template("result.html", **LAST_RESULT), 400


@app.route("/solve", methods=["POST"])
def solve():
    progress_reset()
    progress_start()
    set_status("Solving")
    t0 = time.time()

    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        field_text = str(payload.get("field") or "")
        pieces_text = str(payload.get("pieces") or "")
    else:
        field_text = request.form.get("field", "")
        pieces_text = request.form.get("pieces", "")
    # browsers submit CRLF textareas
    field_text = field_text.replace("\r\n", "\n")
    pieces_text = pieces_text.replace("\r\n", "\n")

    try:
        start = parse_field(field_text)
        pieces = parse_pieces(pieces_text)
    except ShapeParseError as e:
        return _fail(f"Bad input: {e}", t0)

    try:
        solution = solve_orchestrator(start, pieces)
    except Exception as e:
        return _fail(f"orchestrator exception: {type(e).__name__}: {e}", t0)

    count = solution.solution_count()
    best = solution.best_solutions()
    ok_flag = count > 0
    message = (
        f"{count} solutions, highest score {solution.highest_score()}"
        if ok_flag else "No complete configuration exists"
    )
    _finalize_solver_progress(ok_flag, message)
    set_elapsed(time.time() - t0)

    shown = best[: max(0, int(CFG.MAX_RENDERED))]
    svgs, legend = render_results(shown)
    solutions_name = os.path.basename(write_solutions(solution, BASE_DIR)) or SOLUTIONS_FILENAME
    layout_name = os.path.basename(
        write_layout_view_html(svgs, legend, BASE_DIR, summary=message)
    ) or LAYOUT_FILENAME

    LAST_RESULT.update({
        "ok": ok_flag,
        "message": message,
        "start": render_field(start),
        "pieces": [render_piece(p) for p in pieces],
        "solution_count": count,
        "highest_score": solution.highest_score(),
        "best_count": len(best),
        "svgs": svgs,
        "legend": legend,
        "elapsed_str": fmt_elapsed(time.time() - t0),
        "solutions_filename": solutions_name,
        "layout_filename": layout_name,
    })
    set_result_url(url_for("result_latest"))
    return render_template("result.html", **LAST_RESULT)


@app.route("/download/solutions")
def download_solutions():
    return send_from_directory(SOLUTIONS_DIR, SOLUTIONS_FILENAME, as_attachment=True)


@app.route("/download/html")
def download_html():
    return send_from_directory(LAYOUT_DIR, LAYOUT_FILENAME, as_attachment=True)


@app.route("/progress")
def progress():
    return jsonify(progress_json())


if __name__ == "__main__":
    progress_start()
    app.run(debug=False)
