"""Helpers for reading puzzle inputs and writing solver outputs to disk."""

from __future__ import annotations

import os
from typing import List

from config import CFG
from models import Field, Piece
from render import render_field
from shapes import parse_field, parse_pieces
from solver.backtrack import Solution


def read_field(path: str) -> Field:
    with open(path, "r", encoding="utf-8") as fh:
        return parse_field(fh.read())


def read_pieces(path: str) -> List[Piece]:
    with open(path, "r", encoding="utf-8") as fh:
        return parse_pieces(fh.read())


def _resolve_output_path(base_dir: str, configured_name: str, fallback: str) -> str:
    """Return the absolute path where an output artifact should be written."""

    name = (configured_name or "").strip() or fallback
    if os.path.isabs(name):
        return name
    return os.path.join(base_dir, name)


def write_solutions(solution: Solution, base_dir: str) -> str:
    """Write the best configurations and the run summary to the configured text file."""

    path = _resolve_output_path(base_dir, CFG.SOLUTIONS_OUT, "solutions.txt")
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)

    best = solution.best_solutions()
    with open(path, "w", encoding="utf-8") as f:
        f.write(f"Number of solutions {solution.solution_count()}\n")
        f.write(f"Highest score {solution.highest_score()}\n\n")
        if not best:
            f.write("No solution\n")
        for field in best:
            f.write(render_field(field) + "\n\n")
    return path


def write_layout_view_html(svgs: List[str], legend_html: str, base_dir: str, *, summary: str = "") -> str:
    """Write the rendered SVG/legend preview to the configured HTML file."""

    path = _resolve_output_path(base_dir, CFG.LAYOUT_HTML, "layout_view.html")
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)

    cards = "".join(f"<section class='card'><div class='gridwrap'>{svg}</div></section>" for svg in svgs)
    with open(path, "w", encoding="utf-8") as vf:
        vf.write(
            f"""<!doctype html>
<html><head><meta charset='utf-8'><title>Layout View</title>
<link rel='stylesheet' href='/styles.css'></head>
<body class='container'>
<h1>Layout View</h1>
<p>{summary}</p>
{cards}
<section class='card'><h3>Legend</h3><ul>{legend_html}</ul></section>
</body></html>"""
        )
    return path


__all__ = ["read_field", "read_pieces", "write_solutions", "write_layout_view_html"]
