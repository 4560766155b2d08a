# cli.py — command line driver: pack-score FIELD PIECES
from __future__ import annotations

import argparse
import os
import sys
from typing import List, Optional

from io_files import read_field, read_pieces, write_layout_view_html, write_solutions
from progress import reset as progress_reset, start_timer, set_done
from render import piece_letter, render_field, render_piece, render_results
from shapes import ShapeParseError
from solver.backtrack import Solution
from solver.orchestrator import solve_orchestrator


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="pack-score",
        description="Place every piece on the field and report the placements "
                    "that keep the most score uncovered.",
    )
    ap.add_argument("field", help="field file (space = blocked, '-' = free, 1-9 = score)")
    ap.add_argument("pieces", help="pieces file (X = occupied, blank line between pieces)")
    ap.add_argument("--workers", type=int, default=None, help="processes for the branch fan-out")
    ap.add_argument("--stream", action="store_true", help="keep only the best configurations in memory")
    ap.add_argument("--cp-sat-check", action="store_true", default=None, help="cross-check the optimum with CP-SAT")
    ap.add_argument("--quiet", action="store_true", help="skip placement and solution listings")
    ap.add_argument("--out", default=None, help="directory for the solutions file and HTML view")
    return ap


def print_report(solution: Solution, *, quiet: bool = False) -> None:
    print(f"start:\n{render_field(solution.start)}\n")

    for variants in solution.pieces:
        print("Pieces:")
        print(f"Piece {piece_letter(variants[0].ident)}")
        for v in variants:
            print(f"{render_piece(v)}\n")
        print()

    if not quiet:
        print("Possible placements:")
        for variants in solution.pieces:
            for v in variants:
                for placement in solution.start.place_iter(v):
                    print(f"{render_field(placement)}\n")

        print("Solutions:")
        if solution.tracker is not None:
            print("(not kept in stream mode, best solutions follow)\n")
        for s in solution.solutions:
            print(f"{render_field(s)}\n")

    print("Best solutions")
    for s in solution.best_solutions():
        print(f"{render_field(s)}\n")

    print(f"Number of solutions {solution.solution_count()}")
    print(f"Highest score {solution.highest_score()}")

    cp = solution.meta.get("cp_sat")
    if cp:
        print(f"CP-SAT optimum {cp.get('score')} ({'agrees' if cp.get('agrees') else cp.get('reason') or 'disagrees'})")


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    print(f"field={args.field} pieces={args.pieces}")
    try:
        field = read_field(args.field)
        pieces = read_pieces(args.pieces)
    except (OSError, ShapeParseError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    progress_reset()
    start_timer()
    solution = solve_orchestrator(
        field,
        pieces,
        workers=args.workers,
        keep_solutions=False if args.stream else None,
        cp_sat_check=args.cp_sat_check,
    )
    set_done(True, reason=f"{solution.solution_count()} solutions, highest score {solution.highest_score()}")

    print_report(solution, quiet=args.quiet)

    if args.out:
        out_dir = os.path.abspath(args.out)
        write_solutions(solution, out_dir)
        svgs, legend = render_results(solution.best_solutions())
        write_layout_view_html(
            svgs, legend, out_dir,
            summary=f"{solution.solution_count()} solutions, highest score {solution.highest_score()}",
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
