# app.py: solve a posted geode grid; progress is pollable while it runs
from __future__ import annotations

import os
import time
from typing import Any, Dict, Optional, Tuple

from flask import Flask, jsonify, request, send_from_directory

from config import CFG
from io_files import write_layout_view_html, write_solution_text
from projection import GeodeProjection
from render import render_svg
from solution import Solution
from solver.islands import IslandSolver

from progress import (
    log_attempt_detail,
    reset as progress_reset,
    snapshot as progress_snapshot,
    start_timer as progress_start,
    set_status, set_phase, set_progress_pct, set_best_score,
    set_coverage_pct, set_message, set_done,
)

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

_FORM = """<!doctype html>
<html><head><meta charset='utf-8'><title>Geode Island Solver</title></head>
<body>
<h1>Geode Island Solver</h1>
<form method='post' action='/solve'>
<p><textarea name='grid' rows='20' cols='60' placeholder='. air, C crystal, # bud'></textarea></p>
<p><label>Timeout (s) <input name='timeout' size='5'></label> <button type='submit'>Solve</button></p>
</form>
</body></html>"""

app = Flask(__name__)


@app.after_request
def _no_cache_progress(resp):
    if request.path == "/progress":
        resp.headers["Cache-Control"] = "no-store, max-age=0"
        resp.headers["Pragma"] = "no-cache"
        resp.headers["Expires"] = "0"
    return resp


@app.route("/")
def index():
    return _FORM


def _merged_payload() -> Dict[str, Any]:
    merged: Dict[str, Any] = {}
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        merged.update(payload)
    for k, v in request.form.items():
        merged.setdefault(k, v)
    for k, v in request.args.items():
        merged.setdefault(k, v)
    return merged


def parse_solve_payload(payload: Dict[str, Any]) -> Tuple[GeodeProjection, Optional[float]]:
    """Return (projection, timeout or None); raises ValueError on bad input."""
    grid = payload.get("grid")
    if isinstance(grid, (list, tuple)):
        rows = [str(r) for r in grid]
    elif isinstance(grid, str):
        # Only surrounding newlines go; a row of spaces is a row of air.
        text = grid.replace("\r\n", "\n").strip("\n")
        rows = text.split("\n") if text else []
    else:
        raise ValueError("missing 'grid' (text or list of rows)")
    if not rows:
        raise ValueError("empty grid")
    proj = GeodeProjection.from_rows(rows)

    timeout = payload.get("timeout")
    if timeout in (None, ""):
        return proj, None
    try:
        value = float(timeout)
    except (TypeError, ValueError):
        raise ValueError(f"timeout must be a number, got {timeout!r}") from None
    if value < 0:
        raise ValueError("timeout must not be negative")
    return proj, value


def solution_payload(solution: Solution, elapsed: float) -> Dict[str, Any]:
    groups = []
    for g in solution.groups:
        groups.append({
            "blocks": [[v.x, v.y] for v in sorted(g.block_locations)],
            "material": g.block_type.value if g.block_type else None,
            "flying_machine": None if g.flying_machine_loc is None else [g.flying_machine_loc.x, g.flying_machine_loc.y],
            "vertical": g.flying_machine_is_vert,
            "stopper": None if g.immovable_loc is None else [g.immovable_loc.x, g.immovable_loc.y],
        })
    return {
        "ok": True,
        "groups": groups,
        "group_count": solution.group_count(),
        "crystals": solution.crystal_count(),
        "covered": solution.covered_crystal_count(),
        "crystal_pct": round(solution.crystal_percentage() * 100.0, 2),
        "sticky_blocks": solution.sticky_block_count(),
        "score": solution.score(),
        "invalid": [r.name for r in solution.check_if_valid()],
        "elapsed": round(elapsed, 3),
    }


def _solve_and_write(proj: GeodeProjection, timeout: Optional[float], t0: float) -> Dict[str, Any]:
    solver = IslandSolver(timeout_sec=timeout)
    solution = solver.solve(proj)
    body = solution_payload(solution, time.time() - t0)
    if solver.last_result is not None:
        body["timed_out"] = solver.last_result.timed_out
        body["nodes"] = solver.last_result.nodes

    set_phase("write")
    set_best_score(body["score"])
    set_coverage_pct(body["crystal_pct"])
    svg, legend = render_svg(solution)
    body["svg"] = svg
    write_solution_text(solution, BASE_DIR)
    write_layout_view_html(svg, legend, BASE_DIR)
    return body


@app.route("/solve", methods=["POST"])
def solve():
    progress_reset()
    progress_start()
    set_status("Solving")
    set_phase("parse")
    set_progress_pct(0)

    t0 = time.time()
    try:
        proj, timeout = parse_solve_payload(_merged_payload())
    except ValueError as e:
        set_done(False, message=f"Bad grid: {e}")
        return jsonify({"ok": False, "error": str(e)}), 400

    set_phase("solve")
    set_message(f"{proj.width} × {proj.height} grid, {len(proj.crystals())} crystals")
    try:
        body = _solve_and_write(proj, timeout, t0)
    except Exception as e:
        reason = f"solver exception: {type(e).__name__}: {e}"
        log_attempt_detail("Solve failed", error=reason)
        set_status("Error")
        set_done(False, message=reason)
        return jsonify({"ok": False, "error": reason}), 500

    set_done(True, message=f"{body['group_count']} groups, {body['covered']}/{body['crystals']} crystals")
    return jsonify(body)


@app.route("/download/solution")
def download_solution():
    path = os.path.join(BASE_DIR, CFG.SOLUTION_OUT)
    return send_from_directory(os.path.dirname(path), os.path.basename(path), as_attachment=True)


@app.route("/download/html")
def download_html():
    path = os.path.join(BASE_DIR, CFG.LAYOUT_HTML)
    return send_from_directory(os.path.dirname(path), os.path.basename(path), as_attachment=True)


@app.route("/progress")
def progress():
    return jsonify(progress_snapshot())


if __name__ == "__main__":
    app.run(debug=False)
