"""Helpers for writing solver outputs to disk."""

from __future__ import annotations

import os

from config import CFG
from solution import Solution


def _resolve_output_path(base_dir: str, configured_name: str, fallback: str) -> str:
    """Return the absolute path where an output artifact should be written."""

    name = (configured_name or "").strip() or fallback
    if os.path.isabs(name):
        return name
    return os.path.join(base_dir, name)


def write_solution_text(solution: Solution, base_dir: str) -> str:
    """Write one line per group (material, flying machine, blocks) to the configured file."""

    path = _resolve_output_path(base_dir, CFG.SOLUTION_OUT, "solution.txt")
    os.makedirs(os.path.dirname(path), exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        if not solution.groups:
            f.write("No solution\n")
        else:
            f.write(
                f"{solution.group_count()} groups, "
                f"{solution.covered_crystal_count()}/{solution.crystal_count()} crystals, "
                f"{solution.sticky_block_count()} blocks\n"
            )
            for i, g in enumerate(solution.groups):
                kind = g.block_type.value if g.block_type else "unassigned"
                blocks = " ".join(f"({v.x},{v.y})" for v in sorted(g.block_locations))
                machine = ""
                if g.flying_machine_loc is not None:
                    axis = "vertical" if g.flying_machine_is_vert else "horizontal"
                    fm = g.flying_machine_loc
                    machine = f" machine @ ({fm.x},{fm.y}) {axis}"
                if g.immovable_loc is not None:
                    machine += f" stopper @ ({g.immovable_loc.x},{g.immovable_loc.y})"
                f.write(f"#{i:02d} {kind}{machine}: {blocks}\n")
    return path


def write_layout_view_html(svg: str, legend_html: str, base_dir: str) -> str:
    """Write the rendered SVG/legend preview to the configured HTML file."""

    path = _resolve_output_path(base_dir, CFG.LAYOUT_HTML, "layout_view.html")
    os.makedirs(os.path.dirname(path), exist_ok=True)

    with open(path, "w", encoding="utf-8") as vf:
        vf.write(
            f"""<!doctype html>
<html><head><meta charset='utf-8'><title>Geode Layout</title></head>
<body class='container'>
<h1>Geode Layout</h1>
<section class='card'>{svg}</section>
<section class='card'><h3>Legend</h3><ul>{legend_html}</ul></section>
</body></html>"""
        )
    return path


__all__ = ["write_solution_text", "write_layout_view_html"]
