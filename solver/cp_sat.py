# solver/cp_sat.py: exact island selection over the enumerated shapes
from __future__ import annotations

import time
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Set, Tuple

from ortools.sat.python import cp_model as _cp

from config import CFG
from grid import GridIndex
from models import Island, Material, Shape
from progress import log_attempt_detail
from projection import GeodeProjection
from solution import Solution
from solver.islands import Solver, flatten_projection, island_to_group, resolve_limits
from solver.shapes import enumerate_shapes

# Objective weights are integral; one crystal is worth SCALE units.
SCALE = 1000


def _unique_shapes(shapes_by_target: Dict[int, List[Shape]]) -> List[Shape]:
    seen: Set[int] = set()
    out: List[Shape] = []
    for target in sorted(shapes_by_target):
        for s in shapes_by_target[target]:
            if id(s) not in seen:
                seen.add(id(s))
                out.append(s)
    return out


def solve_islands_exact(
    shapes: Sequence[Shape],
    index: GridIndex,
    *,
    island_cost: float,
    max_seconds: float,
    workers: int = 1,
) -> Tuple[List[Island], Dict[str, object]]:
    """Pick islands with CP-SAT under the same rules the backtracking search uses.

    Chosen shapes are pairwise disjoint, no chosen stem touches another
    chosen tether's stem, and chosen islands that border each other carry
    different materials (which also means no island borders both).
    Returns the islands of the best solution found plus a meta dict.
    """
    m = _cp.CpModel()
    x = [m.NewBoolVar(f"x{i}") for i in range(len(shapes))]
    honey = [m.NewBoolVar(f"h{i}") for i in range(len(shapes))]

    owners: Dict[int, List[int]] = defaultdict(list)
    stem_owners: Dict[int, List[int]] = defaultdict(list)
    for i, s in enumerate(shapes):
        for c in s.cells:
            owners[c].append(i)
        for c in s.tether.stem:
            stem_owners[c].append(i)

    for vars_here in owners.values():
        if len(vars_here) > 1:
            m.AddAtMostOne([x[i] for i in vars_here])

    jammed: Set[Tuple[int, int]] = set()
    touching: Set[Tuple[int, int]] = set()
    for a, s in enumerate(shapes):
        stem_zone = set(s.tether.stem)
        for c in s.tether.stem:
            stem_zone.update(index.neighbors(c))
        for c in stem_zone:
            for b in stem_owners.get(c, ()):
                if b != a:
                    jammed.add((min(a, b), max(a, b)))

        border = {n for c in s.cells for n in index.neighbors(c)} - s.cells
        for c in border:
            for b in owners.get(c, ()):
                if b != a:
                    touching.add((min(a, b), max(a, b)))

    for a, b in sorted(jammed):
        m.AddBoolOr([x[a].Not(), x[b].Not()])
    for a, b in sorted(touching - jammed):
        m.Add(honey[a] != honey[b]).OnlyEnforceIf([x[a], x[b]])

    cost_units = int(round(SCALE * float(island_cost)))
    m.Maximize(sum((SCALE * s.targets_covered - cost_units) * x[i] for i, s in enumerate(shapes)))

    solver = _cp.CpSolver()
    solver.parameters.max_time_in_seconds = float(max_seconds)
    solver.parameters.num_workers = max(1, int(workers))
    solver.parameters.log_search_progress = False

    res = solver.Solve(m)
    meta: Dict[str, object] = {
        "status": solver.StatusName(res),
        "shapes": len(shapes),
        "jammed_pairs": len(jammed),
        "touching_pairs": len(touching),
        "wall_time": solver.WallTime(),
    }
    if res not in (_cp.OPTIMAL, _cp.FEASIBLE):
        return [], meta

    meta["objective"] = solver.ObjectiveValue() / SCALE
    islands: List[Island] = []
    for i, s in enumerate(shapes):
        if solver.BooleanValue(x[i]):
            material = Material.HONEY if solver.BooleanValue(honey[i]) else Material.SLIME
            islands.append(Island(s, material))
    return islands, meta


class ExactIslandSolver(Solver):
    """CP-SAT counterpart of :class:`solver.islands.IslandSolver`.

    Uses a smaller per-crystal shape cap so the model stays tractable; with
    the same shapes its optimum is never below the backtracking result.
    """

    def __init__(
        self,
        *,
        min_island_size: Optional[int] = None,
        max_island_size: Optional[int] = None,
        max_shapes_per_target: Optional[int] = None,
        max_seconds: Optional[float] = None,
        island_cost: Optional[float] = None,
    ):
        if max_shapes_per_target is None:
            max_shapes_per_target = getattr(CFG, "CP_SAT_MAX_SHAPES_PER_TARGET", 60)
        self.min_island_size, self.max_island_size, self.max_shapes_per_target = resolve_limits(
            min_island_size, max_island_size, max_shapes_per_target
        )
        self.max_seconds = float(max_seconds if max_seconds is not None else getattr(CFG, "CP_SAT_SECONDS", 30.0))
        self.island_cost = float(island_cost if island_cost is not None else getattr(CFG, "ISLAND_COST", 1.0))
        self.last_meta: Dict[str, object] = {}

    def name(self) -> str:
        return "Exact Island Solver (CP-SAT)"

    def solve(self, proj: GeodeProjection) -> Solution:
        t0 = time.time()
        index, grid, targets = flatten_projection(proj)
        if not targets:
            self.last_meta = {"status": "NO_TARGETS", "shapes": 0}
            return Solution(proj, [])

        shapes = _unique_shapes(
            enumerate_shapes(
                grid,
                index,
                targets,
                min_size=self.min_island_size,
                max_size=self.max_island_size,
                max_shapes_per_target=self.max_shapes_per_target,
            )
        )
        islands, meta = solve_islands_exact(
            shapes,
            index,
            island_cost=self.island_cost,
            max_seconds=self.max_seconds,
            workers=int(getattr(CFG, "CP_SAT_WORKERS", 1)),
        )
        self.last_meta = meta
        log_attempt_detail(
            "Exact island search",
            grid=f"{index.width}x{index.height}",
            targets=len(targets),
            islands=len(islands),
            duration=f"{time.time() - t0:.2f}s",
            **meta,
        )
        return Solution(proj, [island_to_group(i, index) for i in islands])


__all__ = ["ExactIslandSolver", "solve_islands_exact", "SCALE"]
