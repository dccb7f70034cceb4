# solver/islands.py: shape enumeration + branch-and-bound island solver
from __future__ import annotations

import time
from typing import Dict, List, Optional, Sequence, Tuple

from config import CFG
from grid import GridIndex
from models import BlockType, Island, Material, Shape, StickyBlockType
from progress import log_attempt_detail
from projection import GeodeProjection
from solution import Solution, SolutionGroup
from solver.search import SearchEngine, SearchResult
from solver.shapes import enumerate_shapes


class Solver:
    def name(self) -> str:
        return type(self).__name__

    def solve(self, proj: GeodeProjection) -> Solution:
        raise NotImplementedError


def _cfg_or(value, key: str, default):
    if value is not None:
        return value
    return getattr(CFG, key, default)


def resolve_limits(
    min_island_size: Optional[int] = None,
    max_island_size: Optional[int] = None,
    max_shapes_per_target: Optional[int] = None,
) -> Tuple[int, int, int]:
    min_size = int(_cfg_or(min_island_size, "MIN_ISLAND_SIZE", 4))
    max_size = int(_cfg_or(max_island_size, "MAX_ISLAND_SIZE", 12))
    cap = int(_cfg_or(max_shapes_per_target, "MAX_SHAPES_PER_TARGET", 1000))
    if min_size < 1:
        raise ValueError(f"min island size must be positive, got {min_size}")
    if max_size < min_size:
        raise ValueError(f"max island size {max_size} is below min island size {min_size}")
    if cap < 0:
        raise ValueError(f"shape cap must not be negative, got {cap}")
    return min_size, max_size, cap


def flatten_projection(proj: GeodeProjection) -> Tuple[GridIndex, List[BlockType], List[int]]:
    """Grid index, block per flat cell, and crystal cells in ascending order."""
    index = GridIndex(proj.x_range, proj.y_range)
    grid = [proj[index.to_vec(i)] for i in range(index.size)]
    targets = [i for i, b in enumerate(grid) if b is BlockType.CRYSTAL]
    return index, grid, targets


def island_to_group(island: Island, index: GridIndex) -> SolutionGroup:
    first, middle, last = island.tether.stem
    return SolutionGroup(
        block_locations={index.to_vec(c) for c in island.cells},
        block_type=StickyBlockType.SLIME if island.material is Material.SLIME else StickyBlockType.HONEY,
        flying_machine_loc=index.to_vec(middle),
        flying_machine_is_vert=index.to_vec(first).x == index.to_vec(last).x,
        immovable_loc=index.to_vec(island.tether.stopper),
    )


class IslandSolver(Solver):
    """Covers crystals with tethered sticky-block islands.

    Candidate islands are grown per crystal with a bounded BFS, then a
    time-boxed backtracking search picks the set maximizing
    ``covered - islands * island_cost``.  Every knob falls back to ``CFG``.
    """

    def __init__(
        self,
        *,
        min_island_size: Optional[int] = None,
        max_island_size: Optional[int] = None,
        max_shapes_per_target: Optional[int] = None,
        timeout_sec: Optional[float] = None,
        island_cost: Optional[float] = None,
    ):
        self.min_island_size, self.max_island_size, self.max_shapes_per_target = resolve_limits(
            min_island_size, max_island_size, max_shapes_per_target
        )
        self.timeout_sec = float(_cfg_or(timeout_sec, "TIMEOUT_SEC", 10.0))
        self.island_cost = float(_cfg_or(island_cost, "ISLAND_COST", 1.0))
        if self.timeout_sec < 0:
            raise ValueError(f"timeout must not be negative, got {self.timeout_sec}")
        self.last_result: Optional[SearchResult] = None

    def name(self) -> str:
        return "Island Solver"

    def candidate_shapes(self, grid: Sequence[BlockType], index: GridIndex, targets: Sequence[int]) -> Dict[int, List[Shape]]:
        return enumerate_shapes(
            grid,
            index,
            targets,
            min_size=self.min_island_size,
            max_size=self.max_island_size,
            max_shapes_per_target=self.max_shapes_per_target,
        )

    def solve(self, proj: GeodeProjection) -> Solution:
        started = time.monotonic()
        self.last_result = None

        index, grid, targets = flatten_projection(proj)
        if not targets:
            self.last_result = SearchResult()
            return Solution(proj, [])

        shapes = self.candidate_shapes(grid, index, targets)
        shapes_ready = time.monotonic()

        engine = SearchEngine(
            targets,
            shapes,
            timeout_sec=self.timeout_sec,
            island_cost=self.island_cost,
        )
        result = engine.run(started_at=started)
        self.last_result = result

        log_attempt_detail(
            "Island search",
            grid=f"{index.width}x{index.height}",
            targets=len(targets),
            shapes=len({id(s) for lst in shapes.values() for s in lst}),
            enumerate=f"{shapes_ready - started:.2f}s",
            nodes=result.nodes,
            islands=len(result.islands),
            covered=result.covered,
            score=result.score,
            timed_out=result.timed_out,
        )
        return Solution(proj, [island_to_group(i, index) for i in result.islands])


__all__ = ["IslandSolver", "Solver", "flatten_projection", "island_to_group", "resolve_limits"]
