# solver/search.py: time-boxed branch-and-bound over candidate islands
from __future__ import annotations

import logging
import math
import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from models import Island, Material, Shape

log = logging.getLogger(__name__)


def score(covered: int, islands: int, island_cost: float) -> float:
    return covered - islands * island_cost


@dataclass
class SearchResult:
    islands: List[Island] = field(default_factory=list)
    score: float = 0.0
    timed_out: bool = False
    nodes: int = 0
    elapsed: float = 0.0

    @property
    def covered(self) -> int:
        return sum(i.shape.targets_covered for i in self.islands)


@contextmanager
def _recursion_headroom(depth: int):
    # One frame per target plus the caller's own stack.
    needed = depth + 200
    previous = sys.getrecursionlimit()
    if needed > previous:
        sys.setrecursionlimit(needed)
    try:
        yield
    finally:
        if needed > previous:
            sys.setrecursionlimit(previous)


class SearchEngine:
    """Backtracking search choosing non-conflicting islands for the targets.

    Targets are visited most-constrained first.  At every target the engine
    tries each candidate shape that fits the current masks and then always
    tries leaving the target uncovered.  Masks are plain ints handed down the
    call chain, so unwinding a branch restores them for free; the placed
    island list is popped in a ``finally`` so a timed-out child never leaves
    its island behind for the next sibling.
    """

    def __init__(
        self,
        targets: Sequence[int],
        shapes_by_target: Mapping[int, Sequence[Shape]],
        *,
        timeout_sec: float,
        island_cost: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.targets = list(targets)
        self.shapes_by_target: Dict[int, Sequence[Shape]] = {
            t: tuple(shapes_by_target.get(t, ())) for t in self.targets
        }
        self.order: List[int] = sorted(self.targets, key=lambda t: len(self.shapes_by_target[t]))
        self.timeout_sec = float(timeout_sec)
        self.island_cost = float(island_cost)
        self.clock = clock

        self._deadline = 0.0
        self._best: Optional[List[Island]] = None
        self._best_score = -math.inf
        self._nodes = 0
        self._timed_out = False

    def run(self, started_at: Optional[float] = None) -> SearchResult:
        """Search until exhausted or until ``timeout_sec`` after ``started_at``."""
        start = self.clock() if started_at is None else started_at
        self._deadline = start + self.timeout_sec
        self._best = None
        self._best_score = -math.inf
        self._nodes = 0
        self._timed_out = False

        if self.order:
            with _recursion_headroom(len(self.order)):
                self._backtrack(0, [], 0, 0, 0, 0, len(self.order), 0)

        elapsed = self.clock() - start
        if self._best is None or self._best_score < 0.0:
            # The empty assignment scores 0 and is always available.
            self._best, self._best_score = [], 0.0

        log.debug(
            "search finished: score=%s islands=%d nodes=%d timed_out=%s elapsed=%.3fs",
            self._best_score, len(self._best), self._nodes, self._timed_out, elapsed,
        )
        return SearchResult(
            islands=list(self._best),
            score=self._best_score,
            timed_out=self._timed_out,
            nodes=self._nodes,
            elapsed=elapsed,
        )

    def _backtrack(
        self,
        pos: int,
        islands: List[Island],
        slime_mask: int,
        honey_mask: int,
        stem_mask: int,
        covered: int,
        remaining: int,
        island_count: int,
    ) -> None:
        if self.clock() >= self._deadline:
            self._timed_out = True
            return
        self._nodes += 1

        current = score(covered, island_count, self.island_cost)

        if pos >= len(self.order):
            if current > self._best_score:
                self._best_score = current
                self._best = list(islands)
            return

        if current + remaining <= self._best_score:
            return

        target = self.order[pos]
        target_bit = 1 << target

        if (slime_mask | honey_mask) & target_bit:
            self._backtrack(pos + 1, islands, slime_mask, honey_mask, stem_mask,
                            covered, remaining, island_count)
            return

        for shape in self.shapes_by_target[target]:
            if (slime_mask | honey_mask) & shape.mask:
                continue
            if stem_mask & shape.tether.stem_neighbors_mask:
                continue

            touches_slime = bool(slime_mask & shape.neighbors_mask)
            touches_honey = bool(honey_mask & shape.neighbors_mask)
            if touches_slime and touches_honey:
                continue

            material = Material.HONEY if touches_slime else Material.SLIME
            if material is Material.SLIME:
                next_slime, next_honey = slime_mask | shape.mask, honey_mask
            else:
                next_slime, next_honey = slime_mask, honey_mask | shape.mask

            islands.append(Island(shape, material))
            try:
                self._backtrack(
                    pos + 1,
                    islands,
                    next_slime,
                    next_honey,
                    stem_mask | shape.tether.stem_mask,
                    covered + shape.targets_covered,
                    remaining - shape.targets_covered,
                    island_count + 1,
                )
            finally:
                islands.pop()

        self._backtrack(pos + 1, islands, slime_mask, honey_mask, stem_mask,
                        covered, remaining - 1, island_count)
