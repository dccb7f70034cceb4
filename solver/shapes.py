# solver/shapes.py: bounded BFS candidate island generation
from __future__ import annotations

import logging
from collections import deque
from typing import Dict, FrozenSet, List, Sequence, Set

from grid import GridIndex
from models import BlockType, Shape, Tether
from solver.tether import find_tether

log = logging.getLogger(__name__)


def make_shape(
    cells: FrozenSet[int],
    tether: Tether,
    grid: Sequence[BlockType],
    index: GridIndex,
) -> Shape:
    return Shape(
        cells=cells,
        mask=index.mask_of(cells),
        neighbors_mask=index.neighbor_mask(cells),
        targets_covered=sum(1 for c in cells if grid[c] is BlockType.CRYSTAL),
        tether=tether,
    )


def _expansion_candidates(
    cells: FrozenSet[int],
    grid: Sequence[BlockType],
    index: GridIndex,
) -> List[int]:
    """Cells that can grow ``cells`` by one, crystals first.

    Members are walked in ascending order and their neighbors in the fixed
    direction order; the crystal-first sort is stable so ties keep that order.
    """
    seen: Set[int] = set()
    out: List[int] = []
    for c in sorted(cells):
        for n in index.neighbors(c):
            if n in cells or n in seen or grid[n] is BlockType.BUD:
                continue
            seen.add(n)
            out.append(n)
    out.sort(key=lambda n: 0 if grid[n] is BlockType.CRYSTAL else 1)
    return out


def enumerate_shapes(
    grid: Sequence[BlockType],
    index: GridIndex,
    targets: Sequence[int],
    *,
    min_size: int,
    max_size: int,
    max_shapes_per_target: int,
) -> Dict[int, List[Shape]]:
    """Build the target -> candidate shapes map.

    Every target gets an entry, possibly empty.  A shape is created once
    (global dedup by cell set) and registered under each crystal it contains.
    Lists come back ordered by targets covered, most first.
    """
    shapes_by_target: Dict[int, List[Shape]] = {t: [] for t in targets}
    global_seen: Set[FrozenSet[int]] = set()
    sets_polled = 0

    for target in targets:
        start = frozenset((target,))
        queue = deque([start])
        seen_local: Set[FrozenSet[int]] = {start}
        shapes_found = 0

        while queue and shapes_found < max_shapes_per_target:
            current = queue.popleft()
            sets_polled += 1

            if len(current) < max_size:
                for n in _expansion_candidates(current, grid, index):
                    grown = current | {n}
                    if grown not in seen_local:
                        seen_local.add(grown)
                        queue.append(grown)

            if not (min_size <= len(current) <= max_size):
                continue
            tether = find_tether(current, index)
            if tether is None:
                continue
            if current in global_seen:
                continue
            global_seen.add(current)

            shape = make_shape(current, tether, grid, index)
            for cell in sorted(current):
                if grid[cell] is BlockType.CRYSTAL:
                    shapes_by_target.setdefault(cell, []).append(shape)
            shapes_found += 1

    for shapes in shapes_by_target.values():
        shapes.sort(key=lambda s: s.targets_covered, reverse=True)

    log.debug(
        "enumerated %d shapes for %d targets (%d sets polled)",
        len(global_seen), len(targets), sets_polled,
    )
    return shapes_by_target
