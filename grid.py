# grid.py: flat cell indexing over a rectangular extent
from __future__ import annotations

from typing import Iterable, List

from models import DIRECTIONS, Vec2


class GridIndex:
    """Maps coordinates in ``x_range × y_range`` to row-major flat indices.

    Ranges are ordinary Python ``range`` objects with step 1, so the extent
    may start anywhere (geode projections are rarely anchored at the origin).
    """

    def __init__(self, x_range: range, y_range: range):
        self.x_range = x_range
        self.y_range = y_range
        self.min_x = x_range.start
        self.min_y = y_range.start
        self.width = len(x_range)
        self.height = len(y_range)
        self.size = self.width * self.height
        self._neighbors: List[tuple] = [self._compute_neighbors(i) for i in range(self.size)]

    def to_flat(self, vec: Vec2) -> int:
        return (vec.y - self.min_y) * self.width + (vec.x - self.min_x)

    def to_vec(self, flat: int) -> Vec2:
        y, x = divmod(flat, self.width)
        return Vec2(x + self.min_x, y + self.min_y)

    def in_bounds(self, vec: Vec2) -> bool:
        return vec.x in self.x_range and vec.y in self.y_range

    def step(self, flat: int, direction: Vec2):
        """Flat index one step from ``flat`` along ``direction``, or None off-grid."""
        nvec = self.to_vec(flat) + direction
        if not self.in_bounds(nvec):
            return None
        return self.to_flat(nvec)

    def _compute_neighbors(self, flat: int) -> tuple:
        vec = self.to_vec(flat)
        out = []
        for d in DIRECTIONS:
            nvec = vec + d
            if self.in_bounds(nvec):
                out.append(self.to_flat(nvec))
        return tuple(out)

    def neighbors(self, flat: int) -> tuple:
        # Right, Left, Down, Up; off-grid neighbors are dropped.
        return self._neighbors[flat]

    @staticmethod
    def mask_of(cells: Iterable[int]) -> int:
        mask = 0
        for c in cells:
            mask |= 1 << c
        return mask

    def neighbor_mask(self, cells: Iterable[int], *, include_members: bool = False) -> int:
        members = list(cells)
        mask = 0
        for c in members:
            for n in self._neighbors[c]:
                mask |= 1 << n
        if not include_members:
            mask &= ~self.mask_of(members)
        return mask

    def cells_of(self, mask: int) -> List[int]:
        out = []
        i = 0
        while mask:
            if mask & 1:
                out.append(i)
            mask >>= 1
            i += 1
        return out

    def __repr__(self) -> str:
        return (
            f"GridIndex(x={self.min_x}..{self.min_x + self.width - 1}, "
            f"y={self.min_y}..{self.min_y + self.height - 1})"
        )
