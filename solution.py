# solution.py: solver output container, metrics and validation
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Collection, Dict, List, Optional, Set

from config import CFG
from grid import GridIndex
from models import BlockType, Material, StickyBlockType, Vec2
from projection import GeodeProjection
from solver.tether import find_tether


@dataclass
class SolutionGroup:
    block_locations: Set[Vec2] = field(default_factory=set)
    block_type: Optional[StickyBlockType] = None
    flying_machine_loc: Optional[Vec2] = None
    flying_machine_is_vert: Optional[bool] = None
    immovable_loc: Optional[Vec2] = None

    def includes(self, loc: Vec2) -> bool:
        return loc in self.block_locations

    def block_count(self) -> int:
        return len(self.block_locations)

    def add_block(self, x, y=None) -> None:
        self.block_locations.add(x if y is None else Vec2(x, y))

    def stem_cells(self) -> List[Vec2]:
        """Cells of the flying machine stem, empty when no machine is set."""
        if self.flying_machine_loc is None or self.flying_machine_is_vert is None:
            return []
        step = Vec2(0, 1) if self.flying_machine_is_vert else Vec2(1, 0)
        loc = self.flying_machine_loc
        return [loc - step, loc, loc + step]


class InvalidSolutionReason(Enum):
    OUT_OF_BOUNDS = "group extends outside the projection"
    ON_BUD = "group covers a budding block"
    OVERLAPPING_GROUPS = "two groups share a block"
    DISCONNECTED_GROUP = "group is not 4-connected"
    GROUP_SIZE = "group size outside the allowed range"
    MISSING_TETHER = "group has no 3-long stem with a stopper"
    MISSING_BLOCK_TYPE = "group has no sticky block type"
    MIXED_MATERIAL_NEIGHBORS = "group borders both slime and honey"
    SAME_MATERIAL_CONTACT = "touching groups share a material"
    STEM_INTERFERENCE = "flying machine stems touch"


def _is_connected(cells: Set[Vec2]) -> bool:
    if not cells:
        return False
    start = next(iter(cells))
    seen = {start}
    stack = [start]
    while stack:
        cur = stack.pop()
        for n in cur.neighbors():
            if n in cells and n not in seen:
                seen.add(n)
                stack.append(n)
    return len(seen) == len(cells)


@dataclass
class Solution:
    proj: GeodeProjection
    groups: List[SolutionGroup] = field(default_factory=list)

    def get_type(self, pos: Vec2) -> BlockType:
        return self.proj[pos]

    def get_group(self, pos: Vec2) -> Optional[SolutionGroup]:
        for g in self.groups:
            if pos in g.block_locations:
                return g
        return None

    def make_empty_group(self) -> SolutionGroup:
        new = SolutionGroup()
        self.groups.append(new)
        return new

    def add_group(self, group: SolutionGroup) -> None:
        self.groups.append(group)

    def remove_group(self, group: SolutionGroup) -> bool:
        for i, g in enumerate(self.groups):
            if g is group:
                del self.groups[i]
                return True
        return False

    def merge_groups(self, base: SolutionGroup, other: SolutionGroup, with_path: Collection[Vec2] = ()) -> SolutionGroup:
        merged = replace(base, block_locations=set(base.block_locations) | set(other.block_locations) | set(with_path))
        self.remove_group(base)
        self.remove_group(other)
        self.groups.append(merged)
        return merged

    def neighbors_of_group(self, group: SolutionGroup) -> List[SolutionGroup]:
        border = {n for loc in group.block_locations for n in loc.neighbors()} - group.block_locations
        return [
            g for g in self.groups
            if g is not group and not border.isdisjoint(g.block_locations)
        ]

    # ---------- metrics ----------

    def crystal_count(self) -> int:
        return len(self.proj.crystals())

    def covered_crystal_count(self) -> int:
        return sum(1 for c in self.proj.crystals() if self.get_group(c) is not None)

    def crystal_percentage(self) -> float:
        total = self.crystal_count()
        if total == 0:
            return 1.0
        return self.covered_crystal_count() / total

    def group_count(self) -> int:
        return len(self.groups)

    def crystals_per_group(self) -> float:
        if not self.groups:
            return 0.0
        return self.covered_crystal_count() / len(self.groups)

    def sticky_block_count(self) -> int:
        return sum(g.block_count() for g in self.groups)

    def score(self, island_cost: Optional[float] = None) -> float:
        cost = float(getattr(CFG, "ISLAND_COST", 1.0)) if island_cost is None else float(island_cost)
        return self.covered_crystal_count() - cost * self.group_count()

    def better_than(self, other: "Solution") -> bool:
        t_cp, o_cp = self.crystal_percentage(), other.crystal_percentage()
        if t_cp != o_cp:
            return t_cp > o_cp
        t_gc, o_gc = self.crystals_per_group(), other.crystals_per_group()
        if t_gc != o_gc:
            return t_gc > o_gc
        return self.sticky_block_count() < other.sticky_block_count()

    def max(self, other: "Solution") -> "Solution":
        return self if self.better_than(other) else other

    def min(self, other: "Solution") -> "Solution":
        return other if self.better_than(other) else self

    # ---------- validation ----------

    def check_if_valid(self) -> List[InvalidSolutionReason]:
        """Every rule the groups break, each listed once in detection order."""
        reasons: List[InvalidSolutionReason] = []

        def flag(reason: InvalidSolutionReason) -> None:
            if reason not in reasons:
                reasons.append(reason)

        min_size = int(getattr(CFG, "MIN_ISLAND_SIZE", 4))
        max_size = int(getattr(CFG, "MAX_ISLAND_SIZE", 12))
        index = GridIndex(self.proj.x_range, self.proj.y_range)
        owner: Dict[Vec2, int] = {}

        for gi, group in enumerate(self.groups):
            cells = group.block_locations
            if group.block_type is None:
                flag(InvalidSolutionReason.MISSING_BLOCK_TYPE)
            if not (min_size <= len(cells) <= max_size):
                flag(InvalidSolutionReason.GROUP_SIZE)
            if not _is_connected(cells):
                flag(InvalidSolutionReason.DISCONNECTED_GROUP)
            in_bounds = True
            for loc in cells:
                if not index.in_bounds(loc):
                    flag(InvalidSolutionReason.OUT_OF_BOUNDS)
                    in_bounds = False
                elif self.proj[loc] is BlockType.BUD:
                    flag(InvalidSolutionReason.ON_BUD)
                if loc in owner:
                    flag(InvalidSolutionReason.OVERLAPPING_GROUPS)
                owner.setdefault(loc, gi)
            if in_bounds and cells:
                flat = frozenset(index.to_flat(loc) for loc in cells)
                if find_tether(flat, index) is None:
                    flag(InvalidSolutionReason.MISSING_TETHER)

        materials = [g.block_type.material if g.block_type else None for g in self.groups]
        for gi, group in enumerate(self.groups):
            touching: Set[Material] = set()
            for loc in group.block_locations:
                for n in loc.neighbors():
                    other = owner.get(n)
                    if other is None or other == gi or materials[other] is None:
                        continue
                    touching.add(materials[other])
            if len(touching) > 1:
                flag(InvalidSolutionReason.MIXED_MATERIAL_NEIGHBORS)
            if materials[gi] is not None and materials[gi] in touching:
                flag(InvalidSolutionReason.SAME_MATERIAL_CONTACT)

        stems = [self._stem_of(g, index) for g in self.groups]
        for a in range(len(stems)):
            for b in range(a + 1, len(stems)):
                if any(sa == sb or sa.is_neighbor_of(sb) for sa in stems[a] for sb in stems[b]):
                    flag(InvalidSolutionReason.STEM_INTERFERENCE)
        return reasons

    @staticmethod
    def _stem_of(group: SolutionGroup, index: GridIndex) -> List[Vec2]:
        stem = group.stem_cells()
        if stem:
            return stem
        if not group.block_locations or not all(index.in_bounds(c) for c in group.block_locations):
            return []
        tether = find_tether(frozenset(index.to_flat(c) for c in group.block_locations), index)
        if tether is None:
            return []
        return [index.to_vec(c) for c in tether.stem]


__all__ = ["Solution", "SolutionGroup", "InvalidSolutionReason"]
