from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterator, Tuple


@dataclass(frozen=True, order=True)
class Vec2:
    x: int
    y: int

    def __add__(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x - other.x, self.y - other.y)

    def __neg__(self) -> "Vec2":
        return Vec2(-self.x, -self.y)

    def neighbors(self) -> Iterator["Vec2"]:
        for d in DIRECTIONS:
            yield self + d

    def is_neighbor_of(self, other: "Vec2") -> bool:
        return abs(self.x - other.x) + abs(self.y - other.y) == 1


# Right, Left, Down, Up.  Every geometric scan iterates in this order.
DIRECTIONS: Tuple[Vec2, ...] = (Vec2(1, 0), Vec2(-1, 0), Vec2(0, 1), Vec2(0, -1))


class BlockType(Enum):
    AIR = "air"
    CRYSTAL = "crystal"
    BUD = "bud"


class Material(Enum):
    SLIME = "slime"
    HONEY = "honey"

    def other(self) -> "Material":
        return Material.HONEY if self is Material.SLIME else Material.SLIME


class StickyBlockType(Enum):
    SLIME = "slime"
    SLIME_OFFSET = "slime_offset"
    HONEY = "honey"
    HONEY_OFFSET = "honey_offset"

    @property
    def material(self) -> Material:
        if self in (StickyBlockType.SLIME, StickyBlockType.SLIME_OFFSET):
            return Material.SLIME
        return Material.HONEY


@dataclass(frozen=True)
class Tether:
    """Straight three-cell stem plus one perpendicular stopper cell.

    ``stem`` is ordered (end, middle, end).  ``stem_neighbors_mask`` holds the
    stem cells and every in-bounds cell 4-adjacent to them; it is what keeps
    two tethers from jamming each other.
    """

    stem: Tuple[int, int, int]
    stem_mask: int
    stem_neighbors_mask: int
    stopper: int

    @property
    def middle(self) -> int:
        return self.stem[1]


@dataclass(frozen=True)
class Shape:
    cells: FrozenSet[int]
    mask: int
    neighbors_mask: int  # cells adjacent to the shape, members excluded
    targets_covered: int
    tether: Tether

    @property
    def size(self) -> int:
        return len(self.cells)


@dataclass(frozen=True)
class Island:
    shape: Shape
    material: Material

    @property
    def cells(self) -> FrozenSet[int]:
        return self.shape.cells

    @property
    def tether(self) -> Tether:
        return self.shape.tether
