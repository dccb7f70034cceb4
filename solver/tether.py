# solver/tether.py: embedded L-shape (flying machine stem + stopper) detection
from typing import AbstractSet, Optional, Sequence

from grid import GridIndex
from models import DIRECTIONS, Tether, Vec2


def _perpendicular(direction: Vec2):
    for perp in DIRECTIONS:
        if perp == direction or perp == -direction:
            continue
        yield perp


def make_tether(index: GridIndex, stem: Sequence[int], stopper: int) -> Tether:
    stem = tuple(stem)
    return Tether(
        stem=stem,
        stem_mask=index.mask_of(stem),
        stem_neighbors_mask=index.neighbor_mask(stem, include_members=True),
        stopper=stopper,
    )


def find_tether(cells: AbstractSet[int], index: GridIndex) -> Optional[Tether]:
    """Return the first stem + stopper configuration inside ``cells``.

    Cells are scanned in ascending flat index and directions in the fixed
    Right/Left/Down/Up order, so the answer only depends on the cell set.
    """
    for key in sorted(cells):
        for d in DIRECTIONS:
            prev_key = index.step(key, -d)
            next_key = index.step(key, d)
            if prev_key is None or next_key is None:
                continue
            if prev_key not in cells or next_key not in cells:
                continue

            stem = (prev_key, key, next_key)
            for perp in _perpendicular(d):
                for end in (prev_key, next_key):
                    corner = index.step(end, perp)
                    if corner is not None and corner in cells:
                        return make_tether(index, stem, corner)
    return None
