from grid import GridIndex
from models import Vec2


def test_flat_and_vec_are_inverse_over_offset_extent():
    index = GridIndex(range(-2, 3), range(5, 8))
    assert index.width == 5
    assert index.height == 3
    seen = set()
    for y in range(5, 8):
        for x in range(-2, 3):
            flat = index.to_flat(Vec2(x, y))
            assert index.to_vec(flat) == Vec2(x, y)
            seen.add(flat)
    assert seen == set(range(15))


def test_in_bounds_rejects_outside_coordinates():
    index = GridIndex(range(0, 3), range(0, 2))
    assert index.in_bounds(Vec2(0, 0))
    assert index.in_bounds(Vec2(2, 1))
    assert not index.in_bounds(Vec2(3, 0))
    assert not index.in_bounds(Vec2(-1, 0))
    assert not index.in_bounds(Vec2(0, 2))


def test_neighbors_follow_right_left_down_up_and_drop_offgrid():
    index = GridIndex(range(3), range(3))
    assert index.neighbors(0) == (1, 3)
    assert index.neighbors(4) == (5, 3, 7, 1)
    assert index.neighbors(8) == (7, 5)


def test_step_returns_none_off_grid():
    index = GridIndex(range(3), range(1))
    assert index.step(0, Vec2(1, 0)) == 1
    assert index.step(0, Vec2(-1, 0)) is None
    assert index.step(2, Vec2(0, 1)) is None


def test_neighbor_mask_excludes_members_unless_asked():
    index = GridIndex(range(3), range(3))
    cells = [3, 4]
    outside = index.neighbor_mask(cells)
    assert index.cells_of(outside) == [0, 1, 5, 6, 7]
    closed = index.neighbor_mask(cells, include_members=True)
    assert index.cells_of(closed) == [0, 1, 3, 4, 5, 6, 7]
    assert index.mask_of(cells) == 0b11000
