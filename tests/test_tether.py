from grid import GridIndex
from models import Vec2
from solver.tether import find_tether


def _cells(index, *coords):
    return frozenset(index.to_flat(Vec2(x, y)) for x, y in coords)


def test_l_tetromino_yields_stem_and_stopper():
    index = GridIndex(range(3), range(2))
    cells = _cells(index, (0, 0), (1, 0), (2, 0), (0, 1))
    tether = find_tether(cells, index)
    assert tether is not None
    assert tether.stem == (0, 1, 2)
    assert tether.middle == 1
    assert tether.stopper == index.to_flat(Vec2(0, 1))
    assert tether.stem_mask == 0b111


def test_stem_neighbors_mask_is_closed_neighborhood_of_stem():
    index = GridIndex(range(4), range(3))
    cells = _cells(index, (0, 1), (1, 1), (2, 1), (2, 2))
    tether = find_tether(cells, index)
    expected = set()
    for c in tether.stem:
        expected.add(c)
        expected.update(index.neighbors(c))
    assert set(index.cells_of(tether.stem_neighbors_mask)) == expected
    # the stopper belongs to the stem neighborhood but never to the stem mask
    assert not tether.stem_mask & (1 << tether.stopper)


def test_straight_line_and_square_have_no_tether():
    line_index = GridIndex(range(4), range(1))
    assert find_tether(_cells(line_index, (0, 0), (1, 0), (2, 0), (3, 0)), line_index) is None

    square_index = GridIndex(range(2), range(2))
    assert find_tether(_cells(square_index, (0, 0), (1, 0), (0, 1), (1, 1)), square_index) is None


def test_t_tetromino_has_no_end_stopper():
    index = GridIndex(range(3), range(2))
    cells = _cells(index, (0, 0), (1, 0), (2, 0), (1, 1))
    assert find_tether(cells, index) is None


def test_vertical_stem_is_found():
    index = GridIndex(range(2), range(3))
    cells = _cells(index, (0, 0), (0, 1), (0, 2), (1, 2))
    tether = find_tether(cells, index)
    assert tether is not None
    assert [index.to_vec(c) for c in tether.stem] == [Vec2(0, 0), Vec2(0, 1), Vec2(0, 2)]
    assert index.to_vec(tether.stopper) == Vec2(1, 2)


def test_result_does_not_depend_on_set_construction_order():
    index = GridIndex(range(4), range(4))
    coords = [(1, 1), (2, 1), (3, 1), (1, 2), (3, 2), (1, 0)]
    forward = find_tether(set(_cells(index, *coords)), index)
    backward = find_tether(set(_cells(index, *reversed(coords))), index)
    assert forward == backward
