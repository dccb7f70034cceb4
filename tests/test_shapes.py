from models import BlockType, Vec2
from projection import GeodeProjection
from solver.islands import flatten_projection
from solver.shapes import enumerate_shapes
from solver.tether import find_tether


def _shapes(rows, **kw):
    proj = GeodeProjection.from_rows(rows)
    index, grid, targets = flatten_projection(proj)
    params = dict(min_size=4, max_size=12, max_shapes_per_target=1000)
    params.update(kw)
    return index, grid, targets, enumerate_shapes(grid, index, targets, **params)


def _connected(cells, index):
    cells = set(cells)
    start = next(iter(cells))
    seen, stack = {start}, [start]
    while stack:
        for n in index.neighbors(stack.pop()):
            if n in cells and n not in seen:
                seen.add(n)
                stack.append(n)
    return seen == cells


def test_every_shape_is_sized_connected_tethered_and_avoids_buds():
    index, grid, targets, by_target = _shapes(
        ["C..#.", ".#..C", "...C."], max_size=6, max_shapes_per_target=50
    )
    assert set(by_target) == set(targets)
    for target, shapes in by_target.items():
        assert shapes
        for s in shapes:
            assert 4 <= s.size <= 6
            assert target in s.cells
            assert _connected(s.cells, index)
            assert all(grid[c] is not BlockType.BUD for c in s.cells)
            assert find_tether(s.cells, index) is not None
            assert s.mask == sum(1 << c for c in s.cells)
            assert not s.neighbors_mask & s.mask
            assert s.targets_covered == sum(1 for c in s.cells if grid[c] is BlockType.CRYSTAL)


def test_target_without_room_gets_empty_entry():
    _, _, targets, by_target = _shapes(["C"])
    assert by_target == {targets[0]: []}

    _, _, targets, by_target = _shapes(["###", "#C#", "###"])
    assert by_target == {targets[0]: []}


def test_shapes_are_created_once_and_shared_between_targets():
    index, _, targets, by_target = _shapes(["CC..", "...."], max_size=5)
    a, b = targets
    shared = [s for s in by_target[a] if b in s.cells]
    assert shared
    ids_b = {id(s) for s in by_target[b]}
    assert all(id(s) in ids_b for s in shared)

    all_shapes = {id(s): s for lst in by_target.values() for s in lst}
    cell_sets = [s.cells for s in all_shapes.values()]
    assert len(cell_sets) == len(set(cell_sets))


def test_lists_are_ordered_by_targets_covered():
    _, _, _, by_target = _shapes(["C.C.", "..C."], max_size=6)
    for shapes in by_target.values():
        covered = [s.targets_covered for s in shapes]
        assert covered == sorted(covered, reverse=True)
    assert max(s.targets_covered for lst in by_target.values() for s in lst) == 3


def test_shape_cap_bounds_generation_per_target():
    _, _, targets, by_target = _shapes(["......", "..C...", "......"], max_shapes_per_target=3)
    assert len(by_target[targets[0]]) == 3


def test_first_shape_for_lone_center_target_has_minimum_size():
    index, _, targets, by_target = _shapes(["..C..", "....."])
    first = by_target[targets[0]][0]
    assert first.size == 4
    assert index.to_flat(Vec2(2, 0)) in first.cells
