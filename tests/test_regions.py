import numpy as np
import pytest

from skintone.grid import Grid
from skintone import regions
from skintone.regions import find_components, flood_fill, has_enclosed_hole, identify_face_regions, iter_components
from skintone.types import Rectangle


def _mask_with_block(size=20, block=(2, 2, 16, 16), holes=()) -> Grid:
    values = np.zeros((size, size), dtype=bool)
    x, y, w, h = block
    values[y : y + h, x : x + w] = True
    for hx, hy, hw, hh in holes:
        values[hy : hy + hh, hx : hx + hw] = False
    return Grid(values)


def test_enclosed_hole_yields_outer_bounds():
    mask = _mask_with_block(holes=[(7, 7, 4, 4)])
    assert identify_face_regions(mask, scale=2) == [Rectangle(2, 2, 16, 16)]


def test_hole_touching_bounding_edge_is_ignored():
    mask = _mask_with_block(holes=[(7, 2, 4, 4)])
    assert identify_face_regions(mask, scale=2) == []


def test_solid_block_without_hole_is_ignored():
    assert identify_face_regions(_mask_with_block(), scale=1) == []


def test_tiny_hole_is_ignored():
    # a 2 pixel hole does not exceed scale 2
    mask = _mask_with_block(holes=[(8, 8, 2, 1)])
    assert identify_face_regions(mask, scale=2) == []
    assert identify_face_regions(mask, scale=1) == [Rectangle(2, 2, 16, 16)]


def test_small_components_are_noise():
    # 10x10 ring around a 2x2 hole: 96 pixels
    mask = _mask_with_block(size=14, block=(2, 2, 10, 10), holes=[(6, 6, 2, 2)])
    assert identify_face_regions(mask, scale=1) == [Rectangle(2, 2, 10, 10)]
    assert identify_face_regions(mask, scale=2) == []


def test_empty_mask_has_no_regions():
    mask = Grid(np.zeros((64, 64), dtype=bool))
    assert find_components(mask) == []
    assert identify_face_regions(mask, scale=2) == []


def test_flood_fill_is_four_connected():
    values = np.zeros((3, 3), dtype=bool)
    values[0, 0] = True
    values[1, 1] = True
    mask = Grid(values)
    assert flood_fill(mask, (0, 0)) == {(0, 0)}
    assert len(find_components(mask)) == 2


def test_flood_fill_respects_limits():
    mask = Grid(np.ones((4, 6), dtype=bool))
    filled = flood_fill(mask, (1, 1), Rectangle(0, 0, 3, 2))
    assert filled == {(x, y) for x in range(3) for y in range(2)}
    with pytest.raises(ValueError):
        flood_fill(mask, (5, 3), Rectangle(0, 0, 3, 2))
    with pytest.raises(ValueError):
        flood_fill(mask, (0, 0), Rectangle(0, 0, 7, 2))


def test_flood_fill_handles_large_components_without_recursion():
    mask = Grid(np.ones((300, 300), dtype=bool))
    assert len(flood_fill(mask, (150, 150))) == 300 * 300


def test_components_in_row_major_order():
    values = np.zeros((5, 5), dtype=bool)
    values[4, 0] = True
    values[0, 3] = True
    components = find_components(Grid(values))
    assert components == [{(3, 0)}, {(0, 4)}]


def test_has_enclosed_hole_fills_unmasked_space_only_inside_bounds():
    mask = _mask_with_block(holes=[(7, 7, 4, 4)])
    assert has_enclosed_hole(mask, Rectangle(2, 2, 16, 16), min_hole_pixels=15)
    assert not has_enclosed_hole(mask, Rectangle(2, 2, 16, 16), min_hole_pixels=16)


def test_hole_search_stops_at_first_qualifying_hole(monkeypatch):
    mask = _mask_with_block(holes=[(4, 4, 3, 3), (11, 11, 3, 3)])
    calls = []
    real_fill = regions.flood_fill

    def counting_fill(*args, **kwargs):
        calls.append(args[1])
        return real_fill(*args, **kwargs)

    monkeypatch.setattr(regions, "flood_fill", counting_fill)
    assert has_enclosed_hole(mask, Rectangle(2, 2, 16, 16), min_hole_pixels=2)
    assert calls == [(4, 4)]


def test_components_are_only_searched_inside_the_window():
    values = np.zeros((6, 6), dtype=bool)
    values[1:5, 1:5] = True
    values[2, 2] = False
    holes = list(iter_components(Grid(values), value=False, limit_to=Rectangle(1, 1, 4, 4)))
    assert holes == [{(2, 2)}]
    first = next(iter_components(Grid(values), value=False))
    assert (0, 0) in first
