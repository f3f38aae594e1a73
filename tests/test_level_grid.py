"""
Grid store tests: creation bounds, resize overlap, deep copies, quick actions.
"""

import numpy as np
import pytest

from core.level_grid import Cell, LevelGrid


def test_create_fills_default_code():
    g = LevelGrid.create(3, 2, "r")
    assert (g.grid_x, g.grid_y) == (3, 2)
    assert all(cell == Cell("r") for _, _, cell in g.iter_cells())


@pytest.mark.parametrize("x, y", [(0, 5), (5, 0), (21, 5), (5, 21)])
def test_create_rejects_out_of_range(x, y):
    with pytest.raises(ValueError):
        LevelGrid.create(x, y, "r")


def test_ragged_matrix_rejected():
    with pytest.raises(ValueError):
        LevelGrid([[Cell("r"), Cell("g")], [Cell("r")]])


def test_get_cell_outside_raises():
    g = LevelGrid.create(2, 2, "r")
    with pytest.raises(IndexError):
        g.get_cell(2, 0)
    assert not g.cell_exists(-1, 0)


def test_cell_layers_stay_unique():
    cell = Cell("r")
    cell.add_layer("ice")
    cell.add_layer("ice")
    assert cell.layers == ["ice"]
    cell.remove_layer("box")
    assert cell.layers == ["ice"]


def test_resize_keeps_overlap_and_pads_with_default():
    g = LevelGrid.create(3, 3, "r")
    g.get_cell(0, 0).base_code = "g"
    g.get_cell(0, 0).add_layer("ice")
    g.get_cell(2, 2).base_code = "b"

    assert g.resize(4, 2, "y")
    assert (g.grid_x, g.grid_y) == (4, 2)
    assert g.get_cell(0, 0) == Cell("g", ["ice"])
    assert g.get_cell(0, 3) == Cell("y")
    assert g.get_cell(1, 3) == Cell("y")


def test_resize_copies_layer_lists():
    g = LevelGrid.create(2, 2, "r")
    original = g.get_cell(0, 0)
    original.add_layer("ice")
    g.resize(3, 3, "r")
    g.get_cell(0, 0).add_layer("box")
    assert original.layers == ["ice"], "Resized grid must not share layer lists with the old cells"


@pytest.mark.parametrize("x, y", [(6, 6), (0, 6), (21, 3)])
def test_resize_noop_cases(x, y):
    g = LevelGrid.create(6, 6, "r")
    assert not g.resize(x, y, "r")
    assert (g.grid_x, g.grid_y) == (6, 6)



def test_resize_to_same_size_leaves_grid_untouched():
    g = LevelGrid.create(3, 2, "r")
    g.get_cell(0, 1).base_code = "g"
    g.get_cell(1, 2).add_layer("ice")
    before = g.deep_copy()
    assert not g.resize(3, 2, "b")
    assert g == before


def test_shrink_then_grow_pads_with_new_default():
    g = LevelGrid.create(3, 3, "r")
    g.get_cell(2, 2).base_code = "g"
    g.get_cell(2, 2).add_layer("box")
    assert g.resize(2, 2, "r")
    assert g.resize(3, 3, "y")
    assert g.get_cell(2, 2) == Cell("y")
    assert g.get_cell(0, 2) == Cell("y")
    assert g.get_cell(1, 1) == Cell("r")

def test_deep_copy_is_independent():
    g = LevelGrid.create(2, 2, "r")
    copy = g.deep_copy()
    assert copy == g
    copy.get_cell(1, 1).add_layer("ice")
    copy.get_cell(0, 0).base_code = "g"
    assert g.get_cell(1, 1).layers == []
    assert g.get_cell(0, 0).base_code == "r"
    assert copy != g


def test_random_fill_uses_only_given_colors_and_clears_layers():
    g = LevelGrid.create(5, 5, "r")
    g.get_cell(2, 2).add_layer("ice")
    g.random_fill(["g", "b"], rng=np.random.default_rng(7))
    codes = {cell.base_code for _, _, cell in g.iter_cells()}
    assert codes <= {"g", "b"}
    assert all(not cell.layers for _, _, cell in g.iter_cells())


def test_random_fill_requires_colors():
    with pytest.raises(ValueError):
        LevelGrid.create(2, 2, "r").random_fill([])


def test_mirrors():
    g = LevelGrid([[Cell("r"), Cell("g")], [Cell("b"), Cell("y")]])
    g.mirror_horizontal()
    assert [[c.base_code for c in row] for row in g.cells] == [["g", "r"], ["y", "b"]]
    g.mirror_vertical()
    assert [[c.base_code for c in row] for row in g.cells] == [["y", "b"], ["g", "r"]]


def test_statistics(catalog):
    g = LevelGrid([[Cell("null"), Cell("random", ["star"])], [Cell("stone", ["ice"]), Cell("r")]])
    stats = g.get_statistics(catalog)
    assert stats == {
        "empty_cells": 1,
        "random_cells": 1,
        "special_cells": 1,
        "color_cells": 1,
        "layered_cells": 2,
        "total_cells": 4,
    }
