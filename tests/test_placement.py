"""
Placement rule tests: per-tool cell effects and the collectable guard.
"""

import pytest

from core.level_grid import Cell, LevelGrid
from core.tools import ToolKind, ToolState


def _tool(kind, code=None):
    return ToolState(kind, code)


def test_color_keeps_only_under_layers(engine):
    cell = Cell("r", ["ice", "box"])
    assert engine.apply_to_cell(cell, _tool(ToolKind.COLOR, "g")) is None
    assert cell == Cell("g", ["ice"])


def test_color_rejected_on_collectable(engine):
    cell = Cell("random", ["star"])
    err = engine.apply_to_cell(cell, _tool(ToolKind.COLOR, "g"), (1, 2))
    assert err is not None
    assert err.message == "Cannot change the color of a tile with collectables!"
    assert err.location == (1, 2)
    assert cell == Cell("random", ["star"]), "Rejected placement must leave the cell untouched"


def test_unknown_color_rejected(engine):
    cell = Cell("r")
    assert engine.apply_to_cell(cell, _tool(ToolKind.COLOR, "zz")) is not None
    assert cell == Cell("r")


def test_eraser_and_empty_clear_layers(engine):
    cell = Cell("stone", ["ice", "box"])
    engine.apply_to_cell(cell, ToolState(ToolKind.ERASER, None, remembered_color="b"))
    assert cell == Cell("b")

    cell = Cell("g", ["ice"])
    engine.apply_to_cell(cell, _tool(ToolKind.EMPTY_TILE))
    assert cell == Cell("null")


def test_special_keeps_under(engine):
    cell = Cell("r", ["grass", "chain"])
    assert engine.apply_to_cell(cell, _tool(ToolKind.SPECIAL, "stone")) is None
    assert cell == Cell("stone", ["grass"])


def test_objective_toggles_without_touching_base(engine):
    cell = Cell("y")
    tool = _tool(ToolKind.OBJECTIVE, "ice")
    engine.apply_to_cell(cell, tool)
    assert cell == Cell("y", ["ice"])
    engine.apply_to_cell(cell, tool)
    assert cell == Cell("y")


def test_unknown_objective_message(engine):
    err = engine.apply_to_cell(Cell("r"), _tool(ToolKind.OBJECTIVE, "lava"))
    assert err.message == "Selected objective not found in data!"


@pytest.mark.parametrize("code", ["ice", "box"])
def test_under_and_cover_allowed_on_collectable(engine, code):
    cell = Cell("random", ["star"])
    assert engine.apply_to_cell(cell, _tool(ToolKind.OBJECTIVE, code)) is None
    assert cell.layers == ["star", code]


def test_collectable_objective_tool_blocked_on_collectable(engine):
    cell = Cell("random", ["star"])
    assert engine.apply_to_cell(cell, _tool(ToolKind.OBJECTIVE, "gem")) is not None
    assert cell.layers == ["star"]


def test_collectable_replaces_other_collectable_and_keeps_under(engine):
    cell = Cell("r", ["ice", "star"])
    engine.apply_to_cell(cell, _tool(ToolKind.COLLECTABLE, "gem"))
    assert cell == Cell("random", ["ice", "gem"])


def test_collectable_toggles_off(engine):
    cell = Cell("r")
    tool = _tool(ToolKind.COLLECTABLE, "star")
    engine.apply_to_cell(cell, tool)
    engine.apply_to_cell(cell, tool)
    assert cell == Cell("random")


def test_place_outside_grid(engine):
    g = LevelGrid.create(2, 2, "r")
    assert engine.place(g, 5, 0, _tool(ToolKind.COLOR, "g")) is not None


def test_row_fill_skips_collectable_cells(engine):
    g = LevelGrid.create(3, 2, "r")
    g.get_cell(0, 1).base_code = "random"
    g.get_cell(0, 1).add_layer("star")

    skipped = engine.fill_row(g, 0, _tool(ToolKind.COLOR, "b"))
    assert len(skipped) == 1
    assert [c.base_code for c in g.cells[0]] == ["b", "random", "b"]
    assert [c.base_code for c in g.cells[1]] == ["r", "r", "r"]


def test_column_fill(engine):
    g = LevelGrid.create(2, 3, "r")
    engine.fill_column(g, 1, _tool(ToolKind.SPECIAL, "stone"))
    assert [g.get_cell(row, 1).base_code for row in range(3)] == ["stone"] * 3
    assert [g.get_cell(row, 0).base_code for row in range(3)] == ["r"] * 3


def test_rectangle_fill_normalizes_and_clamps(engine):
    g = LevelGrid.create(4, 4, "r")
    engine.fill_rectangle(g, (5, 2), (1, 1), _tool(ToolKind.COLOR, "y"))
    changed = {(row, col) for row, col, cell in g.iter_cells() if cell.base_code == "y"}
    assert changed == {(r, c) for r in range(1, 4) for c in range(1, 3)}
