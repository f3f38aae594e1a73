"""
Codec tests: format detection, per-format cell tokens, metadata field
names, lossy first-layer rules and decode failures.
"""

import json

import pytest

from core.codec import (
    LevelData,
    LevelMetadata,
    decode_level,
    detect_format,
    dumps_level,
    encode_level,
    loads_level,
)
from core.level_grid import Cell, LevelGrid
from core.objectives import ColorObjective
from core.types import Difficulty, GridFormat, LevelDecodeError, LimitType


def _ice_level():
    """2x2 of 'r' with an ice layer at (0,0)."""
    grid = LevelGrid.create(2, 2, "r")
    grid.get_cell(0, 0).add_layer("ice")
    return LevelData(LevelMetadata(level_id=4, available_colors=["r", "g"]), grid)


def _mixed_level():
    grid = LevelGrid([
        [Cell("r", ["ice", "box"]), Cell("null"), Cell("stone")],
        [Cell("random", ["star"]), Cell("g"), Cell("random")],
    ])
    meta = LevelMetadata(level_id=7, move_count=25, limit_type=LimitType.TIMER, timer_seconds=90,
                         difficulty=Difficulty.HARD, available_colors=["r", "g", "b"])
    return LevelData(meta, grid, [ColorObjective("colorMatch", "g", 15)])


# =============================================================================
# DETECTION
# =============================================================================

@pytest.mark.parametrize("document, expected", [
    ({"grid": [[{"code": "r", "objTypes": []}]]}, GridFormat.STANDARD),
    ({"grid": [["r"]]}, GridFormat.SIMPLE_CODE),
    ({"tiles": [[{"tile": "red"}]]}, GridFormat.CODE_ONLY),
    ({"grid": [[{"tile": "r_ice"}]]}, GridFormat.CODE_ONLY),
    ({"grid": []}, GridFormat.STANDARD),
    ({"level": 1}, GridFormat.STANDARD),
])
def test_detect_format(document, expected):
    assert detect_format(document) == expected


def test_detect_rejects_non_object():
    with pytest.raises(LevelDecodeError):
        detect_format([1, 2])


# =============================================================================
# ENCODE
# =============================================================================

def test_ice_scenario_all_formats(catalog):
    level = _ice_level()

    standard = encode_level(level, GridFormat.STANDARD, catalog)
    assert standard["grid"][0][0] == {"code": "r", "objTypes": ["ice"]}
    assert {"type": "type", "targetObject": "ice", "targetCount": 1} in standard["objectives"]

    simple = encode_level(level, GridFormat.SIMPLE_CODE, catalog)
    assert simple["grid"][0][0] == "objective_ice"
    assert simple["grid"][1] == ["r", "r"]

    code_only = encode_level(level, GridFormat.CODE_ONLY, catalog)
    assert code_only["tiles"][0][0] == {"tile": "r_ice"}
    assert code_only["targets"] == [{"object_type": "ice", "amount": 1}]


def test_standard_header_and_tokens(catalog):
    doc = encode_level(_mixed_level(), GridFormat.STANDARD, catalog)
    assert list(doc)[:8] == ["level", "gridX", "gridY", "moveCount", "limitType",
                             "timerSeconds", "difficulty", "availableColors"]
    assert (doc["gridX"], doc["gridY"]) == (3, 2)
    assert doc["limitType"] == "Timer" and doc["difficulty"] == 2
    assert doc["grid"][0][1] == {"code": "null", "objTypes": []}
    assert doc["grid"][0][2] == {"code": "special_stone", "objTypes": []}
    assert doc["grid"][1][2] == {"code": "random", "objTypes": []}


def test_standard_layer_order_cover_collectable_under(catalog):
    grid = LevelGrid([[Cell("random", ["ice", "star", "box", "mystery"])]])
    doc = encode_level(LevelData(LevelMetadata(), grid), GridFormat.STANDARD, catalog)
    assert doc["grid"][0][0]["objTypes"] == ["box", "star", "ice", "mystery"]


def test_simplecode_tokens(catalog):
    doc = encode_level(_mixed_level(), GridFormat.SIMPLE_CODE, catalog)
    assert doc["grid"] == [
        ["objective_ice", "empty", "special_stone"],
        ["objective_star", "g", "any"],
    ]
    assert doc["objectives"][-1] == {"type": "colorMatch", "target": "g", "count": 15}


def test_codeonly_header_and_tokens(catalog):
    doc = encode_level(_mixed_level(), GridFormat.CODE_ONLY, catalog)
    assert doc["size"] == {"x": 3, "y": 2}
    assert doc["limits"] == {"moves": 25, "type": "Timer", "timer": 90}
    assert doc["colors"] == ["r", "g", "b"]
    assert doc["tiles"] == [
        [{"tile": "r_ice"}, {"tile": "empty"}, {"tile": "stone"}],
        [{"tile": "random_star"}, {"tile": "g"}, {"tile": "any"}],
    ]


def test_dumps_is_pretty_json(catalog):
    text = dumps_level(_ice_level(), GridFormat.STANDARD, catalog)
    assert text.startswith("{\n  ")
    assert json.loads(text)["level"] == 4


# =============================================================================
# ROUND TRIPS
# =============================================================================

def test_standard_round_trip_is_lossless(catalog):
    level = _mixed_level()
    back = decode_level(encode_level(level, GridFormat.STANDARD, catalog), catalog)
    assert back.grid_format == GridFormat.STANDARD
    for row, col, cell in level.grid.iter_cells():
        decoded = back.grid.get_cell(row, col)
        assert decoded.base_code == cell.base_code
        assert set(decoded.layers) == set(cell.layers), f"Layers differ at ({row},{col})"
    assert back.metadata == level.metadata
    assert back.color_objectives == level.color_objectives


@pytest.mark.parametrize("fmt", [GridFormat.SIMPLE_CODE, GridFormat.CODE_ONLY])
def test_lossy_formats_keep_exactly_first_layer(catalog, fmt):
    level = _mixed_level()
    back = decode_level(encode_level(level, fmt, catalog), catalog)
    assert back.grid_format == fmt
    assert back.grid.get_cell(0, 0).layers == ["ice"]


def test_simplecode_objective_decodes_with_default_base(catalog):
    level = _mixed_level()
    back = decode_level(encode_level(level, GridFormat.SIMPLE_CODE, catalog), catalog)
    assert back.grid.get_cell(0, 0) == Cell("r", ["ice"])
    assert back.grid.get_cell(1, 0) == Cell("random", ["star"])
    assert back.grid.get_cell(0, 1) == Cell("null")
    assert back.grid.get_cell(0, 2) == Cell("stone")
    assert back.grid.get_cell(1, 2) == Cell("random")


def test_codeonly_round_trip_keeps_base_and_metadata(catalog):
    level = _mixed_level()
    back = decode_level(encode_level(level, GridFormat.CODE_ONLY, catalog), catalog)
    assert back.grid.get_cell(1, 0) == Cell("random", ["star"])
    assert back.grid.get_cell(0, 2) == Cell("stone")
    assert back.metadata == level.metadata


# =============================================================================
# DECODE DETAILS
# =============================================================================

def test_special_lookup_is_case_insensitive_on_load(catalog):
    doc = {"gridX": 2, "gridY": 1, "grid": [[{"code": "special_rock"}, {"code": "special_lava"}]]}
    level = decode_level(doc, catalog)
    assert level.grid.get_cell(0, 0).base_code == "Rock"
    assert level.grid.get_cell(0, 1).base_code == "special_lava", "Unknown specials keep their token"


def test_simplecode_accepts_standard_aliases(catalog):
    doc = {"gridX": 3, "gridY": 1, "grid": [["null", "random", "objective_lava"]]}
    level = decode_level(doc, catalog)
    assert [c.base_code for c in level.grid.cells[0]] == ["null", "random", "objective_lava"]


def test_codeonly_fallback_fields(catalog):
    doc = {
        "level": 9,
        "gridX": 2, "gridY": 1,
        "moveCount": 33, "limitType": "Timer", "timerSeconds": 45,
        "availableColors": ["b"],
        "objectives": [{"type": "color", "targetObject": "b", "targetCount": 6}],
        "tiles": [[{"tile": "g_box"}, {}]],
    }
    level = decode_level(doc, catalog, GridFormat.CODE_ONLY)
    assert (level.metadata.move_count, level.metadata.limit_type, level.metadata.timer_seconds) == \
        (33, LimitType.TIMER, 45)
    assert level.metadata.available_colors == ["b"]
    assert level.color_objectives == [ColorObjective("color", "b", 6)]
    assert level.grid.get_cell(0, 0) == Cell("g", ["box"])
    assert level.grid.get_cell(0, 1) == Cell("r")


def test_codeonly_split_on_first_underscore(catalog):
    doc = {"size": {"x": 1, "y": 1}, "tiles": [[{"tile": "random_gem_extra"}]]}
    level = decode_level(doc, catalog)
    assert level.grid.get_cell(0, 0) == Cell("random", ["gem_extra"])


def test_missing_colors_means_all_catalog_tiles(catalog):
    level = decode_level({"gridX": 1, "gridY": 1, "grid": [[{"code": "r"}]]}, catalog)
    assert level.metadata.available_colors == catalog.all_tile_codes()



def test_unknown_available_colors_are_dropped(catalog):
    doc = {"gridX": 1, "gridY": 1, "availableColors": ["x", "r", "r"], "grid": [[{"code": "r"}]]}
    assert decode_level(doc, catalog).metadata.available_colors == ["r"]


def test_only_unknown_available_colors_fall_back_to_catalog(catalog):
    doc = {"gridX": 1, "gridY": 1, "availableColors": ["x"], "grid": [[{"code": "r"}]]}
    assert decode_level(doc, catalog).metadata.available_colors == catalog.all_tile_codes()

def test_short_body_keeps_defaults_and_extras_ignored(catalog):
    doc = {"gridX": 2, "gridY": 2, "grid": [[{"code": "g"}, {"code": "b"}, {"code": "y"}]]}
    level = decode_level(doc, catalog)
    assert [c.base_code for c in level.grid.cells[0]] == ["g", "b"]
    assert [c.base_code for c in level.grid.cells[1]] == ["r", "r"]


def test_level_id_override(catalog):
    level = decode_level({"level": 3, "gridX": 1, "gridY": 1}, catalog, level_id=12)
    assert level.metadata.level_id == 12


@pytest.mark.parametrize("document", [
    {"gridY": 2, "grid": [[{"code": "r"}]]},
    {"gridX": "2", "gridY": 2},
    {"gridX": 0, "gridY": 2},
    {"gridX": 1, "gridY": 1, "grid": [[{"objTypes": []}]]},
    {"gridX": 1, "gridY": 1, "grid": [[{"code": "r", "objTypes": "ice"}]]},
    {"gridX": 1, "gridY": 1, "grid": ["not a row"]},
    {"gridX": 1, "gridY": 1, "difficulty": 7},
    {"gridX": 1, "gridY": 1, "availableColors": "rgb"},
])
def test_malformed_documents_raise(catalog, document):
    with pytest.raises(LevelDecodeError):
        decode_level(document, catalog, GridFormat.STANDARD)


def test_loads_level_invalid_json(catalog):
    with pytest.raises(LevelDecodeError):
        loads_level("{not json", catalog)
