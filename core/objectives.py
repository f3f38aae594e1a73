"""
Level objectives: counted layer objectives plus authored colour objectives.

Layer objectives are never stored; they are counted from the grid at save
time. Colour objectives ("match N tiles of colour X", or of any colour with
target "all") are authored by the designer and merged after the counted ones.
"""
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping

from core.level_grid import LevelGrid
from core.types import GridFormat, LevelDecodeError

# Type strings recognised as colour objectives when reading any format
COLOR_OBJECTIVE_TYPES = frozenset({"colorMatch", "matchColor", "color", "colorTile"})

# Type written for colour objectives created in each format
_COLOR_OBJECTIVE_TYPE_BY_FORMAT = {
    GridFormat.STANDARD: "colorMatch",
    GridFormat.SIMPLE_CODE: "matchColor",
    GridFormat.CODE_ONLY: "color",
}

# Literal written as "type" of counted layer objectives. Downstream level
# loaders read this exact value, so it is kept as is.
COUNTED_OBJECTIVE_TYPE = "type"


@dataclass
class ColorObjective:
    type: str
    target_color: str
    count: int


def color_objective_type(fmt: GridFormat) -> str:
    return _COLOR_OBJECTIVE_TYPE_BY_FORMAT[fmt]


def is_color_objective(objective_type: Any) -> bool:
    return isinstance(objective_type, str) and objective_type in COLOR_OBJECTIVE_TYPES


# =============================================================================
# EXPORT
# =============================================================================

def count_layers(grid: LevelGrid) -> Dict[str, int]:
    """Tally every layer code across the grid, in first-seen order."""
    counts: Counter = Counter()
    for _, _, cell in grid.iter_cells():
        counts.update(cell.layers)
    return dict(counts)


def build_export_objectives(counted_layers: Mapping[str, int],
                            color_objectives: Iterable[ColorObjective],
                            fmt: GridFormat) -> List[Dict[str, Any]]:
    """
    Build the objectives list for a saved level.

    Counted layers come first (one entry per code), then the colour
    objectives, each written with the field names of fmt:
        Standard:   {type, targetObject, targetCount}
        SimpleCode: {type, target, count}
        CodeOnly:   {object_type, amount}  (colour objectives lose their type)
    """
    result: List[Dict[str, Any]] = []

    if fmt == GridFormat.CODE_ONLY:
        for code, count in counted_layers.items():
            result.append({"object_type": code, "amount": count})
        for objective in color_objectives:
            result.append({"object_type": objective.target_color, "amount": objective.count})
        return result

    object_field, count_field = _object_and_count_fields(fmt)
    for code, count in counted_layers.items():
        result.append({"type": COUNTED_OBJECTIVE_TYPE, object_field: code, count_field: count})
    for objective in color_objectives:
        result.append({"type": objective.type, object_field: objective.target_color, count_field: objective.count})
    return result


def _object_and_count_fields(fmt: GridFormat):
    if fmt == GridFormat.SIMPLE_CODE:
        return "target", "count"
    return "targetObject", "targetCount"


# =============================================================================
# IMPORT
# =============================================================================

def reconstruct_color_objectives(entries: Any, fmt: GridFormat) -> List[ColorObjective]:
    """
    Recover the authored colour objectives from a decoded objectives list.

    Counted layer objectives are dropped (they are recounted from the grid on
    the next save); only entries whose type is a known colour objective type
    survive. Field fallbacks follow what each format has been seen to contain.

    Raises:
        LevelDecodeError: If entries is not a list of objects or a kept entry
            has no usable count
    """
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise LevelDecodeError("Objectives must be a list", "objectives")

    objectives: List[ColorObjective] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise LevelDecodeError("Objective entry must be an object", f"objectives[{index}]")

        if fmt == GridFormat.SIMPLE_CODE:
            objective_type = _first_present(entry, "type", "target", default="colorMatch")
            target = _first_present(entry, "target", "targetObject")
            count = _first_present(entry, "count", "targetCount")
        elif fmt == GridFormat.CODE_ONLY:
            objective_type = _first_present(entry, "object_type", "type", default="color")
            target = _first_present(entry, "object_type", "targetObject")
            count = _first_present(entry, "amount", "targetCount", default=1)
        else:
            objective_type = entry.get("type")
            target = entry.get("targetObject")
            count = entry.get("targetCount")

        if not is_color_objective(objective_type):
            continue

        try:
            count = int(count)
        except (TypeError, ValueError) as e:
            raise LevelDecodeError("Colour objective count must be an integer", f"objectives[{index}]") from e
        objectives.append(ColorObjective(objective_type, target, count))

    return objectives


def _first_present(entry: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if entry.get(key) is not None:
            return entry[key]
    return default


# =============================================================================
# EDITING
# =============================================================================

def upsert_color_objective(objectives: List[ColorObjective], color: str, count: int,
                           fmt: GridFormat) -> ColorObjective:
    """
    Set the count for color, adding a new objective if none targets it yet.

    Raises:
        ValueError: If count is not positive
    """
    if count <= 0:
        raise ValueError(f"Colour objective count must be positive: {count}")

    for objective in objectives:
        if objective.target_color == color:
            objective.count = count
            return objective

    objective = ColorObjective(color_objective_type(fmt), color, count)
    objectives.append(objective)
    return objective


def remove_color_objective(objectives: List[ColorObjective], color: str) -> bool:
    """Remove the objective targeting color; False if there was none."""
    for objective in objectives:
        if objective.target_color == color:
            objectives.remove(objective)
            return True
    return False
