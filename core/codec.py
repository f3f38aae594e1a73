"""
Level JSON codec for the three supported shapes.

Standard:
    {"level", "gridX", "gridY", "moveCount", "limitType", "timerSeconds",
     "difficulty", "availableColors", "objectives": [{type, targetObject, targetCount}],
     "grid": [[{"code": "r", "objTypes": ["ice"]}, ...], ...]}
SimpleCode:
    same header, "objectives": [{type, target, count}],
    "grid": [["r", "objective_ice", "special_stone", "empty", "any"], ...]
CodeOnly:
    {"level", "size": {x, y}, "limits": {moves, type, timer}, "difficulty",
     "colors", "targets": [{object_type, amount}],
     "tiles": [[{"tile": "r_ice"}, {"tile": "stone"}], ...]}

SimpleCode and CodeOnly keep only the first layer of a cell. Grid rows are
written bottom row first, matching LevelGrid indexing.

Decoding never touches a live session: it either returns a complete
LevelData or raises LevelDecodeError.
"""
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Type

from core.catalog import TileCatalog
from core.level_grid import Cell, LevelGrid
from core.objectives import (
    ColorObjective,
    build_export_objectives,
    count_layers,
    reconstruct_color_objectives,
)
from core.types import (
    DEFAULT_MOVE_COUNT,
    DEFAULT_TIMER_SECONDS,
    NULL_CODE,
    OBJECTIVE_PREFIX,
    RANDOM_CODE,
    SPECIAL_PREFIX,
    Difficulty,
    GridFormat,
    LevelDecodeError,
    LimitType,
    ObjectiveCategory,
)

logger = logging.getLogger(__name__)

# Cell token aliases used by the compact formats
EMPTY_TOKENS = ("empty", NULL_CODE)
ANY_TOKENS = ("any", RANDOM_CODE)

# Export order of layers in Standard objTypes
_LAYER_EXPORT_ORDER = (ObjectiveCategory.COVER, ObjectiveCategory.COLLECTABLE, ObjectiveCategory.UNDER)


@dataclass
class LevelMetadata:
    """Everything saved with a level except the grid and its objectives."""
    level_id: int = 1
    move_count: int = DEFAULT_MOVE_COUNT
    limit_type: LimitType = LimitType.MOVES
    timer_seconds: int = DEFAULT_TIMER_SECONDS
    difficulty: Difficulty = Difficulty.EASY
    available_colors: List[str] = field(default_factory=list)


@dataclass
class LevelData:
    """A complete level as read from or written to JSON."""
    metadata: LevelMetadata
    grid: LevelGrid
    color_objectives: List[ColorObjective] = field(default_factory=list)
    grid_format: GridFormat = GridFormat.STANDARD


# =============================================================================
# FORMAT DETECTION
# =============================================================================

def detect_format(document: Any) -> GridFormat:
    """
    Work out which shape an unlabeled level document uses.

    Order: "grid" with a bare-string first cell is SimpleCode; a first cell
    with "tile" is CodeOnly; a first cell with "code" is Standard; a
    top-level "tiles" list is CodeOnly; anything else is read as Standard.
    """
    if not isinstance(document, dict):
        raise LevelDecodeError("Level document must be a JSON object")

    grid = document.get("grid")
    if isinstance(grid, list):
        first_cell = _first_cell(grid)
        if isinstance(first_cell, str):
            return GridFormat.SIMPLE_CODE
        if isinstance(first_cell, dict):
            if first_cell.get("tile") is not None:
                return GridFormat.CODE_ONLY
            if first_cell.get("code") is not None:
                return GridFormat.STANDARD

    if isinstance(document.get("tiles"), list):
        return GridFormat.CODE_ONLY

    return GridFormat.STANDARD


def _first_cell(rows: List[Any]) -> Any:
    if rows and isinstance(rows[0], list) and rows[0]:
        return rows[0][0]
    return None


# =============================================================================
# FORMAT BASE
# =============================================================================

class LevelFormat(ABC):
    """One JSON shape: cell tokens, header fields and objective fields."""

    grid_format: GridFormat
    grid_key: str = "grid"
    objectives_key: str = "objectives"

    def __init__(self, catalog: TileCatalog):
        self.catalog = catalog

    @abstractmethod
    def encode_cell(self, cell: Cell) -> Any:
        """Serialize one cell."""

    @abstractmethod
    def decode_cell(self, token: Any, location: str) -> Cell:
        """Rebuild one cell from its token; location is used in errors."""

    # -- encode ------------------------------------------------------------------

    def encode(self, level: LevelData) -> Dict[str, Any]:
        """Serialize a level to a JSON-ready dict in this format."""
        document = self._encode_header(level)
        document[self.objectives_key] = build_export_objectives(
            count_layers(level.grid), level.color_objectives, self.grid_format
        )
        document[self.grid_key] = [
            [self.encode_cell(cell) for cell in row] for row in level.grid.cells
        ]
        return document

    def _encode_header(self, level: LevelData) -> Dict[str, Any]:
        meta = level.metadata
        return {
            "level": meta.level_id,
            "gridX": level.grid.grid_x,
            "gridY": level.grid.grid_y,
            "moveCount": meta.move_count,
            "limitType": meta.limit_type.value,
            "timerSeconds": meta.timer_seconds,
            "difficulty": int(meta.difficulty),
            "availableColors": list(meta.available_colors),
        }

    # -- decode ------------------------------------------------------------------

    def decode(self, document: Any, level_id: Optional[int] = None) -> LevelData:
        """
        Rebuild a level from a document in this format.

        Args:
            document: Parsed JSON object
            level_id: Overrides the "level" field (files are keyed by id)

        Raises:
            LevelDecodeError: On any missing or mistyped field
        """
        if not isinstance(document, dict):
            raise LevelDecodeError("Level document must be a JSON object")

        metadata, grid_x, grid_y = self._decode_header(document)
        if level_id is not None:
            metadata.level_id = level_id

        objectives = reconstruct_color_objectives(self._objective_entries(document), self.grid_format)

        try:
            grid = LevelGrid.create(grid_x, grid_y, self.catalog.default_tile_code())
        except ValueError as e:
            raise LevelDecodeError(str(e), "size") from e
        self._decode_grid_body(document, grid)

        return LevelData(metadata, grid, objectives, self.grid_format)

    def _decode_header(self, document: Dict[str, Any]) -> Tuple[LevelMetadata, int, int]:
        grid_x = _require_int(document, "gridX")
        grid_y = _require_int(document, "gridY")
        metadata = LevelMetadata(
            level_id=_optional_int(document, "level", 1),
            move_count=_optional_int(document, "moveCount", DEFAULT_MOVE_COUNT),
            limit_type=_parse_limit_type(document.get("limitType")),
            timer_seconds=_optional_int(document, "timerSeconds", DEFAULT_TIMER_SECONDS),
            difficulty=_parse_difficulty(document.get("difficulty")),
            available_colors=self._decode_colors(document.get("availableColors"), "availableColors"),
        )
        return metadata, grid_x, grid_y

    def _objective_entries(self, document: Dict[str, Any]) -> Any:
        return document.get(self.objectives_key)

    def _grid_rows(self, document: Dict[str, Any]) -> Any:
        return document.get(self.grid_key)

    def _decode_grid_body(self, document: Dict[str, Any], grid: LevelGrid) -> None:
        """Fill grid from the document rows; missing cells keep the default tile."""
        rows = self._grid_rows(document)
        if rows is None:
            logger.warning("Level document has no grid body; using default tiles")
            return
        if not isinstance(rows, list):
            raise LevelDecodeError("Grid body must be a list of rows", self.grid_key)

        for y, row in enumerate(rows[:grid.grid_y]):
            if not isinstance(row, list):
                raise LevelDecodeError("Grid row must be a list", f"{self.grid_key}[{y}]")
            for x, token in enumerate(row[:grid.grid_x]):
                grid.cells[y][x] = self.decode_cell(token, f"{self.grid_key}[{y}][{x}]")

    def _decode_colors(self, colors: Any, key: str) -> List[str]:
        if colors is None or colors == []:
            return self.catalog.all_tile_codes()
        if not isinstance(colors, list) or not all(isinstance(c, str) for c in colors):
            raise LevelDecodeError("Available colours must be a list of strings", key)

        known = []
        for code in colors:
            if self.catalog.lookup_tile_by_code(code) is None:
                logger.warning("Dropping unknown available colour '%s'", code)
            elif code not in known:
                known.append(code)
        return known or self.catalog.all_tile_codes()

    # -- shared token helpers ----------------------------------------------------

    def _resolve_special(self, special_code: str, token: str) -> str:
        """Map a prefixed special token back to its catalog code."""
        special = self.catalog.lookup_special_by_code(special_code, case_insensitive=True)
        if special is None:
            logger.warning("Unknown special tile '%s'; keeping '%s' as is", special_code, token)
            return token
        return special.code

    def _export_code(self, cell: Cell, empty: str, any_: str, special_prefix: str) -> str:
        if cell.base_code == NULL_CODE:
            return empty
        if cell.base_code == RANDOM_CODE:
            return any_
        if self.catalog.is_special(cell.base_code):
            return special_prefix + cell.base_code
        return cell.base_code


# =============================================================================
# STANDARD
# =============================================================================

class StandardFormat(LevelFormat):
    """Lossless format: every layer is kept in objTypes."""

    grid_format = GridFormat.STANDARD

    def encode_cell(self, cell: Cell) -> Dict[str, Any]:
        return {
            "code": self._export_code(cell, NULL_CODE, RANDOM_CODE, SPECIAL_PREFIX),
            "objTypes": self._ordered_layers(cell),
        }

    def _ordered_layers(self, cell: Cell) -> List[str]:
        """Cover, then Collectable, then Under; codes unknown to the catalog last."""
        ordered = []
        for category in _LAYER_EXPORT_ORDER:
            ordered.extend(layer for layer in cell.layers if self.catalog.category_of(layer) == category)
        ordered.extend(layer for layer in cell.layers if self.catalog.category_of(layer) is None)
        return ordered

    def decode_cell(self, token: Any, location: str) -> Cell:
        if not isinstance(token, dict):
            raise LevelDecodeError("Standard cell must be an object", location)
        code = token.get("code")
        if not isinstance(code, str):
            raise LevelDecodeError("Standard cell needs a string 'code'", location)

        if code.startswith(SPECIAL_PREFIX):
            code = self._resolve_special(code[len(SPECIAL_PREFIX):], code)

        return Cell(code, _decode_layers(token.get("objTypes"), location))


# =============================================================================
# SIMPLE CODE
# =============================================================================

class SimpleCodeFormat(LevelFormat):
    """One string per cell; a layered cell keeps only its first layer."""

    grid_format = GridFormat.SIMPLE_CODE

    def encode_cell(self, cell: Cell) -> str:
        if cell.layers:
            return OBJECTIVE_PREFIX + cell.layers[0]
        return self._export_code(cell, "empty", "any", SPECIAL_PREFIX)

    def decode_cell(self, token: Any, location: str) -> Cell:
        if token is None or token == "":
            return Cell(NULL_CODE)
        if not isinstance(token, str):
            raise LevelDecodeError("SimpleCode cell must be a string", location)

        if token.startswith(OBJECTIVE_PREFIX):
            return self._decode_objective_token(token)
        if token.startswith(SPECIAL_PREFIX):
            return Cell(self._resolve_special(token[len(SPECIAL_PREFIX):], token))
        if token in EMPTY_TOKENS:
            return Cell(NULL_CODE)
        if token in ANY_TOKENS:
            return Cell(RANDOM_CODE)
        return Cell(token)

    def _decode_objective_token(self, token: str) -> Cell:
        # The original base colour is not stored in this format
        code = token[len(OBJECTIVE_PREFIX):]
        objective = self.catalog.lookup_objective_by_code(code)
        if objective is None:
            logger.warning("Unknown objective in cell token '%s'; kept as tile code", token)
            return Cell(token)
        if objective.category == ObjectiveCategory.COLLECTABLE:
            return Cell(RANDOM_CODE, [code])
        return Cell(self.catalog.default_tile_code(), [code])


# =============================================================================
# CODE ONLY
# =============================================================================

class CodeOnlyFormat(LevelFormat):
    """{"tile": "<base>_<layer>"} per cell; nested size/limits header."""

    grid_format = GridFormat.CODE_ONLY
    grid_key = "tiles"
    objectives_key = "targets"

    def encode_cell(self, cell: Cell) -> Dict[str, str]:
        if cell.layers:
            return {"tile": f"{cell.base_code}_{cell.layers[0]}"}
        return {"tile": self._export_code(cell, "empty", "any", "")}

    def decode_cell(self, token: Any, location: str) -> Cell:
        if not isinstance(token, dict):
            raise LevelDecodeError("CodeOnly cell must be an object", location)

        value = token.get("tile")
        if value is None and "code" in token:
            # Standard-shaped cell inside a CodeOnly document
            code = token.get("code")
            if not isinstance(code, str):
                raise LevelDecodeError("Cell needs a string 'code'", location)
            return Cell(code, _decode_layers(token.get("objTypes"), location))
        if value is None:
            value = self.catalog.default_tile_code()
        if not isinstance(value, str):
            raise LevelDecodeError("CodeOnly 'tile' must be a string", location)

        if value == "":
            return Cell(NULL_CODE)
        if "_" in value:
            base, _, layer = value.partition("_")
            return Cell(base, [layer] if layer else [])
        if value in EMPTY_TOKENS:
            return Cell(NULL_CODE)
        if value in ANY_TOKENS:
            return Cell(RANDOM_CODE)
        return Cell(value)

    def _encode_header(self, level: LevelData) -> Dict[str, Any]:
        meta = level.metadata
        return {
            "level": meta.level_id,
            "size": {"x": level.grid.grid_x, "y": level.grid.grid_y},
            "limits": {
                "moves": meta.move_count,
                "type": meta.limit_type.value,
                "timer": meta.timer_seconds,
            },
            "difficulty": int(meta.difficulty),
            "colors": list(meta.available_colors),
        }

    def _decode_header(self, document: Dict[str, Any]) -> Tuple[LevelMetadata, int, int]:
        size = document.get("size")
        if isinstance(size, dict):
            grid_x = _require_int(size, "x", "size.x")
            grid_y = _require_int(size, "y", "size.y")
        else:
            grid_x = _require_int(document, "gridX")
            grid_y = _require_int(document, "gridY")

        limits = document.get("limits")
        if isinstance(limits, dict):
            move_count = _optional_int(limits, "moves", DEFAULT_MOVE_COUNT, "limits.moves")
            timer_seconds = _optional_int(limits, "timer", DEFAULT_TIMER_SECONDS, "limits.timer")
            limit_type = _parse_limit_type(limits.get("type"))
        else:
            move_count = _optional_int(document, "moveCount", DEFAULT_MOVE_COUNT)
            timer_seconds = _optional_int(document, "timerSeconds", DEFAULT_TIMER_SECONDS)
            limit_type = _parse_limit_type(document.get("limitType"))

        if document.get("colors") is not None:
            colors = self._decode_colors(document.get("colors"), "colors")
        else:
            colors = self._decode_colors(document.get("availableColors"), "availableColors")

        metadata = LevelMetadata(
            level_id=_optional_int(document, "level", 1),
            move_count=move_count,
            limit_type=limit_type,
            timer_seconds=timer_seconds,
            difficulty=_parse_difficulty(document.get("difficulty")),
            available_colors=colors,
        )
        return metadata, grid_x, grid_y

    def _objective_entries(self, document: Dict[str, Any]) -> Any:
        if document.get("targets") is not None:
            return document.get("targets")
        return document.get("objectives")

    def _grid_rows(self, document: Dict[str, Any]) -> Any:
        if document.get("tiles") is not None:
            return document.get("tiles")
        return document.get("grid")


# =============================================================================
# FIELD PARSING
# =============================================================================

def _require_int(source: Dict[str, Any], key: str, field_name: Optional[str] = None) -> int:
    value = source.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise LevelDecodeError("Missing or non-integer value", field_name or key)
    return value


def _optional_int(source: Dict[str, Any], key: str, default: int, field_name: Optional[str] = None) -> int:
    if source.get(key) is None:
        return default
    return _require_int(source, key, field_name)


def _parse_limit_type(value: Any) -> LimitType:
    for limit_type in LimitType:
        if value == limit_type.value:
            return limit_type
    if value is not None:
        logger.warning("Unknown limit type %r; using %s", value, LimitType.MOVES.value)
    return LimitType.MOVES


def _parse_difficulty(value: Any) -> Difficulty:
    if value is None:
        return Difficulty.EASY
    if isinstance(value, str) and value.upper() in Difficulty.__members__:
        return Difficulty[value.upper()]
    try:
        return Difficulty(value)
    except ValueError as e:
        raise LevelDecodeError(f"Unknown difficulty {value!r}", "difficulty") from e


def _decode_layers(layers: Any, location: str) -> List[str]:
    if layers is None:
        return []
    if not isinstance(layers, list) or not all(isinstance(layer, str) for layer in layers):
        raise LevelDecodeError("objTypes must be a list of strings", location)
    # Drop duplicates, keep order
    return list(dict.fromkeys(layers))


# =============================================================================
# ENTRY POINTS
# =============================================================================

_FORMATS: Dict[GridFormat, Type[LevelFormat]] = {
    GridFormat.STANDARD: StandardFormat,
    GridFormat.SIMPLE_CODE: SimpleCodeFormat,
    GridFormat.CODE_ONLY: CodeOnlyFormat,
}


def get_format(fmt: GridFormat, catalog: TileCatalog) -> LevelFormat:
    return _FORMATS[fmt](catalog)


def encode_level(level: LevelData, fmt: GridFormat, catalog: TileCatalog) -> Dict[str, Any]:
    return get_format(fmt, catalog).encode(level)


def decode_level(document: Any, catalog: TileCatalog, fmt: Optional[GridFormat] = None,
                 level_id: Optional[int] = None) -> LevelData:
    """
    Decode a level document, detecting its format unless fmt is given.

    Raises:
        LevelDecodeError: If the document does not fit the format
    """
    if fmt is None:
        fmt = detect_format(document)
        logger.info("Format auto-detected: %s", fmt.value)
    return get_format(fmt, catalog).decode(document, level_id)


def dumps_level(level: LevelData, fmt: GridFormat, catalog: TileCatalog) -> str:
    """Pretty JSON text for a level."""
    return json.dumps(encode_level(level, fmt, catalog), indent=2)


def loads_level(text: str, catalog: TileCatalog, level_id: Optional[int] = None) -> LevelData:
    """Parse JSON text and decode it with format auto-detection."""
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise LevelDecodeError(f"Invalid JSON: {e}") from e
    return decode_level(document, catalog, level_id=level_id)
