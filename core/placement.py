"""
Placement rules: how the active tool changes a cell.

One per-cell function (apply_to_cell) is shared by direct clicks and by the
row/column/rectangle fills. Direct clicks return rejections so the caller can
show them; fills only log them and keep going with the remaining cells.
"""
import logging
from typing import List, Optional, Tuple

from core.catalog import TileCatalog
from core.level_grid import Cell, LevelGrid
from core.tools import ToolKind, ToolState
from core.types import NULL_CODE, RANDOM_CODE, ObjectiveCategory, ValidationError
from utils.coords import coordinate_to_string, iter_rectangle

logger = logging.getLogger(__name__)


class PlacementEngine:
    """Applies ToolState selections to grid cells, enforcing legality rules."""

    def __init__(self, catalog: TileCatalog):
        self.catalog = catalog

    # =============================================================================
    # PER-CELL RULES
    # =============================================================================

    def apply_to_cell(self, cell: Cell, tool: ToolState,
                      location: Optional[Tuple[int, int]] = None) -> Optional[ValidationError]:
        """
        Apply the tool to a single cell.

        Args:
            cell: Live cell to mutate
            tool: Active tool selection
            location: (row, col) used in rejection messages

        Returns:
            None on success, a ValidationError if the placement was rejected
            (the cell is left untouched in that case)
        """
        kind = tool.kind

        if kind == ToolKind.COLOR:
            return self._apply_color(cell, tool.code, location)
        if kind == ToolKind.ERASER:
            cell.base_code = tool.eraser_code
            cell.clear_layers()
            return None
        if kind == ToolKind.EMPTY_TILE:
            cell.base_code = NULL_CODE
            cell.clear_layers()
            return None
        if kind == ToolKind.SPECIAL:
            return self._apply_special(cell, tool.code, location)
        if kind == ToolKind.OBJECTIVE:
            return self._apply_objective(cell, tool.code, location)
        if kind == ToolKind.COLLECTABLE:
            return self._apply_collectable(cell, tool.code, location)

        # COLOR_OBJECTIVE_EDITOR edits the objective list, never cells
        return None

    def _apply_color(self, cell: Cell, code: str, location) -> Optional[ValidationError]:
        if self.catalog.lookup_tile_by_code(code) is None:
            return ValidationError("error", f"Unknown tile colour '{code}'", location)
        if self._has_collectable(cell):
            return ValidationError("error", "Cannot change the color of a tile with collectables!", location)

        cell.base_code = code
        self._keep_only_under(cell)
        return None

    def _apply_special(self, cell: Cell, code: str, location) -> Optional[ValidationError]:
        if self.catalog.lookup_special_by_code(code) is None:
            return ValidationError("error", f"Unknown special tile '{code}'", location)

        cell.base_code = code
        self._keep_only_under(cell)
        return None

    def _apply_objective(self, cell: Cell, code: str, location) -> Optional[ValidationError]:
        objective = self.catalog.lookup_objective_by_code(code)
        if objective is None:
            return ValidationError("error", "Selected objective not found in data!", location)

        layered = objective.category in (ObjectiveCategory.UNDER, ObjectiveCategory.COVER)
        if not layered and self._has_collectable(cell):
            return ValidationError("error", "Only under or cover objectives can be placed on collectables!", location)

        # The base code is never touched by objective placement
        if cell.has_layer(code):
            cell.remove_layer(code)
        else:
            cell.add_layer(code)
        return None

    def _apply_collectable(self, cell: Cell, code: str, location) -> Optional[ValidationError]:
        if not self.catalog.is_collectable(code):
            return ValidationError("error", f"Unknown collectable '{code}'", location)

        cell.base_code = RANDOM_CODE
        if cell.has_layer(code):
            cell.remove_layer(code)
            return None

        # Only one collectable per cell; under layers stay
        for layer in list(cell.layers):
            if self.catalog.is_collectable(layer):
                cell.remove_layer(layer)
        cell.add_layer(code)
        return None

    def _has_collectable(self, cell: Cell) -> bool:
        return any(self.catalog.is_collectable(layer) for layer in cell.layers)

    def _keep_only_under(self, cell: Cell) -> None:
        cell.layers = [
            layer for layer in cell.layers
            if self.catalog.category_of(layer) == ObjectiveCategory.UNDER
        ]

    # =============================================================================
    # SINGLE CELL AND FILLS
    # =============================================================================

    def place(self, grid: LevelGrid, row: int, col: int, tool: ToolState) -> Optional[ValidationError]:
        """Direct click on one cell; a rejection is returned for display."""
        if not grid.cell_exists(row, col):
            return ValidationError("error", "Cell outside grid", (row, col))
        return self.apply_to_cell(grid.get_cell(row, col), tool, (row, col))

    def fill_row(self, grid: LevelGrid, row: int, tool: ToolState) -> List[ValidationError]:
        if not 0 <= row < grid.grid_y:
            return []
        return self._fill(grid, [(row, col) for col in range(grid.grid_x)], tool)

    def fill_column(self, grid: LevelGrid, col: int, tool: ToolState) -> List[ValidationError]:
        if not 0 <= col < grid.grid_x:
            return []
        return self._fill(grid, [(row, col) for row in range(grid.grid_y)], tool)

    def fill_rectangle(self, grid: LevelGrid, start: Tuple[int, int], end: Tuple[int, int],
                       tool: ToolState) -> List[ValidationError]:
        """Fill every cell between two corners (in any order, clamped to the grid)."""
        cells = list(iter_rectangle(start, end, grid.grid_y, grid.grid_x))
        return self._fill(grid, cells, tool)

    def _fill(self, grid: LevelGrid, coordinates: List[Tuple[int, int]], tool: ToolState) -> List[ValidationError]:
        """
        Apply the tool to each coordinate.

        Rejected cells are skipped without stopping the fill. The rejections
        are returned for inspection but are not meant to be surfaced.
        """
        skipped: List[ValidationError] = []
        for row, col in coordinates:
            rejection = self.apply_to_cell(grid.get_cell(row, col), tool, (row, col))
            if rejection is not None:
                logger.debug("Fill skipped cell %s: %s", coordinate_to_string(row, col), rejection.message)
                skipped.append(rejection)
        return skipped
