"""
LevelGrid - rectangular cell store for the tile level editor.

Rows are indexed bottom-up (row 0 is the bottom row of the level) and every
row always holds exactly grid_x cells. Cells carry a base code and an ordered,
duplicate-free list of objective layers; layer categories are never stored
here, they are looked up from the catalog when needed.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from core.catalog import TileCatalog
from core.types import MAX_GRID_SIZE, MIN_GRID_SIZE, NULL_CODE, RANDOM_CODE

logger = logging.getLogger(__name__)


@dataclass
class Cell:
    """One grid cell: a base tile code plus stacked objective layers."""
    base_code: str
    layers: List[str] = field(default_factory=list)

    def copy(self) -> 'Cell':
        """Independent copy (new layer list)."""
        return Cell(self.base_code, list(self.layers))

    def has_layer(self, code: str) -> bool:
        return code in self.layers

    def add_layer(self, code: str) -> None:
        if code not in self.layers:
            self.layers.append(code)

    def remove_layer(self, code: str) -> None:
        if code in self.layers:
            self.layers.remove(code)

    def clear_layers(self) -> None:
        self.layers.clear()


class LevelGrid:
    """
    Grid state for one level.

    Attributes:
        grid_x: Number of columns
        grid_y: Number of rows
        cells: cells[row][col], row 0 = bottom
    """

    def __init__(self, cells: List[List[Cell]]):
        """
        Wrap an existing cell matrix (use LevelGrid.create for a fresh grid).

        Args:
            cells: Rectangular matrix of cells, rows bottom-up
        """
        if not cells or not cells[0]:
            raise ValueError("Grid must have at least one row and one column")
        width = len(cells[0])
        if any(len(row) != width for row in cells):
            raise ValueError("Every grid row must have the same number of cells")
        _check_dimensions(width, len(cells))

        self.cells: List[List[Cell]] = cells

    @classmethod
    def create(cls, grid_x: int, grid_y: int, default_code: str) -> 'LevelGrid':
        """Create a grid where every cell holds default_code and no layers."""
        _check_dimensions(grid_x, grid_y)
        return cls([[Cell(default_code) for _ in range(grid_x)] for _ in range(grid_y)])

    @property
    def grid_x(self) -> int:
        return len(self.cells[0])

    @property
    def grid_y(self) -> int:
        return len(self.cells)

    # =============================================================================
    # CELL QUERIES
    # =============================================================================

    def cell_exists(self, row: int, col: int) -> bool:
        return 0 <= row < self.grid_y and 0 <= col < self.grid_x

    def get_cell(self, row: int, col: int) -> Cell:
        """
        Get the live cell at (row, col).

        Raises:
            IndexError: If the coordinate lies outside the grid
        """
        if not self.cell_exists(row, col):
            raise IndexError(f"Cell ({row}, {col}) outside {self.grid_x}x{self.grid_y} grid")
        return self.cells[row][col]

    def iter_cells(self) -> Iterator[Tuple[int, int, Cell]]:
        """Yield (row, col, cell) bottom row first, left to right."""
        for row, row_cells in enumerate(self.cells):
            for col, cell in enumerate(row_cells):
                yield row, col, cell

    # =============================================================================
    # COPY / RESIZE
    # =============================================================================

    def deep_copy(self) -> 'LevelGrid':
        """Fully independent copy; the unit stored by the history manager."""
        return LevelGrid([[cell.copy() for cell in row] for row in self.cells])

    def resize(self, new_x: int, new_y: int, default_code: str) -> bool:
        """
        Resize in place, keeping the overlapping bottom-left sub-rectangle.

        Cells outside the overlap get default_code. Out-of-range sizes and
        the current size are rejected as no-ops.

        Returns:
            True if the grid changed size
        """
        if not (MIN_GRID_SIZE <= new_x <= MAX_GRID_SIZE and MIN_GRID_SIZE <= new_y <= MAX_GRID_SIZE):
            logger.warning("Rejected resize to %dx%d (allowed %d-%d)", new_x, new_y, MIN_GRID_SIZE, MAX_GRID_SIZE)
            return False
        if (new_x, new_y) == (self.grid_x, self.grid_y):
            return False

        old_x, old_y = self.grid_x, self.grid_y
        resized = LevelGrid.create(new_x, new_y, default_code)
        for row in range(min(old_y, new_y)):
            for col in range(min(old_x, new_x)):
                resized.cells[row][col] = self.cells[row][col].copy()

        self.cells = resized.cells
        logger.info("Grid resized from (%d,%d) to (%d,%d)", old_x, old_y, new_x, new_y)
        return True

    # =============================================================================
    # QUICK ACTIONS
    # =============================================================================

    def random_fill(self, colors: Sequence[str], rng: Optional[np.random.Generator] = None) -> None:
        """Give every cell a random colour from colors and clear all layers."""
        if not colors:
            raise ValueError("random_fill needs at least one colour")
        rng = rng if rng is not None else np.random.default_rng()
        picks = rng.integers(0, len(colors), size=(self.grid_y, self.grid_x))
        for row, col, cell in self.iter_cells():
            cell.base_code = colors[int(picks[row, col])]
            cell.clear_layers()

    def mirror_horizontal(self) -> None:
        """Swap columns left to right."""
        for row in self.cells:
            row.reverse()

    def mirror_vertical(self) -> None:
        """Swap rows bottom to top."""
        self.cells.reverse()

    # =============================================================================
    # STATISTICS
    # =============================================================================

    def get_statistics(self, catalog: TileCatalog) -> Dict[str, int]:
        """
        Count cell kinds for status displays.

        Returns:
            Dict with empty/random/special/colour/layered cell counts
        """
        stats = {
            "empty_cells": 0,
            "random_cells": 0,
            "special_cells": 0,
            "color_cells": 0,
            "layered_cells": 0,
            "total_cells": self.grid_x * self.grid_y,
        }

        for _, _, cell in self.iter_cells():
            if cell.base_code == NULL_CODE:
                stats["empty_cells"] += 1
            elif cell.base_code == RANDOM_CODE:
                stats["random_cells"] += 1
            elif catalog.is_special(cell.base_code):
                stats["special_cells"] += 1
            else:
                stats["color_cells"] += 1
            if cell.layers:
                stats["layered_cells"] += 1

        return stats

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LevelGrid):
            return NotImplemented
        return self.cells == other.cells

    def __repr__(self) -> str:
        return f"LevelGrid({self.grid_x}x{self.grid_y})"


def _check_dimensions(grid_x: int, grid_y: int) -> None:
    if not (MIN_GRID_SIZE <= grid_x <= MAX_GRID_SIZE and MIN_GRID_SIZE <= grid_y <= MAX_GRID_SIZE):
        raise ValueError(
            f"Grid dimensions must be between {MIN_GRID_SIZE} and {MAX_GRID_SIZE}: {grid_x}x{grid_y}"
        )
