"""
LevelSession - the live editing state behind the editor window.

The session owns the one live grid. Every grid mutation goes through
_commit, which snapshots the grid into history only if the change actually
altered something, so rejected clicks never cost an undo step.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from core.catalog import TileCatalog
from core.codec import LevelData, LevelMetadata, dumps_level
from core.history import HistoryManager
from core.level_grid import LevelGrid
from core.level_io import LevelRepository
from core.objectives import ColorObjective, remove_color_objective, upsert_color_objective
from core.placement import PlacementEngine
from core.tools import FillMode, ToolKind, ToolState
from core.types import (
    ALL_COLOR_CODE,
    DEFAULT_GRID_SIZE,
    MAX_UNDO_HISTORY,
    GridFormat,
    ValidationError,
)

logger = logging.getLogger(__name__)


class LevelSession:
    """
    Editing state for one level at a time.

    Attributes:
        catalog: Shared read-only catalog, None if it could not be loaded
        grid: Live grid (None until a level is created or loaded)
        metadata: Level number, limits, difficulty and available colours
        color_objectives: Authored colour objectives
        tool: Current ToolState
        export_format: Format used by save/to_json when none is given
        history: Undo/redo snapshots of the grid
    """

    def __init__(self, catalog: Optional[TileCatalog], max_history: int = MAX_UNDO_HISTORY):
        self.catalog = catalog
        self.engine = PlacementEngine(catalog) if catalog is not None else None
        self.history = HistoryManager(max_history)

        self.grid: Optional[LevelGrid] = None
        self.metadata = LevelMetadata(available_colors=self._all_colors())
        self.color_objectives: List[ColorObjective] = []
        self.tool = ToolState.initial(self._default_code())
        self.export_format = GridFormat.STANDARD
        self.rectangle_start: Optional[Tuple[int, int]] = None

        if catalog is None:
            logger.warning("No catalog loaded; editing is disabled")

    @property
    def editing_enabled(self) -> bool:
        return self.catalog is not None

    def _default_code(self) -> str:
        return self.catalog.default_tile_code() if self.catalog is not None else ToolState().code

    def _all_colors(self) -> List[str]:
        return self.catalog.all_tile_codes() if self.catalog is not None else []

    # =============================================================================
    # LEVEL LIFECYCLE
    # =============================================================================

    def new_level(self, level_id: Optional[int] = None) -> None:
        """Start a blank level, keeping the current grid size."""
        if not self.editing_enabled:
            logger.warning("Cannot create a level without a catalog")
            return

        grid_x = self.grid.grid_x if self.grid is not None else DEFAULT_GRID_SIZE
        grid_y = self.grid.grid_y if self.grid is not None else DEFAULT_GRID_SIZE
        if level_id is None:
            level_id = self.metadata.level_id

        self.grid = LevelGrid.create(grid_x, grid_y, self._default_code())
        self.metadata = LevelMetadata(level_id=level_id, available_colors=self._all_colors())
        self.color_objectives = []
        self.rectangle_start = None
        self.history.reset()
        logger.info("New level %d (%dx%d)", level_id, grid_x, grid_y)

    def resize_grid(self, grid_x: int, grid_y: int) -> bool:
        """
        Resize the live grid, keeping the overlapping cells.

        Resizing is not an undoable action. With no grid yet, a fresh grid
        of the requested size is created instead.

        Returns:
            True if the grid changed
        """
        if not self.editing_enabled:
            return False
        if self.grid is None:
            try:
                self.grid = LevelGrid.create(grid_x, grid_y, self._default_code())
            except ValueError as e:
                logger.warning("Cannot create grid: %s", e)
                return False
            return True

        self.rectangle_start = None
        return self.grid.resize(grid_x, grid_y, self._default_code())

    def to_level_data(self) -> LevelData:
        """Independent snapshot of the level for export."""
        if self.grid is None:
            raise RuntimeError("No level to export")
        metadata = LevelMetadata(
            level_id=self.metadata.level_id,
            move_count=self.metadata.move_count,
            limit_type=self.metadata.limit_type,
            timer_seconds=self.metadata.timer_seconds,
            difficulty=self.metadata.difficulty,
            available_colors=list(self.metadata.available_colors),
        )
        objectives = [ColorObjective(o.type, o.target_color, o.count) for o in self.color_objectives]
        return LevelData(metadata, self.grid.deep_copy(), objectives, self.export_format)

    def to_json(self, fmt: Optional[GridFormat] = None) -> str:
        return dumps_level(self.to_level_data(), fmt or self.export_format, self.catalog)

    def save(self, repository: LevelRepository, fmt: Optional[GridFormat] = None) -> str:
        """Write the level to repository; returns the file path."""
        return repository.save(self.to_level_data(), fmt or self.export_format, self.catalog)

    def load(self, repository: LevelRepository, level_id: int) -> None:
        """
        Replace the live level with one read from repository.

        The file is fully decoded before anything in the session changes.

        Raises:
            FileNotFoundError: If the level file does not exist
            LevelDecodeError: If the file cannot be decoded
        """
        if not self.editing_enabled:
            raise RuntimeError("Cannot load levels without a catalog")
        self.apply_level(repository.load(level_id, self.catalog))

    def apply_level(self, level: LevelData) -> None:
        """Install a decoded level; history restarts and its format becomes the export format."""
        self.grid = level.grid
        self.metadata = level.metadata
        self.color_objectives = list(level.color_objectives)
        self.export_format = level.grid_format
        self.rectangle_start = None
        self.history.reset()

    # =============================================================================
    # TOOLS
    # =============================================================================

    def select_color(self, code: str) -> None:
        self.tool = self.tool.select_color(code)

    def toggle_eraser(self) -> None:
        self.tool = self.tool.toggle_eraser()

    def toggle_empty_tile(self) -> None:
        self.tool = self.tool.toggle_empty_tile()

    def select_special(self, code: str) -> None:
        self.tool = self.tool.select_special(code)

    def select_objective(self, code: str) -> None:
        self.tool = self.tool.select_objective(code)

    def select_collectable(self, code: str) -> None:
        self.tool = self.tool.select_collectable(code)

    def toggle_color_objective_editor(self) -> None:
        self.tool = self.tool.toggle_color_objective_editor()

    def toggle_fill_mode(self, mode: FillMode) -> None:
        self.tool = self.tool.toggle_fill_mode(mode)
        self.rectangle_start = None

    # =============================================================================
    # CELL EDITING
    # =============================================================================

    def click_cell(self, row: int, col: int) -> List[ValidationError]:
        """
        Apply the current tool at (row, col).

        Row, column and rectangle fills take precedence over single
        placement. A rectangle needs two clicks: the first only marks the
        corner. Cells a fill cannot change are skipped quietly.

        Returns:
            Rejections to show the user (empty for fills)
        """
        if not self.editing_enabled:
            return [ValidationError("error", "Editing is disabled: catalog not loaded")]
        if self.grid is None:
            return [ValidationError("error", "No level loaded")]
        if not self.grid.cell_exists(row, col):
            return [ValidationError("error", "Cell outside grid", (row, col))]
        if self.tool.kind == ToolKind.COLOR_OBJECTIVE_EDITOR:
            return []

        mode = self.tool.fill_mode
        before = self.grid.deep_copy()
        surfaced: List[ValidationError] = []

        if mode == FillMode.ROW:
            self.engine.fill_row(self.grid, row, self.tool)
        elif mode == FillMode.COLUMN:
            self.engine.fill_column(self.grid, col, self.tool)
        elif mode == FillMode.RECTANGLE:
            if self.rectangle_start is None:
                self.rectangle_start = (row, col)
                logger.info("Rectangle start set at (%d, %d)", row, col)
                return []
            self.engine.fill_rectangle(self.grid, self.rectangle_start, (row, col), self.tool)
            self.rectangle_start = None
        else:
            rejection = self.engine.place(self.grid, row, col, self.tool)
            if rejection is not None:
                surfaced.append(rejection)

        self._commit(before)
        return surfaced

    def _commit(self, before: LevelGrid) -> bool:
        """Record before in history if the live grid differs from it."""
        if self.grid == before:
            return False
        self.history.record_before_mutation(before)
        return True

    def undo(self) -> bool:
        if self.grid is None:
            return False
        restored = self.history.undo(self.grid)
        if restored is None:
            return False
        self.grid = restored
        self.rectangle_start = None
        return True

    def redo(self) -> bool:
        if self.grid is None:
            return False
        restored = self.history.redo(self.grid)
        if restored is None:
            return False
        self.grid = restored
        self.rectangle_start = None
        return True

    def clear_history(self) -> None:
        self.history.reset()

    # =============================================================================
    # QUICK ACTIONS
    # =============================================================================

    def random_fill(self, rng: Optional[np.random.Generator] = None) -> bool:
        """Random colour from the available colours in every cell; layers cleared."""
        if self.grid is None or not self.editing_enabled:
            return False
        colors = [c for c in self._all_colors() if c in self.metadata.available_colors]
        if not colors:
            logger.warning("No available colours match the tile catalog")
            return False
        before = self.grid.deep_copy()
        self.grid.random_fill(colors, rng)
        return self._commit(before)

    def clear_grid(self) -> bool:
        """Reset every cell to the default tile with no layers."""
        if self.grid is None or not self.editing_enabled:
            return False
        before = self.grid.deep_copy()
        default_code = self._default_code()
        for _, _, cell in self.grid.iter_cells():
            cell.base_code = default_code
            cell.clear_layers()
        return self._commit(before)

    def mirror_horizontal(self) -> bool:
        if self.grid is None or not self.editing_enabled:
            return False
        before = self.grid.deep_copy()
        self.grid.mirror_horizontal()
        return self._commit(before)

    def mirror_vertical(self) -> bool:
        if self.grid is None or not self.editing_enabled:
            return False
        before = self.grid.deep_copy()
        self.grid.mirror_vertical()
        return self._commit(before)

    # =============================================================================
    # AVAILABLE COLOURS
    # =============================================================================

    def toggle_available_color(self, code: str) -> bool:
        """
        Add or remove code from the available colours.

        Returns:
            False if the toggle was refused (unknown colour, or removing
            the last available one)
        """
        # Unknown codes are dropped here; the rest stays in catalog order
        colors = [c for c in self._all_colors() if c in self.metadata.available_colors]
        if code in colors:
            if len(colors) == 1:
                logger.warning("At least one colour must stay available")
                return False
            colors.remove(code)
            self.metadata.available_colors = colors
            return True

        if self.catalog is None or self.catalog.lookup_tile_by_code(code) is None:
            logger.warning("Unknown colour '%s'", code)
            return False
        self.metadata.available_colors = [c for c in self._all_colors() if c in colors or c == code]
        return True

    def select_all_colors(self) -> None:
        self.metadata.available_colors = self._all_colors()

    def clear_all_colors(self) -> None:
        """Deselect every colour except the first one."""
        self.metadata.available_colors = self._all_colors()[:1]

    # =============================================================================
    # COLOUR OBJECTIVES
    # =============================================================================

    def add_color_objective(self, color: str, count: int) -> ColorObjective:
        """
        Add a colour objective, or update the count of the existing one.

        Raises:
            ValueError: If color is unknown or count is not positive
        """
        if color != ALL_COLOR_CODE and (self.catalog is None or self.catalog.lookup_tile_by_code(color) is None):
            raise ValueError(f"Unknown colour for objective: '{color}'")
        return upsert_color_objective(self.color_objectives, color, count, self.export_format)

    def remove_color_objective(self, color: str) -> bool:
        return remove_color_objective(self.color_objectives, color)

    # =============================================================================
    # STATUS
    # =============================================================================

    def get_statistics(self) -> Dict[str, Any]:
        """Cell counts, history state and objective count for status displays."""
        stats: Dict[str, Any] = {}
        if self.grid is not None and self.catalog is not None:
            stats.update(self.grid.get_statistics(self.catalog))
            stats["grid_x"] = self.grid.grid_x
            stats["grid_y"] = self.grid.grid_y
        stats.update(self.history.get_history_info())
        stats["color_objectives"] = len(self.color_objectives)
        stats["export_format"] = self.export_format.value
        return stats
