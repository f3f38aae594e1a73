"""
Level preview renderer for saved level JSON.

Accepts any of the three saved shapes (the codec detects which) and draws
the level with matplotlib: base colours as squares, Under layers as an inner
frame, Cover layers as a translucent lid, collectables as a disc.
"""

from typing import Any, Dict, Optional, Union

import numpy as np
import matplotlib.patches as patches

from core.catalog import TileCatalog
from core.codec import LevelData, decode_level
from core.level_grid import Cell
from core.types import NULL_CODE, ObjectiveCategory
from render.grid_render import color_for_code


class LevelPreviewRenderer:
    """Render a level with matplotlib; row 0 sits at the bottom of the plot."""

    def __init__(self, catalog: TileCatalog, cell_size: float = 1.0, padding: float = 0.5):
        """
        Args:
            catalog: Used to decode documents and to classify layers
            cell_size: Side of one cell in axis units
            padding: Margin around the grid in cell units
        """
        self.catalog = catalog
        self.S = float(cell_size)
        self.pad = float(padding)

    def cell_centers(self, grid_x: int, grid_y: int) -> np.ndarray:
        """
        Centres of every cell as an array of shape (grid_y, grid_x, 2).
        Row 0 gets the smallest y.
        """
        xs = (np.arange(grid_x) + 0.5) * self.S
        ys = (np.arange(grid_y) + 0.5) * self.S
        cx, cy = np.meshgrid(xs, ys)
        return np.stack([cx, cy], axis=-1)

    def _draw_cell(self, ax, cx: float, cy: float, cell: Cell):
        half = self.S / 2
        if cell.base_code != NULL_CODE:
            ax.add_patch(patches.Rectangle(
                (cx - half, cy - half), self.S, self.S,
                facecolor=color_for_code(cell.base_code), edgecolor='black', linewidth=1
            ))
            if self.catalog.is_special(cell.base_code):
                ax.text(cx, cy, cell.base_code[:4], ha='center', va='center', fontsize=7, color='white')

        for layer in cell.layers:
            category = self.catalog.category_of(layer)
            if category == ObjectiveCategory.UNDER:
                inset = 0.08 * self.S
                ax.add_patch(patches.Rectangle(
                    (cx - half + inset, cy - half + inset), self.S - 2 * inset, self.S - 2 * inset,
                    facecolor='none', edgecolor='#5dade2', linewidth=2.5, zorder=5
                ))
            elif category == ObjectiveCategory.COVER:
                ax.add_patch(patches.Rectangle(
                    (cx - half, cy - half), self.S, self.S,
                    facecolor='#95a5a6', alpha=0.6, hatch='//', edgecolor='black', zorder=6
                ))
            elif category == ObjectiveCategory.COLLECTABLE:
                ax.add_patch(patches.Circle((cx, cy), radius=self.S * 0.3,
                                            facecolor='gold', edgecolor='black', zorder=7))
                ax.text(cx, cy, layer[:1].upper(), ha='center', va='center', fontsize=8, zorder=8)

    def render_level(self, level: Union[LevelData, Dict[str, Any]], ax=None) -> Optional[object]:
        """
        Render a decoded level or a raw level document.

        Args:
            level: LevelData, or a parsed JSON document in any saved shape
            ax: Optional matplotlib axis (creates new figure if None)

        Returns:
            Matplotlib axis object

        Raises:
            LevelDecodeError: If a raw document cannot be decoded
        """
        if not isinstance(level, LevelData):
            level = decode_level(level, self.catalog)

        if ax is None:
            import matplotlib.pyplot as plt
            fig, ax = plt.subplots(figsize=(6, 6))

        grid = level.grid
        centers = self.cell_centers(grid.grid_x, grid.grid_y)
        for row, col, cell in grid.iter_cells():
            cx, cy = centers[row, col]
            self._draw_cell(ax, float(cx), float(cy), cell)

        ax.set_aspect('equal')
        ax.set_xlim(-self.pad * self.S, (grid.grid_x + self.pad) * self.S)
        ax.set_ylim(-self.pad * self.S, (grid.grid_y + self.pad) * self.S)
        ax.set_title(f"Level {level.metadata.level_id} ({level.grid_format.value})")
        ax.axis('off')

        return ax
