"""
Square-cell rendering utilities for Tkinter Canvas.
Row 0 of the level is drawn at the bottom of the canvas.
"""
from typing import TYPE_CHECKING, Tuple

if TYPE_CHECKING:
    import tkinter as tk

# Display colours for tile codes; anything unlisted is drawn as a special tile
TILE_COLORS = {
    "r": "#e74c3c",
    "g": "#2ecc71",
    "b": "#3498db",
    "y": "#f1c40f",
    "p": "#9b59b6",
    "o": "#e67e22",
    "random": "#ecf0f1",
    "null": "#2c3e50",
}
SPECIAL_TILE_COLOR = "#7f8c8d"


def color_for_code(code: str) -> str:
    return TILE_COLORS.get(code, SPECIAL_TILE_COLOR)


class GridRenderer:
    """Handles cell/pixel conversion and drawing for a rectangular level grid."""

    def __init__(self, cell_size: float = 50.0, grid_y: int = 6):
        """
        Initialize grid renderer.

        Args:
            cell_size: Side length of one cell in pixels
            grid_y: Number of rows; needed to flip rows so row 0 is at the bottom
        """
        self.cell_size = cell_size
        self.grid_y = grid_y

    def cell_to_pixel(self, row: int, col: int, offset_x: float = 20, offset_y: float = 20) -> Tuple[float, float]:
        """
        Pixel coordinates of a cell centre.

        Args:
            row, col: Grid coordinates (row 0 = bottom)
            offset_x, offset_y: Canvas offset for positioning

        Returns:
            (x, y) pixel coordinates
        """
        screen_row = self.grid_y - 1 - row
        x = offset_x + col * self.cell_size + self.cell_size / 2
        y = offset_y + screen_row * self.cell_size + self.cell_size / 2
        return x, y

    def pixel_to_cell(self, pixel_x: float, pixel_y: float,
                      offset_x: float = 20, offset_y: float = 20) -> Tuple[int, int]:
        """
        Convert a click position back to grid coordinates.
        The result may lie outside the grid; callers check cell_exists.
        """
        col = int((pixel_x - offset_x) // self.cell_size)
        screen_row = int((pixel_y - offset_y) // self.cell_size)
        return self.grid_y - 1 - screen_row, col

    def get_cell_bounds(self, row: int, col: int,
                        offset_x: float = 20, offset_y: float = 20) -> Tuple[float, float, float, float]:
        """(x0, y0, x1, y1) of the cell square."""
        center_x, center_y = self.cell_to_pixel(row, col, offset_x, offset_y)
        half = self.cell_size / 2
        return center_x - half, center_y - half, center_x + half, center_y + half

    def draw_cell(self, canvas: 'tk.Canvas', row: int, col: int,
                  fill_color: str = "white", outline_color: str = "black",
                  offset_x: float = 20, offset_y: float = 20) -> int:
        """
        Draw one cell square.

        Returns:
            Canvas item ID for the drawn rectangle
        """
        x0, y0, x1, y1 = self.get_cell_bounds(row, col, offset_x, offset_y)
        return canvas.create_rectangle(x0, y0, x1, y1, fill=fill_color, outline=outline_color, width=2)

    def draw_text_in_cell(self, canvas: 'tk.Canvas', row: int, col: int, text: str,
                          offset_x: float = 20, offset_y: float = 20, size: int = 10) -> int:
        center_x, center_y = self.cell_to_pixel(row, col, offset_x, offset_y)
        return canvas.create_text(center_x, center_y, text=text, font=("Arial", size, "bold"), fill="black")
