"""
Coordinate helpers for the rectangular level grid (row 0 = bottom row).
"""
from typing import Iterator, Tuple


def coordinate_to_string(row: int, col: int) -> str:
    """Convert coordinate tuple to the "row,col" string used in labels and logs."""
    return f"{row},{col}"


def normalize_rectangle(start: Tuple[int, int], end: Tuple[int, int],
                        rows: int, cols: int) -> Tuple[int, int, int, int]:
    """
    Order two selected corners and clamp them to the grid.

    Args:
        start: First selected (row, col)
        end: Second selected (row, col)
        rows: Grid height
        cols: Grid width

    Returns:
        (min_row, min_col, max_row, max_col), all inclusive and in bounds
    """
    min_row = max(0, min(start[0], end[0]))
    max_row = min(rows - 1, max(start[0], end[0]))
    min_col = max(0, min(start[1], end[1]))
    max_col = min(cols - 1, max(start[1], end[1]))
    return min_row, min_col, max_row, max_col


def iter_rectangle(start: Tuple[int, int], end: Tuple[int, int],
                   rows: int, cols: int) -> Iterator[Tuple[int, int]]:
    """Yield every (row, col) inside the clamped rectangle, row by row."""
    min_row, min_col, max_row, max_col = normalize_rectangle(start, end, rows, cols)
    for row in range(min_row, max_row + 1):
        for col in range(min_col, max_col + 1):
            yield row, col
