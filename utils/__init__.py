"""
Tile Level Editor - Utilities Package
Coordinate helpers for the rectangular level grid.
"""
from .coords import coordinate_to_string, normalize_rectangle, iter_rectangle

__all__ = ['coordinate_to_string', 'normalize_rectangle', 'iter_rectangle']
