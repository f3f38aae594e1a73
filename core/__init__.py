"""
Tile Level Editor - Core Package
Grid model, placement rules, history, objectives, JSON codec and level files.
"""
from .types import GridFormat, ObjectiveCategory, ValidationError, CatalogError, LevelDecodeError
from .catalog import TileCatalog
from .level_grid import Cell, LevelGrid
from .tools import ToolKind, FillMode, ToolState
from .codec import LevelData, LevelMetadata, detect_format, decode_level, encode_level
from .level_io import LevelRepository
from .session import LevelSession

__all__ = ['GridFormat', 'ObjectiveCategory', 'ValidationError', 'CatalogError', 'LevelDecodeError',
           'TileCatalog', 'Cell', 'LevelGrid', 'ToolKind', 'FillMode', 'ToolState',
           'LevelData', 'LevelMetadata', 'detect_format', 'decode_level', 'encode_level',
           'LevelRepository', 'LevelSession']
