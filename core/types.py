"""
Shared types for the Tile Level Editor.
Separated to avoid circular imports between modules.
"""
from enum import Enum, IntEnum
from typing import Optional, Tuple

# Editor limits and defaults
MIN_GRID_SIZE = 1
MAX_GRID_SIZE = 20
DEFAULT_GRID_SIZE = 6
MAX_UNDO_HISTORY = 10
DEFAULT_MOVE_COUNT = 20
DEFAULT_TIMER_SECONDS = 60

# Cell sentinels
NULL_CODE = "null"        # Empty cell, nothing rendered
RANDOM_CODE = "random"    # Collectable placeholder, colour resolved at runtime
ALL_COLOR_CODE = "all"    # Colour objective target meaning "any colour"
FALLBACK_TILE_CODE = "r"

SPECIAL_PREFIX = "special_"
OBJECTIVE_PREFIX = "objective_"


class ObjectiveCategory(Enum):
    """How an objective layer sits on a cell."""
    UNDER = "Under"
    COVER = "Cover"
    COLLECTABLE = "Collectable"


class GridFormat(Enum):
    """The three JSON shapes a level can be saved in."""
    STANDARD = "Standard"
    SIMPLE_CODE = "SimpleCode"
    CODE_ONLY = "CodeOnly"


class LimitType(Enum):
    MOVES = "Moves"
    TIMER = "Timer"


class Difficulty(IntEnum):
    EASY = 0
    NORMAL = 1
    HARD = 2


class ValidationError:
    """Represents a validation error with severity and description."""
    def __init__(self, severity: str, message: str, location: Optional[Tuple[int, int]] = None):
        self.severity = severity  # "error", "warning", "info"
        self.message = message
        self.location = location

    def __str__(self):
        loc_str = f" at {self.location}" if self.location else ""
        return f"{self.severity.upper()}: {self.message}{loc_str}"

    def __repr__(self):
        return f"ValidationError({self.severity!r}, {self.message!r}, {self.location!r})"


class CatalogError(RuntimeError):
    """The tile/objective/special catalog is missing or unreadable."""


class LevelDecodeError(ValueError):
    """A level document does not match the shape of its format."""
    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        if field:
            message = f"{message} (field: {field})"
        super().__init__(message)
