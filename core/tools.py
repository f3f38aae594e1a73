"""
Tool selection for the level editor.

A ToolState is an immutable value: every transition returns a new state, so
the paint tool and the fill mode can never end up in a half-set combination.
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from core.types import FALLBACK_TILE_CODE


class ToolKind(Enum):
    """Paint tools; exactly one is active."""
    COLOR = "color"
    ERASER = "eraser"
    EMPTY_TILE = "empty"
    SPECIAL = "special"
    OBJECTIVE = "objective"
    COLLECTABLE = "collectable"
    COLOR_OBJECTIVE_EDITOR = "color_objective_editor"


class FillMode(Enum):
    """How a click spreads the paint tool; exactly one is active."""
    NONE = "none"
    ROW = "row"
    COLUMN = "column"
    RECTANGLE = "rectangle"


# Tools that carry a catalog code
_CODED_KINDS = (ToolKind.COLOR, ToolKind.SPECIAL, ToolKind.OBJECTIVE, ToolKind.COLLECTABLE)


@dataclass(frozen=True)
class ToolState:
    """
    Current tool selection.

    Attributes:
        kind: Active paint tool
        code: Catalog code for COLOR/SPECIAL/OBJECTIVE/COLLECTABLE, else None
        fill_mode: Active fill mode
        remembered_color: Last picked colour; the eraser paints with it
    """
    kind: ToolKind = ToolKind.COLOR
    code: Optional[str] = FALLBACK_TILE_CODE
    fill_mode: FillMode = FillMode.NONE
    remembered_color: Optional[str] = None

    def __post_init__(self):
        if self.kind in _CODED_KINDS and not self.code:
            raise ValueError(f"{self.kind.value} tool needs a code")
        if self.kind not in _CODED_KINDS and self.code is not None:
            raise ValueError(f"{self.kind.value} tool takes no code")

    @classmethod
    def initial(cls, color: str = FALLBACK_TILE_CODE) -> 'ToolState':
        return cls(ToolKind.COLOR, color, FillMode.NONE, color)

    @property
    def eraser_code(self) -> str:
        """Base code the eraser paints with."""
        return self.remembered_color or FALLBACK_TILE_CODE

    # =============================================================================
    # PAINT TOOL TRANSITIONS
    # =============================================================================

    def select_color(self, code: str) -> 'ToolState':
        return replace(self, kind=ToolKind.COLOR, code=code, remembered_color=code)

    def toggle_eraser(self) -> 'ToolState':
        if self.kind == ToolKind.ERASER:
            return self._back_to_color()
        return replace(self, kind=ToolKind.ERASER, code=None)

    def toggle_empty_tile(self) -> 'ToolState':
        if self.kind == ToolKind.EMPTY_TILE:
            return self._back_to_color()
        return replace(self, kind=ToolKind.EMPTY_TILE, code=None)

    def select_special(self, code: str) -> 'ToolState':
        return replace(self, kind=ToolKind.SPECIAL, code=code)

    def select_objective(self, code: str) -> 'ToolState':
        return replace(self, kind=ToolKind.OBJECTIVE, code=code)

    def select_collectable(self, code: str) -> 'ToolState':
        return replace(self, kind=ToolKind.COLLECTABLE, code=code)

    def toggle_color_objective_editor(self) -> 'ToolState':
        if self.kind == ToolKind.COLOR_OBJECTIVE_EDITOR:
            return self._back_to_color()
        return replace(self, kind=ToolKind.COLOR_OBJECTIVE_EDITOR, code=None)

    def _back_to_color(self) -> 'ToolState':
        return replace(self, kind=ToolKind.COLOR, code=self.eraser_code)

    # =============================================================================
    # FILL MODE TRANSITIONS
    # =============================================================================

    def toggle_fill_mode(self, mode: FillMode) -> 'ToolState':
        """Activate mode, or switch fills off if mode is already active."""
        if mode == FillMode.NONE or self.fill_mode == mode:
            return replace(self, fill_mode=FillMode.NONE)
        return replace(self, fill_mode=mode)

    def describe(self) -> str:
        """Short label for status displays."""
        label = self.kind.value if self.code is None else f"{self.kind.value} '{self.code}'"
        if self.fill_mode != FillMode.NONE:
            label += f" ({self.fill_mode.value} fill)"
        return label
