"""
Bounded snapshot history for undo/redo.

Every mutating editor action records a deep copy of the grid taken just
before the change. Undo and redo swap whole grids, so a restored grid is
always structurally identical to the one that was recorded.
"""
import logging
from typing import Any, Dict, List, Optional

from core.level_grid import LevelGrid
from core.types import MAX_UNDO_HISTORY

logger = logging.getLogger(__name__)


class HistoryManager:
    """Manages grid snapshots for undo/redo operations."""

    def __init__(self, max_history: int = MAX_UNDO_HISTORY):
        self.max_history = max_history
        self.undo_stack: List[LevelGrid] = []
        self.redo_stack: List[LevelGrid] = []

    def record_before_mutation(self, grid: LevelGrid) -> None:
        """Snapshot grid before it changes; drops the redo branch."""
        self.undo_stack.append(grid.deep_copy())
        # Oldest snapshots go first
        while len(self.undo_stack) > self.max_history:
            self.undo_stack.pop(0)
        self.redo_stack.clear()

    def can_undo(self) -> bool:
        return len(self.undo_stack) > 0

    def can_redo(self) -> bool:
        return len(self.redo_stack) > 0

    def undo(self, current: LevelGrid) -> Optional[LevelGrid]:
        """
        Step back one snapshot.

        Args:
            current: The live grid, kept on the redo stack

        Returns:
            The grid to restore, or None if there is nothing to undo
        """
        if not self.can_undo():
            logger.info("Nothing to undo!")
            return None

        self.redo_stack.append(current.deep_copy())
        restored = self.undo_stack.pop()
        logger.info("Undo successful! Remaining undo: %d", len(self.undo_stack))
        return restored

    def redo(self, current: LevelGrid) -> Optional[LevelGrid]:
        """Step forward one snapshot; None if there is nothing to redo."""
        if not self.can_redo():
            logger.info("Nothing to redo!")
            return None

        self.undo_stack.append(current.deep_copy())
        restored = self.redo_stack.pop()
        logger.info("Redo successful! Remaining redo: %d", len(self.redo_stack))
        return restored

    def reset(self) -> None:
        """Clear all history (new level or load)."""
        total_cleared = len(self.undo_stack) + len(self.redo_stack)
        self.undo_stack.clear()
        self.redo_stack.clear()
        if total_cleared > 0:
            logger.info("Undo/Redo history cleared! (%d actions removed)", total_cleared)

    def get_history_info(self) -> Dict[str, Any]:
        """Get information about current history state."""
        return {
            "undo_count": len(self.undo_stack),
            "redo_count": len(self.redo_stack),
            "can_undo": self.can_undo(),
            "can_redo": self.can_redo(),
            "max_history": self.max_history,
        }
