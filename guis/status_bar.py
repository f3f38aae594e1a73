import tkinter as tk
from tkinter import ttk
from typing import Any, Dict, Optional

from utils.coords import coordinate_to_string


class EnhancedStatusBar:
    """Status bar with main, history and position zones."""

    def __init__(self, parent: tk.Widget):
        self.frame = ttk.Frame(parent)
        self.frame.pack(side=tk.BOTTOM, fill=tk.X)

        self._create_status_zones()

    def _create_status_zones(self):
        # Main status (left side)
        self.main_status = tk.StringVar(value="Ready")
        main_label = ttk.Label(self.frame, textvariable=self.main_status,
                               relief=tk.SUNKEN, anchor=tk.W, padding=3)
        main_label.pack(side=tk.LEFT, fill=tk.X, expand=True)

        ttk.Separator(self.frame, orient=tk.VERTICAL).pack(side=tk.LEFT, fill=tk.Y, padx=2)

        # Undo/redo counts
        self.history_var = tk.StringVar(value="Undo 0 | Redo 0")
        history_label = ttk.Label(self.frame, textvariable=self.history_var,
                                  relief=tk.SUNKEN, anchor=tk.CENTER, padding=3, width=18)
        history_label.pack(side=tk.LEFT)

        ttk.Separator(self.frame, orient=tk.VERTICAL).pack(side=tk.LEFT, fill=tk.Y, padx=2)

        # Position info (right side)
        self.position_var = tk.StringVar(value="")
        position_label = ttk.Label(self.frame, textvariable=self.position_var,
                                   relief=tk.SUNKEN, anchor=tk.E, padding=3, width=12)
        position_label.pack(side=tk.RIGHT)

    def update_main_status(self, status: str):
        self.main_status.set(status)

    def update_history_status(self, history_info: Dict[str, Any]):
        """Show counts from HistoryManager.get_history_info()."""
        self.history_var.set(f"Undo {history_info['undo_count']} | Redo {history_info['redo_count']}")

    def show_persistent_warning(self, message: str):
        """Warning that stays until the app restarts (e.g. catalog missing)."""
        self.main_status.set(f"⚠️ {message}")

    def update_position(self, row: Optional[int] = None, col: Optional[int] = None):
        """Update mouse position info."""
        if row is not None and col is not None:
            self.position_var.set(f"({coordinate_to_string(row, col)})")
        else:
            self.position_var.set("")
