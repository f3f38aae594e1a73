"""
Tile Level Editor main application.
Left control panel, level canvas on the right, status bar at the bottom.
"""

import argparse
import logging
import tkinter as tk
from tkinter import ttk, messagebox
import sys
import os
from typing import Optional

# Add project root to path first
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from core.catalog import TileCatalog
from core.level_io import LevelRepository
from core.session import LevelSession
from core.tools import FillMode
from core.types import ALL_COLOR_CODE, CatalogError, Difficulty, GridFormat, LimitType, ObjectiveCategory
from guis.level_canvas import LevelCanvas
from guis.status_bar import EnhancedStatusBar

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = os.path.join(PROJECT_ROOT, "data", "level_editor_data.json")
DEFAULT_LEVELS_DIR = os.path.join(PROJECT_ROOT, "levels")


class LevelEditorApp:
    """Tile level editor window."""

    def __init__(self, levels_dir: str = DEFAULT_LEVELS_DIR, catalog_path: str = DEFAULT_CATALOG_PATH):
        self.root = tk.Tk()
        self.root.title("Tile Level Editor")
        self.root.geometry("1200x820")

        self.repository = LevelRepository(levels_dir)
        self.catalog: Optional[TileCatalog] = None
        catalog_problem = None
        try:
            self.catalog = TileCatalog.load_from_file(catalog_path)
        except CatalogError as e:
            logger.error("Catalog unavailable: %s", e)
            catalog_problem = str(e)

        self.session = LevelSession(self.catalog)
        self.canvas: Optional[LevelCanvas] = None
        self.enhanced_status_bar = EnhancedStatusBar(self.root)

        self._create_ui()
        if catalog_problem:
            self.enhanced_status_bar.show_persistent_warning(f"Editing disabled: {catalog_problem}")
        else:
            self.session.new_level()
            self.canvas.redraw_grid()
            self._update_all_status()

    def _create_ui(self):
        main_frame = ttk.Frame(self.root)
        main_frame.pack(fill=tk.BOTH, expand=True, padx=5, pady=5)

        left_panel = ttk.Frame(main_frame, width=320)
        left_panel.pack(side=tk.LEFT, fill=tk.Y, padx=(0, 5))
        left_panel.pack_propagate(False)

        right_panel = ttk.Frame(main_frame)
        right_panel.pack(side=tk.RIGHT, fill=tk.BOTH, expand=True)

        self._create_control_panel(left_panel)
        self._create_canvas_area(right_panel)

    def _create_canvas_area(self, parent):
        self.canvas = LevelCanvas(parent, self.session, width=800, height=700)
        self.canvas.set_change_callback(self._update_status)
        self.canvas.set_history_callback(self._update_history_status)
        self.canvas.set_position_callback(self.enhanced_status_bar.update_position)

    # =============================================================================
    # CONTROL PANEL
    # =============================================================================

    def _create_control_panel(self, parent):
        self._create_file_section(parent)
        self._create_history_section(parent)
        self._create_level_section(parent)
        if self.catalog is not None:
            self._create_tool_section(parent)
            self._create_quick_actions(parent)
            self._create_color_section(parent)

    def _create_file_section(self, parent):
        file_frame = ttk.LabelFrame(parent, text="File Operations", padding=5)
        file_frame.pack(fill=tk.X, pady=(0, 8))

        row = ttk.Frame(file_frame)
        row.pack(fill=tk.X)
        ttk.Button(row, text="New Level", command=self._new_level).pack(side=tk.LEFT, padx=(0, 3))
        ttk.Button(row, text="Save", command=self._save_level).pack(side=tk.LEFT, padx=(0, 3))
        ttk.Button(row, text="Load", command=self._load_level).pack(side=tk.LEFT)

        row = ttk.Frame(file_frame)
        row.pack(fill=tk.X, pady=(3, 0))
        ttk.Button(row, text="Import JSON", command=self._import_level).pack(side=tk.LEFT, padx=(0, 3))
        ttk.Button(row, text="Export JSON", command=self._export_level).pack(side=tk.LEFT)

        ttk.Label(file_frame, text="Export format:").pack(anchor=tk.W, pady=(5, 0))
        self.format_var = tk.StringVar(value=GridFormat.STANDARD.value)
        format_box = ttk.Combobox(file_frame, textvariable=self.format_var, state="readonly",
                                  values=[fmt.value for fmt in GridFormat])
        format_box.pack(fill=tk.X)
        format_box.bind("<<ComboboxSelected>>", self._change_format)

    def _create_history_section(self, parent):
        history_frame = ttk.LabelFrame(parent, text="Undo/Redo", padding=5)
        history_frame.pack(fill=tk.X, pady=(0, 8))

        ttk.Button(history_frame, text="↶ Undo", command=self._undo_action, width=9).pack(side=tk.LEFT, padx=(0, 3))
        ttk.Button(history_frame, text="↷ Redo", command=self._redo_action, width=9).pack(side=tk.LEFT, padx=(0, 3))
        ttk.Button(history_frame, text="Clear History", command=self._clear_history).pack(side=tk.RIGHT)

    def _create_level_section(self, parent):
        level_frame = ttk.LabelFrame(parent, text="Level Settings", padding=5)
        level_frame.pack(fill=tk.X, pady=(0, 8))

        meta = self.session.metadata
        self.level_var = tk.StringVar(value=str(meta.level_id))
        self.width_var = tk.StringVar(value="6")
        self.height_var = tk.StringVar(value="6")
        self.moves_var = tk.StringVar(value=str(meta.move_count))
        self.timer_var = tk.StringVar(value=str(meta.timer_seconds))
        self.limit_var = tk.StringVar(value=meta.limit_type.value)
        self.difficulty_var = tk.StringVar(value=meta.difficulty.name)

        fields = [
            ("Level", self.level_var), ("Width", self.width_var), ("Height", self.height_var),
            ("Moves", self.moves_var), ("Timer (s)", self.timer_var),
        ]
        for index, (label, var) in enumerate(fields):
            ttk.Label(level_frame, text=label).grid(row=index, column=0, sticky=tk.W)
            ttk.Entry(level_frame, textvariable=var, width=8).grid(row=index, column=1, sticky=tk.W)

        ttk.Label(level_frame, text="Limit").grid(row=5, column=0, sticky=tk.W)
        ttk.Combobox(level_frame, textvariable=self.limit_var, state="readonly", width=8,
                     values=[lt.value for lt in LimitType]).grid(row=5, column=1, sticky=tk.W)
        ttk.Label(level_frame, text="Difficulty").grid(row=6, column=0, sticky=tk.W)
        ttk.Combobox(level_frame, textvariable=self.difficulty_var, state="readonly", width=8,
                     values=[d.name for d in Difficulty]).grid(row=6, column=1, sticky=tk.W)

        ttk.Button(level_frame, text="Apply", command=self._apply_settings).grid(row=7, column=0, columnspan=2,
                                                                                 sticky=tk.EW, pady=(4, 0))

    def _create_tool_section(self, parent):
        tool_frame = ttk.LabelFrame(parent, text="Tools", padding=5)
        tool_frame.pack(fill=tk.X, pady=(0, 8))

        colors = ttk.Frame(tool_frame)
        colors.pack(fill=tk.X)
        for code in self.catalog.all_tile_codes():
            ttk.Button(colors, text=code, width=3,
                       command=lambda c=code: self._set_tool(self.session.select_color, c)).pack(side=tk.LEFT)

        row = ttk.Frame(tool_frame)
        row.pack(fill=tk.X, pady=(3, 0))
        ttk.Button(row, text="Eraser", command=lambda: self._set_tool(self.session.toggle_eraser)).pack(side=tk.LEFT)
        ttk.Button(row, text="Empty", command=lambda: self._set_tool(self.session.toggle_empty_tile)).pack(side=tk.LEFT)
        ttk.Button(row, text="Colour Goals",
                   command=lambda: self._set_tool(self.session.toggle_color_objective_editor)).pack(side=tk.LEFT)

        self._code_picker(tool_frame, "Special", self.catalog.all_special_codes(), self.session.select_special)
        for category, select in ((ObjectiveCategory.UNDER, self.session.select_objective),
                                 (ObjectiveCategory.COVER, self.session.select_objective),
                                 (ObjectiveCategory.COLLECTABLE, self.session.select_collectable)):
            codes = [o.code for o in self.catalog.all_objectives_by_category(category)]
            self._code_picker(tool_frame, category.value, codes, select)

        fill_row = ttk.Frame(tool_frame)
        fill_row.pack(fill=tk.X, pady=(5, 0))
        ttk.Label(fill_row, text="Fill:").pack(side=tk.LEFT)
        for mode in (FillMode.ROW, FillMode.COLUMN, FillMode.RECTANGLE):
            ttk.Button(fill_row, text=mode.value.title(), width=9,
                       command=lambda m=mode: self._set_tool(self.session.toggle_fill_mode, m)).pack(side=tk.LEFT)

    def _code_picker(self, parent, label: str, codes, select):
        if not codes:
            return
        row = ttk.Frame(parent)
        row.pack(fill=tk.X, pady=(3, 0))
        ttk.Label(row, text=label, width=11).pack(side=tk.LEFT)
        var = tk.StringVar(value=codes[0])
        ttk.Combobox(row, textvariable=var, values=codes, state="readonly", width=10).pack(side=tk.LEFT)
        ttk.Button(row, text="Use", width=4, command=lambda: self._set_tool(select, var.get())).pack(side=tk.LEFT)

    def _create_quick_actions(self, parent):
        quick_frame = ttk.LabelFrame(parent, text="Quick Actions", padding=5)
        quick_frame.pack(fill=tk.X, pady=(0, 8))

        for text, action in (("Random", self.session.random_fill), ("Clear", self.session.clear_grid),
                             ("Mirror ↔", self.session.mirror_horizontal), ("Mirror ↕", self.session.mirror_vertical)):
            ttk.Button(quick_frame, text=text, width=8,
                       command=lambda a=action: self._run_quick_action(a)).pack(side=tk.LEFT)

    def _create_color_section(self, parent):
        color_frame = ttk.LabelFrame(parent, text="Colours and Colour Goals", padding=5)
        color_frame.pack(fill=tk.X, pady=(0, 8))

        checks = ttk.Frame(color_frame)
        checks.pack(fill=tk.X)
        self.color_vars = {}
        for code in self.catalog.all_tile_codes():
            var = tk.BooleanVar(value=True)
            ttk.Checkbutton(checks, text=code, variable=var,
                            command=lambda c=code: self._toggle_color(c)).pack(side=tk.LEFT)
            self.color_vars[code] = var

        row = ttk.Frame(color_frame)
        row.pack(fill=tk.X, pady=(3, 0))
        ttk.Button(row, text="Select All", command=self._select_all_colors).pack(side=tk.LEFT)
        ttk.Button(row, text="Clear All", command=self._clear_all_colors).pack(side=tk.LEFT)

        row = ttk.Frame(color_frame)
        row.pack(fill=tk.X, pady=(5, 0))
        self.goal_color_var = tk.StringVar(value=ALL_COLOR_CODE)
        self.goal_count_var = tk.StringVar(value="10")
        ttk.Combobox(row, textvariable=self.goal_color_var, state="readonly", width=5,
                     values=[ALL_COLOR_CODE] + self.catalog.all_tile_codes()).pack(side=tk.LEFT)
        ttk.Entry(row, textvariable=self.goal_count_var, width=5).pack(side=tk.LEFT, padx=3)
        ttk.Button(row, text="Add", width=5, command=self._add_color_goal).pack(side=tk.LEFT)
        ttk.Button(row, text="Remove", width=7, command=self._remove_color_goal).pack(side=tk.LEFT)

        self.goal_list = tk.Listbox(color_frame, height=4)
        self.goal_list.pack(fill=tk.X, pady=(3, 0))

    # =============================================================================
    # ACTIONS
    # =============================================================================

    def _set_tool(self, transition, *args):
        transition(*args)
        self.canvas.redraw_grid()
        self._update_status()

    def _run_quick_action(self, action):
        if action():
            self.canvas.redraw_grid()
        self._update_all_status()

    def _new_level(self):
        if self.session.history.can_undo():
            if not messagebox.askyesno("New Level", "Current level will be lost. Continue?"):
                return
        self.session.new_level()
        self._refresh_from_session()

    def _save_level(self):
        if not self._apply_settings():
            return
        self.canvas.save_level(self.repository)

    def _load_level(self):
        try:
            level_id = int(self.level_var.get())
        except ValueError:
            messagebox.showerror("Invalid Input", "Level number must be an integer.")
            return
        self.canvas.load_level(self.repository, level_id)
        self._refresh_from_session()

    def _import_level(self):
        self.canvas.import_level()
        self._refresh_from_session()

    def _export_level(self):
        self.canvas.export_json()

    def _change_format(self, event=None):
        self.session.export_format = GridFormat(self.format_var.get())
        self._update_status()

    def _apply_settings(self) -> bool:
        """Copy the settings fields into the session; resize if the size changed.

        Returns False when a field or the new size was rejected.
        """
        try:
            level_id = int(self.level_var.get())
            width = int(self.width_var.get())
            height = int(self.height_var.get())
            moves = int(self.moves_var.get())
            timer = int(self.timer_var.get())
        except ValueError:
            messagebox.showerror("Invalid Input", "Please enter whole numbers.")
            return False

        meta = self.session.metadata
        meta.level_id = level_id
        meta.move_count = moves
        meta.timer_seconds = timer
        meta.limit_type = LimitType(self.limit_var.get())
        meta.difficulty = Difficulty[self.difficulty_var.get()]

        applied = True
        grid = self.session.grid
        if grid is None or (width, height) != (grid.grid_x, grid.grid_y):
            if not self.session.resize_grid(width, height):
                messagebox.showerror("Invalid Dimensions", "Grid dimensions must be between 1 and 20.")
                applied = False
        self.canvas.redraw_grid()
        self._update_all_status()
        return applied

    def _toggle_color(self, code: str):
        if not self.session.toggle_available_color(code):
            if code in self.session.metadata.available_colors:
                messagebox.showwarning("Colours", "At least one colour must stay available.")
            else:
                messagebox.showwarning("Colours", f"Unknown colour '{code}'.")
        self._sync_color_checks()

    def _select_all_colors(self):
        self.session.select_all_colors()
        self._sync_color_checks()

    def _clear_all_colors(self):
        self.session.clear_all_colors()
        self._sync_color_checks()

    def _add_color_goal(self):
        try:
            self.session.add_color_objective(self.goal_color_var.get(), int(self.goal_count_var.get()))
        except ValueError as e:
            messagebox.showerror("Colour Goal", str(e))
        self._refresh_goal_list()

    def _remove_color_goal(self):
        self.session.remove_color_objective(self.goal_color_var.get())
        self._refresh_goal_list()

    def _undo_action(self):
        if self.canvas.undo():
            self._update_all_status()
        else:
            messagebox.showinfo("Undo", "Nothing to undo.")

    def _redo_action(self):
        if self.canvas.redo():
            self._update_all_status()
        else:
            messagebox.showinfo("Redo", "Nothing to redo.")

    def _clear_history(self):
        if messagebox.askyesno("Clear History", "This will clear all undo/redo history. Continue?"):
            self.canvas.clear_history()
            self._update_history_status()

    # =============================================================================
    # STATUS
    # =============================================================================

    def _refresh_from_session(self):
        """Pull level settings back into the form after new/load/import."""
        meta = self.session.metadata
        self.level_var.set(str(meta.level_id))
        self.moves_var.set(str(meta.move_count))
        self.timer_var.set(str(meta.timer_seconds))
        self.limit_var.set(meta.limit_type.value)
        self.difficulty_var.set(meta.difficulty.name)
        self.format_var.set(self.session.export_format.value)
        if self.session.grid is not None:
            self.width_var.set(str(self.session.grid.grid_x))
            self.height_var.set(str(self.session.grid.grid_y))
        if self.catalog is not None:
            self._sync_color_checks()
            self._refresh_goal_list()
        self.canvas.redraw_grid()
        self._update_all_status()

    def _sync_color_checks(self):
        available = self.session.metadata.available_colors
        for code, var in self.color_vars.items():
            var.set(code in available)

    def _refresh_goal_list(self):
        self.goal_list.delete(0, tk.END)
        for objective in self.session.color_objectives:
            self.goal_list.insert(tk.END, f"{objective.target_color} × {objective.count} ({objective.type})")

    def _update_status(self):
        if not self.session.editing_enabled:
            return
        stats = self.session.get_statistics()
        if "grid_x" not in stats:
            return
        self.enhanced_status_bar.update_main_status(
            f"Level {self.session.metadata.level_id} | {stats['grid_x']}×{stats['grid_y']} | "
            f"Tool: {self.session.tool.describe()} | {stats['layered_cells']} layered | {stats['export_format']}"
        )

    def _update_history_status(self):
        self.enhanced_status_bar.update_history_status(self.session.history.get_history_info())

    def _update_all_status(self):
        self._update_status()
        self._update_history_status()

    def run(self):
        self.root.mainloop()


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Tile level editor")
    parser.add_argument("--levels-dir", default=DEFAULT_LEVELS_DIR, help="Directory holding level_<id>.json files")
    parser.add_argument("--catalog", default=DEFAULT_CATALOG_PATH, help="Tile/objective/special catalog JSON")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING)")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = LevelEditorApp(args.levels_dir, args.catalog)
    app.run()


if __name__ == "__main__":
    main()
