"""
LevelCanvas - interactive tkinter canvas bound to a LevelSession.
Clicks go through session.click_cell; rejections are shown in a message box.
"""
import tkinter as tk
from tkinter import messagebox, filedialog
from typing import Optional, Callable

from core.codec import loads_level
from core.level_io import LevelRepository
from core.session import LevelSession
from core.types import NULL_CODE, GridFormat, LevelDecodeError
from render.grid_render import GridRenderer, color_for_code


class LevelCanvas:
    """Interactive canvas for editing a rectangular tile level."""

    def __init__(self, parent: tk.Widget, session: LevelSession, width: int = 640, height: int = 640):
        self.canvas = tk.Canvas(parent, width=width, height=height, bg="lightgray")
        self.canvas.pack(fill=tk.BOTH, expand=True)

        self.session = session
        self.renderer = GridRenderer(cell_size=60.0)

        self.canvas_offset_x = 20
        self.canvas_offset_y = 20

        # Callbacks
        self.on_grid_change: Optional[Callable] = None
        self.on_history_change: Optional[Callable] = None
        self.position_callback: Optional[Callable] = None

        self._setup_event_bindings()

    def _setup_event_bindings(self):
        self.canvas.bind("<Button-1>", self._on_left_click)
        self.canvas.bind("<Motion>", self._on_mouse_motion)

    def set_change_callback(self, callback: Callable):
        self.on_grid_change = callback

    def set_history_callback(self, callback: Callable):
        self.on_history_change = callback

    def set_position_callback(self, callback: Callable):
        self.position_callback = callback

    def _notify_grid_change(self):
        if self.on_grid_change:
            self.on_grid_change()
        self._notify_history_change()

    def _notify_history_change(self):
        if self.on_history_change:
            self.on_history_change()

    def _event_to_cell(self, event):
        return self.renderer.pixel_to_cell(event.x, event.y, self.canvas_offset_x, self.canvas_offset_y)

    # =============================================================================
    # MOUSE HANDLING
    # =============================================================================

    def _on_left_click(self, event):
        grid = self.session.grid
        if grid is None:
            return
        if not self.session.editing_enabled:
            messagebox.showwarning("Editing Disabled", "The tile catalog could not be loaded.")
            return

        row, col = self._event_to_cell(event)
        if not grid.cell_exists(row, col):
            return

        rejections = self.session.click_cell(row, col)
        if rejections:
            messagebox.showwarning("Invalid Placement", "\n".join(e.message for e in rejections))

        self._notify_grid_change()
        self.redraw_grid()

    def _on_mouse_motion(self, event):
        if not self.position_callback or self.session.grid is None:
            return
        row, col = self._event_to_cell(event)
        if self.session.grid.cell_exists(row, col):
            self.position_callback(row, col)
        else:
            self.position_callback()

    # =============================================================================
    # HISTORY
    # =============================================================================

    def undo(self) -> bool:
        success = self.session.undo()
        if success:
            self.redraw_grid()
            self._notify_grid_change()
        return success

    def redo(self) -> bool:
        success = self.session.redo()
        if success:
            self.redraw_grid()
            self._notify_grid_change()
        return success

    def clear_history(self):
        self.session.clear_history()
        self._notify_history_change()

    # =============================================================================
    # DRAWING
    # =============================================================================

    def redraw_grid(self):
        """Completely redraw the grid on the canvas."""
        self.canvas.delete("all")
        grid = self.session.grid
        if grid is None:
            return

        self.renderer.grid_y = grid.grid_y
        for row, col, cell in grid.iter_cells():
            self._draw_cell(row, col, cell)

        start = self.session.rectangle_start
        if start is not None:
            x0, y0, x1, y1 = self.renderer.get_cell_bounds(*start, self.canvas_offset_x, self.canvas_offset_y)
            self.canvas.create_rectangle(x0, y0, x1, y1, outline="yellow", width=4)

    def _draw_cell(self, row: int, col: int, cell):
        outline = "black" if cell.base_code != NULL_CODE else "gray"
        self.renderer.draw_cell(
            self.canvas, row, col,
            fill_color=color_for_code(cell.base_code),
            outline_color=outline,
            offset_x=self.canvas_offset_x,
            offset_y=self.canvas_offset_y,
        )

        label = ""
        if self.session.catalog is not None and self.session.catalog.is_special(cell.base_code):
            label = cell.base_code
        if cell.layers:
            label = "\n".join([label] + cell.layers if label else cell.layers)
        if label:
            self.renderer.draw_text_in_cell(
                self.canvas, row, col, label,
                offset_x=self.canvas_offset_x, offset_y=self.canvas_offset_y, size=8,
            )

    # =============================================================================
    # FILES
    # =============================================================================

    def save_level(self, repository: LevelRepository, fmt: Optional[GridFormat] = None):
        """Save into the levels directory as level_<id>.json."""
        if self.session.grid is None:
            messagebox.showerror("No Level", "No level to save.")
            return
        level_id = self.session.metadata.level_id
        if repository.exists(level_id):
            if not messagebox.askyesno("Overwrite Level", f"Level {level_id} already exists. Overwrite?"):
                return
        try:
            path = self.session.save(repository, fmt)
            messagebox.showinfo("Save Success", f"Level {level_id} saved to {path}")
        except OSError as e:
            messagebox.showerror("Save Error", f"Failed to save level: {e}")

    def load_level(self, repository: LevelRepository, level_id: int):
        try:
            self.session.load(repository, level_id)
        except FileNotFoundError:
            messagebox.showerror("Load Error", f"Level {level_id} not found.")
            return
        except (LevelDecodeError, RuntimeError) as e:
            messagebox.showerror("Load Error", f"Level {level_id} could not be read: {e}")
            return

        self.redraw_grid()
        self._notify_grid_change()

    def import_level(self):
        """Import a level from any JSON file (format auto-detected)."""
        if not self.session.editing_enabled:
            messagebox.showwarning("Editing Disabled", "The tile catalog could not be loaded.")
            return

        filename = filedialog.askopenfilename(
            filetypes=[("JSON files", "*.json"), ("All files", "*.*")],
            title="Import Level from JSON"
        )
        if not filename:
            return

        try:
            with open(filename, 'r') as f:
                level = loads_level(f.read(), self.session.catalog)
        except OSError as e:
            messagebox.showerror("Import Error", f"Could not read file: {e}")
            return
        except LevelDecodeError as e:
            messagebox.showerror("Import Error", f"Failed to import level: {e}")
            return

        self.session.apply_level(level)
        stats = self.session.get_statistics()
        summary = f"""Level imported successfully!

Format: {level.grid_format.value}
Grid: {stats['grid_x']} × {stats['grid_y']}
Layered cells: {stats['layered_cells']}
Special tiles: {stats['special_cells']}
Colour objectives: {stats['color_objectives']}"""
        messagebox.showinfo("Import Success", summary)

        self.redraw_grid()
        self._notify_grid_change()

    def export_json(self, fmt: Optional[GridFormat] = None):
        """Export the current level to a chosen file."""
        if self.session.grid is None:
            messagebox.showerror("No Level", "No level to export.")
            return

        filename = filedialog.asksaveasfilename(
            defaultextension=".json",
            filetypes=[("JSON files", "*.json"), ("All files", "*.*")],
            title="Export Level as JSON"
        )
        if not filename:
            return

        try:
            text = self.session.to_json(fmt)
            with open(filename, 'w') as f:
                f.write(text)
            messagebox.showinfo("Export Success", f"Level exported to {filename}")
        except OSError as e:
            messagebox.showerror("Export Error", f"Failed to export level: {e}")
