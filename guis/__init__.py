# guis/__init__.py
"""
Tile Level Editor - GUI Package
Tkinter interface components (level_canvas, status_bar) and the matplotlib
level preview (level_renderer_json). Modules are imported directly so the
preview works where tkinter is not installed.
"""
