"""Theme constants shared by the main window and dialogs.

Colors given as a (light, dark) tuple follow the appearance mode.
"""

COLORS = {
    "bar": ("#3d3d3d", "#1a1a1a"),          # Toolbar and status bar
    "bar_text": ("#cccccc", "#999999"),     # Status bar text
    "hover": ("gray80", "gray30"),          # Flat buttons and list rows
    "text": ("gray10", "gray90"),           # Flat button text
    "selected": ("#c9d8ea", "#2b4a6f"),     # Loaded save in the save list
    "success": "#2d8a4e",                   # Restore
    "success_hover": "#1e5c34",
    "danger": "#dc3545",                    # Delete, erase
    "danger_hover": "#a71d2a",
}

FONTS = {
    "title": ("Segoe UI", 18, "bold"),
    "heading": ("Segoe UI", 14, "bold"),
    "body": ("Segoe UI", 12),
    "small": ("Segoe UI", 10),
    "mono": ("Consolas", 11),  # Metadata report
}

# Pixels
PADDING = {
    "small": 10,
    "medium": 18,
    "large": 30,
}

# (width, height)
WINDOW_SIZES = {
    "main": (1100, 700),
    "min_main": (850, 550),
    "config_dialog": (700, 560),
}
