"""GUI module using CustomTkinter.

Components:
    MainWindow: Main application window with
        - Save list for the configured save directories
        - Metadata view and tag rename form for the loaded save
        - Backup list with restore and delete actions

    ConfigDialog: Settings dialog for first-run setup and configuration

Submodules:
    styles: Theme constants (colors, fonts, padding, window sizes)
    widgets: Reusable widget components (PathSelector)
"""

from .main_window import MainWindow
from .config_dialog import ConfigDialog

__all__ = [
    "MainWindow",
    "ConfigDialog",
]
