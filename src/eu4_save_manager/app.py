"""Application entry point: ``python -m eu4_save_manager [save.eu4] [--debug]``"""

import sys
from pathlib import Path
from typing import Optional

import customtkinter as ctk

from . import __app_name__, __version__
from .config.manager import ConfigurationManager
from .gui.config_dialog import ConfigDialog
from .gui.main_window import MainWindow
from .logging_config import setup_logging


def _file_argument(argv: list[str]) -> Optional[Path]:
    """First command line argument that is not an option, as a path."""
    for arg in argv:
        if not arg.startswith("--"):
            return Path(arg)
    return None


def _show_fatal_error(error: Exception):
    import tkinter as tk
    from tkinter import messagebox

    root = tk.Tk()
    root.withdraw()
    messagebox.showerror("Startup Error", f"Failed to start {__app_name__}:\n\n{error}")
    root.destroy()


class EU4SaveManagerApp:
    """Owns the configuration and the main window for one run."""

    def __init__(self, initial_file: Optional[Path] = None):
        self.config_manager = ConfigurationManager()
        self.initial_file = initial_file
        self.main_window: MainWindow | None = None

    def run(self):
        """Load or create the configuration, then run the Tk main loop."""
        ctk.set_appearance_mode("system")
        ctk.set_default_color_theme("blue")

        # is_first_run loads an existing file as a side effect
        first_run = self.config_manager.is_first_run()
        if first_run and self.config_manager.config is None:
            self.config_manager.create_default()

        self.main_window = MainWindow(self.config_manager, initial_file=self.initial_file)
        if first_run:
            self.main_window.after(100, self._run_first_time_setup)

        self.main_window.mainloop()

    def _run_first_time_setup(self):
        dialog = ConfigDialog(self.main_window, self.config_manager, first_run=True)
        self.main_window.wait_window(dialog)

        # Closed through the window manager: do not ask again next start
        if not self.config_manager.config.first_run_complete:
            self.config_manager.config.first_run_complete = True
            self.config_manager.save()

        self.main_window._refresh_ui()


def main():
    """Application entry point."""
    logger = setup_logging(debug="--debug" in sys.argv)
    logger.info("Starting %s v%s", __app_name__, __version__)

    try:
        EU4SaveManagerApp(initial_file=_file_argument(sys.argv[1:])).run()
    except Exception as e:
        logger.exception("Fatal error")
        _show_fatal_error(e)
        sys.exit(1)
    finally:
        logger.info("%s shutting down", __app_name__)


if __name__ == "__main__":
    main()
