"""Settings dialog, also shown on first run"""

from pathlib import Path
from typing import Optional

import customtkinter as ctk

from ..config.manager import ConfigurationManager
from ..config.path_validator import is_path_under_root
from ..config.paths import GamePaths
from .styles import COLORS, FONTS, PADDING, WINDOW_SIZES
from .widgets.path_selector import PathSelector

MAX_KEEP_BACKUPS = 100


class ConfigDialog(ctk.CTkToplevel):
    """Modal dialog editing save directories and backup preferences.

    ``config_changed`` is True after the user saved.
    """

    def __init__(
        self,
        parent,
        config_manager: ConfigurationManager,
        first_run: bool = False,
    ):
        """Initialize the configuration dialog.

        Args:
            parent: Parent window
            config_manager: Configuration manager with a loaded configuration
            first_run: If True, shows the welcome text and hides Cancel
        """
        super().__init__(parent)

        self.config_manager = config_manager
        self.settings = config_manager.config.settings
        self.first_run = first_run
        self.config_changed = False

        self.title("Initial Setup" if first_run else "Settings")
        width, height = WINDOW_SIZES["config_dialog"]
        self.geometry(f"{width}x{height}")
        self.resizable(False, False)

        # Modal
        self.transient(parent)
        self.grab_set()

        self._build()
        self.focus_force()

    def _build(self):
        body = ctk.CTkFrame(self)
        body.pack(fill="both", expand=True, padx=PADDING["large"], pady=PADDING["large"])

        if self.first_run:
            heading = "Welcome to EU4 Save Manager"
            intro = "Tell us where your saves live and where backups should go"
        else:
            heading = "Settings"
            intro = "Configure save directories and backup preferences"
        ctk.CTkLabel(body, text=heading, font=FONTS["title"]).pack(anchor="w", pady=(0, 5))
        ctk.CTkLabel(body, text=intro, font=FONTS["body"], text_color="gray").pack(
            anchor="w", pady=(0, PADDING["medium"])
        )

        sections = ctk.CTkScrollableFrame(body, height=300)
        sections.pack(fill="both", expand=True, pady=(0, PADDING["small"]))
        self._build_directories(sections)
        self._build_backups(sections)

        self.error_label = ctk.CTkLabel(body, text="", font=FONTS["small"], text_color=COLORS["danger"])
        self.error_label.pack(anchor="w")

        self._build_buttons(body)

    @staticmethod
    def _section(parent, title: str, description: Optional[str] = None) -> ctk.CTkFrame:
        frame = ctk.CTkFrame(parent)
        frame.pack(fill="x", pady=(0, PADDING["medium"]))
        ctk.CTkLabel(frame, text=title, font=FONTS["heading"]).pack(
            anchor="w", padx=PADDING["medium"], pady=PADDING["small"]
        )
        if description:
            ctk.CTkLabel(frame, text=description, font=FONTS["small"], text_color="gray").pack(
                anchor="w", padx=PADDING["medium"], pady=(0, PADDING["small"])
            )
        return frame

    def _build_directories(self, parent):
        section = self._section(
            parent,
            "Save Directories",
            "Folders searched for .eu4 saves, one per line:",
        )
        self.save_dirs_text = ctk.CTkTextbox(section, height=90, font=FONTS["small"])
        self.save_dirs_text.pack(fill="x", padx=PADDING["medium"], pady=(0, PADDING["medium"]))
        self.save_dirs_text.insert("1.0", "\n".join(str(d) for d in self.settings.save_directories))

    def _build_backups(self, parent):
        section = self._section(parent, "Backups")

        self.backup_path_selector = PathSelector(
            section,
            label="Backup Location:",
            initial_path=self.settings.effective_backup_location,
            directory=True,
            fg_color="transparent",
        )
        self.backup_path_selector.pack(fill="x", padx=PADDING["medium"], pady=PADDING["small"])

        keep_row = ctk.CTkFrame(section, fg_color="transparent")
        keep_row.pack(fill="x", padx=PADDING["medium"], pady=PADDING["small"])
        ctk.CTkLabel(keep_row, text="Backups kept per save by Clean:", font=FONTS["body"]).pack(side="left")

        self.keep_var = ctk.IntVar(value=min(max(self.settings.keep_backups, 1), MAX_KEEP_BACKUPS))
        self.keep_value_label = ctk.CTkLabel(keep_row, text=str(self.keep_var.get()), width=30)
        self.keep_value_label.pack(side="right", padx=(10, 0))
        ctk.CTkSlider(
            keep_row,
            from_=1,
            to=MAX_KEEP_BACKUPS,
            number_of_steps=MAX_KEEP_BACKUPS - 1,
            variable=self.keep_var,
            command=lambda value: self.keep_value_label.configure(text=str(int(value))),
        ).pack(side="right", padx=10)

        self.auto_backup_var = ctk.BooleanVar(value=self.settings.auto_backup_on_change)
        ctk.CTkCheckBox(
            section,
            text="Back up the loaded save whenever the game writes it",
            variable=self.auto_backup_var,
            font=FONTS["body"],
        ).pack(anchor="w", padx=PADDING["medium"], pady=(PADDING["small"], PADDING["medium"]))

    def _build_buttons(self, parent):
        row = ctk.CTkFrame(parent, fg_color="transparent")
        row.pack(fill="x", pady=(PADDING["small"], 0))

        # First run must end with a saved configuration
        if not self.first_run:
            ctk.CTkButton(
                row,
                text="Cancel",
                width=100,
                fg_color="transparent",
                border_width=1,
                text_color=COLORS["text"],
                command=self.destroy,
            ).pack(side="left")

        ctk.CTkButton(
            row,
            text="Get Started" if self.first_run else "Save",
            width=120,
            command=self._save_and_close,
        ).pack(side="right")

    def _read_save_directories(self) -> list[Path]:
        text = self.save_dirs_text.get("1.0", "end")
        directories = [GamePaths.expand_path(line.strip()) for line in text.splitlines() if line.strip()]
        return directories or [GamePaths.LOCAL_SAVES_DEFAULT]

    def _validate(self, directories: list[Path], backup_root: Optional[Path]) -> Optional[str]:
        """Return an error message, or None if the input can be saved."""
        if backup_root is None:
            return None
        for directory in directories:
            # Backups inside a save directory would be listed as saves
            if is_path_under_root(backup_root, directory):
                return f"The backup location must not be inside {directory}"
        return None

    def _save_and_close(self):
        directories = self._read_save_directories()
        backup_root = self.backup_path_selector.get_path()

        error = self._validate(directories, backup_root)
        if error:
            self.error_label.configure(text=error)
            return

        self.settings.save_directories = directories
        if backup_root:
            self.settings.backup_location = backup_root
        self.settings.keep_backups = int(self.keep_var.get())
        self.settings.auto_backup_on_change = bool(self.auto_backup_var.get())

        self.config_manager.config.first_run_complete = True
        self.config_manager.save()

        self.config_changed = True
        self.destroy()
