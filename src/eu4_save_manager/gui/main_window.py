"""Main application window: save list, metadata view and backups."""

from pathlib import Path
from tkinter import messagebox
from typing import Optional

import customtkinter as ctk

from .. import __app_name__, __version__
from ..config.manager import ConfigurationManager
from ..core.backup_store import BackupEntry, BackupStore
from ..core.errors import AmbiguousBackupError, SaveToolError
from ..core.metadata import SaveMeta
from ..core.reports import format_meta, yes_no
from ..core.session import SaveSession, list_saves
from ..logging_config import get_logger
from .config_dialog import ConfigDialog
from .styles import COLORS, FONTS, PADDING, WINDOW_SIZES
from .widgets.path_selector import PathSelector

logger = get_logger("main_window")

# How often the loaded save is checked for changes
POLL_INTERVAL_MS = 2000


class MainWindow(ctk.CTk):
    """Main application window.

    Layout:
    - Top: toolbar and the save file selector
    - Left pane: saves found in the configured save directories
    - Right pane: metadata of the loaded save, tag rename form, backup list
    - Bottom: status bar
    """

    def __init__(self, config_manager: ConfigurationManager, initial_file: Optional[Path] = None):
        super().__init__()

        self.config_manager = config_manager
        self.session: Optional[SaveSession] = None
        self.save_rows: dict[Path, ctk.CTkFrame] = {}

        self.title(f"{__app_name__} v{__version__}")
        width, height = WINDOW_SIZES["main"]
        min_width, min_height = WINDOW_SIZES["min_main"]
        self.geometry(f"{width}x{height}")
        self.minsize(min_width, min_height)

        self._create_ui()
        self._refresh_save_list()

        start_file = initial_file or self.settings.last_loaded_file
        if start_file and Path(start_file).is_file():
            self._load_save(Path(start_file))

        self.after(POLL_INTERVAL_MS, self._poll_loaded_file)

    @property
    def settings(self):
        return self.config_manager.config.settings

    @property
    def store(self) -> BackupStore:
        return BackupStore(self.settings.effective_backup_location)

    # ------------------------------------------------------------------ layout

    def _create_ui(self):
        """Create the main UI layout."""
        self._create_toolbar()

        self.file_selector = PathSelector(
            self,
            label="Save File:",
            directory=False,
            on_submit=self._load_save,
            fg_color="transparent",
        )
        self.file_selector.pack(fill="x", padx=PADDING["medium"], pady=(0, PADDING["small"]))

        self.main_container = ctk.CTkFrame(self, fg_color="transparent")
        self.main_container.pack(fill="both", expand=True, padx=PADDING["medium"], pady=(0, PADDING["small"]))
        self.main_container.grid_columnconfigure(0, weight=1, minsize=220)
        self.main_container.grid_columnconfigure(1, weight=3)
        self.main_container.grid_rowconfigure(0, weight=1)

        self._create_save_list_pane()
        self._create_details_pane()
        self._create_status_bar()

    def _create_toolbar(self):
        """Create the top toolbar."""
        toolbar = ctk.CTkFrame(self, height=50, fg_color=COLORS["bar"])
        toolbar.pack(fill="x", padx=PADDING["medium"], pady=PADDING["medium"])
        toolbar.pack_propagate(False)

        title = ctk.CTkLabel(toolbar, text=__app_name__, font=FONTS["title"])
        title.pack(side="left", padx=PADDING["medium"], pady=PADDING["small"])

        version = ctk.CTkLabel(toolbar, text=f"v{__version__}", font=FONTS["small"], text_color="gray")
        version.pack(side="left", pady=PADDING["small"])

        buttons = ctk.CTkFrame(toolbar, fg_color="transparent")
        buttons.pack(side="left", padx=PADDING["large"])

        self.backup_btn = ctk.CTkButton(buttons, text="Backup", width=90, command=self._on_backup)
        self.backup_btn.pack(side="left", padx=(0, 5))

        self.restore_latest_btn = ctk.CTkButton(
            buttons, text="Restore Latest", width=110,
            fg_color=COLORS["success"], hover_color=COLORS["success_hover"],
            command=lambda: self._restore_backup("latest"),
        )
        self.restore_latest_btn.pack(side="left", padx=(0, 5))

        self.clean_btn = ctk.CTkButton(buttons, text="Clean", width=80, command=self._on_clean)
        self.clean_btn.pack(side="left")

        about_btn = ctk.CTkButton(
            toolbar, text="About", width=70, fg_color="transparent",
            hover_color=COLORS["hover"], command=self._show_about_dialog,
        )
        about_btn.pack(side="right", padx=(0, PADDING["small"]))

        settings_btn = ctk.CTkButton(
            toolbar, text="Settings", width=80, fg_color="transparent",
            hover_color=COLORS["hover"], command=self._open_settings,
        )
        settings_btn.pack(side="right", padx=5)

    def _create_save_list_pane(self):
        """Create the left pane listing save files."""
        pane = ctk.CTkFrame(self.main_container)
        pane.grid(row=0, column=0, sticky="nsew", padx=(0, PADDING["small"]))

        header = ctk.CTkFrame(pane, fg_color="transparent")
        header.pack(fill="x", padx=PADDING["small"], pady=PADDING["small"])

        ctk.CTkLabel(header, text="Saves", font=FONTS["heading"]).pack(side="left")
        self.save_count_label = ctk.CTkLabel(header, text="(0)", font=FONTS["small"], text_color="gray")
        self.save_count_label.pack(side="left", padx=(5, 0))

        refresh_btn = ctk.CTkButton(
            header, text="Refresh", width=70, height=24, font=FONTS["small"],
            command=self._refresh_save_list,
        )
        refresh_btn.pack(side="right")

        self.save_list = ctk.CTkScrollableFrame(pane)
        self.save_list.pack(fill="both", expand=True, padx=PADDING["small"], pady=(0, PADDING["small"]))

    def _create_details_pane(self):
        """Create the right pane: metadata, tag form and backups."""
        pane = ctk.CTkFrame(self.main_container)
        pane.grid(row=0, column=1, sticky="nsew")

        self.loaded_label = ctk.CTkLabel(pane, text="No save loaded", font=FONTS["heading"])
        self.loaded_label.pack(anchor="w", padx=PADDING["small"], pady=(PADDING["small"], 0))

        self.meta_text = ctk.CTkTextbox(pane, height=200, font=FONTS["mono"], wrap="word")
        self.meta_text.pack(fill="x", padx=PADDING["small"], pady=PADDING["small"])
        self.meta_text.configure(state="disabled")

        # Tag rename form
        tag_frame = ctk.CTkFrame(pane, fg_color="transparent")
        tag_frame.pack(fill="x", padx=PADDING["small"])

        ctk.CTkLabel(tag_frame, text="New Tag:", font=FONTS["body"]).pack(side="left")
        self.tag_entry = ctk.CTkEntry(tag_frame, width=60, placeholder_text="FRA")
        self.tag_entry.pack(side="left", padx=(5, PADDING["small"]))

        self.country_name_entry = ctk.CTkEntry(
            tag_frame, width=220, placeholder_text="New country name (optional)"
        )
        self.country_name_entry.pack(side="left", padx=(0, PADDING["small"]))

        self.change_tag_btn = ctk.CTkButton(
            tag_frame, text="Change Tag", width=100, command=self._on_change_tag,
        )
        self.change_tag_btn.pack(side="left")

        # Backups header
        backups_header = ctk.CTkFrame(pane, fg_color="transparent")
        backups_header.pack(fill="x", padx=PADDING["small"], pady=(PADDING["medium"], 0))

        ctk.CTkLabel(backups_header, text="Backups", font=FONTS["heading"]).pack(side="left")
        self.backup_count_label = ctk.CTkLabel(backups_header, text="(0)", font=FONTS["small"], text_color="gray")
        self.backup_count_label.pack(side="left", padx=(5, 0))

        erase_btn = ctk.CTkButton(
            backups_header, text="Erase All Backups", width=130, height=24, font=FONTS["small"],
            fg_color=COLORS["danger"], hover_color=COLORS["danger_hover"],
            command=self._on_erase_all_backups,
        )
        erase_btn.pack(side="right")

        self.backup_list = ctk.CTkScrollableFrame(pane)
        self.backup_list.pack(fill="both", expand=True, padx=PADDING["small"], pady=PADDING["small"])

    def _create_status_bar(self):
        """Create the bottom status bar."""
        self.status_bar = ctk.CTkFrame(self, height=30, fg_color=COLORS["bar"])
        self.status_bar.pack(fill="x", side="bottom")
        self.status_bar.pack_propagate(False)

        self.status_label = ctk.CTkLabel(
            self.status_bar, text="Ready", font=FONTS["small"], text_color=COLORS["bar_text"]
        )
        self.status_label.pack(side="left", padx=PADDING["medium"], pady=2)

    # ------------------------------------------------------------------ saves

    def _refresh_save_list(self):
        """Rebuild the list of saves in the configured directories."""
        for widget in self.save_list.winfo_children():
            widget.destroy()
        self.save_rows.clear()

        saves = list_saves(self.settings.save_directories)
        self.save_count_label.configure(text=f"({len(saves)})")

        if not saves:
            ctk.CTkLabel(
                self.save_list, text="No saves found.\nCheck the save directories in Settings.",
                font=FONTS["small"], text_color="gray",
            ).pack(pady=PADDING["large"])
            return

        for save_path in saves:
            row = ctk.CTkButton(
                self.save_list, text=save_path.stem, anchor="w", height=26,
                fg_color="transparent", text_color=COLORS["text"],
                hover_color=COLORS["hover"],
                command=lambda p=save_path: self._load_save(p),
            )
            row.pack(fill="x", pady=1)
            self.save_rows[save_path.resolve()] = row

        self._highlight_loaded_save()

    def _highlight_loaded_save(self):
        loaded = self.session.save_path if self.session else None
        for path, row in self.save_rows.items():
            row.configure(fg_color=COLORS["selected"] if path == loaded else "transparent")

    def _load_save(self, save_path: Path):
        """Make ``save_path`` the loaded save and back it up."""
        if not save_path.is_file():
            self._set_status(f"File not found: {save_path}")
            return

        self.session = SaveSession(save_path, self.store)
        self.file_selector.set_path(self.session.save_path)
        self.loaded_label.configure(text=self.session.name)
        self._highlight_loaded_save()
        logger.info("Loaded %s", self.session.save_path)

        try:
            self.config_manager.remember_loaded_file(self.session.save_path)
        except OSError as e:
            logger.warning("Could not persist last loaded file: %s", e)

        self._backup_loaded(quiet_if_unchanged=True)
        self._refresh_details()

    def _refresh_details(self):
        self._show_meta()
        self._refresh_backup_list()

    def _show_meta(self):
        """Decode and display the metadata of the loaded save."""
        if self.session is None:
            lines = ["No save loaded."]
        else:
            try:
                lines = format_meta(self.session.read_meta())
            except SaveToolError as e:
                logger.warning("Cannot read %s: %s", self.session.save_path, e)
                lines = [f"Cannot read metadata: {e}"]

        self.meta_text.configure(state="normal")
        self.meta_text.delete("1.0", "end")
        self.meta_text.insert("1.0", "\n".join(lines))
        self.meta_text.configure(state="disabled")

    # ---------------------------------------------------------------- backups

    def _refresh_backup_list(self):
        """Rebuild the backup rows for the loaded save."""
        for widget in self.backup_list.winfo_children():
            widget.destroy()

        rows = self.session.backup_metas() if self.session else []
        self.backup_count_label.configure(text=f"({len(rows)})")

        if not rows:
            ctk.CTkLabel(
                self.backup_list, text="No backups yet.", font=FONTS["body"], text_color="gray",
            ).pack(pady=PADDING["large"])
            return

        for index, (entry, meta) in enumerate(rows, start=1):
            self._create_backup_row(index, entry, meta)

    def _create_backup_row(self, index: int, entry: BackupEntry, meta: Optional[SaveMeta]):
        """Create a row for a single backup."""
        row = ctk.CTkFrame(self.backup_list)
        row.pack(fill="x", pady=2)

        if meta is None:
            summary = "metadata unreadable"
        else:
            version = meta.save_game_version.short_name if meta.save_game_version else "?"
            summary = (
                f"{meta.date}  {meta.player_tag or '?'}  "
                f"ironman: {yes_no(meta.iron_man)}  v{version}"
            )

        info = ctk.CTkFrame(row, fg_color="transparent")
        info.pack(side="left", fill="x", expand=True, padx=PADDING["small"], pady=5)

        ctk.CTkLabel(info, text=f"{index}. {summary}", font=FONTS["body"]).pack(anchor="w")
        ctk.CTkLabel(
            info,
            text=f"{entry.digest}  ·  {entry.timestamp:%Y-%m-%d %H:%M}  ·  {entry.get_size_mb():.1f} MB",
            font=FONTS["small"], text_color="gray",
        ).pack(anchor="w")

        buttons = ctk.CTkFrame(row, fg_color="transparent")
        buttons.pack(side="right", padx=PADDING["small"])

        ctk.CTkButton(
            buttons, text="Restore", width=70, height=28,
            fg_color=COLORS["success"], hover_color=COLORS["success_hover"],
            command=lambda d=entry.digest: self._restore_backup(d),
        ).pack(side="left", padx=(0, 5))

        ctk.CTkButton(
            buttons, text="Delete", width=70, height=28,
            fg_color=COLORS["danger"], hover_color=COLORS["danger_hover"],
            command=lambda d=entry.digest: self._delete_backup(d),
        ).pack(side="left")

    def _require_session(self) -> bool:
        if self.session is None:
            self._set_status("No save loaded")
            return False
        return True

    def _backup_loaded(self, quiet_if_unchanged: bool = False):
        try:
            entry = self.session.backup()
        except SaveToolError as e:
            self._set_status(f"Backup failed: {e}")
            return

        if entry is not None:
            self._set_status(f"Backup created: {entry.short_digest}")
        elif not quiet_if_unchanged:
            self._set_status("Backup already exists for the current contents")

    def _on_backup(self):
        if not self._require_session():
            return
        self._backup_loaded()
        self._refresh_backup_list()

    def _restore_backup(self, reference: str):
        """Restore the backup selected by ``reference`` over the loaded save."""
        if not self._require_session():
            return

        result = messagebox.askyesno(
            "Confirm Restore",
            f"Overwrite {self.session.save_path.name} with backup '{reference}'?",
        )
        if not result:
            return

        try:
            entry = self.session.restore(reference)
        except AmbiguousBackupError as e:
            messagebox.showerror("Restore Error", "\n".join(
                [f"More than one backup matches '{e.reference}':"] + [f"  {m}" for m in e.matches]
            ))
            return
        except SaveToolError as e:
            messagebox.showerror("Restore Error", str(e))
            self._set_status(f"Restore failed: {e}")
            return

        self._set_status(f"Restored {entry.short_digest}")
        self._refresh_details()

    def _delete_backup(self, digest: str):
        if not self._require_session():
            return

        result = messagebox.askyesno(
            "Confirm Delete",
            f"Delete backup {digest}?\n\nThis action cannot be undone.",
        )
        if not result:
            return

        try:
            removed = self.session.delete(digest)
        except SaveToolError as e:
            self._set_status(f"Delete failed: {e}")
            return

        if removed:
            self._set_status(f"Deleted {', '.join(entry.short_digest for entry in removed)}")
        else:
            self._set_status(f"No backup matches {digest}")
        self._refresh_backup_list()

    def _on_clean(self):
        """Keep only the newest backups of the loaded save."""
        if not self._require_session():
            return

        keep = self.settings.keep_backups
        try:
            removed = self.session.clean(keep)
        except SaveToolError as e:
            self._set_status(f"Clean failed: {e}")
            return

        self._set_status(f"Removed {len(removed)} backups, kept the newest {keep}")
        self._refresh_backup_list()

    def _on_erase_all_backups(self):
        store = self.store
        result = messagebox.askyesno(
            "Erase All Backups",
            f"Erase every backup of every save in\n{store.root}?\n\nThis action cannot be undone.",
        )
        if not result:
            return

        try:
            store.clear_all()
        except SaveToolError as e:
            messagebox.showerror("Erase Error", str(e))
            return

        self._set_status(f"All backups removed from {store.root}")
        self._refresh_backup_list()

    # -------------------------------------------------------------- tag edits

    def _on_change_tag(self):
        """Rename the player tag (and optionally the country) in the loaded save."""
        if not self._require_session():
            return

        new_tag = self.tag_entry.get().strip()
        new_name = self.country_name_entry.get().strip() or None

        try:
            change = self.session.rename_tag(new_tag, new_name)
        except SaveToolError as e:
            messagebox.showerror("Change Tag", str(e))
            self._set_status(f"Tag change failed: {e}")
            return

        self.tag_entry.delete(0, "end")
        self.country_name_entry.delete(0, "end")
        self._set_status(change.describe())
        self._refresh_details()

    # ---------------------------------------------------------------- polling

    def _poll_loaded_file(self):
        """Back up the loaded save when the game rewrites it."""
        try:
            if self.session is not None and self.session.has_changed():
                logger.debug("%s changed on disk", self.session.save_path.name)
                if self.settings.auto_backup_on_change:
                    self._backup_loaded(quiet_if_unchanged=True)
                self._refresh_details()
        finally:
            self.after(POLL_INTERVAL_MS, self._poll_loaded_file)

    # ------------------------------------------------------------------ misc

    def _open_settings(self):
        """Open the settings dialog."""
        dialog = ConfigDialog(self, self.config_manager, first_run=False)
        self.wait_window(dialog)

        if dialog.config_changed:
            self._refresh_ui()

    def _refresh_ui(self):
        """Refresh the UI after configuration changes."""
        if self.session is not None:
            self.session = SaveSession(self.session.save_path, self.store)
        self._refresh_save_list()
        self._refresh_details()
        self._set_status("Configuration updated")

    def _show_about_dialog(self):
        messagebox.showinfo(
            f"About {__app_name__}",
            f"{__app_name__} v{__version__}\n\n"
            "Backs up, restores and inspects Europa Universalis IV save games,\n"
            "and renames the player tag of binary saves.",
        )

    def _set_status(self, message: str):
        """Update the status bar message."""
        self.status_label.configure(text=message)
