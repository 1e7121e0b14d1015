"""Entry with a Browse button for a save file or a directory"""

from pathlib import Path
from tkinter import filedialog
from typing import Callable, Optional

import customtkinter as ctk

from ...config.paths import GamePaths

_SAVE_FILE_TYPES = [("EU4 saves", f"*{GamePaths.SAVE_EXTENSION}"), ("All files", "*.*")]


class PathSelector(ctk.CTkFrame):
    """Label, path entry, Browse button and a validity mark.

    In file mode the widget accepts ``.eu4`` saves and submits a path when
    Enter is pressed or a file is picked in the dialog. In directory mode
    it only reports changes.
    """

    def __init__(
        self,
        master,
        label: str = "Path:",
        initial_path: Optional[Path] = None,
        directory: bool = True,
        on_change: Optional[Callable[[Path], None]] = None,
        on_submit: Optional[Callable[[Path], None]] = None,
        **kwargs
    ):
        """Initialize the path selector widget.

        Args:
            master: Parent widget
            label: Label text to display
            initial_path: Initial path value
            directory: If True, select directories; if False, select save files
            on_change: Called with the new path whenever the entry changes
            on_submit: Called with the path on Enter or a file dialog pick
            **kwargs: Additional arguments for CTkFrame
        """
        super().__init__(master, **kwargs)

        self.directory = directory
        self.on_change = on_change
        self.on_submit = on_submit

        ctk.CTkLabel(self, text=label).pack(side="left", padx=(0, 10))

        # Packed right to left so the entry takes the remaining width
        self.status_label = ctk.CTkLabel(self, text="", width=24)
        self.status_label.pack(side="right", padx=(5, 0))
        self.browse_btn = ctk.CTkButton(self, text="Browse", width=80, command=self._browse)
        self.browse_btn.pack(side="right")

        self.path_var = ctk.StringVar(value=str(initial_path) if initial_path else "")
        self.entry = ctk.CTkEntry(self, textvariable=self.path_var, width=350)
        self.entry.pack(side="left", fill="x", expand=True, padx=(0, 10))

        self.path_var.trace_add("write", self._on_write)
        self.entry.bind("<Return>", lambda event: self.submit())

        self._refresh_mark()

    def _start_dir(self) -> Optional[str]:
        path = self.get_path()
        if path is None or not path.exists():
            return None
        return str(path if path.is_dir() else path.parent)

    def _browse(self):
        if self.directory:
            selected = filedialog.askdirectory(initialdir=self._start_dir(), title="Select Directory")
        else:
            selected = filedialog.askopenfilename(
                initialdir=self._start_dir(),
                title="Open Save File",
                filetypes=_SAVE_FILE_TYPES,
            )
        if not selected:
            return

        self.set_path(Path(selected))
        if not self.directory:
            self.submit()

    def _on_write(self, *args):
        self._refresh_mark()
        path = self.get_path()
        if self.on_change and path:
            self.on_change(path)

    def submit(self):
        """Pass the current path to ``on_submit``, if both are set."""
        path = self.get_path()
        if self.on_submit and path:
            self.on_submit(path)

    def is_valid(self) -> bool:
        """Check that the path exists and is of the expected kind."""
        path = self.get_path()
        if path is None:
            return False
        if self.directory:
            return path.is_dir()
        return GamePaths.is_save_file(path)

    def _refresh_mark(self):
        if self.is_valid():
            self.status_label.configure(text="OK", text_color="green")
        elif self.get_path():
            self.status_label.configure(text="?", text_color="orange")
        else:
            self.status_label.configure(text="")

    def get_path(self) -> Optional[Path]:
        """Current path, or None if the entry is blank."""
        value = self.path_var.get().strip()
        return Path(value) if value else None

    def set_path(self, path: Optional[Path]):
        self.path_var.set(str(path) if path else "")
