"""Operations on the currently loaded save file.

A SaveSession pairs one save file with the backup store and implements the
user-facing commands: print, backup, restore, delete, clean and tag rename.
The GUI holds at most one session at a time; nothing here is global.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from .archive import SaveArchive
from .backup_store import BackupEntry, BackupStore, save_id_for
from .errors import BackupError, InvalidValueError, SaveToolError
from .field_patcher import COUNTRY_NAME_ANCHOR, PLAYER_TAG_ANCHOR, patch_fields
from .metadata import SaveMeta, extract
from .tokens import META_ENTRY
from ..config.paths import GamePaths
from ..config.schema import DEFAULT_KEEP_BACKUPS
from ..logging_config import get_logger

logger = get_logger("session")

TAG_LENGTH = 3


@dataclass
class TagChange:
    """Outcome of a tag rename"""
    old_tag: str
    new_tag: str
    old_country_name: Optional[str] = None
    new_country_name: Optional[str] = None
    backup: Optional[BackupEntry] = None

    def describe(self) -> str:
        text = f"Tag: {self.old_tag} -> {self.new_tag}"
        if self.new_country_name is not None:
            text += f", Name: {self.old_country_name} -> {self.new_country_name}"
        return text


def read_save_meta(save_path: Path) -> SaveMeta:
    """Decode the metadata of a zipped save file.

    Raises:
        ArchiveError: If the save is not a readable archive with a meta entry
        NotRecognizedError: If the meta entry is not in binary format
    """
    return extract(SaveArchive(save_path).read_entry(META_ENTRY))


def list_saves(directories: Iterable[Path]) -> list[Path]:
    """Find save files below the given directories.

    Args:
        directories: Directories to search recursively; missing ones are skipped

    Returns:
        Save file paths sorted by name
    """
    saves = []
    for directory in directories:
        directory = Path(directory)
        if not directory.is_dir():
            logger.debug("Save directory does not exist: %s", directory)
            continue
        saves.extend(p for p in directory.rglob(f"*{GamePaths.SAVE_EXTENSION}") if GamePaths.is_save_file(p))

    saves.sort(key=lambda p: (p.stem.lower(), str(p)))
    return saves


class SaveSession:
    """A loaded save file and its backups."""

    def __init__(self, save_path: Path, store: BackupStore):
        self.save_path = Path(save_path).resolve()
        self.store = store
        self._last_mtime = self._current_mtime()

    @property
    def save_id(self) -> str:
        return save_id_for(self.save_path)

    @property
    def name(self) -> str:
        return self.save_path.stem

    def exists(self) -> bool:
        return self.save_path.is_file()

    def _current_mtime(self) -> Optional[float]:
        try:
            return self.save_path.stat().st_mtime
        except OSError:
            return None

    def has_changed(self) -> bool:
        """Check whether the save file was modified since the last check."""
        mtime = self._current_mtime()
        if mtime == self._last_mtime:
            return False
        self._last_mtime = mtime
        return mtime is not None

    def read_meta(self) -> SaveMeta:
        return read_save_meta(self.save_path)

    def backup(self) -> Optional[BackupEntry]:
        """Back up the save; returns None if an identical backup exists."""
        if not self.exists():
            raise BackupError(f"Save file not found: {self.save_path}")
        return self.store.backup(self.save_path)

    def backups(self) -> list[BackupEntry]:
        return self.store.list_backups(self.save_id)

    def backup_metas(self) -> list[tuple[BackupEntry, Optional[SaveMeta]]]:
        """List backups, newest first, with their decoded metadata.

        Backups whose metadata cannot be read are paired with None.
        """
        rows = []
        for entry in self.backups():
            try:
                meta = read_save_meta(entry.file_path)
            except SaveToolError as e:
                logger.warning("Cannot read metadata of backup %s: %s", entry.digest, e)
                meta = None
            rows.append((entry, meta))
        return rows

    def restore(self, reference: str) -> BackupEntry:
        """Restore a backup selected by digest prefix or 'latest'."""
        entry = self.store.restore(self.save_path, reference)
        self._last_mtime = self._current_mtime()
        return entry

    def delete(self, *references: str) -> list[BackupEntry]:
        """Delete the backups matching each digest prefix."""
        removed = []
        for reference in references:
            if not reference.strip():
                raise InvalidValueError("Empty backup reference")
            removed.extend(self.store.delete(self.save_id, reference))
        return removed

    def clean(self, keep: int = DEFAULT_KEEP_BACKUPS) -> list[BackupEntry]:
        """Delete all but the newest ``keep`` backups."""
        return self.store.retain(self.save_id, keep)

    def rename_tag(self, new_tag: str, new_country_name: Optional[str] = None) -> TagChange:
        """Change the player tag, and optionally the country name, in the save.

        The save is backed up first. Only the ``meta`` entry is rewritten.

        Args:
            new_tag: Three-character country tag, e.g. ``FRA``
            new_country_name: Display name to write alongside the tag

        Returns:
            TagChange describing the old and new values

        Raises:
            InvalidValueError: If the tag is not three characters
            AnchorNotFoundError, AmbiguousAnchorError: If the fields cannot be located
        """
        if len(new_tag) != TAG_LENGTH:
            raise InvalidValueError(f"Tag must be {TAG_LENGTH} characters, got {new_tag!r}")

        backup = self.backup()

        archive = SaveArchive(self.save_path)
        meta_bytes = archive.read_entry(META_ENTRY)

        edits = [(PLAYER_TAG_ANCHOR, new_tag)]
        if new_country_name is not None:
            edits.append((COUNTRY_NAME_ANCHOR, new_country_name))
        result = patch_fields(meta_bytes, edits)

        archive.write_entry(META_ENTRY, result.data)

        change = TagChange(
            old_tag=result.previous[0],
            new_tag=new_tag,
            old_country_name=result.previous[1] if new_country_name is not None else None,
            new_country_name=new_country_name,
            backup=backup,
        )
        logger.info("%s (%s)", change.describe(), self.save_path.name)
        return change
