"""Content-addressed backups of save files.

Each backup is a copy of the whole save named after the MD5 digest of its
contents, so backing up an unchanged save is a no-op:

    backup_root/
        autosave/
            3f2a9c0d4e...b1.eu4
            91c07a55e2...0d.eu4
        Castile1520/
            ...

Backups of a save are ordered by modification time, newest first. The copy
keeps the modification time of the save it was taken from.
"""

import hashlib
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from .errors import AmbiguousBackupError, BackupError, BackupNotFoundError, RestoreError
from ..config.path_validator import is_path_under_root, sanitize_filename, validate_backup_root
from ..logging_config import get_logger

logger = get_logger("backup_store")

# References that select the newest backup
LATEST_REFERENCES = ("latest", "last")


@dataclass
class BackupEntry:
    """A single stored backup"""
    digest: str
    file_path: Path
    timestamp: datetime

    @property
    def short_digest(self) -> str:
        return self.digest[:8]

    def get_size_mb(self) -> float:
        """Get the backup file size in megabytes.

        Returns:
            File size in MB, or 0 if file doesn't exist
        """
        if self.file_path.exists():
            return self.file_path.stat().st_size / (1024 * 1024)
        return 0.0


def save_id_for(save_path: Path) -> str:
    """Identify a save by its file name without extension."""
    return Path(save_path).stem


class BackupStore:
    """Stores and retrieves backups below a root directory.

    Backups of one save share a directory named after the save.
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    @staticmethod
    def hash_of(data: bytes) -> str:
        """Digest naming a backup of ``data``."""
        return hashlib.md5(data).hexdigest()

    def backup_dir(self, save_id: str) -> Path:
        """Directory holding the backups of one save."""
        return self.root / sanitize_filename(save_id)

    def backup(self, save_path: Path) -> BackupEntry | None:
        """Back up a save file unless an identical backup already exists.

        Args:
            save_path: Save file to copy

        Returns:
            The new BackupEntry, or None if the contents were already backed up

        Raises:
            BackupError: If the save cannot be read or copied
        """
        save_path = Path(save_path)
        try:
            digest = self.hash_of(save_path.read_bytes())
        except OSError as e:
            raise BackupError(f"Cannot read {save_path}: {e}") from e

        backup_dir = self.backup_dir(save_id_for(save_path))
        backup_path = backup_dir / f"{digest}{save_path.suffix}"
        if backup_path.exists():
            logger.debug("Backup %s of %s already exists", digest, save_path.name)
            return None

        try:
            backup_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(save_path, backup_path)
        except (OSError, shutil.Error) as e:
            logger.error("Backup of %s failed: %s", save_path, e)
            raise BackupError(f"Failed to back up {save_path.name}: {e}") from e

        logger.info("Backup created: %s -> %s", save_path.name, digest)
        return self._entry(backup_path)

    @staticmethod
    def _entry(path: Path) -> BackupEntry:
        return BackupEntry(
            digest=path.stem,
            file_path=path,
            timestamp=datetime.fromtimestamp(path.stat().st_mtime),
        )

    def list_backups(self, save_id: str) -> list[BackupEntry]:
        """List the backups of a save, newest first.

        Args:
            save_id: Save name without extension

        Returns:
            List of BackupEntry sorted by modification time (newest first)
        """
        backup_dir = self.backup_dir(save_id)
        if not backup_dir.is_dir():
            return []

        entries = [self._entry(p) for p in backup_dir.iterdir() if p.is_file()]
        entries.sort(key=lambda e: (e.timestamp, e.digest), reverse=True)
        return entries

    def find(self, save_id: str, prefix: str) -> list[BackupEntry]:
        """Find the backups whose digest starts with ``prefix`` (case-insensitive)."""
        prefix = prefix.strip().lower()
        if not prefix:
            return []
        return [e for e in self.list_backups(save_id) if e.digest.startswith(prefix)]

    def resolve(self, save_id: str, reference: str) -> BackupEntry:
        """Select exactly one backup.

        Args:
            save_id: Save name without extension
            reference: A digest prefix, or 'latest'/'last' for the newest backup

        Raises:
            BackupNotFoundError: If nothing matches
            AmbiguousBackupError: If the prefix matches more than one backup
        """
        if reference.strip().lower() in LATEST_REFERENCES:
            backups = self.list_backups(save_id)
            if not backups:
                raise BackupNotFoundError(f"No backups exist for '{save_id}'")
            return backups[0]

        matches = self.find(save_id, reference)
        if not matches:
            raise BackupNotFoundError(f"No backup of '{save_id}' matches '{reference}'")
        if len(matches) > 1:
            raise AmbiguousBackupError(reference, [m.digest for m in matches])
        return matches[0]

    def restore(self, save_path: Path, reference: str) -> BackupEntry:
        """Copy a backup over the save file.

        Returns:
            The restored BackupEntry

        Raises:
            BackupNotFoundError, AmbiguousBackupError: If the reference does not
                select exactly one backup
            RestoreError: If the copy fails
        """
        save_path = Path(save_path)
        entry = self.resolve(save_id_for(save_path), reference)

        try:
            shutil.copy2(entry.file_path, save_path)
        except (OSError, shutil.Error) as e:
            logger.error("Restore of %s failed: %s", entry.digest, e)
            raise RestoreError(f"Failed to restore {entry.digest}: {e}") from e

        logger.info("Restored %s to %s", entry.digest, save_path)
        return entry

    def _remove(self, entry: BackupEntry) -> None:
        if not is_path_under_root(entry.file_path, self.root):
            raise BackupError(f"Refusing to delete {entry.file_path}: outside {self.root}")
        try:
            entry.file_path.unlink()
        except OSError as e:
            raise BackupError(f"Failed to delete {entry.digest}: {e}") from e
        logger.info("Removed backup %s", entry.digest)

    def delete(self, save_id: str, prefix: str) -> list[BackupEntry]:
        """Delete every backup whose digest starts with ``prefix``.

        Returns:
            The deleted entries (empty if nothing matched)
        """
        removed = self.find(save_id, prefix)
        for entry in removed:
            self._remove(entry)
        return removed

    def retain(self, save_id: str, keep_count: int) -> list[BackupEntry]:
        """Delete all but the newest ``keep_count`` backups of a save.

        Returns:
            The deleted entries, newest first
        """
        if keep_count < 0:
            raise ValueError("keep_count must not be negative")

        removed = self.list_backups(save_id)[keep_count:]
        for entry in removed:
            self._remove(entry)
        return removed

    def clear_all(self) -> None:
        """Erase every backup of every save.

        Raises:
            BackupError: If the root fails validation or cannot be removed
        """
        valid, message = validate_backup_root(self.root)
        if not valid:
            raise BackupError(f"Refusing to clear {self.root}: {message}")
        if not self.root.exists():
            return

        try:
            shutil.rmtree(self.root)
        except OSError as e:
            raise BackupError(f"Failed to remove {self.root}: {e}") from e
        logger.info("All backups removed from %s", self.root)
