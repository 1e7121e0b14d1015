"""Access to single entries of a zipped save file.

Compressed saves are zip archives holding ``meta``, ``gamestate`` and
``ai`` entries. Only whole entries are read or replaced here; decoding is
left to the caller.
"""

import os
import shutil
import tempfile
import zipfile
from pathlib import Path

from .errors import ArchiveError
from ..logging_config import get_logger

logger = get_logger("archive")


class SaveArchive:
    """A zipped save file on disk."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _open(self) -> zipfile.ZipFile:
        try:
            return zipfile.ZipFile(self.path, "r")
        except FileNotFoundError as e:
            raise ArchiveError(f"Save file not found: {self.path}") from e
        except zipfile.BadZipFile as e:
            raise ArchiveError(f"Not a compressed save file: {self.path}") from e

    def entry_names(self) -> list[str]:
        """List the entry names, in archive order."""
        with self._open() as zf:
            return zf.namelist()

    def read_entry(self, name: str) -> bytes:
        """Read the full contents of one entry.

        Args:
            name: Entry name, e.g. ``meta``

        Returns:
            Uncompressed entry bytes

        Raises:
            ArchiveError: If the archive cannot be read or lacks the entry
        """
        with self._open() as zf:
            try:
                return zf.read(name)
            except KeyError as e:
                raise ArchiveError(f"{self.path.name} has no '{name}' entry") from e
            except (zipfile.BadZipFile, OSError) as e:
                raise ArchiveError(f"Failed to read '{name}' from {self.path.name}: {e}") from e

    def write_entry(self, name: str, data: bytes) -> None:
        """Replace the contents of one entry.

        The archive is rebuilt in a temporary file next to the original and
        moved over it once complete; other entries are copied unchanged.

        Raises:
            ArchiveError: If the archive cannot be read or lacks the entry
        """
        fd, temp_name = tempfile.mkstemp(
            prefix=f".{self.path.stem}.", suffix=".tmp", dir=self.path.parent
        )
        os.close(fd)
        temp_path = Path(temp_name)

        try:
            with self._open() as source:
                try:
                    target_info = source.getinfo(name)
                except KeyError as e:
                    raise ArchiveError(f"{self.path.name} has no '{name}' entry") from e

                with zipfile.ZipFile(temp_path, "w") as target:
                    for info in source.infolist():
                        if info.filename == target_info.filename:
                            target.writestr(info, data, compress_type=info.compress_type)
                        else:
                            target.writestr(info, source.read(info), compress_type=info.compress_type)

            shutil.copymode(self.path, temp_path)
            os.replace(temp_path, self.path)
            logger.info("Rewrote entry '%s' of %s (%d bytes)", name, self.path, len(data))
        except (zipfile.BadZipFile, OSError) as e:
            raise ArchiveError(f"Failed to update {self.path.name}: {e}") from e
        finally:
            if temp_path.exists():
                temp_path.unlink()
