"""Safety checks for filesystem operations on the backup store.

Removing backups is the only destructive thing the application does, so
every removal goes through these checks:
- A backup file must resolve to a location inside the backup root
- The backup root is only wiped when it holds nothing but backups
- Directory names derived from save names must be valid on Windows
"""

import os
import re
from pathlib import Path

from ..logging_config import get_logger

logger = get_logger("path_validator")

# Environment variables naming directories that can never be a backup root
PROTECTED_ENV_VARS = (
    "USERPROFILE",
    "HOME",
    "APPDATA",
    "LOCALAPPDATA",
    "WINDIR",
    "SYSTEMROOT",
    "PROGRAMFILES",
    "PROGRAMFILES(X86)",
    "PROGRAMDATA",
)

# Characters Windows does not allow in file names
_INVALID_NAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_MAX_NAME_LENGTH = 200

# <md5 hex>[.<save extension>]
_BACKUP_FILE_NAME = re.compile(r"^[0-9a-f]{32}(\.\w+)?$")


def protected_directories() -> set[Path]:
    """Resolve the protected directories named by the environment."""
    protected = set()
    for var in PROTECTED_ENV_VARS:
        value = os.environ.get(var)
        if not value:
            continue
        try:
            protected.add(Path(value).resolve())
        except (OSError, ValueError) as e:
            logger.debug("Ignoring %s=%r: %s", var, value, e)
    return protected


def is_path_under_root(path: Path, root: Path) -> bool:
    """Check whether ``path`` is ``root`` or lies below it, after resolving links."""
    try:
        return path.resolve().is_relative_to(root.resolve())
    except (OSError, ValueError) as e:
        logger.warning("Cannot compare %s with %s: %s", path, root, e)
        return False


def is_backup_file_name(name: str) -> bool:
    """Check whether a file name has the shape of a stored backup."""
    return _BACKUP_FILE_NAME.match(name) is not None


def validate_backup_root(backup_root: Path) -> tuple[bool, str]:
    """Decide whether ``backup_root`` may be removed as a whole.

    Args:
        backup_root: The configured backup root directory

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        resolved = backup_root.resolve()
    except (OSError, ValueError) as e:
        return False, f"Invalid path: {e}"

    if resolved == Path(resolved.anchor):
        return False, "Backup path is a filesystem root"

    if resolved in protected_directories():
        return False, "Backup path is a protected directory"

    if resolved.is_dir():
        for path in resolved.rglob("*"):
            if path.is_file() and not is_backup_file_name(path.name):
                return False, f"{path} is not a backup file"

    return True, ""


def sanitize_filename(filename: str) -> str:
    """Turn a save name into a directory name that is valid on Windows.

    Invalid characters become underscores; leading and trailing dots and
    spaces are dropped.
    """
    result = _INVALID_NAME_CHARS.sub("_", filename).strip(". ")[:_MAX_NAME_LENGTH]
    return result or "unnamed"
