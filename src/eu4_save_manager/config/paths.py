"""Default locations of save games, configuration and backups (Windows)"""

import os
from pathlib import Path


def _expand(template: str) -> Path:
    return Path(os.path.expandvars(template))


class GamePaths:
    """Default paths used when the configuration does not name others.

    Paths are written with Windows environment variables and expanded once
    at import time.
    """

    # Where the game writes non-cloud saves
    LOCAL_SAVES_DEFAULT = _expand(
        r"%USERPROFILE%\Documents\Paradox Interactive\Europa Universalis IV\save games"
    )

    SAVE_EXTENSION = ".eu4"

    CONFIG_DIR = _expand(r"%APPDATA%\EU4SaveManager")
    CONFIG_FILE = CONFIG_DIR / "configuration.xml"

    # One sub-directory per save, holding <md5>.eu4 copies
    BACKUP_DEFAULT = CONFIG_DIR / "backups"

    @classmethod
    def expand_path(cls, path_str: str) -> Path:
        """Expand environment variables in a configured path."""
        return _expand(path_str)

    @classmethod
    def is_save_file(cls, path: Path) -> bool:
        """Check whether ``path`` is an existing file with the save extension."""
        return path.is_file() and path.suffix.lower() == cls.SAVE_EXTENSION

    @classmethod
    def ensure_config_dir(cls) -> Path:
        """Create the configuration directory if needed and return it."""
        cls.CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        return cls.CONFIG_DIR
