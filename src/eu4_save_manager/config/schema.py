"""Configuration data models"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .paths import GamePaths


DEFAULT_KEEP_BACKUPS = 10


@dataclass
class Settings:
    """Application settings"""
    backup_location: Optional[Path] = None
    keep_backups: int = DEFAULT_KEEP_BACKUPS
    auto_backup_on_change: bool = True
    save_directories: list[Path] = field(default_factory=list)
    last_loaded_file: Optional[Path] = None

    @property
    def effective_backup_location(self) -> Path:
        """Backup root to use, falling back to the default location."""
        return self.backup_location or GamePaths.BACKUP_DEFAULT


@dataclass
class AppConfiguration:
    """Complete application configuration"""
    settings: Settings = field(default_factory=Settings)
    first_run_complete: bool = False

    def existing_save_directories(self) -> list[Path]:
        """Get the configured save directories that exist on disk.

        Returns:
            List of existing directories, in configured order
        """
        return [d for d in self.settings.save_directories if d.is_dir()]
