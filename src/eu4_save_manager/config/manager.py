"""Reading and writing configuration.xml

Layout::

    <EU4SaveManager version="1.0">
      <FirstRunComplete>true</FirstRunComplete>
      <Settings>
        <BackupLocation>...</BackupLocation>
        <KeepBackups>10</KeepBackups>
        <AutoBackupOnChange>true</AutoBackupOnChange>
        <LastLoadedFile>...</LastLoadedFile>
        <SaveDirectories>
          <Directory>...</Directory>
        </SaveDirectories>
      </Settings>
    </EU4SaveManager>

Missing or malformed elements fall back to their defaults.
"""

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional
from xml.dom import minidom

from .paths import GamePaths
from .schema import DEFAULT_KEEP_BACKUPS, AppConfiguration, Settings
from ..logging_config import get_logger

logger = get_logger("config_manager")

ROOT_TAG = "EU4SaveManager"
FORMAT_VERSION = "1.0"


def _text(parent: Optional[ET.Element], tag: str) -> Optional[str]:
    """Stripped text of a child element, or None if absent or blank."""
    if parent is None:
        return None
    elem = parent.find(tag)
    if elem is None or elem.text is None or not elem.text.strip():
        return None
    return elem.text.strip()


def _read_bool(parent: Optional[ET.Element], tag: str, default: bool) -> bool:
    value = _text(parent, tag)
    return default if value is None else value.lower() == "true"


def _read_count(parent: Optional[ET.Element], tag: str, default: int) -> int:
    """Read a positive integer, logging and ignoring anything else."""
    value = _text(parent, tag)
    if value is None:
        return default
    try:
        count = int(value)
    except ValueError:
        count = 0
    if count < 1:
        logger.warning("Invalid %s %r, using %d", tag, value, default)
        return default
    return count


def _read_path(parent: Optional[ET.Element], tag: str) -> Optional[Path]:
    value = _text(parent, tag)
    return GamePaths.expand_path(value) if value else None


class ConfigurationManager:
    """Loads and saves the application configuration.

    ``config`` is None until ``load`` or ``create_default`` is called.
    """

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or GamePaths.CONFIG_FILE
        self.config: Optional[AppConfiguration] = None

    def is_first_run(self) -> bool:
        """Check whether the first-run setup still has to be shown.

        That is the case when the file is missing, unreadable, or was saved
        before setup completed. A readable file is left loaded in ``config``.
        """
        if not self.config_path.exists():
            return True

        try:
            return not self.load().first_run_complete
        except (ET.ParseError, OSError) as e:
            logger.warning("Could not load config, treating as first run: %s", e)
            return True

    def load(self) -> AppConfiguration:
        """Parse the configuration file.

        Raises:
            OSError: If the file cannot be read
            ET.ParseError: If the XML is malformed
        """
        logger.debug("Loading configuration from %s", self.config_path)
        root = ET.parse(self.config_path).getroot()
        settings_elem = root.find("Settings")

        directories = []
        dirs_elem = settings_elem.find("SaveDirectories") if settings_elem is not None else None
        if dirs_elem is not None:
            directories = [
                GamePaths.expand_path(elem.text.strip())
                for elem in dirs_elem.findall("Directory")
                if elem.text and elem.text.strip()
            ]

        settings = Settings(
            backup_location=_read_path(settings_elem, "BackupLocation"),
            keep_backups=_read_count(settings_elem, "KeepBackups", DEFAULT_KEEP_BACKUPS),
            auto_backup_on_change=_read_bool(settings_elem, "AutoBackupOnChange", True),
            save_directories=directories or [GamePaths.LOCAL_SAVES_DEFAULT],
            last_loaded_file=_read_path(settings_elem, "LastLoadedFile"),
        )

        self.config = AppConfiguration(
            settings=settings,
            first_run_complete=_read_bool(root, "FirstRunComplete", False),
        )
        logger.debug("Configuration loaded: %d save directories", len(settings.save_directories))
        return self.config

    def _to_xml(self) -> ET.Element:
        settings = self.config.settings
        root = ET.Element(ROOT_TAG, version=FORMAT_VERSION)
        ET.SubElement(root, "FirstRunComplete").text = str(self.config.first_run_complete).lower()

        settings_elem = ET.SubElement(root, "Settings")
        values = {
            "BackupLocation": str(settings.effective_backup_location),
            "KeepBackups": str(settings.keep_backups),
            "AutoBackupOnChange": str(settings.auto_backup_on_change).lower(),
            "LastLoadedFile": str(settings.last_loaded_file) if settings.last_loaded_file else "",
        }
        for tag, text in values.items():
            ET.SubElement(settings_elem, tag).text = text

        dirs_elem = ET.SubElement(settings_elem, "SaveDirectories")
        for directory in settings.save_directories:
            ET.SubElement(dirs_elem, "Directory").text = str(directory)
        return root

    def save(self) -> None:
        """Write the configuration, creating its directory if needed.

        Raises:
            ValueError: If no configuration has been loaded or created
        """
        if self.config is None:
            raise ValueError("No configuration to save")

        logger.debug("Saving configuration to %s", self.config_path)
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        pretty = minidom.parseString(ET.tostring(self._to_xml(), encoding="unicode")).toprettyxml(indent="  ")
        # minidom pads with blank lines
        text = "\n".join(line for line in pretty.splitlines() if line.strip())
        self.config_path.write_text(text, encoding="utf-8")

    def create_default(self) -> AppConfiguration:
        """Replace ``config`` with defaults; nothing is written."""
        self.config = AppConfiguration(
            settings=Settings(
                backup_location=GamePaths.BACKUP_DEFAULT,
                save_directories=[GamePaths.LOCAL_SAVES_DEFAULT],
            ),
            first_run_complete=False,
        )
        return self.config

    def remember_loaded_file(self, path: Path) -> None:
        """Record the most recently loaded save and persist it."""
        if self.config is None:
            raise ValueError("No configuration loaded")
        self.config.settings.last_loaded_file = path
        self.save()
