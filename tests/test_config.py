from pathlib import Path

import pytest

from eu4_save_manager.config.manager import ConfigurationManager
from eu4_save_manager.config.path_validator import (
    is_backup_file_name,
    is_path_under_root,
    sanitize_filename,
    validate_backup_root,
)
from eu4_save_manager.config.paths import GamePaths
from eu4_save_manager.config.schema import DEFAULT_KEEP_BACKUPS, Settings
from eu4_save_manager.logging_config import get_logger, setup_logging


@pytest.fixture
def config_path(tmp_path):
    return tmp_path / "EU4SaveManager" / "configuration.xml"


def test_first_run_without_file(config_path):
    assert ConfigurationManager(config_path).is_first_run()


def test_save_and_load_round_trip(tmp_path, config_path):
    manager = ConfigurationManager(config_path)
    config = manager.create_default()
    config.first_run_complete = True
    config.settings.backup_location = tmp_path / "backups"
    config.settings.keep_backups = 25
    config.settings.auto_backup_on_change = False
    config.settings.save_directories = [tmp_path / "local", tmp_path / "cloud"]
    manager.save()

    reloaded = ConfigurationManager(config_path)
    assert not reloaded.is_first_run()
    assert reloaded.config == config


def test_defaults(config_path):
    config = ConfigurationManager(config_path).create_default()
    settings = config.settings

    assert not config.first_run_complete
    assert settings.keep_backups == DEFAULT_KEEP_BACKUPS == 10
    assert settings.auto_backup_on_change
    assert settings.save_directories == [GamePaths.LOCAL_SAVES_DEFAULT]
    assert settings.effective_backup_location == GamePaths.BACKUP_DEFAULT
    assert Settings().effective_backup_location == GamePaths.BACKUP_DEFAULT


def test_first_run_until_completed(config_path):
    manager = ConfigurationManager(config_path)
    manager.create_default()
    manager.save()
    assert manager.is_first_run()


def test_remember_loaded_file(tmp_path, config_path):
    manager = ConfigurationManager(config_path)
    manager.create_default()
    manager.remember_loaded_file(tmp_path / "Sweden.eu4")

    assert ConfigurationManager(config_path).load().settings.last_loaded_file == tmp_path / "Sweden.eu4"


def test_malformed_values_fall_back_to_defaults(config_path):
    config_path.parent.mkdir(parents=True)
    config_path.write_text(
        "<EU4SaveManager>"
        "<FirstRunComplete>true</FirstRunComplete>"
        "<Settings>"
        "<KeepBackups>many</KeepBackups>"
        "<SaveDirectories><Directory>  </Directory></SaveDirectories>"
        "</Settings>"
        "</EU4SaveManager>",
        encoding="utf-8",
    )
    settings = ConfigurationManager(config_path).load().settings

    assert settings.keep_backups == DEFAULT_KEEP_BACKUPS
    assert settings.auto_backup_on_change is True
    assert settings.backup_location is None
    assert settings.save_directories == [GamePaths.LOCAL_SAVES_DEFAULT]


def test_missing_settings_element(config_path):
    config_path.parent.mkdir(parents=True)
    config_path.write_text("<EU4SaveManager><FirstRunComplete>true</FirstRunComplete></EU4SaveManager>")
    config = ConfigurationManager(config_path).load()
    assert config.first_run_complete
    assert config.settings.save_directories == [GamePaths.LOCAL_SAVES_DEFAULT]


def test_corrupt_file_counts_as_first_run(config_path):
    config_path.parent.mkdir(parents=True)
    config_path.write_text("<EU4SaveManager><Settings>")
    assert ConfigurationManager(config_path).is_first_run()


def test_existing_save_directories(tmp_path, config_path):
    config = ConfigurationManager(config_path).create_default()
    config.settings.save_directories = [tmp_path, tmp_path / "missing"]
    assert config.existing_save_directories() == [tmp_path]


def test_save_without_config():
    with pytest.raises(ValueError):
        ConfigurationManager(Path("unused.xml")).save()


def test_path_under_root(tmp_path):
    assert is_path_under_root(tmp_path / "a" / "b.eu4", tmp_path)
    assert not is_path_under_root(tmp_path.parent, tmp_path)
    assert not is_path_under_root(tmp_path / ".." / "other", tmp_path)


def test_validate_backup_root(tmp_path):
    assert validate_backup_root(tmp_path / "backups") == (True, "")
    valid, message = validate_backup_root(Path(tmp_path.anchor))
    assert not valid
    assert "root" in message


@pytest.mark.parametrize("name, expected", [
    ("autosave", "autosave"),
    ('Castile "1520"', "Castile _1520_"),
    ("a/b\\c", "a_b_c"),
    (" .hidden. ", "hidden"),
    ("", "unnamed"),
])
def test_sanitize_filename(name, expected):
    assert sanitize_filename(name) == expected


def test_validate_backup_root_refuses_foreign_files(tmp_path):
    root = tmp_path / "backups"
    (root / "Sweden").mkdir(parents=True)
    (root / "Sweden" / f"{'a' * 32}.eu4").write_bytes(b"")
    assert validate_backup_root(root) == (True, "")

    (root / "Sweden" / "notes.txt").write_text("mine")
    valid, message = validate_backup_root(root)
    assert not valid
    assert "notes.txt" in message


@pytest.mark.parametrize("name, expected", [
    ("0123456789abcdef0123456789abcdef.eu4", True),
    ("0123456789abcdef0123456789abcdef", True),
    ("0123456789ABCDEF0123456789ABCDEF.eu4", False),
    ("autosave.eu4", False),
    ("abc111.eu4", False),
])
def test_backup_file_names(name, expected):
    assert is_backup_file_name(name) is expected


def test_setup_logging_writes_to_log_dir(tmp_path):
    logger = setup_logging(debug=True, log_dir=tmp_path / "logs")
    try:
        get_logger("tests").info("hello %s", "log")
        for handler in logger.handlers:
            handler.flush()
        assert "hello log" in (tmp_path / "logs" / "eu4_save_manager.log").read_text(encoding="utf-8")
        assert len(logger.handlers) == 2
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
