from datetime import datetime
from pathlib import Path

from eu4_save_manager.core.backup_store import BackupEntry
from eu4_save_manager.core.errors import FieldTypeError
from eu4_save_manager.core.metadata import SaveMeta, extract
from eu4_save_manager.core.reports import format_backup_table, format_meta, yes_no

from eu4bin import sample_meta


def test_yes_no():
    assert yes_no(True) == "yes"
    assert yes_no(False) == "no"


def test_format_full_meta():
    lines = format_meta(extract(sample_meta()))

    assert lines[:5] == [
        "SaveType: binary",
        "Date: 1521.3.14",
        "SaveGame: Sweden_1521.eu4",
        "PlayerTag: SWE",
        "PlayerCountryName: Sweden",
    ]
    assert "  FlagColors: 1, 5, 9" in lines
    assert 'SaveGameVersion: 1.30.4.0 "Austria"' in lines
    assert "DlcEnabled: Art of War, Wealth of Nations" in lines
    assert "ModEnabled: (none)" in lines
    assert "IronMan: yes" in lines
    assert "MultiPlayer: no" in lines
    assert lines[-1] == "CheckSum: a1b2c3"


def test_format_defaults_and_warnings():
    meta = SaveMeta()
    meta.errors.append(FieldTypeError(0x2a38, "expected string, got int"))
    lines = format_meta(meta)

    assert "Date: 1444.11.11" in lines
    assert "CountryColors: (none)" in lines
    assert "SaveGameVersion: (unknown)" in lines
    assert lines[-1] == "Warning: field 0x2a38: expected string, got int"


def test_backup_table():
    entry = BackupEntry(digest="0" * 32, file_path=Path("x.eu4"), timestamp=datetime(2024, 1, 1))
    broken = BackupEntry(digest="f" * 32, file_path=Path("y.eu4"), timestamp=datetime(2023, 1, 1))
    lines = format_backup_table([(entry, extract(sample_meta())), (broken, None)])

    assert len(lines) == 4
    assert lines[2] == f"| 1   | 1521.3.14  | SWE | yes     | {'0' * 32} | 1.30.4.0 |"
    assert lines[3] == f"| 2   | ?          | ?   | ?       | {'f' * 32} | ?        |"
    assert all(len(line) == len(lines[0]) for line in lines)
