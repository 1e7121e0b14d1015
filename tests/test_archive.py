import zipfile

import pytest

from eu4_save_manager.core.archive import SaveArchive
from eu4_save_manager.core.errors import ArchiveError

from eu4bin import sample_meta, write_save


@pytest.fixture
def save_file(tmp_path):
    return write_save(tmp_path / "Sweden.eu4", sample_meta())


def test_read_entry(save_file):
    archive = SaveArchive(save_file)
    assert archive.entry_names() == ["meta", "gamestate", "ai"]
    assert archive.read_entry("meta") == sample_meta()


def test_write_entry_preserves_other_entries(save_file):
    archive = SaveArchive(save_file)
    archive.write_entry("meta", b"EU4bin new")

    with zipfile.ZipFile(save_file) as zf:
        assert zf.namelist() == ["meta", "gamestate", "ai"]
        assert zf.read("meta") == b"EU4bin new"
        assert zf.read("gamestate") == b"EU4bin gamestate"
        assert zf.read("ai") == b"EU4bin ai"
        assert zf.getinfo("meta").compress_type == zipfile.ZIP_DEFLATED
        assert zf.getinfo("ai").compress_type == zipfile.ZIP_STORED


def test_write_leaves_no_temporary_files(save_file):
    SaveArchive(save_file).write_entry("meta", b"EU4bin")
    assert [p.name for p in save_file.parent.iterdir()] == ["Sweden.eu4"]


def test_missing_file(tmp_path):
    with pytest.raises(ArchiveError, match="not found"):
        SaveArchive(tmp_path / "missing.eu4").read_entry("meta")


def test_not_a_zip(tmp_path):
    path = tmp_path / "plain.eu4"
    path.write_bytes(b"EU4txt\ndate=1444.11.11\n")
    with pytest.raises(ArchiveError):
        SaveArchive(path).read_entry("meta")


def test_missing_entry(save_file):
    archive = SaveArchive(save_file)
    with pytest.raises(ArchiveError, match="no 'rnw' entry"):
        archive.read_entry("rnw")
    with pytest.raises(ArchiveError):
        archive.write_entry("rnw", b"data")

    # Failed write leaves the archive untouched
    assert archive.read_entry("meta") == sample_meta()
    assert [p.name for p in save_file.parent.iterdir()] == ["Sweden.eu4"]
