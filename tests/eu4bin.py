"""Builders for EU4bin token streams and zipped saves used by the tests."""

import struct
import zipfile
from pathlib import Path

from eu4_save_manager.core import tokens
from eu4_save_manager.core.date_codec import EU4Date, encode
from eu4_save_manager.core.tokens import FieldId


def u16(value):
    return struct.pack("<H", value)


def string(text):
    payload = text.encode(tokens.TEXT_ENCODING)
    return u16(tokens.STRING) + u16(len(payload)) + payload


def integer(value):
    return u16(tokens.INT) + struct.pack("<i", value)


def uinteger(value):
    return u16(tokens.UINT) + struct.pack("<I", value)


def boolean(value):
    return u16(tokens.BOOL) + (b"\x01" if value else b"\x00")


def group(*values):
    return u16(tokens.OPEN_GROUP) + b"".join(values) + u16(tokens.CLOSE_GROUP)


def tagged(field_id, value):
    return u16(field_id) + u16(tokens.EQUALS) + value


def meta_block(*fields):
    return tokens.BINARY_MAGIC + b"".join(fields)


def version_group(first=1, second=30, third=4, fourth=0, name="Austria", omit=()):
    members = [
        (FieldId.VERSION_FIRST, integer(first)),
        (FieldId.VERSION_SECOND, integer(second)),
        (FieldId.VERSION_THIRD, integer(third)),
        (FieldId.VERSION_FOURTH, integer(fourth)),
        (FieldId.VERSION_NAME, string(name)),
    ]
    return group(*(tagged(fid, value) for fid, value in members if fid not in omit))


def sample_fields(tag="SWE", country_name="Sweden", date=EU4Date(1521, 3, 14)):
    """Top-level fields of a typical single-player ironman save, in game order."""
    return [
        tagged(FieldId.DATE, integer(encode(date))),
        tagged(FieldId.SAVE_GAME, string("Sweden_1521.eu4")),
        tagged(FieldId.PLAYER_TAG, string(tag)),
        tagged(FieldId.COUNTRY_COLORS, group(
            tagged(FieldId.FLAG, integer(3)),
            tagged(FieldId.COLOR, integer(17)),
            tagged(FieldId.SYMBOL_INDEX, integer(42)),
            tagged(FieldId.FLAG_COLORS, group(integer(1), integer(5), integer(9))),
        )),
        tagged(FieldId.PLAYER_COUNTRY_NAME, string(country_name)),
        tagged(FieldId.SAVE_GAME_VERSION, version_group()),
        tagged(FieldId.SAVE_GAME_VERSIONS, group(string("1.29.6.0"), string("1.30.4.0"))),
        tagged(FieldId.DLC_ENABLED, group(string("Art of War"), string("Wealth of Nations"))),
        tagged(FieldId.MOD_ENABLED, group()),
        tagged(FieldId.IRON_MAN, boolean(True)),
        tagged(FieldId.MULTI_PLAYER, boolean(False)),
        tagged(FieldId.NOT_OBSERVER, boolean(True)),
        tagged(FieldId.CHECKSUM, string("a1b2c3")),
    ]


def sample_meta(**kwargs):
    return meta_block(*sample_fields(**kwargs))


def write_save(path: Path, meta: bytes, gamestate=b"EU4bin gamestate", ai=b"EU4bin ai") -> Path:
    """Write a zipped save with meta, gamestate and ai entries."""
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr("meta", meta)
        zf.writestr("gamestate", gamestate)
        zf.writestr("ai", ai, compress_type=zipfile.ZIP_STORED)
    return path
