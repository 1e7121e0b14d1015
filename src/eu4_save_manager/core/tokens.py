"""Token ids and value types of the EU4 binary ("EU4bin") format.

Every value in the stream is preceded by a little-endian 16-bit tag. Tags
below are either scalar type ids, structural markers, or field ids. A field
id is always followed by the EQUALS marker and then a value.
"""

import struct
from enum import IntEnum
from typing import NamedTuple, Union

# Magic prefixes (6 bytes) at the start of a metadata block
BINARY_MAGIC = b"EU4bin"
TEXT_MAGIC = b"EU4txt"
MAGIC_LENGTH = 6

# Single-byte codepage used for every string payload
TEXT_ENCODING = "cp1252"

# Structural markers
EQUALS = 0x0001
OPEN_GROUP = 0x0003
CLOSE_GROUP = 0x0004

# Scalar type ids
INT = 0x000c
BOOL = 0x000e
STRING = 0x000f
UINT = 0x0014

# Name of the archive entry holding the metadata block
META_ENTRY = "meta"


class FieldId(IntEnum):
    """Known field ids of the metadata block."""
    DATE = 0x284d
    SAVE_GAME = 0x2c69
    PLAYER_TAG = 0x2a38
    COUNTRY_COLORS = 0x3116
    PLAYER_COUNTRY_NAME = 0x32b8
    SAVE_GAME_VERSION = 0x2ec9
    SAVE_GAME_VERSIONS = 0x314b
    DLC_ENABLED = 0x2ee1
    MOD_ENABLED = 0x2ee0
    IRON_MAN = 0x3589
    MULTI_PLAYER = 0x3329
    NOT_OBSERVER = 0x3317
    CHECKSUM = 0x0179

    # country_colors members
    FLAG = 0x2d52
    COLOR = 0x0056
    SYMBOL_INDEX = 0x34f5
    FLAG_COLORS = 0x311a

    # savegame_version members
    VERSION_FIRST = 0x28e2
    VERSION_SECOND = 0x28e3
    VERSION_THIRD = 0x2ec7
    VERSION_FOURTH = 0x2ec8
    VERSION_NAME = 0x001b


class TaggedField(NamedTuple):
    """A field id paired with its decoded value."""
    field_id: int
    value: "Value"


# A decoded node: int (i32 or u32), bool, str, list (a group) or TaggedField
Value = Union[int, bool, str, list, TaggedField]


def string_anchor(field_id: int) -> bytes:
    """Byte context that precedes the payload of a string-valued field.

    Args:
        field_id: Field id owning the string

    Returns:
        ``field_id`` + ``EQUALS`` + ``STRING``, each as a little-endian u16
    """
    return struct.pack("<HHH", field_id, EQUALS, STRING)
