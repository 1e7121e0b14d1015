"""Structured view of the metadata block of an EU4 save.

The ``meta`` entry of a save holds a handful of top-level fields (date,
player, version, DLC and mod lists, flags). This module walks the fields
produced by the token decoder and projects the known ones onto a SaveMeta.

Unknown field ids are ignored so newer game versions can still be read.
A known field with an unexpected value kind is skipped and reported in
``SaveMeta.errors``. The version sub-record is the exception: it needs all
five of its parts, or none of it is used.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO, Callable, Optional, Union

from . import date_codec
from .date_codec import EU4Date, STARTING_DATE
from .errors import FieldTypeError, SaveToolError
from .token_decoder import decode_fields
from .tokens import FieldId, TaggedField, Value
from ..logging_config import get_logger

logger = get_logger("metadata")


class SaveType(Enum):
    """Serialization used by a save file"""
    BINARY = "binary"
    TEXT = "text"


@dataclass
class CountryColors:
    """Flag and map colors of the player country."""
    flag: int = 0
    color: int = 0
    symbol_index: int = 0
    flag_colors: list[int] = field(default_factory=list)


@dataclass
class SaveGameVersion:
    """Game version that wrote the save, e.g. 1.30.4.0 "Austria"."""
    first: int = 0
    second: int = 0
    third: int = 0
    fourth: int = 0
    name: str = ""

    @property
    def short_name(self) -> str:
        return f"{self.first}.{self.second}.{self.third}.{self.fourth}"

    @property
    def long_name(self) -> str:
        return f'{self.short_name} "{self.name}"'

    def __str__(self) -> str:
        return self.long_name


@dataclass
class SaveMeta:
    """Metadata of a single save file.

    Fields missing from the file keep their defaults.
    """
    save_type: SaveType = SaveType.BINARY
    date: EU4Date = STARTING_DATE
    save_game: str = ""
    player_tag: str = ""
    country_colors: Optional[CountryColors] = None
    player_country_name: str = ""
    save_game_version: Optional[SaveGameVersion] = None
    save_game_versions: list[str] = field(default_factory=list)
    dlc_enabled: list[str] = field(default_factory=list)
    mod_enabled: list[str] = field(default_factory=list)
    iron_man: bool = False
    multi_player: bool = False
    not_observer: bool = False
    checksum: str = ""
    errors: list[SaveToolError] = field(default_factory=list, repr=False, compare=False)

    @property
    def complete(self) -> bool:
        """True if the metadata decoded without any error."""
        return not self.errors


# Projections from raw values ------------------------------------------------

def _expect_int(field_id: int, value: Value) -> int:
    # bool is an int subclass but a distinct token kind
    if isinstance(value, bool) or not isinstance(value, int):
        raise FieldTypeError(field_id, f"expected integer, got {type(value).__name__}")
    return value


def _expect_bool(field_id: int, value: Value) -> bool:
    if not isinstance(value, bool):
        raise FieldTypeError(field_id, f"expected bool, got {type(value).__name__}")
    return value


def _expect_str(field_id: int, value: Value) -> str:
    if not isinstance(value, str):
        raise FieldTypeError(field_id, f"expected string, got {type(value).__name__}")
    return value


def _expect_group(field_id: int, value: Value) -> list:
    if not isinstance(value, list):
        raise FieldTypeError(field_id, f"expected group, got {type(value).__name__}")
    return value


def _expect_members(field_id: int, value: Value) -> list[TaggedField]:
    members = _expect_group(field_id, value)
    for item in members:
        if not isinstance(item, TaggedField):
            raise FieldTypeError(field_id, f"expected named members, got {type(item).__name__}")
    return members


def _string_list(field_id: int, value: Value) -> list[str]:
    return [_expect_str(field_id, item) for item in _expect_group(field_id, value)]


def _int_list(field_id: int, value: Value) -> list[int]:
    return [_expect_int(field_id, item) for item in _expect_group(field_id, value)]


def parse_country_colors(value: Value) -> CountryColors:
    """Build CountryColors from a group of named members.

    Unknown members are ignored.
    """
    colors = CountryColors()
    for member in _expect_members(FieldId.COUNTRY_COLORS, value):
        if member.field_id == FieldId.FLAG:
            colors.flag = _expect_int(member.field_id, member.value)
        elif member.field_id == FieldId.COLOR:
            colors.color = _expect_int(member.field_id, member.value)
        elif member.field_id == FieldId.SYMBOL_INDEX:
            colors.symbol_index = _expect_int(member.field_id, member.value)
        elif member.field_id == FieldId.FLAG_COLORS:
            colors.flag_colors = _int_list(member.field_id, member.value)
    return colors


def parse_save_game_version(value: Value) -> SaveGameVersion:
    """Build SaveGameVersion from a group of named members.

    Raises:
        FieldTypeError: If any of the four numbers or the name is missing
            or of the wrong kind
    """
    members = _expect_members(FieldId.SAVE_GAME_VERSION, value)

    def required(field_id: FieldId) -> Value:
        for member in members:
            if member.field_id == field_id:
                return member.value
        raise FieldTypeError(
            FieldId.SAVE_GAME_VERSION, f"missing member {field_id.name.lower()}"
        )

    return SaveGameVersion(
        first=_expect_int(FieldId.VERSION_FIRST, required(FieldId.VERSION_FIRST)),
        second=_expect_int(FieldId.VERSION_SECOND, required(FieldId.VERSION_SECOND)),
        third=_expect_int(FieldId.VERSION_THIRD, required(FieldId.VERSION_THIRD)),
        fourth=_expect_int(FieldId.VERSION_FOURTH, required(FieldId.VERSION_FOURTH)),
        name=_expect_str(FieldId.VERSION_NAME, required(FieldId.VERSION_NAME)),
    )


# field id -> (SaveMeta attribute, projection)
_FIELDS: dict[int, tuple[str, Callable[[Value], object]]] = {
    FieldId.DATE: ("date", lambda v: date_codec.decode(_expect_int(FieldId.DATE, v))),
    FieldId.SAVE_GAME: ("save_game", lambda v: _expect_str(FieldId.SAVE_GAME, v)),
    FieldId.PLAYER_TAG: ("player_tag", lambda v: _expect_str(FieldId.PLAYER_TAG, v)),
    FieldId.COUNTRY_COLORS: ("country_colors", parse_country_colors),
    FieldId.PLAYER_COUNTRY_NAME: (
        "player_country_name", lambda v: _expect_str(FieldId.PLAYER_COUNTRY_NAME, v)
    ),
    FieldId.SAVE_GAME_VERSION: ("save_game_version", parse_save_game_version),
    FieldId.SAVE_GAME_VERSIONS: (
        "save_game_versions", lambda v: _string_list(FieldId.SAVE_GAME_VERSIONS, v)
    ),
    FieldId.DLC_ENABLED: ("dlc_enabled", lambda v: _string_list(FieldId.DLC_ENABLED, v)),
    FieldId.MOD_ENABLED: ("mod_enabled", lambda v: _string_list(FieldId.MOD_ENABLED, v)),
    FieldId.IRON_MAN: ("iron_man", lambda v: _expect_bool(FieldId.IRON_MAN, v)),
    FieldId.MULTI_PLAYER: ("multi_player", lambda v: _expect_bool(FieldId.MULTI_PLAYER, v)),
    FieldId.NOT_OBSERVER: ("not_observer", lambda v: _expect_bool(FieldId.NOT_OBSERVER, v)),
    FieldId.CHECKSUM: ("checksum", lambda v: _expect_str(FieldId.CHECKSUM, v)),
}


def apply_field(meta: SaveMeta, item: TaggedField) -> None:
    """Assign a decoded top-level field onto ``meta``.

    Unknown ids are ignored. A FieldTypeError leaves the attribute unchanged
    and is recorded in ``meta.errors``.
    """
    entry = _FIELDS.get(item.field_id)
    if entry is None:
        logger.debug("Ignoring unknown field 0x%04x", item.field_id)
        return

    attribute, project = entry
    try:
        setattr(meta, attribute, project(item.value))
    except FieldTypeError as e:
        logger.warning("Skipping %s: %s", attribute, e)
        meta.errors.append(e)


def extract(source: Union[bytes, bytearray, memoryview, BinaryIO]) -> SaveMeta:
    """Decode a metadata block into a SaveMeta.

    Decoding stops at the first malformed token; everything read up to that
    point is kept and the error is recorded in ``errors``.

    Args:
        source: Raw ``meta`` entry bytes or a binary stream over them

    Returns:
        The populated SaveMeta

    Raises:
        NotRecognizedError: If the data is not an EU4bin block
    """
    decoded = decode_fields(source)
    meta = SaveMeta(save_type=SaveType.BINARY)

    for item in decoded.fields:
        apply_field(meta, item)
    if decoded.error is not None:
        meta.errors.append(decoded.error)

    return meta
