"""Rewrite string fields of a raw metadata block in place.

There is no encoder for the binary format, so fields are located by the
bytes that precede their payload (field id, equals marker, string type id)
instead of by decoding. The length-prefixed string after each anchor is
replaced and every other byte is copied unchanged.

Example:
    >>> data = patch_field(meta_bytes, PLAYER_TAG_ANCHOR, "FRA")
"""

import io
import struct
from dataclasses import dataclass, field
from typing import Sequence

from .errors import AmbiguousAnchorError, AnchorNotFoundError, FormatError, InvalidValueError
from .tokens import TEXT_ENCODING, FieldId, string_anchor
from ..logging_config import get_logger

logger = get_logger("field_patcher")

PLAYER_TAG_ANCHOR = string_anchor(FieldId.PLAYER_TAG)
COUNTRY_NAME_ANCHOR = string_anchor(FieldId.PLAYER_COUNTRY_NAME)

_U16 = struct.Struct("<H")
_MAX_STRING_LENGTH = 0xFFFF


@dataclass
class PatchResult:
    """Patched buffer and the string values that were replaced, in order."""
    data: bytes
    previous: list[str] = field(default_factory=list)


def find_anchor(buffer: bytes, anchor: bytes, start: int = 0) -> int:
    """Locate the single occurrence of ``anchor``, which must lie at or after ``start``.

    Occurrences are counted over the whole buffer, so a copy before
    ``start`` still makes the anchor ambiguous.

    Args:
        buffer: Raw bytes to search
        anchor: Byte sequence to find
        start: Lowest offset the match may have

    Returns:
        Offset of the anchor

    Raises:
        AnchorNotFoundError: If the anchor does not occur at or after ``start``
        AmbiguousAnchorError: If the anchor occurs more than once
    """
    offsets = []
    index = buffer.find(anchor)
    while index != -1:
        offsets.append(index)
        index = buffer.find(anchor, index + 1)

    if len(offsets) > 1:
        raise AmbiguousAnchorError(anchor, offsets)
    if not offsets:
        raise AnchorNotFoundError(f"field not found: anchor {anchor.hex(' ')}")
    if offsets[0] < start:
        raise AnchorNotFoundError(
            f"field not found after offset {start}: anchor {anchor.hex(' ')} is at {offsets[0]}"
        )
    return offsets[0]


def encode_string(value: str) -> bytes:
    """Encode a string payload with its u16 byte-length prefix.

    Raises:
        InvalidValueError: If the value is not representable in cp1252 or
            is too long for the length prefix
    """
    try:
        payload = value.encode(TEXT_ENCODING)
    except UnicodeEncodeError as e:
        raise InvalidValueError(f"{value!r} cannot be written in {TEXT_ENCODING}: {e.reason}") from e

    if len(payload) > _MAX_STRING_LENGTH:
        raise InvalidValueError(f"value is {len(payload)} bytes, the limit is {_MAX_STRING_LENGTH}")
    return _U16.pack(len(payload)) + payload


def _string_end(buffer: bytes, position: int) -> tuple[str, int]:
    """Read the string at ``position``; return it and the offset just past it."""
    if position + _U16.size > len(buffer):
        raise FormatError(f"truncated string length at offset {position}")

    (length,) = _U16.unpack_from(buffer, position)
    end = position + _U16.size + length
    if end > len(buffer):
        raise FormatError(f"string at offset {position} runs past the end of the data")

    text = buffer[position + _U16.size:end].decode(TEXT_ENCODING, errors="replace")
    return text, end


def patch_fields(buffer: bytes, edits: Sequence[tuple[bytes, str]]) -> PatchResult:
    """Replace the string following each anchor, in order.

    Each anchor must occur exactly once in the buffer, after the end of the
    previous replaced field, so edits are listed in buffer order.

    Args:
        buffer: Raw metadata bytes
        edits: ``(anchor, new_value)`` pairs

    Returns:
        PatchResult with the new bytes and the replaced values

    Raises:
        AnchorNotFoundError: If an anchor is missing
        AmbiguousAnchorError: If an anchor occurs more than once
        InvalidValueError: If a new value cannot be encoded
        FormatError: If the field after an anchor is truncated
    """
    buffer = bytes(buffer)
    output = io.BytesIO()
    previous = []
    cursor = 0

    for anchor, new_value in edits:
        encoded = encode_string(new_value)
        index = find_anchor(buffer, anchor, cursor)
        field_start = index + len(anchor)

        old_value, field_end = _string_end(buffer, field_start)
        output.write(buffer[cursor:field_start])
        output.write(encoded)

        logger.debug(
            "Patched anchor %s at %d: %d -> %d bytes",
            anchor.hex(), index, field_end - field_start, len(encoded),
        )
        previous.append(old_value)
        cursor = field_end

    output.write(buffer[cursor:])
    return PatchResult(data=output.getvalue(), previous=previous)


def patch_field(buffer: bytes, anchor: bytes, new_value: str) -> bytes:
    """Replace the string following ``anchor`` with ``new_value``.

    Returns:
        The complete patched buffer
    """
    return patch_fields(buffer, [(anchor, new_value)]).data
