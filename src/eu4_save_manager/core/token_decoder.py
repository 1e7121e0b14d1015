"""Recursive-descent reader for the EU4 binary token stream.

Layout (little-endian):
    magic (6 bytes) then a sequence of
    field_id:u16 EQUALS:u16 value

where a value is one of:
    OPEN_GROUP:u16 value* CLOSE_GROUP:u16
    INT:u16 i32 | UINT:u16 u32 | BOOL:u16 u8
    STRING:u16 length:u16 bytes[length] (cp1252)
    field_id:u16 EQUALS:u16 value           (a nested tagged field)

Groups carry no length, so a bad marker cannot be skipped over: decoding
stops at the first error.
"""

import io
import struct
from dataclasses import dataclass, field
from typing import BinaryIO, Iterator, Optional, Union

from . import tokens
from .errors import FormatError, NotRecognizedError
from .tokens import TaggedField, Value
from ..logging_config import get_logger

logger = get_logger("token_decoder")

_U16 = struct.Struct("<H")
_I32 = struct.Struct("<i")
_U32 = struct.Struct("<I")

# Nesting of groups and tagged fields; metadata blocks use a handful of levels
MAX_DEPTH = 64


class _EndOfGroup:
    """Sentinel returned by read_value when a group is closed."""

    def __repr__(self) -> str:
        return "END_OF_GROUP"


END_OF_GROUP = _EndOfGroup()


@dataclass
class DecodeResult:
    """Top-level fields decoded before the stream ended or decoding failed."""
    fields: list[TaggedField] = field(default_factory=list)
    error: Optional[FormatError] = None

    @property
    def complete(self) -> bool:
        return self.error is None


class TokenDecoder:
    """Reads values from an EU4bin stream.

    The magic prefix is checked on construction; reading then proceeds
    from the first top-level field.
    """

    def __init__(self, source: Union[bytes, bytearray, memoryview, BinaryIO]):
        """Open a token stream.

        Args:
            source: Raw metadata bytes or a readable binary stream

        Raises:
            NotRecognizedError: If the magic prefix is not EU4bin
        """
        if isinstance(source, (bytes, bytearray, memoryview)):
            source = io.BytesIO(bytes(source))
        self._stream = source
        self._depth = 0

        magic = self._stream.read(tokens.MAGIC_LENGTH)
        if magic == tokens.TEXT_MAGIC:
            raise NotRecognizedError("not a recognized file: text saves are not supported")
        if magic != tokens.BINARY_MAGIC:
            raise NotRecognizedError(f"not a recognized file: bad magic {magic!r}")

    def _read(self, size: int) -> bytes:
        data = self._stream.read(size)
        if len(data) != size:
            raise FormatError(
                f"unexpected end of data: wanted {size} bytes, got {len(data)}"
            )
        return data

    def _read_u16(self) -> int:
        return _U16.unpack(self._read(2))[0]

    def at_end(self) -> bool:
        """Check whether the stream has no bytes left."""
        position = self._stream.tell()
        if self._stream.read(1):
            self._stream.seek(position)
            return False
        return True

    def read_string(self) -> str:
        """Read a length-prefixed cp1252 string payload."""
        length = self._read_u16()
        return self._read(length).decode(tokens.TEXT_ENCODING, errors="replace")

    def read_value(self) -> Union[Value, _EndOfGroup]:
        """Read the next value.

        Returns:
            The decoded value, or END_OF_GROUP if a close-group tag was read

        Raises:
            FormatError: On a bad equals marker, truncated input, or
                nesting deeper than MAX_DEPTH
        """
        tag = self._read_u16()

        if tag == tokens.OPEN_GROUP:
            self._enter()
            items = []
            try:
                while True:
                    item = self.read_value()
                    if item is END_OF_GROUP:
                        return items
                    items.append(item)
            finally:
                self._depth -= 1
        if tag == tokens.CLOSE_GROUP:
            return END_OF_GROUP
        if tag == tokens.INT:
            return _I32.unpack(self._read(4))[0]
        if tag == tokens.UINT:
            return _U32.unpack(self._read(4))[0]
        if tag == tokens.BOOL:
            return self._read(1) != b"\x00"
        if tag == tokens.STRING:
            return self.read_string()

        # Anything else is the id of a nested field
        self._enter()
        try:
            return self._read_tagged(tag)
        finally:
            self._depth -= 1

    def _enter(self) -> None:
        if self._depth >= MAX_DEPTH:
            raise FormatError(f"values nested deeper than {MAX_DEPTH} levels")
        self._depth += 1

    def _read_tagged(self, field_id: int) -> TaggedField:
        equals = self._read_u16()
        if equals != tokens.EQUALS:
            raise FormatError(
                f"expected equals marker after field 0x{field_id:04x}, got 0x{equals:04x}"
            )

        value = self.read_value()
        if value is END_OF_GROUP:
            raise FormatError(f"field 0x{field_id:04x} has no value")
        return TaggedField(field_id, value)

    def read_field(self) -> TaggedField:
        """Read one top-level ``field_id = value`` pair."""
        return self._read_tagged(self._read_u16())

    def iter_fields(self) -> Iterator[TaggedField]:
        """Yield top-level fields until the stream is exhausted.

        Raises:
            FormatError: At the first malformed field; fields already
                yielded remain valid
        """
        while not self.at_end():
            yield self.read_field()


def decode_fields(source: Union[bytes, bytearray, memoryview, BinaryIO]) -> DecodeResult:
    """Decode every top-level field, keeping what was read before a failure.

    Args:
        source: Raw metadata bytes or a readable binary stream

    Returns:
        DecodeResult with the decoded fields and the error that stopped
        decoding, if any

    Raises:
        NotRecognizedError: If the magic prefix is not EU4bin
    """
    decoder = TokenDecoder(source)
    result = DecodeResult()

    try:
        for item in decoder.iter_fields():
            result.fields.append(item)
    except FormatError as e:
        logger.warning("Decoding stopped after %d fields: %s", len(result.fields), e)
        result.error = e

    return result
