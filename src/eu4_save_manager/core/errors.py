"""Exception types raised by the save decoding, patching and backup layers."""


class SaveToolError(Exception):
    """Base class for all errors raised by eu4_save_manager."""
    pass


class FormatError(SaveToolError):
    """The binary stream does not follow the token format (bad marker, truncation)."""
    pass


class NotRecognizedError(FormatError):
    """The data does not start with a recognized save magic prefix."""
    pass


class FieldTypeError(SaveToolError):
    """A known field carried a value of the wrong kind, or lacks a required part."""

    def __init__(self, field_id: int, message: str):
        super().__init__(f"field 0x{field_id:04x}: {message}")
        self.field_id = field_id


class AnchorNotFoundError(SaveToolError):
    """The byte anchor of a field to patch does not occur in the buffer."""
    pass


class AmbiguousAnchorError(SaveToolError):
    """The byte anchor of a field to patch occurs more than once."""

    def __init__(self, anchor: bytes, offsets: list[int]):
        super().__init__(
            f"anchor {anchor.hex(' ')} found {len(offsets)} times "
            f"(offsets {', '.join(str(o) for o in offsets)})"
        )
        self.anchor = anchor
        self.offsets = offsets


class InvalidValueError(SaveToolError, ValueError):
    """A replacement value cannot be written into the save."""
    pass


class ArchiveError(SaveToolError):
    """The save container cannot be opened or lacks the requested entry."""
    pass


class BackupError(SaveToolError):
    """Exception raised for backup operation errors"""
    pass


class BackupNotFoundError(BackupError):
    """No backup matches the given reference."""
    pass


class AmbiguousBackupError(BackupError):
    """More than one backup matches the given hash prefix."""

    def __init__(self, reference: str, matches: list[str]):
        super().__init__(f"More than one backup matches '{reference}': {', '.join(matches)}")
        self.reference = reference
        self.matches = matches


class RestoreError(SaveToolError):
    """Exception raised for restore operation errors"""
    pass
