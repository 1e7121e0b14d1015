"""Core business logic module.

This module contains save decoding, field patching and backup management.

Submodules:
    tokens: Token ids, field ids and value types of the EU4bin format
    date_codec: EU4Date and conversion from/to the packed hour count
    token_decoder: TokenDecoder, a recursive-descent reader of the token stream
    metadata: SaveMeta and extract() projecting decoded fields onto it
    field_patcher: Anchor-based rewriting of string fields in raw bytes
    archive: SaveArchive for reading/replacing entries of zipped saves
    backup_store: BackupStore for MD5-named backups with retention
    session: SaveSession implementing the commands on a loaded save
    reports: Text rendering of metadata and backup tables
    errors: Exception hierarchy rooted at SaveToolError

The metadata block is only ever decoded, never re-encoded; edits are made by
splicing new string payloads into the raw bytes.
"""

from .backup_store import BackupStore
from .metadata import SaveMeta, extract
from .session import SaveSession, list_saves, read_save_meta

__all__ = [
    "BackupStore",
    "SaveMeta",
    "SaveSession",
    "extract",
    "list_saves",
    "read_save_meta",
]
