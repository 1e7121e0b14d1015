"""Plain-text renderings of save metadata and backup listings."""

from typing import Optional, Sequence

from .backup_store import BackupEntry
from .metadata import SaveMeta


def yes_no(value: bool) -> str:
    return "yes" if value else "no"


def _join(values: Sequence) -> str:
    return ", ".join(str(v) for v in values) if values else "(none)"


def format_meta(meta: SaveMeta) -> list[str]:
    """Render every metadata field as a ``Label: value`` line."""
    lines = [
        f"SaveType: {meta.save_type.value}",
        f"Date: {meta.date}",
        f"SaveGame: {meta.save_game}",
        f"PlayerTag: {meta.player_tag}",
        f"PlayerCountryName: {meta.player_country_name}",
    ]

    colors = meta.country_colors
    if colors is not None:
        lines.append("CountryColors:")
        lines.append(f"  Flag: {colors.flag}")
        lines.append(f"  Color: {colors.color}")
        lines.append(f"  SymbolIndex: {colors.symbol_index}")
        lines.append(f"  FlagColors: {_join(colors.flag_colors)}")
    else:
        lines.append("CountryColors: (none)")

    version = meta.save_game_version
    lines.append(f"SaveGameVersion: {version.long_name if version else '(unknown)'}")
    lines.append(f"SaveGameVersions: {_join(meta.save_game_versions)}")
    lines.append(f"DlcEnabled: {_join(meta.dlc_enabled)}")
    lines.append(f"ModEnabled: {_join(meta.mod_enabled)}")
    lines.append(f"IronMan: {yes_no(meta.iron_man)}")
    lines.append(f"MultiPlayer: {yes_no(meta.multi_player)}")
    lines.append(f"NotObserver: {yes_no(meta.not_observer)}")
    lines.append(f"CheckSum: {meta.checksum}")

    for error in meta.errors:
        lines.append(f"Warning: {error}")
    return lines


def format_backup_table(rows: Sequence[tuple[BackupEntry, Optional[SaveMeta]]]) -> list[str]:
    """Render backups as a markdown-style table.

    Args:
        rows: ``(entry, meta)`` pairs, newest first; ``meta`` is None when the
            backup could not be decoded

    Returns:
        Table lines including the header
    """
    lines = [
        "|     | Date       | Tag | IronMan | Hash                             | Version  |",
        "| --- | ---------- | --- | ------- | -------------------------------- | -------- |",
    ]
    for index, (entry, meta) in enumerate(rows, start=1):
        if meta is None:
            date, tag, iron_man, version = "?", "?", "?", "?"
        else:
            date = str(meta.date)
            tag = meta.player_tag or "?"
            iron_man = yes_no(meta.iron_man)
            version = meta.save_game_version.short_name if meta.save_game_version else "?"

        lines.append(
            f"| {index:<3} | {date:<10} | {tag:<3} | {iron_man:<7} | {entry.digest:<32} | {version:<8} |"
        )
    return lines
