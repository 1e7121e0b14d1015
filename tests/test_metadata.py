import pytest

from eu4_save_manager.core.date_codec import STARTING_DATE, EU4Date, encode
from eu4_save_manager.core.errors import FieldTypeError, FormatError, NotRecognizedError
from eu4_save_manager.core.metadata import (
    CountryColors,
    SaveGameVersion,
    SaveMeta,
    SaveType,
    extract,
)
from eu4_save_manager.core.tokens import FieldId

from eu4bin import (
    boolean,
    group,
    integer,
    meta_block,
    sample_fields,
    sample_meta,
    string,
    tagged,
    u16,
    version_group,
)


def test_full_record():
    meta = extract(sample_meta())

    assert meta.save_type is SaveType.BINARY
    assert meta.date == EU4Date(1521, 3, 14)
    assert meta.save_game == "Sweden_1521.eu4"
    assert meta.player_tag == "SWE"
    assert meta.player_country_name == "Sweden"
    assert meta.country_colors == CountryColors(flag=3, color=17, symbol_index=42, flag_colors=[1, 5, 9])
    assert meta.save_game_version == SaveGameVersion(1, 30, 4, 0, "Austria")
    assert meta.save_game_versions == ["1.29.6.0", "1.30.4.0"]
    assert meta.dlc_enabled == ["Art of War", "Wealth of Nations"]
    assert meta.mod_enabled == []
    assert meta.iron_man is True
    assert meta.multi_player is False
    assert meta.not_observer is True
    assert meta.checksum == "a1b2c3"
    assert meta.complete


def test_defaults_when_fields_absent():
    meta = extract(meta_block())
    assert meta == SaveMeta()
    assert meta.date == STARTING_DATE
    assert meta.country_colors is None
    assert meta.save_game_version is None


def test_version_names():
    version = SaveGameVersion(1, 30, 4, 0, "Austria")
    assert version.short_name == "1.30.4.0"
    assert version.long_name == '1.30.4.0 "Austria"'
    assert str(version) == version.long_name


def test_unknown_top_level_fields_are_ignored():
    fields = sample_fields()
    fields.insert(2, tagged(0x7777, integer(99)))
    fields.insert(5, tagged(0x7778, group(tagged(0x6001, string("x")), integer(4))))
    fields.append(tagged(0x7779, boolean(True)))

    assert extract(meta_block(*fields)) == extract(sample_meta())
    assert extract(meta_block(*fields)).complete


@pytest.mark.parametrize("missing", [
    FieldId.VERSION_FIRST,
    FieldId.VERSION_SECOND,
    FieldId.VERSION_THIRD,
    FieldId.VERSION_FOURTH,
    FieldId.VERSION_NAME,
])
def test_version_needs_every_member(missing):
    data = meta_block(
        tagged(FieldId.PLAYER_TAG, string("SWE")),
        tagged(FieldId.SAVE_GAME_VERSION, version_group(omit=(missing,))),
        tagged(FieldId.IRON_MAN, boolean(True)),
    )
    meta = extract(data)

    assert meta.save_game_version is None
    assert meta.player_tag == "SWE"
    assert meta.iron_man is True
    assert len(meta.errors) == 1
    assert isinstance(meta.errors[0], FieldTypeError)
    assert meta.errors[0].field_id == FieldId.SAVE_GAME_VERSION


def test_version_member_of_wrong_kind():
    bad_version = group(
        tagged(FieldId.VERSION_FIRST, string("1")),
        tagged(FieldId.VERSION_SECOND, integer(30)),
        tagged(FieldId.VERSION_THIRD, integer(4)),
        tagged(FieldId.VERSION_FOURTH, integer(0)),
        tagged(FieldId.VERSION_NAME, string("Austria")),
    )
    meta = extract(meta_block(tagged(FieldId.SAVE_GAME_VERSION, bad_version)))
    assert meta.save_game_version is None
    assert isinstance(meta.errors[0], FieldTypeError)


def test_mismatched_scalar_keeps_default_only_for_that_field():
    fields = sample_fields()
    fields[2] = tagged(FieldId.PLAYER_TAG, integer(7))
    meta = extract(meta_block(*fields))

    assert meta.player_tag == ""
    assert meta.player_country_name == "Sweden"
    assert meta.checksum == "a1b2c3"
    assert [e.field_id for e in meta.errors] == [FieldId.PLAYER_TAG]


@pytest.mark.parametrize("field_id, value, attribute, default", [
    (FieldId.IRON_MAN, integer(1), "iron_man", False),
    (FieldId.DATE, boolean(True), "date", STARTING_DATE),
    (FieldId.DATE, string("1444.11.11"), "date", STARTING_DATE),
    (FieldId.DLC_ENABLED, string("Art of War"), "dlc_enabled", []),
    (FieldId.DLC_ENABLED, group(string("a"), integer(2)), "dlc_enabled", []),
    (FieldId.COUNTRY_COLORS, group(integer(3)), "country_colors", None),
    (FieldId.CHECKSUM, group(), "checksum", ""),
])
def test_field_type_errors(field_id, value, attribute, default):
    meta = extract(meta_block(tagged(field_id, value)))
    assert getattr(meta, attribute) == default
    assert isinstance(meta.errors[0], FieldTypeError)


def test_country_colors_ignore_unknown_members():
    colors = group(
        tagged(FieldId.FLAG, integer(1)),
        tagged(0x4444, string("ignored")),
        tagged(FieldId.FLAG_COLORS, group(integer(2), integer(3))),
    )
    meta = extract(meta_block(tagged(FieldId.COUNTRY_COLORS, colors)))
    assert meta.country_colors == CountryColors(flag=1, color=0, symbol_index=0, flag_colors=[2, 3])
    assert meta.complete


def test_date_accepts_unsigned_payload():
    hours = encode(EU4Date(1821, 1, 2))
    meta = extract(meta_block(tagged(FieldId.DATE, u16(0x0014) + hours.to_bytes(4, "little"))))
    assert meta.date == EU4Date(1821, 1, 2)


def test_later_field_overrides_earlier():
    meta = extract(meta_block(
        tagged(FieldId.PLAYER_TAG, string("SWE")),
        tagged(FieldId.PLAYER_TAG, string("DAN")),
    ))
    assert meta.player_tag == "DAN"


def test_format_error_keeps_partial_record():
    fields = sample_fields()
    data = meta_block(*fields[:3]) + u16(FieldId.PLAYER_COUNTRY_NAME) + u16(0x0000) + string("x")
    meta = extract(data)

    assert meta.player_tag == "SWE"
    assert meta.save_game == "Sweden_1521.eu4"
    assert meta.player_country_name == ""
    assert len(meta.errors) == 1
    assert isinstance(meta.errors[0], FormatError)
    assert not meta.complete


def test_runaway_nesting_keeps_partial_record():
    data = meta_block(*sample_fields()[:3], tagged(FieldId.DLC_ENABLED, u16(0x0003) * 5000))
    meta = extract(data)

    assert meta.player_tag == "SWE"
    assert meta.dlc_enabled == []
    assert len(meta.errors) == 1
    assert isinstance(meta.errors[0], FormatError)


def test_text_saves_are_rejected():
    with pytest.raises(NotRecognizedError):
        extract(b"EU4txt\nplayer=\"SWE\"\n")
