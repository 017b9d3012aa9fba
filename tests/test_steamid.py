import pytest

from steamkit.steamid import ChatInstanceFlag, SteamId, parse_steam_id


def test_legacy_parse_fields():
    sid = parse_steam_id("STEAM_0:1:5")
    assert sid.account_universe == 1
    assert sid.account_type == 1
    assert sid.account_instance == 1
    assert sid.account_id >> 1 == 5
    assert sid.account_id & 1 == 1


def test_legacy_zero_matches_individual_base():
    assert parse_steam_id("STEAM_0:0:0") == 76561197960265728


@pytest.mark.parametrize(
    "text", ["STEAM_0:1:5", "STEAM_0:0:123456", "STEAM_3:1:42", "STEAM_5:0:4"]
)
def test_legacy_round_trip(text):
    assert str(parse_steam_id(text)) == text


def test_decimal_parse():
    sid = parse_steam_id("76561197960265739")
    assert sid == 76561197960265739
    assert isinstance(sid, SteamId)
    assert sid.to_decimal() == "76561197960265739"


@pytest.mark.parametrize(
    "text", ["abc", "", "-1", "18446744073709551616", " 1", "+5"]
)
def test_invalid_text_raises(text):
    with pytest.raises(ValueError):
        parse_steam_id(text)


@pytest.mark.parametrize("value", [-1, 1 << 64])
def test_constructor_range(value):
    with pytest.raises(ValueError):
        SteamId(value)


def test_from_parts_round_trip():
    sid = SteamId.from_parts(12345, 1, 1, 1)
    assert sid.account_id == 12345
    assert sid.account_instance == 1
    assert sid.account_universe == 1
    assert sid.account_type == 1


def test_with_field_is_masked():
    assert SteamId(0).with_account_type(0x1F).account_type == 0xF


def test_with_account_id_keeps_other_fields():
    sid = SteamId.from_parts(1, 1, 1, 1)
    changed = sid.with_account_id(777)
    assert changed.account_id == 777
    assert changed.account_instance == sid.account_instance
    assert changed.account_universe == sid.account_universe
    assert changed.account_type == sid.account_type


def test_clan_chat_conversion():
    clan = SteamId.from_parts(99, 0, 1, 7)
    chat = clan.clan_to_chat()
    assert chat.account_type == 8
    assert chat.account_instance == ChatInstanceFlag.CLAN
    assert chat.account_id == 99
    assert chat.chat_to_clan() == clan


def test_conversion_leaves_other_types_alone():
    person = parse_steam_id("STEAM_0:1:5")
    assert person.clan_to_chat() == person
    assert person.chat_to_clan() == person


def test_non_individual_prints_decimal():
    clan = SteamId.from_parts(99, 0, 1, 7)
    assert str(clan) == clan.to_decimal()
    assert str(clan) == str(int(clan))


def test_format_uses_steam_form():
    sid = parse_steam_id("STEAM_0:1:5")
    assert f"{sid}" == "STEAM_0:1:5"


def test_invalid_type_prints_steam_form():
    assert str(SteamId(5)) == "STEAM_0:1:2"