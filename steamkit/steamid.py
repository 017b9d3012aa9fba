"""64-bit Steam account identifiers."""

from __future__ import annotations

import enum
import re

_UINT64_MAX = (1 << 64) - 1
_UINT32_MAX = (1 << 32) - 1

_ACCOUNT_TYPE_INVALID = 0
_ACCOUNT_TYPE_INDIVIDUAL = 1
_ACCOUNT_TYPE_CLAN = 7
_ACCOUNT_TYPE_CHAT = 8
_UNIVERSE_PUBLIC = 1

_LEGACY_PATTERN = re.compile(r"STEAM_[0-5]:[01]:[0-9]+")
_DECIMAL_PATTERN = re.compile(r"[0-9]+")


class ChatInstanceFlag(enum.IntFlag):
    """Flags stored in the instance field of chat identifiers."""

    CLAN = 0x100000 >> 1
    LOBBY = 0x100000 >> 2
    MMS_LOBBY = 0x100000 >> 3


class SteamId(int):
    """An immutable 64-bit Steam identifier with bit-field accessors."""

    __slots__ = ()

    def __new__(cls, value: int = 0) -> SteamId:
        value = int(value)
        if not 0 <= value <= _UINT64_MAX:
            raise ValueError(f"SteamId out of range: {value}")
        return super().__new__(cls, value)

    @classmethod
    def from_parts(
        cls, account_id: int, instance: int, universe: int, account_type: int
    ) -> SteamId:
        """Build an identifier from its account id, instance, universe and type."""
        return (
            cls(0)
            .with_account_id(account_id)
            .with_account_instance(instance)
            .with_account_universe(universe)
            .with_account_type(account_type)
        )

    def _get(self, offset: int, mask: int) -> int:
        return (int(self) >> offset) & mask

    def _with(self, offset: int, mask: int, value: int) -> SteamId:
        cleared = int(self) & ~(mask << offset)
        return SteamId(cleared | ((int(value) & mask) << offset))

    @property
    def account_id(self) -> int:
        return self._get(0, 0xFFFFFFFF)

    @property
    def account_instance(self) -> int:
        return self._get(32, 0xFFFFF)

    @property
    def account_type(self) -> int:
        return self._get(52, 0xF)

    @property
    def account_universe(self) -> int:
        return self._get(56, 0xF)

    def with_account_id(self, account_id: int) -> SteamId:
        return self._with(0, 0xFFFFFFFF, account_id)

    def with_account_instance(self, instance: int) -> SteamId:
        return self._with(32, 0xFFFFF, instance)

    def with_account_type(self, account_type: int) -> SteamId:
        return self._with(52, 0xF, account_type)

    def with_account_universe(self, universe: int) -> SteamId:
        return self._with(56, 0xF, universe)

    def clan_to_chat(self) -> SteamId:
        """Turn a clan identifier into the identifier of its chat room."""
        if self.account_type != _ACCOUNT_TYPE_CLAN:
            return self
        return self.with_account_instance(ChatInstanceFlag.CLAN).with_account_type(
            _ACCOUNT_TYPE_CHAT
        )

    def chat_to_clan(self) -> SteamId:
        """Turn a chat room identifier back into its clan identifier."""
        if self.account_type != _ACCOUNT_TYPE_CHAT:
            return self
        return self.with_account_instance(0).with_account_type(_ACCOUNT_TYPE_CLAN)

    def to_decimal(self) -> str:
        """The identifier as a plain decimal string."""
        return int.__repr__(self)

    def __str__(self) -> str:
        if self.account_type in (_ACCOUNT_TYPE_INVALID, _ACCOUNT_TYPE_INDIVIDUAL):
            account_id = self.account_id
            universe = self.account_universe
            if universe <= _UNIVERSE_PUBLIC:
                universe = 0
            return f"STEAM_{universe}:{account_id & 1}:{account_id >> 1}"
        return self.to_decimal()

    def __repr__(self) -> str:
        return f"SteamId({self.to_decimal()})"


def _lenient_uint(text: str, limit: int) -> int:
    if not _DECIMAL_PATTERN.fullmatch(text):
        return 0
    return min(int(text), limit)


def parse_steam_id(text: str) -> SteamId:
    """Parse a ``STEAM_X:Y:Z`` string or a decimal 64-bit identifier."""
    if _LEGACY_PATTERN.search(text):
        parts = text.replace("STEAM_", "").split(":")
        universe = _lenient_uint(parts[0], _UINT32_MAX)
        if universe == 0:
            universe = _UNIVERSE_PUBLIC
        auth_server = _lenient_uint(parts[1], _UINT32_MAX)
        account_number = _lenient_uint(parts[2], _UINT32_MAX)
        account_id = ((account_number << 1) | auth_server) & _UINT32_MAX
        return SteamId.from_parts(account_id, 1, universe, _ACCOUNT_TYPE_INDIVIDUAL)
    if not _DECIMAL_PATTERN.fullmatch(text):
        raise ValueError(f"invalid SteamId: {text!r}")
    value = int(text)
    if value > _UINT64_MAX:
        raise ValueError(f"SteamId out of range: {text!r}")
    return SteamId(value)