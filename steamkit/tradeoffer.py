"""Types and page parsers for the official Steam trade offer API."""

from __future__ import annotations

import enum
import json
import re
from dataclasses import dataclass, field
from typing import Any

from steamkit.steamid import SteamId

_UINT32_MAX = (1 << 32) - 1
_UINT64_MAX = (1 << 64) - 1
_STEAM_ID_BASE = 76561197960265728
_DIGITS = re.compile(r"[0-9]+")

_MY_ESCROW = re.compile(r"g_daysMyEscrow[\s=]+([0-9]+);", re.IGNORECASE)
_THEIR_ESCROW = re.compile(r"g_daysTheirEscrow[\s=]+([0-9]+);", re.IGNORECASE)
_NOT_FRIENDS = re.compile(r">You are not friends with this user<")
_RECEIPT_ITEM = re.compile(r"oItem =\s+(.+?});")


class SteamError(Exception):
    """Steam answered, but in an unknown format or by declining the request."""


class TradeOfferState(enum.IntEnum):
    INVALID = 1
    ACTIVE = 2  # sent, neither party has acted on it yet
    ACCEPTED = 3  # accepted by the recipient, items exchanged
    COUNTERED = 4  # the recipient made a counter offer
    EXPIRED = 5  # not accepted before the expiration date
    CANCELED = 6  # the sender cancelled the offer
    DECLINED = 7  # the recipient declined the offer
    INVALID_ITEMS = 8  # some items are no longer available
    CREATED_NEEDS_CONFIRMATION = 9  # awaiting email/mobile confirmation
    CANCELED_BY_SECOND_FACTOR = 10  # canceled via email/mobile
    IN_ESCROW = 11  # on hold, items will be delivered later


class TradeOfferConfirmationMethod(enum.IntEnum):
    INVALID = 0
    EMAIL = 1
    MOBILE_APP = 2


def _text(data: bytes | str) -> str:
    if isinstance(data, (bytes, bytearray)):
        return bytes(data).decode("utf-8", errors="replace")
    return data


def _field(mapping: dict, name: str, default: Any = None) -> Any:
    """Look a key up exactly first, then case-insensitively."""
    if name in mapping:
        return mapping[name]
    folded = name.casefold()
    for key, value in mapping.items():
        if isinstance(key, str) and key.casefold() == folded:
            return value
    return default


def _object(data: Any, what: str) -> dict:
    if not isinstance(data, dict):
        raise ValueError(f"{what} must be a JSON object, got {type(data).__name__}")
    return data


def _quoted_int(value: Any, limit: int = _UINT64_MAX) -> int:
    """An unsigned integer sent as a decimal string."""
    if value is None:
        return 0
    if isinstance(value, str) and _DIGITS.fullmatch(value) and int(value) <= limit:
        return int(value)
    raise ValueError(f"expected a quoted unsigned integer, got {value!r}")


def _plain_int(value: Any, limit: int = _UINT32_MAX) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= limit:
        raise ValueError(f"expected an unsigned integer, got {value!r}")
    return value


def _bool(value: Any) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"expected a boolean, got {value!r}")
    return value


def _str(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"expected a string, got {value!r}")
    return value


def _list(value: Any, what: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{what} must be a JSON array, got {type(value).__name__}")
    return value


def _enum_value(enum_cls: type[enum.IntEnum], value: int) -> int:
    try:
        return enum_cls(value)
    except ValueError:
        return value


@dataclass(frozen=True)
class EscrowDuration:
    days_my_escrow: int
    days_their_escrow: int


def _escrow_days(match: re.Match, whose: str) -> int:
    value = int(match.group(1))
    if value > _UINT32_MAX:
        raise ValueError(f"failed to parse {whose} duration into uint: {match.group(1)}")
    return value


def parse_escrow_duration(data: bytes | str) -> EscrowDuration:
    """Read the escrow days of both parties from a trade offer page."""
    text = _text(data)
    mine = _MY_ESCROW.search(text)
    theirs = _THEIR_ESCROW.search(text)
    if mine is None or theirs is None:
        if _NOT_FRIENDS.search(text) is not None:
            raise SteamError("you are not friends with this user")
        raise ValueError("regexp does not match")
    return EscrowDuration(
        days_my_escrow=_escrow_days(mine, "my"),
        days_their_escrow=_escrow_days(theirs, "their"),
    )


_RECEIPT_KEYS = ("id", "appid", "contextid", "owner", "pos")


@dataclass
class TradeReceiptItem:
    """An item from a trade receipt page; ``description`` holds its other fields."""

    asset_id: int = 0
    app_id: int = 0
    context_id: int = 0
    owner: int = 0
    pos: int = 0
    description: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: Any) -> TradeReceiptItem:
        data = _object(data, "receipt item")
        return cls(
            asset_id=_quoted_int(_field(data, "id")),
            app_id=_plain_int(_field(data, "AppId")),
            context_id=_plain_int(_field(data, "ContextId"), _UINT64_MAX),
            owner=_quoted_int(_field(data, "Owner")),
            pos=_plain_int(_field(data, "Pos")),
            description={
                key: value
                for key, value in data.items()
                if not (isinstance(key, str) and key.casefold() in _RECEIPT_KEYS)
            },
        )


def parse_trade_receipt(data: bytes | str) -> list[TradeReceiptItem]:
    """Read every item embedded in a trade receipt page."""
    matches = _RECEIPT_ITEM.findall(_text(data))
    if not matches:
        raise ValueError("items not found")
    return [TradeReceiptItem.from_json(json.loads(raw)) for raw in matches]


@dataclass
class Asset:
    """An item or currency in a trade offer; ``app_id`` is not read from JSON."""

    app_id: int = 0
    context_id: int = 0
    asset_id: int = 0
    currency_id: int = 0
    class_id: int = 0
    instance_id: int = 0
    amount: int = 0
    missing: bool = False

    @classmethod
    def from_json(cls, data: Any) -> Asset:
        data = _object(data, "asset")
        return cls(
            context_id=_quoted_int(_field(data, "ContextId")),
            asset_id=_quoted_int(_field(data, "AssetId")),
            currency_id=_quoted_int(_field(data, "CurrencyId")),
            class_id=_quoted_int(_field(data, "ClassId")),
            instance_id=_quoted_int(_field(data, "InstanceId")),
            amount=_quoted_int(_field(data, "Amount")),
            missing=_bool(_field(data, "Missing")),
        )


@dataclass
class TradeOffer:
    trade_offer_id: int = 0
    trade_id: int = 0
    other_account_id: int = 0
    other_steam_id: SteamId = SteamId(0)
    message: str = ""
    expiration_time: int = 0
    state: int = 0
    to_give: list[Asset] = field(default_factory=list)
    to_receive: list[Asset] = field(default_factory=list)
    is_our_offer: bool = False
    time_created: int = 0
    time_updated: int = 0
    escrow_end_date: int = 0
    confirmation_method: int = TradeOfferConfirmationMethod.INVALID

    @classmethod
    def from_json(cls, data: Any) -> TradeOffer:
        data = _object(data, "trade offer")
        account_id = _plain_int(_field(data, "accountid_other"))
        other = SteamId(account_id + _STEAM_ID_BASE) if account_id else SteamId(0)
        return cls(
            trade_offer_id=_quoted_int(_field(data, "TradeOfferId")),
            trade_id=_quoted_int(_field(data, "TradeId")),
            other_account_id=account_id,
            other_steam_id=other,
            message=_str(_field(data, "message")),
            expiration_time=_plain_int(_field(data, "expiraton_time")),
            state=_enum_value(TradeOfferState, _plain_int(_field(data, "trade_offer_state"))),
            to_give=[
                Asset.from_json(item)
                for item in _list(_field(data, "items_to_give"), "items_to_give")
            ],
            to_receive=[
                Asset.from_json(item)
                for item in _list(_field(data, "items_to_receive"), "items_to_receive")
            ],
            is_our_offer=_bool(_field(data, "is_our_offer")),
            time_created=_plain_int(_field(data, "time_created")),
            time_updated=_plain_int(_field(data, "time_updated")),
            escrow_end_date=_plain_int(_field(data, "escrow_end_date")),
            confirmation_method=_enum_value(
                TradeOfferConfirmationMethod,
                _plain_int(_field(data, "confirmation_method")),
            ),
        )


@dataclass
class Description:
    """How an item class looks; colours are hex strings such as ``B2B2B2``."""

    app_id: int = 0
    class_id: int = 0
    instance_id: int = 0
    icon_url: str = ""
    icon_url_large: str = ""
    name: str = ""
    market_name: str = ""
    market_hash_name: str = ""
    name_color: str = ""
    background_color: str = ""
    type: str = ""
    tradable: bool = False
    commodity: bool = False
    market_tradable_restriction: int = 0
    descriptions: Any = None
    actions: list[Any] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Any) -> Description:
        data = _object(data, "description")
        return cls(
            app_id=_plain_int(_field(data, "appid")),
            class_id=_quoted_int(_field(data, "classid")),
            instance_id=_quoted_int(_field(data, "instanceid")),
            icon_url=_str(_field(data, "icon_url")),
            icon_url_large=_str(_field(data, "icon_url_large")),
            name=_str(_field(data, "Name")),
            market_name=_str(_field(data, "market_name")),
            market_hash_name=_str(_field(data, "market_hash_name")),
            name_color=_str(_field(data, "name_color")),
            background_color=_str(_field(data, "background_color")),
            type=_str(_field(data, "Type")),
            tradable=_bool(_field(data, "tradable")),
            commodity=_bool(_field(data, "commodity")),
            market_tradable_restriction=_plain_int(
                _field(data, "market_tradable_restriction")
            ),
            descriptions=_field(data, "descriptions"),
            actions=list(_list(_field(data, "actions"), "actions")),
        )


def _descriptions(data: dict) -> list[Description]:
    return [
        Description.from_json(item)
        for item in _list(_field(data, "Descriptions"), "descriptions")
    ]


@dataclass
class TradeOffersResult:
    sent: list[TradeOffer] = field(default_factory=list)
    received: list[TradeOffer] = field(default_factory=list)
    descriptions: list[Description] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Any) -> TradeOffersResult:
        data = _object(data, "trade offers result")
        return cls(
            sent=[
                TradeOffer.from_json(item)
                for item in _list(_field(data, "trade_offers_sent"), "trade_offers_sent")
            ],
            received=[
                TradeOffer.from_json(item)
                for item in _list(
                    _field(data, "trade_offers_received"), "trade_offers_received"
                )
            ],
            descriptions=_descriptions(data),
        )


@dataclass
class TradeOfferResult:
    offer: TradeOffer | None = None
    descriptions: list[Description] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Any) -> TradeOfferResult:
        data = _object(data, "trade offer result")
        offer = _field(data, "Offer")
        return cls(
            offer=TradeOffer.from_json(offer) if offer is not None else None,
            descriptions=_descriptions(data),
        )