"""Typed access to the Steam community trading web endpoints."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Any

import requests

from steamkit.steamid import SteamId

_TRADE_URL = "https://steamcommunity.com/trade/{}/"
_COOKIE_DOMAIN = "steamcommunity.com"
_TIMEOUT = 10.0
_UINT32_MAX = (1 << 32) - 1
_DIGITS = re.compile(r"[0-9]+")
_PROBATION_PATTERN = re.compile(r"var g_bTradePartnerProbation = (\w+);")


class TradeStatus(enum.IntEnum):
    OPEN = 0
    COMPLETE = 1
    EMPTY = 2  # neither party trades any items
    CANCELLED = 3
    TIMEOUT = 4  # the partner timed out
    FAILED = 5


class Action(enum.IntEnum):
    ADD_ITEM = 0
    REMOVE_ITEM = 1
    READY = 2
    UNREADY = 3
    ACCEPT = 4
    SET_CURRENCY = 6
    CHAT_MESSAGE = 7


def _field(mapping: dict, name: str, default: Any = None) -> Any:
    """Look a key up exactly first, then case-insensitively."""
    if name in mapping:
        return mapping[name]
    folded = name.casefold()
    for key, value in mapping.items():
        if isinstance(key, str) and key.casefold() == folded:
            return value
    return default


def _quoted_int(value: Any) -> int:
    """An integer sent as a decimal string."""
    if value is None:
        return 0
    if isinstance(value, bool):
        raise ValueError(f"expected a quoted integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _DIGITS.fullmatch(value):
        return int(value)
    raise ValueError(f"expected a quoted integer, got {value!r}")


def _plain_int(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"expected an integer, got {value!r}")
    return value


def _uint_bool(value: Any) -> bool:
    """A flag that the API sends either as a boolean or as 0/1."""
    if value is None:
        return False
    if isinstance(value, str):
        return value not in ("", "0", "false")
    return bool(value)


def _enum_value(enum_cls: type[enum.IntEnum], value: int) -> int:
    try:
        return enum_cls(value)
    except ValueError:
        return value


def _object(data: Any, what: str) -> dict:
    if not isinstance(data, dict):
        raise ValueError(f"{what} must be a JSON object, got {type(data).__name__}")
    return data


@dataclass
class Event:
    """One entry of the trade log."""

    steam_id: SteamId = SteamId(0)
    action: int = Action.ADD_ITEM
    timestamp: int = 0
    app_id: int = 0
    context_id: int = 0
    asset_id: int = 0
    text: str = ""  # chat messages only
    currency_id: int = 0
    old_amount: int = 0
    new_amount: int = 0

    @classmethod
    def from_json(cls, data: Any) -> Event:
        data = _object(data, "event")
        return cls(
            steam_id=SteamId(_quoted_int(_field(data, "SteamId"))),
            action=_enum_value(Action, _quoted_int(_field(data, "Action"))),
            timestamp=_plain_int(_field(data, "Timestamp")),
            app_id=_plain_int(_field(data, "AppId")),
            context_id=_quoted_int(_field(data, "ContextId")),
            asset_id=_quoted_int(_field(data, "AssetId")),
            text=_field(data, "Text") or "",
            currency_id=_quoted_int(_field(data, "CurrencyId")),
            old_amount=_quoted_int(_field(data, "old_amount")),
            new_amount=_quoted_int(_field(data, "amount")),
        )


def parse_event_list(data: Any) -> dict[int, Event]:
    """Parse the log, sent either as an array or as an object of index -> event."""
    if data is None:
        return {}
    if isinstance(data, dict):
        events: dict[int, Event] = {}
        for key, value in data.items():
            if not (isinstance(key, str) and _DIGITS.fullmatch(key)) or int(key) > _UINT32_MAX:
                raise ValueError(f"invalid event index: {key!r}")
            events[int(key)] = Event.from_json(value)
        return events
    if isinstance(data, list):
        return {index: Event.from_json(value) for index, value in enumerate(data)}
    raise ValueError(f"event list must be an array or an object, got {type(data).__name__}")


@dataclass
class User:
    """One side of the trade as reported by the status endpoint."""

    ready: bool = False
    confirmed: bool = False
    sec_since_touch: int = 0
    connection_pending: bool = False
    assets: Any = None
    currency: Any = None  # a list of currencies or an empty string

    @classmethod
    def from_json(cls, data: Any) -> User:
        if data is None:
            return cls()
        data = _object(data, "user")
        return cls(
            ready=_uint_bool(_field(data, "Ready")),
            confirmed=_uint_bool(_field(data, "Confirmed")),
            sec_since_touch=_plain_int(_field(data, "sec_since_touch")),
            connection_pending=bool(_field(data, "connection_pending", False)),
            assets=_field(data, "Assets"),
            currency=_field(data, "Currency"),
        )


@dataclass
class Currency:
    app_id: int = 0
    context_id: int = 0
    currency_id: int = 0
    amount: int = 0

    @classmethod
    def from_json(cls, data: Any) -> Currency:
        data = _object(data, "currency")
        return cls(
            app_id=_quoted_int(_field(data, "AppId")),
            context_id=_quoted_int(_field(data, "ContextId")),
            currency_id=_quoted_int(_field(data, "CurrencyId")),
            amount=_quoted_int(_field(data, "Amount")),
        )


@dataclass
class Status:
    """The reply of every trade action endpoint."""

    success: bool = False
    error: str = ""
    new_version: bool = False
    trade_status: int = TradeStatus.OPEN
    version: int = 0
    log_pos: int = 0
    me: User = field(default_factory=User)
    them: User = field(default_factory=User)
    events: dict[int, Event] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: Any) -> Status:
        data = _object(data, "status")
        return cls(
            success=bool(_field(data, "Success", False)),
            error=_field(data, "Error") or "",
            new_version=bool(_field(data, "newversion", False)),
            trade_status=_enum_value(TradeStatus, _plain_int(_field(data, "trade_status"))),
            version=_plain_int(_field(data, "Version")),
            log_pos=_plain_int(_field(data, "LogPos")),
            me=User.from_json(_field(data, "Me")),
            them=User.from_json(_field(data, "Them")),
            events=parse_event_list(_field(data, "Events")),
        )


@dataclass(frozen=True)
class Main:
    partner_on_probation: bool


def is_success(value: Any) -> bool:
    """Whether a decoded reply is an object whose ``success`` is exactly true."""
    return isinstance(value, dict) and value.get("success") is True


class TradeApi:
    """HTTP calls against one live trade with a partner.

    ``log_pos`` and ``version`` are sent with the requests but are not
    updated here; the caller keeps them current.
    """

    def __init__(
        self,
        session_id: str,
        steam_login: str,
        steam_login_secure: str,
        other: SteamId,
        session: requests.Session | None = None,
    ) -> None:
        self._session = session if session is not None else requests.Session()
        self._other = SteamId(other)
        self._session_id = session_id
        self.base_url = _TRADE_URL.format(int(self._other))
        self.log_pos = 0
        self.version = 1
        for name, value in (
            ("sessionid", session_id),
            ("steamLogin", steam_login),
            ("steamLoginSecure", steam_login_secure),
        ):
            self._session.cookies.set(name, value, domain=_COOKIE_DOMAIN)

    def get_main(self) -> Main:
        """Fetch the trade page and read the partner's probation flag."""
        with self._session.get(self.base_url, timeout=_TIMEOUT) as response:
            body = response.text
        match = _PROBATION_PATTERN.search(body)
        if match is None:
            raise ValueError("could not find probation info on the trade page")
        return Main(partner_on_probation=match.group(1) == "true")

    def _post_with_status(self, url: str, data: dict[str, str]) -> Status:
        # Steam rejects these requests as missing parameters without the Referer.
        with self._session.post(
            url, data=data, headers={"Referer": self.base_url}, timeout=_TIMEOUT
        ) as response:
            payload = response.json()
        return Status.from_json(payload)

    def get_status(self) -> Status:
        return self._post_with_status(
            self.base_url + "tradestatus/",
            {
                "sessionid": self._session_id,
                "logpos": str(self.log_pos),
                "version": str(self.version),
            },
        )

    def get_foreign_inventory(
        self, context_id: int, app_id: int, start: int | None = None
    ) -> Any:
        """Fetch one page of the partner's inventory as decoded JSON."""
        params = {
            "sessionid": self._session_id,
            "steamid": str(int(self._other)),
            "contextid": str(context_id),
            "appid": str(app_id),
        }
        if start is not None:
            params["start"] = str(start)
        with self._session.get(
            self.base_url + "foreigninventory",
            params=params,
            headers={"Referer": self.base_url},
            timeout=_TIMEOUT,
        ) as response:
            response.raise_for_status()
            return response.json()

    def chat(self, message: str) -> Status:
        return self._post_with_status(
            self.base_url + "chat",
            {
                "sessionid": self._session_id,
                "logpos": str(self.log_pos),
                "version": str(self.version),
                "message": message,
            },
        )

    def _item_form(self, slot: int, item_id: int, context_id: int, app_id: int) -> dict[str, str]:
        return {
            "sessionid": self._session_id,
            "slot": str(slot),
            "itemid": str(item_id),
            "contextid": str(context_id),
            "appid": str(app_id),
        }

    def add_item(self, slot: int, item_id: int, context_id: int, app_id: int) -> Status:
        return self._post_with_status(
            self.base_url + "additem", self._item_form(slot, item_id, context_id, app_id)
        )

    def remove_item(self, slot: int, item_id: int, context_id: int, app_id: int) -> Status:
        return self._post_with_status(
            self.base_url + "removeitem", self._item_form(slot, item_id, context_id, app_id)
        )

    def set_currency(
        self, amount: int, currency_id: int, context_id: int, app_id: int
    ) -> Status:
        return self._post_with_status(
            self.base_url + "setcurrency",
            {
                "sessionid": self._session_id,
                "amount": str(amount),
                "currencyid": str(currency_id),
                "contextid": str(context_id),
                "appid": str(app_id),
            },
        )

    def set_ready(self, ready: bool) -> Status:
        return self._post_with_status(
            self.base_url + "toggleready",
            {
                "sessionid": self._session_id,
                "version": str(self.version),
                "ready": "true" if ready else "false",
            },
        )

    def confirm(self) -> Status:
        return self._post_with_status(
            self.base_url + "confirm",
            {"sessionid": self._session_id, "version": str(self.version)},
        )

    def cancel(self) -> Status:
        return self._post_with_status(
            self.base_url + "cancel", {"sessionid": self._session_id}
        )