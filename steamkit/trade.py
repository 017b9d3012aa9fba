"""Automation of a live Steam trade.

The trade is driven by events: call ``Trade.poll()`` repeatedly until a
``TradeEndedEvent`` shows up, reacting to the events it returns::

    trade = Trade(session_id, steam_login, steam_login_secure, partner_id)
    while True:
        for event in trade.poll():
            if isinstance(event, ChatEvent):
                trade.chat("Trading is awesome!")
            elif isinstance(event, TradeEndedEvent):
                return

The cookies come from a logged-in steamcommunity.com session. Keep the gap
between polls below the client timeout (about five seconds) or Steam closes
the trade. All calls block, and one Trade must not be used from several
threads at once.
"""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass
from typing import Any

from steamkit import tradeapi
from steamkit.steamid import SteamId

POLL_INTERVAL = 1.0


class TradeEndReason(enum.IntEnum):
    COMPLETE = 1
    CANCELLED = 2
    TIMEOUT = 3
    FAILED = 4


@dataclass(frozen=True)
class Item:
    app_id: int
    context_id: int
    asset_id: int

    @classmethod
    def from_event(cls, event: tradeapi.Event) -> Item:
        return cls(event.app_id, event.context_id, event.asset_id)


@dataclass(frozen=True)
class Currency:
    app_id: int
    context_id: int
    currency_id: int

    @classmethod
    def from_event(cls, event: tradeapi.Event) -> Currency:
        return cls(event.app_id, event.context_id, event.currency_id)


@dataclass(frozen=True)
class TradeEndedEvent:
    reason: TradeEndReason


@dataclass(frozen=True)
class ItemAddedEvent:
    item: Item


@dataclass(frozen=True)
class ItemRemovedEvent:
    item: Item


@dataclass(frozen=True)
class ReadyEvent:
    pass


@dataclass(frozen=True)
class UnreadyEvent:
    pass


@dataclass(frozen=True)
class SetCurrencyEvent:
    currency: Currency
    old_amount: int
    new_amount: int


@dataclass(frozen=True)
class ChatEvent:
    message: str


class TradeError(Exception):
    """Steam reported that a trade request did not succeed."""


_END_REASONS = {
    tradeapi.TradeStatus.COMPLETE: TradeEndReason.COMPLETE,
    tradeapi.TradeStatus.CANCELLED: TradeEndReason.CANCELLED,
    tradeapi.TradeStatus.TIMEOUT: TradeEndReason.TIMEOUT,
    tradeapi.TradeStatus.FAILED: TradeEndReason.FAILED,
}


class Trade:
    """A trade with one partner, turning Steam's status replies into events."""

    def __init__(
        self,
        session_id: str,
        steam_login: str,
        steam_login_secure: str,
        other: SteamId,
        api: Any = None,
    ) -> None:
        self.them_id = SteamId(other)
        self.me_ready = False
        self.them_ready = False
        self._last_poll: float | None = None
        self._queued: list[Any] = []
        self._api = (
            api
            if api is not None
            else tradeapi.TradeApi(session_id, steam_login, steam_login_secure, self.them_id)
        )

    @property
    def version(self) -> int:
        return self._api.version

    def events(self) -> list[Any]:
        """Take all queued events without asking Steam for new ones."""
        queued, self._queued = self._queued, []
        return queued

    def poll(self) -> list[Any]:
        """The next batch of events.

        Queued events are returned first; otherwise Steam is asked for the
        status, waiting if needed to keep to the polling interval.
        """
        if self._queued:
            return self.events()
        if self._last_poll is not None:
            elapsed = time.monotonic() - self._last_poll
            if elapsed < POLL_INTERVAL:
                time.sleep(POLL_INTERVAL - elapsed)
        self._last_poll = time.monotonic()
        self._on_status(self._api.get_status())
        return self.events()

    def get_foreign_inventory(
        self, context_id: int, app_id: int, start: int | None = None
    ) -> Any:
        return self._api.get_foreign_inventory(context_id, app_id, start)

    def get_main(self) -> tradeapi.Main:
        return self._api.get_main()

    def add_item(self, slot: int, item: Item) -> None:
        self._on_status(self._api.add_item(slot, item.asset_id, item.context_id, item.app_id))

    def remove_item(self, slot: int, item: Item) -> None:
        self._on_status(
            self._api.remove_item(slot, item.asset_id, item.context_id, item.app_id)
        )

    def chat(self, message: str) -> None:
        self._on_status(self._api.chat(message))

    def set_currency(self, amount: int, currency: Currency) -> None:
        self._on_status(
            self._api.set_currency(
                amount, currency.currency_id, currency.context_id, currency.app_id
            )
        )

    def set_ready(self, ready: bool) -> None:
        self._on_status(self._api.set_ready(ready))

    def confirm(self) -> None:
        """Confirm the trade; only valid after a successful ``set_ready(True)``."""
        self._on_status(self._api.confirm())

    def cancel(self) -> None:
        self._on_status(self._api.cancel())

    def _on_status(self, status: tradeapi.Status) -> None:
        if not status.success:
            raise TradeError(
                "trade: returned status not successful! error message: " + status.error
            )
        if status.new_version:
            self._api.version = status.version
            self.me_ready = status.me.ready
            self.them_ready = status.them.ready

        reason = _END_REASONS.get(status.trade_status)
        if reason is not None:
            self._queued.append(TradeEndedEvent(reason))

        self._update_events(status.events)

    def _update_events(self, events: dict[int, tradeapi.Event]) -> None:
        if not events:
            return
        last_log_pos = 0
        for index in sorted(events):
            event = events[index]
            if index < self._api.log_pos or event.steam_id != self.them_id:
                continue
            last_log_pos = max(last_log_pos, index)
            new_event = self._translate(event)
            if new_event is not None:
                self._queued.append(new_event)
        self._api.log_pos = last_log_pos + 1

    def _translate(self, event: tradeapi.Event) -> Any:
        action = event.action
        if action == tradeapi.Action.ADD_ITEM:
            return ItemAddedEvent(Item.from_event(event))
        if action == tradeapi.Action.REMOVE_ITEM:
            return ItemRemovedEvent(Item.from_event(event))
        if action == tradeapi.Action.READY:
            self.them_ready = True
            return ReadyEvent()
        if action == tradeapi.Action.UNREADY:
            self.them_ready = False
            return UnreadyEvent()
        if action == tradeapi.Action.SET_CURRENCY:
            return SetCurrencyEvent(
                Currency.from_event(event), event.old_amount, event.new_amount
            )
        if action == tradeapi.Action.CHAT_MESSAGE:
            return ChatEvent(event.text)
        return None