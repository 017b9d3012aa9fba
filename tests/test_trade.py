from unittest import mock

import pytest

from steamkit.steamid import SteamId
from steamkit.trade import (
    ChatEvent,
    Currency,
    Item,
    ItemAddedEvent,
    ItemRemovedEvent,
    ReadyEvent,
    SetCurrencyEvent,
    Trade,
    TradeEndedEvent,
    TradeEndReason,
    TradeError,
    UnreadyEvent,
)
from steamkit.tradeapi import Action, Event, Status, TradeStatus

THEM = SteamId(76561197960265729)
OTHER = SteamId(76561197960265730)


class FakeApi:
    def __init__(self, *statuses):
        self.log_pos = 0
        self.version = 1
        self.statuses = list(statuses)
        self.calls = []

    def _reply(self, name, *args):
        self.calls.append((name, args))
        return self.statuses.pop(0) if self.statuses else Status(success=True)

    def get_status(self):
        return self._reply("get_status")

    def get_main(self):
        return self._reply("get_main")

    def get_foreign_inventory(self, context_id, app_id, start):
        self.calls.append(("get_foreign_inventory", (context_id, app_id, start)))
        return {"success": True}

    def add_item(self, slot, item_id, context_id, app_id):
        return self._reply("add_item", slot, item_id, context_id, app_id)

    def remove_item(self, slot, item_id, context_id, app_id):
        return self._reply("remove_item", slot, item_id, context_id, app_id)

    def chat(self, message):
        return self._reply("chat", message)

    def set_currency(self, amount, currency_id, context_id, app_id):
        return self._reply("set_currency", amount, currency_id, context_id, app_id)

    def set_ready(self, ready):
        return self._reply("set_ready", ready)

    def confirm(self):
        return self._reply("confirm")

    def cancel(self):
        return self._reply("cancel")


def make_trade(*statuses):
    api = FakeApi(*statuses)
    return Trade("placeholder", "token", "token", THEM, api=api), api


def status_with(events, **kwargs):
    return Status(success=True, events=dict(enumerate(events)), **kwargs)


def test_item_and_currency_from_event():
    event = Event(app_id=440, context_id=2, asset_id=12345, currency_id=9)
    assert Item.from_event(event) == Item(440, 2, 12345)
    assert Currency.from_event(event) == Currency(440, 2, 9)


def test_default_trade_builds_its_own_api():
    trade = Trade("placeholder", "token", "token", THEM)
    assert trade.version == 1
    assert trade.them_id == THEM


def test_poll_translates_partner_events_only():
    status = status_with(
        [
            Event(steam_id=THEM, action=Action.CHAT_MESSAGE, text="hello"),
            Event(steam_id=OTHER, action=Action.CHAT_MESSAGE, text="ignored"),
            Event(steam_id=THEM, action=Action.READY),
        ]
    )
    trade, api = make_trade(status)
    assert trade.poll() == [ChatEvent("hello"), ReadyEvent()]
    assert trade.them_ready is True
    assert api.log_pos == len(status.events)


def test_events_before_log_pos_are_skipped():
    status = status_with(
        [
            Event(steam_id=THEM, action=Action.CHAT_MESSAGE, text="old"),
            Event(steam_id=THEM, action=Action.CHAT_MESSAGE, text="new"),
        ]
    )
    trade, api = make_trade(status)
    api.log_pos = 1
    assert trade.poll() == [ChatEvent("new")]
    assert api.log_pos == 2


def test_item_and_currency_events():
    status = status_with(
        [
            Event(steam_id=THEM, action=Action.ADD_ITEM, app_id=440, context_id=2, asset_id=7),
            Event(steam_id=THEM, action=Action.REMOVE_ITEM, app_id=440, context_id=2, asset_id=7),
            Event(
                steam_id=THEM,
                action=Action.SET_CURRENCY,
                app_id=440,
                context_id=2,
                currency_id=9,
                old_amount=1,
                new_amount=4,
            ),
            Event(steam_id=THEM, action=Action.UNREADY),
        ]
    )
    trade, _ = make_trade(status)
    trade.them_ready = True
    assert trade.poll() == [
        ItemAddedEvent(Item(440, 2, 7)),
        ItemRemovedEvent(Item(440, 2, 7)),
        SetCurrencyEvent(Currency(440, 2, 9), 1, 4),
        UnreadyEvent(),
    ]
    assert trade.them_ready is False


@pytest.mark.parametrize(
    "trade_status,reason",
    [
        (TradeStatus.COMPLETE, TradeEndReason.COMPLETE),
        (TradeStatus.CANCELLED, TradeEndReason.CANCELLED),
        (TradeStatus.TIMEOUT, TradeEndReason.TIMEOUT),
        (TradeStatus.FAILED, TradeEndReason.FAILED),
    ],
)
def test_end_of_trade_comes_before_log_events(trade_status, reason):
    status = status_with(
        [Event(steam_id=THEM, action=Action.CHAT_MESSAGE, text="bye")],
        trade_status=trade_status,
    )
    trade, _ = make_trade(status)
    assert trade.poll() == [TradeEndedEvent(reason), ChatEvent("bye")]


def test_open_and_empty_status_emit_nothing():
    trade, _ = make_trade(
        Status(success=True, trade_status=TradeStatus.OPEN),
    )
    assert trade.poll() == []


def test_new_version_updates_version_and_readiness():
    status = Status.from_json(
        {
            "success": True,
            "newversion": True,
            "version": 4,
            "me": {"ready": 1},
            "them": {"ready": 0},
        }
    )
    trade, _ = make_trade(status)
    trade.them_ready = True
    trade.poll()
    assert trade.version == 4
    assert trade.me_ready is True
    assert trade.them_ready is False


def test_unsuccessful_status_raises():
    trade, _ = make_trade(Status(success=False, error="gone"))
    with pytest.raises(TradeError, match="gone"):
        trade.chat("hi")


def test_actions_queue_events_that_poll_returns_without_request():
    reply = status_with([Event(steam_id=THEM, action=Action.CHAT_MESSAGE, text="thanks")])
    trade, api = make_trade(reply)
    trade.add_item(0, Item(440, 2, 12345))
    assert api.calls == [("add_item", (0, 12345, 2, 440))]
    assert trade.poll() == [ChatEvent("thanks")]
    assert all(name != "get_status" for name, _ in api.calls)


def test_action_arguments_are_forwarded():
    trade, api = make_trade()
    trade.remove_item(1, Item(440, 2, 5))
    trade.set_currency(3, Currency(440, 2, 9))
    trade.set_ready(True)
    trade.confirm()
    trade.cancel()
    assert api.calls == [
        ("remove_item", (1, 5, 2, 440)),
        ("set_currency", (3, 9, 2, 440)),
        ("set_ready", (True,)),
        ("confirm", ()),
        ("cancel", ()),
    ]


def test_events_empties_the_queue():
    trade, _ = make_trade(status_with([Event(steam_id=THEM, action=Action.READY)]))
    trade.chat("hi")
    assert trade.events() == [ReadyEvent()]
    assert trade.events() == []


def test_second_poll_waits_for_interval():
    second = status_with([Event(steam_id=THEM, action=Action.CHAT_MESSAGE, text="later")])
    trade, api = make_trade(Status(success=True), second)
    with mock.patch("time.sleep") as sleep:
        assert trade.poll() == []
        assert sleep.call_count == 0
        assert trade.poll() == [ChatEvent("later")]
    assert sleep.call_count == 1
    delay = sleep.call_args.args[0]
    assert 0 < delay <= 1.0
    assert [name for name, _ in api.calls] == ["get_status", "get_status"]


def test_foreign_inventory_is_delegated():
    trade, api = make_trade()
    assert trade.get_foreign_inventory(2, 440, None) == {"success": True}
    assert api.calls == [("get_foreign_inventory", (2, 440, None))]