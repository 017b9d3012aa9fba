# steamkit

steamkit is a set of Python helpers for working with Steam.

- `steamkit.steamid` handles 64-bit Steam IDs.
  - `parse_steam_id` reads either `STEAM_X:Y:Z` text or a decimal number.
  - `SteamId` is an `int`. It exposes `account_id`, `account_instance`, `account_type` and `account_universe`.
  - Its `with_*` methods return changed copies.
  - `clan_to_chat` and `chat_to_clan` convert between a clan and its chat room.
- `steamkit.socialcache` has thread-safe caches: `FriendsList`, `GroupsList` and `ChatsList`.
  - They hold `Friend`, `Group`, `Chat` and `ChatMember` records.
  - `add` keeps an existing entry rather than replacing it.
  - `update(steam_id, **fields)` changes an existing entry and ignores unknown IDs.
  - `by_id` returns a copy of the entry, or raises `KeyError` if there is none.
  - `copy()` returns a snapshot.
  - A `GroupsList` accepts a clan's chat ID wherever it accepts the clan ID.
  - `ChatsList.add_member` creates the chat if it is not known yet.
- `steamkit.servers` deals with connection manager addresses.
  - `CM_SERVERS` is a built-in address list, and `get_random_cm()` picks a random `PortAddr` from it.
  - `SteamDirectory` fetches a fresh list from the Steam Directory web API. It raises `DirectoryError` when Steam refuses.
  - `initialize_steam_directory()` loads a shared directory and returns it.
- `steamkit.econ` serializes four TF2 game coordinator item messages to little-endian bytes: `SetItemPosition`, `Craft`, `DeleteItem` and `NameItem`.
- `steamkit.tradeapi` is a client for the steamcommunity.com live-trade endpoints (`TradeApi`).
  - Its actions are chat, add or remove item, set currency, ready, confirm, cancel and status.
  - It returns `Status`, `User`, `Event` and `Currency` records.
  - `TradeApi` does not update `log_pos` and `version` itself; the caller keeps them current.
- `steamkit.trade` builds an event-driven trade session (`Trade`) on top of `TradeApi`.
- `steamkit.tradeoffer` parses the data of the trade offer API.
  - It reads trade offer JSON (`TradeOffer`, `Asset`, `Description`, `TradeOffersResult`, `TradeOfferResult`).
  - It reads escrow durations from an offer page (`parse_escrow_duration`).
  - It reads the items embedded in a trade receipt page (`parse_trade_receipt`).

## Installation

```
pip install .
```

## Steam IDs

```python
from steamkit.steamid import parse_steam_id

sid = parse_steam_id("STEAM_0:1:12345")
print(int(sid))          # 76561197960290419
print(str(sid))          # STEAM_0:1:12345
print(sid.account_type)  # 1
```

A `STEAM_` string is read as an individual account with instance 1. A legacy universe of 0 is read as the public universe. Any other text must be a decimal number that fits in 64 bits, or `ValueError` is raised.

## Connection servers

```python
from steamkit.servers import get_random_cm, initialize_steam_directory

print(get_random_cm())                    # e.g. 162.254.197.40:27018
directory = initialize_steam_directory()  # HTTP request to the Steam Directory
print(directory.get_random_cm())
```

## Trading

A trade is driven by polling. Call `poll()` until a `TradeEndedEvent` comes back.

`poll()` first returns any queued events. When there are none, it asks Steam for the trade status. Between requests it waits so that it keeps a one-second polling interval.

Do not leave more than a few seconds between polls, or Steam closes the trade.

```python
from steamkit.trade import Trade, ChatEvent, TradeEndedEvent

def run(other_steam_id):
    trade = Trade("token", "token", "token", other_steam_id)
    while True:
        for event in trade.poll():
            if isinstance(event, ChatEvent):
                trade.chat("Trading is awesome!")
            elif isinstance(event, TradeEndedEvent):
                return event.reason
```

The first three arguments are the `sessionid`, `steamLogin` and `steamLoginSecure` cookies of a logged-in steamcommunity.com session.

An unsuccessful status from Steam raises `TradeError`.

The other events are:

- `ItemAddedEvent`
- `ItemRemovedEvent`
- `ReadyEvent`
- `UnreadyEvent`
- `SetCurrencyEvent`

Every call blocks. A `Trade` must not be used from several threads at once.

## Trade offers

```python
from steamkit.tradeoffer import parse_escrow_duration

duration = parse_escrow_duration(html_page)
print(duration.days_my_escrow, duration.days_their_escrow)
```

`parse_escrow_duration` raises `SteamError` when the page says you are not friends with the user. It raises `ValueError` when the page holds no escrow figures.

## What this package does not do

- It does not connect to Steam's connection managers. It has no client, log-on, chat messaging or game coordinator session. `steamkit.servers` only supplies addresses, and `steamkit.econ` only builds message bodies.
- It does not fill the social caches from network traffic. You fill them yourself.
- It has no web log-on. The trading cookies must come from elsewhere.
- `TradeApi.get_foreign_inventory` returns one page of decoded JSON. It does not assemble a full inventory, and the package has no inventory model.
- It does not send, accept, decline or cancel trade offers. `steamkit.tradeoffer` only parses their data.

## Tests

```
pip install ".[test]"
pytest
```