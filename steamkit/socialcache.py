"""Thread-safe caches of friends, groups and chat rooms."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, fields, replace
from typing import Any, ClassVar, Generic, TypeVar

from steamkit.steamid import SteamId


@dataclass
class Friend:
    steam_id: SteamId
    name: str = ""
    avatar: bytes = b""
    relationship: int = 0
    persona_state: int = 0
    persona_state_flags: int = 0
    game_app_id: int = 0
    game_id: int = 0
    game_name: str = ""


@dataclass
class Group:
    steam_id: SteamId
    name: str = ""
    avatar: bytes = b""
    relationship: int = 0
    member_total_count: int = 0
    member_online_count: int = 0
    member_chatting_count: int = 0
    member_in_game_count: int = 0


@dataclass(frozen=True)
class ChatMember:
    steam_id: SteamId
    chat_permissions: int = 0
    clan_permissions: int = 0


@dataclass
class Chat:
    steam_id: SteamId
    group_id: SteamId = SteamId(0)
    members: dict[SteamId, ChatMember] = field(default_factory=dict)


_Entry = TypeVar("_Entry")


class _Cache(Generic[_Entry]):
    """Shared storage and locking for the caches below."""

    _not_found: ClassVar[str] = "entry not found"

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._entries: dict[SteamId, _Entry] = {}

    def _key(self, steam_id: SteamId) -> SteamId:
        return steam_id

    def _copy_entry(self, entry: _Entry) -> _Entry:
        return replace(entry)

    def _store(self, entry: _Entry) -> None:
        with self._lock:
            if entry.steam_id not in self._entries:
                self._entries[entry.steam_id] = self._copy_entry(entry)

    def _discard(self, steam_id: SteamId) -> None:
        with self._lock:
            self._entries.pop(steam_id, None)

    def _snapshot(self) -> dict[SteamId, _Entry]:
        with self._lock:
            return {key: self._copy_entry(entry) for key, entry in self._entries.items()}

    def _lookup(self, steam_id: SteamId) -> _Entry:
        with self._lock:
            try:
                entry = self._entries[self._key(steam_id)]
            except KeyError:
                raise KeyError(self._not_found) from None
            return self._copy_entry(entry)

    def _set_fields(self, entry_type: type, steam_id: SteamId, changes: dict[str, Any]) -> None:
        editable = {f.name for f in fields(entry_type)} - {"steam_id"}
        unknown = set(changes) - editable
        if unknown:
            raise TypeError(f"cannot update fields: {', '.join(sorted(unknown))}")
        with self._lock:
            entry = self._entries.get(self._key(steam_id))
            if entry is None:
                return
            for name, value in changes.items():
                setattr(entry, name, value)

    def _size(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, steam_id: object) -> bool:
        with self._lock:
            return isinstance(steam_id, int) and self._key(SteamId(steam_id)) in self._entries


class FriendsList(_Cache[Friend]):
    """Friends keyed by Steam id."""

    _not_found = "Friend not found"

    def __init__(self) -> None:
        super().__init__()

    def add(self, friend: Friend) -> None:
        """Store a friend unless one with the same id is already present."""
        self._store(friend)

    def remove(self, steam_id: SteamId) -> None:
        self._discard(steam_id)

    def copy(self) -> dict[SteamId, Friend]:
        """A snapshot of all friends, independent of the cache."""
        return self._snapshot()

    def by_id(self, steam_id: SteamId) -> Friend:
        """A copy of the friend for ``steam_id``; raises KeyError if absent."""
        return self._lookup(steam_id)

    def update(self, steam_id: SteamId, **kwargs: Any) -> None:
        """Set fields on an existing friend; unknown ids are ignored."""
        self._set_fields(Friend, steam_id, kwargs)

    def __len__(self) -> int:
        return self._size()


class GroupsList(_Cache[Group]):
    """Groups keyed by clan id; lookups also accept the clan's chat id."""

    _not_found = "Group not found"

    def __init__(self) -> None:
        super().__init__()

    def _key(self, steam_id: SteamId) -> SteamId:
        return SteamId(steam_id).chat_to_clan()

    def add(self, group: Group) -> None:
        """Store a group unless one with the same id is already present."""
        self._store(group)

    def remove(self, steam_id: SteamId) -> None:
        self._discard(steam_id)

    def copy(self) -> dict[SteamId, Group]:
        """A snapshot of all groups, independent of the cache."""
        return self._snapshot()

    def by_id(self, steam_id: SteamId) -> Group:
        """A copy of the group for ``steam_id``; raises KeyError if absent."""
        return self._lookup(steam_id)

    def update(self, steam_id: SteamId, **kwargs: Any) -> None:
        """Set fields on an existing group; unknown ids are ignored."""
        self._set_fields(Group, steam_id, kwargs)

    def __len__(self) -> int:
        return self._size()


class ChatsList(_Cache[Chat]):
    """Chat rooms keyed by chat id, with their members."""

    _not_found = "Chat not found"

    def __init__(self) -> None:
        super().__init__()

    def _copy_entry(self, entry: Chat) -> Chat:
        return replace(entry, members=dict(entry.members))

    def add(self, chat: Chat) -> None:
        """Store a chat unless one with the same id is already present."""
        self._store(chat)

    def remove(self, steam_id: SteamId) -> None:
        self._discard(steam_id)

    def add_member(self, steam_id: SteamId, member: ChatMember) -> None:
        """Add a member, creating the chat if it is not known yet."""
        with self._lock:
            chat = self._entries.get(steam_id)
            if chat is None:
                chat = Chat(steam_id=SteamId(steam_id))
                self._entries[chat.steam_id] = chat
            chat.members[member.steam_id] = member

    def remove_member(self, steam_id: SteamId, member_id: SteamId) -> None:
        with self._lock:
            chat = self._entries.get(steam_id)
            if chat is not None:
                chat.members.pop(member_id, None)

    def copy(self) -> dict[SteamId, Chat]:
        """A snapshot of all chats, independent of the cache."""
        return self._snapshot()

    def by_id(self, steam_id: SteamId) -> Chat:
        """A copy of the chat for ``steam_id``; raises KeyError if absent."""
        return self._lookup(steam_id)

    def __len__(self) -> int:
        return self._size()