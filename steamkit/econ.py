"""Game coordinator item messages for Team Fortress 2."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

_INT16_MIN = -(1 << 15)
_INT16_MAX = (1 << 15) - 1


@dataclass(frozen=True)
class SetItemPosition:
    asset_id: int
    position: int

    def serialize(self) -> bytes:
        return struct.pack("<QQ", self.asset_id, self.position)


@dataclass(frozen=True)
class Craft:
    """A crafting request; a recipe of -2 is the wildcard."""

    recipe: int
    items: list[int] = field(default_factory=list)

    def serialize(self) -> bytes:
        count = len(self.items)
        if not _INT16_MIN <= self.recipe <= _INT16_MAX:
            raise ValueError(f"recipe out of range: {self.recipe}")
        if count > _INT16_MAX:
            raise ValueError(f"too many items: {count}")
        return struct.pack(f"<hh{count}Q", self.recipe, count, *self.items)


@dataclass(frozen=True)
class DeleteItem:
    item_id: int

    def serialize(self) -> bytes:
        return struct.pack("<Q", self.item_id)


@dataclass(frozen=True)
class NameItem:
    tool: int
    target: int
    name: str

    def serialize(self) -> bytes:
        return struct.pack("<QQ", self.tool, self.target) + self.name.encode("utf-8")