import struct

import pytest

from steamkit.econ import Craft, DeleteItem, NameItem, SetItemPosition


def test_set_item_position_layout():
    data = SetItemPosition(1, 2).serialize()
    assert len(data) == 16
    assert struct.unpack("<QQ", data) == (1, 2)


def test_craft_layout():
    data = Craft(-2, [5, 6]).serialize()
    assert len(data) == 4 + 2 * 8
    assert struct.unpack("<hh", data[:4]) == (-2, 2)
    assert struct.unpack("<2Q", data[4:]) == (5, 6)


def test_craft_without_items():
    assert struct.unpack("<hh", Craft(3).serialize()) == (3, 0)


def test_craft_recipe_out_of_range():
    with pytest.raises(ValueError):
        Craft(1 << 15, [1]).serialize()


def test_delete_item_layout():
    data = DeleteItem(7).serialize()
    assert struct.unpack("<Q", data) == (7,)


def test_name_item_layout():
    data = NameItem(1, 2, "Hat").serialize()
    assert struct.unpack("<QQ", data[:16]) == (1, 2)
    assert data[16:] == b"Hat"


def test_name_item_utf8():
    data = NameItem(1, 2, "Hüt").serialize()
    assert data[16:].decode("utf-8") == "Hüt"