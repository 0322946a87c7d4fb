from __future__ import annotations

from ascnext.core.structured import (
    as_obj_list,
    as_str_dict,
    data_items,
    get_float,
    get_int,
    get_str,
    get_table,
)


def test_str_dict_rejects_non_string_keys() -> None:
    assert as_str_dict({"a": 1}) == {"a": 1}
    assert as_str_dict({1: "a"}) is None
    assert as_str_dict([1]) is None


def test_obj_list() -> None:
    assert as_obj_list([1, "a"]) == [1, "a"]
    assert as_obj_list("a") is None


def test_scalar_getters() -> None:
    table: dict[str, object] = {"s": "  x ", "blank": "  ", "i": 3, "b": True, "f": 2}
    assert get_str(table, "s") == "x"
    assert get_str(table, "blank") is None
    assert get_int(table, "i") == 3
    assert get_int(table, "b") is None
    assert get_float(table, "f") == 2.0
    assert get_float(table, "b") is None
    assert get_table(table, "s") is None


def test_data_items_handles_each_shape() -> None:
    assert data_items({"data": {"id": "1"}}) == [{"id": "1"}]
    assert data_items({"data": [{"id": "1"}, "junk", {"id": "2"}]}) == [{"id": "1"}, {"id": "2"}]
    assert data_items({"data": None}) == []
    assert data_items({}) == []
