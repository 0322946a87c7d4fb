"""Helpers for safely working with dynamic (untyped) structures.

Use these at boundaries where we ingest JSON:API payloads or TOML. They do
runtime validation and give static type narrowing.
"""

from __future__ import annotations

from typing import Mapping, TypeGuard, cast

StrDict = dict[str, object]
ObjList = list[object]


def is_str_dict(obj: object) -> TypeGuard[StrDict]:
    """Return True if obj is a dict with string keys."""
    if not isinstance(obj, dict):
        return False
    d = cast(dict[object, object], obj)
    return all(isinstance(k, str) for k in d.keys())


def as_str_dict(obj: object) -> StrDict | None:
    if is_str_dict(obj):
        return obj
    return None


def as_obj_list(obj: object) -> ObjList | None:
    if isinstance(obj, list):
        return cast(ObjList, obj)
    return None


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """Get a string value, stripping whitespace.

    Returns None if missing, not a str, or empty after stripping.
    """
    value = table.get(key)
    if not isinstance(value, str):
        return None
    s = value.strip()
    return s or None


def get_int(table: Mapping[str, object], key: str) -> int | None:
    """Get an int value. Booleans are not ints here."""
    value = table.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def get_float(table: Mapping[str, object], key: str) -> float | None:
    """Get a float value, accepting ints (TOML ``30`` means ``30.0``)."""
    value = table.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def get_table(table: Mapping[str, object], key: str) -> StrDict | None:
    """Get a nested table (dict with string keys) from a mapping."""
    return as_str_dict(table.get(key))


def data_items(payload: Mapping[str, object]) -> list[StrDict]:
    """Return the JSON:API ``data`` member as a list of resource objects.

    ``data`` may be a single object, a list, or null; anything that is not a
    string-keyed object is dropped.
    """
    data = payload.get("data")
    single = as_str_dict(data)
    if single is not None:
        return [single]
    items = as_obj_list(data) or []
    out: list[StrDict] = []
    for item in items:
        d = as_str_dict(item)
        if d is not None:
            out.append(d)
    return out
