"""TOON (Token-Oriented Object Notation) output.

A compact, indentation-based text form of a result dict that costs an LLM far
fewer tokens than JSON when the payload is row-shaped:

    ok: true
    result:
      headers[2]: Name,Qty
      rows[2]:
        Name,Qty
        Widget,10
        Gadget,

Keys whose value is None are left out; inside a row table None is an empty
field. Strings holding a comma, quote or newline are double-quoted with
backslash escapes.
"""

from __future__ import annotations

from typing import Any, Iterator

INDENT = "  "
_SCALARS = (str, int, float, bool)


def to_toon(data: dict[str, Any], *, indent: int = 0) -> str:
    return "\n".join(_mapping(data, indent))


def _mapping(data: dict[str, Any], depth: int) -> Iterator[str]:
    pad = INDENT * depth
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, dict):
            yield f"{pad}{key}:"
            yield from _mapping(value, depth + 1)
        elif isinstance(value, list):
            yield from _sequence(key, value, depth)
        else:
            yield f"{pad}{key}: {_scalar(value)}"


def _sequence(key: str, items: list[Any], depth: int) -> Iterator[str]:
    pad = INDENT * depth
    present = [item for item in items if item is not None]
    columns = _table_columns(items)

    if columns is not None:
        yield f"{pad}{key}[{len(items)}]:"
        yield pad + INDENT + ",".join(_scalar(c) for c in columns)
        for item in items:
            yield pad + INDENT + ",".join(_scalar(item[c]) for c in columns)
    elif items and all(isinstance(item, _SCALARS) for item in present):
        yield f"{pad}{key}[{len(present)}]: {','.join(_scalar(v) for v in present)}"
    else:
        yield f"{pad}{key}[{len(items)}]:"
        for item in present:
            if isinstance(item, dict):
                yield from _mapping(item, depth + 1)
            else:
                yield f"{pad}{INDENT}{_scalar(item)}"


def _table_columns(items: list[Any]) -> list[str] | None:
    """Shared key order when every item is a flat dict with the same keys."""
    if not items or not all(isinstance(item, dict) for item in items):
        return None
    columns = list(items[0])
    for item in items:
        if list(item) != columns:
            return None
        if any(isinstance(v, (dict, list)) for v in item.values()):
            return None
    return columns


def _scalar(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    text = str(value)
    if any(ch in text for ch in ',"\n'):
        return '"' + text.replace('"', '\\"').replace("\n", "\\n") + '"'
    return text
