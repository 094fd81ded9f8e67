"""Displayable rendering of values logged or returned by sandboxed code.

Scalars render via ``str()``.  Containers render as 2-space indented JSON
built by a bounded recursive walk; cycles, excessive depth and values JSON
cannot represent turn the whole argument into :data:`UNSERIALIZABLE`.
"""

from __future__ import annotations

import datetime
import json
from typing import Any

UNSERIALIZABLE = "[Unserializable]"

MAX_DEPTH = 32

_SCALARS = (str, int, float, bool, type(None))
_KEY_TYPES = (str, int, float, bool, type(None))


class _Unrenderable(Exception):
    pass


def _to_plain(value: Any, depth: int, active: set[int]) -> Any:
    if isinstance(value, _SCALARS):
        return value
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    if depth >= MAX_DEPTH:
        raise _Unrenderable("too deep")

    marker = id(value)
    if marker in active:
        raise _Unrenderable("cycle")
    active.add(marker)
    try:
        if isinstance(value, dict):
            out: dict[Any, Any] = {}
            for key, item in value.items():
                if not isinstance(key, _KEY_TYPES):
                    raise _Unrenderable("key")
                out[key] = _to_plain(item, depth + 1, active)
            return out
        if isinstance(value, (list, tuple)):
            return [_to_plain(item, depth + 1, active) for item in value]
        if isinstance(value, (set, frozenset)):
            try:
                ordered = sorted(value)
            except TypeError:
                raise _Unrenderable("unordered set") from None
            return [_to_plain(item, depth + 1, active) for item in ordered]
        raise _Unrenderable(type(value).__name__)
    finally:
        active.discard(marker)


def _natural(value: Any) -> str:
    try:
        return str(value)
    except Exception:  # noqa: BLE001 - user __str__ or huge ints
        return UNSERIALIZABLE


def display(value: Any) -> str:
    """Render *value* for output.  Never raises."""
    if isinstance(value, str):
        return value
    if not isinstance(value, (dict, list, tuple, set, frozenset)):
        return _natural(value)
    try:
        plain = _to_plain(value, 0, set())
        return json.dumps(plain, indent=2, ensure_ascii=False)
    except (_Unrenderable, TypeError, ValueError, RecursionError):
        return UNSERIALIZABLE


def one_line(text: str) -> str:
    """Collapse *text* onto a single line."""
    return " ".join(part.strip() for part in text.splitlines() if part.strip())
