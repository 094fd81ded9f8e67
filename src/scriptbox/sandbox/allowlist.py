"""Global allowlist: the fixed surface every realm is built from.

Everything here is defined once at import time and never mutated per
request.  Capabilities that reach outside the process (files, sockets,
subprocesses, the environment, arbitrary imports) are simply not listed.
"""

from __future__ import annotations

import builtins
import datetime
import json
import math
import re
from collections.abc import Callable
from types import MappingProxyType, ModuleType
from typing import Any
from urllib.parse import quote, unquote

# Modules sandboxed code may ``import``.  Dotted entries allow exactly that
# submodule, never its parent package as a whole.
ALLOWED_MODULES: frozenset[str] = frozenset(
    {
        "re",
        "json",
        "math",
        "cmath",
        "datetime",
        "time",
        "calendar",
        "random",
        "textwrap",
        "unicodedata",
        "decimal",
        "fractions",
        "statistics",
        "collections",
        "collections.abc",
        "itertools",
        "functools",
        "heapq",
        "bisect",
        "copy",
        "enum",
        "urllib.parse",
    }
)

# Builtins that allow code execution, file access, introspection of the
# host, or interpreter control.
BLOCKED_BUILTINS: frozenset[str] = frozenset(
    {
        "exec",
        "eval",
        "compile",
        "__import__",
        "open",
        "breakpoint",
        "exit",
        "quit",
        "input",
        "help",
        "globals",
        "locals",
        "vars",
        "dir",
        "getattr",
        "setattr",
        "delattr",
        "memoryview",
        "copyright",
        "credits",
        "license",
    }
)

# Attribute names that lead from ordinary objects to frames, code objects
# or tracebacks, or that look attributes up by string.  Anything starting
# with ``_`` is rejected as well.
FORBIDDEN_ATTRIBUTES: frozenset[str] = frozenset(
    {
        "gi_frame",
        "gi_code",
        "gi_yieldfrom",
        "cr_frame",
        "cr_code",
        "cr_await",
        "ag_frame",
        "ag_code",
        "ag_await",
        "f_back",
        "f_globals",
        "f_locals",
        "f_builtins",
        "f_code",
        "tb_frame",
        "tb_next",
        "with_traceback",
        # Replacement fields such as "{0.__class__}" walk attributes at runtime.
        "format",
        "format_map",
    }
)


def is_forbidden_attribute(name: str) -> bool:
    return name.startswith("_") or name in FORBIDDEN_ATTRIBUTES


class ModuleView:
    """Read-only view of a module exposing only its public, non-module attributes.

    Submodules are reachable only when their dotted name is in
    :data:`ALLOWED_MODULES`, and come back wrapped too.  This closes
    traversal paths such as ``json.codecs.sys.modules``.
    """

    __slots__ = ("_module", "_name")

    def __init__(self, module: ModuleType) -> None:
        object.__setattr__(self, "_module", module)
        object.__setattr__(self, "_name", module.__name__)

    def __getattr__(self, name: str) -> Any:
        if is_forbidden_attribute(name):
            raise AttributeError(f"module {self._name!r} has no attribute {name!r}")
        value = getattr(self._module, name)
        if isinstance(value, ModuleType):
            qualified = f"{self._name}.{name}"
            if qualified not in ALLOWED_MODULES:
                raise AttributeError(f"module {self._name!r} has no attribute {name!r}")
            return ModuleView(value)
        return value

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"module {self._name!r} is read-only in the sandbox")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"module {self._name!r} is read-only in the sandbox")

    def __repr__(self) -> str:
        return f"<module {self._name!r}>"


_real_import = builtins.__import__


def _is_importable(name: str, fromlist: tuple[str, ...] | list[str] | None) -> bool:
    if name in ALLOWED_MODULES:
        return True
    # ``from urllib import parse`` arrives as name="urllib", fromlist=("parse",).
    return bool(fromlist) and all(f"{name}.{item}" in ALLOWED_MODULES for item in fromlist)


def _safe_import(
    name: str,
    globals: dict[str, Any] | None = None,  # noqa: A002
    locals: dict[str, Any] | None = None,  # noqa: A002
    fromlist: tuple[str, ...] = (),
    level: int = 0,
) -> Any:
    """Import hook that only allows modules in :data:`ALLOWED_MODULES`."""
    if level != 0 or not _is_importable(name, fromlist):
        raise ImportError(
            f"Module {name!r} is not allowed in the sandbox. "
            f"Allowed modules: {sorted(ALLOWED_MODULES)}"
        )
    return ModuleView(_real_import(name, None, None, fromlist, 0))


def build_safe_builtins(print_fn: Callable[..., None] | None = None) -> dict[str, Any]:
    """Return a fresh ``__builtins__`` dict with dangerous entries removed.

    ``__import__`` is replaced with :func:`_safe_import` so only
    :data:`ALLOWED_MODULES` can be imported.  When *print_fn* is given it
    replaces ``print``.
    """
    src = builtins.__dict__
    safe = {
        k: v for k, v in src.items() if k not in BLOCKED_BUILTINS and not k.startswith("_")
    }
    safe["__import__"] = _safe_import
    safe["__build_class__"] = builtins.__build_class__
    if print_fn is not None:
        safe["print"] = print_fn
    return safe


def encode_uri_component(value: object) -> str:
    """Percent-encode *value* leaving ``A-Z a-z 0-9 - _ . ! ~ * ' ( )`` intact."""
    return quote(str(value), safe="!~*'()")


def decode_uri_component(value: str) -> str:
    """Inverse of :func:`encode_uri_component`.  Malformed UTF-8 raises."""
    return unquote(value, errors="strict")


GLOBAL_ALLOWLIST: MappingProxyType[str, Any] = MappingProxyType(
    {
        "math": ModuleView(math),
        "json": ModuleView(json),
        "datetime": ModuleView(datetime),
        "re": ModuleView(re),
        "encode_uri_component": encode_uri_component,
        "decode_uri_component": decode_uri_component,
    }
)
"""Names bound in every realm besides the builtins, ``console`` and timers."""
