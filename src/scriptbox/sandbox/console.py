"""Diagnostic output: the realm-side ``console`` and the host-side collector."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from .render import display

_PREFIXES = {
    "log": "",
    "error": "ERROR: ",
    "warn": "WARNING: ",
    "info": "INFO: ",
}


def line_size(line: str) -> int:
    """Bytes *line* contributes to the output, newline separator included."""
    return len(line.encode("utf-8", "replace")) + 1


def truncation_sentinel(max_bytes: int) -> str:
    return f"[output truncated: exceeded {max_bytes} bytes]"


class Console:
    """The ``console`` object bound inside a realm.

    Each call renders its arguments, joins them with a single space and
    hands exactly one line to *emit*.  The line that crosses *max_bytes* is
    clipped and every later call is dropped, so neither a runaway loop nor
    one huge line can flood the host.
    """

    def __init__(self, emit: Callable[[str], None], max_bytes: int | None = None) -> None:
        self._emit = emit
        self._max_bytes = max_bytes
        self._sent = 0

    def _record(self, severity: str, args: tuple[Any, ...]) -> None:
        if self._max_bytes is not None and self._sent > self._max_bytes:
            return
        self._send(_PREFIXES[severity] + " ".join(display(arg) for arg in args))

    def _send(self, line: str) -> None:
        if self._max_bytes is not None:
            # A line longer than the remaining budget crosses the cap whole or
            # clipped, so only as many characters as bytes left are sent.
            budget = self._max_bytes - self._sent
            if len(line) > budget:
                line = line[:budget]
        self._sent += line_size(line)
        self._emit(line)

    def log(self, *args: Any) -> None:
        self._record("log", args)

    def error(self, *args: Any) -> None:
        self._record("error", args)

    def warn(self, *args: Any) -> None:
        self._record("warn", args)

    warning = warn

    def info(self, *args: Any) -> None:
        self._record("info", args)

    def print(
        self,
        *args: Any,
        sep: str | None = " ",
        end: str | None = "\n",
        file: Any = None,
        flush: bool = False,
    ) -> None:
        """Replacement for the ``print`` builtin: one unprefixed line per call."""
        if self._max_bytes is not None and self._sent > self._max_bytes:
            return
        parts = []
        for arg in args:
            try:
                parts.append(str(arg))
            except Exception:  # noqa: BLE001 - mirrors display() placeholder
                parts.append(display(arg))
        self._send((" " if sep is None else str(sep)).join(parts))

    def __repr__(self) -> str:
        return "<console>"


class OutputCollector:
    """Ordered, append-only buffer of output lines for one execution.

    Parameters
    ----------
    max_bytes:
        Cap on total buffered bytes.  The line that crosses it is replaced
        by a single truncation sentinel and everything after is dropped.
    """

    def __init__(self, max_bytes: int | None = None) -> None:
        self._max_bytes = max_bytes
        self._lines: list[str] = []
        self._size = 0
        self._truncated = False
        self._finalized = False

    def append(self, line: str) -> bool:
        """Record *line*.  Returns ``False`` when it was dropped by the cap."""
        if self._finalized:
            raise RuntimeError("OutputCollector is finalized")
        if self._truncated:
            return False
        size = line_size(line)
        if self._max_bytes is not None and self._size + size > self._max_bytes:
            self._truncated = True
            self._lines.append(truncation_sentinel(self._max_bytes))
            return False
        self._lines.append(line)
        self._size += size
        return True

    def finalize(self) -> None:
        self._finalized = True

    @property
    def finalized(self) -> bool:
        return self._finalized

    @property
    def truncated(self) -> bool:
        return self._truncated

    @property
    def lines(self) -> tuple[str, ...]:
        return tuple(self._lines)

    def __len__(self) -> int:
        return len(self._lines)
