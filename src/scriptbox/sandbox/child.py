"""Realm process: builds the realm namespace and runs one program in it.

IPC protocol (tuples over ``multiprocessing.Connection``):

    Parent → Child:
        ("exec", source)            # the one program this realm will run

    Child → Parent:
        ("compile_error", message)  # program rejected before running
        ("compiled",)               # compiled; the deadline starts now
        ("line", text)              # one output line, in call order
        ("done", rendered | None)   # finished; rendered final expression
        ("error", message)          # uncaught exception

The process exits after its one program, taking every pending timer and
every object the program created with it.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from multiprocessing.connection import Connection
from typing import Any

from .allowlist import GLOBAL_ALLOWLIST, build_safe_builtins
from .console import Console
from .guard import SOURCE_NAME, compile_program, describe_compile_error
from .render import display, one_line
from .timers import RealmTimers


@dataclass(frozen=True)
class RealmLimits:
    """Limits applied inside the realm process before any user code runs."""

    max_output_bytes: int | None = None
    memory_limit_mb: int | None = None
    cpu_seconds: int | None = None


def build_namespace(console: Console, timers: RealmTimers) -> dict[str, Any]:
    """Globals for a new realm: the allowlist, ``console`` and the timer functions."""
    namespace: dict[str, Any] = dict(GLOBAL_ALLOWLIST)
    namespace.update(
        {
            "__builtins__": build_safe_builtins(print_fn=console.print),
            "__name__": "__main__",
            "console": console,
            "set_timeout": timers.set_timeout,
            "set_interval": timers.set_interval,
            "clear_timeout": timers.clear,
            "clear_interval": timers.clear,
        }
    )
    return namespace


def describe_exception(exc: BaseException) -> str:
    """``Type: message (line N)`` where N is the innermost line of user code."""
    name = type(exc).__name__
    try:
        text = one_line(str(exc))
    except Exception:  # noqa: BLE001 - user-defined __str__
        text = ""
    message = f"{name}: {text}" if text else name

    lineno = None
    tb = exc.__traceback__
    while tb is not None:
        if tb.tb_frame.f_code.co_filename == SOURCE_NAME:
            lineno = tb.tb_lineno
        tb = tb.tb_next
    if lineno is not None:
        message += f" (line {lineno})"
    return message


def _set_limit(resource: Any, which: int, soft: int, hard: int) -> None:
    _, current_hard = resource.getrlimit(which)
    if current_hard != resource.RLIM_INFINITY:
        soft = min(soft, current_hard)
        hard = min(hard, current_hard)
    resource.setrlimit(which, (soft, hard))


def _harden(limits: RealmLimits) -> None:
    """Drop the inherited environment and apply resource limits (Unix)."""
    os.environ.clear()
    try:
        import resource
    except ImportError:
        return
    if limits.cpu_seconds is not None:
        _set_limit(resource, resource.RLIMIT_CPU, limits.cpu_seconds, limits.cpu_seconds + 1)
    if limits.memory_limit_mb is not None:
        memory_bytes = int(limits.memory_limit_mb * 1024 * 1024)
        if hasattr(resource, "RLIMIT_AS"):
            _set_limit(resource, resource.RLIMIT_AS, memory_bytes, memory_bytes)
        elif hasattr(resource, "RLIMIT_DATA"):
            _set_limit(resource, resource.RLIMIT_DATA, memory_bytes, memory_bytes)


def child_main(conn: Connection, limits: RealmLimits) -> None:
    """Entry point for the realm process."""
    _harden(limits)

    try:
        msg = conn.recv()
    except EOFError:
        return
    if msg[0] != "exec":
        return

    try:
        program = compile_program(msg[1])
    except (SyntaxError, ValueError, RecursionError, MemoryError) as exc:
        conn.send(("compile_error", describe_compile_error(exc)))
        return

    console = Console(lambda line: conn.send(("line", line)), limits.max_output_bytes)
    timers = RealmTimers()
    namespace = build_namespace(console, timers)
    conn.send(("compiled",))

    try:
        exec(program.body, namespace)  # noqa: S102
        value = eval(program.tail, namespace) if program.tail is not None else None  # noqa: S307
        timers.run_pending()
        rendered = None if value is None else display(value)
    except BaseException as exc:  # noqa: BLE001 - capture all user errors
        timers.discard()
        conn.send(("error", describe_exception(exc)))
        return

    conn.send(("done", rendered))
