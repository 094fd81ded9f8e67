"""Execution engine: runs one program in one realm under a hard deadline."""

from __future__ import annotations

import logging
import signal
import time
from typing import Any

from ..exceptions import RealmAllocationError
from ..types import (
    Completed,
    ErrorKind,
    ExecutionOutcome,
    InternalFailure,
    Thrown,
    TimedOut,
)
from .realm import SandboxRealm

logger = logging.getLogger(__name__)

_EOF = object()
_SIGXCPU = getattr(signal, "SIGXCPU", None)


class ExecutionEngine:
    """Drives a realm through compile → run → result.

    The deadline starts once the realm reports the program compiled.  When
    it elapses the realm process is killed, so a tight loop with no
    suspension point is interrupted all the same.

    Parameters
    ----------
    startup_timeout:
        Seconds allowed for the realm to start and compile the program.
    """

    def __init__(self, startup_timeout: float = 10.0) -> None:
        self._startup_timeout = startup_timeout

    def run(self, realm: SandboxRealm, source_text: str, deadline: float) -> ExecutionOutcome:
        """Execute *source_text* in *realm* and close the realm.

        Never raises: every failure becomes an outcome variant.
        """
        try:
            return self._run(realm, source_text, deadline)
        except Exception as exc:  # noqa: BLE001 - host faults become outcomes
            logger.exception("realm %s failed", realm.pid)
            return InternalFailure(f"{type(exc).__name__}: {exc}")
        finally:
            realm.close()

    def _run(self, realm: SandboxRealm, source_text: str, deadline: float) -> ExecutionOutcome:
        realm.submit(source_text)

        msg = self._receive(realm, self._startup_timeout)
        if msg is None:
            realm.kill()
            raise RealmAllocationError(
                f"realm did not compile the program within {self._startup_timeout}s"
            )
        if msg is _EOF:
            raise RealmAllocationError(
                f"realm process exited during startup (exit code {realm.exitcode()})"
            )
        if msg[0] == "compile_error":
            return Thrown(msg[1], ErrorKind.SYNTAX)
        if msg[0] != "compiled":
            raise RealmAllocationError(f"unexpected realm message {msg[0]!r}")

        expires = time.monotonic() + deadline
        while True:
            msg = self._receive(realm, expires - time.monotonic())
            if msg is None:
                realm.kill()
                logger.warning("realm %s killed after %ss deadline", realm.pid, deadline)
                return TimedOut(deadline)
            if msg is _EOF:
                return self._classify_exit(realm, deadline)

            kind = msg[0]
            if kind == "line":
                realm.collector.append(msg[1])
            elif kind == "done":
                return Completed(msg[1])
            elif kind == "error":
                return Thrown(msg[1], ErrorKind.RUNTIME)
            else:
                raise RealmAllocationError(f"unexpected realm message {kind!r}")

    @staticmethod
    def _receive(realm: SandboxRealm, timeout: float) -> Any:
        """Next message, ``None`` on timeout, ``_EOF`` when the realm hung up."""
        if timeout <= 0 or not realm.poll(timeout):
            return None
        try:
            return realm.recv()
        except EOFError:
            return _EOF

    @staticmethod
    def _classify_exit(realm: SandboxRealm, deadline: float) -> ExecutionOutcome:
        code = realm.exitcode()
        if _SIGXCPU is not None and code == -_SIGXCPU:
            return TimedOut(deadline)
        return Thrown(
            f"SandboxExit: sandboxed process exited unexpectedly (exit code {code})",
            ErrorKind.RUNTIME,
        )
