"""Host-side realm handles and the builder that creates them.

A realm is one child process built from :data:`~.allowlist.GLOBAL_ALLOWLIST`
plus a fresh ``console`` wired back to an :class:`OutputCollector` in the
host.  Realms are never pooled: one realm, one program, then the process is
gone.
"""

from __future__ import annotations

import logging
import math
import multiprocessing
from multiprocessing.connection import Connection
from multiprocessing.context import BaseContext
from multiprocessing.process import BaseProcess
from typing import Any

from ..config import SandboxConfig
from ..exceptions import RealmAllocationError
from .child import RealmLimits, child_main
from .console import OutputCollector

logger = logging.getLogger(__name__)

_JOIN_TIMEOUT = 5.0


def _resolve_context(start_method: str | None) -> BaseContext:
    if start_method is None and "forkserver" in multiprocessing.get_all_start_methods():
        start_method = "forkserver"
    return multiprocessing.get_context(start_method)


class SandboxRealm:
    """Handle on a running realm process.

    Owned by exactly one request.  :meth:`close` kills the process if it is
    still running and finalizes the collector.
    """

    def __init__(
        self,
        process: BaseProcess,
        conn: Connection,
        collector: OutputCollector,
    ) -> None:
        self._process = process
        self._conn = conn
        self._collector = collector
        self._used = False
        self._closed = False

    @property
    def collector(self) -> OutputCollector:
        return self._collector

    @property
    def pid(self) -> int | None:
        return self._process.pid

    @property
    def closed(self) -> bool:
        return self._closed

    def submit(self, source_text: str) -> None:
        """Send the realm its program.  A realm accepts exactly one."""
        if self._closed:
            raise RuntimeError("realm is closed")
        if self._used:
            raise RuntimeError("realm already ran a program; build a new one")
        self._used = True
        try:
            self._conn.send(("exec", source_text))
        except (OSError, ValueError) as exc:
            raise RealmAllocationError(f"could not send program to realm: {exc}") from exc

    def poll(self, timeout: float) -> bool:
        return self._conn.poll(max(0.0, timeout))

    def recv(self) -> Any:
        return self._conn.recv()

    def is_alive(self) -> bool:
        return self._process.is_alive()

    def exitcode(self, wait: float = 1.0) -> int | None:
        """Exit code of the realm process, waiting up to *wait* seconds for it."""
        self._process.join(timeout=wait)
        return self._process.exitcode

    def kill(self) -> None:
        if self._process.is_alive():
            self._process.kill()
            self._process.join(timeout=_JOIN_TIMEOUT)

    def close(self) -> None:
        """Tear the realm down.  Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            self._process.join(timeout=0.1)
            self.kill()
            if self._process.is_alive():
                logger.warning("realm process %s did not exit after kill", self.pid)
        finally:
            self._conn.close()
            self._collector.finalize()

    def __enter__(self) -> SandboxRealm:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class RealmBuilder:
    """Creates one fresh :class:`SandboxRealm` per request."""

    def __init__(self, config: SandboxConfig) -> None:
        self._config = config
        self._context = _resolve_context(config.start_method)
        self._limits = RealmLimits(
            max_output_bytes=config.max_output_bytes,
            memory_limit_mb=config.memory_limit_mb,
            # Backstop only; the wall-clock deadline is enforced by the engine.
            cpu_seconds=math.ceil(config.startup_timeout + config.max_deadline) + 1,
        )

    @property
    def start_method(self) -> str:
        return self._context.get_start_method()

    def build(self) -> SandboxRealm:
        """Spawn a realm process.

        Raises :class:`~scriptbox.exceptions.RealmAllocationError` when the
        host cannot create it.
        """
        try:
            parent_conn, child_conn = self._context.Pipe()
        except OSError as exc:
            raise RealmAllocationError(f"could not create realm channel: {exc}") from exc

        process = self._context.Process(
            target=child_main,
            args=(child_conn, self._limits),
            daemon=True,
        )
        try:
            process.start()
        except (OSError, ValueError, RuntimeError) as exc:
            parent_conn.close()
            child_conn.close()
            raise RealmAllocationError(f"could not start realm process: {exc}") from exc
        child_conn.close()  # Parent doesn't use the child end.
        return SandboxRealm(process, parent_conn, OutputCollector(self._config.max_output_bytes))
