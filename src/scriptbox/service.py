"""Public entry point: ``Sandbox``."""

from __future__ import annotations

import logging
import math
import threading
import time

from .config import SandboxConfig
from .exceptions import InvalidRequest, RealmAllocationError, SandboxBusy
from .sandbox.console import OutputCollector
from .sandbox.engine import ExecutionEngine
from .sandbox.realm import RealmBuilder
from .serializer import serialize
from .tracing import span
from .types import (
    Completed,
    ExecutionOutcome,
    ExecutionRequest,
    ExecutionResult,
    InternalFailure,
    Thrown,
)

logger = logging.getLogger(__name__)


def _outcome_label(outcome: ExecutionOutcome) -> str:
    if isinstance(outcome, Completed):
        return "completed"
    if isinstance(outcome, Thrown):
        return outcome.kind.value
    if isinstance(outcome, InternalFailure):
        return "internal"
    return "timeout"


class Sandbox:
    """Run untrusted Python snippets, each in its own throwaway process.

    Parameters
    ----------
    config:
        Optional :class:`SandboxConfig` with deadlines and limits.

    Example
    -------
    >>> from scriptbox import Sandbox
    >>> box = Sandbox()
    >>> result = box.execute("console.log('hi')\\n6 * 7")
    >>> print(result.output)
    hi
    Return value: 42
    """

    def __init__(self, config: SandboxConfig | None = None) -> None:
        self._config = config or SandboxConfig()
        if self._config.verbose:
            logging.basicConfig(
                level=logging.INFO,
                format="%(name)s %(levelname)s: %(message)s",
            )
            logger.setLevel(logging.INFO)
        self._builder = RealmBuilder(self._config)
        self._engine = ExecutionEngine(startup_timeout=self._config.startup_timeout)
        self._slots = threading.BoundedSemaphore(self._config.max_workers)

    @property
    def config(self) -> SandboxConfig:
        return self._config

    def validate(self, request: ExecutionRequest) -> float:
        """Check *request* and return its effective deadline.

        Raises :class:`InvalidRequest` for a missing, empty or oversized
        program, or a deadline that is not a positive number.
        """
        source = request.source_text
        if not isinstance(source, str):
            raise InvalidRequest("code must be a string")
        if not source:
            raise InvalidRequest("code must not be empty")
        size = len(source.encode("utf-8", "surrogatepass"))
        if size > self._config.max_source_bytes:
            raise InvalidRequest(
                f"code is {size} bytes; the limit is {self._config.max_source_bytes}",
                status=413,
            )

        deadline = request.deadline
        if deadline is not None:
            if isinstance(deadline, bool) or not isinstance(deadline, (int, float)):
                raise InvalidRequest("timeout must be a number of seconds")
            if math.isnan(deadline) or deadline <= 0:
                raise InvalidRequest("timeout must be positive")
        return self._config.resolve_deadline(deadline)

    def execute(self, code: str, deadline: float | None = None) -> ExecutionResult:
        """Run *code* in a fresh realm and return its result.

        Parameters
        ----------
        code:
            Python source.  The final bare expression, if any, is reported
            as the return value.
        deadline:
            Wall-clock seconds.  Defaults to ``config.default_deadline`` and is
            clamped to ``config.max_deadline``.

        Returns
        -------
        ExecutionResult
            Syntax errors, uncaught exceptions, timeouts and host failures are
            all reported here, never raised.

        Raises
        ------
        InvalidRequest
            The request itself is unacceptable.
        SandboxBusy
            No worker slot became free within ``config.admission_timeout``.
        """
        request = ExecutionRequest(source_text=code, deadline=deadline)
        effective_deadline = self.validate(request)

        if not self._slots.acquire(timeout=self._config.admission_timeout):
            logger.warning("rejecting execution: all %d workers busy", self._config.max_workers)
            raise SandboxBusy(self._config.max_workers)
        try:
            return self._execute(request.source_text, effective_deadline)
        finally:
            self._slots.release()

    def _execute(self, source: str, deadline: float) -> ExecutionResult:
        start_time = time.monotonic()
        attributes = {"scriptbox.source_len": len(source), "scriptbox.deadline": deadline}

        with span("scriptbox.execute", attributes) as s:
            try:
                realm = self._builder.build()
            except RealmAllocationError as exc:
                logger.exception("could not allocate a realm")
                collector = OutputCollector()
                collector.finalize()
                outcome: ExecutionOutcome = InternalFailure(str(exc))
            else:
                collector = realm.collector
                outcome = self._engine.run(realm, source, deadline)

            duration_ms = (time.monotonic() - start_time) * 1000
            label = _outcome_label(outcome)
            s.set_attribute("scriptbox.outcome", label)

        if self._config.verbose:
            logger.info(
                "execution finished  outcome=%s  lines=%d  duration_ms=%.1f",
                label,
                len(collector),
                duration_ms,
            )
        return serialize(collector, outcome, duration_ms)


def execute_source(code: str, config: SandboxConfig | None = None) -> ExecutionResult:
    """One-shot helper: run *code* with a throwaway :class:`Sandbox`."""
    return Sandbox(config).execute(code)
