"""Turns a collector and an outcome into the caller-facing result."""

from __future__ import annotations

from .sandbox.render import one_line
from .sandbox.console import OutputCollector
from .types import (
    Completed,
    ErrorKind,
    ExecutionOutcome,
    ExecutionResult,
    InternalFailure,
    Thrown,
    TimedOut,
)

NO_OUTPUT_MARKER = "Code executed successfully (no output)"
INTERNAL_ERROR_MESSAGE = "Internal error: the sandbox could not run this code"


def timeout_message(deadline: float) -> str:
    return f"Code execution timeout ({deadline:g} seconds)"


def serialize(
    collector: OutputCollector,
    outcome: ExecutionOutcome,
    duration_ms: float = 0.0,
) -> ExecutionResult:
    """Build the :class:`ExecutionResult` for *outcome*.

    Lines collected before a failure are kept in ``output``.
    """
    lines = list(collector.lines)

    if isinstance(outcome, Completed):
        if outcome.return_value is not None:
            lines.append(f"Return value: {outcome.return_value}")
        return ExecutionResult(
            output="\n".join(lines) or NO_OUTPUT_MARKER,
            truncated=collector.truncated,
            duration_ms=duration_ms,
        )

    if isinstance(outcome, Thrown):
        error = one_line(outcome.error_message) or "Unknown error occurred"
        kind = outcome.kind
    elif isinstance(outcome, TimedOut):
        error = timeout_message(outcome.deadline)
        kind = ErrorKind.TIMEOUT
    elif isinstance(outcome, InternalFailure):
        error = INTERNAL_ERROR_MESSAGE
        kind = ErrorKind.INTERNAL
    else:
        raise TypeError(f"unknown outcome {outcome!r}")

    return ExecutionResult(
        output="\n".join(lines),
        error=error,
        error_kind=kind,
        truncated=collector.truncated,
        duration_ms=duration_ms,
    )
