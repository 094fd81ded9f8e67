"""Public request, outcome and result types."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Union


class ErrorKind(str, enum.Enum):
    """Classification of a failed execution."""

    SYNTAX = "syntax"
    """The program text did not compile (or was rejected by the source guard)."""

    RUNTIME = "runtime"
    """The program raised an uncaught exception."""

    TIMEOUT = "timeout"
    """The deadline elapsed before the program finished."""

    INTERNAL = "internal"
    """The host failed to set up or talk to the realm."""


@dataclass(frozen=True)
class ExecutionRequest:
    """A single program submitted for execution."""

    source_text: str
    """The program to run."""

    deadline: float | None = None
    """Requested wall-clock deadline in seconds.  ``None`` uses the default."""


# -- Outcomes ----------------------------------------------------------------
#
# Exactly one of these is produced per request.


@dataclass(frozen=True)
class Completed:
    return_value: str | None = None
    """Rendered value of the final expression, or ``None`` when there is none."""


@dataclass(frozen=True)
class Thrown:
    error_message: str
    kind: ErrorKind = ErrorKind.RUNTIME
    """``SYNTAX`` for compile failures, ``RUNTIME`` otherwise."""


@dataclass(frozen=True)
class TimedOut:
    deadline: float


@dataclass(frozen=True)
class InternalFailure:
    reason: str
    """Server-side description.  Never shown to the caller."""


ExecutionOutcome = Union[Completed, Thrown, TimedOut, InternalFailure]


@dataclass
class ExecutionResult:
    """The structured result handed back to the caller."""

    output: str
    """Collected output.  On failure, whatever was printed before the failure."""

    error: str | None = None
    """One-line error description, ``None`` on success."""

    error_kind: ErrorKind | None = None

    truncated: bool = False
    """Whether the output hit the configured byte cap."""

    duration_ms: float = 0.0
    """Wall-clock time spent on the request, realm setup included."""

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        """Render the JSON body for the HTTP layer.

        Success is ``{"output": ...}``; failure is ``{"error": ..., "output": ...}``.
        """
        if self.error is None:
            return {"output": self.output}
        return {"error": self.error, "output": self.output}
