"""Custom exceptions for the scriptbox library.

Only request-level problems raise.  Everything a sandboxed program does wrong
(syntax errors, uncaught exceptions, timeouts) is reported through
:class:`~scriptbox.types.ExecutionResult` instead.
"""


class ScriptboxError(Exception):
    """Base exception for all scriptbox errors."""


class InvalidRequest(ScriptboxError):
    """Raised when the submitted program text or deadline is unacceptable.

    ``status`` is the HTTP-style status the caller should answer with.
    """

    def __init__(self, message: str, status: int = 400) -> None:
        self.status = status
        super().__init__(message)


class SandboxBusy(ScriptboxError):
    """Raised when no worker slot frees up within the admission timeout."""

    def __init__(self, max_workers: int) -> None:
        self.max_workers = max_workers
        super().__init__(f"All {max_workers} sandbox workers are busy")


class RealmAllocationError(ScriptboxError):
    """Raised when the host cannot create or talk to a realm process."""
