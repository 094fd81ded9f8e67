"""scriptbox: run untrusted Python snippets in disposable, deadline-bound realms.

Every execution gets a brand-new child process exposing only an allowlisted
surface (math, JSON, date/time, regex, URI helpers, timers and a ``console``
for output).  The host kills the process when the deadline passes, so even a
tight ``while True: pass`` cannot hold a worker.

Basic usage::

    from scriptbox import Sandbox

    box = Sandbox()
    result = box.execute("console.log('hello')\\n1 + 1")
    print(result.output)   # "hello\\nReturn value: 2"
"""

from .config import SandboxConfig
from .exceptions import InvalidRequest, RealmAllocationError, SandboxBusy, ScriptboxError
from .serializer import NO_OUTPUT_MARKER, serialize
from .service import Sandbox, execute_source
from .types import (
    Completed,
    ErrorKind,
    ExecutionOutcome,
    ExecutionRequest,
    ExecutionResult,
    InternalFailure,
    Thrown,
    TimedOut,
)

__all__ = [
    "Sandbox",
    "SandboxConfig",
    "execute_source",
    "serialize",
    "NO_OUTPUT_MARKER",
    "ExecutionRequest",
    "ExecutionResult",
    "ExecutionOutcome",
    "Completed",
    "Thrown",
    "TimedOut",
    "InternalFailure",
    "ErrorKind",
    "ScriptboxError",
    "InvalidRequest",
    "SandboxBusy",
    "RealmAllocationError",
]

__version__ = "0.1.0"
