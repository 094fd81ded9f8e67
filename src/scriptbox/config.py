"""Configuration for the scriptbox execution service."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields

from dotenv import find_dotenv, load_dotenv


@dataclass
class SandboxConfig:
    """Configuration for sandboxed executions.

    All fields have sensible defaults. Override only what you need.
    """

    default_deadline: float = 5.0
    """Wall-clock seconds a program may run when the request names no deadline."""

    max_deadline: float = 30.0
    """Upper bound (seconds) on any deadline.  Larger requests are clamped."""

    max_source_bytes: int = 64 * 1024
    """Largest accepted program text, measured in UTF-8 bytes."""

    max_output_bytes: int | None = 1024 * 1024
    """Cap on buffered output bytes per execution.  ``None`` disables the cap."""

    max_workers: int = 4
    """Maximum number of executions running at the same time."""

    admission_timeout: float | None = 10.0
    """Seconds a request waits for a free worker before :class:`SandboxBusy`.

    ``0`` rejects immediately when all workers are busy; ``None`` waits forever.
    """

    startup_timeout: float = 10.0
    """Bound (seconds) on spawning the realm process and compiling the program.

    Not billed against the program's deadline.
    """

    memory_limit_mb: int | None = 512
    """Address-space limit of each realm process (Unix only).  ``None`` disables it."""

    start_method: str | None = None
    """``multiprocessing`` start method for realm processes.

    ``None`` uses the platform default.  One of ``"fork"``, ``"forkserver"``,
    ``"spawn"`` otherwise.
    """

    verbose: bool = False
    """Print info logs to stderr."""

    _VALID_START_METHODS: frozenset[str] = field(
        default=frozenset({"fork", "forkserver", "spawn"}),
        init=False,
        repr=False,
    )

    def __post_init__(self) -> None:
        if self.default_deadline <= 0:
            raise ValueError("default_deadline must be positive")
        if self.max_deadline < self.default_deadline:
            raise ValueError(
                f"max_deadline ({self.max_deadline}) must be >= "
                f"default_deadline ({self.default_deadline})"
            )
        if self.max_source_bytes <= 0:
            raise ValueError("max_source_bytes must be positive")
        if self.max_output_bytes is not None and self.max_output_bytes <= 0:
            raise ValueError("max_output_bytes must be positive or None")
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if self.admission_timeout is not None and self.admission_timeout < 0:
            raise ValueError("admission_timeout must be >= 0 or None")
        if self.startup_timeout <= 0:
            raise ValueError("startup_timeout must be positive")
        if self.memory_limit_mb is not None and self.memory_limit_mb <= 0:
            raise ValueError("memory_limit_mb must be positive or None")
        if self.start_method is not None and self.start_method not in self._VALID_START_METHODS:
            raise ValueError(
                f"Unknown start_method {self.start_method!r}. "
                f"Must be one of {sorted(self._VALID_START_METHODS)}"
            )

    def resolve_deadline(self, requested: float | None) -> float:
        """Return the effective deadline for a request.

        ``None`` means the default; anything above :attr:`max_deadline` is
        clamped to it.  Non-positive values are rejected by the caller.
        """
        if requested is None:
            return self.default_deadline
        return min(float(requested), self.max_deadline)

    @classmethod
    def from_env(cls, prefix: str = "SCRIPTBOX_", **overrides: object) -> SandboxConfig:
        """Build a config from ``<prefix><FIELD>`` environment variables.

        The nearest ``.env`` file, searching up from the working directory, is
        loaded first (it never overrides variables already set).  Values in
        *overrides* win over the environment.  The strings ``"none"`` and
        ``""`` map to ``None`` for optional fields.
        """
        load_dotenv(find_dotenv(usecwd=True))
        values: dict[str, object] = {}
        for f in fields(cls):
            if not f.init:
                continue
            raw = os.environ.get(f"{prefix}{f.name.upper()}")
            if raw is None:
                continue
            values[f.name] = _parse_env_value(f.name, raw)
        values.update(overrides)
        return cls(**values)  # type: ignore[arg-type]


_FLOAT_FIELDS = frozenset({"default_deadline", "max_deadline", "admission_timeout", "startup_timeout"})
_INT_FIELDS = frozenset({"max_source_bytes", "max_output_bytes", "max_workers", "memory_limit_mb"})
_OPTIONAL_FIELDS = frozenset({"max_output_bytes", "admission_timeout", "memory_limit_mb", "start_method"})


def _parse_env_value(name: str, raw: str) -> object:
    value = raw.strip()
    if name in _OPTIONAL_FIELDS and value.lower() in ("", "none"):
        return None
    if name in _FLOAT_FIELDS:
        return float(value)
    if name in _INT_FIELDS:
        return int(value)
    if name == "verbose":
        return value.lower() in ("1", "true", "yes", "on")
    return value
