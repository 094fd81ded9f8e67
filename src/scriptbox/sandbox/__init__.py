"""Process-isolated realms for running untrusted Python snippets."""

from .allowlist import ALLOWED_MODULES, GLOBAL_ALLOWLIST, build_safe_builtins
from .console import Console, OutputCollector
from .engine import ExecutionEngine
from .realm import RealmBuilder, SandboxRealm
from .timers import RealmTimers

__all__ = [
    "ALLOWED_MODULES",
    "GLOBAL_ALLOWLIST",
    "Console",
    "ExecutionEngine",
    "OutputCollector",
    "RealmBuilder",
    "RealmTimers",
    "SandboxRealm",
    "build_safe_builtins",
]
