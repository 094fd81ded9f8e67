"""OpenTelemetry instrumentation.

Spans are emitted for ``scriptbox.execute``, one per sandboxed execution.
Without an SDK configured, ``opentelemetry-api`` hands out a no-op tracer, so
callers never need to check.
"""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace

_tracer: Any = trace.get_tracer("scriptbox")


@contextmanager
def span(
    name: str,
    attributes: dict[str, Any] | None = None,
) -> Generator[Any, None, None]:
    """Context manager that opens a span on the module tracer.

    Parameters
    ----------
    name:
        Span name (e.g. ``"scriptbox.execute"``).
    attributes:
        Initial span attributes.

    Yields
    ------
    The active span.  Callers can set additional attributes on it::

        with span("scriptbox.execute", {"scriptbox.deadline": 5.0}) as s:
            ...
            s.set_attribute("scriptbox.outcome", "completed")
    """
    with _tracer.start_as_current_span(name) as s:
        if attributes:
            for key, value in attributes.items():
                s.set_attribute(key, value)
        yield s
