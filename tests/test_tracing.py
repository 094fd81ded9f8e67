"""Tests for OpenTelemetry tracing instrumentation."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock, patch

from scriptbox.tracing import span

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_mock_tracer() -> tuple[MagicMock, list[MagicMock]]:
    """Create a mock tracer that records spans.

    Returns (tracer, spans_list) where spans_list collects all created spans.
    """
    spans: list[MagicMock] = []
    tracer = MagicMock()

    def _start_span(name: str) -> MagicMock:
        mock_span = MagicMock()
        mock_span.name = name
        mock_span._attributes: dict[str, Any] = {}

        def _set_attr(key: str, value: Any) -> None:
            mock_span._attributes[key] = value

        mock_span.set_attribute = _set_attr
        mock_span.__enter__ = lambda self: self
        mock_span.__exit__ = lambda self, *args: None
        spans.append(mock_span)
        return mock_span

    tracer.start_as_current_span = _start_span
    return tracer, spans


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestDefaultTracer:
    def test_span_works_without_sdk(self):
        """With only the API installed the span is a harmless no-op."""
        with span("scriptbox.execute", {"scriptbox.deadline": 1.0}) as s:
            s.set_attribute("scriptbox.outcome", "completed")


class TestSpans:
    def test_span_sets_initial_attributes(self):
        tracer, spans = _make_mock_tracer()
        with patch("scriptbox.tracing._tracer", tracer):
            with span("scriptbox.execute", {"a": 1, "b": "x"}):
                pass
        assert spans[0].name == "scriptbox.execute"
        assert spans[0]._attributes == {"a": 1, "b": "x"}

    def test_execute_span(self, sandbox):
        tracer, spans = _make_mock_tracer()
        with patch("scriptbox.tracing._tracer", tracer):
            sandbox.execute("1 + 1")

        execute_span = next(s for s in spans if s.name == "scriptbox.execute")
        assert execute_span._attributes["scriptbox.source_len"] == len("1 + 1")
        assert execute_span._attributes["scriptbox.deadline"] == 1.0
        assert execute_span._attributes["scriptbox.outcome"] == "completed"

    def test_execute_span_records_failure_kind(self, sandbox):
        tracer, spans = _make_mock_tracer()
        with patch("scriptbox.tracing._tracer", tracer):
            sandbox.execute("1 / 0")
        assert spans[-1]._attributes["scriptbox.outcome"] == "runtime"
