"""
Trace correlation fields.

Adds ``traceId`` / ``spanId`` to a record from an OpenTelemetry span context.
Requires ``opentelemetry-api`` (optional dependency)::

    from protolog.field import trace

    logger.info("handled", extra={"fields": [trace.context()]})
    # {"msg": "handled", "traceId": "4bf9...", "spanId": "00f0..."}
"""

from __future__ import annotations

from typing import Any

from ..core.encoder import ObjectEncoder
from .message import Field, FieldType


def _otel_trace() -> Any:
    try:
        from opentelemetry import trace  # type: ignore[import]
    except ImportError:
        raise ImportError(
            "opentelemetry-api is required for trace fields. "
            "Install with: pip install opentelemetry-api"
        )
    return trace


class _SpanContextMarshaler:
    __slots__ = ("span_context",)

    def __init__(self, span_context: Any) -> None:
        self.span_context = span_context

    def marshal_log_object(self, enc: ObjectEncoder) -> None:
        trace = _otel_trace()
        if self.span_context.trace_id != trace.INVALID_TRACE_ID:
            enc.add_string("traceId", trace.format_trace_id(self.span_context.trace_id))
        if self.span_context.span_id != trace.INVALID_SPAN_ID:
            enc.add_string("spanId", trace.format_span_id(self.span_context.span_id))


def span_context(span_ctx: Any) -> Field:
    """Inline field with whichever of the trace and span ids are valid."""
    return Field("", FieldType.INLINE, _SpanContextMarshaler(span_ctx))


def context(ctx: Any = None) -> Field:
    """
    Inline field for the span stored in *ctx*.

    :param ctx: OpenTelemetry ``Context``; the current context when omitted.
                A context without a span logs nothing.
    """
    trace = _otel_trace()
    return span_context(trace.get_current_span(ctx).get_span_context())
