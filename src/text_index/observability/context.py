"""Trace and span ids carried alongside log records."""

from __future__ import annotations

from contextvars import ContextVar, Token
from dataclasses import dataclass


@dataclass(frozen=True)
class TraceIds:
    """Hex-encoded OpenTelemetry ids; empty strings outside any span."""

    trace_id: str = ""
    span_id: str = ""


_current_ids: ContextVar[TraceIds] = ContextVar("text_index_trace_ids", default=TraceIds())


def current_trace_ids() -> TraceIds:
    return _current_ids.get()


def bind_trace_ids(trace_id: int, span_id: int) -> Token[TraceIds]:
    """Make ``trace_id``/``span_id`` visible to log records in this context.

    Returns the token ``reset_trace_ids`` needs to restore the enclosing ids.
    """
    return _current_ids.set(TraceIds(format(trace_id, "032x"), format(span_id, "016x")))


def reset_trace_ids(token: Token[TraceIds]) -> None:
    _current_ids.reset(token)
