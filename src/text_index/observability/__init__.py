"""Observability module for tracing, metrics, and logging."""

from text_index.observability.context import current_trace_ids
from text_index.observability.logging import JsonFormatter, configure_logging
from text_index.observability.metrics import (
    INDEX_BUILDS,
    INDEX_TOKENS,
    QUERY_COUNT,
    QUERY_LATENCY,
    get_metrics,
    track_latency,
)
from text_index.observability.tracing import create_span, init_tracing


__all__ = [
    "INDEX_BUILDS",
    "INDEX_TOKENS",
    "QUERY_COUNT",
    "QUERY_LATENCY",
    "JsonFormatter",
    "configure_logging",
    "create_span",
    "current_trace_ids",
    "get_metrics",
    "init_tracing",
    "track_latency",
]
