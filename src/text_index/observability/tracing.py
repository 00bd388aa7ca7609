"""OpenTelemetry tracing for index builds and queries.

``init_tracing`` installs an SDK tracer provider once per process (the CLI
does so on startup). Before that, spans come from the API's no-op provider,
carry invalid ids and are not bound into log records.
"""

from __future__ import annotations

from collections.abc import Sequence
from contextlib import contextmanager
import logging
from typing import TYPE_CHECKING, Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
from opentelemetry.trace import SpanKind, Status, StatusCode

from text_index.observability.context import bind_trace_ids, reset_trace_ids


if TYPE_CHECKING:
    from collections.abc import Generator

    from opentelemetry.trace import Span, Tracer

logger = logging.getLogger(__name__)

_INSTRUMENTATION_NAME = "text_index"

_state: dict[str, Any] = {"provider": None, "tracer": None}


def init_tracing(
    service_name: str = "text-index",
    *,
    span_processors: Sequence[SpanProcessor] = (),
    resource_attributes: dict[str, str] | None = None,
) -> TracerProvider:
    """Install the process tracer provider and attach ``span_processors`` to it.

    Repeated calls reuse the installed provider and only add processors.
    """
    provider: TracerProvider | None = _state["provider"]
    if provider is None:
        resource = Resource.create({"service.name": service_name, **(resource_attributes or {})})
        provider = TracerProvider(resource=resource)
        trace.set_tracer_provider(provider)
        _state["provider"] = provider
        _state["tracer"] = provider.get_tracer(_INSTRUMENTATION_NAME)
        logger.debug("Tracing initialized for service %s", service_name)

    for processor in span_processors:
        provider.add_span_processor(processor)
    return provider


def _tracer() -> Tracer:
    tracer: Tracer | None = _state["tracer"]
    if tracer is None:
        return trace.get_tracer(_INSTRUMENTATION_NAME)
    return tracer


@contextmanager
def create_span(
    name: str,
    attributes: dict[str, Any] | None = None,
    kind: SpanKind = SpanKind.INTERNAL,
) -> Generator[Span, None, None]:
    """Run the block inside a span; log records emitted there carry its ids.

    Exceptions are recorded on the span, which is marked as failed, and
    re-raised.
    """
    with _tracer().start_as_current_span(
        name,
        kind=kind,
        attributes=attributes,
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        ctx = span.get_span_context()
        token = bind_trace_ids(ctx.trace_id, ctx.span_id) if ctx.is_valid else None
        try:
            yield span
        except Exception as exc:
            span.set_status(Status(StatusCode.ERROR, str(exc)))
            span.record_exception(exc)
            raise
        finally:
            if token is not None:
                reset_trace_ids(token)
