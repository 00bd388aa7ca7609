"""Build and query metrics.

Each metric is a labelled Prometheus collector mirrored onto an OpenTelemetry
instrument of the matching kind. ``get_metrics`` renders the Prometheus side
(the CLI writes it out with ``--metrics``); the OTel side reports to
whichever meter provider the host process installs.
"""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING, Any

from opentelemetry import metrics as otel_metrics
from prometheus_client import Counter, Gauge, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator


_LabelKey = tuple[tuple[str, str], ...]


class BridgedMetric:
    """A Prometheus metric whose updates are repeated on an OTel instrument."""

    def __init__(self, collector: Counter | Gauge | Histogram, name: str, description: str) -> None:
        self._collector = collector
        self._name = name
        self._description = description
        self._instrument: Any = None
        # Gauges map onto up/down counters, which only accept deltas
        self._gauge_values: dict[_LabelKey, float] = {}

    def labels(self, **labels: str) -> LabelledMetric:
        return LabelledMetric(self, labels)

    def _otel(self) -> Any:
        if self._instrument is None:
            meter = otel_metrics.get_meter("text_index")
            if isinstance(self._collector, Counter):
                self._instrument = meter.create_counter(self._name, description=self._description)
            elif isinstance(self._collector, Histogram):
                self._instrument = meter.create_histogram(self._name, description=self._description)
            else:
                self._instrument = meter.create_up_down_counter(self._name, description=self._description)
        return self._instrument

    def _inc(self, labels: dict[str, str], amount: float) -> None:
        self._collector.labels(**labels).inc(amount)
        self._otel().add(amount, labels)

    def _observe(self, labels: dict[str, str], value: float) -> None:
        self._collector.labels(**labels).observe(value)
        self._otel().record(value, labels)

    def _set(self, labels: dict[str, str], value: float) -> None:
        self._collector.labels(**labels).set(value)
        key = tuple(sorted(labels.items()))
        delta = value - self._gauge_values.get(key, 0.0)
        self._gauge_values[key] = value
        if delta:
            self._otel().add(delta, labels)


class LabelledMetric:
    """``BridgedMetric`` bound to one label set."""

    __slots__ = ("_labels", "_metric")

    def __init__(self, metric: BridgedMetric, labels: dict[str, str]) -> None:
        self._metric = metric
        self._labels = labels

    def inc(self, amount: float = 1.0) -> None:
        self._metric._inc(self._labels, amount)

    def observe(self, value: float) -> None:
        self._metric._observe(self._labels, value)

    def set(self, value: float) -> None:
        self._metric._set(self._labels, value)


def _bridged(
    collector_cls: type[Counter] | type[Gauge] | type[Histogram],
    name: str,
    description: str,
    labelnames: list[str],
    **kwargs: Any,
) -> BridgedMetric:
    return BridgedMetric(collector_cls(name, description, labelnames, **kwargs), name, description)


INDEX_BUILDS = _bridged(Counter, "text_index_builds_total", "Completed inverted index builds", ["status"])

INDEX_TOKENS = _bridged(Gauge, "text_index_tokens", "Distinct tokens in the most recently built index", ["index"])

QUERY_COUNT = _bridged(Counter, "text_index_queries_total", "Queries evaluated", ["mode", "status"])

QUERY_LATENCY = _bridged(
    Histogram,
    "text_index_query_latency_seconds",
    "Query latency in seconds",
    ["mode"],
    buckets=(0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5),
)


@contextmanager
def track_latency(metric: BridgedMetric, **labels: str) -> Generator[None, None, None]:
    """Observe the block's wall time on ``metric``, also when it raises."""
    start = time.perf_counter()
    try:
        yield
    finally:
        metric.labels(**labels).observe(time.perf_counter() - start)


def get_metrics() -> bytes:
    """Prometheus text exposition of every registered metric."""
    return generate_latest()
