"""
Prometheus metrics collection for the time/expense loader

This module provides instrumentation for load cycles, pagination,
child-record fan-out and normalized entry throughput.
"""
from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)


# Global registry for metrics
REGISTRY = CollectorRegistry()


# =======================
# CYCLE METRICS
# =======================

# Load cycles by outcome
cycles_total = Counter(
    name="loader_cycles_total",
    documentation="Total number of load cycles by outcome",
    labelnames=["outcome"],  # outcome: done, empty, error, superseded
    registry=REGISTRY,
)

cycle_duration_seconds = Histogram(
    name="loader_cycle_duration_seconds",
    documentation="Wall time of a load cycle in seconds",
    labelnames=["outcome"],
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
    registry=REGISTRY,
)

# Entries currently held by the accumulated set
accumulated_entries = Gauge(
    name="loader_accumulated_entries",
    documentation="Number of entries in the current accumulated set",
    registry=REGISTRY,
)

# =======================
# PAGINATION METRICS
# =======================

pages_fetched_total = Counter(
    name="loader_pages_fetched_total",
    documentation="Total number of parent record pages fetched",
    registry=REGISTRY,
)

page_cap_reached_total = Counter(
    name="loader_page_cap_reached_total",
    documentation="Number of times pagination stopped at the page cap",
    registry=REGISTRY,
)

# =======================
# FAN-OUT METRICS
# =======================

parents_processed_total = Counter(
    name="loader_parents_processed_total",
    documentation="Total number of parent records whose children were fetched",
    registry=REGISTRY,
)

child_fetch_failures_total = Counter(
    name="loader_child_fetch_failures_total",
    documentation="Child collection fetches that failed and were replaced by an empty list",
    labelnames=["kind"],  # kind: time, expense
    registry=REGISTRY,
)

entries_emitted_total = Counter(
    name="loader_entries_emitted_total",
    documentation="Total number of normalized entries emitted",
    labelnames=["kind"],
    registry=REGISTRY,
)

batch_entry_count = Histogram(
    name="loader_batch_entry_count",
    documentation="Number of entries produced per fan-out batch",
    buckets=[0, 1, 5, 10, 25, 50, 100, 250, 500],
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def generate_metrics() -> bytes:
    """Generate Prometheus metrics in text format"""
    return generate_latest(REGISTRY)


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """Increment a counter metric, applying labels when given"""
    if labels:
        counter.labels(**labels).inc(value)
    else:
        counter.inc(value)


def set_gauge(gauge: Gauge, value: float, **labels) -> None:
    """Set a gauge metric value, applying labels when given"""
    if labels:
        gauge.labels(**labels).set(value)
    else:
        gauge.set(value)


def observe_histogram(histogram: Histogram, value: float, **labels) -> None:
    """Observe a value in a histogram metric, applying labels when given"""
    if labels:
        histogram.labels(**labels).observe(value)
    else:
        histogram.observe(value)


# =======================
# METRICS COLLECTOR CLASS
# =======================

class MetricsCollector:
    """
    Metrics collector for loader components.

    Gives the pagination, fan-out and orchestration stages one
    interface to report through.
    """

    def record_page(self) -> None:
        increment_counter(pages_fetched_total)

    def record_page_cap(self) -> None:
        increment_counter(page_cap_reached_total)

    def record_child_failure(self, kind: str) -> None:
        increment_counter(child_fetch_failures_total, kind=kind)

    def record_batch(self, parent_count: int, entries) -> None:
        """
        Record a settled fan-out batch.

        Args:
            parent_count: Number of parents in the batch
            entries: Normalized entries the batch produced
        """
        increment_counter(parents_processed_total, parent_count)
        observe_histogram(batch_entry_count, len(entries))
        for entry in entries:
            increment_counter(entries_emitted_total, kind=entry.kind)

    def record_cycle(self, outcome: str, duration_seconds: float = 0.0) -> None:
        increment_counter(cycles_total, outcome=outcome)
        if duration_seconds > 0:
            observe_histogram(cycle_duration_seconds, duration_seconds, outcome=outcome)

    def record_accumulated(self, count: int) -> None:
        set_gauge(accumulated_entries, count)
