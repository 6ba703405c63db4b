"""Prometheus metrics for monitoring projections, scenario outcomes and request latency"""

from prometheus_client import Counter, Histogram

# Projection metrics
projection_counter = Counter(
    "cashflow_projection_total",
    "Total calendar projections computed",
)

lowest_balance_band_counter = Counter(
    "cashflow_lowest_balance_band",
    "Projected lowest balance by band",
    ["band"],  # negative | below_buffer | healthy
)

projection_duration_histogram = Histogram(
    "cashflow_projection_duration_seconds",
    "Time spent normalizing, walking and analyzing a projection",
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
)

# Scenario metrics
scenario_counter = Counter(
    "cashflow_scenario_total",
    "Total what-if scenarios evaluated",
    ["outcome"],  # affordable | unaffordable | rejected
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_projection(lowest_balance_cents: int, safety_buffer_cents: int, duration_seconds: float) -> None:
    """Record projection metrics for monitoring how often users are forecast into trouble"""
    projection_counter.inc()
    projection_duration_histogram.observe(duration_seconds)

    if lowest_balance_cents < 0:
        band = "negative"
    elif lowest_balance_cents < safety_buffer_cents:
        band = "below_buffer"
    else:
        band = "healthy"

    lowest_balance_band_counter.labels(band=band).inc()


def record_scenario(outcome: str) -> None:
    scenario_counter.labels(outcome=outcome).inc()
